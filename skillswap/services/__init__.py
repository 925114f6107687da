"""
Business Logic Services Package.

Services depend on the Repository layer for data access.

The ``create_services()`` factory wires the repository and every service
together, returning a typed dict that the (external) transport layer can
consume without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from skillswap.config import AppConfig
from skillswap.logger import StructuredLogger, get_logger
from skillswap.repositories import UserRepository, create_user_repository
from skillswap.services.matching import MatchingService
from skillswap.services.ratings import RatingService
from skillswap.services.users import UserService


class ServiceContainer(TypedDict):
    """Typed container for the directory core."""

    user_repository: UserRepository
    matching_service: MatchingService
    rating_service: RatingService
    user_service: UserService


def create_services(
    config: AppConfig,
    repo: Optional[UserRepository] = None,
    logger: Optional[StructuredLogger] = None,
) -> ServiceContainer:
    """
    Wire the repository and services together.

    This is the single composition root for the directory core.  The
    entry-point calls it once at startup; the backend is chosen here and
    never switched afterwards.

    Args:
        config: Application configuration.
        repo: Pre-built repository (tests inject one); when omitted the
            backend named by ``config.STORAGE_BACKEND`` is created.
        logger: Logger shared by the services.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = logger or get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repository (data-access layer)
    # ------------------------------------------------------------------
    user_repository = repo or create_user_repository(config, get_logger("repository"))

    # ------------------------------------------------------------------
    # 2. Leaf services
    # ------------------------------------------------------------------
    matching_service = MatchingService(
        repo=user_repository,
        logger=logger,
        default_limit=config.DEFAULT_MATCH_LIMIT,
    )
    rating_service = RatingService(repo=user_repository, logger=logger)

    # ------------------------------------------------------------------
    # 3. Facade
    # ------------------------------------------------------------------
    user_service = UserService(
        repo=user_repository,
        matching=matching_service,
        ratings=rating_service,
        logger=logger,
        default_page_size=config.DEFAULT_PAGE_SIZE,
        popular_skills_limit=config.POPULAR_SKILLS_LIMIT,
    )

    return ServiceContainer(
        user_repository=user_repository,
        matching_service=matching_service,
        rating_service=rating_service,
        user_service=user_service,
    )
