"""
SkillSwap Directory Core Entry Point.

Bootstraps the dependency graph via constructor injection, opens the
configured storage backend, logs a directory summary and shuts down
cleanly.  The transport layer (HTTP routes, chat relay) embeds the core by
calling :func:`skillswap.services.create_services` the same way.

Usage::

    python main.py                 # open the backend, log a summary
    python main.py --print-schema  # emit the Supabase DDL
"""

from __future__ import annotations

import argparse
import atexit
import sys

from skillswap.config import get_config
from skillswap.errors import DirectoryError
from skillswap.logger import StructuredLogger, get_logger
from skillswap.schema import render_schema
from skillswap.services import create_services


def main(argv: list[str] | None = None) -> int:
    """Wire dependencies, report directory status, return an exit code."""
    parser = argparse.ArgumentParser(description="SkillSwap directory core")
    parser.add_argument(
        "--print-schema",
        action="store_true",
        help="print the managed-backend DDL and exit",
    )
    args = parser.parse_args(argv)

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    if args.print_schema:
        sys.stdout.write(render_schema(config.USERS_TABLE))
        return 0

    logger: StructuredLogger = get_logger("main")
    logger.info("Starting SkillSwap directory (%s backend)...", config.STORAGE_BACKEND)

    # ------------------------------------------------------------------
    # 2. Repository + services (single composition root)
    # ------------------------------------------------------------------
    try:
        services = create_services(config=config)
    except DirectoryError as exc:
        logger.critical("Directory backend unavailable: %s", exc.message)
        return 1

    repo = services["user_repository"]
    # close() is idempotent; atexit covers exits that skip the finally.
    atexit.register(repo.close)

    try:
        logger.info("Active users: %d", repo.count_active())
        popular = services["user_service"].get_popular_skills()
        if popular.success and popular.data:
            logger.info(
                "Most offered skills: %s",
                ", ".join(f"{p.skill} ({p.offered_by})" for p in popular.data),
            )
    except DirectoryError as exc:
        logger.error("Directory summary failed: %s", exc.message)
        return 1
    finally:
        repo.close()
        logger.info("SkillSwap directory shut down.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
