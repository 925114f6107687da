"""
Managed-Document Connection Layer.

Owns the Supabase (cloud PostgreSQL via PostgREST) client used by the
managed backend.  This module only manages the *connection*; it contains no
query logic.  Data access goes through
:class:`skillswap.repositories.supabase_user_repository.SupabaseUserRepository`.

Usage (dependency injection at startup)::

    from skillswap.database import DatabaseManager
    from skillswap.logger import StructuredLogger

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
"""

from __future__ import annotations

from typing import Optional

from supabase import Client as SupabaseClient, create_client

from skillswap.errors import BackendUnavailableError
from skillswap.logger import StructuredLogger


class DatabaseManager:
    """Manages the connection to the Supabase instance.

    Fully configured at construction time.  When ``supabase_url`` or
    ``supabase_key`` is empty (or the client cannot be created) no client
    exists and every access to :attr:`supabase` raises
    :class:`BackendUnavailableError`; the directory never falls back to a
    different backend behind the caller's back.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    supabase_key:
        The Supabase anonymous / service-role key.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    client:
        Pre-built client.  When given, ``supabase_url``/``supabase_key`` are
        not used.
    """

    def __init__(
        self,
        supabase_url: str,
        supabase_key: str,
        logger: StructuredLogger,
        client: Optional[SupabaseClient] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._supabase: Optional[SupabaseClient] = client
        self._init_error: Optional[Exception] = None

        if self._supabase is not None:
            self._logger.info("Supabase client injected.")
            return

        if supabase_url and supabase_key:
            try:
                self._supabase = create_client(supabase_url, supabase_key)
                self._logger.info("Supabase client initialized.")
            except (ValueError, TypeError) as exc:
                self._init_error = exc
                self._logger.error(
                    "Supabase credential format error: %s.", exc,
                )
            except Exception as exc:
                self._init_error = exc
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning("Supabase credentials not configured.")

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def supabase(self) -> SupabaseClient:
        """Return the initialised Supabase client.

        Raises
        ------
        BackendUnavailableError
            If the client was never initialised.
        """
        if self._supabase is None:
            raise BackendUnavailableError(
                "Supabase client is not initialised. Check SUPABASE_URL and "
                "SUPABASE_KEY.",
                self._init_error,
            )
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when the Supabase client is available."""
        return self._supabase is not None

    def close(self) -> None:
        """Drop the client reference.  Safe to call multiple times."""
        if self._supabase is not None:
            self._supabase = None
            self._logger.info("Supabase client released.")
