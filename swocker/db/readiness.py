"""Bounded store readiness polling and schema bootstrap."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from swocker.domain import StoreAuthenticationError, StoreConnectionError, StoreUnavailableError
from swocker.logger import get_logger

from .interfaces import StoreAdminPort

logger = get_logger("swocker.db")


@dataclass(frozen=True)
class ReadinessRetryPolicy:
    """Immutable readiness retry configuration.

    Attributes:
        max_attempts: Number of connectivity attempts before giving up.
        interval_seconds: Fixed delay between two attempts.
    """

    max_attempts: int
    interval_seconds: float

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")


class StoreReadinessPoller:
    """Blocks until the store accepts connections, then ensures the target schema."""

    def __init__(
        self,
        store: StoreAdminPort,
        schema_name: str,
        retry_policy: ReadinessRetryPolicy,
        store_label: str = "",
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize readiness poller.

        Args:
            store: Server-level store service.
            schema_name: Target schema name.
            retry_policy: Attempt count and interval.
            store_label: Password-free `host:port` label for log lines.
            sleep: Optional sleep function, defaults to `time.sleep`.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if store is None:
            raise ValueError("store must not be None")
        if not schema_name.strip():
            raise ValueError("schema_name must not be blank")

        self._store = store
        self._schema_name = schema_name.strip()
        self._retry_policy = retry_policy
        self._store_label = store_label or store.db_connection_label()
        self._sleep = sleep or time.sleep

    def db_wait_until_ready(self) -> int:
        """Poll the store until a trivial query succeeds.

        Sleeps only between attempts, so a store that never answers is tried
        exactly `max_attempts` times.

        Returns:
            int: One-based attempt number that succeeded.

        Raises:
            StoreAuthenticationError: Raised immediately when credentials are rejected.
            StoreUnavailableError: Raised after all attempts failed.
        """

        max_attempts = self._retry_policy.max_attempts
        interval_seconds = self._retry_policy.interval_seconds
        logger.info("Waiting for database at %s...", self._store_label)

        last_error: StoreConnectionError | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                self._store.db_check_health()
            except StoreAuthenticationError as error:
                logger.error("ERROR: %s", error)
                raise
            except StoreConnectionError as error:
                last_error = error
                if attempt >= max_attempts:
                    break
                logger.info(
                    "Database not ready yet (attempt %d/%d), waiting %ss...",
                    attempt,
                    max_attempts,
                    _format_seconds(interval_seconds),
                )
                logger.debug("Connectivity error: %s", error)
                if interval_seconds > 0:
                    self._sleep(interval_seconds)
                continue

            logger.info("Database is ready!")
            return attempt

        message = f"Database not ready after {max_attempts} attempts"
        logger.error("ERROR: %s", message)
        if last_error is not None:
            logger.error("Last error: %s", last_error)
        raise StoreUnavailableError(message=message, attempts=max_attempts)

    def db_ensure_schema(self) -> bool:
        """Create the target schema when it does not exist.

        Returns:
            bool: True when the schema was created by this call.

        Raises:
            StoreConnectionError: Raised when lookup or creation fails.
        """

        if self._store.db_schema_exists(self._schema_name):
            logger.info("Database '%s' already exists", self._schema_name)
            return False

        logger.info("Creating database '%s'...", self._schema_name)
        self._store.db_create_schema(self._schema_name)
        logger.info("Database '%s' created successfully", self._schema_name)
        return True

    def db_prepare(self) -> int:
        """Wait for readiness and ensure the schema.

        Returns:
            int: Attempt number that succeeded.

        Raises:
            StoreAuthenticationError: Raised when credentials are rejected.
            StoreUnavailableError: Raised after all attempts failed.
        """

        attempt = self.db_wait_until_ready()
        try:
            self.db_ensure_schema()
        except StoreConnectionError as error:
            raise StoreUnavailableError(message=f"Database schema bootstrap failed: {error}", attempts=attempt) from error
        return attempt


def _format_seconds(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
