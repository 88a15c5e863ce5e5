"""Store service implementations for connectivity checks and schema bootstrap."""

from __future__ import annotations

from typing import Final

from sqlalchemy import Engine, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from swocker.domain import HealthStatus, StoreAuthenticationError, StoreConnectionError

from .interfaces import StoreAdminPort

AUTHENTICATION_ERROR_CODES: Final[frozenset[int]] = frozenset({1044, 1045, 1698})
SCHEMA_CHARACTER_SET: Final[str] = "utf8mb4"
SCHEMA_COLLATION: Final[str] = "utf8mb4_unicode_ci"


def db_classify_error(error: SQLAlchemyError, label: str) -> StoreConnectionError | StoreAuthenticationError:
    """Map a SQLAlchemy error to the lifecycle store error taxonomy.

    Args:
        error: Error raised by the driver or pool.
        label: Store target label for the message.

    Returns:
        StoreConnectionError | StoreAuthenticationError: Classified error.
    """

    driver_error = error.orig if isinstance(error, DBAPIError) else None
    driver_arguments = getattr(driver_error, "args", ()) or ()
    driver_code = driver_arguments[0] if driver_arguments else None
    driver_message = str(driver_arguments[1]) if len(driver_arguments) > 1 else str(driver_error or error)

    if isinstance(driver_code, int) and driver_code in AUTHENTICATION_ERROR_CODES:
        return StoreAuthenticationError(
            f"Database access denied at {label} (authentication failed): {driver_message}"
        )
    return StoreConnectionError(f"Could not connect to database at {label}: {driver_message}")


def db_quote_identifier(identifier: str) -> str:
    """Quote a MySQL identifier with backticks.

    Args:
        identifier: Raw identifier.

    Returns:
        str: Backtick-quoted identifier with embedded backticks doubled.

    Raises:
        ValueError: Raised when identifier is blank.
    """

    if not identifier.strip():
        raise ValueError("identifier must not be blank")
    return "`" + identifier.replace("`", "``") + "`"


class SQLAlchemyStoreService(StoreAdminPort):
    """Store service backed by a SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        """Initialize store service.

        Args:
            engine: SQLAlchemy engine bound to the server or the target schema.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target store URL without password.

        Returns:
            str: Rendered engine URL string.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Verify store connectivity using a deterministic lightweight query.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            StoreAuthenticationError: Raised when credentials are rejected.
            StoreConnectionError: Raised when connectivity check fails.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return HealthStatus(status="ok", detail="database connectivity verified")
        except SQLAlchemyError as error:
            raise db_classify_error(error, self._db_host_label()) from error

    def db_schema_exists(self, schema_name: str) -> bool:
        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text("SELECT SCHEMA_NAME FROM information_schema.SCHEMATA WHERE SCHEMA_NAME = :schema_name"),
                    {"schema_name": schema_name},
                ).first()
        except SQLAlchemyError as error:
            raise db_classify_error(error, self._db_host_label()) from error
        return row is not None

    def db_create_schema(self, schema_name: str) -> None:
        """Create the target schema when missing.

        Args:
            schema_name: Target schema name.

        Raises:
            StoreConnectionError: Raised when creation fails.
        """

        statement = (
            f"CREATE DATABASE IF NOT EXISTS {db_quote_identifier(schema_name)} "
            f"CHARACTER SET {SCHEMA_CHARACTER_SET} COLLATE {SCHEMA_COLLATION}"
        )
        try:
            with self._engine.begin() as connection:
                connection.execute(text(statement))
        except SQLAlchemyError as error:
            raise db_classify_error(error, self._db_host_label()) from error

    def _db_host_label(self) -> str:
        url = self._engine.url
        return f"{url.host}:{url.port}" if url.port else str(url.host)
