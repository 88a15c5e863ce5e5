"""Typed interfaces for store-layer services.

All SQL and driver access must remain in the db package and its submodules.
"""

from typing import Protocol

from swocker.domain import HealthStatus


class StoreHealthPort(Protocol):
    """Port definition for store connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable, password-free label for the store target.

        Returns:
            str: Store target label for diagnostics.
        """

    def db_check_health(self) -> HealthStatus:
        """Run a trivial authenticated query against the store.

        Returns:
            HealthStatus: Store health status payload.

        Raises:
            StoreAuthenticationError: Raised when credentials are rejected.
            StoreConnectionError: Raised when the store cannot be reached.
        """


class StoreAdminPort(StoreHealthPort, Protocol):
    """Port definition for server-level store administration."""

    def db_schema_exists(self, schema_name: str) -> bool:
        """Return whether a schema with the given name exists.

        Args:
            schema_name: Target schema name.

        Returns:
            bool: True when the schema exists.

        Raises:
            StoreConnectionError: Raised when the lookup fails.
        """

    def db_create_schema(self, schema_name: str) -> None:
        """Create the schema with the fixed character set when missing.

        Args:
            schema_name: Target schema name.

        Returns:
            None: Schema is created as a side effect.

        Raises:
            StoreConnectionError: Raised when creation fails.
        """
