"""Store engine and URL utilities.

This module centralizes store connectivity primitives to enforce the db-layer
boundary for all SQLAlchemy usage.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL

from swocker.domain import StoreEndpoint

STORE_DRIVER_NAME = "mysql+pymysql"
STORE_CONNECT_TIMEOUT_SECONDS = 5


def db_build_store_url(endpoint: StoreEndpoint, with_schema: bool) -> URL:
    """Build the SQLAlchemy URL for a store endpoint.

    Args:
        endpoint: Resolved store endpoint.
        with_schema: Bind the URL to the target schema instead of the server.

    Returns:
        URL: SQLAlchemy URL object.

    Raises:
        ValueError: Raised when the endpoint host is blank.
    """

    if not endpoint.store_configured:
        raise ValueError("endpoint.host must not be blank")

    return URL.create(
        drivername=STORE_DRIVER_NAME,
        username=endpoint.user,
        password=endpoint.password or None,
        host=endpoint.host,
        port=endpoint.port,
        database=endpoint.name if with_schema else None,
    )


def db_create_engine(store_url: URL) -> Engine:
    """Create the SQLAlchemy engine for store access.

    Args:
        store_url: SQLAlchemy store URL.

    Returns:
        Engine: Configured SQLAlchemy engine.
    """

    return create_engine(
        store_url,
        pool_pre_ping=True,
        connect_args={"connect_timeout": STORE_CONNECT_TIMEOUT_SECONDS},
    )
