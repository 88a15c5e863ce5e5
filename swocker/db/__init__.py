"""Store layer package for all SQL and driver boundaries."""

from .interfaces import StoreAdminPort, StoreHealthPort
from .readiness import ReadinessRetryPolicy, StoreReadinessPoller
from .session import db_build_store_url, db_create_engine
from .store import SQLAlchemyStoreService, db_classify_error, db_quote_identifier

__all__ = [
    "ReadinessRetryPolicy",
    "SQLAlchemyStoreService",
    "StoreAdminPort",
    "StoreHealthPort",
    "StoreReadinessPoller",
    "db_build_store_url",
    "db_classify_error",
    "db_create_engine",
    "db_quote_identifier",
]
