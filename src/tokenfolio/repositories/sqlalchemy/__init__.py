"""SQLAlchemy repository implementations."""

from tokenfolio.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_session,
    init_db_with_path,
    reset_database,
    Base,
)
from tokenfolio.repositories.sqlalchemy.cache_repo import SqlAlchemyCacheRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_session",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyCacheRepository",
]
