"""SQLAlchemy implementation of CacheRepository."""

import json
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tokenfolio.core.exceptions import CacheWriteError
from tokenfolio.core.timezone import now_utc, to_utc
from tokenfolio.domain.models import CacheCategory, CacheEntry
from tokenfolio.repositories.base import (
    DEFAULT_METADATA_TTL_SECONDS,
    DEFAULT_PRICE_TTL_SECONDS,
    ExpiringCacheRepository,
)
from tokenfolio.repositories.sqlalchemy.orm_models import CacheEntryORM

logger = logging.getLogger(__name__)


class SqlAlchemyCacheRepository(ExpiringCacheRepository):
    """SQLAlchemy-backed cache repository, one row per category."""

    def __init__(
        self,
        db: Session,
        price_ttl_seconds: int = DEFAULT_PRICE_TTL_SECONDS,
        metadata_ttl_seconds: int = DEFAULT_METADATA_TTL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ):
        super().__init__(
            price_ttl_seconds=price_ttl_seconds,
            metadata_ttl_seconds=metadata_ttl_seconds,
            clock=clock,
        )
        self._db = db

    def _read_entry(self, category: CacheCategory) -> Optional[CacheEntry]:
        try:
            orm_entry = (
                self._db.query(CacheEntryORM)
                .filter(CacheEntryORM.category == category.value)
                .first()
            )
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.warning("Ignoring unreadable %s cache row: %s", category.value, exc)
            return None
        if orm_entry is None:
            return None
        return self._to_domain(orm_entry)

    def _write_entry(self, category: CacheCategory, entry: CacheEntry) -> None:
        try:
            payload = json.dumps(entry.data, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(category.value, str(exc)) from exc

        written_at = to_utc(entry.timestamp).replace(tzinfo=None)
        try:
            orm_entry = (
                self._db.query(CacheEntryORM)
                .filter(CacheEntryORM.category == category.value)
                .first()
            )
            if orm_entry:
                orm_entry.written_at_utc = written_at
                orm_entry.payload = payload
            else:
                orm_entry = CacheEntryORM(
                    category=category.value,
                    written_at_utc=written_at,
                    payload=payload,
                )
                self._db.add(orm_entry)
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise CacheWriteError(category.value, str(exc)) from exc

    @staticmethod
    def _to_domain(orm: CacheEntryORM) -> Optional[CacheEntry]:
        """Convert ORM row to domain model; a corrupt payload reads as a miss."""
        try:
            data = json.loads(orm.payload)
        except (TypeError, ValueError):
            logger.warning("Ignoring corrupt %s cache payload", orm.category)
            return None
        if not isinstance(data, dict) or orm.written_at_utc is None:
            logger.warning("Ignoring malformed %s cache payload", orm.category)
            return None
        return CacheEntry(timestamp=to_utc(orm.written_at_utc), data=data)
