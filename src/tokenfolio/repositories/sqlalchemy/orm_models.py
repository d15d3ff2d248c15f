"""SQLAlchemy ORM model definitions."""

from sqlalchemy import Column, String, DateTime, Text

from tokenfolio.repositories.sqlalchemy.database import Base


class CacheEntryORM(Base):
    """One cache category: JSON payload plus the time it was written (naive UTC)."""

    __tablename__ = "cache_entries"

    category = Column(String(32), primary_key=True)
    written_at_utc = Column(DateTime, nullable=False)
    payload = Column(Text, nullable=False)
