"""SQLAlchemy models for local persistent storage."""
from datetime import datetime, UTC

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now():
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class StorageItem(Base):
    """Key/value row, the on-disk equivalent of one browser localStorage entry."""
    __tablename__ = "local_storage"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<StorageItem(key={self.key})>"
