"""Persistent string key/value storage for client state."""
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medibook.database_models import Base, StorageItem


class LocalStorage:
    """
    String key/value store with the browser localStorage contract.

    Pattern: Thin wrapper around SQLAlchemy, one row per key.
    """

    def __init__(self, database_url: str):
        """
        Initialize storage with database connection.

        Args:
            database_url: SQLAlchemy connection string
        """
        engine_kwargs = {"pool_pre_ping": True}
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # Every connection must see the same in-memory database
            engine_kwargs = {
                "connect_args": {"check_same_thread": False},
                "poolclass": StaticPool,
            }
        self.engine = create_engine(database_url, **engine_kwargs)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

    def get_item(self, key: str) -> Optional[str]:
        """Return stored value for key, or None if absent."""
        with self.SessionLocal() as db:
            item = db.get(StorageItem, key)
            return item.value if item else None

    def set_item(self, key: str, value: str):
        """Insert or overwrite value for key."""
        with self.SessionLocal() as db:
            item = db.get(StorageItem, key)
            if item:
                item.value = value
            else:
                db.add(StorageItem(key=key, value=value))
            db.commit()

    def remove_item(self, key: str):
        """Delete key. Missing keys are ignored."""
        with self.SessionLocal() as db:
            db.query(StorageItem).filter(StorageItem.key == key).delete()
            db.commit()

    def clear(self) -> int:
        """
        Delete every stored key.

        Returns:
            Number of deleted entries
        """
        with self.SessionLocal() as db:
            deleted = db.query(StorageItem).delete()
            db.commit()
        return deleted
