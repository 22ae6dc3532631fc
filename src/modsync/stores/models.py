"""Database models and store types for the destination stores."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, LargeBinary
from sqlalchemy.orm import declarative_base


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreType(str, Enum):
    """Supported destination store backends."""
    LOCAL = "local"
    DATABASE = "database"


class StoredFileModel(Base):
    """Database model for a file persisted in the destination store."""

    __tablename__ = "stored_files"

    id = Column(Integer, primary_key=True, index=True)
    path = Column(String(1024), nullable=False, unique=True, index=True)  # normalised store key
    content = Column(LargeBinary, nullable=False)
    content_hash = Column(String(64), nullable=False)  # SHA-256 of content, marker line included
    size = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<StoredFileModel(id={self.id}, path='{self.path}', size={self.size})>"
