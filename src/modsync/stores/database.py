"""Destination store persisted in a SQL database through SQLAlchemy."""

import os
from typing import Generator, Optional, Union, List
from contextlib import contextmanager

from sqlalchemy import create_engine, select, delete, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .base import DestinationStore, FileNotFoundInStoreError, StoreError
from .models import Base, StoredFileModel
from ..core.hashing import ContentHasher
from ..utils.logging import get_logger


logger = get_logger("stores.database")


class DatabaseManager:
    """Database connection and session manager."""

    def __init__(self, database_url: str):
        """Initialize database manager."""
        self.database_url = database_url

        if self.database_url.startswith("sqlite"):
            # StaticPool keeps a single connection so ":memory:" databases survive across sessions
            self.engine = create_engine(
                self.database_url,
                poolclass=StaticPool,
                connect_args={
                    "check_same_thread": False,
                    "timeout": 20
                },
                echo=False
            )
        else:
            self.engine = create_engine(
                self.database_url,
                pool_pre_ping=True,
                pool_recycle=300,
                echo=False
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

        logger.info("Database manager initialized", database_url=self.database_url)

    def create_tables(self):
        """Create all database tables."""
        try:
            if self.database_url.startswith("sqlite:///") and ":memory:" not in self.database_url:
                db_dir = os.path.dirname(self.database_url.replace("sqlite:///", ""))
                if db_dir:
                    os.makedirs(db_dir, exist_ok=True)

            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error("Failed to create database tables", error=str(e))
            raise

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error("Database transaction rolled back", error=str(e))
            raise
        finally:
            session.close()

    def test_connection(self) -> bool:
        """Test database connection."""
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database connection test failed", error=str(e))
            return False

    def close(self):
        """Dispose of the engine's connections."""
        self.engine.dispose()


class DatabaseStore(DestinationStore):
    """Stores each file as one row of the ``stored_files`` table."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        db_manager: Optional[DatabaseManager] = None,
        create_tables: bool = True,
        **kwargs
    ):
        super().__init__(**kwargs)
        if db_manager is None:
            if not database_url:
                raise StoreError("DatabaseStore requires a database_url or a db_manager")
            db_manager = DatabaseManager(database_url)
        self.db_manager = db_manager
        self.hasher = ContentHasher()

        if create_tables:
            self.db_manager.create_tables()

        if not self.db_manager.test_connection():
            raise StoreError(f"Failed to establish database connection: {self.db_manager.database_url}")

    def _get(self, session: Session, key: str) -> Optional[StoredFileModel]:
        return session.execute(
            select(StoredFileModel).where(StoredFileModel.path == key)
        ).scalar_one_or_none()

    async def file_exists(self, root: str, path: str) -> bool:
        key = self.normalize_path(root, path)
        with self.db_manager.session_scope() as session:
            return self._get(session, key) is not None

    async def read_bytes(self, root: str, path: str) -> bytes:
        key = self.normalize_path(root, path)
        with self.db_manager.session_scope() as session:
            record = self._get(session, key)
            if record is None:
                raise FileNotFoundInStoreError(key)
            return bytes(record.content)

    async def upsert_file(self, root: str, path: str, content: Union[bytes, str]) -> None:
        key = self.normalize_path(root, path)
        data = self._to_bytes(content)
        with self.db_manager.session_scope() as session:
            record = self._get(session, key)
            if record is None:
                session.add(StoredFileModel(
                    path=key,
                    content=data,
                    content_hash=self.hasher.hash_content(data),
                    size=len(data)
                ))
            else:
                record.content = data
                record.content_hash = self.hasher.hash_content(data)
                record.size = len(data)

    async def delete_file(self, root: str, path: str) -> bool:
        key = self.normalize_path(root, path)
        with self.db_manager.session_scope() as session:
            result = session.execute(
                delete(StoredFileModel).where(StoredFileModel.path == key)
            )
            return result.rowcount > 0

    async def list_files(self, root: str = "/") -> List[str]:
        """List store keys under ``root``."""
        prefix = self.normalize_path(root, "") + "/" if root.strip("/") else ""
        with self.db_manager.session_scope() as session:
            keys = session.execute(
                select(StoredFileModel.path).order_by(StoredFileModel.path)
            ).scalars().all()
        return [key for key in keys if key.startswith(prefix)]

    async def close(self) -> None:
        self.db_manager.close()
