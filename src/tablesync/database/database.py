"""Database connection and session management."""

from pathlib import Path
from typing import Generator, Optional
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .models import Base
from ..config.settings import get_settings
from ..utils.logging import get_logger


logger = get_logger("database")


class DatabaseManager:
    """Engine and session factory for the local record database."""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database manager.

        Args:
            database_url: SQLAlchemy URL; ``TABLESYNC_DB_URL`` when omitted
        """
        self.database_url = database_url or get_settings().database.url
        self.url = make_url(self.database_url)

        if self.is_sqlite:
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

        logger.info(
            "Database manager initialized",
            backend=self.url.get_backend_name(),
            database=self.url.database
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    @property
    def is_in_memory(self) -> bool:
        return self.is_sqlite and self.url.database in (None, "", ":memory:")

    def create_tables(self):
        """Create the records table, and the SQLite file's directory if needed."""
        try:
            if self.is_sqlite and not self.is_in_memory:
                Path(self.url.database).parent.mkdir(parents=True, exist_ok=True)

            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created", tables=sorted(Base.metadata.tables))
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
        """Dispose of pooled connections."""
        self.engine.dispose()
        logger.info("Database connections closed")


def init_database(database_url: Optional[str] = None, create_tables: bool = True) -> DatabaseManager:
    """Create a manager, its tables, and check the connection."""
    manager = DatabaseManager(database_url)

    if create_tables:
        manager.create_tables()

    if not manager.test_connection():
        raise RuntimeError("Failed to establish database connection")

    return manager
