"""Database connection utilities."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import structlog
from contextlib import contextmanager

from ..config.config import settings
from .models import Base

logger = structlog.get_logger()


class Database:
    """Database connection manager."""

    def __init__(self):
        self.engine = None
        self.SessionLocal = None

    def initialize(self, url: Optional[str] = None):
        """
        Initialize database connection.

        Args:
            url: Database URL, defaults to ``settings.database_url``
        """
        url = url or settings.database_url
        logger.info("Initializing database connection", dialect=url.split(":", 1)[0])

        engine_kwargs = {"echo": settings.debug}  # Log SQL in debug mode
        if url.startswith("sqlite"):
            # In-memory SQLite must share one connection across threads
            engine_kwargs.update(
                poolclass=StaticPool, connect_args={"check_same_thread": False}
            )
        else:
            engine_kwargs.update(pool_pre_ping=True)

        # Create engine
        self.engine = create_engine(url, **engine_kwargs)

        # Create session factory
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

        # Create tables
        self.create_tables()

        logger.info("Database connection initialized")

    def create_tables(self):
        """Create all tables."""
        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables created")

        except Exception as e:
            logger.error("Failed to create tables", error=str(e))
            raise

    @contextmanager
    def get_session(self):
        """Get database session with automatic cleanup."""
        if not self.SessionLocal:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# Global database instance
db = Database()
