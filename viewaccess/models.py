"""Database models for roles, display access settings and audit logs.

This module provides SQLAlchemy models for:
- Roles an actor may hold
- Per-display access plugin configuration
- Audit logs
"""
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    text,
)
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


class Role(Base):
    """A named permission group."""

    __tablename__ = "roles"

    id = Column(String(64), primary_key=True)
    label = Column(String(255), nullable=False)
    weight = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Role {self.id} ({self.label})>"


class DisplayAccess(Base):
    """Access plugin configuration attached to one display of a view."""

    __tablename__ = "display_access"
    __table_args__ = (UniqueConstraint("view_id", "display_id"),)

    id = Column(Integer, primary_key=True)
    view_id = Column(String(128), nullable=False, index=True)
    display_id = Column(String(128), nullable=False)
    access_type = Column(String(64), nullable=False, default="none")
    options = Column(JSON, nullable=False, default=dict)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self):
        return f"<DisplayAccess {self.view_id}:{self.display_id} ({self.access_type})>"


class AuditLog(Base):
    """Audit log for configuration changes."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(255), nullable=True)

    # Actor information
    user = Column(String(255), nullable=True)

    # Action details
    details = Column(Text, nullable=True)
    success = Column(Boolean, default=True)
    error_message = Column(Text, nullable=True)

    # Timestamp
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} on {self.resource_type} at {self.created_at}>"


class DatabaseManager:
    """Database connection and session management."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
    ):
        """Initialize database connection.

        Args:
            database_url: SQLAlchemy database URL
            pool_size: Number of connections to maintain in the pool
            max_overflow: Max number of connections above pool_size
            pool_timeout: Seconds to wait before giving up on getting a connection
            pool_recycle: Recycle connections after this many seconds
            echo: Echo SQL statements (for debugging)
        """
        self.database_url = database_url

        if database_url.startswith("sqlite:"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            # Every connection to ":memory:" is a separate database
            if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
                kwargs["poolclass"] = StaticPool
            self.engine = create_engine(database_url, echo=echo, **kwargs)
        else:
            self.engine = create_engine(
                database_url,
                echo=echo,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=True,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False,
        )

    def create_tables(self):
        """Create all tables."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """Drop all tables (use with caution)."""
        Base.metadata.drop_all(bind=self.engine)

    def get_session(self):
        """Get database session.

        IMPORTANT: Caller must close the session when done.
        Better to use get_session_context() context manager.
        """
        return self.SessionLocal()

    @contextmanager
    def get_session_context(self):
        """Session scope that commits on success and rolls back on error.

        Usage:
            with db_manager.get_session_context() as session:
                session.add(obj)
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self):
        """Dispose of the connection pool."""
        self.engine.dispose()

    def health_check(self) -> bool:
        try:
            with self.get_session_context() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False


_db_manager: Optional[DatabaseManager] = None
_db_manager_lock = threading.Lock()


def get_db_manager(
    database_url: Optional[str] = None,
    reset: bool = False,
    **kwargs,
) -> DatabaseManager:
    """Get or create the database manager singleton.

    Args:
        database_url: Database URL (falls back to the DATABASE_URL setting)
        reset: Force recreation of the singleton (for testing)
        **kwargs: Additional arguments passed to DatabaseManager

    Returns:
        DatabaseManager instance
    """
    global _db_manager

    with _db_manager_lock:
        if _db_manager is None or reset:
            if _db_manager is not None and reset:
                try:
                    _db_manager.dispose()
                except Exception as e:
                    logger.warning(f"Error disposing old db_manager: {e}")

            if database_url is None:
                from viewaccess.config import get_settings

                database_url = get_settings().database_url

            _db_manager = DatabaseManager(database_url, **kwargs)
            _db_manager.create_tables()

    return _db_manager


def dispose_db_manager():
    """Dispose of the database manager singleton.

    Should be called on application shutdown.
    """
    global _db_manager
    if _db_manager is not None:
        try:
            _db_manager.dispose()
        except Exception as e:
            logger.error(f"Error disposing db_manager: {e}")
        finally:
            _db_manager = None
