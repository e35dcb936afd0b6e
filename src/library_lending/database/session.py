"""
Database session management for the Library Lending server.

The store backend is SQLAlchemy. By default it runs on a private in-memory
SQLite database held open by a ``StaticPool`` so every session in the
process sees the same data, and nothing survives a restart.

Key considerations:
- Sessions are short-lived, one per engine operation
- ``session_scope`` commits on success and rolls back on any error, which is
  what keeps a failed borrow or return from leaving partial writes behind
"""

import logging
from collections.abc import Callable, Generator
from typing import TypeVar
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_config
from ..errors import StoreError
from .schema import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DatabaseManager:
    """
    Manages the engine and sessions behind the lending stores.

    This class provides:
    - Lazy engine creation (StaticPool for SQLite)
    - A session factory with explicit transactions
    - Schema initialization
    """

    def __init__(self, database_url: str | None = None):
        """
        Initialize the database manager.

        Args:
            database_url: SQLAlchemy database URL. If None, uses the configured URL.
        """
        if database_url is None:
            database_url = get_config().database_url

        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.database_url.startswith("sqlite"):
                self._engine = create_engine(
                    self.database_url,
                    # A single shared connection keeps an in-memory database alive
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                    echo=False,
                )
            else:
                self._engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    echo=False,
                )

            logger.info("Database engine created: %s", self._engine.url)

        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                # Keep objects usable after commit
                expire_on_commit=False,
            )
        return self._session_factory

    def create_session(self) -> Session:
        """Create a new database session."""
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for store operations.

        ```python
        with db_manager.session_scope() as session:
            catalog = CatalogRepository(session, ids)
            catalog.add(data)
        # Session is automatically committed or rolled back
        ```

        Yields:
            Database session

        Raises:
            Whatever the body raised, after rolling back
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except Exception:
            logger.debug("Rolling back database transaction")
            session.rollback()
            raise
        finally:
            session.close()

    def init_database(self, drop_existing: bool = False) -> None:
        """
        Initialize the database schema.

        Args:
            drop_existing: If True, drop all tables before creating
        """
        engine = self.engine

        if drop_existing:
            logger.warning("Dropping all existing tables...")
            Base.metadata.drop_all(bind=engine)

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)

    def verify_connection(self) -> bool:
        """Check that the backend answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("Database connection failed")
            return False

    def close(self) -> None:
        """Dispose of the engine; an in-memory database is discarded with it."""
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, wrapping backend failures in ``StoreError``.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Message prefix for the raised error

    Returns:
        Query result

    Raises:
        StoreError: If the query fails
    """
    try:
        return query_func(session)
    except Exception as e:
        logger.exception("Query failed")
        raise StoreError(f"{error_msg}: {e!s}") from e
