from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool
from fastapi import Request
from typing import Iterator
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Shared storage adapter.

    Owns the engine and session factory for the lifetime of the process:
    created once at startup, disposed at shutdown, and reused by every
    request through the get_db dependency.
    """

    def __init__(self, url: str):
        self.url = url
        self.engine = None
        self.SessionLocal = None

    def connect(self) -> None:
        """Create the engine, session factory and tables"""
        kwargs = {"echo": False, "pool_pre_ping": True}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url in ("sqlite://", "sqlite:///"):
                # One connection shared by all threads, otherwise each gets an empty database
                kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **kwargs)

        if self.url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragma)

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        # Import registers the mapped classes on Base
        import models  # noqa: F401
        Base.metadata.create_all(self.engine)
        logger.info(f"Database connected: {self.engine.url.render_as_string(hide_password=True)}")

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.SessionLocal()

    def close(self) -> None:
        """Dispose the engine and its pooled connections"""
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connection closed")
        self.engine = None
        self.SessionLocal = None


def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA busy_timeout=5000")  # Wait up to 5s for locks instead of failing immediately
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for FastAPI routes"""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
