"""
Database session management (SQLAlchemy)

One engine and one session factory per process; each request gets its own
Session through the ``get_db`` dependency.
"""
import psycopg
from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from app.config import get_settings


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


_engine = None
_SessionLocal = None


def get_engine():
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        url = get_settings().get_sqlalchemy_url()
        kwargs = {"pool_pre_ping": True}
        if url.startswith("sqlite"):
            # Local/dev runs against a file database shared between threads
            kwargs["connect_args"] = {"check_same_thread": False}
        _engine = create_engine(url, **kwargs)
    return _engine


def get_session_factory():
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)
    return _SessionLocal


def get_db() -> Session:
    """
    FastAPI dependency - opens a session per request and always closes it

    Usage:
        @router.get("/subscriptions")
        def list_subscriptions(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Readiness check.

    PostgreSQL is checked with a raw psycopg connection (bypasses the pool, so
    a stale pool cannot mask an outage); any other backend goes through the
    engine.

    Raises:
        psycopg.OperationalError / sqlalchemy.exc.OperationalError: if the
        database is unreachable
    """
    settings = get_settings()
    if settings.DATABASE_URL.startswith("postgresql"):
        dsn = settings.DATABASE_URL.replace("postgresql+psycopg://", "postgresql://", 1)
        with psycopg.connect(dsn, connect_timeout=3) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return

    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))
