"""Database engine, session factory and declarative base."""
import math
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from pulseconnect.core.config import settings

logger = logging.getLogger(__name__)


def _sqlite_math(fn):
    def wrapped(x):
        return None if x is None else fn(x)
    return wrapped


def register_sqlite_functions(dbapi_connection, connection_record=None) -> None:
    """Give SQLite the trigonometric functions the donor search emits.

    PostgreSQL ships radians/acos/cos/sin/least/greatest natively; SQLite
    builds often lack them, so they are registered on every new connection.
    """
    dbapi_connection.create_function("radians", 1, _sqlite_math(math.radians), deterministic=True)
    dbapi_connection.create_function("cos", 1, _sqlite_math(math.cos), deterministic=True)
    dbapi_connection.create_function("sin", 1, _sqlite_math(math.sin), deterministic=True)
    dbapi_connection.create_function("acos", 1, _sqlite_math(math.acos), deterministic=True)
    dbapi_connection.create_function("least", 2, min, deterministic=True)
    dbapi_connection.create_function("greatest", 2, max, deterministic=True)


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine for ``url``, wiring the SQLite helpers when needed."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {}).setdefault("check_same_thread", False)
        db_engine = create_engine(url, **kwargs)
        event.listen(db_engine, "connect", register_sqlite_functions)
        return db_engine

    kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    kwargs.setdefault("pool_timeout", settings.DB_POOL_TIMEOUT)
    kwargs.setdefault("pool_recycle", settings.DB_POOL_RECYCLE)
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def init_db() -> None:
    """Create tables if they do not exist."""
    from pulseconnect import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
