from typing import Iterator
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from ..core.config import settings
from . import models  # noqa: F401  registers table metadata


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def build_engine(db_url: str, echo: bool = False):
    # Choose engine options based on database scheme
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })
    engine = create_engine(db_url, echo=echo, **engine_kwargs)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _register_unicode_lower)
    return engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(bind=None) -> None:
    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
