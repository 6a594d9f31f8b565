import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from .config import settings

logger = logging.getLogger(__name__)


def build_engine(db_url: str, lock_timeout_seconds: float = settings.LOCK_TIMEOUT_SECONDS, echo: bool = False) -> Engine:
    """Create an engine whose lock waits are bounded by ``lock_timeout_seconds``."""
    engine_kwargs = {}

    if db_url.startswith("sqlite"):
        # busy timeout: how long a writer waits on the database lock before OperationalError
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False, "timeout": lock_timeout_seconds}
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
            "connect_args": {"options": f"-c lock_timeout={int(lock_timeout_seconds * 1000)}"},
        })

    new_engine = create_engine(db_url, echo=echo, **engine_kwargs)

    if db_url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables(target: Engine = engine) -> None:
    # Import table models so they register on SQLModel.metadata
    from .db import models  # noqa: F401

    SQLModel.metadata.create_all(target)
    logger.info("Database tables ensured")


def get_session():
    with Session(engine) as session:
        yield session
