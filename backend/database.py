import logging
from typing import Generator

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(url: str, pool_size: int = 10) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # every connection must see the same in-memory database
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_size=pool_size, pool_pre_ping=True)


engine = create_db_engine(settings.database_url, settings.DB_POOL_SIZE)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_schema(bind: Engine) -> bool:
    """Create the results table if missing. Returns True when it was created."""
    from models import ScoreRecord

    table = ScoreRecord.__table__
    if inspect(bind).has_table(table.name):
        logger.info(f"Table '{table.name}' already exists.")
        return False

    Base.metadata.create_all(bind=bind, tables=[table], checkfirst=True)
    logger.info(f"Table '{table.name}' created.")
    return True
