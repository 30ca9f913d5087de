import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import QueuePool

from app.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL.strip()

# Some hosting environments accidentally prepend "DATABASE_URL=" to the value
PREFIX = "DATABASE_URL="
if DATABASE_URL.startswith(PREFIX):
    DATABASE_URL = DATABASE_URL[len(PREFIX):].strip()

engine_kwargs = {
    "echo": False,
    "pool_pre_ping": True,
}

# SQLite has different pooling requirements
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(
        {
            "poolclass": QueuePool,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_recycle": settings.DB_POOL_RECYCLE,
        }
    )

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()

if DATABASE_URL.startswith("sqlite"):
    logger.info("Database configured with SQLite")
else:
    logger.info(
        "Database connection pool configured: size=%s, max_overflow=%s",
        settings.DB_POOL_SIZE,
        settings.DB_MAX_OVERFLOW,
    )


def get_db() -> Generator[Session, None, None]:
    """One session (one pooled connection) per request, released on every exit path."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
