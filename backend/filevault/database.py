"""SQLAlchemy engine, session factory and request-scoped session dependency"""
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from filevault.config import settings
from filevault.errors import InfrastructureError
from filevault.utils.logger import logger

engine_kwargs = {"pool_pre_ping": True}

# SQLite has different pooling requirements
if settings.DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(
        {
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": settings.DATABASE_MAX_OVERFLOW,
            "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
            "pool_recycle": settings.DATABASE_POOL_RECYCLE,
        }
    )

engine = create_engine(settings.DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield one session per request and always close it"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session, operation: str) -> Iterator[None]:
    """Roll back and re-raise database failures as InfrastructureError.

    Business-level exceptions raised inside the block pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            f"Database operation failed: {operation}",
            extra={"action": operation},
            exc_info=True,
        )
        raise InfrastructureError() from exc
