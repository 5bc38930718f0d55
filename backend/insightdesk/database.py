import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from insightdesk.config import settings
from insightdesk.core.errors import StorageError

logger = logging.getLogger(__name__)


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=False, pool_pre_ping=True)


engine = _build_engine(settings.get_database_url())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in local runs and tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db: Session, message: str) -> Iterator[None]:
    """Roll back and re-raise database failures as StorageError.

    ``message`` is the user-facing text ("Failed to load reports"); the
    original exception is logged and chained, never returned to the caller.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure: %s", message)
        raise StorageError(message) from exc
