import logging
from contextlib import contextmanager
from typing import Generator, Iterator, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from grading_backend.errors import StorageError
from grading_backend.settings import settings

logger = logging.getLogger(__name__)

_database_options = {
    "pool_pre_ping": True,
    "pool_size": 10,
    "max_overflow": 5,
    "pool_timeout": 30,
    "pool_recycle": 300
}

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options
    return dict(_database_options)


def configure(url: Optional[str] = None, **options) -> Engine:
    """(Re)create the engine and session factory, e.g. for the CLI or tests."""
    global _engine, _SessionLocal

    url = url or settings.DATABASE_URL
    engine_options = _engine_options(url)
    engine_options.update(options)

    if _engine is not None:
        _engine.dispose()

    _engine = create_engine(url, **engine_options)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        configure()
    return _engine


def init_db() -> None:
    from grading_backend.model import Base

    Base.metadata.create_all(get_engine())


def _new_session() -> Session:
    if _SessionLocal is None:
        configure()
    return _SessionLocal()


def get_db() -> Generator[Session, None, None]:

    db = _new_session()

    try:
        yield db
    except OperationalError as e:
        logger.error(f"Database connection failed: {e}")
        db.rollback()
        raise StorageError("Database connection failed") from e
    finally:
        db.close()


@contextmanager
def transaction() -> Iterator[Session]:
    """Unit of work outside of a request: commit on success, rollback on error."""
    db = _new_session()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction failed: {e}")
        raise StorageError("Transaction failed") from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
