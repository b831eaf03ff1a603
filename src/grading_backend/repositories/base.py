"""
Base repository pattern implementation.

Repositories operate on the caller's ``Session`` and never commit: the
transaction boundary belongs to the calling layer. Every ``SQLAlchemyError``
leaves a repository as ``StorageError``.
"""

import logging
from contextlib import contextmanager
from typing import TypeVar, Generic, Iterator, Optional, Any, Type
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from grading_backend.errors import StorageError

logger = logging.getLogger(__name__)

# Type variable for generic entity type
T = TypeVar('T')


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Storage failure during {operation}: {e}")
        raise StorageError(f"Failed to {operation}") from e


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.

    This class implements the repository pattern, providing a clean
    abstraction over SQLAlchemy operations.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """
        Get entity by ID, returning None if not found.

        Args:
            entity_id: Entity identifier

        Returns:
            Entity instance or None
        """
        with storage_errors(f"load {self.model.__name__}"):
            return self.db.query(self.model).filter(
                self.model.id == entity_id
            ).first()

    def add(self, entity: T) -> T:
        """
        Stage a new entity and flush it so generated fields (e.g. ID) are set.

        Raises:
            StorageError: If the database rejects the entity
        """
        with storage_errors(f"create {self.model.__name__}"):
            self.db.add(entity)
            self.db.flush()
            return entity
