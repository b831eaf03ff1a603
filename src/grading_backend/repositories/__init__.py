"""
Repository layer for direct database access.

All repositories work on the caller's SQLAlchemy session and leave
committing to the caller.
"""

from .base import BaseRepository, storage_errors
from .sessions import SessionRepository
from .users import UserRepository
from .grants import GrantRepository
from .resources import TaskRepository, GroupRepository, SubmissionRepository

__all__ = [
    'BaseRepository',
    'storage_errors',
    'SessionRepository',
    'UserRepository',
    'GrantRepository',
    'TaskRepository',
    'GroupRepository',
    'SubmissionRepository',
]
