from .base import Base, metadata
from .types import UserRole, ResourceKind, Permission
from .auth import User, Session
from .resources import Task, Group, UserGroup, TaskUser, TaskGroup, Submission
from .access import AccessGrant

# Import all models to ensure relationships are properly set up
from . import auth, resources, access

__all__ = [
    'Base',
    'metadata',
    # Enumerations
    'UserRole',
    'ResourceKind',
    'Permission',
    # Auth models
    'User',
    'Session',
    # Resources
    'Task',
    'Group',
    'UserGroup',
    'TaskUser',
    'TaskGroup',
    'Submission',
    # Access control
    'AccessGrant',
]
