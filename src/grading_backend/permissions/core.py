"""
Entry points other subsystems use to consult the authorization core.
"""

from typing import Union
from sqlalchemy.orm import Session, Query

from grading_backend.errors import InvalidRequestError
from grading_backend.model.resources import Group, Submission, Task
from grading_backend.model.types import ResourceKind
from grading_backend.permissions.evaluator import ResourceContext
from grading_backend.permissions.handlers import PermissionHandler, permission_registry
from grading_backend.permissions.handlers_impl import (
    GroupPermissionHandler,
    SubmissionPermissionHandler,
    TaskPermissionHandler,
)
from grading_backend.permissions.principal import Action, Principal


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""

    task_handler = TaskPermissionHandler(Task)
    group_handler = GroupPermissionHandler(Group)
    permission_registry.register(ResourceKind.TASK, task_handler)
    permission_registry.register(ResourceKind.GROUP, group_handler)
    permission_registry.register(
        ResourceKind.SUBMISSION, SubmissionPermissionHandler(Submission, task_handler, group_handler)
    )


def get_handler(kind: Union[ResourceKind, str]) -> PermissionHandler:
    handler = permission_registry.get_handler(kind)
    if handler is None:
        raise InvalidRequestError(f"No permission handler for {kind}")
    return handler


def check_permissions(principal: Principal, kind: Union[ResourceKind, str], db: Session) -> Query:
    """Query of the resources of ``kind`` the principal may list."""
    return permission_registry.check_permissions(principal, kind, db)


def can_perform_on_resource(
    db: Session,
    principal: Principal,
    kind: Union[ResourceKind, str],
    resource_id: int,
    action: Union[Action, str],
) -> bool:
    return get_handler(kind).can(db, principal, resource_id, action)


def authorize(
    db: Session,
    principal: Principal,
    kind: Union[ResourceKind, str],
    resource_id: int,
    action: Union[Action, str],
) -> ResourceContext:
    """Gate an operation; raises ``NotFoundError`` or ``ForbiddenError``."""
    return get_handler(kind).authorize(db, principal, resource_id, action)


initialize_permission_handlers()
