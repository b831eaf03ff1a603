"""
Collaborator management for tasks and groups.

Collaborators are stored as grants; the creator is never stored and always
reported first with ``manage``. The creator's access cannot be changed by
anyone, admins included.
"""

import logging
from typing import List, Optional, Union
from sqlalchemy.orm import Session

from grading_backend.errors import ForbiddenError, InvalidRequestError, NotFoundError
from grading_backend.interface.collaborators import CollaboratorGet
from grading_backend.model.access import AccessGrant
from grading_backend.model.types import Permission, ResourceKind
from grading_backend.permissions.core import get_handler
from grading_backend.permissions.evaluator import ResourceContext, evaluate
from grading_backend.permissions.handlers import PermissionHandler, parse_kind
from grading_backend.permissions.principal import Action, Principal
from grading_backend.repositories.grants import GrantRepository
from grading_backend.repositories.resources import GroupRepository, TaskRepository
from grading_backend.repositories.users import UserRepository

logger = logging.getLogger(__name__)

COLLABORATIVE_KINDS = (ResourceKind.TASK, ResourceKind.GROUP)

_REPOSITORIES = {
    ResourceKind.TASK: TaskRepository,
    ResourceKind.GROUP: GroupRepository,
}


def _kind(kind: Union[ResourceKind, str]) -> ResourceKind:
    kind = parse_kind(kind)
    if kind not in COLLABORATIVE_KINDS:
        raise InvalidRequestError(f"A {kind.value} has no collaborators", detail={"entity": kind.value})
    return kind


def _permission(permission: Union[Permission, str]) -> Permission:
    try:
        return Permission(permission)
    except ValueError:
        raise InvalidRequestError(f"Unknown permission level {permission}", detail={"permission": permission})


def _authorize_change(
    handler: PermissionHandler,
    db: Session,
    actor: Principal,
    resource_id: int,
    user_id: int,
) -> ResourceContext:
    context = handler.context(db, actor, resource_id)

    if context.created_by == user_id:
        logger.info(f"User {actor.user_id} tried to change creator access on {handler.resource_name} {resource_id}")
        raise ForbiddenError(
            "The creator's access cannot be changed",
            detail={"entity": handler.resource_name, "id": resource_id, "user_id": user_id},
        )

    if not evaluate(actor, context, Action.MANAGE_COLLABORATORS).allowed:
        logger.info(f"User {actor.user_id} denied managing collaborators of {handler.resource_name} {resource_id}")
        raise ForbiddenError(
            detail={"entity": handler.resource_name, "id": resource_id, "action": Action.MANAGE_COLLABORATORS.value}
        )

    return context


def _collaborator(grant: AccessGrant) -> CollaboratorGet:
    return CollaboratorGet(
        user_id=grant.user_id,
        username=grant.user.username if grant.user else None,
        name=grant.user.name if grant.user else None,
        surname=grant.user.surname if grant.user else None,
        permission=grant.permission,
        created_at=grant.created_at,
    )


def list_collaborators(
    db: Session,
    actor: Principal,
    kind: Union[ResourceKind, str],
    resource_id: int,
) -> List[CollaboratorGet]:
    """
    List everyone with access to a resource.

    Args:
        db: Caller's database session
        actor: Principal asking
        kind: Task or group
        resource_id: Resource identifier

    Returns:
        The creator entry followed by the grants, oldest first

    Raises:
        InvalidRequestError: For resource kinds without collaborators
        NotFoundError: If the resource does not exist
        ForbiddenError: If the actor may not list collaborators
    """
    kind = _kind(kind)
    context = get_handler(kind).authorize(db, actor, resource_id, Action.LIST_COLLABORATORS)

    creator = UserRepository(db).get(context.created_by)
    collaborators = [
        CollaboratorGet(
            user_id=context.created_by,
            username=creator.username if creator else None,
            name=creator.name if creator else None,
            surname=creator.surname if creator else None,
            permission=Permission.MANAGE,
            is_creator=True,
        )
    ]
    collaborators.extend(
        _collaborator(grant) for grant in GrantRepository(db).list_for_resource(kind, resource_id)
    )
    return collaborators


def add_collaborator(
    db: Session,
    actor: Principal,
    kind: Union[ResourceKind, str],
    resource_id: int,
    user_id: int,
    permission: Union[Permission, str],
) -> CollaboratorGet:
    """Grant ``permission`` to a user; an existing grant gets the new level."""
    kind = _kind(kind)
    permission = _permission(permission)
    _authorize_change(get_handler(kind), db, actor, resource_id, user_id)

    if UserRepository(db).get(user_id) is None:
        raise NotFoundError("User not found", detail={"entity": "user", "id": user_id})

    grant = GrantRepository(db).upsert(kind, resource_id, user_id, permission)
    logger.info(f"User {actor.user_id} granted {permission.value} on {kind.value} {resource_id} to user {user_id}")
    return _collaborator(grant)


def update_collaborator(
    db: Session,
    actor: Principal,
    kind: Union[ResourceKind, str],
    resource_id: int,
    user_id: int,
    permission: Union[Permission, str],
) -> CollaboratorGet:
    """Change the level of an existing grant.

    Raises:
        NotFoundError: If the resource or the grant does not exist
        ForbiddenError: If the target is the creator or the actor may not manage
    """
    kind = _kind(kind)
    permission = _permission(permission)
    _authorize_change(get_handler(kind), db, actor, resource_id, user_id)

    grants = GrantRepository(db)
    if grants.set_level(kind, resource_id, user_id, permission) == 0:
        raise NotFoundError("Collaborator not found", detail={"entity": kind.value, "id": resource_id, "user_id": user_id})

    logger.info(f"User {actor.user_id} set {permission.value} on {kind.value} {resource_id} for user {user_id}")
    return _collaborator(grants.get(kind, resource_id, user_id))


def remove_collaborator(
    db: Session,
    actor: Principal,
    kind: Union[ResourceKind, str],
    resource_id: int,
    user_id: int,
) -> None:
    kind = _kind(kind)
    _authorize_change(get_handler(kind), db, actor, resource_id, user_id)

    if GrantRepository(db).remove(kind, resource_id, user_id) == 0:
        raise NotFoundError("Collaborator not found", detail={"entity": kind.value, "id": resource_id, "user_id": user_id})

    logger.info(f"User {actor.user_id} removed user {user_id} from {kind.value} {resource_id}")


def get_user_permission(
    db: Session,
    kind: Union[ResourceKind, str],
    resource_id: int,
    user_id: int,
) -> Optional[Permission]:
    """Effective collaborator level of a user: ``manage`` for the creator, else the grant."""
    kind = _kind(kind)
    resource = _REPOSITORIES[kind](db).get(resource_id)
    if resource is None:
        raise NotFoundError(detail={"entity": kind.value, "id": resource_id})

    if resource.created_by == user_id:
        return Permission.MANAGE
    return GrantRepository(db).get_level(kind, resource_id, user_id)


def purge_resource(db: Session, kind: Union[ResourceKind, str], resource_id: int) -> int:
    """Delete the grants of a deleted resource."""
    kind = _kind(kind)
    return GrantRepository(db).remove_for_resource(kind, resource_id)
