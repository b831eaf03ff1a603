from enum import Enum
from typing import Dict, Union
from pydantic import BaseModel, ConfigDict

from grading_backend.errors import InvalidRequestError
from grading_backend.model.auth import User
from grading_backend.model.types import Permission, UserRole


class Action(str, Enum):
    """Closed set of actions the facades authorize."""

    VIEW = "view"
    LIST_COLLABORATORS = "list_collaborators"
    LIST_TASKS = "list_tasks"
    LIST_MEMBERS = "list_members"
    SUBMIT = "submit"

    EDIT = "edit"
    UPLOAD_ARCHIVE = "upload_archive"
    ASSIGN = "assign"
    LIST_SUBMISSIONS = "list_submissions"

    MANAGE = "manage"
    MANAGE_COLLABORATORS = "manage_collaborators"
    MANAGE_MEMBERS = "manage_members"
    DELETE = "delete"


ACTION_LEVELS: Dict[Action, Permission] = {
    Action.VIEW: Permission.VIEW,
    Action.LIST_COLLABORATORS: Permission.VIEW,
    Action.LIST_TASKS: Permission.VIEW,
    Action.LIST_MEMBERS: Permission.VIEW,
    Action.SUBMIT: Permission.VIEW,
    Action.EDIT: Permission.EDIT,
    Action.UPLOAD_ARCHIVE: Permission.EDIT,
    Action.ASSIGN: Permission.EDIT,
    Action.LIST_SUBMISSIONS: Permission.EDIT,
    Action.MANAGE: Permission.MANAGE,
    Action.MANAGE_COLLABORATORS: Permission.MANAGE,
    Action.MANAGE_MEMBERS: Permission.MANAGE,
    Action.DELETE: Permission.MANAGE,
}

if set(ACTION_LEVELS) != set(Action):
    raise RuntimeError("Every action needs a required permission level")


def parse_action(action: Union[Action, str]) -> Action:
    try:
        return Action(action)
    except ValueError:
        raise InvalidRequestError(f"Unknown action {action}", detail={"action": action})


def required_level(action: Union[Action, str]) -> Permission:
    """Permission level a collaborator needs for ``action``.

    Raises:
        InvalidRequestError: If ``action`` is not a known action
    """
    return ACTION_LEVELS[parse_action(action)]


class Principal(BaseModel):
    """Authenticated user for the duration of one request.

    Built from the ``user`` row on every request and never cached, so a role
    change takes effect on the next request.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    role: UserRole
    name: str = ""
    surname: str = ""
    email: str = ""
    username: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def can_create(self) -> bool:
        return self.role in (UserRole.TEACHER, UserRole.ADMIN)

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=UserRole(user.role),
            name=user.name or "",
            surname=user.surname or "",
            email=user.email or "",
            username=user.username or "",
        )
