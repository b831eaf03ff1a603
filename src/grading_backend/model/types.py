from enum import Enum

from sqlalchemy import BigInteger, Integer
from sqlalchemy import Enum as SAEnum

# SQLite only autoincrements INTEGER primary keys
Id = BigInteger().with_variant(Integer, "sqlite")


class UserRole(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class ResourceKind(str, Enum):
    TASK = "task"
    GROUP = "group"
    SUBMISSION = "submission"


class Permission(str, Enum):
    """Collaborator permission levels, totally ordered view < edit < manage."""

    VIEW = "view"
    EDIT = "edit"
    MANAGE = "manage"

    @property
    def rank(self) -> int:
        return _PERMISSION_RANK[self]

    def includes(self, required: "Permission") -> bool:
        return self.rank >= Permission(required).rank


_PERMISSION_RANK = {
    Permission.VIEW: 1,
    Permission.EDIT: 2,
    Permission.MANAGE: 3,
}


def string_enum(enum_cls, name: str) -> SAEnum:
    """Column type storing the enum *values* (not member names)."""
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )
