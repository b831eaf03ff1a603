"""
Repositories for the resources guarded by the authorization core.

Only the reads the permission handlers need live here; task, group and
submission CRUD belongs to the resource services.
"""

from typing import Optional
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from grading_backend.model.resources import Group, Submission, Task, TaskGroup, TaskUser, UserGroup
from .base import BaseRepository, storage_errors


class TaskRepository(BaseRepository[Task]):
    """Repository for Task entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, Task)

    def get(self, task_id: int) -> Optional[Task]:
        return self.get_by_id_optional(task_id)

    def assigned_filter(self, user_id: int):
        """Filter matching tasks assigned to the user directly or via a group."""
        direct = select(TaskUser.task_id).where(TaskUser.user_id == user_id)
        via_group = (
            select(TaskGroup.task_id)
            .join(UserGroup, UserGroup.group_id == TaskGroup.group_id)
            .where(UserGroup.user_id == user_id)
        )
        return or_(Task.id.in_(direct), Task.id.in_(via_group))

    def is_assigned_to_user(self, task_id: int, user_id: int) -> bool:
        """
        Check whether a task is assigned to a user.

        Args:
            task_id: Task identifier
            user_id: User identifier

        Returns:
            True if the task is assigned directly or through a group the user belongs to
        """
        with storage_errors("check task assignment"):
            direct = (
                self.db.query(TaskUser)
                .filter(TaskUser.task_id == task_id, TaskUser.user_id == user_id)
                .first()
            )
            if direct is not None:
                return True

            via_group = (
                self.db.query(TaskGroup)
                .join(UserGroup, UserGroup.group_id == TaskGroup.group_id)
                .filter(TaskGroup.task_id == task_id, UserGroup.user_id == user_id)
                .first()
            )
            return via_group is not None


class GroupRepository(BaseRepository[Group]):
    """Repository for Group entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, Group)

    def get(self, group_id: int) -> Optional[Group]:
        return self.get_by_id_optional(group_id)

    def member_ids(self, group_id: int):
        """Subquery of the ids of the group's members."""
        return select(UserGroup.user_id).where(UserGroup.group_id == group_id)

    def group_ids_for_member(self, user_id: int):
        return select(UserGroup.group_id).where(UserGroup.user_id == user_id)

    def is_member(self, group_id: int, user_id: int) -> bool:
        with storage_errors("check group membership"):
            return (
                self.db.query(UserGroup)
                .filter(UserGroup.group_id == group_id, UserGroup.user_id == user_id)
                .first()
            ) is not None


class SubmissionRepository(BaseRepository[Submission]):
    """Repository for Submission entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, Submission)

    def get(self, submission_id: int) -> Optional[Submission]:
        return self.get_by_id_optional(submission_id)
