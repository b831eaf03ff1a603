from typing import Optional
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, Query

from grading_backend.errors import ForbiddenError, NotFoundError
from grading_backend.model.resources import Group, Submission, Task
from grading_backend.model.types import Permission, ResourceKind
from grading_backend.permissions.evaluator import ResourceContext
from grading_backend.permissions.handlers import PermissionHandler
from grading_backend.permissions.principal import Action, Principal
from grading_backend.repositories.grants import GrantRepository
from grading_backend.repositories.resources import GroupRepository, SubmissionRepository, TaskRepository
from grading_backend.repositories.users import UserRepository


class CreatablePermissionHandler(PermissionHandler):
    """Handler for resources that carry an immutable ``created_by``."""

    def authorize_create(self, principal: Principal, created_by: Optional[int] = None) -> int:
        """
        Check that the principal may create a resource owned by ``created_by``.

        Only teachers and admins create tasks and groups; non-admins only
        with themselves as creator.

        Returns:
            The creator id to store

        Raises:
            ForbiddenError: If creation is not allowed
        """
        if created_by is None:
            created_by = principal.user_id

        if not principal.can_create:
            raise ForbiddenError(
                f"Role {principal.role.value} cannot create a {self.resource_name}",
                detail={"entity": self.resource_name},
            )

        if not self.check_admin(principal) and created_by != principal.user_id:
            raise ForbiddenError(
                f"Cannot create a {self.resource_name} owned by another user",
                detail={"entity": self.resource_name, "created_by": created_by},
            )

        return created_by


class TaskPermissionHandler(CreatablePermissionHandler):
    """Tasks: creator, collaborators and assignees"""

    kind = ResourceKind.TASK

    def load_context(self, db: Session, principal: Principal, resource_id: int) -> Optional[ResourceContext]:
        task = TaskRepository(db).get(resource_id)
        if task is None:
            return None

        return ResourceContext(
            kind=self.kind,
            resource_id=task.id,
            created_by=task.created_by,
            grant=GrantRepository(db).get_level(self.kind, task.id, principal.user_id),
            assigned=TaskRepository(db).is_assigned_to_user(task.id, principal.user_id),
        )

    def build_query(self, principal: Principal, db: Session) -> Query:
        if self.check_admin(principal):
            return db.query(Task)

        return db.query(Task).filter(
            or_(
                Task.created_by == principal.user_id,
                Task.id.in_(GrantRepository(db).resource_ids_for_user(self.kind, principal.user_id)),
                TaskRepository(db).assigned_filter(principal.user_id),
            )
        )


class GroupPermissionHandler(CreatablePermissionHandler):
    """Groups: creator, collaborators and members"""

    kind = ResourceKind.GROUP

    def load_context(self, db: Session, principal: Principal, resource_id: int) -> Optional[ResourceContext]:
        group = GroupRepository(db).get(resource_id)
        if group is None:
            return None

        return ResourceContext(
            kind=self.kind,
            resource_id=group.id,
            created_by=group.created_by,
            grant=GrantRepository(db).get_level(self.kind, group.id, principal.user_id),
            member=GroupRepository(db).is_member(group.id, principal.user_id),
        )

    def build_query(self, principal: Principal, db: Session) -> Query:
        """
        Groups the principal may list: all for admins; created, shared and
        joined groups for teachers.

        Raises:
            ForbiddenError: For students, who reach groups only through their memberships
        """
        if self.check_admin(principal):
            return db.query(Group)

        if principal.is_student:
            raise ForbiddenError("Students cannot list groups", detail={"entity": self.resource_name})

        return db.query(Group).filter(
            or_(
                Group.created_by == principal.user_id,
                Group.id.in_(GrantRepository(db).resource_ids_for_user(self.kind, principal.user_id)),
                Group.id.in_(GroupRepository(db).group_ids_for_member(principal.user_id)),
            )
        )


class SubmissionPermissionHandler(PermissionHandler):
    """Submissions: the author, and teachers through the submitted task"""

    kind = ResourceKind.SUBMISSION

    def __init__(self, entity, task_handler: TaskPermissionHandler, group_handler: GroupPermissionHandler):
        super().__init__(entity)
        self.task_handler = task_handler
        self.group_handler = group_handler

    def load_context(self, db: Session, principal: Principal, resource_id: int) -> Optional[ResourceContext]:
        submission = SubmissionRepository(db).get(resource_id)
        if submission is None:
            return None

        return ResourceContext(
            kind=self.kind,
            resource_id=submission.id,
            author_id=submission.user_id,
            task_created_by=submission.task.created_by,
            task_grant=GrantRepository(db).get_level(ResourceKind.TASK, submission.task_id, principal.user_id),
        )

    def build_query(self, principal: Principal, db: Session) -> Query:
        if self.check_admin(principal):
            return db.query(Submission)

        own = Submission.user_id == principal.user_id
        if principal.is_student:
            return db.query(Submission).filter(own)

        created_tasks = select(Task.id).where(Task.created_by == principal.user_id)
        granted_tasks = GrantRepository(db).resource_ids_for_user(
            ResourceKind.TASK, principal.user_id, minimum=Permission.EDIT
        )
        return db.query(Submission).filter(
            or_(
                own,
                Submission.task_id.in_(created_tasks),
                Submission.task_id.in_(granted_tasks),
            )
        )

    def authorize_submit(self, db: Session, principal: Principal, task_id: int) -> ResourceContext:
        """Gate a new submission to ``task_id``; requires ``view`` on the task.

        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the principal may not see the task
        """
        return self.task_handler.authorize(db, principal, task_id, Action.SUBMIT)

    def query_for_task(self, db: Session, principal: Principal, task_id: int) -> Query:
        """
        Query of the submissions to one task the principal may list.

        Students that can see the task get their own submissions; everyone
        else needs ``list_submissions`` on the task and gets all of them.

        Raises:
            NotFoundError: If the task does not exist
            ForbiddenError: If the principal may not list submissions of the task
        """
        query = db.query(Submission).filter(Submission.task_id == task_id)

        if principal.is_student:
            self.task_handler.authorize(db, principal, task_id, Action.VIEW)
            return query.filter(Submission.user_id == principal.user_id)

        self.task_handler.authorize(db, principal, task_id, Action.LIST_SUBMISSIONS)
        return query

    def query_for_group(self, db: Session, principal: Principal, group_id: int) -> Query:
        """
        Query of the submissions made by members of a group.

        Students never list a group's submissions; teachers need ``manage``
        on the group.

        Raises:
            NotFoundError: If the group does not exist
            ForbiddenError: If the principal may not list the group's submissions
        """
        self.group_handler.context(db, principal, group_id)

        if principal.is_student:
            raise ForbiddenError(
                "Students cannot list the submissions of a group",
                detail={"entity": self.group_handler.resource_name, "id": group_id},
            )

        self.group_handler.authorize(db, principal, group_id, Action.MANAGE)
        return db.query(Submission).filter(Submission.user_id.in_(GroupRepository(db).member_ids(group_id)))

    def query_for_user(self, db: Session, principal: Principal, user_id: int) -> Query:
        """
        Query of one user's submissions, narrowed to those the principal may list.

        Students may only list their own; teachers get the ones to tasks they
        created or edit as collaborators.

        Raises:
            NotFoundError: If the user does not exist
            ForbiddenError: If a student asks for another user's submissions
        """
        if UserRepository(db).get(user_id) is None:
            raise NotFoundError("User not found", detail={"entity": "user", "id": user_id})

        if principal.is_student and user_id != principal.user_id:
            raise ForbiddenError(
                "Students can only list their own submissions",
                detail={"entity": self.resource_name, "user_id": user_id},
            )

        return self.build_query(principal, db).filter(Submission.user_id == user_id)
