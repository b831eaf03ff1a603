"""
Pure evaluator tests using hand-built resource contexts.
"""

import pytest

from grading_backend.errors import InvalidRequestError
from grading_backend.model.types import Permission, ResourceKind, UserRole
from grading_backend.permissions.evaluator import Decision, ResourceContext, evaluate
from grading_backend.permissions.principal import ACTION_LEVELS, Action, Principal, required_level


def make_principal(user_id: int, role: UserRole = UserRole.STUDENT) -> Principal:
    return Principal(user_id=user_id, role=role)


def task(created_by: int = 1, **facts) -> ResourceContext:
    return ResourceContext(kind=ResourceKind.TASK, resource_id=1, created_by=created_by, **facts)


class TestActionLevels:
    def test_every_action_has_a_level(self):
        assert set(ACTION_LEVELS) == set(Action)

    def test_levels_are_ordered(self):
        assert Permission.MANAGE.includes(Permission.EDIT)
        assert Permission.EDIT.includes(Permission.VIEW)
        assert not Permission.VIEW.includes(Permission.EDIT)
        assert not Permission.EDIT.includes(Permission.MANAGE)

    def test_string_actions(self):
        assert required_level("edit") == Permission.EDIT
        assert required_level("list_collaborators") == Permission.VIEW
        assert required_level("delete") == Permission.MANAGE

    def test_unknown_action(self):
        with pytest.raises(InvalidRequestError):
            required_level("launch")

    def test_unknown_action_is_rejected_before_rules(self):
        admin = make_principal(99, UserRole.ADMIN)
        with pytest.raises(InvalidRequestError):
            evaluate(admin, task(), "launch")


class TestAdmin:
    @pytest.mark.parametrize("kind", list(ResourceKind))
    @pytest.mark.parametrize("action", list(Action))
    def test_admin_allowed_everything(self, kind, action):
        admin = make_principal(99, UserRole.ADMIN)
        context = ResourceContext(kind=kind, resource_id=12345)

        assert evaluate(admin, context, action) == Decision.ALLOW


class TestCreator:
    @pytest.mark.parametrize("action", list(Action))
    def test_creator_allowed_everything(self, action):
        assert evaluate(make_principal(7), task(created_by=7), action) == Decision.ALLOW

    def test_creator_unaffected_by_grant(self):
        creator = make_principal(7)
        for level in (None, Permission.VIEW, Permission.EDIT):
            assert evaluate(creator, task(created_by=7, grant=level), Action.MANAGE) == Decision.ALLOW


class TestGrants:
    def test_view_grant(self):
        principal = make_principal(9)
        context = task(grant=Permission.VIEW)

        assert evaluate(principal, context, Action.VIEW) == Decision.ALLOW
        assert evaluate(principal, context, Action.EDIT) == Decision.DENY
        assert evaluate(principal, context, Action.MANAGE) == Decision.DENY

    def test_edit_grant_on_task_of_student_7(self):
        """Student 7 created task 1 and granted principal 9 edit."""
        principal = make_principal(9)
        context = task(created_by=7, grant=Permission.EDIT)

        assert evaluate(principal, context, Action.EDIT) == Decision.ALLOW
        assert evaluate(principal, context, Action.MANAGE) == Decision.DENY

    @pytest.mark.parametrize("level", list(Permission))
    def test_grant_allows_exactly_its_level(self, level):
        principal = make_principal(9)
        context = task(grant=level)

        for action, required in ACTION_LEVELS.items():
            expected = Decision.ALLOW if level.includes(required) else Decision.DENY
            assert evaluate(principal, context, action) == expected

    @pytest.mark.parametrize("action", list(Action))
    def test_no_relation_denied(self, action):
        assert evaluate(make_principal(9, UserRole.TEACHER), task(), action) == Decision.DENY

    def test_string_action(self):
        assert evaluate(make_principal(9), task(grant=Permission.EDIT), "edit") == Decision.ALLOW


class TestCarveOuts:
    def test_assigned_task(self):
        principal = make_principal(5)
        context = task(assigned=True)

        assert evaluate(principal, context, Action.VIEW).allowed
        assert evaluate(principal, context, Action.SUBMIT).allowed
        assert not evaluate(principal, context, Action.EDIT).allowed
        assert not evaluate(principal, context, Action.LIST_COLLABORATORS).allowed

    def test_group_member(self):
        principal = make_principal(5)
        context = ResourceContext(kind=ResourceKind.GROUP, resource_id=3, created_by=1, member=True)

        assert evaluate(principal, context, Action.VIEW).allowed
        assert evaluate(principal, context, Action.LIST_TASKS).allowed
        assert not evaluate(principal, context, Action.LIST_MEMBERS).allowed
        assert not evaluate(principal, context, Action.MANAGE_MEMBERS).allowed


class TestSubmissions:
    def submission(self, **facts) -> ResourceContext:
        facts.setdefault("author_id", 5)
        facts.setdefault("task_created_by", 1)
        return ResourceContext(kind=ResourceKind.SUBMISSION, resource_id=40, **facts)

    def test_author_views_own(self):
        author = make_principal(5)

        assert evaluate(author, self.submission(), Action.VIEW).allowed
        assert not evaluate(author, self.submission(), Action.EDIT).allowed
        assert not evaluate(author, self.submission(), Action.DELETE).allowed

    def test_other_student_denied(self):
        assert not evaluate(make_principal(6), self.submission(), Action.VIEW).allowed

    def test_task_creator_teacher(self):
        teacher = make_principal(1, UserRole.TEACHER)

        assert evaluate(teacher, self.submission(), Action.VIEW).allowed
        assert evaluate(teacher, self.submission(), Action.DELETE).allowed

    def test_student_task_creator_does_not_see_others(self):
        student = make_principal(1, UserRole.STUDENT)
        assert not evaluate(student, self.submission(), Action.VIEW).allowed

    def test_task_collaborator_needs_edit(self):
        teacher = make_principal(2, UserRole.TEACHER)

        assert not evaluate(teacher, self.submission(task_grant=Permission.VIEW), Action.VIEW).allowed
        assert evaluate(teacher, self.submission(task_grant=Permission.EDIT), Action.VIEW).allowed
        assert not evaluate(teacher, self.submission(task_grant=Permission.EDIT), Action.DELETE).allowed
        assert evaluate(teacher, self.submission(task_grant=Permission.MANAGE), Action.DELETE).allowed
