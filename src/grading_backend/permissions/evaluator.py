"""
Rule-based permission evaluation.

``evaluate`` is a pure function of the principal, the facts loaded for one
resource (``ResourceContext``) and the requested action. It never touches
storage and never raises for a denial; the facades load the context and turn
``Decision.DENY`` into ``ForbiddenError`` where a call is gated.

Rules are tried in order and the first one that allows wins. There is no
explicit deny rule, so the most permissive applicable rule decides.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional, Union
from pydantic import BaseModel, ConfigDict

from grading_backend.model.types import Permission, ResourceKind
from grading_backend.permissions.principal import Action, Principal, parse_action, required_level

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


class ResourceContext(BaseModel):
    """Facts about one resource, as seen by one principal."""

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    resource_id: int
    created_by: Optional[int] = None
    # Grant of the evaluated principal on this resource
    grant: Optional[Permission] = None
    # Tasks: assigned to the principal directly or through a group
    assigned: bool = False
    # Groups: the principal is a member
    member: bool = False
    # Submissions
    author_id: Optional[int] = None
    task_created_by: Optional[int] = None
    task_grant: Optional[Permission] = None


Rule = Callable[[Principal, ResourceContext, Action], bool]

TASK_ASSIGNEE_ACTIONS = frozenset({Action.VIEW, Action.SUBMIT})
GROUP_MEMBER_ACTIONS = frozenset({Action.VIEW, Action.LIST_TASKS})
SUBMISSION_AUTHOR_ACTIONS = frozenset({Action.VIEW})


def admin_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    return principal.is_admin


def creator_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    return context.created_by is not None and context.created_by == principal.user_id


def grant_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    return context.grant is not None and context.grant.includes(required_level(action))


def task_assignee_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    return context.kind == ResourceKind.TASK and context.assigned and action in TASK_ASSIGNEE_ACTIONS


def group_member_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    return context.kind == ResourceKind.GROUP and context.member and action in GROUP_MEMBER_ACTIONS


def submission_author_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    return (
        context.kind == ResourceKind.SUBMISSION
        and context.author_id == principal.user_id
        and action in SUBMISSION_AUTHOR_ACTIONS
    )


def submission_task_rule(principal: Principal, context: ResourceContext, action: Action) -> bool:
    """Teachers reach submissions through the task they were submitted to.

    The task creator counts as ``manage`` on the task; anyone else needs a
    task grant of at least ``edit`` and at least the action's level.
    """
    if context.kind != ResourceKind.SUBMISSION or principal.is_student:
        return False

    if context.task_created_by is not None and context.task_created_by == principal.user_id:
        level = Permission.MANAGE
    else:
        level = context.task_grant

    if level is None or not level.includes(Permission.EDIT):
        return False
    return level.includes(required_level(action))


RULES: List[Rule] = [
    admin_rule,
    creator_rule,
    grant_rule,
    task_assignee_rule,
    group_member_rule,
    submission_author_rule,
    submission_task_rule,
]


def evaluate(principal: Principal, context: ResourceContext, action: Union[Action, str]) -> Decision:
    """
    Decide whether ``principal`` may perform ``action`` on the resource.

    Args:
        principal: Authenticated principal
        context: Facts loaded for the resource
        action: Requested action, as ``Action`` or its string value

    Returns:
        ``Decision.ALLOW`` if any rule allows, ``Decision.DENY`` otherwise

    Raises:
        InvalidRequestError: If ``action`` is not a known action
    """
    action = parse_action(action)

    for rule in RULES:
        if rule(principal, context, action):
            logger.debug(
                f"Allow {action.value} on {context.kind.value} {context.resource_id} "
                f"for user {principal.user_id} ({rule.__name__})"
            )
            return Decision.ALLOW

    logger.debug(
        f"Deny {action.value} on {context.kind.value} {context.resource_id} for user {principal.user_id}"
    )
    return Decision.DENY
