"""
Session and authorization core of the grading backend.

Main components:
- principal: Principal, the closed Action set and the level each action needs
- sessions: SessionManager issuing, validating and invalidating sessions
- evaluator: pure rule-based decision function
- handlers: facade base class and registry
- handlers_impl: Task, Group and Submission facades
- core: handler registration and entry points
- collaborators: collaborator grant management
"""

from .principal import (
    Action,
    ACTION_LEVELS,
    Principal,
    parse_action,
    required_level,
)

from .evaluator import (
    Decision,
    ResourceContext,
    evaluate,
)

from .handlers import (
    PermissionHandler,
    PermissionRegistry,
    parse_kind,
    permission_registry,
)

from .handlers_impl import (
    TaskPermissionHandler,
    GroupPermissionHandler,
    SubmissionPermissionHandler,
)

from .core import (
    authorize,
    can_perform_on_resource,
    check_permissions,
    get_handler,
    initialize_permission_handlers,
)

from .sessions import SessionManager

__all__ = [
    # Principal and actions
    "Action",
    "ACTION_LEVELS",
    "Principal",
    "parse_action",
    "required_level",

    # Evaluation
    "Decision",
    "ResourceContext",
    "evaluate",

    # Handlers
    "PermissionHandler",
    "PermissionRegistry",
    "parse_kind",
    "permission_registry",
    "TaskPermissionHandler",
    "GroupPermissionHandler",
    "SubmissionPermissionHandler",

    # Entry points
    "authorize",
    "can_perform_on_resource",
    "check_permissions",
    "get_handler",
    "initialize_permission_handlers",

    # Sessions
    "SessionManager",
]
