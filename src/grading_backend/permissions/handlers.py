import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, Union
from sqlalchemy.orm import Session, Query

from grading_backend.errors import ForbiddenError, InvalidRequestError, NotFoundError
from grading_backend.model.types import ResourceKind
from grading_backend.permissions.evaluator import Decision, ResourceContext, evaluate
from grading_backend.permissions.principal import Action, Principal, parse_action

logger = logging.getLogger(__name__)


def parse_kind(kind: Union[ResourceKind, str]) -> ResourceKind:
    try:
        return ResourceKind(kind)
    except ValueError:
        raise InvalidRequestError(f"Unknown resource kind {kind}", detail={"entity": kind})


class PermissionHandler(ABC):
    """Authorization facade for one resource kind.

    Subclasses load the facts the evaluator needs (``load_context``) and
    scope list queries (``build_query``). Existence is always checked before
    permission: a missing resource raises ``NotFoundError`` whoever asks.
    """

    kind: ResourceKind

    def __init__(self, entity: Type[Any]):
        self.entity = entity
        self.resource_name = entity.__tablename__

    @abstractmethod
    def load_context(self, db: Session, principal: Principal, resource_id: int) -> Optional[ResourceContext]:
        """Load the evaluator facts for a resource, or None if it does not exist"""
        pass

    @abstractmethod
    def build_query(self, principal: Principal, db: Session) -> Query:
        """Build a query of the resources the principal may list"""
        pass

    def check_admin(self, principal: Principal) -> bool:
        return principal.is_admin

    def context(self, db: Session, principal: Principal, resource_id: int) -> ResourceContext:
        context = self.load_context(db, principal, resource_id)
        if context is None:
            raise NotFoundError(
                f"{self.resource_name.capitalize()} not found",
                detail={"entity": self.resource_name, "id": resource_id},
            )
        return context

    def decide(self, db: Session, principal: Principal, resource_id: int, action: Union[Action, str]) -> Decision:
        action = parse_action(action)
        return evaluate(principal, self.context(db, principal, resource_id), action)

    def can(self, db: Session, principal: Principal, resource_id: int, action: Union[Action, str]) -> bool:
        """Check whether the principal may perform ``action`` on the resource.

        Raises:
            NotFoundError: If the resource does not exist
        """
        return self.decide(db, principal, resource_id, action).allowed

    def can_view(self, db: Session, principal: Principal, resource_id: int) -> bool:
        return self.can(db, principal, resource_id, Action.VIEW)

    def can_edit(self, db: Session, principal: Principal, resource_id: int) -> bool:
        return self.can(db, principal, resource_id, Action.EDIT)

    def can_manage(self, db: Session, principal: Principal, resource_id: int) -> bool:
        return self.can(db, principal, resource_id, Action.MANAGE)

    def authorize(self, db: Session, principal: Principal, resource_id: int, action: Union[Action, str]) -> ResourceContext:
        """
        Gate an operation on a resource.

        Args:
            db: Caller's database session
            principal: Authenticated principal
            resource_id: Resource identifier
            action: Requested action

        Returns:
            The loaded resource context

        Raises:
            NotFoundError: If the resource does not exist
            ForbiddenError: If the principal may not perform the action
            InvalidRequestError: If ``action`` is not a known action
        """
        action = parse_action(action)
        context = self.context(db, principal, resource_id)

        if not evaluate(principal, context, action).allowed:
            logger.info(
                f"User {principal.user_id} denied {action.value} on {self.resource_name} {resource_id}"
            )
            raise ForbiddenError(detail={"entity": self.resource_name, "id": resource_id, "action": action.value})

        return context


class PermissionRegistry:
    """Registry for managing resource permission handlers"""

    _instance = None
    _handlers: Dict[ResourceKind, PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, kind: ResourceKind, handler: PermissionHandler):
        """Register a permission handler for a resource kind"""
        self._handlers[parse_kind(kind)] = handler

    def get_handler(self, kind: Union[ResourceKind, str]) -> Optional[PermissionHandler]:
        """Get the permission handler for a resource kind"""
        return self._handlers.get(parse_kind(kind))

    def check_permissions(self, principal: Principal, kind: Union[ResourceKind, str], db: Session) -> Query:
        """Return the query of resources of ``kind`` the principal may list"""
        handler = self.get_handler(kind)
        if not handler:
            raise ForbiddenError(detail={"entity": parse_kind(kind).value})

        return handler.build_query(principal, db)


# Global registry instance
permission_registry = PermissionRegistry()
