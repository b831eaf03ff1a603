"""
Collaborator grant repository.

A grant is keyed by (resource kind, resource id, user id). ``upsert`` uses
``Session.merge`` on that primary key, so a second grant for the same pair
replaces the permission level instead of adding a row.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from grading_backend.model.access import AccessGrant
from grading_backend.model.types import Permission, ResourceKind
from .base import BaseRepository, storage_errors


class GrantRepository(BaseRepository[AccessGrant]):
    """Repository for AccessGrant database operations."""

    def __init__(self, db: Session):
        super().__init__(db, AccessGrant)

    def get(self, kind: ResourceKind, resource_id: int, user_id: int) -> Optional[AccessGrant]:
        with storage_errors("load grant"):
            return (
                self.db.query(AccessGrant)
                .filter(
                    AccessGrant.resource_kind == kind,
                    AccessGrant.resource_id == resource_id,
                    AccessGrant.user_id == user_id,
                )
                .populate_existing()
                .first()
            )

    def get_level(self, kind: ResourceKind, resource_id: int, user_id: int) -> Optional[Permission]:
        grant = self.get(kind, resource_id, user_id)
        return Permission(grant.permission) if grant is not None else None

    def list_for_resource(self, kind: ResourceKind, resource_id: int) -> List[AccessGrant]:
        with storage_errors("list grants"):
            return (
                self.db.query(AccessGrant)
                .filter(AccessGrant.resource_kind == kind, AccessGrant.resource_id == resource_id)
                .order_by(AccessGrant.created_at, AccessGrant.user_id)
                .all()
            )

    def resource_ids_for_user(self, kind: ResourceKind, user_id: int, minimum: Permission = Permission.VIEW):
        """Subquery of resource ids where the user holds at least ``minimum``."""
        levels = [level for level in Permission if level.includes(minimum)]
        return (
            select(AccessGrant.resource_id)
            .where(
                AccessGrant.resource_kind == kind,
                AccessGrant.user_id == user_id,
                AccessGrant.permission.in_(levels),
            )
        )

    def upsert(self, kind: ResourceKind, resource_id: int, user_id: int, permission: Permission) -> AccessGrant:
        with storage_errors("save grant"):
            grant = self.db.merge(AccessGrant(
                resource_kind=kind,
                resource_id=resource_id,
                user_id=user_id,
                permission=permission,
            ))
            self.db.flush()
            return grant

    def set_level(self, kind: ResourceKind, resource_id: int, user_id: int, permission: Permission) -> int:
        with storage_errors("update grant"):
            return (
                self.db.query(AccessGrant)
                .filter(
                    AccessGrant.resource_kind == kind,
                    AccessGrant.resource_id == resource_id,
                    AccessGrant.user_id == user_id,
                )
                .update({AccessGrant.permission: permission}, synchronize_session="fetch")
            )

    def remove(self, kind: ResourceKind, resource_id: int, user_id: int) -> int:
        with storage_errors("remove grant"):
            return (
                self.db.query(AccessGrant)
                .filter(
                    AccessGrant.resource_kind == kind,
                    AccessGrant.resource_id == resource_id,
                    AccessGrant.user_id == user_id,
                )
                .delete(synchronize_session="fetch")
            )

    def remove_for_resource(self, kind: ResourceKind, resource_id: int) -> int:
        with storage_errors("remove grants"):
            return (
                self.db.query(AccessGrant)
                .filter(AccessGrant.resource_kind == kind, AccessGrant.resource_id == resource_id)
                .delete(synchronize_session="fetch")
            )
