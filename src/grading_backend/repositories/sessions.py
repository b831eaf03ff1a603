"""
Session store backed by the ``session`` table.

Writes are single-row (or single-statement) UPDATE/DELETE statements, so a
reader sees either the fully valid row or the invalidated one.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session as DBSession

from grading_backend.model.auth import Session
from .base import BaseRepository, storage_errors


class SessionRepository(BaseRepository[Session]):
    """Repository for Session entity database operations."""

    def __init__(self, db: DBSession):
        super().__init__(db, Session)

    def get_by_token(self, token: str) -> Optional[Session]:
        """
        Load a session by its token, bypassing stale identity-map state.

        Args:
            token: Opaque session token

        Returns:
            Session if found, None otherwise
        """
        with storage_errors("load session"):
            return (
                self.db.query(Session)
                .filter(Session.token == token)
                .populate_existing()
                .first()
            )

    def create(self, user_id: int, token: str, created_at: datetime, expires_at: datetime) -> Session:
        return self.add(Session(
            token=token,
            user_id=user_id,
            created_at=created_at,
            expires_at=expires_at,
            valid=True,
        ))

    def mark_invalid(self, token: str) -> int:
        """Flip the validity flag of one session. Returns the number of rows matched."""
        with storage_errors("invalidate session"):
            return (
                self.db.query(Session)
                .filter(Session.token == token)
                .update({Session.valid: False}, synchronize_session="evaluate")
            )

    def mark_invalid_for_user(self, user_id: int) -> int:
        with storage_errors("invalidate user sessions"):
            return (
                self.db.query(Session)
                .filter(Session.user_id == user_id, Session.valid.is_(True))
                .update({Session.valid: False}, synchronize_session="fetch")
            )

    def delete_stale(self, now: datetime) -> int:
        """Delete sessions that are invalidated or expired at ``now``."""
        with storage_errors("purge sessions"):
            return (
                self.db.query(Session)
                .filter(or_(Session.valid.is_(False), Session.expires_at <= now))
                .delete(synchronize_session=False)
            )
