"""
Session issuance and validation.

A session goes ``Active -> Expired`` once the clock reaches ``expires_at`` and
``Active -> Invalidated`` on logout; both states are terminal. Expiry is lazy:
``validate`` flips the validity flag of an expired session it encounters, so
no background sweep is needed. ``purge_expired`` only reclaims storage.
"""

import datetime
import logging
import secrets
from typing import Callable, Optional, Tuple
from sqlalchemy.orm import Session

from grading_backend.errors import (
    NotFoundError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionUserNotFoundError,
)
from grading_backend.model.auth import Session as SessionModel
from grading_backend.permissions.principal import Principal
from grading_backend.repositories.sessions import SessionRepository
from grading_backend.repositories.users import UserRepository
from grading_backend.settings import settings

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


class SessionManager:
    """Issues, validates and invalidates sessions on the caller's transaction."""

    def __init__(
        self,
        ttl: Optional[datetime.timedelta] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        self.ttl = ttl if ttl is not None else datetime.timedelta(hours=settings.SESSION_TTL_HOURS)
        self.clock = clock or utcnow

    def now(self) -> datetime.datetime:
        return as_utc(self.clock())

    def create(self, db: Session, user_id: int) -> SessionModel:
        """
        Issue a new session for a user.

        Args:
            db: Caller's database session
            user_id: Owning user

        Returns:
            The persisted, valid session

        Raises:
            NotFoundError: If the user does not exist
            StorageError: If the session cannot be persisted
        """
        if UserRepository(db).get(user_id) is None:
            raise NotFoundError("User not found", detail={"entity": "user", "id": user_id})

        now = self.now()
        session = SessionRepository(db).create(
            user_id=user_id,
            token=secrets.token_urlsafe(TOKEN_BYTES),
            created_at=now,
            expires_at=now + self.ttl,
        )
        logger.info(f"Created session {session.id} for user {user_id}")
        return session

    def resolve(self, db: Session, token: Optional[str]) -> Tuple[SessionModel, Principal]:
        """
        Resolve a token to its session and a freshly loaded principal.

        Raises:
            SessionNotFoundError: Unknown token, or the session was invalidated
            SessionExpiredError: The session reached its expiry
            SessionUserNotFoundError: The owning user no longer exists
        """
        if not token:
            raise SessionNotFoundError()

        sessions = SessionRepository(db)
        session = sessions.get_by_token(token)
        if session is None:
            raise SessionNotFoundError()

        if self.now() >= as_utc(session.expires_at):
            if session.valid:
                sessions.mark_invalid(token)
                logger.info(f"Session {session.id} of user {session.user_id} expired")
            raise SessionExpiredError()

        if not session.valid:
            raise SessionNotFoundError()

        user = UserRepository(db).get(session.user_id)
        if user is None:
            logger.warning(f"Session {session.id} belongs to missing user {session.user_id}")
            raise SessionUserNotFoundError()

        return session, Principal.from_user(user)

    def validate(self, db: Session, token: Optional[str]) -> Principal:
        """Resolve a token to the principal it authenticates."""
        _, principal = self.resolve(db, token)
        return principal

    def invalidate(self, db: Session, token: str) -> None:
        """Invalidate a session. Invalidating twice is not an error.

        Raises:
            SessionNotFoundError: If no session has this token
        """
        sessions = SessionRepository(db)
        session = sessions.get_by_token(token)
        if session is None:
            raise SessionNotFoundError()

        if session.valid:
            sessions.mark_invalid(token)
            logger.info(f"Invalidated session {session.id} of user {session.user_id}")

    def invalidate_user_sessions(self, db: Session, user_id: int) -> int:
        count = SessionRepository(db).mark_invalid_for_user(user_id)
        logger.info(f"Invalidated {count} session(s) of user {user_id}")
        return count

    def purge_expired(self, db: Session) -> int:
        """Delete expired and invalidated sessions. Returns the number deleted."""
        count = SessionRepository(db).delete_stale(self.now())
        logger.info(f"Purged {count} stale session(s)")
        return count
