from typing import Optional
from sqlalchemy.orm import Session

from grading_backend.model.auth import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Read-only access to users; the user-management subsystem owns writes."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get(self, user_id: int) -> Optional[User]:
        return self.get_by_id_optional(user_id)
