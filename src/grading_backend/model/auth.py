from sqlalchemy import Boolean, Column, DateTime, Index, String, text
from sqlalchemy.orm import relationship

from .base import Base
from .types import Id, UserRole, string_enum


class User(Base):
    __tablename__ = 'user'

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    surname = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    username = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255))
    role = Column(string_enum(UserRole, 'user_role'), nullable=False, server_default=text("'student'"))

    created_tasks = relationship("Task", back_populates="author", uselist=True, lazy="select")
    created_groups = relationship("Group", back_populates="author", uselist=True, lazy="select")


class Session(Base):
    """Opaque login session.

    ``user_id`` carries no foreign key. Users belong to the user-management
    subsystem; a session whose user is gone resolves to
    ``SessionUserNotFoundError``.
    """
    __tablename__ = 'session'
    __table_args__ = (
        Index('session_user_id_valid_idx', 'user_id', 'valid'),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    token = Column(String(255), nullable=False, unique=True)
    user_id = Column(Id, nullable=False)
    created_at = Column(DateTime(True), nullable=False)
    expires_at = Column(DateTime(True), nullable=False)
    valid = Column(Boolean, nullable=False, default=True, server_default=text("true"))
