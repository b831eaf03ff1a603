from sqlalchemy import Column, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from .base import Base
from .types import Id, Permission, ResourceKind, string_enum


class AccessGrant(Base):
    """Collaborator grant: one row per (resource, user).

    Resource creators are not stored here; they hold ``manage`` implicitly.
    """
    __tablename__ = 'access_control'
    __table_args__ = (
        Index('access_control_user_idx', 'user_id', 'resource_kind'),
    )

    resource_kind = Column(string_enum(ResourceKind, 'resource_kind'), primary_key=True, nullable=False)
    resource_id = Column(Id, primary_key=True, nullable=False)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    permission = Column(string_enum(Permission, 'permission'), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", lazy="joined")
