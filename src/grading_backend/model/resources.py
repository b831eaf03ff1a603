from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from .base import Base
from .types import Id


class Task(Base):
    __tablename__ = 'task'

    id = Column(Id, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    created_by = Column(ForeignKey('user.id'), nullable=False, index=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    author = relationship("User", back_populates="created_tasks")
    submissions = relationship("Submission", back_populates="task", uselist=True, lazy="select")


class Group(Base):
    __tablename__ = 'group'

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_by = Column(ForeignKey('user.id'), nullable=False, index=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    author = relationship("User", back_populates="created_groups")


class UserGroup(Base):
    __tablename__ = 'user_group'

    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    group_id = Column(ForeignKey('group.id', ondelete='CASCADE'), primary_key=True, nullable=False)


class TaskUser(Base):
    __tablename__ = 'task_user'

    task_id = Column(ForeignKey('task.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True, nullable=False)


class TaskGroup(Base):
    __tablename__ = 'task_group'

    task_id = Column(ForeignKey('task.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    group_id = Column(ForeignKey('group.id', ondelete='CASCADE'), primary_key=True, nullable=False)


class Submission(Base):
    __tablename__ = 'submission'

    id = Column(Id, primary_key=True, autoincrement=True)
    task_id = Column(ForeignKey('task.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(ForeignKey('user.id'), nullable=False, index=True)
    contest_id = Column(Id)
    order = Column(Integer, nullable=False, server_default="1")
    status = Column(String(32), nullable=False, server_default="received")
    submitted_at = Column(DateTime(True), nullable=False, server_default=func.now())

    task = relationship("Task", back_populates="submissions")
