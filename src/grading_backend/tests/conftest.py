"""
Pytest configuration and fixtures for all tests.
"""

import datetime
import itertools
import os
import sys
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure grading_backend is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from grading_backend.model import Base, Group, Submission, Task, TaskGroup, TaskUser, User, UserGroup
from grading_backend.model.types import Permission, ResourceKind, UserRole
from grading_backend.permissions.sessions import SessionManager
from grading_backend.repositories.grants import GrantRepository


class Clock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + datetime.timedelta(**kwargs)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every connection of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Create a new database session for a test."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def other_db(engine):
    """A second, independent database session on the same engine."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return Clock(datetime.datetime(2024, 3, 1, 12, 0, tzinfo=datetime.timezone.utc))


@pytest.fixture
def manager(clock):
    return SessionManager(ttl=datetime.timedelta(hours=24), clock=clock)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def factory(role: UserRole = UserRole.STUDENT, id: int = None, username: str = None) -> User:
        n = next(counter)
        username = username or f"user{n}"
        user = User(
            id=id,
            name=f"Name{n}",
            surname=f"Surname{n}",
            email=f"{username}@example.org",
            username=username,
            role=role,
        )
        db.add(user)
        db.flush()
        return user

    return factory


@pytest.fixture
def make_task(db):
    def factory(created_by: int, id: int = None, title: str = "Task") -> Task:
        task = Task(id=id, title=title, created_by=created_by)
        db.add(task)
        db.flush()
        return task

    return factory


@pytest.fixture
def make_group(db):
    def factory(created_by: int, id: int = None, name: str = "Group") -> Group:
        group = Group(id=id, name=name, created_by=created_by)
        db.add(group)
        db.flush()
        return group

    return factory


@pytest.fixture
def make_submission(db):
    def factory(task_id: int, user_id: int) -> Submission:
        submission = Submission(task_id=task_id, user_id=user_id)
        db.add(submission)
        db.flush()
        return submission

    return factory


@pytest.fixture
def grant(db):
    def factory(kind: ResourceKind, resource_id: int, user_id: int, permission: Permission):
        return GrantRepository(db).upsert(kind, resource_id, user_id, permission)

    return factory


@pytest.fixture
def assign(db):
    """Assign a task to a user directly or to a group."""

    def factory(task_id: int, user_id: int = None, group_id: int = None):
        if user_id is not None:
            db.add(TaskUser(task_id=task_id, user_id=user_id))
        if group_id is not None:
            db.add(TaskGroup(task_id=task_id, group_id=group_id))
        db.flush()

    return factory


@pytest.fixture
def join_group(db):
    def factory(group_id: int, user_id: int):
        db.add(UserGroup(group_id=group_id, user_id=user_id))
        db.flush()

    return factory
