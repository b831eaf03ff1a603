"""
CLI tests against a temporary SQLite database file.
"""

import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from grading_backend.cli.cli import cli
from grading_backend.model import Task, User
from grading_backend.model.types import UserRole


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'grading.db'}"


@pytest.fixture
def runner(database_url):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--database-url", database_url, *args])

    result = invoke("db", "init")
    assert result.exit_code == 0, result.output
    return invoke


@pytest.fixture
def seed(database_url, runner):
    engine = create_engine(database_url)
    db = sessionmaker(bind=engine)()
    try:
        db.add(User(id=1, name="Ada", surname="Lovelace", email="ada@example.org", username="ada", role=UserRole.TEACHER))
        db.add(User(id=2, name="Alan", surname="Turing", email="alan@example.org", username="alan", role=UserRole.STUDENT))
        db.add(Task(id=1, title="Warmup", created_by=1))
        db.commit()
    finally:
        db.close()
        engine.dispose()


class TestSessionCommands:
    def test_create_and_invalidate(self, runner, seed):
        result = runner("sessions", "create", "--user-id", "1")
        assert result.exit_code == 0, result.output
        token = result.output.splitlines()[0].strip()
        assert len(token) >= 32

        result = runner("sessions", "invalidate", token)
        assert result.exit_code == 0, result.output

        result = runner("sessions", "invalidate", token)
        assert result.exit_code == 0, result.output

    def test_invalidate_unknown_token(self, runner, seed):
        result = runner("sessions", "invalidate", "never-issued")

        assert result.exit_code == 1
        assert "ERR_SESSION_NOT_FOUND" in result.output

    def test_create_for_unknown_user(self, runner, seed):
        result = runner("sessions", "create", "--user-id", "99")

        assert result.exit_code == 1
        assert "ERR_NOT_FOUND" in result.output

    def test_revoke_user_and_purge(self, runner, seed):
        for _ in range(2):
            assert runner("sessions", "create", "-u", "2").exit_code == 0

        result = runner("sessions", "revoke-user", "-u", "2")
        assert result.exit_code == 0
        assert "Invalidated 2 session(s)" in result.output

        result = runner("sessions", "purge")
        assert result.exit_code == 0
        assert "Purged 2 session(s)" in result.output


class TestAccessCommand:
    def test_creator_allowed(self, runner, seed):
        result = runner("access", "check", "-u", "1", "-k", "task", "-i", "1", "-a", "delete")

        assert result.exit_code == 0, result.output
        assert "allow" in result.output

    def test_student_denied(self, runner, seed):
        result = runner("access", "check", "-u", "2", "-k", "task", "-i", "1", "-a", "view")

        assert result.exit_code == 0, result.output
        assert "deny" in result.output

    def test_missing_task(self, runner, seed):
        result = runner("access", "check", "-u", "1", "-k", "task", "-i", "9")

        assert result.exit_code == 1
        assert "ERR_NOT_FOUND" in result.output
