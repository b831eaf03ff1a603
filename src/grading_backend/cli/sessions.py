import datetime
import click

from grading_backend.cli.utils import handle_core_errors
from grading_backend.database import transaction
from grading_backend.permissions.sessions import SessionManager

@click.command()
@click.option("--user-id", "-u", "user_id", type=int, required=True)
@click.option("--ttl-hours", "ttl_hours", type=int, default=None, help="Session lifetime, defaults to SESSION_TTL_HOURS")
@handle_core_errors
def create_session(user_id, ttl_hours):

  ttl = datetime.timedelta(hours=ttl_hours) if ttl_hours is not None else None

  with transaction() as db:
    session = SessionManager(ttl=ttl).create(db, user_id)
    token, expires_at = session.token, session.expires_at

  click.echo(token)
  click.echo(f"expires at {expires_at.isoformat()}", err=True)

@click.command()
@click.argument("token")
@handle_core_errors
def invalidate_session(token):

  with transaction() as db:
    SessionManager().invalidate(db, token)

  click.echo("Session invalidated")

@click.command()
@click.option("--user-id", "-u", "user_id", type=int, required=True)
@handle_core_errors
def revoke_user(user_id):

  with transaction() as db:
    count = SessionManager().invalidate_user_sessions(db, user_id)

  click.echo(f"Invalidated {count} session(s) of user {user_id}")

@click.command()
@handle_core_errors
def purge_sessions():

  with transaction() as db:
    count = SessionManager().purge_expired(db)

  click.echo(f"Purged {count} session(s)")

@click.group()
def sessions():
  pass

sessions.add_command(create_session,"create")
sessions.add_command(invalidate_session,"invalidate")
sessions.add_command(revoke_user,"revoke-user")
sessions.add_command(purge_sessions,"purge")
