import click

from grading_backend.cli.utils import handle_core_errors
from grading_backend.database import transaction
from grading_backend.errors import NotFoundError
from grading_backend.model.types import ResourceKind
from grading_backend.permissions.core import get_handler
from grading_backend.permissions.principal import Action, Principal
from grading_backend.repositories.users import UserRepository

@click.command()
@click.option("--user-id", "-u", "user_id", type=int, required=True)
@click.option("--kind", "-k", "kind", type=click.Choice([k.value for k in ResourceKind]), required=True)
@click.option("--id", "-i", "resource_id", type=int, required=True)
@click.option("--action", "-a", "action", type=click.Choice([a.value for a in Action]), default=Action.VIEW.value)
@handle_core_errors
def check(user_id, kind, resource_id, action):
  """Evaluate whether a user may perform an action on a resource."""

  with transaction() as db:
    user = UserRepository(db).get(user_id)
    if user is None:
      raise NotFoundError("User not found")

    decision = get_handler(kind).decide(db, Principal.from_user(user), resource_id, action)

  color = "green" if decision.allowed else "red"
  click.echo(f"{action} on {kind} {resource_id} for user {user_id}: {click.style(decision.value,fg=color)}")

@click.group()
def access():
  pass

access.add_command(check,"check")
