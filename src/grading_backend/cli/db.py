import click

from grading_backend.cli.utils import handle_core_errors
from grading_backend.database import get_engine, init_db

@click.command()
@handle_core_errors
def init():
  init_db()
  click.echo(f"Created tables on {click.style(get_engine().url.render_as_string(hide_password=True),fg='green')}")

@click.group()
def db():
  pass

db.add_command(init,"init")
