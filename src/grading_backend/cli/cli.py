import logging
import click

from grading_backend.database import configure
from grading_backend.settings import settings

from .db import db
from .sessions import sessions
from .access import access

@click.group()
@click.option("--database-url", "database_url", envvar="DATABASE_URL", default=None, help="SQLAlchemy database URL")
def cli(database_url):
  logging.basicConfig(level=settings.LOG_LEVEL)
  configure(database_url)

cli.add_command(db,"db")
cli.add_command(sessions,"sessions")
cli.add_command(access,"access")

if __name__ == '__main__':
    cli()
