import functools
import click

from grading_backend.errors import CoreError

def handle_core_errors(func):
  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except CoreError as e:
      click.echo(f"[{click.style(e.code,fg='red')}] {e.message}", err=True)
      raise click.exceptions.Exit(1)

  return wrapper
