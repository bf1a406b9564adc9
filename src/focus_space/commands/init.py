"""Initialize database command."""

import click

from ..db import get_db_path, init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the focus-space database.

    Creates the data directory and the SQLite schema. Safe to run again on
    an existing database.
    """
    db_path = get_db_path()

    echo_info(f"Initializing focus-space database at {db_path}")
    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Create a back-office account:")
    click.echo("     focus-space admin create --email you@example.com --name You")
    click.echo()
    click.echo("  2. Start the API server:")
    click.echo("     focus-space serve")
