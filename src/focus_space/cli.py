"""CLI entry point for focus-space."""

import click

from . import __version__
from .commands import admin, bookings, ig_token, init, serve
from .core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="focus-space")
def main():
    """focus-space: Focus Space studio back office.

    Example usage:

        # Create the database
        focus-space init

        # Create a back-office account
        focus-space admin create --email owner@example.com --name Owner

        # Run the API
        focus-space serve

        # Review bookings
        focus-space bookings list --status pending
        focus-space bookings status 12 confirmed
    """
    configure_logging()


# Register commands
main.add_command(init)
main.add_command(serve)
main.add_command(admin)
main.add_command(bookings)
main.add_command(ig_token)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
