"""Instagram token commands."""

import click

from ..services.instagram import InstagramTokenManager
from .base import async_command, echo_error, echo_info, echo_success, echo_warning


@click.group(name="ig-token")
def ig_token():
    """Inspect and refresh the Instagram access token."""


@ig_token.command()
def status():
    """Show the cached token status."""
    info = InstagramTokenManager().status()
    if not info["has_cache"]:
        echo_warning("No token cache yet; the next refresh will run")
        return

    click.echo(f"Expires at:    {info['expires_at']}")
    click.echo(f"Days left:     {info['days_left']}")
    click.echo(f"Last refresh:  {info['last_refresh']}")
    click.echo(f"Refresh count: {info['refresh_count']}")
    if info["is_expiring_soon"]:
        echo_warning("Token is expiring soon")
    else:
        echo_info("Token is healthy")


@ig_token.command()
@click.option("--force", "-f", is_flag=True, help="Refresh even if not expiring soon")
@click.pass_context
@async_command
async def refresh(ctx, force: bool):
    """Refresh the token when it is close to expiring."""
    result = await InstagramTokenManager().refresh(force=force)
    if not result.success:
        echo_error(result.message)
        ctx.exit(1)
    echo_success(result.message)
