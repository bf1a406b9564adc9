"""Web server command."""

import click

from .base import ensure_initialized


@click.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool):
    """Start the API server.

    Examples:

        # Start on default port (8000)
        focus-space serve

        # Expose to network (all interfaces)
        focus-space serve --host 0.0.0.0

        # Development mode with auto-reload
        focus-space serve --reload
    """
    ensure_initialized(ctx)

    import uvicorn

    click.echo()
    click.echo(click.style("Starting focus-space API server...", fg="green"))
    click.echo()
    click.echo(f"  Local:   http://{host}:{port}")
    click.echo(f"  Docs:    http://{host}:{port}/docs")
    click.echo()
    click.echo("Press Ctrl+C to stop the server.")
    click.echo()

    uvicorn.run(
        "focus_space.web:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )
