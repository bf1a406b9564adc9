"""Back-office account commands."""

import sqlite3

import click
import questionary

from ..db import AdminRepository, get_db_path
from ..models.admin import Admin, AdminRole, hash_password
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table

MIN_PASSWORD_LENGTH = 8


@click.group()
@click.pass_context
def admin(ctx):
    """Manage back-office accounts."""
    ensure_initialized(ctx)


@admin.command()
@click.option("--email", "-e", required=True, help="Login email")
@click.option("--name", "-n", required=True, help="Display name")
@click.option(
    "--role",
    type=click.Choice([r.value for r in AdminRole]),
    default=AdminRole.ADMIN.value,
    show_default=True,
)
@click.option("--password", help="Password (prompted when omitted)")
@click.pass_context
@async_command
async def create(ctx, email: str, name: str, role: str, password: str | None):
    """Create a back-office account."""
    if password is None:
        password = await questionary.password("Password:").ask_async()
        confirm = await questionary.password("Repeat password:").ask_async()
        if password != confirm:
            echo_error("Passwords do not match")
            ctx.exit(1)

    if not password or len(password) < MIN_PASSWORD_LENGTH:
        echo_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        ctx.exit(1)

    repo = AdminRepository(get_db_path())
    account = Admin(
        email=email.strip().lower(),
        name=name.strip(),
        role=AdminRole(role),
        password_hash=hash_password(password),
    )
    try:
        account = await repo.create(account)
    except sqlite3.IntegrityError:
        echo_error(f"An account with email {account.email} already exists")
        ctx.exit(1)

    echo_success(f"Created {account.role.value} account {account.email} (ID: {account.id})")


@admin.command(name="list")
@async_command
async def list_admins():
    """List back-office accounts."""
    repo = AdminRepository(get_db_path())
    accounts = await repo.list_all()

    if not accounts:
        echo_info("No accounts yet. Create one with 'focus-space admin create'")
        return

    rows = [
        [
            str(a.id),
            a.email,
            a.name,
            a.role.value,
            a.created_at.strftime("%Y-%m-%d") if a.created_at else "N/A",
        ]
        for a in accounts
    ]
    click.echo()
    click.echo(format_table(["ID", "Email", "Name", "Role", "Created"], rows))
    click.echo()
    click.echo(f"Total: {len(accounts)} account(s)")
