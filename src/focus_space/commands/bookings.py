"""Booking management commands."""

import click

from ..core.errors import FocusSpaceError
from ..db import BookingRepository, get_db_path
from ..models.booking import STATUS_LABELS, BookingStatus, BookingType
from ..services.bookings import BookingService
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table


@click.group()
@click.pass_context
def bookings(ctx):
    """View and manage bookings."""
    ensure_initialized(ctx)


@bookings.command(name="list")
@click.option("--status", "-s", type=click.Choice([s.value for s in BookingStatus]))
@click.option("--type", "-t", "booking_type", type=click.Choice([t.value for t in BookingType]))
@click.option("--search", help="Match name, email, phone, number or course")
@click.option("--limit", "-n", default=20, show_default=True, type=int)
@async_command
async def list_bookings(status: str | None, booking_type: str | None, search: str | None, limit: int):
    """List recent bookings."""
    repo = BookingRepository(get_db_path())
    page = await repo.list_page(
        status=BookingStatus(status) if status else None,
        booking_type=BookingType(booking_type) if booking_type else None,
        search=search,
        limit=limit,
    )

    if not page.items:
        echo_info("No bookings found")
        return

    rows = []
    for b in page.items:
        slot = f"{b.booking_date} {b.start_time}" if b.booking_date else (b.preferred_date or "-")
        rows.append([
            str(b.id),
            b.booking_number,
            b.booking_type.value,
            b.customer_name,
            b.course_name or "-",
            slot,
            STATUS_LABELS[b.status],
        ])

    click.echo()
    click.echo(format_table(["ID", "Number", "Type", "Customer", "Course", "Slot", "Status"], rows))
    click.echo()
    click.echo(f"Showing {len(page.items)} of {page.total} booking(s)")


@bookings.command()
@click.argument("booking_id", type=int)
@click.pass_context
@async_command
async def show(ctx, booking_id: int):
    """Show details of a booking."""
    repo = BookingRepository(get_db_path())
    booking = await repo.get(booking_id)
    if not booking:
        echo_error(f"Booking ID {booking_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo("=" * 60)
    click.echo(f"Booking {booking.booking_number} (ID: {booking.id})")
    click.echo("=" * 60)
    click.echo(f"Type:     {booking.booking_type.value}")
    click.echo(f"Status:   {booking.status.value} ({STATUS_LABELS[booking.status]})")
    click.echo(f"Customer: {booking.customer_name} <{booking.customer_email}> {booking.customer_phone}")
    if booking.course_name:
        click.echo(f"Course:   {booking.course_name} ({booking.course_category.value})")
    if booking.booking_date:
        click.echo(f"Slot:     {booking.booking_date} {booking.start_time}-{booking.end_time}")
    click.echo(f"People:   {booking.participant_count}")
    click.echo(f"Price:    NT$ {booking.total_price:,.0f}")
    if booking.customer_note:
        click.echo(f"Note:     {booking.customer_note}")
    if booking.cancelled_reason:
        click.echo(f"Cancelled: {booking.cancelled_reason}")
    click.echo(f"Created:  {booking.created_at}")


@bookings.command()
@click.argument("booking_id", type=int)
@click.argument("status", type=click.Choice([s.value for s in BookingStatus]))
@click.option("--reason", help="Cancellation reason")
@click.option("--by", "actor", default="cli", show_default=True, help="Who made the change")
@click.pass_context
@async_command
async def status(ctx, booking_id: int, status: str, reason: str | None, actor: str):
    """Change the status of a booking."""
    service = BookingService(get_db_path())
    try:
        booking = await service.change_status(
            booking_id, BookingStatus(status), actor=actor, reason=reason
        )
    except FocusSpaceError as e:
        echo_error(e.message)
        ctx.exit(1)

    echo_success(f"Booking {booking.booking_number} is now {booking.status.value}")
