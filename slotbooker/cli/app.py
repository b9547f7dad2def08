"""
Main CLI application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.console_notifier import ConsoleNotifier
from ..adapters.json_store import JsonFileBookingStore
from ..adapters.memory_store import InMemoryBookingStore
from ..adapters.plunk_client import PlunkEmailClient
from ..config import AppConfig, get_default_config_path
from ..domain.booking_flow import SelectionState
from ..domain.exceptions import SlotBookingError
from ..domain.models import AvailabilityResult, slot_sort_key, weekday_name
from ..domain.slot_grid import generate_slots
from ..services.availability import AvailabilityFilter
from ..services.booking_coordinator import BookingCoordinator, BookingReceipt, NotificationOutcome

app = typer.Typer(
    name="slotbooker",
    help="Publish meeting types and book time slots without double-booking",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MemoryOption = Annotated[
    bool,
    typer.Option("--memory", help="Use an in-memory store and print emails instead of sending them."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show log output.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_store(config: AppConfig, memory: bool):
    if memory or config.store.backend == "memory":
        return InMemoryBookingStore()
    return JsonFileBookingStore(config.store.path)


def _build_notifier(config: AppConfig, memory: bool):
    if memory or config.notification.provider == "console":
        return ConsoleNotifier()

    api_key = os.environ.get(config.notification.api_key_env, "")
    if not api_key:
        console.print(
            f"[bold red]Error:[/bold red] Set {config.notification.api_key_env} "
            "to send emails through Plunk."
        )
        raise typer.Exit(1)
    return PlunkEmailClient(api_key=api_key, timeout=config.notification.timeout_seconds)


def _build_services(config: AppConfig, memory: bool):
    catalog = config.build_catalog()
    store = _build_store(config, memory)
    availability = AvailabilityFilter(
        catalog,
        store,
        collection=config.store.collection,
        timeout_seconds=config.store.timeout_seconds,
    )
    coordinator = BookingCoordinator(
        catalog,
        store,
        _build_notifier(config, memory),
        collection=config.store.collection,
        timezone=config.timezone,
        subject=config.notification.subject,
        store_timeout_seconds=config.store.timeout_seconds,
        notification_timeout_seconds=config.notification.timeout_seconds,
    )
    return availability, coordinator


def _print_slots(result: AvailabilityResult) -> None:
    booked = result.booked_slots
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time", style="bold")
    table.add_column("Status")

    for idx, slot in enumerate(result.candidate_slots, 1):
        status = "[red]booked[/red]" if slot in booked else "[green]open[/green]"
        table.add_row(str(idx), slot, status)

    console.print(table)


def _pick_slot(result: AvailabilityResult, answer: str) -> str:
    """Resolve a wizard answer given as list number or label."""
    answer = answer.strip()
    if answer.isdigit():
        idx = int(answer) - 1
        if 0 <= idx < len(result.candidate_slots):
            return result.candidate_slots[idx]
    return answer.upper()


async def _commit_and_notify(
    coordinator: BookingCoordinator,
    selection: SelectionState,
) -> tuple[BookingReceipt, Optional[NotificationOutcome]]:
    receipt = await coordinator.commit_booking(
        selection.meeting_type_id,
        selection.date,
        selection.time_slot,
        selection.visitor(),
    )
    try:
        outcome = await receipt.notification
    except asyncio.CancelledError:
        outcome = None
    return receipt, outcome


@app.command()
def slots(
    duration: Annotated[int, typer.Argument(help="Meeting duration in minutes")],
):
    """
    Show the slot grid for a meeting duration.
    """
    try:
        grid = generate_slots(duration)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]{len(grid)} slot(s) of {duration} min:[/bold cyan]\n")
    for label in grid:
        console.print(f"  {label}")
    console.print()


@app.command()
def meeting_types(config_file: ConfigOption = None):
    """
    List all configured meeting types.
    """
    config = _load_config(config_file)

    if not config.meeting_types:
        console.print("[yellow]No meeting types defined in the config file.[/yellow]")
        return

    catalog = config.build_catalog()
    table = Table(
        title=f"Meeting types of {catalog.business.name}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Duration", justify="right")
    table.add_column("Days", style="dim")
    table.add_column("Location", style="dim")

    for meeting_type in catalog:
        days = ", ".join(
            day[:3] for day, enabled in meeting_type.weekly_availability.items() if enabled
        )
        table.add_row(
            meeting_type.id,
            meeting_type.name,
            f"{meeting_type.duration_minutes} min",
            days or "-",
            meeting_type.location_descriptor,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def availability(
    meeting_type: Annotated[str, typer.Argument(help="Meeting type id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    memory: MemoryOption = False,
    verbose: VerboseOption = False,
):
    """
    Show which slots of a meeting type are still open on a date.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    availability_filter, _ = _build_services(config, memory)

    try:
        result = asyncio.run(availability_filter.check_availability(meeting_type, date))
    except SlotBookingError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    if not result.enabled:
        console.print(
            f"[yellow]⚠ {meeting_type} cannot be booked on "
            f"{weekday_name(result.date)}, {result.date.to_date_string()}.[/yellow]\n"
        )
        return

    console.print(
        f"[bold green]✓ {len(result.open_slots)} of {len(result.candidate_slots)} "
        f"slot(s) open on {result.date.to_date_string()}:[/bold green]\n"
    )
    _print_slots(result)
    console.print()


@app.command()
def book(
    meeting_type: Annotated[str, typer.Argument(help="Meeting type id")],
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Prompted when omitted.")] = None,
    slot: Annotated[Optional[str], typer.Argument(help="Time slot, e.g. '10:00 AM'. Prompted when omitted.")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Your name")] = None,
    email: Annotated[Optional[str], typer.Option("--email", help="Your email address")] = None,
    note: Annotated[str, typer.Option("--note", help="Note for the host")] = "",
    config_file: ConfigOption = None,
    memory: MemoryOption = False,
    verbose: VerboseOption = False,
):
    """
    Book a time slot. Missing details are asked for interactively.

    Examples:

        slotbooker book intro-call 2026-10-20 "10:00 AM" --name "Ada" --email ada@example.com

        slotbooker book intro-call
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    availability_filter, coordinator = _build_services(config, memory)

    selection = SelectionState(meeting_type_id=meeting_type)

    try:
        # 1. Date and time
        if date is None:
            date = typer.prompt(
                "→ Date (YYYY-MM-DD)",
                default=pendulum.today(config.timezone).to_date_string()
            ).strip()

        result = asyncio.run(availability_filter.check_availability(meeting_type, date))
        selection = selection.choose_date(result.date, result.enabled)

        if not result.enabled:
            console.print(
                f"[yellow]⚠ {meeting_type} cannot be booked on "
                f"{weekday_name(result.date)}, {result.date.to_date_string()}.[/yellow]"
            )
            raise typer.Exit(1)

        if slot is None:
            _print_slots(result)
            slot = _pick_slot(result, typer.prompt("→ Time slot (number or time)"))
        elif slot in result.booked_slots:
            console.print(f"[yellow]⚠ {slot} looks taken already, trying anyway.[/yellow]")

        selection = selection.choose_slot(slot.strip())
        if not selection.can_proceed:
            console.print("[bold red]Error:[/bold red] Pick a date and a time slot first.")
            raise typer.Exit(1)
        selection = selection.proceed()

        # 2. Details
        selection = selection.with_visitor(
            name=name if name is not None else typer.prompt("→ Name"),
            email=email if email is not None else typer.prompt("→ Email"),
            note=note,
        )
        if not selection.can_submit:
            console.print("[bold red]Error:[/bold red] Name and email are required.")
            raise typer.Exit(1)

        receipt, outcome = asyncio.run(_commit_and_notify(coordinator, selection))

    except SlotBookingError as e:
        console.print(f"[bold red]Error scheduling meeting:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(
        f"\n[bold green]✓ Meeting scheduled successfully![/bold green] "
        f"{receipt.booking.formatted_date} at {receipt.booking.time_slot} "
        f"(booking {receipt.booking_id})"
    )
    if outcome is None or not outcome.delivered:
        reason = outcome.error if outcome is not None else "cancelled"
        console.print(f"[yellow]⚠ Error sending confirmation email: {reason}[/yellow]")
    else:
        console.print(f"Confirmation sent to {receipt.booking.visitor.email}.")
    console.print()


@app.command()
def bookings(
    meeting_type: Annotated[str, typer.Argument(help="Meeting type id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the bookings stored for a meeting type on a date.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    availability_filter, _ = _build_services(config, memory=False)

    try:
        found = asyncio.run(availability_filter.fetch_bookings(meeting_type, date))
    except SlotBookingError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not found:
        console.print("[yellow]No bookings found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Time", style="bold")
    table.add_column("Name")
    table.add_column("Email", style="dim")
    table.add_column("Note", style="dim")
    for booking in sorted(found, key=slot_sort_key):
        table.add_row(
            booking.time_slot,
            booking.visitor.name,
            booking.visitor.email,
            booking.visitor.note,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
