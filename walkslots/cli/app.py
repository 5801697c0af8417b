"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..config import AppConfig, load_config
from ..adapters.availability_client import AvailabilityClient
from ..adapters.mock_availability_client import MockAvailabilityClient
from ..domain.exceptions import FormatError, SlotError, ValidationError
from ..domain.models import CandidateSlot
from ..domain.sitting import day_time_options, is_multi_day
from ..domain.time_parser import format_time, parse_time
from ..services.booking_planner import (
    AvailabilityResult,
    AvailabilityStatus,
    BookingPlannerService,
    group_by_period,
)

app = typer.Typer(
    name="walkslots",
    help="Find bookable dog-walking and dog-sitting slots",
    add_completion=False
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled mock bookings instead of the live API.")]


def _build_service(config: AppConfig, mock: bool) -> BookingPlannerService:
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled booking data[/yellow]\n")
        client = MockAvailabilityClient()
    else:
        client = AvailabilityClient(
            base_url=config.api_base_url,
            timeout=config.request_timeout_seconds,
        )
    return BookingPlannerService(availability_client=client, config=config)


def _parse_day(value: str, tz: str) -> date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _parse_minute(value: str) -> int:
    try:
        return parse_time(value)
    except FormatError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _load_day(
    service: BookingPlannerService,
    day: date,
    service_id: str,
    exclude_booking_id: Optional[str] = None,
) -> AvailabilityResult:
    result = asyncio.run(
        service.load_day(day=day, service_id=service_id, exclude_booking_id=exclude_booking_id)
    )
    return _require_current(result)


def _require_current(result):
    """Exit if a response was superseded by a newer request."""
    if result is None:
        console.print("[yellow]⚠ Request superseded, please run the command again.[/yellow]")
        raise typer.Exit(1)
    return result


def _print_status(result: AvailabilityResult) -> bool:
    """Print the empty/error message; return True if there are slots to show."""
    if result.status is AvailabilityStatus.ERROR:
        console.print(f"[bold red]✗ {result.message}[/bold red]")
        return False
    if result.status is not AvailabilityStatus.OK:
        console.print(f"[yellow]⚠ {result.message}[/yellow] Please try another day or service.")
        return False
    return True


def _print_slot_lines(slots: list[CandidateSlot], periods: bool) -> None:
    if not periods:
        for slot in slots:
            console.print(f"  {slot.format_display()}")
        return

    for period, period_slots in group_by_period(slots).items():
        if not period_slots:
            continue
        console.print(f"[bold]{period}[/bold]")
        console.print("  " + "  ".join(format_time(s.start) for s in period_slots))


@app.command()
def slots(
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    service_id: Annotated[str, typer.Argument(help="Service id, e.g. solo, quick, meetgreet, sitting")],
    exclude_booking: Annotated[Optional[str], typer.Option("--exclude-booking", help="Booking id being rescheduled.")] = None,
    periods: Annotated[bool, typer.Option("--periods", help="Group slots into morning, afternoon and evening.")] = False,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List bookable slots for a service on one day.

    Examples:

        walkslots slots 2025-06-02 solo
        walkslots slots 2025-06-02 quick --exclude-booking 101 --mock
        walkslots slots 2025-06-02 sitting --periods
    """
    try:
        config = load_config(config_file)
        catalogue_entry = config.get_service(service_id)
        target_day = _parse_day(day, config.timezone)
        service = _build_service(config, mock)

        result = _load_day(service, target_day, catalogue_entry.id, exclude_booking)

        console.print(f"[bold cyan]{catalogue_entry.name}[/bold cyan] on {target_day.strftime('%A, %d.%m.%Y')}\n")
        if not _print_status(result):
            raise typer.Exit(1 if result.load_failed else 0)

        label = "start time(s)" if catalogue_entry.is_sitting else "slot(s)"
        console.print(f"[bold green]✓ {len(result.slots)} {label} available:[/bold green]\n")
        _print_slot_lines(result.slots, periods)
        if catalogue_entry.is_sitting:
            console.print(f"\nMinimum sitting is {result.request.min_duration_minutes} minutes. "
                          f"Use 'walkslots sitting-ends' to see end times.")
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def sitting_ends(
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Argument(help="Chosen start time (HH:mm)")],
    service_id: Annotated[str, typer.Option("--service", help="Sitting service id")] = "sitting",
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List the end times available for a single-day sitting start.
    """
    try:
        config = load_config(config_file)
        target_day = _parse_day(day, config.timezone)
        chosen_start = _parse_minute(start)
        service = _build_service(config, mock)

        result = _load_day(service, target_day, service_id)
        if result.load_failed:
            _print_status(result)
            raise typer.Exit(1)

        options = service.sitting_end_slots(result, chosen_start)
        if not options:
            console.print(f"[yellow]⚠ No end times available for a start at {start}. "
                          f"Please choose another start time.[/yellow]")
            return

        table = Table(title=f"Sitting from {start}", show_header=True, header_style="bold cyan")
        table.add_column("End", style="bold yellow")
        table.add_column("Length", style="dim")
        table.add_column("Window")
        for option in options:
            booking = service.book_slot(result, option)
            table.add_row(format_time(option.end), f"{booking.duration_minutes()} min", str(booking))

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def sitting_check(
    start_date: Annotated[str, typer.Argument(help="First day (YYYY-MM-DD)")],
    end_date: Annotated[str, typer.Argument(help="Last day (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Check whether dog sitting is possible between two dates.

    Equal dates are single-day sitting and list the start times instead.
    """
    try:
        config = load_config(config_file)
        first = _parse_day(start_date, config.timezone)
        last = _parse_day(end_date, config.timezone)
        service = _build_service(config, mock)

        outcome = _require_current(asyncio.run(service.check_sitting(start_date=first, end_date=last)))

        if isinstance(outcome, AvailabilityResult):
            if _print_status(outcome):
                console.print(f"[bold green]✓ Single-day sitting, {len(outcome.slots)} start time(s):[/bold green]")
                _print_slot_lines(outcome.slots, periods=True)
            return

        resolution = outcome
        if resolution.feasible:
            options = day_time_options(config.sitting_step_minutes)
            console.print(Panel.fit(
                f"[bold green]✓ {resolution.message}[/bold green]\n\n"
                f"Pick any start on {first} and any end on {last} "
                f"({format_time(options[0])} - {format_time(options[-1])}, every {config.sitting_step_minutes} min).",
                title="Multi-day sitting"
            ))
            return

        style = "bold red" if resolution.load_failed else "yellow"
        console.print(f"[{style}]✗ {resolution.message}[/{style}]")
        for detail in resolution.conflict_details:
            console.print(f"  • {detail}")
        raise typer.Exit(1)

    except (SlotError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def window(
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    service_id: Annotated[str, typer.Argument(help="Service id")],
    start: Annotated[str, typer.Argument(help="Start time (HH:mm)")],
    end: Annotated[Optional[str], typer.Option("--end", help="End time (HH:mm), sitting only")] = None,
    end_day: Annotated[Optional[str], typer.Option("--end-date", help="Last day (YYYY-MM-DD), multi-day sitting only")] = None,
    exclude_booking: Annotated[Optional[str], typer.Option("--exclude-booking", help="Booking id being rescheduled.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Resolve a chosen slot into the booking payload (ISO-8601 instants).
    """
    try:
        config = load_config(config_file)
        catalogue_entry = config.get_service(service_id)
        target_day = _parse_day(day, config.timezone)
        chosen_start = _parse_minute(start)
        service = _build_service(config, mock)

        last_day = _parse_day(end_day, config.timezone) if end_day else target_day

        if catalogue_entry.is_sitting and is_multi_day(target_day, last_day):
            if end is None:
                raise ValidationError("--end is required for multi-day sitting")
            booking = service.book_multi_day(
                start_day=target_day,
                start_minute=chosen_start,
                end_day=last_day,
                end_minute=_parse_minute(end),
            )
        else:
            result = _load_day(service, target_day, catalogue_entry.id, exclude_booking)
            if result.load_failed:
                _print_status(result)
                raise typer.Exit(1)

            if catalogue_entry.is_sitting:
                if end is None:
                    raise ValidationError("--end is required for sitting")
                options = service.sitting_end_slots(result, chosen_start)
                chosen_end = _parse_minute(end)
                slot = next((o for o in options if o.end == chosen_end), None)
            else:
                slot = next((s for s in result.slots if s.start == chosen_start), None)

            if slot is None:
                raise ValidationError(f"{start} is not an available slot for {catalogue_entry.name}")
            booking = service.book_slot(result, slot)

        console.print_json(json.dumps(booking.to_payload(catalogue_entry.id)))

    except (SlotError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def services(config_file: ConfigOption = None):
    """
    List all configured services.
    """
    try:
        config = load_config(config_file)

        table = Table(
            title="Services",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Duration", style="dim")

        for entry in config.services:
            if entry.is_sitting:
                duration = f"min. {config.sitting_min_duration_minutes} min, {config.sitting_step_minutes}-min steps"
            else:
                duration = f"{entry.duration_minutes} min, {config.walk_step_minutes}-min steps"
            table.add_row(entry.id, entry.name, duration)

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]walkslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
