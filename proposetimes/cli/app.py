"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters import MockProviderClient, get_provider_client
from ..config import AppConfig, validate_timezone_name
from ..domain.exceptions import ProposeTimesError
from ..domain.models import TimeSlot
from ..domain.slot_selector import SlotSelector
from ..services.slot_proposer import ProposalResult, SlotProposerService, select_by_day

app = typer.Typer(
    name="proposetimes",
    help="Propose meeting times from your scheduling provider's availability",
    add_completion=False
)

console = Console()

# Recipient timezones offered by default, with display abbreviations
TIMEZONES = [
    ("Eastern (EST/EDT)", "America/New_York", "ET"),
    ("Central (CST/CDT)", "America/Chicago", "CT"),
    ("Mountain (MST/MDT)", "America/Denver", "MT"),
    ("Pacific (PST/PDT)", "America/Los_Angeles", "PT"),
    ("UTC", "UTC", "UTC"),
    ("London (GMT/BST)", "Europe/London", "GMT"),
    ("Paris (CET/CEST)", "Europe/Paris", "CET"),
    ("Tokyo (JST)", "Asia/Tokyo", "JST"),
    ("Sydney (AEST/AEDT)", "Australia/Sydney", "AEST"),
]


def get_timezone_abbr(timezone: str) -> str:
    """Short label for a known timezone, or the IANA name itself."""
    for _, value, abbr in TIMEZONES:
        if value == timezone:
            return abbr
    return timezone


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Propose meeting times from your scheduling provider's availability.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _determine_time_range(
    *,
    tz: str,
    start_option: Optional[str],
    end_option: Optional[str],
    days_ahead: int
):
    """
    Resolve the search window from explicit dates or the default look-ahead.
    Returns (start_date, end_date).
    """
    if start_option:
        start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
    else:
        start_date = pendulum.now(tz).start_of("day")

    if end_option:
        end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
    else:
        end_date = start_date.add(days=days_ahead).end_of("day")

    if end_date < start_date:
        raise ValueError("End date must not be before start date")

    return start_date, end_date


def _format_slot_time(slot: TimeSlot, timezone: str) -> str:
    """Format like 9:30am in the recipient's timezone."""
    return slot.in_timezone(timezone).format("h:mmA").lower()


def _proposal_to_dict(result: ProposalResult) -> Dict[str, Any]:
    return {
        "timezone": result.timezone,
        "duration": result.duration,
        "total_available": result.total_available,
        "days": {
            day_key: [slot.to_dict() for slot in slots]
            for day_key, slots in result.days.items()
        },
    }


def _print_proposal(result: ProposalResult) -> None:
    """Render the selected slots as a table grouped by day."""
    if not result.days:
        console.print(
            "[yellow]⚠ No available slots found.[/yellow]\n"
            "Try a longer date range."
        )
        return

    tz_abbr = get_timezone_abbr(result.timezone)
    label = f"{tz_abbr}, {result.duration} min" if result.duration else tz_abbr
    table = Table(
        title=f"Proposed times ({label})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Times")

    for day_key, slots in result.days.items():
        day_label = slots[0].in_timezone(result.timezone).format("ddd, MMM D")
        times = ", ".join(_format_slot_time(slot, result.timezone) for slot in slots)
        table.add_row(day_label, times)

    console.print()
    console.print(table)
    console.print(
        f"[dim]{result.slot_count} of {result.total_available} available slot(s) proposed.[/dim]\n"
    )


def _load_slots_file(path: Path) -> List[TimeSlot]:
    """
    Read slots from a JSON file.

    Accepts a list of {"start_at", "end_at"} objects, or a mapping holding
    such a list under "slots".
    """
    if not path.exists():
        raise FileNotFoundError(f"Slots file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("slots", [])
    if not isinstance(data, list):
        raise ValueError("Slots file must contain a list of slots.")

    try:
        return [TimeSlot.from_iso(item["start_at"], item["end_at"]) for item in data]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Slot entries need start_at and end_at: {exc}") from exc


@app.command()
def propose(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Days to look ahead when --end is not given")] = None,
    timezone: Annotated[Optional[str], typer.Option("--timezone", "-t", help="Recipient's IANA timezone")] = None,
    max_slots: Annotated[Optional[int], typer.Option("--max-slots", "-n", help="Maximum slots proposed per day")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", help="Meeting length in minutes; must be offered by the link")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use generated availability instead of a provider.")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the proposal as JSON.")] = False,
):
    """
    Fetch availability and propose a few times per day.

    Examples:

        proposetimes propose

        proposetimes propose --timezone Europe/London --max-slots 3

        proposetimes propose --start 2026-01-05 --end 2026-01-09

        proposetimes propose --duration 45

        proposetimes propose --mock --json
    """
    try:
        config = AppConfig.load_or_default(config_file)
        tz = validate_timezone_name(timezone or config.timezone)

        start_date, end_date = _determine_time_range(
            tz=tz,
            start_option=start,
            end_option=end,
            days_ahead=days if days is not None else config.days_ahead
        )

        if mock:
            client = MockProviderClient(
                timezone=tz,
                increment_minutes=config.selection.increment_minutes
            )
        else:
            client = get_provider_client(config)
        selector = SlotSelector(
            timezone=tz,
            max_slots=max_slots if max_slots is not None else config.selection.max_slots,
            increment_minutes=config.selection.increment_minutes
        )
        service = SlotProposerService(provider_client=client, slot_selector=selector)

        if not as_json:
            console.print(
                f"[bold cyan]🗓️  Fetching {client.name} availability[/bold cyan] "
                f"{start_date.format('ddd, MMM D')} → {end_date.format('ddd, MMM D, YYYY')}"
            )

        result = service.propose(start_date=start_date, end_date=end_date, duration=duration)

    except (FileNotFoundError, ValueError, ProposeTimesError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(_proposal_to_dict(result), indent=2))
    else:
        _print_proposal(result)


@app.command()
def select(
    slots_file: Annotated[Path, typer.Argument(help="JSON file with start_at/end_at slots")],
    timezone: Annotated[str, typer.Option("--timezone", "-t", help="Recipient's IANA timezone")] = "UTC",
    max_slots: Annotated[int, typer.Option("--max-slots", "-n", help="Maximum slots selected per day")] = 4,
    increment: Annotated[int, typer.Option("--increment", help="Expected minutes between consecutive slots")] = 30,
    as_json: Annotated[bool, typer.Option("--json", help="Print the selection as JSON.")] = False,
):
    """
    Run slot selection over slots stored in a JSON file.
    """
    try:
        tz = validate_timezone_name(timezone)
        slots = _load_slots_file(slots_file)
        selector = SlotSelector(timezone=tz, max_slots=max_slots, increment_minutes=increment)
        result = select_by_day(slots, selector)

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(_proposal_to_dict(result), indent=2))
    else:
        _print_proposal(result)


@app.command()
def timezones():
    """
    List the common recipient timezones.
    """
    table = Table(
        title="Recipient timezones",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name", style="bold yellow")
    table.add_column("IANA")
    table.add_column("Abbr.", style="dim")

    for title, value, abbr in TIMEZONES:
        table.add_row(title, value, abbr)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]proposetimes[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
