"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.device_locator import IpApiLocator, StaticLocator
from ..adapters.mock_geocoding_client import MockGeocodingClient
from ..adapters.nominatim_client import NominatimClient
from ..config import AppConfig
from ..domain.exceptions import RegistryError
from ..domain.models import (
    WEEKDAYS,
    GeoPoint,
    RegistrationDraft,
    ResolvedAddress,
    SuggestionEntry,
    WashType,
    WeeklySchedule,
)
from ..domain.parsing import parse_price, sanitize_phone_number
from ..domain.schedule_editor import EditResult, EditStatus, ScheduleEditor
from ..services.location_resolver import LocationResolver, ResolutionOutcome
from ..services.registration import RegistrationAggregator

app = typer.Typer(
    name="washregistry",
    help="Register a car wash: weekly availability and geocoded location",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled mock places instead of the geocoding service.")]
LanguageOption = Annotated[Optional[str], typer.Option("--language", "-l", help="Result language: 'en' or 'ar'.")]

EDIT_MESSAGES = {
    EditStatus.DUPLICATE_SLOT: "This time slot already exists for that day.",
    EditStatus.NO_FREE_DEFAULT_SLOT: "No free whole-hour slot left for that day.",
    EditStatus.INVALID_INDEX: "No such day or slot.",
    EditStatus.INVALID_FIELD: "Unknown slot field.",
    EditStatus.INVALID_LABEL: f"Day must be one of: {', '.join(WEEKDAYS)}.",
}


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


def _load_config(config_file: Optional[Path]) -> AppConfig:
    try:
        return AppConfig.load_or_default(config_file)
    except (FileNotFoundError, RegistryError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_resolver(
    config: AppConfig,
    *,
    mock: bool,
    language: Optional[str],
    device_point: Optional[GeoPoint] = None,
) -> LocationResolver:
    if mock:
        client = MockGeocodingClient(result_limit=config.geocoding.result_limit)
        locator = StaticLocator(point=device_point or client.device_point())
    else:
        client = NominatimClient(config=config.geocoding)
        locator = StaticLocator(point=device_point) if device_point else IpApiLocator(config.device)

    return LocationResolver(
        geocoding_client=client,
        device_locator=locator,
        language=config.geocoding.language_param(language),
    )


def _print_suggestions(suggestions: tuple[SuggestionEntry, ...]) -> None:
    table = Table(title="Suggestions", show_header=True, header_style="bold cyan")
    table.add_column("#", style="bold yellow", justify="right")
    table.add_column("Place", style="bold")
    table.add_column("Full address", style="dim")
    table.add_column("Coordinates")

    for idx, entry in enumerate(suggestions, 1):
        table.add_row(str(idx), entry.title, entry.label, str(entry.point))

    console.print(table)


def _print_address(location: Optional[GeoPoint], address: Optional[ResolvedAddress]) -> None:
    address = address or ResolvedAddress.empty()
    console.print(Panel.fit(
        f"[bold]Street:[/bold] {address.street or '-'} {address.street_number}\n"
        f"[bold]Area:[/bold] {address.area or '-'}\n"
        f"[bold]City:[/bold] {address.city or '-'}\n"
        f"[bold]Address:[/bold] {address.display_address or '-'}\n"
        f"[bold]Coordinates:[/bold] {location or '-'}",
        title="Resolved location"
    ))


def _report_failure(outcome: ResolutionOutcome) -> None:
    if outcome.failure is not None:
        console.print(f"[yellow]⚠ Location lookup failed: {outcome.failure.value}[/yellow]")


def _print_schedule(schedule: WeeklySchedule) -> None:
    table = Table(title="Weekly availability", show_header=True, header_style="bold cyan")
    table.add_column("Day #", style="bold yellow", justify="right")
    table.add_column("Day", style="bold")
    table.add_column("Slot #", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Capacity", justify="right")

    for day_idx, day in enumerate(schedule.days, 1):
        if not day.slots:
            table.add_row(str(day_idx), day.day, "-", "-", "-", "-")
        for slot_idx, slot in enumerate(day.slots, 1):
            table.add_row(
                str(day_idx), day.day, str(slot_idx),
                slot.start_time, slot.end_time, str(slot.capacity)
            )

    console.print(table)


def _apply_edit(result: EditResult, previous: WeeklySchedule) -> WeeklySchedule:
    if not result.applied:
        console.print(f"[yellow]⚠ {EDIT_MESSAGES[result.status]}[/yellow]")
        return previous
    return result.schedule


def _prompt_index(label: str) -> int:
    """Ask for a 1-based number and return the 0-based index."""
    return typer.prompt(label, type=int) - 1


async def _choose_location(resolver: LocationResolver) -> None:
    """Wizard step: search, pick a suggestion, a raw point or the device."""
    while True:
        query = typer.prompt(
            "→ Search address (or 'here' for device location, 'lat,lon' for a point)"
        ).strip()

        if query.lower() == "here":
            outcome = await resolver.use_device_location()
        elif "," in query and _looks_like_point(query):
            lat, lon = (float(part) for part in query.split(",", 1))
            outcome = await resolver.select_point_directly((lat, lon))
        else:
            result = await resolver.search(query)
            if result.failure is not None:
                console.print(f"[yellow]⚠ Search failed: {result.failure.value}[/yellow]")
                continue
            if not result.suggestions:
                console.print("[yellow]No matches, try another search.[/yellow]")
                continue

            _print_suggestions(result.suggestions)
            choice = typer.prompt("→ Pick a number (0 to search again)", default=1, type=int)
            if not 1 <= choice <= len(result.suggestions):
                resolver.dismiss_suggestions()
                continue
            outcome = await resolver.select_suggestion(result.suggestions[choice - 1])

        _report_failure(outcome)
        if resolver.state.current_location is not None:
            _print_address(resolver.state.current_location, resolver.state.address)
            if typer.confirm("Use this location?", default=True):
                return


def _looks_like_point(value: str) -> bool:
    try:
        lat, lon = (float(part) for part in value.split(",", 1))
    except ValueError:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _collect_wash_types() -> tuple[WashType, ...]:
    wash_types = []
    while True:
        name = typer.prompt("→ Wash type name (empty to finish)", default="", show_default=False).strip()
        if not name:
            break
        price = parse_price(typer.prompt("  Price", default=""))
        description = typer.prompt("  Description", default="")
        wash_types.append(WashType(name=name, price=price, description=description))
    return tuple(wash_types) or (WashType(),)


def _edit_schedule(editor: ScheduleEditor, schedule: WeeklySchedule) -> WeeklySchedule:
    actions = "[a]dd day, [r]emove day, [l]abel day, add [s]lot, [e]dit slot, [x] remove slot, [d]one"

    while True:
        _print_schedule(schedule)
        action = typer.prompt(f"→ {actions}", default="d").strip().lower()[:1]

        if action == "d":
            return schedule
        if action == "a":
            schedule = _apply_edit(editor.add_day(schedule), schedule)
        elif action == "r":
            schedule = _apply_edit(editor.remove_day(schedule, _prompt_index("  Day #")), schedule)
        elif action == "l":
            day_index = _prompt_index("  Day #")
            label = typer.prompt("  Weekday", default="Monday").strip().capitalize()
            schedule = _apply_edit(editor.set_day_label(schedule, day_index, label), schedule)
        elif action == "s":
            schedule = _apply_edit(editor.add_slot(schedule, _prompt_index("  Day #")), schedule)
        elif action == "x":
            day_index = _prompt_index("  Day #")
            slot_index = _prompt_index("  Slot #")
            schedule = _apply_edit(editor.remove_slot(schedule, day_index, slot_index), schedule)
        elif action == "e":
            day_index = _prompt_index("  Day #")
            slot_index = _prompt_index("  Slot #")
            field = typer.prompt("  Field (start_time, end_time, capacity)").strip()
            value = typer.prompt("  Value")
            schedule = _apply_edit(
                editor.update_slot(schedule, day_index, slot_index, field, value), schedule
            )
        else:
            console.print("[yellow]Unknown action.[/yellow]")


async def _run_interactive_wizard(config: AppConfig, resolver: LocationResolver) -> RegistrationDraft:
    """
    Run the interactive wizard to gather the registration from the user.

    Returns:
        RegistrationDraft ready for the aggregator
    """
    # 1. BASIC INFORMATION
    console.print("[bold]1️⃣  Basic information[/bold]")
    name = typer.prompt("→ Business name").strip()

    phone = None
    while phone is None or len(phone) != config.registration.phone_digits:
        raw = typer.prompt(f"→ Phone number ({config.registration.phone_prefix}, {config.registration.phone_digits} digits)")
        phone = sanitize_phone_number(raw, config.registration.phone_digits)
        if phone is None or len(phone) != config.registration.phone_digits:
            console.print(f"[yellow]Please enter exactly {config.registration.phone_digits} digits.[/yellow]")

    # 2. LOCATION
    console.print("\n[bold]2️⃣  Location[/bold]")
    await _choose_location(resolver)
    address = resolver.state.address or ResolvedAddress.empty()
    if typer.confirm("Edit address fields?", default=False):
        address = resolver.override_address(
            street=typer.prompt("  Street", default=address.street),
            street_number=typer.prompt("  Number", default=address.street_number),
            area=typer.prompt("  Area", default=address.area),
            city=typer.prompt("  City", default=address.city),
        )

    # 3. WASH TYPES
    console.print("\n[bold]3️⃣  Wash types[/bold]")
    wash_types = _collect_wash_types()

    # 4. AVAILABILITY
    console.print("\n[bold]4️⃣  Availability[/bold]")
    editor = config.schedule.build_editor()
    schedule = _edit_schedule(editor, editor.new_schedule())

    console.print("\n" + "="*60 + "\n")

    return RegistrationDraft(
        name=name,
        phone_number=phone,
        address=address,
        location=resolver.state.current_location,
        wash_types=wash_types,
        schedule=schedule,
    )


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Free text address or place name")],
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    mock: MockOption = False,
):
    """
    Show location suggestions for a free text query.
    """
    config = _load_config(config_file)
    resolver = _build_resolver(config, mock=mock, language=language)

    outcome = asyncio.run(resolver.search(query))

    if outcome.failure is not None:
        console.print(f"[bold red]Error:[/bold red] search failed ({outcome.failure.value})")
        raise typer.Exit(1)
    if not outcome.suggestions:
        console.print("[yellow]No suggestions found.[/yellow]")
        return

    _print_suggestions(outcome.suggestions)


@app.command()
def reverse(
    latitude: Annotated[float, typer.Argument(help="Latitude in decimal degrees")],
    longitude: Annotated[float, typer.Argument(help="Longitude in decimal degrees")],
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    mock: MockOption = False,
):
    """
    Resolve a coordinate pair to a structured address.
    """
    config = _load_config(config_file)
    resolver = _build_resolver(config, mock=mock, language=language)

    outcome = asyncio.run(resolver.select_point_directly((latitude, longitude)))

    if outcome.failure is not None:
        console.print(f"[bold red]Error:[/bold red] reverse lookup failed ({outcome.failure.value})")
        raise typer.Exit(1)

    _print_address(outcome.location, outcome.address)


@app.command()
def locate(
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    mock: MockOption = False,
):
    """
    Resolve the current device location and its address.
    """
    config = _load_config(config_file)
    resolver = _build_resolver(config, mock=mock, language=language)

    with console.status("Getting location..."):
        outcome = asyncio.run(resolver.use_device_location())

    if outcome.failure is not None and outcome.location is None:
        console.print(f"[bold red]Error:[/bold red] device location failed ({outcome.failure.value})")
        raise typer.Exit(1)

    _report_failure(outcome)
    _print_address(outcome.location, outcome.address)


@app.command()
def register(
    config_file: ConfigOption = None,
    language: LanguageOption = None,
    mock: MockOption = False,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the payload JSON to this file.")] = None,
    latitude: Annotated[Optional[float], typer.Option("--lat", help="Fixed device latitude.")] = None,
    longitude: Annotated[Optional[float], typer.Option("--lon", help="Fixed device longitude.")] = None,
):
    """
    Interactive registration wizard producing the submission payload.

    Examples:

        # Against the public Nominatim service
        washregistry register

        # Offline with bundled mock places
        washregistry register --mock --output carwash.json
    """
    config = _load_config(config_file)

    device_point = None
    if latitude is not None or longitude is not None:
        try:
            device_point = GeoPoint(latitude=latitude, longitude=longitude)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    resolver = _build_resolver(config, mock=mock, language=language, device_point=device_point)

    console.print("\n" + "="*60)
    console.print("[bold cyan]🚗  Car wash registration[/bold cyan]")
    console.print(f"[dim]{pendulum.now().format('dddd, DD.MM.YYYY HH:mm')}[/dim]")
    console.print("="*60 + "\n")
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled places[/yellow]\n")

    draft = asyncio.run(_run_interactive_wizard(config, resolver))
    result = RegistrationAggregator(config.registration).build(draft)

    if not result.ok:
        console.print("[bold red]Registration incomplete:[/bold red]")
        for error in result.errors:
            console.print(f"  • {error}")
        raise typer.Exit(1)

    payload_json = result.payload.to_json()
    if output:
        output.write_text(payload_json, encoding="utf-8")
        console.print(f"[green]✓ Payload written to {output}[/green]")
    else:
        console.print_json(payload_json)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]washregistry[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
