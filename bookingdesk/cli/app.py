"""
Main CLI application using Typer.
"""

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.mock_directory import MockDirectory, MockIdentity
from ..adapters.supabase_directory import SupabaseDirectory
from ..adapters.supabase_identity import SupabaseIdentity
from ..config import AppConfig, get_default_config_path
from ..domain.calendar import WEEK_DAYS, CalendarNavigator
from ..domain.clients import FILTERS, SORT_KEYS, filter_clients
from ..domain.exceptions import AvailabilityConflict, BookingDeskError, ValidationError
from ..domain.models import Booking, BookingStatus, BusinessType
from ..domain.status import next_status
from ..services.account import AccountService
from ..services.booking_session import BookingSession
from ..services.catalog import ServiceCatalog, build_service
from ..services.dashboard import DashboardService
from ..services.public_booking import build_booking_link, open_booking_session, parse_booking_link

app = typer.Typer(
    name="bookingdesk",
    help="Book appointments and manage jobs for a small business",
    add_completion=False
)

console = Console()

STATUS_STYLES = {
    BookingStatus.PENDING: "yellow",
    BookingStatus.CONFIRMED: "blue",
    BookingStatus.IN_PROGRESS: "magenta",
    BookingStatus.COMPLETED: "green",
    BookingStatus.CANCELLED: "red",
}

ConfigOption = Annotated[
    Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]
MockOption = Annotated[
    bool, typer.Option("--mock", help="Use bundled demo data instead of the hosted backend.")
]
BusinessOption = Annotated[
    Optional[str], typer.Option("--business", "-b", help="Business id. Defaults to business_id from config.")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    config_path = config_file or get_default_config_path()
    if mock and not config_path.exists():
        return AppConfig(business_id="sparkle-home")
    return AppConfig.load_from_yaml(config_path)


def _build_identity(config: AppConfig, mock: bool):
    if mock:
        return MockIdentity()
    if not config.supabase.is_configured():
        raise BookingDeskError("Supabase url and anon_key must be set in config.yaml (or use --mock).")
    return SupabaseIdentity(
        url=config.supabase.url,
        anon_key=config.supabase.anon_key,
        cache_file=config.supabase.session_cache,
    )


def _build_directory(config: AppConfig, mock: bool, identity=None):
    if mock:
        return MockDirectory(today=_today(config))
    identity = identity or _build_identity(config, mock)
    return SupabaseDirectory(
        url=config.supabase.url,
        anon_key=config.supabase.anon_key,
        access_token=identity.access_token,
    )


def _today(config: AppConfig) -> date:
    return pendulum.today(config.timezone).date()


def _parse_date(value: str, config: AppConfig) -> date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=config.timezone).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    if isinstance(error, ValidationError):
        for field, message in error.errors.items():
            console.print(f"  [red]• {field}: {message}[/red]")
    raise typer.Exit(1)


def _print_calendar(navigator: CalendarNavigator) -> None:
    table = Table(title=navigator.month_title, show_header=True, header_style="bold cyan")
    for day_name in WEEK_DAYS:
        table.add_column(day_name, justify="center")

    cells: List[str] = [""] * navigator.leading_blanks()
    for day in navigator.month_days():
        label = day.label
        if day.is_selected:
            label = f"[reverse]{label}[/reverse]"
        elif not day.is_selectable:
            label = f"[dim]{label}[/dim]"
        elif day.is_available:
            label = f"[bold]{label}[/bold]•"
        if day.is_today:
            label = f"[underline]{label}[/underline]"
        cells.append(label)

    while len(cells) % 7:
        cells.append("")
    for start in range(0, len(cells), 7):
        table.add_row(*cells[start:start + 7])

    console.print(table)


def _print_slots(session: BookingSession) -> None:
    navigator = session.navigator
    if navigator.selected_date is None:
        return
    if navigator.no_times_left:
        console.print("[yellow]No available time slots for this date[/yellow]")
        return
    console.print("[bold]Available Times[/bold]")
    console.print("  " + "  ".join(f"{slot.time} ({slot.display})" for slot in navigator.time_slots))


def _print_bookings(bookings: List[Booking], title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Service")
    table.add_column("Client")
    table.add_column("Amount", justify="right")
    table.add_column("Status")

    for booking in bookings:
        style = STATUS_STYLES[booking.status]
        table.add_row(
            booking.id or "",
            booking.date.isoformat(),
            booking.time_key,
            booking.service_name or booking.service_id,
            booking.client_name,
            f"${booking.total_amount:.2f}",
            f"[{style}]{booking.status.label}[/{style}]",
        )

    console.print(table)


@app.command()
def book(
    link: Annotated[Optional[str], typer.Argument(help="Booking link (…/book/<business>?service=<id>) or business id.")] = None,
    service: Annotated[Optional[str], typer.Option("--service", "-s", help="Service id to pre-select")] = None,
    on_date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")] = None,
    at_time: Annotated[Optional[str], typer.Option("--time", "-t", help="Time (HH:MM)")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Your name")] = None,
    email: Annotated[Optional[str], typer.Option("--email", help="Your email")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", help="Your phone number")] = None,
    address: Annotated[str, typer.Option("--address", help="Address for on-site services")] = "",
    notes: Annotated[str, typer.Option("--notes", help="Additional notes")] = "",
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book an appointment. Missing values are asked for interactively.

    Examples:

        bookingdesk book https://example.com/book/sparkle-home?service=svc-deep

        bookingdesk book sparkle-home --date 2025-03-04 --time 10:00 --name "Ada" --email ada@example.com --mock
    """
    try:
        config = _load_config(config_file, mock)
        identity = None if mock else _build_identity(config, mock)
        directory = _build_directory(config, mock, identity)

        if link and ("/" in link or "?" in link):
            business_id, link_service = parse_booking_link(link)
        else:
            business_id, link_service = config.resolve_business_id(link), None

        session = asyncio.run(
            open_booking_session(
                directory,
                business_id,
                service or link_service,
                config=config,
                identity=identity,
                today=_today(config),
            )
        )

        console.print(Panel.fit(
            f"[bold]{session.business.name}[/bold]\n{session.business.tagline}".strip(),
            title="📅 Book an Appointment"
        ))

        if not session.services:
            console.print("[yellow]This business has no bookable services yet.[/yellow]")
            raise typer.Exit(1)

        # 1. SERVICE
        if not service and not link_service and len(session.services) > 1:
            console.print("\n[bold]1️⃣  Choose a service[/bold]")
            for idx, item in enumerate(session.services, 1):
                console.print(f"  {idx}. {item.format_display()}")
            choice = typer.prompt("→ Service number", default=1, type=int)
            if not 1 <= choice <= len(session.services):
                console.print(f"[red]Invalid choice: {choice}[/red]")
                raise typer.Exit(1)
            session.select_service(session.services[choice - 1].id)
        console.print(f"Service: [bold]{session.selected_service.name}[/bold]")

        # 2. DATE
        if on_date is None:
            console.print("\n[bold]2️⃣  Choose a date[/bold]")
            _print_calendar(session.navigator)
            on_date = typer.prompt("→ Date (YYYY-MM-DD)").strip()
        if not session.select_date(_parse_date(on_date, config)):
            console.print(f"[red]{on_date} is not available for booking.[/red]")
            raise typer.Exit(1)

        # 3. TIME
        if at_time is None:
            console.print("\n[bold]3️⃣  Choose a time[/bold]")
            _print_slots(session)
            if session.navigator.no_times_left:
                raise typer.Exit(1)
            at_time = typer.prompt("→ Time (HH:MM)").strip()
        if not session.select_time(at_time):
            console.print(f"[red]{at_time} is not an available time on {on_date}.[/red]")
            raise typer.Exit(1)

        # 4. CONTACT
        if name is None or (email is None and phone is None):
            console.print("\n[bold]4️⃣  Your details[/bold]")
        if name is None:
            name = typer.prompt("→ Name")
        if email is None and phone is None:
            email = typer.prompt("→ Email (leave empty to give a phone number)", default="", show_default=False)
            if not email:
                phone = typer.prompt("→ Phone")

        session.update_contact(
            name=name,
            email=email or "",
            phone=phone or "",
            address=address,
            notes=notes,
        )

        confirmation = asyncio.run(session.submit())
        console.print()
        console.print(Panel.fit(
            "\n".join(confirmation.summary_lines()),
            title="[bold green]✓ Booking Confirmed![/bold green]"
        ))
        if mock:
            console.print("[yellow]⊘ Mock mode: the booking is not persisted.[/yellow]")

    except AvailabilityConflict as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(1)

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def slots(
    on_date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    business: BusinessOption = None,
    service: Annotated[Optional[str], typer.Option("--service", "-s", help="Service id")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the bookable times for a date.
    """
    try:
        config = _load_config(config_file, mock)
        directory = _build_directory(config, mock)
        session = asyncio.run(
            open_booking_session(
                directory,
                config.resolve_business_id(business),
                service,
                config=config,
                today=_today(config),
            )
        )
        if session.selected_service:
            console.print(f"Service: [bold]{session.selected_service.name}[/bold] "
                          f"({session.selected_service.duration_minutes} mins)")

        day = _parse_date(on_date, config)
        if not session.select_date(day):
            console.print(f"[yellow]{day.isoformat()} is not open for booking.[/yellow]")
            raise typer.Exit(1)
        _print_slots(session)

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def calendar(
    business: BusinessOption = None,
    months: Annotated[int, typer.Option("--months", "-m", help="Number of months to show")] = 1,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the booking calendar with available days marked.
    """
    try:
        config = _load_config(config_file, mock)
        directory = _build_directory(config, mock)
        session = asyncio.run(
            open_booking_session(directory, config.resolve_business_id(business), config=config, today=_today(config))
        )
        navigator = session.navigator
        for index in range(months):
            if index and not navigator.next_month():
                break
            _print_calendar(navigator)

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def bookings(
    business: BusinessOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List bookings, optionally within a date range.
    """
    try:
        config = _load_config(config_file, mock)
        directory = _build_directory(config, mock)
        start_date = _parse_date(start, config) if start else None
        end_date = _parse_date(end, config) if end else None

        result = asyncio.run(
            directory.get_bookings(config.resolve_business_id(business), start_date, end_date)
        )
        if not result:
            console.print("[yellow]No bookings found.[/yellow]")
            return
        _print_bookings(result, "Bookings")

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


async def _apply_status_action(dashboard: DashboardService, booking_id: str, action: str):
    booking = await dashboard.find_booking(booking_id)
    if action == "advance":
        return await dashboard.advance(booking)
    if action == "cancel":
        return await dashboard.cancel(booking)
    await dashboard.delete(booking)
    return None


def _status_command(booking_id: str, action: str, business, config_file, mock) -> None:
    try:
        config = _load_config(config_file, mock)
        directory = _build_directory(config, mock)
        dashboard = DashboardService(directory, config.resolve_business_id(business), today=_today(config))
        updated = asyncio.run(_apply_status_action(dashboard, booking_id, action))

        if updated is None:
            console.print(f"[green]✓ Booking {booking_id} deleted.[/green]")
        else:
            style = STATUS_STYLES[updated.status]
            console.print(f"[green]✓[/green] Booking {booking_id} is now [{style}]{updated.status.label}[/{style}]")
            upcoming = next_status(updated.status)
            if upcoming:
                console.print(f"  Next step: {upcoming.label}")

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def advance(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    business: BusinessOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Move a booking one step forward (pending → confirmed → in progress → completed).
    """
    _status_command(booking_id, "advance", business, config_file, mock)


@app.command()
def cancel(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    business: BusinessOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Cancel a booking that is not yet completed.
    """
    _status_command(booking_id, "cancel", business, config_file, mock)


@app.command()
def delete(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    business: BusinessOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Delete a pending booking.
    """
    _status_command(booking_id, "delete", business, config_file, mock)


@app.command()
def dashboard(
    business: BusinessOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show today's figures, upcoming jobs and recent activity.
    """
    try:
        config = _load_config(config_file, mock)
        directory = _build_directory(config, mock)
        service = DashboardService(directory, config.resolve_business_id(business), today=_today(config))
        snapshot = asyncio.run(service.refresh())
        stats = snapshot.stats

        console.print(Panel.fit(
            f"[bold]Today's Bookings:[/bold] {stats.today_bookings}\n"
            f"[bold]This Week:[/bold] {stats.week_bookings}\n"
            f"[bold]Clients:[/bold] {stats.total_clients}\n"
            f"[bold]Revenue (Month):[/bold] ${stats.monthly_revenue:,.2f}",
            title="📊 Overview"
        ))

        if snapshot.upcoming:
            _print_bookings(snapshot.upcoming, "Upcoming Jobs")
        else:
            console.print("[yellow]No upcoming jobs.[/yellow]")

        if snapshot.recent:
            _print_bookings(snapshot.recent, "Recent Activity")

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def clients(
    business: BusinessOption = None,
    search: Annotated[str, typer.Option("--search", "-q", help="Search name, email, phone or address")] = "",
    filter_by: Annotated[str, typer.Option("--filter", help=f"One of: {', '.join(FILTERS)}")] = "all",
    sort_by: Annotated[str, typer.Option("--sort", help=f"One of: {', '.join(SORT_KEYS)}")] = "name",
    descending: Annotated[bool, typer.Option("--desc", help="Sort descending")] = False,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List clients with search, filter and sort.
    """
    try:
        config = _load_config(config_file, mock)
        directory = _build_directory(config, mock)
        all_clients = asyncio.run(directory.get_clients(config.resolve_business_id(business)))
        shown = filter_clients(
            all_clients,
            search=search,
            filter_by=filter_by,
            sort_by=sort_by,
            descending=descending,
            today=_today(config),
        )

        if not shown:
            console.print("[yellow]No clients found.[/yellow]")
            return

        table = Table(title=f"Clients ({len(shown)} of {len(all_clients)})", show_header=True, header_style="bold cyan")
        table.add_column("Name", style="bold yellow")
        table.add_column("E-Mail", style="dim")
        table.add_column("Phone")
        table.add_column("Status")
        table.add_column("Bookings", justify="right")
        for client in shown:
            table.add_row(
                client.name + (" ★" if client.is_vip else ""),
                client.email or "",
                client.phone or "",
                client.status,
                str(client.total_bookings),
            )

        console.print()
        console.print(table)
        console.print()

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def services(
    business: BusinessOption = None,
    active_only: Annotated[bool, typer.Option("--active", help="Only show active services")] = False,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List the services of a business.
    """
    try:
        config = _load_config(config_file, mock)
        catalog = ServiceCatalog(_build_directory(config, mock), config.resolve_business_id(business))
        result = asyncio.run(catalog.list(active_only=active_only))

        table = Table(title="Services", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Duration", justify="right")
        table.add_column("Price", justify="right")
        table.add_column("Location")
        table.add_column("Deposit", justify="right")
        table.add_column("Active")
        for item in result:
            table.add_row(
                item.id or "",
                item.name,
                f"{item.duration_minutes} mins",
                f"${item.price:.2f}",
                item.location.label,
                f"${item.deposit_amount:.2f}" if item.requires_deposit else "-",
                "✓" if item.is_active else "✗",
            )
        console.print(table)

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("add-service")
def add_service(
    name: Annotated[str, typer.Option("--name", prompt=True, help="Service name")],
    price: Annotated[str, typer.Option("--price", prompt=True, help="Price")],
    duration: Annotated[int, typer.Option("--duration", prompt=True, help="Duration in minutes")] = 60,
    location: Annotated[str, typer.Option("--location", help="client_location, business_location or remote")] = "client_location",
    deposit: Annotated[Optional[str], typer.Option("--deposit", help="Require a deposit of this amount")] = None,
    category: Annotated[str, typer.Option("--category", help="Category")] = "",
    business: BusinessOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Add a new service.
    """
    try:
        config = _load_config(config_file, mock)
        business_id = config.resolve_business_id(business)
        new_service = build_service(
            name=name,
            price=price,
            duration_minutes=duration,
            business_id=business_id,
            location=location,
            requires_deposit=deposit is not None,
            deposit_amount=deposit,
            category=category,
        )
        catalog = ServiceCatalog(_build_directory(config, mock), business_id)
        saved = asyncio.run(catalog.save(new_service))
        console.print(f"[green]✓ Service created:[/green] {saved.format_display()}")
        console.print(f"  Booking link: {build_booking_link('https://book.example.com', business_id, saved.id)}")

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def link(
    base_url: Annotated[str, typer.Argument(help="Public site base URL")],
    business: BusinessOption = None,
    service: Annotated[Optional[str], typer.Option("--service", "-s", help="Service to pre-select")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Print the public booking link for a business.
    """
    try:
        config = _load_config(config_file, mock)
        console.print(build_booking_link(base_url, config.resolve_business_id(business), service))
    except (FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def register(
    email: Annotated[str, typer.Option("--email", prompt=True, help="Email address")],
    business_name: Annotated[str, typer.Option("--business-name", prompt=True, help="Business name")],
    business_type: Annotated[str, typer.Option(
        "--business-type", prompt=True, help=f"One of: {', '.join(t.value for t in BusinessType)}"
    )],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True, confirmation_prompt=False)],
    confirm_password: Annotated[str, typer.Option(prompt="Repeat password", hide_input=True)],
    contact_phone: Annotated[str, typer.Option("--phone", help="Contact phone")] = "",
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Create a business account.
    """
    try:
        config = _load_config(config_file, mock)
        accounts = AccountService(_build_identity(config, mock))
        user = asyncio.run(accounts.register(
            email=email,
            password=password,
            confirm_password=confirm_password,
            business_name=business_name,
            business_type=business_type,
            contact_phone=contact_phone,
        ))
        console.print(f"\n[green]✓ Account created for {user.email}.[/green]")
        console.print("Check your inbox to confirm your email address.\n")

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def login(
    email: Annotated[str, typer.Option("--email", prompt=True, help="Email address")],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True)],
    config_file: ConfigOption = None,
):
    """
    Sign in and remember the session.
    """
    try:
        config = _load_config(config_file, False)
        identity = _build_identity(config, False)
        user = asyncio.run(AccountService(identity).sign_in(email, password))
        console.print(Panel.fit(
            f"[bold green]✓ Signed in![/bold green]\n\n"
            f"[bold]User:[/bold] {user.business_name or 'N/A'}\n"
            f"[bold]E-Mail:[/bold] {user.email}",
            title="✓ Login"
        ))
        if identity.insecure_storage_warning:
            console.print(f"[yellow]{identity.insecure_storage_warning}[/yellow]")

    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def logout(config_file: ConfigOption = None):
    """
    Sign out and forget the stored session.
    """
    try:
        config = _load_config(config_file, False)
        asyncio.run(AccountService(_build_identity(config, False)).sign_out())
        console.print("\n[green]✓ Signed out.[/green]\n")
    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def whoami(config_file: ConfigOption = None):
    """
    Show the signed-in user.
    """
    try:
        config = _load_config(config_file, False)
        user = asyncio.run(AccountService(_build_identity(config, False)).current_user())
        if user is None:
            console.print("[yellow]Not signed in.[/yellow]")
            return
        console.print(f"{user.email} ({user.business_name or 'no business name'})")
    except (BookingDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingdesk[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
