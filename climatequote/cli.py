"""
climatequote CLI.

Command-line host for the quote pricing and F-gas compliance engine. Reads
JSON request files and a pricing snapshot, prints itemised breakdowns.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .commissioning import checklist_template
from .compliance import REFRIGERANT_GWP, RefrigerantSpec, evaluate_refrigerant_compliance
from .core.config import settings
from .core.models import InstallationPriceInput, QuoteRequest, load_snapshot
from .pricing import (
    ConfigurationSnapshot,
    InsulationClass,
    calculate_installation_price,
    calculate_quote,
    default_snapshot,
)
from .utils.logging_config import ensure_logging, get_logger
from .utils.validation import ValidationError as InputError, validate_refrigerant_type

app = typer.Typer(
    name="climatequote",
    help="climatequote - Quote pricing and F-gas compliance for climate installations",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)


@app.callback()
def main_options(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default from settings)"),
):
    """Quote pricing and F-gas compliance for climate installations."""
    ensure_logging(
        level=log_level or settings.log_level,
        log_to_file=settings.log_to_file,
        log_dir=settings.log_dir,
    )


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _read_json(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        _fail(f"Cannot read {path}: {e}")
    except json.JSONDecodeError as e:
        _fail(f"{path} is not valid JSON: {e}")


def _load_config(snapshot: Optional[Path], quiet: bool = False) -> ConfigurationSnapshot:
    path = snapshot or settings.resolved_snapshot_file
    if path is None:
        if not quiet:
            console.print(f"[dim]No pricing snapshot given, using default {settings.category} settings[/dim]")
        return default_snapshot(settings.category)
    try:
        config = load_snapshot(path)
    except OSError as e:
        _fail(f"Cannot read snapshot {path}: {e}")
    except json.JSONDecodeError as e:
        _fail(f"Snapshot {path} is not valid JSON: {e}")
    except ValidationError as e:
        _fail(f"Invalid snapshot {path}:\n{e}")
    logger.debug(f"Loaded snapshot {path} ({config.category})")
    missing = config.missing_keys()
    if missing and not quiet:
        console.print(f"[dim]Snapshot lacks {len(missing)} setting(s), using fallbacks: {', '.join(missing)}[/dim]")
    return config


def _money(amount: float) -> str:
    return f"{settings.currency_symbol}{amount:,.2f}"


@app.command()
def quote(
    input_file: Path = typer.Argument(..., help="Quote request JSON file"),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", "-s", help="Pricing snapshot JSON"),
    as_json: bool = typer.Option(False, "--json", help="Print the breakdown as JSON"),
):
    """
    Price a quote from rooms, options and the selected product.
    """
    data = _read_json(input_file)
    try:
        request = QuoteRequest.model_validate(data)
    except ValidationError as e:
        _fail(f"Invalid quote request {input_file}:\n{e}")

    config = _load_config(snapshot, quiet=as_json)
    insulation = InsulationClass[(request.insulation or settings.default_insulation).upper()]
    breakdown = calculate_quote(
        request.to_rooms(),
        request.options.to_options(),
        request.product.to_price(),
        config,
        insulation=insulation,
    )
    get_logger(__name__, quote_id=request.quote_id or str(input_file)).info(
        f"Priced {breakdown.room_count} room(s) at {breakdown.total_incl_vat:.2f} incl. VAT"
    )

    if as_json:
        console.print_json(data=breakdown.to_dict())
        return

    console.print(Panel.fit(
        f"[bold blue]{request.product.name}[/bold blue]\n"
        f"{breakdown.room_count} room(s), {breakdown.total_area_m2:.1f} m², "
        f"{breakdown.required_kw:.2f} kW required",
        border_style="blue",
    ))

    table = Table(title=f"Quote {request.quote_id or ''}".strip())
    table.add_column("Item", style="cyan")
    table.add_column("Amount", justify="right")

    table.add_row("Unit price", _money(breakdown.base_price))
    table.add_row("Base installation", _money(breakdown.base_installation))
    if breakdown.room_surcharge:
        table.add_row("Multi-split surcharge", _money(breakdown.room_surcharge))
    if breakdown.extra_unit_cost:
        table.add_row("Additional units", _money(breakdown.extra_unit_cost))
    if breakdown.pipe_overage_cost:
        table.add_row(f"Extra piping ({breakdown.pipe_overage_m:.1f} m)", _money(breakdown.pipe_overage_cost))
    if breakdown.electrical_cost:
        table.add_row("Electrical group", _money(breakdown.electrical_cost))
    if breakdown.capacity_labor_cost or breakdown.capacity_materials_cost:
        table.add_row("Capacity extras", _money(breakdown.capacity_labor_cost + breakdown.capacity_materials_cost))
    for name, amount in breakdown.extras.items():
        table.add_row(name.replace("_", " ").capitalize(), _money(amount))
    table.add_row("[bold]Total excl. VAT[/bold]", f"[bold]{_money(breakdown.subtotal)}[/bold]")
    table.add_row(f"VAT {breakdown.vat_rate:g}%", _money(breakdown.vat_amount))
    table.add_row("[bold]Total incl. VAT[/bold]", f"[bold green]{_money(breakdown.total_incl_vat)}[/bold green]")

    console.print(table)


@app.command("install-price")
def install_price(
    input_file: Path = typer.Argument(..., help="Installation price request JSON file"),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", "-s", help="Pricing snapshot JSON"),
    as_json: bool = typer.Option(False, "--json", help="Print the breakdown as JSON"),
):
    """
    Price the installation of a catalogue product.
    """
    data = _read_json(input_file)
    try:
        request = InstallationPriceInput.model_validate(data)
    except ValidationError as e:
        _fail(f"Invalid installation request {input_file}:\n{e}")

    config = _load_config(snapshot, quiet=as_json)
    result = calculate_installation_price(
        request.product.to_installation_product(),
        request.to_request(),
        config,
    )

    if as_json:
        console.print_json(data=result.to_dict())
        return

    table = Table(title=f"Installation: {request.product.name}")
    table.add_column("Item", style="cyan")
    table.add_column("Amount", justify="right")

    table.add_row(f"Product ({result.quantity}x {_money(result.product_price)})", _money(result.product_total))
    table.add_row(f"Labour ({result.hours:g} h x {_money(result.hourly_rate)} + travel)", _money(result.labor_total))
    table.add_row(
        f"Piping ({result.liquid_line} / {result.suction_line})",
        _money(result.pipe_cost),
    )
    if result.duct_cost:
        table.add_row("Cable duct", _money(result.duct_cost))
    if result.electrical_cost:
        table.add_row("Electrical group", _money(result.electrical_cost))
    if result.pump_cost:
        table.add_row("Condensate pump", _money(result.pump_cost))
    table.add_row("Consumables", _money(result.consumables_cost))
    table.add_row("[bold]Subtotal excl. VAT[/bold]", f"[bold]{_money(result.subtotal_excl_vat)}[/bold]")
    table.add_row(f"VAT {result.vat_rate:g}%", _money(result.vat_amount))
    table.add_row("[bold]Total incl. VAT[/bold]", f"[bold green]{_money(result.total_incl_vat)}[/bold green]")

    console.print(table)


@app.command()
def compliance(
    refrigerant: str = typer.Option("R32", "--refrigerant", "-r", help="Refrigerant type code"),
    charge: float = typer.Option(..., "--charge", "-c", help="Factory charge in kg"),
    additional: float = typer.Option(0.0, "--additional", "-a", help="Additional field charge in kg"),
    gwp: Optional[float] = typer.Option(None, "--gwp", help="Override the GWP"),
    leak_detection: bool = typer.Option(False, "--leak-detection", help="Leak detection system installed"),
    hermetic: bool = typer.Option(False, "--hermetic", help="Hermetically sealed equipment"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """
    F-gas CO₂-equivalent and leak-check obligation for a refrigerant charge.
    """
    if gwp is None:
        try:
            refrigerant = validate_refrigerant_type(refrigerant)
        except InputError as e:
            _fail(f"{e} ({'; '.join(e.suggestions)})")

    result = evaluate_refrigerant_compliance(
        RefrigerantSpec(type=refrigerant, gwp=gwp, charge_kg=charge, additional_charge_kg=additional),
        leak_detection_system=leak_detection,
        hermetically_sealed=hermetic,
    )

    if as_json:
        console.print_json(data=result.to_dict())
        return

    table = Table(title="F-gas compliance")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Refrigerant", str(result.refrigerant_type))
    table.add_row("GWP", f"{result.gwp:g}")
    table.add_row("Total charge", f"{result.total_charge_kg:.2f} kg")
    table.add_row("CO₂-equivalent", f"{result.co2_equivalent_tons:.2f} t")
    table.add_row(
        "Leak check",
        "[yellow]Required[/yellow]" if result.leak_check_required else "[green]Not required[/green]",
    )
    if result.leak_check_interval_months:
        table.add_row("Interval", f"every {result.leak_check_interval_months} months")
    console.print(table)


@app.command()
def refrigerants():
    """List known refrigerants and their GWP."""
    table = Table(title="Refrigerant GWP")
    table.add_column("Type", style="cyan")
    table.add_column("GWP", justify="right")
    table.add_column("Charge at 5 t CO₂-eq", justify="right")
    for code, gwp in REFRIGERANT_GWP.items():
        threshold = f"{5000 / gwp:,.2f} kg" if gwp > 0 else "-"
        table.add_row(code, str(gwp), threshold)
    console.print(table)


@app.command()
def checklist():
    """Show the BRL 100/200 commissioning steps and their checks."""
    for step in checklist_template():
        console.print(f"\n[bold cyan]{step['number']}. {step['title']}[/bold cyan] [dim]({step['rule']})[/dim]")
        for name, label in step["checks"].items():
            console.print(f"  [ ] {label} [dim]{name}[/dim]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
