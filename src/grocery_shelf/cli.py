from __future__ import annotations
import asyncio
import logging
from pathlib import Path
import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from grocery_shelf.config import Config
from grocery_shelf.dates import DateInputError, parse_date_input
from grocery_shelf.formatter import format_inventory
from grocery_shelf.inventory import (
    describe_expiration,
    expiration_status,
    expiring_within,
    filter_by_category,
    sort_by_expiration,
    with_manual_expiration,
)
from grocery_shelf.models import FoodCategory, InventoryItem
from grocery_shelf.ocr import OcrError, extract_text
from grocery_shelf.pipeline import Pipeline, create_pipeline
from grocery_shelf.storage import JsonInventoryStore, StorageError

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLE = {
    "expired": "red",
    "today": "red",
    "soon": "dark_orange",
    "warning": "yellow",
    "fresh": "green",
}


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show processing details")
def cli(verbose: bool):
    """Grocery Shelf: turn receipts into a dated food inventory."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _store(config: Config) -> JsonInventoryStore:
    return JsonInventoryStore(base_dir=config.inventory_dir)


def _read_lines() -> str:
    console.print("\n[bold]Enter items[/bold] (one per line, press Enter on an empty line to finish)\n")
    lines = []
    while True:
        line = click.prompt("  Item", default="", show_default=False).strip()
        if not line:
            break
        lines.append(line)
    return "\n".join(lines)


def _items_table(items: list[InventoryItem], title: str, show_ids: bool = False) -> Table:
    table = Table(title=title)
    table.add_column("#" if not show_ids else "ID", style="cyan")
    table.add_column("Name")
    table.add_column("Qty", justify="right")
    table.add_column("Category")
    table.add_column("Expires")
    table.add_column("Status")
    for i, item in enumerate(items, start=1):
        status = expiration_status(item)
        style = _STATUS_STYLE[status]
        expires = item.effective_expiration.strftime("%Y-%m-%d")
        if item.manual_expiration_date:
            expires += " (manual)"
        table.add_row(
            item.item_id if show_ids else str(i),
            item.name,
            item.quantity or "—",
            item.category.value,
            expires,
            f"[{style}]{describe_expiration(item)}[/{style}]",
        )
    return table


def _review(pipeline: Pipeline) -> None:
    while True:
        raw = click.prompt(
            "  Row number to change its expiration date, or press Enter to save",
            default="",
            show_default=False,
        ).strip()
        if not raw:
            return
        pending = pipeline.pending
        if not raw.isdigit() or not 1 <= int(raw) <= len(pending):
            console.print(f"  [yellow]Enter a number between 1 and {len(pending)}[/yellow]")
            continue
        item = pending[int(raw) - 1]
        value = click.prompt(f"  New expiration date for {item.name} (YYYY-MM-DD)")
        try:
            updated = pipeline.set_manual_expiration(item.item_id, value)
        except DateInputError as e:
            console.print(f"  [red]✗[/red] {e}")
            continue
        console.print(
            f"  [green]✓[/green] {updated.name} now expires {updated.effective_expiration:%Y-%m-%d}"
        )


@cli.command()
@click.option("--file", "text_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Read receipt text from a file")
@click.option("--image", "image_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Read receipt text from a photo (Google Vision OCR)")
@click.option("--yes", "-y", is_flag=True, help="Save without reviewing")
def add(text_file: Path | None, image_file: Path | None, yes: bool):
    """Add groceries from a receipt or typed lines."""
    if text_file and image_file:
        err_console.print("[red]Error:[/red] Use either --file or --image, not both.")
        raise SystemExit(1)

    config = Config()
    source = "manual"
    if image_file:
        try:
            result = extract_text(image_file, config.google_vision_api_key)
        except OcrError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)
        raw_text, source = result.text, "ocr"
        if result.confidence is not None:
            console.print(f"[dim]Text recognised with {result.confidence:.0%} confidence.[/dim]")
    elif text_file:
        raw_text = text_file.read_text()
    else:
        raw_text = _read_lines()

    pipeline = create_pipeline(config)
    console.print("[dim]Processing items...[/dim]")
    items = asyncio.run(pipeline.process(raw_text))
    if not items:
        console.print("No grocery items found.")
        return

    console.print(_items_table(items, "Items to add"))
    if not yes:
        _review(pipeline)

    try:
        saved = pipeline.commit(_store(config), source=source)
    except StorageError as e:
        err_console.print(f"[red]Error:[/red] Could not save items: {e}")
        raise SystemExit(1)
    console.print(f"\n[green]✓[/green] Saved [bold]{len(saved)}[/bold] items.")


@cli.command("list")
@click.option("--category", type=click.Choice([c.value for c in FoodCategory], case_sensitive=False),
              default=None, help="Only show one category")
@click.option("--plain", is_flag=True, help="Print a plain-text list grouped by category")
def list_items(category: str | None, plain: bool):
    """Show the inventory, soonest expiration first."""
    config = Config()
    try:
        items = _store(config).list_items()
    except StorageError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if category:
        items = filter_by_category(items, FoodCategory.parse(category))
    if not items:
        console.print("Inventory is empty. Run [bold]shelf add[/bold] to add groceries.")
        return

    if plain:
        console.print(format_inventory(items), markup=False, highlight=False)
        return
    console.print(_items_table(sort_by_expiration(items), "Inventory", show_ids=True))


@cli.command()
@click.option("--days", type=int, default=None, help="Look-ahead window (default: EXPIRING_SOON_DAYS)")
def expiring(days: int | None):
    """Show items that expire soon."""
    config = Config()
    window = days if days is not None else config.expiring_soon_days
    try:
        items = expiring_within(_store(config).list_items(), window)
    except StorageError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if not items:
        console.print(f"Nothing expires in the next {window} days.")
        return
    console.print(_items_table(items, f"Expiring within {window} days", show_ids=True))


@cli.command()
@click.argument("item_id")
@click.argument("expires")
def edit(item_id: str, expires: str):
    """Set a manual expiration date (YYYY-MM-DD) on a saved item."""
    config = Config()
    store = _store(config)
    try:
        when = parse_date_input(expires)
        item = store.update_item(with_manual_expiration(store.get_item(item_id), when))
    except (DateInputError, StorageError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] {item.name} now expires {item.effective_expiration:%Y-%m-%d}")


@cli.command()
def receipts():
    """Show saved receipts, newest first."""
    config = Config()
    try:
        saved = _store(config).list_receipts()
    except StorageError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)
    if not saved:
        console.print("No receipts saved yet.")
        return

    table = Table(title="Receipts")
    table.add_column("ID", style="cyan")
    table.add_column("Purchased")
    table.add_column("Added")
    table.add_column("Items", justify="right")
    table.add_column("Source")
    for r in saved:
        table.add_row(
            r.receipt_id,
            f"{r.purchase_date:%Y-%m-%d}",
            f"{r.created_at:%Y-%m-%d %H:%M}",
            str(r.item_count),
            r.source,
        )
    console.print(table)
