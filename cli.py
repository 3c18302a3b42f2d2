# cli.py
# Interactive admin console for the catalog file. Talks to the store directly,
# so add/update/delete are available here even though the API is read-only.
import argparse
import asyncio
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from catalog.config import configure_logging, get_settings
from catalog.errors import CatalogError
from catalog.models import ProductField
from catalog.store import ProductManager

console = Console()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})

NUMERIC_FIELDS = {ProductField.PRICE, ProductField.STOCK}


# ---------------------------
# Display helpers
# ---------------------------
def products_table(products: List[Dict[str, Any]]) -> Table:
    table = Table(
        title="📦 Products Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", justify="right", width=6)
    table.add_column("Code", style="bold", width=10)
    table.add_column("Title", width=20)
    table.add_column("Description", width=30)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=8)
    table.add_column("Thumbnail", width=20)

    for p in products:
        table.add_row(
            str(p.get("id", "N/A")),
            str(p.get("code", "N/A")),
            p.get("title", "N/A"),
            p.get("description", "N/A"),
            str(p.get("price", "N/A")),
            str(p.get("stock", "N/A")),
            p.get("thumbnail", "N/A"),
        )
    return table


def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return
    console.print(products_table(products))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# Store wrapper
# ---------------------------
def try_store(coro, success_msg: Optional[str] = None):
    """
    Runs a store coroutine behind a spinner.
    Catalog errors are reported as a red status panel and None is returned.
    """
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = asyncio.run(coro)
    except CatalogError as e:
        console.print(show_status(f"Error: {e}", False))
        return None

    if success_msg:
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Input helpers
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def parse_value(field: str, raw: str) -> Any:
    """Turn typed text into the value stored for `field` (numbers stay numbers)."""
    if field in {f.value for f in NUMERIC_FIELDS}:
        try:
            return int(raw)
        except ValueError:
            try:
                return float(raw)
            except ValueError:
                return raw
    return raw


def create_header(data_path) -> Panel:
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Catalog Admin",
        f"[bold blue]{data_path}[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu(manager: ProductManager):
    console.clear()
    console.print(create_header(manager.path))

    field_completer = WordCompleter([f.value for f in ProductField])

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "4", "✏️ Update product"),
            ("2", "ℹ️ Get product by ID", "5", "🗑️ Delete product"),
            ("3", "➕ Add product", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(["1", "2", "3", "4", "5", "q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_store(manager.get_products())
            if products is not None:
                show_products(products)

        elif choice == "2":
            pid = IntPrompt.ask("Product ID")
            product = try_store(manager.get_product_by_id(pid))
            if product is None:
                console.print(f"[italic yellow]No product with id {pid}[/italic yellow]")
            else:
                show_products([product])

        elif choice == "3":
            code = prompt_with_autocomplete("Code")
            title = prompt_with_autocomplete("Title")
            description = prompt_with_autocomplete("Description")
            price = ask_float("💰 Price", default=10.0)
            thumbnail = prompt_with_autocomplete("Thumbnail")
            stock = IntPrompt.ask("📦 Stock", default=1)
            record = try_store(
                manager.add_product(code, title, description, price, thumbnail, stock),
                success_msg=f"Product '{code}' added",
            )
            if record:
                show_products([record])

        elif choice == "4":
            pid = IntPrompt.ask("Product ID")
            field = prompt_with_autocomplete("Field", completer=field_completer).strip()
            raw = prompt_with_autocomplete("New value")
            record = try_store(
                manager.update_product(pid, field, parse_value(field, raw)),
                success_msg=f"Product {pid} updated",
            )
            if record:
                show_products([record])

        elif choice == "5":
            pid = IntPrompt.ask("Product ID")
            if Confirm.ask(f"[red]Delete product {pid}?[/red]"):
                try_store(manager.delete_product(pid), success_msg=f"Product {pid} deleted")

        elif choice.lower() in ("q", "quit", "exit"):
            console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
            return

        console.print()
        console.rule(style="dim")


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Catalog admin console")
    parser.add_argument("--data", default=str(settings.data_path), help="Backing JSON file")
    args = parser.parse_args(argv)

    configure_logging("WARNING")
    try:
        menu(ProductManager(args.data))
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
