from __future__ import annotations

from rich.markup import escape
from rich.table import Table

from lidlstock.models import StockObservation, StockStatus, Store

PLACEHOLDER = "—"

_STATUS_LINES: dict[StockStatus, str] = {
    StockStatus.AVAILABLE: "[green]In stock[/] at {address}",
    StockStatus.LOW_STOCK: "[yellow]Low stock[/] at {address}",
    StockStatus.UNKNOWN: "[dim]Stock status unknown[/] at {address}",
    StockStatus.NOT_AVAILABLE: "[red]Not in stock[/] at {address}",
}


def format_coords(store: Store) -> str:
    return f"{store.lat}, {store.lon}"


def format_amenities(store: Store) -> str:
    return ", ".join(store.amenities) if store.amenities else PLACEHOLDER


def store_table(stores: list[Store]) -> Table:
    table = Table(header_style="cyan", show_lines=False)
    table.add_column("#", width=5, justify="right")
    table.add_column("Address", width=40, overflow="fold")
    table.add_column("ID", width=20)
    table.add_column("Coords", width=25)
    table.add_column("Services", width=50, overflow="fold")
    for index, store in enumerate(stores, start=1):
        table.add_row(
            str(index),
            escape(store.address),
            escape(store.store_id),
            format_coords(store),
            escape(format_amenities(store)),
        )
    return table


def observation_line(observation: StockObservation) -> str:
    return _STATUS_LINES[observation.status].format(address=escape(observation.store.address))
