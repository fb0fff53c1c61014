"""Rich terminal display for markets, routes and the commodity catalog."""
from __future__ import annotations

from typing import Iterable, Mapping

from rich import box
from rich.console import Console
from rich.table import Table

from star_trader.mechanics.sim_clock import format_time
from star_trader.models.commodity import Commodity, LegalStatus
from star_trader.models.event import EconomicEvent
from star_trader.models.market import Market
from star_trader.models.route import TradeRoute

console = Console()

LEGAL_STYLES = {
    LegalStatus.LEGAL: "green",
    LegalStatus.RESTRICTED: "yellow",
    LegalStatus.ILLEGAL: "red",
}


class Display:
    def __init__(self, width: int | None = None):
        self.console = console
        self.width = width

    def show_header(self, galaxy: str, now: int, markets: int) -> None:
        self.console.print(
            f"[bold cyan]{galaxy}[/bold cyan]  [dim]{format_time(now)}  {markets} markets[/dim]"
        )

    def show_routes(self, routes: Iterable[TradeRoute], title: str = "Top Trade Routes") -> None:
        table = Table(title=title, box=box.SIMPLE_HEAVY, border_style="cyan", width=self.width)
        table.add_column("Commodity", style="bold")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Profit/u", justify="right")
        table.add_column("Vol", justify="right")
        table.add_column("Hours", justify="right")
        table.add_column("Profit/h", justify="right", style="green")
        table.add_column("Risk", justify="right")
        table.add_column("Gate")
        for r in routes:
            risk_style = "red" if r.risk >= 0.5 else "yellow" if r.risk >= 0.3 else "green"
            table.add_row(
                r.commodity,
                r.origin,
                r.destination,
                f"{r.profit_per_unit:.1f}",
                str(r.volume),
                f"{r.travel_time:.1f}",
                f"{r.profit_per_hour:,.0f}",
                f"[{risk_style}]{r.risk:.0%}[/{risk_style}]",
                r.gate_id or "-",
            )
        if not table.rows:
            self.console.print(f"[dim]{title}: no profitable routes.[/dim]")
            return
        self.console.print(table)

    def show_events(self, events: Iterable[EconomicEvent]) -> None:
        for event in events:
            self.console.print(
                f"  [magenta]{event.type.value}[/magenta] {', '.join(event.affected_commodities)} "
                f"@ {', '.join(event.affected_stations)} [dim](ends {format_time(event.end_time)})[/dim]"
            )

    def show_market(self, market: Market, catalog: Mapping[str, Commodity]) -> None:
        table = Table(title=f"Market: {market.station_id}", box=box.SIMPLE, border_style="yellow", show_edge=False)
        table.add_column("Commodity", style="bold")
        table.add_column("Price", justify="right")
        table.add_column("Base", justify="right", style="dim")
        table.add_column("Stock", justify="right")
        table.add_column("Demand", justify="right")
        table.add_column("Supply")
        for commodity_id, entry in sorted(market.commodities.items()):
            commodity = catalog.get(commodity_id)
            table.add_row(
                commodity.name if commodity else commodity_id,
                str(entry.current_price),
                str(commodity.base_price) if commodity else "?",
                str(entry.available),
                str(entry.demand),
                entry.supply_level.value,
            )
        self.console.print(table)

    def show_catalog(self, catalog: Mapping[str, Commodity]) -> None:
        table = Table(title="Commodity Catalog", box=box.DOUBLE_EDGE, border_style="cyan", width=self.width)
        table.add_column("ID", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Category")
        table.add_column("Base", justify="right")
        table.add_column("Volatility", justify="right")
        table.add_column("Legal")
        for c in sorted(catalog.values(), key=lambda c: (c.category.value, c.base_price)):
            style = LEGAL_STYLES[c.legal_status]
            table.add_row(
                c.id,
                c.name,
                c.category.value,
                str(c.base_price),
                f"{c.volatility:.2f}",
                f"[{style}]{c.legal_status.value}[/{style}]",
            )
        self.console.print(table)
