"""Typer CLI application."""
from __future__ import annotations

import logging
from typing import Optional

import typer

app = typer.Typer(
    name="star-trader",
    help="Station market simulation and trade route analysis",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.command()
def simulate(
    hours: int = typer.Option(24, "--hours", "-n", min=0, help="Simulated hours to run"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed for a reproducible run"),
    galaxy: str = typer.Option("frontier", "--galaxy", "-g", help="Galaxy layout to load"),
    top: int = typer.Option(10, "--top", "-t", min=1, help="Number of routes to show"),
    station: Optional[str] = typer.Option(None, "--station", help="Only show routes departing this station"),
    show_markets: bool = typer.Option(False, "--markets", help="Print every market after the run"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run the sample galaxy economy and print the best trade routes."""
    from star_trader.cli.display import Display
    from star_trader.config import load_economy_config
    from star_trader.content.loader import list_galaxies, load_galaxy
    from star_trader.mechanics.sim_clock import MS_PER_HOUR, SimClock
    from star_trader.systems.market_engine import MarketEngine
    from star_trader.systems.route_analyzer import RouteAnalyzer
    from star_trader.systems.topology import SectorTopology

    _configure_logging(verbose)
    display = Display()

    if galaxy not in list_galaxies():
        display.console.print(f"[red]Unknown galaxy '{galaxy}'. Available: {', '.join(list_galaxies())}[/red]")
        raise typer.Exit(code=1)

    config = load_economy_config()
    if seed is not None:
        config = config.model_copy(update={"seed": seed})

    topology = SectorTopology.from_galaxy(load_galaxy(galaxy))
    clock = SimClock()
    engine = MarketEngine(config=config, clock=clock)
    analyzer = RouteAnalyzer.for_engine(engine, topology)

    for record in topology.stations.values():
        engine.initialize_station_economics(record, topology.system_for(record.id))
    for _ in range(hours):
        engine.update(MS_PER_HOUR)

    markets = engine.snapshot_markets()
    display.show_header(galaxy, clock.now(), len(markets))
    display.show_events(engine.get_active_events())

    if station:
        if station not in markets:
            display.console.print(f"[red]Unknown station '{station}'.[/red]")
            raise typer.Exit(code=1)
        routes = analyzer.get_routes_from_station(station, markets, topology.stations, limit=top)
        display.show_routes(routes, title=f"Routes from {station}")
    else:
        analysis = analyzer.analyze_routes(markets, topology.stations)
        display.show_routes(analysis.top_routes[:top])
        display.show_routes(analysis.risk_adjusted_routes[:top], title="Best Risk-Adjusted Routes")

    if show_markets:
        for market in markets.values():
            display.show_market(market, engine.catalog)


@app.command()
def catalog() -> None:
    """List the commodity catalog."""
    from star_trader.cli.display import Display
    from star_trader.content.loader import load_all_commodities

    Display().show_catalog(load_all_commodities())


if __name__ == "__main__":
    app()
