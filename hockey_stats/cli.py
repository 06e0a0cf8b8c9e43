"""CLI entrypoint using Typer.

This module defines the command-line interface for the hockey stats
application. Commands are organized into subcommand groups for data
backfill/inspection and dashboard payloads.

Example:
    $ hockey-stats --help
    $ hockey-stats data backfill --seasons 20232024 --seasons 20242025
    $ hockey-stats dashboard package --mock
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from hockey_stats import __version__
from hockey_stats.config import get_settings
from hockey_stats.logging import setup_logging

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from hockey_stats.data.pipelines import BackfillReport
    from hockey_stats.output.dashboard import DashboardFacade

# Initialize console for rich output
console = Console()

# Create main app
app = typer.Typer(
    name="hockey-stats",
    help="Hockey stats backfill CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Create subcommand groups
data_app = typer.Typer(
    name="data",
    help="Data backfill and inspection commands",
    no_args_is_help=True,
)
dashboard_app = typer.Typer(
    name="dashboard",
    help="Dashboard payload commands",
    no_args_is_help=True,
)

# Register subcommand groups
app.add_typer(data_app, name="data")
app.add_typer(dashboard_app, name="dashboard")

# Store verdict thresholds
COMPLETE_MIN_TEAMS = 30
COMPLETE_MIN_GAMES = 1000
COMPLETE_MIN_PLAYERS = 500


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]hockey-stats[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-V",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Hockey stats backfill CLI.

    Fills the local store from the NHL and MoneyPuck feeds and serves
    dashboard payloads from it.
    """
    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, log_dir=settings.log_dir_obj)


# =============================================================================
# Data Commands
# =============================================================================


@data_app.command("backfill")
def data_backfill(
    seasons: Annotated[
        list[str],
        typer.Option(
            "--seasons",
            "-s",
            help="Seasons to backfill (e.g., 20232024)",
        ),
    ],
    playoffs: Annotated[
        bool,
        typer.Option(
            "--playoffs",
            "-p",
            help="Also collect playoff games",
        ),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the final report as JSON",
        ),
    ] = False,
) -> None:
    """Run the staged backfill.

    Populates teams, players, games, per-game stats, focus-team shots,
    season aggregates and advanced metrics. Safe to re-run.
    """
    from hockey_stats.data import (
        BackfillPipeline,
        NHLApiClient,
        create_session_factory,
        get_engine,
        init_db,
    )
    from hockey_stats.types import BackfillError, FatalStageError

    settings = get_settings()
    settings.ensure_directories()

    console.print(
        Panel(
            f"[bold]Seasons:[/bold] {', '.join(seasons)}\n"
            f"[bold]Playoffs:[/bold] {playoffs}\n"
            f"[bold]Focus team:[/bold] {settings.focus_team_abbrev}",
            title="Backfill",
        )
    )

    engine = get_engine()
    init_db(engine)

    with NHLApiClient() as api_client:
        pipeline = BackfillPipeline(create_session_factory(engine), api_client, settings)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=None)

            def on_progress(snapshot: Any) -> None:
                progress.update(
                    task,
                    description=snapshot.current_step,
                    completed=snapshot.progress,
                    total=snapshot.total_steps,
                )

            def on_season_complete(season: str, payload: Any) -> None:
                progress.console.print(
                    f"[green]Season {season}:[/green] "
                    f"{payload['team_season_rows']} team rows, "
                    f"{payload['player_season_rows']} player rows"
                )

            try:
                report = pipeline.run(
                    seasons,
                    include_playoffs=playoffs,
                    on_progress=on_progress,
                    on_season_complete=on_season_complete,
                )
            except FatalStageError as e:
                if e.report is not None:
                    _display_backfill_report(e.report, as_json)
                console.print(f"[red]Backfill aborted: {e}[/red]")
                raise typer.Exit(1) from e
            except BackfillError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(1) from e

    _display_backfill_report(report, as_json)


@data_app.command("status")
def data_status() -> None:
    """Show row counts, data freshness and a completeness verdict."""
    from hockey_stats.data import init_db, session_scope

    settings = get_settings()

    # Check if database exists
    if not settings.db_path_obj.exists():
        console.print(
            Panel(
                f"[bold]Database:[/bold] {settings.db_path}\n"
                "[yellow]Database not found. Run 'data backfill' first.[/yellow]",
                title="Data Status",
            )
        )
        return

    init_db()

    with session_scope() as session:
        stats = _get_database_stats(session, settings.focus_team_abbrev)

    table = Table(title="Database Status")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in stats["counts"].items():
        table.add_row(name, str(count))
    console.print(table)

    verdict = _verdict(stats["counts"])
    color = {"complete": "green", "partial": "yellow"}.get(verdict, "red")
    console.print(
        Panel(
            f"[bold]Latest game:[/bold] {stats['latest_game'] or 'N/A'}\n"
            f"[bold]Latest update:[/bold] {stats['latest_update'] or 'N/A'}\n"
            f"[bold]{settings.focus_team_abbrev} players:[/bold] {stats['focus_players']}\n"
            f"[bold]{settings.focus_team_abbrev} games:[/bold] {stats['focus_games']}\n"
            f"[bold]Verdict:[/bold] [{color}]{verdict}[/{color}]",
            title="Data Status",
        )
    )


@data_app.command("validate")
def data_validate() -> None:
    """Check that all nine tables exist and foreign keys are enforced."""
    from hockey_stats.data import get_engine, missing_tables, verify_foreign_keys_enabled

    engine = get_engine()
    missing = missing_tables(engine)
    if missing:
        console.print(f"[red]Missing tables: {', '.join(missing)}[/red]")
        raise typer.Exit(1)
    console.print("[green]All tables present[/green]")

    if not verify_foreign_keys_enabled(engine):
        console.print("[red]Foreign keys are not enforced[/red]")
        raise typer.Exit(1)
    console.print("[green]Foreign keys enforced[/green]")


@data_app.command("aggregate")
def data_aggregate(
    seasons: Annotated[
        list[str],
        typer.Option(
            "--seasons",
            "-s",
            help="Seasons to recompute (e.g., 20232024)",
        ),
    ],
) -> None:
    """Recompute season aggregates from stored game rows. No network."""
    from hockey_stats.data import (
        SeasonAggregator,
        Upserter,
        create_session_factory,
        get_engine,
        init_db,
        validate_seasons,
    )
    from hockey_stats.types import InvalidSeasonError

    try:
        checked = validate_seasons(seasons)
    except InvalidSeasonError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e

    engine = get_engine()
    init_db(engine)
    session_factory = create_session_factory(engine)
    aggregator = SeasonAggregator(session_factory, Upserter(session_factory))

    table = Table(title="Season Aggregates")
    table.add_column("Season", style="cyan")
    table.add_column("Player rows", justify="right")
    table.add_column("Team rows", justify="right")
    table.add_column("Leader", style="green")
    for season in checked:
        payload = aggregator.aggregate_season(season)
        leader = payload["standings"][0] if payload["standings"] else None
        table.add_row(
            season,
            str(payload["player_season_rows"]),
            str(payload["team_season_rows"]),
            f"team {leader['team_id']} ({leader['points']} pts)" if leader else "N/A",
        )
    console.print(table)


def _get_database_stats(session: Session, focus_abbrev: str) -> dict[str, Any]:
    """Row counts per table plus freshness and focus-team coverage."""
    from sqlalchemy import func, or_, select

    from hockey_stats.data import ALL_MODELS, Game, Player, Team

    counts = {
        model.__tablename__: session.scalar(select(func.count()).select_from(model)) or 0
        for model in ALL_MODELS
    }
    latest_game = session.scalar(select(func.max(Game.game_date)))
    updates = [
        session.scalar(select(func.max(model.updated_at)))
        for model in ALL_MODELS
        if "updated_at" in model.__table__.c
    ]
    updates = [u for u in updates if u is not None]

    focus_id = session.scalar(select(Team.id).where(Team.abbreviation == focus_abbrev))
    focus_players = focus_games = 0
    if focus_id is not None:
        focus_players = session.scalar(
            select(func.count()).select_from(Player).where(Player.team_id == focus_id)
        )
        focus_games = session.scalar(
            select(func.count())
            .select_from(Game)
            .where(or_(Game.home_team_id == focus_id, Game.away_team_id == focus_id))
        )

    return {
        "counts": counts,
        "latest_game": latest_game,
        "latest_update": max(updates) if updates else None,
        "focus_players": focus_players or 0,
        "focus_games": focus_games or 0,
    }


def _verdict(counts: dict[str, int]) -> str:
    """Classify the store as complete, partial or empty."""
    if counts.get("teams", 0) < COMPLETE_MIN_TEAMS:
        return "empty"
    if (
        counts.get("games", 0) >= COMPLETE_MIN_GAMES
        and counts.get("players", 0) >= COMPLETE_MIN_PLAYERS
    ):
        return "complete"
    return "partial"


def _display_backfill_report(report: BackfillReport, as_json: bool = False) -> None:
    """Display backfill report to console."""
    from hockey_stats.data.pipelines import PipelineStatus

    if as_json:
        console.print_json(json.dumps(report.to_dict()))
        return

    status_color = {
        PipelineStatus.COMPLETED: "green",
        PipelineStatus.FAILED: "red",
        PipelineStatus.STOPPED: "yellow",
        PipelineStatus.RUNNING: "yellow",
        PipelineStatus.READY: "white",
    }.get(report.status, "white")

    console.print(f"\n[{status_color}]Status: {report.status.value}[/{status_color}]")

    table = Table(title="Row Counts")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in report.row_counts.items():
        table.add_row(name, str(count))
    console.print(table)

    fallback_stages = [label for label in report.completed if label.endswith("(fallback)")]
    if fallback_stages:
        console.print(f"[yellow]Fallback data used: {', '.join(fallback_stages)}[/yellow]")
    if report.mapping_gaps:
        console.print(f"Mapping gaps: {len(report.mapping_gaps)} fields")
    console.print(f"Duration: {report.duration_seconds:.1f}s")

    if report.errors:
        console.print(f"\n[red]Errors ({len(report.errors)}):[/red]")
        for error in report.errors[:10]:
            console.print(f"  - {error}")
        if len(report.errors) > 10:
            console.print(f"  ... and {len(report.errors) - 10} more")


# =============================================================================
# Dashboard Commands
# =============================================================================


def _build_facade(mock: bool) -> DashboardFacade:
    from hockey_stats.data import create_session_factory, get_engine
    from hockey_stats.output import DashboardFacade, MockDataProvider, StoreDataProvider

    settings = get_settings()
    if mock:
        provider = MockDataProvider()
    else:
        provider = StoreDataProvider(create_session_factory(get_engine()))
    return DashboardFacade(provider, focus_team_abbrev=settings.focus_team_abbrev)


@dashboard_app.command("package")
def dashboard_package(
    season: Annotated[
        str,
        typer.Option(
            "--season",
            "-s",
            help="Season of the package (e.g., 20242025)",
        ),
    ] = "20242025",
    mock: Annotated[
        bool,
        typer.Option(
            "--mock",
            help="Serve the built-in sample data instead of the database",
        ),
    ] = False,
) -> None:
    """Print the focus team package as JSON."""
    from hockey_stats.output import DashboardError

    try:
        package = _build_facade(mock).fetch_focus_team_package(season)
    except DashboardError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e
    console.print_json(json.dumps(package, default=str))


@dashboard_app.command("game")
def dashboard_game(
    game_id: Annotated[
        int,
        typer.Argument(help="Game ID (e.g., 2024020500)"),
    ],
    mock: Annotated[
        bool,
        typer.Option(
            "--mock",
            help="Serve the built-in sample data instead of the database",
        ),
    ] = False,
) -> None:
    """Print a single game with its per-game rows as JSON."""
    detail = _build_facade(mock).fetch_game_detail(game_id)
    if detail is None:
        console.print(f"[red]Game {game_id} not found[/red]")
        raise typer.Exit(1)
    console.print_json(json.dumps(detail, default=str))


if __name__ == "__main__":
    app()
