#!/usr/bin/env python3
"""
CLI for the live cricket scorer
"""
import json

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from app.config import settings
from app.catalog import load_catalog, normalize_catalog
from app.engine import MatchSession
from app.engine.events import (
    CreateTeams, StartInnings, RecordRun, RecordExtra, RecordWicket,
    SelectNewBatsman, ActivateLastManStanding, SelectBowler, ChangeStrike,
    EndInnings, Undo, Reset,
)

console = Console()


def _event_from_step(step: dict):
    """Build an engine event from one step of a match script"""
    kind = step.get("event")
    if kind == "createTeams":
        players = step.get("players")
        return CreateTeams(
            team_a_name=step.get("teamA"),
            team_b_name=step.get("teamB"),
            roster_candidates=normalize_catalog(players) if players is not None else None,
            roster_size=step.get("rosterSize"),
        )
    if kind == "startInnings":
        return StartInnings(
            batting_team=step.get("battingTeam"),
            opening_striker=step.get("openingStriker"),
            opening_non_striker=step.get("openingNonStriker"),
            starting_bowler=step.get("startingBowler"),
            overs_limit=step.get("oversLimit"),
        )
    if kind == "run":
        return RecordRun(runs=step.get("runs"))
    if kind == "extra":
        return RecordExtra(kind=step.get("type"), extra_runs=step.get("extraRuns", 0))
    if kind == "wicket":
        return RecordWicket(wicket_type=step.get("wicketType"))
    if kind == "newBatsman":
        return SelectNewBatsman(name=step.get("name"))
    if kind == "lastManStanding":
        return ActivateLastManStanding()
    if kind == "selectBowler":
        return SelectBowler(name=step.get("bowler"))
    if kind == "changeStrike":
        return ChangeStrike(action=step.get("action"), name=step.get("name"))
    if kind == "endInnings":
        return EndInnings()
    if kind == "undo":
        return Undo()
    if kind == "reset":
        return Reset()
    raise click.BadParameter(f"Unknown event '{kind}'")


@click.group()
def cli():
    """Live Cricket Scorer"""
    pass


@cli.command()
@click.option("--host", default=settings.HOST, help="Bind address")
@click.option("--port", default=settings.PORT, help="Port to listen on")
def serve(host: str, port: int):
    """Run the scoring API"""
    import uvicorn
    console.print(f"[yellow]Starting scorer on {host}:{port}...[/yellow]")
    uvicorn.run("main:app", host=host, port=port)


@cli.command()
@click.option("--catalog", default=None, help="Path to the player catalog JSON")
def players(catalog: str):
    """Show the player name catalog"""
    names = load_catalog(catalog)

    table = Table(title="Player Catalog")
    table.add_column("#", justify="right")
    table.add_column("Team A", style="cyan")
    table.add_column("Team B", style="magenta")

    rows = max(len(names["teamA"]), len(names["teamB"]))
    if rows == 0:
        console.print("[red]No players found in the catalog.[/red]")
        return
    for i in range(rows):
        table.add_row(
            str(i + 1),
            names["teamA"][i] if i < len(names["teamA"]) else "",
            names["teamB"][i] if i < len(names["teamB"]) else "",
        )
    console.print(table)


@cli.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.option("--catalog", default=None, help="Path to the player catalog JSON")
@click.option("--strict/--no-strict", default=False, help="Stop at the first rejected event")
def replay(script: str, catalog: str, strict: bool):
    """Replay a JSON match script and print the scorecard"""
    with open(script, encoding="utf-8") as f:
        steps = json.load(f)

    session = MatchSession(catalog_loader=lambda: load_catalog(catalog))

    for number, step in enumerate(steps, start=1):
        outcome = session.dispatch(_event_from_step(step))
        if outcome.success:
            continue
        console.print(f"[red]Step {number} ({step.get('event')}) rejected: {outcome.message}[/red]")
        if strict:
            raise click.exceptions.Exit(1)

    state = session.state
    teams = state.team_names
    console.print(Panel(f"[bold]{teams['teamA']} vs {teams['teamB']}[/bold]"))

    if state.innings1_card is not None:
        first = state.innings1_score
        console.print(
            f"[cyan]{state.team_name(first.batting_team)}:[/cyan] "
            f"{first.score}/{first.wickets} ({first.balls // 6}.{first.balls % 6} overs)"
        )
        console.print("\n[bold]First Innings Scorecard:[/bold]")
        _print_scorecard(
            state.innings1_card.players,
            state.innings1_card.bowlers,
            state.innings1_card.fall_of_wickets,
        )

    if state.batting_team:
        console.print(
            f"\n[magenta]{state.team_name(state.batting_team)}:[/magenta] "
            f"{state.score}/{state.wickets} ({state.overs_display} overs) - RR: {state.run_rate:.2f}"
        )
        label = "Second Innings" if state.innings == 2 else "First Innings"
        console.print(f"\n[bold]{label} Scorecard:[/bold]")
        _print_scorecard(state.players, state.bowlers, state.fall_of_wickets)

    if state.final_result:
        console.print(f"\n[bold green]{state.final_result}[/bold green]")


def _print_scorecard(players, bowlers, fall_of_wickets):
    """Print innings scorecard"""
    # Batting
    bat_table = Table(title="Batting")
    bat_table.add_column("Batter", style="cyan")
    bat_table.add_column("Dismissal")
    bat_table.add_column("R", justify="right")
    bat_table.add_column("B", justify="right")
    bat_table.add_column("4s", justify="right")
    bat_table.add_column("6s", justify="right")
    bat_table.add_column("SR", justify="right")

    for stat in players.values():
        dismissal = stat.out_reason if stat.out else "not out"
        bat_table.add_row(
            stat.name,
            dismissal,
            str(stat.runs),
            str(stat.balls_faced),
            str(stat.fours),
            str(stat.sixes),
            f"{stat.strike_rate:.1f}",
        )

    console.print(bat_table)

    # Bowling
    bowl_table = Table(title="Bowling")
    bowl_table.add_column("Bowler", style="magenta")
    bowl_table.add_column("O", justify="right")
    bowl_table.add_column("M", justify="right")
    bowl_table.add_column("R", justify="right")
    bowl_table.add_column("W", justify="right")
    bowl_table.add_column("Econ", justify="right")

    for spell in bowlers:
        bowl_table.add_row(
            spell.name,
            spell.overs_display,
            str(spell.maidens),
            str(spell.runs_conceded),
            str(spell.wickets),
            f"{spell.economy:.1f}",
        )

    console.print(bowl_table)

    if fall_of_wickets:
        fow = ", ".join(f"{f.score}-{f.wickets} ({f.player}, {f.overs} ov)" for f in fall_of_wickets)
        console.print(f"[bold]Fall of wickets:[/bold] {fow}")


if __name__ == "__main__":
    cli()
