"""Typer entry-point wiring for the Twenty-One CLI."""

from __future__ import annotations

import logging
import random
import time
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.table import Table

from .. import actions, benchmark
from ..actions import CenterMove, EndTurnMove, Move, StorageMove
from ..engine import GameEngine
from ..state import Difficulty, GameConfig, PlayerSeat
from .render import describe_event, describe_move, render_state

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

MAX_EVENT_LOG = 12


@app.callback()
def configure(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)."),
) -> None:
    """Twenty-One card game engine with AI opponents."""

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_seats(players: int, humans: int, difficulty: Difficulty) -> list[PlayerSeat]:
    seats: list[PlayerSeat] = []
    for idx in range(players):
        if idx < humans:
            seats.append(PlayerSeat(name="You" if humans == 1 else f"Player {idx + 1}"))
        else:
            seats.append(PlayerSeat(name=f"AI {idx + 1}", is_ai=True, ai_difficulty=difficulty))
    return seats


def _print_events(engine: GameEngine, start: int) -> int:
    """Print events appended since ``start`` and return the new log length."""

    names = [player.name for player in engine.players]
    for event in engine.events[start:]:
        console.print(describe_event(event, names))
    return len(engine.events)


def _apply_human_move(engine: GameEngine, move: Move) -> bool:
    if isinstance(move, CenterMove):
        return engine.play_direct_to_center(move.source, move.source_index, move.pile_index)
    if isinstance(move, StorageMove):
        return engine.play_direct_to_storage(move.source, move.source_index, move.slot_index)
    if isinstance(move, EndTurnMove):
        return engine.end_current_turn()
    raise ValueError(f"Unknown move {move!r}")


def _format_move_entries(engine: GameEngine, moves: Sequence[Move]) -> list[str]:
    return [f"[bold]{idx}[/bold] {describe_move(engine.state, move)}" for idx, move in enumerate(moves, start=1)]


@app.command()
def play(
    players: int = typer.Option(4, min=2, max=4, help="Number of seated players."),
    humans: int = typer.Option(1, min=0, help="Human-controlled seats starting from P1."),
    difficulty: Difficulty = typer.Option(Difficulty.MEDIUM, case_sensitive=False, help="AI difficulty."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    timed: bool = typer.Option(False, "--timed", help="Limit each human turn to the turn timer."),
    turn_seconds: int = typer.Option(30, min=1, help="Seconds per turn in timed mode."),
) -> None:
    """Play an interactive game against AI opponents."""

    if humans > players:
        raise typer.BadParameter("Humans cannot exceed the total number of players.")

    config = GameConfig(num_players=players, timed_mode=timed, turn_seconds=turn_seconds)
    engine = GameEngine(config, _build_seats(players, humans, difficulty), rng=random.Random(seed))
    engine.reset_game()
    seen = _print_events(engine, 0)

    while not engine.is_game_over:
        if engine.is_ai_turn:
            engine.play_ai_turn()
            seen = _print_events(engine, seen)
            continue

        console.print(render_state(engine.state, reveal_players={engine.current_player_index}))
        moves = actions.legal_moves(engine.state)
        for line in _format_move_entries(engine, moves):
            console.print(line)
        console.print("[dim]h[/dim] hint  [dim]f[/dim] force end  [dim]q[/dim] quit")

        started = time.monotonic()
        choice = Prompt.ask(f"{engine.current_player.name}, choose", default="1" if moves else "f").strip().lower()
        if timed and engine.tick(time.monotonic() - started):
            console.print("[yellow]Time's up![/yellow]")
            seen = _print_events(engine, seen)
            continue

        if choice == "q":
            console.print("[dim]Game abandoned.[/dim]")
            return
        if choice == "h":
            hint = engine.get_hint()
            console.print(f"[cyan]Hint:[/cyan] {describe_move(engine.state, hint) if hint else 'no move available'}")
            continue
        if choice == "f":
            engine.force_end_or_default_move()
        elif choice.isdigit() and 1 <= int(choice) <= len(moves):
            _apply_human_move(engine, moves[int(choice) - 1])
        else:
            console.print("[red]Invalid choice.[/red]")
            continue
        seen = _print_events(engine, seen)

    console.print(render_state(engine.state, reveal_players=range(len(engine.players))))


@app.command()
def simulate(
    players: int = typer.Option(4, min=2, max=4, help="Number of AI players."),
    difficulty: Difficulty = typer.Option(Difficulty.MEDIUM, case_sensitive=False, help="AI difficulty for every seat."),
    seed: int = typer.Option(7, help="Random seed for the simulation."),
    turn_limit: int = typer.Option(benchmark.DEFAULT_TURN_LIMIT, min=1, help="Turns before the game is adjudicated."),
    events: int = typer.Option(MAX_EVENT_LOG, min=0, help="Number of trailing events to print."),
) -> None:
    """Play an AI-only game and print the outcome."""

    seats = [PlayerSeat(name=f"AI {idx + 1}", is_ai=True, ai_difficulty=difficulty) for idx in range(players)]
    engine = GameEngine(GameConfig(num_players=players), seats, rng=random.Random(seed))
    summary, timed_out = benchmark.play_ai_game(engine, turn_limit=turn_limit)

    names = [player.name for player in engine.players]
    if events:
        for event in engine.events[-events:]:
            console.print(describe_event(event, names))
    console.print(render_state(engine.state, reveal_players=range(players)))
    result = "after hitting the turn limit" if timed_out else f"in {summary.turns_played} turns"
    console.print(f"[bold green]{names[summary.winner_index]} wins[/bold green] {result}.")


@app.command("benchmark")
def benchmark_cli(
    games: int = typer.Option(10, min=1, help="Number of head-to-head games."),
    baseline: Difficulty = typer.Option(Difficulty.MEDIUM, case_sensitive=False, help="Baseline AI difficulty."),
    challenger: Difficulty = typer.Option(Difficulty.HARD, case_sensitive=False, help="Challenger AI difficulty."),
    seed: int = typer.Option(123, help="Random seed for the benchmark."),
    turn_limit: int = typer.Option(benchmark.DEFAULT_TURN_LIMIT, min=1, help="Turns before a game is adjudicated."),
) -> None:
    """Run a baseline vs. challenger benchmark."""

    report = benchmark.run_head_to_head(
        games=games,
        baseline=baseline,
        challenger=challenger,
        seed=seed,
        turn_limit=turn_limit,
    )

    table = Table(title="Head-to-Head Benchmark", box=box.SIMPLE_HEAVY)
    table.add_column("Agent", justify="center")
    table.add_column("Difficulty", justify="center")
    table.add_column("Wins", justify="right")
    table.add_column("Cards Left", justify="right")

    table.add_row("Baseline", baseline.value, str(report.baseline.wins), str(report.baseline.cards_remaining))
    table.add_row("Challenger", challenger.value, str(report.challenger.wins), str(report.challenger.cards_remaining))

    console.print(table)

    if report.history.games:
        console.print(f"[cyan]{len(report.history.games)} game(s) simulated.[/cyan]")
    if report.timeouts:
        console.print(f"[yellow]{report.timeouts} game(s) decided by the turn limit.[/yellow]")


def main() -> None:
    """Entry-point for the ``twentyone`` console script."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
