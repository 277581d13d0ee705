from __future__ import annotations

from rich.console import Console
from typer.testing import CliRunner

from twentyone.actions import CenterMove, EndTurnMove, StorageMove
from twentyone.cards import Rank
from twentyone.cli.main import app
from twentyone.cli.render import describe_event, describe_move, render_state
from twentyone.events import GameOverEvent, InvalidMoveEvent, TurnEndedEvent
from twentyone.state import CardSource

runner = CliRunner()


def test_describe_moves(table) -> None:
    state = table(hands=[[Rank.ACE, *[Rank.NINE] * 4], [Rank.TEN] * 5], storage=[[None, Rank.KING], []])

    assert describe_move(state, EndTurnMove()) == "End turn"
    assert describe_move(state, CenterMove(CardSource.HAND, 0, 2)) == "Play [red]A♥[/red] from hand to pile 3"
    assert "storage slot 2" in describe_move(state, CenterMove(CardSource.STORAGE, 1, 0))
    assert describe_move(state, StorageMove(source_index=1, slot_index=4)).endswith("in slot 5")


def test_describe_events() -> None:
    names = ["Ana", "Bo"]

    assert describe_event(GameOverEvent(winner=1), names) == "[bold green]Bo wins![/bold green]"
    assert "(forced)" in describe_event(TurnEndedEvent(player=0, next_player=1, forced=True), names)
    assert describe_event(InvalidMoveEvent(player=None, code="GameOver", message="The game is over."), names) == (
        "[red]The game is over.[/red]"
    )


def test_render_state_hides_other_hands(table) -> None:
    state = table(hands=[[Rank.ACE, *[Rank.NINE] * 4], [Rank.QUEEN] * 5])
    console = Console(record=True, width=140)

    console.print(render_state(state, reveal_players={0}))
    text = console.export_text()

    assert "A♥" in text
    assert "Q♣" not in text
    assert "Player 2" in text


def test_simulate_command_reports_winner() -> None:
    result = runner.invoke(app, ["simulate", "--players", "2", "--difficulty", "easy", "--turn-limit", "30"])

    assert result.exit_code == 0, result.output
    assert "wins" in result.output


def test_benchmark_command_prints_table() -> None:
    result = runner.invoke(app, ["benchmark", "--games", "2", "--baseline", "easy", "--challenger", "medium", "--turn-limit", "20"])

    assert result.exit_code == 0, result.output
    assert "Head-to-Head Benchmark" in result.output
    assert "Challenger" in result.output


def test_play_command_quits_cleanly() -> None:
    result = runner.invoke(app, ["play", "--players", "2", "--humans", "2", "--seed", "1"], input="q\n")

    assert result.exit_code == 0, result.output
    assert "Game abandoned." in result.output


def test_unknown_log_level_is_rejected() -> None:
    result = runner.invoke(app, ["--log-level", "chatty", "simulate"])

    assert result.exit_code != 0
