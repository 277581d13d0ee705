"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable

from rich.console import RenderableType
from rich.panel import Panel

from ..actions import CenterMove, EndTurnMove, Move, StorageMove
from ..cards import Card, Suit
from ..events import (
    CardPlayedEvent,
    Destination,
    GameEvent,
    GameOverEvent,
    GameStartedEvent,
    HandRefilledEvent,
    InvalidMoveEvent,
    PileCompletedEvent,
    TurnEndedEvent,
)
from ..state import CardSource, GameState
from .views import StateSummaryView

_SUIT_COLORS = {
    Suit.SPADES: "cyan",
    Suit.HEARTS: "red",
    Suit.DIAMONDS: "magenta",
    Suit.CLUBS: "green",
}

_SOURCE_LABELS = {
    CardSource.HAND: "hand",
    CardSource.PERSONAL_PILE: "21-pile",
    CardSource.STORAGE: "storage",
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    if card.is_wild:
        return f"[bold yellow]{card.label()}[/bold yellow]"
    color = _SUIT_COLORS.get(card.suit, "white")
    return f"[{color}]{card.label()}[/{color}]"


def render_state(
    state: GameState,
    *,
    reveal_players: Iterable[int] | None = None,
    title: str = "Twenty-One",
) -> RenderableType:
    """Return a Rich panel describing the current table state."""

    view = StateSummaryView(
        state=state,
        reveal_players=set(reveal_players or set()),
        card_formatter=format_card,
    )
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")


def describe_move(state: GameState, move: Move) -> str:
    """Return a one-line description of ``move`` for the current player."""

    if isinstance(move, EndTurnMove):
        return "End turn"
    player = state.current_player
    card = player.card_at(move.source, move.source_index)
    label = format_card(card) if card is not None else "?"
    if isinstance(move, StorageMove):
        return f"Store {label} from hand in slot {move.slot_index + 1}"
    if isinstance(move, CenterMove):
        where = _SOURCE_LABELS[move.source]
        if move.source is CardSource.STORAGE:
            where = f"storage slot {move.source_index + 1}"
        return f"Play {label} from {where} to pile {move.pile_index + 1}"
    return str(move)


def describe_event(event: GameEvent, names: list[str]) -> str:
    """Return a human-readable line for ``event``."""

    def who(index: int | None) -> str:
        if index is None or not 0 <= index < len(names):
            return "Someone"
        return names[index]

    if isinstance(event, GameStartedEvent):
        return f"New game with {event.num_players} players; {who(event.starting_player)} starts"
    if isinstance(event, CardPlayedEvent):
        target = "pile" if event.destination is Destination.CENTER else "storage slot"
        return (
            f"{who(event.player)} played {format_card(event.card)} from "
            f"{_SOURCE_LABELS[event.source]} to {target} {event.destination_index + 1}"
        )
    if isinstance(event, HandRefilledEvent):
        return f"{who(event.player)} drew {event.cards_drawn} card(s)"
    if isinstance(event, PileCompletedEvent):
        return f"[bold]Pile {event.pile_index + 1} completed[/bold]; {event.cards_returned} cards back to stock"
    if isinstance(event, InvalidMoveEvent):
        return f"[red]{event.message}[/red]"
    if isinstance(event, TurnEndedEvent):
        suffix = " [yellow](forced)[/yellow]" if event.forced else ""
        return f"{who(event.player)} ended their turn{suffix}"
    if isinstance(event, GameOverEvent):
        return f"[bold green]{who(event.winner)} wins![/bold green]"
    return str(event)
