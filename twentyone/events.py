"""Structured game events emitted by the rules engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple, Union

from .cards import Card
from .state import CardSource

__all__ = [
    "EventKind",
    "Destination",
    "GameStartedEvent",
    "CardPlayedEvent",
    "HandRefilledEvent",
    "PileCompletedEvent",
    "InvalidMoveEvent",
    "TurnEndedEvent",
    "GameOverEvent",
    "GameEvent",
    "card_to_dict",
]


class EventKind(str, Enum):
    """Discriminator shared by every event variant."""

    GAME_STARTED = "GAME_STARTED"
    CARD_PLAYED = "CARD_PLAYED"
    HAND_REFILLED = "HAND_REFILLED"
    PILE_COMPLETED = "PILE_COMPLETED"
    INVALID_MOVE = "INVALID_MOVE"
    TURN_ENDED = "TURN_ENDED"
    GAME_OVER = "GAME_OVER"


class Destination(str, Enum):
    CENTER = "CENTER"
    STORAGE = "STORAGE"


def card_to_dict(card: Card | None) -> Dict[str, Any] | None:
    if card is None:
        return None
    return {"id": card.id, "rank": int(card.rank), "suit": card.suit.value}


@dataclass(frozen=True, slots=True)
class GameStartedEvent:
    starting_player: int
    num_players: int

    @property
    def kind(self) -> EventKind:
        return EventKind.GAME_STARTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "startingPlayer": self.starting_player,
            "numPlayers": self.num_players,
        }


@dataclass(frozen=True, slots=True)
class CardPlayedEvent:
    """A card left ``source`` and landed on a center pile or a storage slot."""

    player: int
    card: Card
    source: CardSource
    source_index: int
    destination: Destination
    destination_index: int

    @property
    def kind(self) -> EventKind:
        return EventKind.CARD_PLAYED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "player": self.player,
            "card": card_to_dict(self.card),
            "source": self.source.value,
            "sourceIndex": self.source_index,
            "destination": self.destination.value,
            "destinationIndex": self.destination_index,
        }


@dataclass(frozen=True, slots=True)
class HandRefilledEvent:
    player: int
    cards: Tuple[Card, ...] = ()

    @property
    def kind(self) -> EventKind:
        return EventKind.HAND_REFILLED

    @property
    def cards_drawn(self) -> int:
        return len(self.cards)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "player": self.player,
            "cards": [card_to_dict(card) for card in self.cards],
        }


@dataclass(frozen=True, slots=True)
class PileCompletedEvent:
    pile_index: int
    cards_returned: int

    @property
    def kind(self) -> EventKind:
        return EventKind.PILE_COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "pileIndex": self.pile_index,
            "cardsReturned": self.cards_returned,
        }


@dataclass(frozen=True, slots=True)
class InvalidMoveEvent:
    """A rejected action; the state is left untouched."""

    player: int | None
    code: str
    message: str
    detail: Mapping[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> EventKind:
        return EventKind.INVALID_MOVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "player": self.player,
            "code": self.code,
            "message": self.message,
            "detail": dict(self.detail),
        }


@dataclass(frozen=True, slots=True)
class TurnEndedEvent:
    player: int
    next_player: int
    forced: bool = False

    @property
    def kind(self) -> EventKind:
        return EventKind.TURN_ENDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "player": self.player,
            "nextPlayer": self.next_player,
            "forced": self.forced,
        }


@dataclass(frozen=True, slots=True)
class GameOverEvent:
    winner: int

    @property
    def kind(self) -> EventKind:
        return EventKind.GAME_OVER

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "winner": self.winner}


GameEvent = Union[
    GameStartedEvent,
    CardPlayedEvent,
    HandRefilledEvent,
    PileCompletedEvent,
    InvalidMoveEvent,
    TurnEndedEvent,
    GameOverEvent,
]
