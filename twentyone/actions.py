"""Legal action generation utilities for Twenty-One."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Union

from . import rules, turns
from .cards import Card
from .events import GameEvent
from .rules import IllegalMove
from .state import CardSource, GameState


@dataclass(frozen=True, slots=True)
class CenterMove:
    """Play a card from ``source`` onto a center pile."""

    source: CardSource
    source_index: int
    pile_index: int


@dataclass(frozen=True, slots=True)
class StorageMove:
    """Bank a hand card in a storage slot (ends the turn)."""

    source_index: int
    slot_index: int

    @property
    def source(self) -> CardSource:
        return CardSource.HAND


@dataclass(frozen=True, slots=True)
class EndTurnMove:
    """Pass the turn after having played."""


Move = Union[CenterMove, StorageMove, EndTurnMove]


def _sources(state: GameState) -> list[tuple[CardSource, int, Card]]:
    """Return every playable card of the current player, personal pile first."""

    player = state.current_player
    found: list[tuple[CardSource, int, Card]] = []
    if player.pile_top is not None:
        found.append((CardSource.PERSONAL_PILE, 0, player.pile_top))
    for idx, card in enumerate(player.storage):
        if card is not None:
            found.append((CardSource.STORAGE, idx, card))
    for idx, card in enumerate(player.hand):
        found.append((CardSource.HAND, idx, card))
    return found


def legal_center_moves(state: GameState, source: CardSource | None = None) -> list[CenterMove]:
    """Return every center placement available to the current player."""

    if not state.is_started or state.is_over:
        return []
    moves: list[CenterMove] = []
    for card_source, index, card in _sources(state):
        if source is not None and card_source is not source:
            continue
        for pile_index, pile in enumerate(state.center_piles):
            if rules.can_accept(pile, card):
                moves.append(CenterMove(card_source, index, pile_index))
    return moves


def legal_storage_moves(state: GameState) -> list[StorageMove]:
    """Return hand-to-storage moves; empty once anything reached the center."""

    if not state.is_started or state.is_over:
        return []
    if state.turn.cards_played_to_center > 0:
        return []
    player = state.current_player
    return [
        StorageMove(source_index=hand_index, slot_index=slot_index)
        for hand_index in range(len(player.hand))
        for slot_index in player.empty_storage_slots()
    ]


def legal_moves(state: GameState) -> List[Move]:
    """Return every legal move for the current player."""

    moves: List[Move] = []
    moves.extend(legal_center_moves(state))
    moves.extend(legal_storage_moves(state))
    if rules.can_end_turn(state):
        moves.append(EndTurnMove())
    return moves


def count_placements(state: GameState, card: Card) -> int:
    """Return how many center piles would currently accept ``card``."""

    return sum(1 for pile in state.center_piles if rules.can_accept(pile, card))


def apply_move(state: GameState, move: Move, rng: random.Random) -> List[GameEvent]:
    """Apply ``move`` for the current player using the rules engine."""

    if isinstance(move, CenterMove):
        return turns.play_to_center(state, move.source, move.source_index, move.pile_index, rng)
    if isinstance(move, StorageMove):
        return turns.play_to_storage(state, CardSource.HAND, move.source_index, move.slot_index)
    if isinstance(move, EndTurnMove):
        return turns.end_turn(state)
    raise ValueError(f"Unknown move {move!r}")


def is_valid_move(state: GameState, move: Move) -> bool:
    """Return True if applying ``move`` succeeds without rule violations."""

    clone = state.clone()
    try:
        apply_move(clone, move, random.Random(0))
    except IllegalMove:
        return False
    return True
