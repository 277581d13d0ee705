"""Difficulty profiles and simple card heuristics for the AI opponent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .. import actions
from ..actions import CenterMove, StorageMove
from ..cards import Card
from ..state import CardSource, Difficulty, GameState

# Spending a King on a pile below this expected rank is penalised.
LOW_PILE_RANK = 10
KING_SPEND_PENALTY = 6.0
PERSONAL_PILE_BONUS = 12.0
STORAGE_SOURCE_BONUS = 4.0


@dataclass(frozen=True, slots=True)
class DifficultyProfile:
    """Tunable knobs that distinguish the AI difficulty levels."""

    difficulty: Difficulty
    lookahead_depth: int
    blunder_probability: float
    conserve_kings: bool


PROFILES: Dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(Difficulty.EASY, lookahead_depth=0, blunder_probability=0.35, conserve_kings=False),
    Difficulty.MEDIUM: DifficultyProfile(
        Difficulty.MEDIUM, lookahead_depth=1, blunder_probability=0.1, conserve_kings=True
    ),
    Difficulty.HARD: DifficultyProfile(Difficulty.HARD, lookahead_depth=3, blunder_probability=0.0, conserve_kings=True),
}


def profile_for(difficulty: Difficulty | str | None) -> DifficultyProfile:
    """Return the profile for ``difficulty``; missing values map to medium."""

    if difficulty is None:
        return PROFILES[Difficulty.MEDIUM]
    return PROFILES[Difficulty(difficulty)]


def move_card(state: GameState, move: CenterMove | StorageMove) -> Card | None:
    """Return the card ``move`` would take from the current player."""

    return state.current_player.card_at(move.source, move.source_index)


def source_bonus(move: CenterMove) -> float:
    if move.source is CardSource.PERSONAL_PILE:
        return PERSONAL_PILE_BONUS
    if move.source is CardSource.STORAGE:
        return STORAGE_SOURCE_BONUS
    return 0.0


def king_penalty(state: GameState, move: CenterMove) -> float:
    """Return the cost of spending a King on a pile that still needs a low rank."""

    card = move_card(state, move)
    if card is None or not card.is_wild:
        return 0.0
    if state.center_piles[move.pile_index].expected_rank < LOW_PILE_RANK:
        return KING_SPEND_PENALTY
    return 0.0


def dedupe_key(state: GameState, move: CenterMove) -> tuple[str, int, int]:
    """Key under which two center moves lead to equivalent positions."""

    card = move_card(state, move)
    rank = int(card.rank) if card is not None else 0
    return (move.source.value, rank, state.center_piles[move.pile_index].expected_rank)


def pick_personal_pile_move(state: GameState, moves: list[CenterMove]) -> CenterMove:
    """Prefer the pile closest to completion, then the lowest pile index."""

    return min(moves, key=lambda move: (-state.center_piles[move.pile_index].expected_rank, move.pile_index))


def pick_storage_move(state: GameState, profile: DifficultyProfile) -> StorageMove | None:
    """Return the storage play for this turn, or ``None`` when storing is not legal."""

    if not actions.legal_storage_moves(state):
        return None
    player = state.current_player
    slot_index = player.empty_storage_slots()[0]
    if profile.lookahead_depth == 0:
        return StorageMove(source_index=0, slot_index=slot_index)

    def usefulness(hand_index: int) -> tuple[int, int]:
        card = player.hand[hand_index]
        return (actions.count_placements(state, card), -int(card.rank))

    best = min(range(len(player.hand)), key=usefulness)
    return StorageMove(source_index=best, slot_index=slot_index)
