"""Static position evaluation used by the AI look-ahead."""

from __future__ import annotations

from dataclasses import dataclass

from . import actions
from .state import GameState

WIN_SCORE = 10_000.0


@dataclass(frozen=True, slots=True)
class EvaluationWeights:
    """Weights applied to the features of a position."""

    personal_pile_card: float = -15.0
    available_move: float = 3.0
    stored_card: float = -1.0
    pile_progress: float = 0.3
    king_in_hand: float = 4.0
    playable_pile_top: float = 8.0


DEFAULT_WEIGHTS = EvaluationWeights()


def evaluate_position(
    state: GameState,
    player_index: int,
    weights: EvaluationWeights = DEFAULT_WEIGHTS,
) -> float:
    """Score ``state`` from the point of view of ``player_index``.

    Higher is better. A finished game scores ``WIN_SCORE`` for the winner and
    ``-WIN_SCORE`` for everyone else.
    """

    if state.winner_index is not None:
        return WIN_SCORE if state.winner_index == player_index else -WIN_SCORE

    player = state.players[player_index]
    score = weights.personal_pile_card * len(player.personal_pile)

    held = [card for card in player.storage if card is not None] + list(player.hand)
    if player.pile_top is not None:
        held.append(player.pile_top)
    score += weights.available_move * sum(actions.count_placements(state, card) for card in held)

    score += weights.stored_card * player.storage_count
    score += weights.pile_progress * sum(pile.expected_rank for pile in state.center_piles)
    score += weights.king_in_hand * sum(1 for card in player.hand if card.is_wild)

    top = player.pile_top
    if top is not None and actions.count_placements(state, top) > 0:
        score += weights.playable_pile_top
    return score
