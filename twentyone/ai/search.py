"""Move selection for AI seats: greedy priorities plus a short look-ahead."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List

from .. import actions
from ..actions import CenterMove, EndTurnMove, Move
from ..evaluation import evaluate_position
from ..rules import IllegalMove, NoLegalMoveAvailable, can_end_turn
from ..state import CardSource, Difficulty, GameState
from .policy import (
    DifficultyProfile,
    PROFILES,
    dedupe_key,
    king_penalty,
    move_card,
    pick_personal_pile_move,
    pick_storage_move,
    source_bonus,
)

logger = logging.getLogger(__name__)

MAX_TURN_MOVES = 64
# Look-ahead stops exploring siblings once one beats the incumbent by this much.
PRUNE_MARGIN = 30.0


@dataclass(slots=True)
class ScoredMove:
    move: Move
    score: float


def _simulation_rng() -> random.Random:
    # Completed piles reshuffle the stock; a fixed seed keeps scoring reproducible.
    return random.Random(0)


def _after(state: GameState, move: Move) -> GameState:
    child = state.clone()
    actions.apply_move(child, move, _simulation_rng())
    return child


def _unique_center_moves(state: GameState, moves: List[CenterMove]) -> List[CenterMove]:
    seen: set[tuple[str, int, int]] = set()
    unique: List[CenterMove] = []
    for move in moves:
        key = dedupe_key(state, move)
        if key in seen:
            continue
        seen.add(key)
        unique.append(move)
    return unique


def _lookahead(state: GameState, player_index: int, depth: int, best_known: float) -> float:
    """Best score reachable by continuing the turn for at most ``depth`` plays."""

    if depth <= 0 or state.is_over or state.current_player_index != player_index:
        return evaluate_position(state, player_index)
    moves = _unique_center_moves(state, actions.legal_center_moves(state))
    if not moves:
        return evaluate_position(state, player_index)

    # Stopping is an option whenever the turn could legally end here.
    best = evaluate_position(state, player_index) if can_end_turn(state) else float("-inf")
    for move in moves:
        score = _score_center_move(state, move, player_index, depth, best)
        best = max(best, score)
        if best > best_known + PRUNE_MARGIN:
            break
    return best


def _score_center_move(
    state: GameState,
    move: CenterMove,
    player_index: int,
    depth: int,
    best_known: float,
    conserve_kings: bool = True,
) -> float:
    child = _after(state, move)
    score = _lookahead(child, player_index, depth - 1, best_known)
    score += source_bonus(move)
    if conserve_kings:
        score -= king_penalty(state, move)
    return score


def score_moves(state: GameState, moves: List[CenterMove], profile: DifficultyProfile) -> List[ScoredMove]:
    """Score center moves with the profile's look-ahead depth."""

    player_index = state.current_player_index
    scored: List[ScoredMove] = []
    best = float("-inf")
    for move in _unique_center_moves(state, moves):
        score = _score_center_move(
            state,
            move,
            player_index,
            max(1, profile.lookahead_depth),
            best,
            conserve_kings=profile.conserve_kings,
        )
        best = max(best, score)
        scored.append(ScoredMove(move, score))
    return scored


def _greedy_center_move(state: GameState, moves: List[CenterMove]) -> CenterMove:
    """Storage before hand, first legal placement wins."""

    for source in (CardSource.STORAGE, CardSource.HAND):
        for move in moves:
            if move.source is source:
                return move
    return moves[0]


def _conserved_alternative(state: GameState, best: ScoredMove, profile: DifficultyProfile) -> Move | None:
    """Return a non-King alternative when spending the King is not worth it."""

    card = move_card(state, best.move)
    if not profile.conserve_kings or card is None or not card.is_wild:
        return None
    player_index = state.current_player_index
    alternatives: List[Move] = []
    if actions.is_valid_move(state, EndTurnMove()):
        alternatives.append(EndTurnMove())
    storage = pick_storage_move(state, profile)
    if storage is not None:
        alternatives.append(storage)
    for alternative in alternatives:
        # The turn passes in both cases, so only the position left behind counts.
        if evaluate_position(_after(state, alternative), player_index) >= best.score:
            return alternative
    return None


def choose_move(state: GameState, profile: DifficultyProfile, rng: random.Random) -> Move:
    """Pick one legal move for the current player.

    Raises :class:`~twentyone.rules.NoLegalMoveAvailable` when the player can
    neither play nor end the turn.
    """

    player = state.current_player
    legal = actions.legal_moves(state)
    if not legal:
        raise NoLegalMoveAvailable(
            f"P{state.current_player_index + 1} has no legal move "
            f"(hand {len(player.hand)}, played {state.turn.cards_played_to_center} to center)"
        )

    if profile.blunder_probability > 0 and rng.random() < profile.blunder_probability:
        move = rng.choice(legal)
        logger.debug("AI (%s) picked a random move: %s", profile.difficulty.value, move)
        return move

    center = [move for move in legal if isinstance(move, CenterMove)]
    from_pile = [move for move in center if move.source is CardSource.PERSONAL_PILE]
    if from_pile:
        move = pick_personal_pile_move(state, from_pile)
        logger.debug("AI (%s) plays its personal pile to pile %d", profile.difficulty.value, move.pile_index + 1)
        return move

    if center:
        if profile.lookahead_depth == 0:
            return _greedy_center_move(state, center)
        scored = score_moves(state, center, profile)
        best = max(scored, key=lambda item: item.score)
        alternative = _conserved_alternative(state, best, profile)
        if alternative is not None:
            logger.debug("AI (%s) keeps its King and plays %s", profile.difficulty.value, alternative)
            return alternative
        logger.debug("AI (%s) best center move %s scored %.1f", profile.difficulty.value, best.move, best.score)
        return best.move

    storage = pick_storage_move(state, profile)
    if storage is not None:
        return storage
    # Only remaining legal move is ending the turn.
    return legal[-1]


def plan_turn(state: GameState, profile: DifficultyProfile, rng: random.Random) -> List[Move]:
    """Return the sequence of moves the AI would make for the rest of this turn."""

    sim = state.clone()
    player_index = sim.current_player_index
    planned: List[Move] = []
    for _ in range(MAX_TURN_MOVES):
        if sim.is_over or sim.current_player_index != player_index:
            break
        try:
            move = choose_move(sim, profile, rng)
            actions.apply_move(sim, move, _simulation_rng())
        except (NoLegalMoveAvailable, IllegalMove) as exc:
            logger.debug("planning stopped: %s", exc)
            break
        planned.append(move)
    return planned


def best_move(state: GameState) -> Move | None:
    """Return the strongest deterministic move for the current player, if any."""

    try:
        return choose_move(state, PROFILES[Difficulty.HARD], random.Random(0))
    except NoLegalMoveAvailable:
        return None
