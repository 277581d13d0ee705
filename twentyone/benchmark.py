"""Benchmark harness for comparing AI difficulty profiles."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from . import scoreboard
from .engine import GameEngine
from .state import Difficulty, GameConfig, PlayerSeat

logger = logging.getLogger(__name__)

__all__ = ["AgentBreakdown", "HeadToHeadReport", "play_ai_game", "run_head_to_head"]

DEFAULT_TURN_LIMIT = 400


@dataclass(frozen=True, slots=True)
class AgentBreakdown:
    """Aggregate statistics collected for a single agent across a benchmark."""

    wins: int
    cards_remaining: int
    turns_played: int


@dataclass(frozen=True, slots=True)
class HeadToHeadReport:
    """Summary of a head-to-head benchmark between two difficulty profiles."""

    history: scoreboard.MatchHistory
    baseline: AgentBreakdown
    challenger: AgentBreakdown
    timeouts: int


def play_ai_game(
    engine: GameEngine,
    game_number: int = 1,
    turn_limit: int = DEFAULT_TURN_LIMIT,
) -> tuple[scoreboard.GameSummary, bool]:
    """Deal and play an AI-only game; return its summary and whether it hit the turn limit.

    A game that is still running after ``turn_limit`` turns is awarded to the
    player with the smallest personal pile (lowest seat on ties).
    """

    if not all(seat.is_ai for seat in engine.seats):
        raise ValueError("every seat must be AI-controlled")
    engine.reset_game()
    while not engine.is_game_over and engine.turn_index < turn_limit:
        engine.play_ai_turn()

    state = engine.state
    if state.winner_index is not None:
        return scoreboard.summarize_game(game_number, state), False

    remaining = [len(player.personal_pile) for player in state.players]
    winner = min(range(len(remaining)), key=remaining.__getitem__)
    logger.info("game %d hit the %d turn limit; P%d wins on pile size", game_number, turn_limit, winner + 1)
    summary = scoreboard.GameSummary(
        game_number=game_number,
        winner_index=winner,
        turns_played=state.turn_index,
        personal_pile_remaining=tuple(remaining),
    )
    return summary, True


def run_head_to_head(
    games: int,
    baseline: Difficulty,
    challenger: Difficulty,
    *,
    seed: int = 123,
    turn_limit: int = DEFAULT_TURN_LIMIT,
) -> HeadToHeadReport:
    """Run a two-player benchmark returning aggregate statistics.

    Seats alternate every game so neither profile keeps the same position.
    """

    if games <= 0:
        raise ValueError("games must be positive")

    rng = random.Random(seed)
    history = scoreboard.MatchHistory(num_players=2)
    stats = {
        "baseline": {"wins": 0, "remaining": 0, "turns": 0},
        "challenger": {"wins": 0, "remaining": 0, "turns": 0},
    }
    timeouts = 0

    for game_number in range(1, games + 1):
        if game_number % 2 == 1:
            labels = ("baseline", "challenger")
            difficulties = (baseline, challenger)
        else:
            labels = ("challenger", "baseline")
            difficulties = (challenger, baseline)

        seats = [
            PlayerSeat(name=f"{label.title()} ({difficulty.value})", is_ai=True, ai_difficulty=difficulty)
            for label, difficulty in zip(labels, difficulties)
        ]
        engine = GameEngine(GameConfig(num_players=2), seats, rng=random.Random(rng.randrange(2**32)))
        summary, timed_out = play_ai_game(engine, game_number, turn_limit)
        history.record(summary)
        timeouts += int(timed_out)

        for idx, label in enumerate(labels):
            bucket = stats[label]
            bucket["remaining"] += summary.personal_pile_remaining[idx]
            bucket["turns"] += summary.turns_played
            if summary.winner_index == idx:
                bucket["wins"] += 1

    def breakdown(label: str) -> AgentBreakdown:
        bucket = stats[label]
        return AgentBreakdown(
            wins=bucket["wins"],
            cards_remaining=bucket["remaining"],
            turns_played=bucket["turns"],
        )

    return HeadToHeadReport(
        history=history,
        baseline=breakdown("baseline"),
        challenger=breakdown("challenger"),
        timeouts=timeouts,
    )
