"""Helpers for tracking results across a series of Twenty-One games."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .state import GameState

__all__ = ["GameSummary", "PlayerMatchTotal", "MatchHistory", "summarize_game"]


@dataclass(frozen=True, slots=True)
class GameSummary:
    """Summary statistics captured after a single game."""

    game_number: int
    winner_index: int
    turns_played: int
    personal_pile_remaining: Sequence[int]


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate totals accumulated across all recorded games."""

    player_index: int
    wins: int
    losses: int
    cards_remaining: int
    current_streak: int
    longest_streak: int


def summarize_game(game_number: int, state: GameState) -> GameSummary:
    """Build a :class:`GameSummary` from a finished game."""

    if state.winner_index is None:
        raise ValueError("game has no winner yet")
    return GameSummary(
        game_number=game_number,
        winner_index=state.winner_index,
        turns_played=state.turn_index + 1,
        personal_pile_remaining=tuple(len(player.personal_pile) for player in state.players),
    )


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates game summaries for a series."""

    num_players: int
    games: list[GameSummary] = field(default_factory=list)
    _wins: list[int] = field(init=False, repr=False)
    _remaining: list[int] = field(init=False, repr=False)
    _streak: list[int] = field(init=False, repr=False)
    _longest: list[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ValueError("num_players must be positive")
        self._wins = [0 for _ in range(self.num_players)]
        self._remaining = [0 for _ in range(self.num_players)]
        self._streak = [0 for _ in range(self.num_players)]
        self._longest = [0 for _ in range(self.num_players)]

    def record(self, summary: GameSummary) -> None:
        """Record ``summary`` and update cumulative totals."""

        if len(summary.personal_pile_remaining) != self.num_players:
            raise ValueError("pile count does not match number of players")
        if not 0 <= summary.winner_index < self.num_players:
            raise ValueError("winner index out of range")
        self.games.append(summary)
        for idx, remaining in enumerate(summary.personal_pile_remaining):
            self._remaining[idx] += remaining
            if idx == summary.winner_index:
                self._wins[idx] += 1
                self._streak[idx] += 1
                self._longest[idx] = max(self._longest[idx], self._streak[idx])
            else:
                self._streak[idx] = 0

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        played = len(self.games)
        return [
            PlayerMatchTotal(
                player_index=idx,
                wins=self._wins[idx],
                losses=played - self._wins[idx],
                cards_remaining=self._remaining[idx],
                current_streak=self._streak[idx],
                longest_streak=self._longest[idx],
            )
            for idx in range(self.num_players)
        ]
