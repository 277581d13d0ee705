"""Stateful facade used by user interfaces to drive a game of Twenty-One."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Sequence

from . import actions, snapshot, turns
from .actions import Move
from .ai import choose_move, profile_for
from .ai.search import MAX_TURN_MOVES, best_move
from .cards import Card
from .events import GameEvent, GameStartedEvent, InvalidMoveEvent
from .rules import IllegalMove, NoCardAtPosition, NoLegalMoveAvailable, can_end_turn
from .state import (
    CardSource,
    CenterPile,
    GameConfig,
    GamePhase,
    GameState,
    PlayerSeat,
    PlayerState,
    TurnContext,
    deal_new_game,
    default_seats,
)

logger = logging.getLogger(__name__)

__all__ = ["Selection", "GameEngine"]


@dataclass(frozen=True, slots=True)
class Selection:
    """Card the UI has picked up but not yet dropped anywhere."""

    card: Card
    source: CardSource
    source_index: int


def _empty_table(config: GameConfig, seats: Sequence[PlayerSeat]) -> GameState:
    players = [
        PlayerState(
            player_number=idx,
            name=seat.name,
            avatar=seat.avatar,
            is_ai=seat.is_ai,
            ai_difficulty=seat.ai_difficulty,
            storage=[None] * config.storage_slots,
        )
        for idx, seat in enumerate(seats)
    ]
    return GameState(
        config=config,
        players=players,
        center_piles=[CenterPile() for _ in range(config.num_center_piles)],
        turn=TurnContext(),
    )


class GameEngine:
    """Owns one game and exposes the operations a UI needs.

    Illegal actions never raise: they return ``False``, append an
    ``INVALID_MOVE`` event and are kept as :attr:`last_error`.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        seats: Sequence[PlayerSeat] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self.seats: List[PlayerSeat] = list(seats) if seats is not None else default_seats(self.config.num_players)
        self.rng = rng or random.Random()
        self.state = _empty_table(self.config, self.seats)
        self.events: List[GameEvent] = []
        self.last_error: IllegalMove | None = None
        self._selection: Selection | None = None

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------

    @property
    def players(self) -> tuple[PlayerState, ...]:
        """Copies of every seat; mutating them leaves the game untouched."""

        return tuple(player.copy() for player in self.state.players)

    @property
    def current_player(self) -> PlayerState:
        return self.state.current_player.copy()

    @property
    def current_player_index(self) -> int:
        return self.state.current_player_index

    @property
    def center_piles(self) -> tuple[CenterPile, ...]:
        return tuple(pile.copy() for pile in self.state.center_piles)

    @property
    def stock_pile_size(self) -> int:
        return len(self.state.stock)

    @property
    def cards_played_this_turn(self) -> int:
        return self.state.turn.cards_played_to_center

    @property
    def can_end_current_turn(self) -> bool:
        return can_end_turn(self.state)

    @property
    def is_game_started(self) -> bool:
        return self.state.is_started

    @property
    def is_game_over(self) -> bool:
        return self.state.is_over

    @property
    def winner(self) -> PlayerState | None:
        if self.state.winner_index is None:
            return None
        return self.state.players[self.state.winner_index].copy()

    @property
    def last_event(self) -> GameEvent | None:
        return self.events[-1] if self.events else None

    @property
    def selected_card(self) -> Selection | None:
        return self._selection

    @property
    def is_ai_turn(self) -> bool:
        if not self.state.is_started or self.state.is_over:
            return False
        return self.state.current_player.is_ai

    @property
    def turn_index(self) -> int:
        return self.state.turn_index

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset_game(self) -> None:
        """Deal a fresh game, discarding any game in progress."""

        self.state = deal_new_game(self.config, self.seats, self.rng)
        self.events = []
        self.last_error = None
        self._selection = None
        logger.info(
            "new game: %d players, P%d starts",
            len(self.state.players),
            self.state.current_player_index + 1,
        )
        self.events.append(
            GameStartedEvent(starting_player=self.state.current_player_index, num_players=len(self.state.players))
        )

    def update_player_name_and_avatar(self, index: int, name: str, avatar: str | None = None) -> bool:
        if not 0 <= index < len(self.seats):
            return False
        seat = self.seats[index]
        seat.name = name
        seat.avatar = avatar
        if index < len(self.state.players):
            self.state.players[index].name = name
            self.state.players[index].avatar = avatar
        return True

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_card(self, source: CardSource, source_index: int = 0, card: Card | None = None) -> bool:
        """Pick up the current player's card at ``source``/``source_index``.

        When ``card`` is given the selection only succeeds if that exact card
        sits at the position.
        """

        if not self.state.is_started or self.state.is_over:
            return False
        found = self.state.current_player.card_at(source, source_index)
        if found is None or (card is not None and found != card):
            self._selection = None
            return False
        self._selection = Selection(card=found, source=source, source_index=source_index)
        return True

    def clear_selection(self) -> None:
        self._selection = None

    def _selected(self) -> Selection:
        if self._selection is None:
            raise NoCardAtPosition("No card selected. Please select a card first.")
        selected = self._selection
        if self.state.current_player.card_at(selected.source, selected.source_index) != selected.card:
            self._selection = None
            raise NoCardAtPosition(
                "The selected card is no longer there. Please select a card again.",
                {"source": selected.source.value, "sourceIndex": selected.source_index},
            )
        return selected

    def play_selected_to_center(self, pile_index: int) -> bool:
        def action() -> List[GameEvent]:
            selected = self._selected()
            return turns.play_to_center(
                self.state, selected.source, selected.source_index, pile_index, self.rng
            )

        played = self._attempt(action)
        if played:
            self._selection = None
        return played

    def play_selected_to_storage(self, slot_index: int) -> bool:
        def action() -> List[GameEvent]:
            selected = self._selected()
            return turns.play_to_storage(self.state, selected.source, selected.source_index, slot_index)

        played = self._attempt(action)
        if played:
            self._selection = None
        return played

    # ------------------------------------------------------------------
    # Direct actions
    # ------------------------------------------------------------------

    def play_direct_to_center(self, source: CardSource, source_index: int, pile_index: int) -> bool:
        self._selection = None
        return self._attempt(
            lambda: turns.play_to_center(self.state, source, source_index, pile_index, self.rng)
        )

    def play_direct_to_storage(self, source: CardSource, source_index: int, slot_index: int) -> bool:
        self._selection = None
        return self._attempt(lambda: turns.play_to_storage(self.state, source, source_index, slot_index))

    def end_current_turn(self) -> bool:
        self._selection = None
        return self._attempt(lambda: turns.end_turn(self.state))

    def force_end_or_default_move(self) -> bool:
        """Resolve the current turn as if its timer expired."""

        self._selection = None
        return self._attempt(lambda: turns.force_end_or_default_move(self.state))

    def tick(self, seconds: float) -> bool:
        """Advance the turn timer; return ``True`` when the turn was forced to end."""

        turn = self.state.turn
        if not self.config.timed_mode or turn.turn_time_remaining is None:
            return False
        if not self.state.is_started or self.state.is_over:
            return False
        turn.turn_time_remaining = max(0.0, turn.turn_time_remaining - seconds)
        if turn.turn_time_remaining > 0:
            return False
        logger.info("P%d ran out of time", self.state.current_player_index + 1)
        return self.force_end_or_default_move()

    def get_hint(self) -> Move | None:
        """Return the move the strongest AI would make for the current player."""

        if not self.state.is_started or self.state.is_over:
            return None
        return best_move(self.state)

    # ------------------------------------------------------------------
    # AI seats
    # ------------------------------------------------------------------

    def play_ai_move(self) -> Move | None:
        """Apply one move for the AI seat on turn and return it.

        Returns ``None`` when it is not an AI's turn or when the AI had to
        forfeit the turn.
        """

        if not self.is_ai_turn:
            return None
        self._selection = None
        player = self.state.current_player
        profile = profile_for(player.ai_difficulty)
        try:
            move = choose_move(self.state, profile, self.rng)
        except NoLegalMoveAvailable as exc:
            logger.error("%s; forfeiting the turn", exc)
            self.force_end_or_default_move()
            return None
        if not self._attempt(lambda: actions.apply_move(self.state, move, self.rng)):
            logger.error("AI move %s was rejected: %s", move, self.last_error)
            self.force_end_or_default_move()
            return None
        return move

    def play_ai_turn(self) -> List[Move]:
        """Play AI moves until the turn passes or the game ends."""

        if not self.is_ai_turn:
            return []
        player_index = self.state.current_player_index
        start_turn = self.state.turn_index
        played: List[Move] = []
        for _ in range(MAX_TURN_MOVES):
            if self.state.is_over or self.state.turn_index != start_turn:
                break
            move = self.play_ai_move()
            if move is None:
                break
            played.append(move)
        else:
            logger.error("P%d exceeded %d moves in one turn", player_index + 1, MAX_TURN_MOVES)
            self.force_end_or_default_move()
        return played

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return snapshot.to_dict(self.state)

    def load_snapshot(self, data: Mapping[str, Any]) -> None:
        """Replace the current game with the one described by ``data``."""

        state = snapshot.from_dict(data)
        self.state = state
        self.config = state.config
        self.seats = [
            PlayerSeat(name=p.name, avatar=p.avatar, is_ai=p.is_ai, ai_difficulty=p.ai_difficulty)
            for p in state.players
        ]
        self.events = []
        self.last_error = None
        self._selection = None

    # ------------------------------------------------------------------

    def _attempt(self, action: Callable[[], List[GameEvent]]) -> bool:
        try:
            produced = action()
        except IllegalMove as exc:
            self.last_error = exc
            player = self.state.current_player_index if self.state.is_started else None
            self.events.append(
                InvalidMoveEvent(player=player, code=exc.code.value, message=exc.message, detail=exc.detail)
            )
            logger.debug("rejected %s: %s", exc.code.value, exc.message)
            return False
        self.last_error = None
        self.events.extend(produced)
        return True
