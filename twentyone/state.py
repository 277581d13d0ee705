"""Core game state data structures for Twenty-One."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from . import cards
from .cards import Card, Rank

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 4


class CardSource(str, Enum):
    """Zones a card can be played from."""

    HAND = "HAND"
    PERSONAL_PILE = "PERSONAL_PILE"
    STORAGE = "STORAGE"


class Difficulty(str, Enum):
    """AI difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GamePhase(str, Enum):
    """States of the turn machine."""

    NOT_STARTED = "not_started"
    AWAITING_ACTION = "awaiting_action"
    TURN_ENDING = "turn_ending"
    GAME_OVER = "game_over"


class EngineFault(RuntimeError):
    """Fatal engine condition; never raised under a correct rule implementation."""


class SetupError(EngineFault):
    """Raised when a game cannot be dealt with the requested configuration."""


@dataclass(slots=True)
class GameConfig:
    """Runtime configuration for a single game."""

    num_players: int = 4
    num_decks: int = 3
    num_center_piles: int = 4
    hand_size: int = 5
    personal_pile_size: int = 21
    storage_slots: int = 5
    timed_mode: bool = False
    turn_seconds: int = 30
    starting_player: int | None = None

    @property
    def total_cards(self) -> int:
        return cards.CARDS_PER_DECK * self.num_decks


@dataclass(slots=True)
class PlayerSeat:
    """Static description of a seat supplied when a game is created."""

    name: str
    avatar: str | None = None
    is_ai: bool = False
    ai_difficulty: Difficulty | None = None


@dataclass(slots=True)
class PlayerState:
    """Cards and metadata tracked for each player at the table."""

    player_number: int
    name: str
    avatar: str | None = None
    is_ai: bool = False
    ai_difficulty: Difficulty | None = None
    hand: List[Card] = field(default_factory=list)
    personal_pile: List[Card] = field(default_factory=list)
    storage: List[Card | None] = field(default_factory=list)

    @property
    def pile_top(self) -> Card | None:
        """Return the accessible card of the personal pile (end of the list)."""

        return self.personal_pile[-1] if self.personal_pile else None

    @property
    def storage_count(self) -> int:
        return sum(1 for slot in self.storage if slot is not None)

    def empty_storage_slots(self) -> list[int]:
        return [idx for idx, slot in enumerate(self.storage) if slot is None]

    def card_at(self, source: CardSource, index: int) -> Card | None:
        """Return the card at ``source``/``index`` or ``None`` if the position is empty."""

        if source is CardSource.HAND:
            if 0 <= index < len(self.hand):
                return self.hand[index]
            return None
        if source is CardSource.PERSONAL_PILE:
            return self.pile_top
        if source is CardSource.STORAGE:
            if 0 <= index < len(self.storage):
                return self.storage[index]
            return None
        return None

    def take(self, source: CardSource, index: int) -> Card:
        """Remove and return the card at ``source``/``index``."""

        if source is CardSource.HAND:
            return self.hand.pop(index)
        if source is CardSource.PERSONAL_PILE:
            return self.personal_pile.pop()
        card = self.storage[index]
        if card is None:
            raise ValueError(f"storage slot {index} is empty")
        self.storage[index] = None
        return card

    def copy(self) -> "PlayerState":
        """Return a copy whose card containers can be mutated independently."""

        return PlayerState(
            player_number=self.player_number,
            name=self.name,
            avatar=self.avatar,
            is_ai=self.is_ai,
            ai_difficulty=self.ai_difficulty,
            hand=list(self.hand),
            personal_pile=list(self.personal_pile),
            storage=list(self.storage),
        )


@dataclass(slots=True)
class CenterPile:
    """Shared ascending build pile (Ace to Queen, Kings wild)."""

    cards: List[Card] = field(default_factory=list)
    expected_rank: int = int(Rank.ACE)

    @property
    def top_card(self) -> Card | None:
        return self.cards[-1] if self.cards else None

    @property
    def effective_rank(self) -> int:
        """Rank the pile currently represents; 0 when empty."""

        return self.expected_rank - 1

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def is_complete(self) -> bool:
        return self.expected_rank > int(Rank.QUEEN)

    def expected_label(self) -> str:
        if self.is_complete:
            return "Complete"
        return Rank(self.expected_rank).symbol

    def copy(self) -> "CenterPile":
        return CenterPile(cards=list(self.cards), expected_rank=self.expected_rank)


@dataclass(slots=True)
class TurnContext:
    """Per-turn bookkeeping, reset whenever the turn passes."""

    current_player_index: int = 0
    cards_played_to_center: int = 0
    has_played_to_storage: bool = False
    turn_time_remaining: float | None = None

    def copy(self) -> "TurnContext":
        return TurnContext(
            current_player_index=self.current_player_index,
            cards_played_to_center=self.cards_played_to_center,
            has_played_to_storage=self.has_played_to_storage,
            turn_time_remaining=self.turn_time_remaining,
        )


@dataclass(slots=True)
class GameState:
    """Mutable game state owned by the engine."""

    config: GameConfig
    players: List[PlayerState] = field(default_factory=list)
    center_piles: List[CenterPile] = field(default_factory=list)
    stock: List[Card] = field(default_factory=list)
    turn: TurnContext = field(default_factory=TurnContext)
    phase: GamePhase = GamePhase.NOT_STARTED
    winner_index: int | None = None
    turn_index: int = 0

    @property
    def current_player_index(self) -> int:
        return self.turn.current_player_index

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.turn.current_player_index]

    @property
    def is_started(self) -> bool:
        return self.phase is not GamePhase.NOT_STARTED

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    def card_count(self) -> int:
        """Total number of cards in every zone; constant for the game's lifetime."""

        total = len(self.stock)
        total += sum(len(pile.cards) for pile in self.center_piles)
        for player in self.players:
            total += len(player.hand) + len(player.personal_pile) + player.storage_count
        return total

    def clone(self) -> "GameState":
        """Create a copy suitable for look-ahead simulation."""

        return GameState(
            config=self.config,
            players=[player.copy() for player in self.players],
            center_piles=[pile.copy() for pile in self.center_piles],
            stock=list(self.stock),
            turn=self.turn.copy(),
            phase=self.phase,
            winner_index=self.winner_index,
            turn_index=self.turn_index,
        )


def default_seats(num_players: int) -> list[PlayerSeat]:
    """Seat a human at P1 and medium AIs everywhere else."""

    seats = [PlayerSeat(name="Player 1")]
    for idx in range(1, num_players):
        seats.append(PlayerSeat(name=f"Player {idx + 1}", is_ai=True, ai_difficulty=Difficulty.MEDIUM))
    return seats


def choose_starting_player(players: Sequence[PlayerState]) -> int:
    """Return the seat whose personal-pile top card ranks highest, ignoring Kings."""

    best_index = 0
    best_rank = -1
    for idx, player in enumerate(players):
        top = player.pile_top
        if top is None or top.is_wild:
            continue
        if int(top.rank) > best_rank:
            best_rank = int(top.rank)
            best_index = idx
    return best_index


def deal_new_game(config: GameConfig, seats: Sequence[PlayerSeat], rng: random.Random) -> GameState:
    """Shuffle, deal and return an initialised ``GameState``."""

    if not MIN_PLAYERS <= config.num_players <= MAX_PLAYERS:
        raise SetupError(
            f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS} (got {config.num_players})"
        )
    if len(seats) != config.num_players:
        raise SetupError(f"expected {config.num_players} seats, got {len(seats)}")
    if config.num_decks < 1:
        raise SetupError("at least one deck is required")
    per_player = config.hand_size + config.personal_pile_size
    if config.total_cards < per_player * config.num_players:
        raise SetupError(
            f"{config.num_decks} deck(s) cannot deal {per_player} cards to {config.num_players} players"
        )
    if config.starting_player is not None and not 0 <= config.starting_player < config.num_players:
        raise SetupError(f"starting player {config.starting_player} is not seated")

    stock = cards.shuffled_deck(config.num_decks, rng)
    players: list[PlayerState] = []
    for idx, seat in enumerate(seats):
        hand = [stock.pop() for _ in range(config.hand_size)]
        pile = [stock.pop() for _ in range(config.personal_pile_size)]
        difficulty = seat.ai_difficulty
        if seat.is_ai and difficulty is None:
            difficulty = Difficulty.MEDIUM
        players.append(
            PlayerState(
                player_number=idx,
                name=seat.name,
                avatar=seat.avatar,
                is_ai=seat.is_ai,
                ai_difficulty=difficulty,
                hand=hand,
                personal_pile=pile,
                storage=[None] * config.storage_slots,
            )
        )

    if config.starting_player is not None:
        first = config.starting_player
    else:
        first = choose_starting_player(players)
    logger.debug("dealt %d players, %d cards left in stock, P%d starts", len(players), len(stock), first)

    turn = TurnContext(current_player_index=first)
    if config.timed_mode:
        turn.turn_time_remaining = float(config.turn_seconds)

    return GameState(
        config=config,
        players=players,
        center_piles=[CenterPile() for _ in range(config.num_center_piles)],
        stock=stock,
        turn=turn,
        phase=GamePhase.AWAITING_ACTION,
        winner_index=None,
        turn_index=0,
    )
