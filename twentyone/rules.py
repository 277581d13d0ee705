"""Rule predicates, center-pile mechanics and the move error taxonomy."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping

from .cards import Card, Rank
from .state import CardSource, CenterPile, EngineFault, GameState, SetupError

__all__ = [
    "ErrorCode",
    "IllegalMove",
    "GameNotStarted",
    "GameOver",
    "NotPlayersTurn",
    "InvalidTarget",
    "NoCardAtPosition",
    "IllegalPlacement",
    "StorageToStorageForbidden",
    "StorageAfterCenterForbidden",
    "StorageForbiddenFromPersonalPile",
    "StorageSlotOccupied",
    "MustPlayAtLeastOneCard",
    "CannotEndWithFullHand",
    "EngineFault",
    "SetupError",
    "NoLegalMoveAvailable",
    "can_accept",
    "place",
    "collect",
    "placement_message",
    "ensure_active",
    "check_play_to_center",
    "check_play_to_storage",
    "check_end_turn",
    "can_end_turn",
]


class ErrorCode(str, Enum):
    """Tags attached to every rejected action."""

    GAME_NOT_STARTED = "GameNotStarted"
    GAME_OVER = "GameOver"
    NOT_PLAYERS_TURN = "NotPlayersTurn"
    INVALID_TARGET = "InvalidTarget"
    NO_CARD_AT_POSITION = "NoCardAtPosition"
    ILLEGAL_PLACEMENT = "IllegalPlacement"
    STORAGE_TO_STORAGE_FORBIDDEN = "StorageToStorageForbidden"
    STORAGE_AFTER_CENTER_FORBIDDEN = "StorageAfterCenterForbidden"
    STORAGE_FORBIDDEN_FROM_PERSONAL_PILE = "StorageForbiddenFromPersonalPile"
    STORAGE_SLOT_OCCUPIED = "StorageSlotOccupied"
    MUST_PLAY_AT_LEAST_ONE_CARD = "MustPlayAtLeastOneCard"
    CANNOT_END_WITH_FULL_HAND = "CannotEndWithFullHand"


class IllegalMove(RuntimeError):
    """Raised when a player attempts an action the rules forbid.

    The message is plain English suitable for showing to the player; ``detail``
    carries the structured data a UI needs to build its own wording.
    """

    code: ErrorCode

    def __init__(self, message: str, detail: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: Dict[str, Any] = dict(detail or {})


class GameNotStarted(IllegalMove):
    code = ErrorCode.GAME_NOT_STARTED


class GameOver(IllegalMove):
    code = ErrorCode.GAME_OVER


class NotPlayersTurn(IllegalMove):
    code = ErrorCode.NOT_PLAYERS_TURN


class InvalidTarget(IllegalMove):
    code = ErrorCode.INVALID_TARGET


class NoCardAtPosition(IllegalMove):
    code = ErrorCode.NO_CARD_AT_POSITION


class IllegalPlacement(IllegalMove):
    code = ErrorCode.ILLEGAL_PLACEMENT

    def __init__(
        self,
        attempted_card: Card,
        pile_index: int,
        expected_rank: int,
        current_top_card: Card | None,
    ) -> None:
        self.attempted_card = attempted_card
        self.pile_index = pile_index
        self.expected_rank = expected_rank
        self.current_top_card = current_top_card
        super().__init__(
            placement_message(attempted_card, pile_index, expected_rank, current_top_card),
            {
                "attemptedCard": attempted_card.id,
                "pileIndex": pile_index,
                "expectedRank": expected_rank,
                "currentTopCard": current_top_card.id if current_top_card is not None else None,
            },
        )


class StorageToStorageForbidden(IllegalMove):
    code = ErrorCode.STORAGE_TO_STORAGE_FORBIDDEN


class StorageAfterCenterForbidden(IllegalMove):
    code = ErrorCode.STORAGE_AFTER_CENTER_FORBIDDEN


class StorageForbiddenFromPersonalPile(IllegalMove):
    code = ErrorCode.STORAGE_FORBIDDEN_FROM_PERSONAL_PILE


class StorageSlotOccupied(IllegalMove):
    code = ErrorCode.STORAGE_SLOT_OCCUPIED


class MustPlayAtLeastOneCard(IllegalMove):
    code = ErrorCode.MUST_PLAY_AT_LEAST_ONE_CARD


class CannotEndWithFullHand(IllegalMove):
    code = ErrorCode.CANNOT_END_WITH_FULL_HAND


class NoLegalMoveAvailable(EngineFault):
    """Raised when the AI finds neither a play nor a legal way to end its turn."""


# ---------------------------------------------------------------------------
# Center piles
# ---------------------------------------------------------------------------


def can_accept(pile: CenterPile, card: Card) -> bool:
    """Return ``True`` when ``card`` may be placed on ``pile``.

    Kings are wild and fit any pile that is not complete; every other card must
    match the pile's expected rank exactly (an empty pile expects an Ace).
    """

    if pile.is_complete:
        return False
    if card.is_wild:
        return True
    return int(card.rank) == pile.expected_rank


def place(pile: CenterPile, card: Card) -> bool:
    """Append ``card`` to ``pile`` and return ``True`` if the pile is now complete.

    A King occupies the rank the pile needed, so the expected rank advances by
    one whatever card was placed.
    """

    if not can_accept(pile, card):
        raise ValueError(f"{card.label()} cannot be placed on a pile expecting {pile.expected_label()}")
    pile.cards.append(card)
    pile.expected_rank += 1
    return pile.is_complete


def collect(pile: CenterPile) -> list[Card]:
    """Remove and return every card of ``pile``, resetting it to expect an Ace."""

    collected = list(pile.cards)
    pile.cards.clear()
    pile.expected_rank = int(Rank.ACE)
    return collected


def _card_name(card: Card) -> str:
    return "King" if card.is_wild else str(int(card.rank))


def placement_message(
    card: Card,
    pile_index: int,
    expected_rank: int,
    top_card: Card | None,
) -> str:
    """Build the player-facing explanation for a rejected center placement."""

    needs = "Complete" if expected_rank > int(Rank.QUEEN) else Rank(expected_rank).symbol
    message = f"Cannot place {_card_name(card)} on pile {pile_index + 1}. This pile needs a {needs}"
    if top_card is not None:
        top = "King (acting as wild)" if top_card.is_wild else _card_name(top_card)
        message += f" (top card is {top})"
    return message + "."


# ---------------------------------------------------------------------------
# Guards shared by human- and AI-driven moves
# ---------------------------------------------------------------------------


def ensure_active(state: GameState, player_index: int | None = None) -> None:
    """Raise unless the game is running and it is ``player_index``'s turn."""

    if not state.is_started:
        raise GameNotStarted("Game has not started. Please start a new game.")
    if state.is_over:
        raise GameOver("Game is over. Please start a new game to continue playing.")
    if player_index is not None and player_index != state.current_player_index:
        raise NotPlayersTurn(
            f"It is not player {player_index + 1}'s turn.",
            {"player": player_index, "currentPlayer": state.current_player_index},
        )


def check_play_to_center(
    state: GameState,
    source: CardSource,
    source_index: int,
    pile_index: int,
    player_index: int | None = None,
) -> Card:
    """Validate a center play and return the card that would move."""

    ensure_active(state, player_index)
    piles = state.center_piles
    if not 0 <= pile_index < len(piles):
        raise InvalidTarget(
            f"Invalid center pile. Please select a pile between 1 and {len(piles)}.",
            {"pileIndex": pile_index},
        )
    card = state.current_player.card_at(source, source_index)
    if card is None:
        raise NoCardAtPosition(
            "No card at that position. Please select a valid card.",
            {"source": source.value, "sourceIndex": source_index},
        )
    pile = piles[pile_index]
    if not can_accept(pile, card):
        raise IllegalPlacement(card, pile_index, pile.expected_rank, pile.top_card)
    return card


def check_play_to_storage(
    state: GameState,
    source: CardSource,
    source_index: int,
    slot_index: int,
    player_index: int | None = None,
) -> Card:
    """Validate a storage play and return the hand card that would move."""

    ensure_active(state, player_index)
    if state.turn.cards_played_to_center > 0:
        raise StorageAfterCenterForbidden(
            "Cannot play to storage after playing to center piles. "
            "End your turn or continue playing to center piles."
        )
    if source is CardSource.STORAGE:
        raise StorageToStorageForbidden(
            "Cannot move cards between storage slots. Play cards from storage to center piles instead."
        )
    if source is CardSource.PERSONAL_PILE:
        raise StorageForbiddenFromPersonalPile(
            "Cards from your 21-pile can only be played to center piles, not storage."
        )
    player = state.current_player
    if not 0 <= slot_index < len(player.storage):
        raise InvalidTarget(
            f"Invalid storage slot. Please select a storage slot between 1 and {len(player.storage)}.",
            {"slotIndex": slot_index},
        )
    if player.storage[slot_index] is not None:
        raise StorageSlotOccupied(
            f"Storage slot {slot_index + 1} already holds a card. Choose an empty slot.",
            {"slotIndex": slot_index},
        )
    card = player.card_at(source, source_index)
    if card is None:
        raise NoCardAtPosition(
            "No card at that position. Please select a valid card.",
            {"source": source.value, "sourceIndex": source_index},
        )
    return card


def check_end_turn(state: GameState, player_index: int | None = None) -> None:
    """Validate that the current player may end the turn.

    A full hand is reported before the must-play rule when both apply.
    """

    ensure_active(state, player_index)
    player = state.current_player
    if len(player.hand) >= state.config.hand_size:
        raise CannotEndWithFullHand(
            f"You cannot end your turn with {state.config.hand_size} cards in hand. "
            "Play or store a card first."
        )
    if state.turn.cards_played_to_center == 0 and not state.turn.has_played_to_storage:
        raise MustPlayAtLeastOneCard("You must play at least 1 card before ending your turn.")


def can_end_turn(state: GameState) -> bool:
    try:
        check_end_turn(state)
    except IllegalMove:
        return False
    return True
