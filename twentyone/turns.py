"""Turn state machine: the mutators behind every player action."""

from __future__ import annotations

import logging
import random
from typing import List

from . import rules
from .events import (
    CardPlayedEvent,
    Destination,
    GameEvent,
    GameOverEvent,
    HandRefilledEvent,
    PileCompletedEvent,
    TurnEndedEvent,
)
from .state import CardSource, GamePhase, GameState, TurnContext

logger = logging.getLogger(__name__)

__all__ = [
    "play_to_center",
    "play_to_storage",
    "end_turn",
    "force_end_or_default_move",
    "refill_hand",
    "finish_turn",
]


def _complete_pile(state: GameState, pile_index: int, rng: random.Random) -> PileCompletedEvent:
    """Return a finished pile's cards to the stock and reshuffle it."""

    returned = rules.collect(state.center_piles[pile_index])
    state.stock.extend(returned)
    rng.shuffle(state.stock)
    logger.info(
        "pile %d completed, %d cards returned (stock now %d)",
        pile_index + 1,
        len(returned),
        len(state.stock),
    )
    return PileCompletedEvent(pile_index=pile_index, cards_returned=len(returned))


def play_to_center(
    state: GameState,
    source: CardSource,
    source_index: int,
    pile_index: int,
    rng: random.Random,
    player_index: int | None = None,
) -> List[GameEvent]:
    """Move a card from ``source`` onto center pile ``pile_index``.

    Raises an :class:`~twentyone.rules.IllegalMove` subclass, leaving the state
    untouched, when the play is not allowed.
    """

    rules.check_play_to_center(state, source, source_index, pile_index, player_index)

    acting = state.current_player_index
    player = state.current_player
    card = player.take(source, source_index)
    completed = rules.place(state.center_piles[pile_index], card)
    state.turn.cards_played_to_center += 1
    logger.debug("P%d played %s from %s to pile %d", acting + 1, card.label(), source.value, pile_index + 1)

    events: List[GameEvent] = [
        CardPlayedEvent(
            player=acting,
            card=card,
            source=source,
            source_index=source_index,
            destination=Destination.CENTER,
            destination_index=pile_index,
        )
    ]
    if completed:
        events.append(_complete_pile(state, pile_index, rng))

    if source is CardSource.PERSONAL_PILE and not player.personal_pile:
        state.phase = GamePhase.GAME_OVER
        state.winner_index = acting
        logger.info("P%d emptied their personal pile and wins after %d turns", acting + 1, state.turn_index + 1)
        events.append(GameOverEvent(winner=acting))
        return events

    if not player.hand and state.stock:
        refilled = refill_hand(state, acting)
        logger.debug("P%d emptied their hand mid-turn, drew %d", acting + 1, len(refilled.cards))
        events.append(refilled)
    return events


def play_to_storage(
    state: GameState,
    source: CardSource,
    source_index: int,
    slot_index: int,
    player_index: int | None = None,
) -> List[GameEvent]:
    """Bank a hand card in an empty storage slot; this ends the turn."""

    rules.check_play_to_storage(state, source, source_index, slot_index, player_index)

    acting = state.current_player_index
    player = state.current_player
    card = player.take(source, source_index)
    player.storage[slot_index] = card
    state.turn.has_played_to_storage = True
    logger.debug("P%d stored %s in slot %d", acting + 1, card.label(), slot_index + 1)

    events: List[GameEvent] = [
        CardPlayedEvent(
            player=acting,
            card=card,
            source=source,
            source_index=source_index,
            destination=Destination.STORAGE,
            destination_index=slot_index,
        )
    ]
    events.extend(finish_turn(state))
    return events


def end_turn(state: GameState, player_index: int | None = None) -> List[GameEvent]:
    """End the current player's turn after they have played at least once."""

    rules.check_end_turn(state, player_index)
    return finish_turn(state)


def refill_hand(state: GameState, player_index: int) -> HandRefilledEvent:
    """Draw from the stock until the hand is full or the stock runs out."""

    player = state.players[player_index]
    drawn = []
    while len(player.hand) < state.config.hand_size and state.stock:
        card = state.stock.pop()
        player.hand.append(card)
        drawn.append(card)
    if len(player.hand) < state.config.hand_size:
        logger.debug("stock exhausted, P%d holds %d cards", player_index + 1, len(player.hand))
    return HandRefilledEvent(player=player_index, cards=tuple(drawn))


def finish_turn(state: GameState, forced: bool = False) -> List[GameEvent]:
    """Refill the acting player's hand and pass the turn to the next seat.

    Callers are responsible for having validated that the turn may end.
    """

    state.phase = GamePhase.TURN_ENDING
    acting = state.current_player_index
    refilled = refill_hand(state, acting)

    next_player = (acting + 1) % len(state.players)
    state.turn = TurnContext(current_player_index=next_player)
    if state.config.timed_mode:
        state.turn.turn_time_remaining = float(state.config.turn_seconds)
    state.turn_index += 1
    state.phase = GamePhase.AWAITING_ACTION
    logger.info("turn passes from P%d to P%d", acting + 1, next_player + 1)
    return [refilled, TurnEndedEvent(player=acting, next_player=next_player, forced=forced)]


def force_end_or_default_move(state: GameState) -> List[GameEvent]:
    """Resolve a turn that ran out of time.

    Ends the turn normally when allowed, otherwise stores the first hand card
    in the first empty slot, and as a last resort passes the turn without
    enforcing the end-of-turn rules.
    """

    rules.ensure_active(state)
    if rules.can_end_turn(state):
        return finish_turn(state)

    player = state.current_player
    empty_slots = player.empty_storage_slots()
    if state.turn.cards_played_to_center == 0 and player.hand and empty_slots:
        logger.info("P%d timed out; storing %s", state.current_player_index + 1, player.hand[0].label())
        return play_to_storage(state, CardSource.HAND, 0, empty_slots[0])

    logger.warning(
        "forcing end of turn for P%d (hand %d, played %d to center)",
        state.current_player_index + 1,
        len(player.hand),
        state.turn.cards_played_to_center,
    )
    return finish_turn(state, forced=True)
