from __future__ import annotations

from typing import Callable, Sequence

import pytest

from twentyone.cards import Card, Rank, build_deck
from twentyone.state import (
    CenterPile,
    Difficulty,
    GameConfig,
    GamePhase,
    GameState,
    PlayerState,
    TurnContext,
)

TableBuilder = Callable[..., GameState]


def _pull(pool: list[Card], rank: Rank) -> Card:
    for idx, card in enumerate(pool):
        if card.rank is rank:
            return pool.pop(idx)
    raise LookupError(f"no {rank!r} left in the pool")


def _filler(pool: list[Card], count: int) -> list[Card]:
    """Take ``count`` high non-King cards so personal pile tops stay unplayable."""

    chosen = sorted((card for card in pool if not card.is_wild), key=lambda card: -int(card.rank))[:count]
    for card in chosen:
        pool.remove(card)
    return chosen


def build_table(
    hands: Sequence[Sequence[Rank]],
    piles: Sequence[Sequence[Rank] | None] | None = None,
    center: Sequence[Sequence[Rank]] = (),
    storage: Sequence[Sequence[Rank | None]] | None = None,
    current: int = 0,
    played_to_center: int = 0,
    ai: Sequence[bool] | None = None,
    stock_size: int | None = None,
    timed_mode: bool = False,
) -> GameState:
    """Build a started game with chosen cards; everything else lands in the stock.

    Personal piles are listed bottom to top, so the last rank is the playable card.
    """

    num_players = len(hands)
    config = GameConfig(num_players=num_players, timed_mode=timed_mode)
    pool = build_deck(config.num_decks)

    hand_cards = [[_pull(pool, rank) for rank in ranks] for ranks in hands]
    center_cards = [[_pull(pool, rank) for rank in ranks] for ranks in center]
    storage_cards: list[list[Card | None]] = []
    for idx in range(num_players):
        slots: list[Card | None] = [None] * config.storage_slots
        if storage is not None:
            for slot, rank in enumerate(storage[idx]):
                slots[slot] = _pull(pool, rank) if rank is not None else None
        storage_cards.append(slots)
    pile_cards: list[list[Card] | None] = []
    for idx in range(num_players):
        ranks = piles[idx] if piles is not None else None
        pile_cards.append([_pull(pool, rank) for rank in ranks] if ranks is not None else None)
    for idx in range(num_players):
        if pile_cards[idx] is None:
            pile_cards[idx] = _filler(pool, config.personal_pile_size)

    players = []
    for idx in range(num_players):
        is_ai = bool(ai[idx]) if ai is not None else False
        players.append(
            PlayerState(
                player_number=idx,
                name=f"Player {idx + 1}",
                is_ai=is_ai,
                ai_difficulty=Difficulty.MEDIUM if is_ai else None,
                hand=hand_cards[idx],
                personal_pile=pile_cards[idx] or [],
                storage=storage_cards[idx],
            )
        )

    piles_state = [CenterPile() for _ in range(config.num_center_piles)]
    for idx, cards in enumerate(center_cards):
        piles_state[idx] = CenterPile(cards=cards, expected_rank=len(cards) + 1)

    stock = pool
    discarded: list[Card] = []
    if stock_size is not None:
        # Surplus stock goes under the last personal pile so the card count holds.
        discarded = stock[: len(stock) - stock_size]
        stock = stock[len(stock) - stock_size :]
        players[-1].personal_pile[:0] = discarded

    turn = TurnContext(current_player_index=current, cards_played_to_center=played_to_center)
    if timed_mode:
        turn.turn_time_remaining = float(config.turn_seconds)
    return GameState(
        config=config,
        players=players,
        center_piles=piles_state,
        stock=stock,
        turn=turn,
        phase=GamePhase.AWAITING_ACTION,
    )


def ranks_through(last: Rank) -> list[Rank]:
    """Return ``[ACE, TWO, ..., last]``."""

    return [rank for rank in Rank.ordered() if int(rank) <= int(last)]


@pytest.fixture
def table() -> TableBuilder:
    return build_table


@pytest.fixture
def run_of() -> Callable[[Rank], list[Rank]]:
    return ranks_through
