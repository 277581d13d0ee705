from __future__ import annotations

import random

import pytest

from twentyone import actions, turns
from twentyone.actions import CenterMove
from twentyone.state import GameConfig, GameState, deal_new_game, default_seats


def _assert_consistent(state: GameState) -> None:
    assert state.card_count() == state.config.total_cards
    ids = [card.id for card in state.stock]
    for pile in state.center_piles:
        ids.extend(card.id for card in pile.cards)
        assert len(pile.cards) == pile.expected_rank - 1
        for position, card in enumerate(pile.cards, start=1):
            assert card.is_wild or int(card.rank) == position
    for player in state.players:
        assert len(player.hand) <= state.config.hand_size
        assert len(player.storage) == state.config.storage_slots
        ids.extend(card.id for card in player.hand)
        ids.extend(card.id for card in player.personal_pile)
        ids.extend(card.id for card in player.storage if card is not None)
    assert len(ids) == len(set(ids))


@pytest.mark.parametrize("num_players", [2, 3, 4])
@pytest.mark.parametrize("seed", [0, 1, 2])
def test_random_play_keeps_invariants(num_players: int, seed: int) -> None:
    rng = random.Random(seed)
    state = deal_new_game(GameConfig(num_players=num_players), default_seats(num_players), rng)

    for _ in range(600):
        if state.is_over:
            break
        legal = actions.legal_moves(state)
        if not legal:
            turns.force_end_or_default_move(state)
        else:
            # Mostly center plays, so piles fill up and complete.
            center = [move for move in legal if isinstance(move, CenterMove)]
            move = rng.choice(center) if center and rng.random() < 0.8 else rng.choice(legal)
            actions.apply_move(state, move, rng)
        _assert_consistent(state)

    if state.is_over:
        assert state.winner_index is not None
        assert not state.players[state.winner_index].personal_pile


@pytest.mark.parametrize("seed", range(5))
def test_starting_player_has_highest_visible_card(seed: int) -> None:
    state = deal_new_game(GameConfig(num_players=4), default_seats(4), random.Random(seed))

    tops = [player.pile_top for player in state.players]
    ranks = [int(top.rank) for top in tops if top is not None and not top.is_wild]
    starter_top = tops[state.current_player_index]

    if ranks:
        assert starter_top is not None
        assert int(starter_top.rank) == max(ranks)
        assert not starter_top.is_wild
    else:
        assert state.current_player_index == 0
