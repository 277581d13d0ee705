from __future__ import annotations

import logging
import random

import pytest

from twentyone.actions import CenterMove, EndTurnMove
from twentyone.cards import Rank
from twentyone.engine import GameEngine
from twentyone.events import EventKind, GameStartedEvent, TurnEndedEvent
from twentyone.rules import ErrorCode, SetupError
from twentyone.state import CardSource, Difficulty, GameConfig, GamePhase, GameState, PlayerSeat

NINES = [Rank.NINE] * 5
TENS = [Rank.TEN] * 5


def _engine_for(state: GameState) -> GameEngine:
    seats = [
        PlayerSeat(name=p.name, is_ai=p.is_ai, ai_difficulty=p.ai_difficulty) for p in state.players
    ]
    engine = GameEngine(config=state.config, seats=seats, rng=random.Random(0))
    engine.state = state
    return engine


def test_engine_rejects_actions_before_reset() -> None:
    engine = GameEngine(rng=random.Random(0))

    assert not engine.is_game_started
    assert not engine.select_card(CardSource.HAND, 0)
    assert not engine.play_direct_to_center(CardSource.HAND, 0, 0)
    assert engine.last_error is not None
    assert engine.last_error.code is ErrorCode.GAME_NOT_STARTED
    assert engine.last_event is not None
    assert engine.last_event.kind is EventKind.INVALID_MOVE
    assert engine.last_event.player is None
    assert engine.get_hint() is None
    assert not engine.is_ai_turn


def test_reset_game_deals_and_announces_start() -> None:
    engine = GameEngine(config=GameConfig(num_players=2, starting_player=1), rng=random.Random(3))

    engine.reset_game()

    assert engine.is_game_started
    assert engine.current_player_index == 1
    assert engine.events == [GameStartedEvent(starting_player=1, num_players=2)]
    assert engine.stock_pile_size == 156 - 2 * 26
    assert all(len(p.hand) == 5 and len(p.personal_pile) == 21 for p in engine.players)
    assert engine.state.card_count() == 156
    assert engine.phase is GamePhase.AWAITING_ACTION


def test_reset_game_with_bad_player_count_raises() -> None:
    engine = GameEngine(config=GameConfig(num_players=5), seats=[PlayerSeat(name=f"P{i}") for i in range(5)])

    with pytest.raises(SetupError):
        engine.reset_game()


def test_select_then_play_to_center(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))

    assert engine.select_card(CardSource.HAND, 0)
    assert engine.selected_card is not None
    assert engine.selected_card.card.rank is Rank.ACE

    assert engine.play_selected_to_center(2)

    assert engine.selected_card is None
    assert engine.center_piles[2].top_card is not None
    assert engine.center_piles[2].top_card.rank is Rank.ACE
    assert engine.cards_played_this_turn == 1
    assert engine.can_end_current_turn
    assert engine.last_event is not None
    assert engine.last_event.kind is EventKind.CARD_PLAYED


def test_select_empty_position_clears_selection(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))
    engine.select_card(CardSource.HAND, 0)

    assert not engine.select_card(CardSource.STORAGE, 2)
    assert engine.selected_card is None
    assert not engine.play_selected_to_center(0)
    assert engine.last_error is not None
    assert engine.last_error.code is ErrorCode.NO_CARD_AT_POSITION


def test_select_card_checks_expected_card(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))
    ace, nine = engine.state.players[0].hand[:2]

    assert not engine.select_card(CardSource.HAND, 0, card=nine)
    assert engine.selected_card is None
    assert engine.select_card(CardSource.HAND, 0, card=ace)
    assert engine.selected_card is not None and engine.selected_card.card == ace


def test_stale_selection_is_rejected(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))
    assert engine.select_card(CardSource.HAND, 0)
    hand = engine.state.players[0].hand
    hand[0], hand[1] = hand[1], hand[0]
    before = engine.snapshot()

    assert not engine.play_selected_to_center(0)

    assert engine.last_error is not None
    assert engine.last_error.code is ErrorCode.NO_CARD_AT_POSITION
    assert engine.selected_card is None
    assert engine.snapshot() == before
    assert not engine.play_selected_to_storage(0)
    assert engine.current_player_index == 0


def test_projections_are_copies(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))
    before = engine.snapshot()

    engine.players[0].hand.clear()
    engine.current_player.storage[0] = engine.state.stock[0]
    engine.center_piles[0].cards.append(engine.state.stock[1])

    assert engine.snapshot() == before
    assert len(engine.players[0].hand) == 5


def test_illegal_play_records_event_and_keeps_state(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))
    before = engine.snapshot()

    assert not engine.play_direct_to_center(CardSource.HAND, 1, 0)

    event = engine.last_event
    assert event is not None and event.kind is EventKind.INVALID_MOVE
    assert event.code == ErrorCode.ILLEGAL_PLACEMENT.value
    assert event.detail["expectedRank"] == 1
    assert event.message == "Cannot place 9 on pile 1. This pile needs a A."
    assert engine.snapshot() == before


def test_end_turn_refills_and_passes(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))
    engine.play_direct_to_center(CardSource.HAND, 0, 0)

    assert engine.end_current_turn()

    assert engine.current_player_index == 1
    assert engine.turn_index == 1
    assert len(engine.players[0].hand) == 5
    assert engine.cards_played_this_turn == 0
    assert engine.last_event == TurnEndedEvent(player=0, next_player=1)


def test_end_turn_without_play_is_rejected(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:3]], TENS]))

    assert not engine.end_current_turn()
    assert engine.last_error is not None
    assert engine.last_error.code is ErrorCode.MUST_PLAY_AT_LEAST_ONE_CARD


def test_storage_play_ends_turn(table) -> None:
    engine = _engine_for(table(hands=[NINES, TENS]))

    assert engine.select_card(CardSource.HAND, 4)
    assert engine.play_selected_to_storage(3)

    assert engine.players[0].storage[3] is not None
    assert engine.current_player_index == 1
    kinds = [event.kind for event in engine.events]
    assert kinds == [EventKind.CARD_PLAYED, EventKind.HAND_REFILLED, EventKind.TURN_ENDED]


def test_personal_pile_empty_wins(table) -> None:
    engine = _engine_for(table(hands=[NINES, TENS], piles=[[Rank.ACE], None]))

    assert engine.play_direct_to_center(CardSource.PERSONAL_PILE, 0, 0)

    assert engine.is_game_over
    assert engine.winner is not None
    assert engine.winner.player_number == 0
    assert engine.winner.personal_pile == []
    assert engine.last_event is not None and engine.last_event.kind is EventKind.GAME_OVER
    assert not engine.end_current_turn()
    assert engine.last_error is not None and engine.last_error.code is ErrorCode.GAME_OVER
    assert not engine.is_ai_turn


def test_update_player_name_and_avatar(table) -> None:
    engine = _engine_for(table(hands=[NINES, TENS]))

    assert engine.update_player_name_and_avatar(1, "Robin", "owl")
    assert not engine.update_player_name_and_avatar(7, "Nobody")

    assert engine.players[1].name == "Robin"
    assert engine.players[1].avatar == "owl"
    assert engine.seats[1].name == "Robin"


def test_tick_counts_down_and_forces_storage(table) -> None:
    engine = _engine_for(table(hands=[NINES, TENS], timed_mode=True))

    assert not engine.tick(10)
    assert engine.state.turn.turn_time_remaining == pytest.approx(20.0)

    assert engine.tick(25)

    assert engine.current_player_index == 1
    assert engine.players[0].storage_count == 1
    assert engine.state.turn.turn_time_remaining == pytest.approx(30.0)


def test_tick_is_inert_without_timer(table) -> None:
    engine = _engine_for(table(hands=[NINES, TENS]))

    assert not engine.tick(1000)
    assert engine.current_player_index == 0


def test_ai_turn_plays_until_turn_passes(table) -> None:
    state = table(hands=[[Rank.ACE, Rank.TWO, *NINES[:3]], TENS], ai=[True, False])
    state.players[0].ai_difficulty = Difficulty.HARD
    engine = _engine_for(state)

    assert engine.is_ai_turn
    moves = engine.play_ai_turn()

    assert moves == [CenterMove(CardSource.HAND, 0, 0), CenterMove(CardSource.HAND, 0, 0), EndTurnMove()]
    assert engine.current_player_index == 1
    assert not engine.is_ai_turn
    assert engine.play_ai_move() is None
    assert engine.play_ai_turn() == []


def test_stuck_ai_forfeits_turn(table, caplog: pytest.LogCaptureFixture) -> None:
    state = table(hands=[TENS, NINES], storage=[[Rank.EIGHT] * 5, []], ai=[True, False])
    engine = _engine_for(state)

    with caplog.at_level(logging.WARNING, logger="twentyone"):
        assert engine.play_ai_move() is None

    assert engine.current_player_index == 1
    assert engine.last_event == TurnEndedEvent(player=0, next_player=1, forced=True)
    assert any(record.levelno == logging.ERROR for record in caplog.records)


def test_hint_suggests_legal_move(table) -> None:
    engine = _engine_for(table(hands=[[Rank.ACE, *NINES[:4]], TENS]))

    hint = engine.get_hint()

    assert isinstance(hint, CenterMove)
    assert hint.source is CardSource.HAND and hint.source_index == 0


def test_snapshot_round_trip_through_engine() -> None:
    engine = GameEngine(config=GameConfig(num_players=3), rng=random.Random(11))
    engine.reset_game()
    engine.update_player_name_and_avatar(0, "Ada")
    data = engine.snapshot()

    restored = GameEngine(rng=random.Random(0))
    restored.load_snapshot(data)

    assert restored.snapshot() == data
    assert restored.config.num_players == 3
    assert restored.seats[0].name == "Ada"
    assert [seat.is_ai for seat in restored.seats] == [False, True, True]
    assert restored.events == []


def test_full_ai_game_finishes() -> None:
    seats = [PlayerSeat(name=f"Bot {i}", is_ai=True, ai_difficulty=Difficulty.EASY) for i in range(2)]
    engine = GameEngine(config=GameConfig(num_players=2), seats=seats, rng=random.Random(5))
    engine.reset_game()

    for _ in range(2000):
        if engine.is_game_over:
            break
        engine.play_ai_turn()
        assert engine.state.card_count() == 156

    assert engine.turn_index > 0
