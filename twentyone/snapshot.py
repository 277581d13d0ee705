"""Plain-data snapshots of a game for save/resume collaborators."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping

from .cards import Card, Rank, Suit
from .events import card_to_dict
from .state import (
    CenterPile,
    Difficulty,
    GameConfig,
    GamePhase,
    GameState,
    PlayerState,
    TurnContext,
)

SCHEMA_VERSION = 1

__all__ = ["SCHEMA_VERSION", "SnapshotError", "to_dict", "from_dict", "dumps", "loads"]


class SnapshotError(ValueError):
    """Raised when snapshot data cannot be turned back into a game."""


def _config_to_dict(config: GameConfig) -> Dict[str, Any]:
    return {
        "numPlayers": config.num_players,
        "numDecks": config.num_decks,
        "numCenterPiles": config.num_center_piles,
        "handSize": config.hand_size,
        "personalPileSize": config.personal_pile_size,
        "storageSlots": config.storage_slots,
        "timedMode": config.timed_mode,
        "turnSeconds": config.turn_seconds,
        "startingPlayer": config.starting_player,
    }


def to_dict(state: GameState) -> Dict[str, Any]:
    """Return a JSON-compatible description of ``state``."""

    players: List[Dict[str, Any]] = []
    for player in state.players:
        players.append(
            {
                "playerNumber": player.player_number,
                "name": player.name,
                "avatar": player.avatar,
                "isAI": player.is_ai,
                "aiDifficulty": player.ai_difficulty.value if player.ai_difficulty else None,
                "hand": [card_to_dict(card) for card in player.hand],
                "personalPile": [card_to_dict(card) for card in player.personal_pile],
                "storage": [card_to_dict(card) for card in player.storage],
            }
        )
    return {
        "schemaVersion": SCHEMA_VERSION,
        "config": _config_to_dict(state.config),
        "players": players,
        "centerPiles": [
            {"cards": [card_to_dict(card) for card in pile.cards], "expectedRank": pile.expected_rank}
            for pile in state.center_piles
        ],
        "stock": [card_to_dict(card) for card in state.stock],
        "turn": {
            "currentPlayerIndex": state.turn.current_player_index,
            "cardsPlayedToCenter": state.turn.cards_played_to_center,
            "hasPlayedToStorage": state.turn.has_played_to_storage,
            "turnTimeRemaining": state.turn.turn_time_remaining,
        },
        "phase": state.phase.value,
        "winnerIndex": state.winner_index,
        "turnIndex": state.turn_index,
    }


def _card(data: Any) -> Card:
    if not isinstance(data, Mapping):
        raise SnapshotError(f"card entry must be an object, got {type(data).__name__}")
    try:
        return Card(id=int(data["id"]), rank=Rank(int(data["rank"])), suit=Suit(data["suit"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"invalid card {data!r}") from exc


def _optional_card(data: Any) -> Card | None:
    return None if data is None else _card(data)


def _require(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        raise SnapshotError(f"missing key {key!r}")
    return data[key]


def from_dict(data: Mapping[str, Any]) -> GameState:
    """Rebuild a :class:`GameState` from :func:`to_dict` output."""

    if not isinstance(data, Mapping):
        raise SnapshotError("snapshot must be an object")
    version = data.get("schemaVersion")
    if version != SCHEMA_VERSION:
        raise SnapshotError(f"unsupported schemaVersion {version!r}")

    try:
        cfg = _require(data, "config")
        config = GameConfig(
            num_players=int(cfg["numPlayers"]),
            num_decks=int(cfg["numDecks"]),
            num_center_piles=int(cfg["numCenterPiles"]),
            hand_size=int(cfg["handSize"]),
            personal_pile_size=int(cfg["personalPileSize"]),
            storage_slots=int(cfg["storageSlots"]),
            timed_mode=bool(cfg["timedMode"]),
            turn_seconds=int(cfg["turnSeconds"]),
            starting_player=cfg.get("startingPlayer"),
        )

        players: List[PlayerState] = []
        for entry in _require(data, "players"):
            difficulty = entry.get("aiDifficulty")
            players.append(
                PlayerState(
                    player_number=int(entry["playerNumber"]),
                    name=str(entry["name"]),
                    avatar=entry.get("avatar"),
                    is_ai=bool(entry["isAI"]),
                    ai_difficulty=Difficulty(difficulty) if difficulty else None,
                    hand=[_card(card) for card in entry["hand"]],
                    personal_pile=[_card(card) for card in entry["personalPile"]],
                    storage=[_optional_card(card) for card in entry["storage"]],
                )
            )

        piles = [
            CenterPile(cards=[_card(card) for card in pile["cards"]], expected_rank=int(pile["expectedRank"]))
            for pile in _require(data, "centerPiles")
        ]
        turn_data = _require(data, "turn")
        remaining = turn_data.get("turnTimeRemaining")
        turn = TurnContext(
            current_player_index=int(turn_data["currentPlayerIndex"]),
            cards_played_to_center=int(turn_data["cardsPlayedToCenter"]),
            has_played_to_storage=bool(turn_data["hasPlayedToStorage"]),
            turn_time_remaining=float(remaining) if remaining is not None else None,
        )
        winner = data.get("winnerIndex")
        state = GameState(
            config=config,
            players=players,
            center_piles=piles,
            stock=[_card(card) for card in _require(data, "stock")],
            turn=turn,
            phase=GamePhase(_require(data, "phase")),
            winner_index=int(winner) if winner is not None else None,
            turn_index=int(data.get("turnIndex", 0)),
        )
    except SnapshotError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"malformed snapshot: {exc}") from exc

    _validate(state)
    return state


def _validate(state: GameState) -> None:
    if len(state.players) != state.config.num_players:
        raise SnapshotError("player count does not match configuration")
    if state.players and not 0 <= state.turn.current_player_index < len(state.players):
        raise SnapshotError("current player index out of range")
    config = state.config
    if len(state.center_piles) != config.num_center_piles:
        raise SnapshotError(f"expected {config.num_center_piles} center piles, got {len(state.center_piles)}")
    for idx, pile in enumerate(state.center_piles, start=1):
        if pile.expected_rank != len(pile.cards) + 1 or pile.expected_rank > int(Rank.QUEEN):
            raise SnapshotError(f"center pile {idx} expects rank {pile.expected_rank} with {len(pile.cards)} cards")
        for position, card in enumerate(pile.cards, start=1):
            if not card.is_wild and int(card.rank) != position:
                raise SnapshotError(f"center pile {idx} holds {card.label()} out of sequence")
    for player in state.players:
        if len(player.hand) > config.hand_size:
            raise SnapshotError(f"player {player.player_number} holds {len(player.hand)} cards in hand")
        if len(player.storage) != config.storage_slots:
            raise SnapshotError(f"player {player.player_number} has {len(player.storage)} storage slots")
    ids: list[int] = [card.id for card in state.stock]
    for pile in state.center_piles:
        ids.extend(card.id for card in pile.cards)
    for player in state.players:
        ids.extend(card.id for card in player.hand)
        ids.extend(card.id for card in player.personal_pile)
        ids.extend(card.id for card in player.storage if card is not None)
    if len(ids) != len(set(ids)):
        raise SnapshotError("snapshot contains duplicate cards")
    if state.is_started and len(ids) != state.config.total_cards:
        raise SnapshotError(f"snapshot holds {len(ids)} cards, expected {state.config.total_cards}")


def dumps(state: GameState, indent: int | None = None) -> str:
    return json.dumps(to_dict(state), indent=indent)


def loads(text: str) -> GameState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"snapshot is not valid JSON: {exc}") from exc
    return from_dict(data)
