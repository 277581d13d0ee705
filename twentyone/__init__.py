"""Top-level package for the Twenty-One game engine."""

from . import actions, cards, engine, events, rules, state, turns

__all__ = [
    "actions",
    "cards",
    "engine",
    "events",
    "rules",
    "state",
    "turns",
]
