"""AI opponent: difficulty profiles and move search."""

from . import policy, search
from .policy import PROFILES, DifficultyProfile, profile_for
from .search import best_move, choose_move, plan_turn

__all__ = [
    "policy",
    "search",
    "PROFILES",
    "DifficultyProfile",
    "profile_for",
    "best_move",
    "choose_move",
    "plan_turn",
]
