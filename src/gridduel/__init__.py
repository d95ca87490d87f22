"""Grid duel decision package."""

from .types import Entity, EntityKind, GameState, Item, Move, MoveType, PlayerStats, Point, Side
from .board import Board, BoardStateError
from .codec import TokenError, decode, encode
from .engine import (
    ATTACK_COST,
    MONSTER_HEAL,
    closest_valid_point,
    evaluate,
    generate_successors,
    is_settled,
    is_terminal,
    successors,
)
from .agents import Agent, GreedyAgent, MinimaxAgent, RandomAgent, SearchStats
from .search_config import SearchConfig, preset_search_config

__all__ = [
    "ATTACK_COST",
    "Agent",
    "Board",
    "BoardStateError",
    "Entity",
    "EntityKind",
    "GameState",
    "GreedyAgent",
    "Item",
    "MONSTER_HEAL",
    "MinimaxAgent",
    "Move",
    "MoveType",
    "PlayerStats",
    "Point",
    "RandomAgent",
    "SearchConfig",
    "SearchStats",
    "Side",
    "TokenError",
    "closest_valid_point",
    "decode",
    "encode",
    "evaluate",
    "generate_successors",
    "is_settled",
    "is_terminal",
    "preset_search_config",
    "successors",
]
