"""Core data structures for grid duels.

Rule reminders:
- Rows are 0-based internally and encoded as 'A'..'Z' then 'a'..'z'.
- Columns are 1-based, up to 99.
- Stamina is spent one point per step and ten points per attack.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .board import Board


class Side(Enum):
    """The two combatants."""

    A = "A"
    B = "B"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def index(self) -> int:
        return 0 if self is Side.A else 1

    def opponent(self) -> "Side":
        """Return the opposing side."""

        return Side.A if self is Side.B else Side.B

    @classmethod
    def from_symbol(cls, symbol: str) -> "Side":
        try:
            return cls(symbol)
        except ValueError as exc:
            raise ValueError(f"Unknown side '{symbol}'") from exc


@dataclass(frozen=True)
class PlayerStats:
    """Health, attack, defense, remaining stamina and speed of one side.

    Health may drop below zero; that only signals defeat.
    """

    health: int
    attack: int
    defense: int
    stamina: int
    speed: int

    def total(self) -> int:
        """Sum used by the static evaluation (stamina excluded)."""

        return self.health + self.attack + self.defense + self.speed

    def with_item(self, item: "Item") -> "PlayerStats":
        return replace(
            self,
            health=self.health + item.d_health,
            attack=self.attack + item.d_attack,
            defense=self.defense + item.d_defense,
            speed=self.speed + item.d_speed,
        )


@dataclass(frozen=True)
class Item:
    """Stat deltas granted on pickup."""

    d_health: int
    d_attack: int
    d_defense: int
    d_speed: int


@dataclass(frozen=True, order=True)
class Point:
    """A board cell: 0-based row index and 1-based column."""

    row: int
    col: int

    def offset(self, d_row: int, d_col: int) -> "Point":
        return Point(self.row + d_row, self.col + d_col)

    def distance(self, other: "Point") -> int:
        """Manhattan distance."""

        return abs(self.row - other.row) + abs(self.col - other.col)


class MoveType(str, Enum):
    MOVE = "m"
    ATTACK = "a"
    PASS = "p"


@dataclass(frozen=True)
class Move:
    """How a successor state was produced. ``target`` is None for a pass."""

    kind: MoveType
    target: Optional[Point] = None

    @classmethod
    def pass_move(cls) -> "Move":
        return cls(MoveType.PASS, None)

    @property
    def is_pass(self) -> bool:
        return self.kind is MoveType.PASS


class EntityKind(Enum):
    PLAYER = "player"
    MONSTER = "monster"
    ITEM = "item"
    OBSTACLE = "obstacle"


MONSTER_SYMBOL = "m"


@dataclass(frozen=True)
class Entity:
    """One token of the encoded board.

    ``symbol`` is the single character written on the wire: 'A'/'B' for the
    sides, 'm' for monsters, the catalog digit for items and any other letter
    for obstacles.
    """

    kind: EntityKind
    symbol: str
    point: Point

    @classmethod
    def from_symbol(cls, symbol: str, point: Point) -> "Entity":
        if symbol.isdigit():
            kind = EntityKind.ITEM
        elif symbol in (Side.A.symbol, Side.B.symbol):
            kind = EntityKind.PLAYER
        elif symbol == MONSTER_SYMBOL:
            kind = EntityKind.MONSTER
        else:
            kind = EntityKind.OBSTACLE
        return cls(kind=kind, symbol=symbol, point=point)

    @property
    def item_index(self) -> Optional[int]:
        return int(self.symbol) if self.kind is EntityKind.ITEM else None

    def moved_to(self, point: Point) -> "Entity":
        return replace(self, point=point)


@dataclass
class GameState:
    """Both players plus the board layout.

    States are treated as values: every transition works on a ``clone()``.
    """

    players: Tuple[PlayerStats, PlayerStats]
    board: "Board"
    _key_cache: Optional[Tuple] = field(default=None, init=False, repr=False, compare=False)

    def player(self, side: Side) -> PlayerStats:
        return self.players[side.index]

    def with_player(self, side: Side, stats: PlayerStats) -> None:
        """Replace one side's stats in place (only on a freshly cloned state)."""

        if side is Side.A:
            self.players = (stats, self.players[1])
        else:
            self.players = (self.players[0], stats)
        self._key_cache = None

    def clone(self) -> "GameState":
        """Return an independent copy of the state."""

        return GameState(players=self.players, board=self.board.clone())

    def encoded(self) -> str:
        return self.board.encode()

    def key(self) -> Tuple:
        """Return a hashable key capturing stats and layout."""

        if self._key_cache is None:
            self._key_cache = (self.players, self.board.encode())
        return self._key_cache
