"""Ordered entity collection backing a game state.

The board keeps its entities in notation order so that :meth:`Board.encode`
reproduces the input string exactly, with pickups and kills removing tokens and
moves rewriting a token in place.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from . import codec
from .types import Entity, EntityKind, Point, Side


class BoardStateError(RuntimeError):
    """Raised when a board edit does not match the board contents."""


class Board:
    """Entities of one board keyed by a stable id, with an occupancy index."""

    def __init__(self, height: int, width: int) -> None:
        self.height = height
        self.width = width
        self._entities: Dict[int, Entity] = {}
        self._occupancy: Dict[Point, int] = {}
        self._sides: Dict[str, int] = {}
        self._next_id = 0

    @classmethod
    def from_encoded(cls, text: str, height: int, width: int, strict: bool = False) -> "Board":
        board = cls(height, width)
        for entity in codec.parse_tokens(text, height, width, strict=strict):
            board.add(entity)
        return board

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[str]]) -> "Board":
        height = len(grid)
        width = len(grid[0]) if grid else 0
        return cls.from_encoded(codec.encode(grid), height, width, strict=True)

    def clone(self) -> "Board":
        other = Board(self.height, self.width)
        other._entities = dict(self._entities)
        other._occupancy = dict(self._occupancy)
        other._sides = dict(self._sides)
        other._next_id = self._next_id
        return other

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def encode(self) -> str:
        return codec.dump_tokens(self._entities.values())

    def to_grid(self) -> List[List[str]]:
        grid = [[codec.EMPTY_CELL for _ in range(self.width)] for _ in range(self.height)]
        for entity in self._entities.values():
            grid[entity.point.row][entity.point.col - 1] = entity.symbol
        return grid

    def in_bounds(self, point: Point) -> bool:
        return 0 <= point.row < self.height and 1 <= point.col <= self.width

    def is_occupied(self, point: Point) -> bool:
        return point in self._occupancy

    def is_free(self, point: Point) -> bool:
        """Inside the board and not holding any entity."""

        return self.in_bounds(point) and point not in self._occupancy

    def entity(self, entity_id: int) -> Entity:
        try:
            return self._entities[entity_id]
        except KeyError as exc:
            raise BoardStateError(f"no entity with id {entity_id}") from exc

    def side_id(self, side: Side) -> Optional[int]:
        return self._sides.get(side.symbol)

    def locate(self, side: Side) -> Optional[Point]:
        """Return the cell of ``side``'s token, or None if it is absent."""

        entity_id = self._sides.get(side.symbol)
        if entity_id is None:
            return None
        return self._entities[entity_id].point

    def _of_kind(self, kind: EntityKind) -> List[Tuple[int, Entity]]:
        return [(eid, entity) for eid, entity in self._entities.items() if entity.kind is kind]

    def items(self) -> List[Tuple[int, Entity]]:
        """Item tokens in notation order."""

        return self._of_kind(EntityKind.ITEM)

    def monsters(self) -> List[Tuple[int, Entity]]:
        """Monster tokens in notation order."""

        return self._of_kind(EntityKind.MONSTER)

    def add(self, entity: Entity) -> int:
        if not self.in_bounds(entity.point):
            raise BoardStateError(f"{entity.symbol} placed off the board at {entity.point}")
        if entity.point in self._occupancy:
            raise BoardStateError(f"cell {codec.format_point(entity.point)} is already occupied")
        if entity.kind is EntityKind.PLAYER and entity.symbol in self._sides:
            raise BoardStateError(f"side {entity.symbol} appears more than once")
        entity_id = self._next_id
        self._next_id += 1
        self._entities[entity_id] = entity
        self._occupancy[entity.point] = entity_id
        if entity.kind is EntityKind.PLAYER:
            self._sides[entity.symbol] = entity_id
        return entity_id

    def remove(self, entity_id: int) -> Entity:
        entity = self._entities.pop(entity_id, None)
        if entity is None:
            raise BoardStateError(f"cannot remove missing entity {entity_id}")
        del self._occupancy[entity.point]
        if entity.kind is EntityKind.PLAYER:
            del self._sides[entity.symbol]
        return entity

    def move(self, entity_id: int, point: Point) -> None:
        """Relocate an entity, keeping its place in notation order."""

        entity = self.entity(entity_id)
        if not self.in_bounds(point):
            raise BoardStateError(f"cannot move {entity.symbol} off the board to {point}")
        holder = self._occupancy.get(point)
        if holder is not None and holder != entity_id:
            raise BoardStateError(f"cannot move {entity.symbol} onto occupied {codec.format_point(point)}")
        del self._occupancy[entity.point]
        self._entities[entity_id] = entity.moved_to(point)
        self._occupancy[point] = entity_id
