"""Compact board notation.

Every entity on the board is written as one token::

    [o]<symbol> <row><col>

``o`` prefixes item tokens only (the symbol is then the catalog digit) and is
never an entity symbol itself. The row is a single letter ('A'..'Z' for rows
0-25, 'a'..'z' for rows 26-51) and the column is the 1-based column in one or
two decimal digits. Tokens are separated and terminated by a single space,
e.g. ``"A A1 o0 C3 m E5 "``.
"""
from __future__ import annotations

import string
from typing import Iterable, Iterator, List, Sequence, Tuple

from .types import Entity, Move, Point

ITEM_PREFIX = "o"
EMPTY_CELL = "."
MAX_ROWS = 52
MAX_COLS = 99

_UPPER = string.ascii_uppercase
_LOWER = string.ascii_lowercase


class TokenError(ValueError):
    """Raised by strict decoding when a token cannot be parsed."""


def row_to_char(row: int) -> str:
    """Convert a 0-based row index to its row letter (e.g., 0 -> "A", 26 -> "a")."""

    if not 0 <= row < MAX_ROWS:
        raise ValueError(f"row out of bounds: {row}")
    if row < 26:
        return _UPPER[row]
    return _LOWER[row - 26]


def char_to_row(ch: str) -> int:
    """Convert a row letter back to its 0-based index, or -1 if it is not one."""

    if len(ch) == 1:
        if ch in _UPPER:
            return _UPPER.index(ch)
        if ch in _LOWER:
            return _LOWER.index(ch) + 26
    return -1


def format_point(point: Point) -> str:
    """Convert a point to notation (e.g., Point(0, 12) -> "A12")."""

    if not 1 <= point.col <= MAX_COLS:
        raise ValueError(f"column out of bounds: {point.col}")
    return f"{row_to_char(point.row)}{point.col}"


def parse_point(text: str) -> Point:
    """Convert notation such as "c10" to a point."""

    if not text or len(text) < 2 or len(text) > 3:
        raise ValueError(f"Invalid point '{text}'")
    row = char_to_row(text[0])
    if row < 0:
        raise ValueError(f"Invalid row in point '{text}'")
    col_part = text[1:]
    if not col_part.isdigit():
        raise ValueError(f"Invalid column in point '{text}'")
    col = int(col_part)
    if not 1 <= col <= MAX_COLS:
        raise ValueError(f"Invalid column in point '{text}'")
    return Point(row, col)


def format_move(move: Move) -> str:
    """Render a move as ``type row column``; a pass is ``p . 0``."""

    if move.target is None:
        return f"{move.kind.value} . 0"
    return f"{move.kind.value} {row_to_char(move.target.row)} {move.target.col}"


def _is_entity_char(ch: str) -> bool:
    return ch in string.digits or ch in _UPPER or ch in _LOWER


def dump_tokens(entities: Iterable[Entity]) -> str:
    """Serialize entities, in order, to the notation string."""

    parts: List[str] = []
    for entity in entities:
        prefix = ITEM_PREFIX if entity.symbol in string.digits else ""
        parts.append(f"{prefix}{entity.symbol} {format_point(entity.point)} ")
    return "".join(parts)


def encode(grid: Sequence[Sequence[str]]) -> str:
    """Scan ``grid`` row-major and return the notation string.

    Cells holding anything other than a digit or an ASCII letter are skipped,
    as is the item prefix letter, which would read back as an item token.
    """

    entities: List[Entity] = []
    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            if cell == ITEM_PREFIX or not _is_entity_char(cell):
                continue
            entities.append(Entity.from_symbol(cell, Point(r, c + 1)))
    return dump_tokens(entities)


def _scan(text: str, strict: bool) -> Iterator[Tuple[str, int, int, int]]:
    """Yield ``(symbol, row, col, offset)`` for every token with a readable position.

    Malformed tokens are skipped, or raise :class:`TokenError` when ``strict``.
    """

    i = 0
    n = len(text)

    def bad(reason: str, at: int) -> None:
        if strict:
            raise TokenError(f"{reason} at offset {at} in '{text}'")

    while i < n:
        if text[i] == " ":
            i += 1
            continue
        start = i
        has_prefix = False
        if text[i] == ITEM_PREFIX:
            has_prefix = True
            i += 1
            if i >= n:
                bad("dangling item prefix", start)
                return
        symbol = text[i]
        i += 1
        if has_prefix and symbol not in string.digits:
            bad(f"item prefix followed by '{symbol}'", start)
        if i < n and text[i] == " ":
            i += 1
        if i >= n:
            bad("token missing position", start)
            return
        row = char_to_row(text[i])
        i += 1
        if row < 0:
            bad(f"invalid row '{text[i - 1]}'", start)
            continue
        if i >= n or text[i] not in string.digits:
            bad("invalid column", start)
            continue
        col = int(text[i])
        i += 1
        if i < n and text[i] in string.digits:
            col = col * 10 + int(text[i])
            i += 1
        if i < n and text[i] == " ":
            i += 1
        yield symbol, row, col, start


def parse_tokens(text: str, height: int, width: int, strict: bool = False) -> List[Entity]:
    """Parse the notation string into entities in string order.

    Malformed and out-of-bounds tokens are dropped unless ``strict`` is set.
    """

    entities: List[Entity] = []
    for symbol, row, col, offset in _scan(text, strict):
        if not (0 <= row < height and 1 <= col <= width):
            if strict:
                raise TokenError(f"token at offset {offset} is off the {height}x{width} board")
            continue
        if not _is_entity_char(symbol):
            if strict:
                raise TokenError(f"invalid entity '{symbol}' at offset {offset}")
            continue
        entities.append(Entity.from_symbol(symbol, Point(row, col)))
    return entities


def decode(text: str, height: int, width: int, strict: bool = False) -> List[List[str]]:
    """Build a ``height`` x ``width`` grid from the notation string.

    Empty cells hold ``"."``. Bad tokens are silently dropped unless ``strict``.
    """

    grid = [[EMPTY_CELL for _ in range(width)] for _ in range(height)]
    for entity in parse_tokens(text, height, width, strict=strict):
        grid[entity.point.row][entity.point.col - 1] = entity.symbol
    return grid
