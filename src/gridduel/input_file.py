"""Reader for the game input file.

Layout (whitespace separated, the board on its own line)::

    5 5 A
    30 5 2 20 1
    30 4 1 20 1
    1
    5 0 0 0
    A A1 o0 C3 m E5 B E1
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .board import Board, BoardStateError
from .codec import MAX_COLS, MAX_ROWS
from .types import GameState, Item, PlayerStats, Side

MAX_ITEMS = 10


class InputFormatError(ValueError):
    """Raised when the input file cannot be understood."""


@dataclass
class GameSetup:
    """Everything read from one input file."""

    height: int
    width: int
    side: Side
    state: GameState
    items: List[Item]


class _FieldReader:
    def __init__(self, lines: List[str]) -> None:
        self._fields = self._iter_fields(lines)
        self.line_no = -1

    @staticmethod
    def _iter_fields(lines: List[str]) -> Iterator[Tuple[int, str]]:
        for line_no, line in enumerate(lines):
            for token in line.split():
                yield line_no, token

    def next_token(self, name: str) -> str:
        try:
            self.line_no, token = next(self._fields)
        except StopIteration as exc:
            raise InputFormatError(f"missing {name}") from exc
        return token

    def next_int(self, name: str) -> int:
        token = self.next_token(name)
        try:
            return int(token)
        except ValueError as exc:
            raise InputFormatError(f"{name} must be an integer, got '{token}'") from exc


def _read_player(reader: _FieldReader, label: str) -> PlayerStats:
    return PlayerStats(
        health=reader.next_int(f"{label} health"),
        attack=reader.next_int(f"{label} attack"),
        defense=reader.next_int(f"{label} defense"),
        stamina=reader.next_int(f"{label} stamina"),
        speed=reader.next_int(f"{label} speed"),
    )


def parse_game_text(text: str) -> GameSetup:
    """Parse input file contents into a :class:`GameSetup`."""

    lines = text.split("\n")
    reader = _FieldReader(lines)

    height = reader.next_int("height")
    width = reader.next_int("width")
    if not 1 <= height <= MAX_ROWS:
        raise InputFormatError(f"height must be between 1 and {MAX_ROWS}")
    if not 1 <= width <= MAX_COLS:
        raise InputFormatError(f"width must be between 1 and {MAX_COLS}")
    side_token = reader.next_token("acting side")
    try:
        side = Side.from_symbol(side_token)
    except ValueError as exc:
        raise InputFormatError(str(exc)) from exc

    player_a = _read_player(reader, "side A")
    player_b = _read_player(reader, "side B")

    count = reader.next_int("item count")
    if not 0 <= count <= MAX_ITEMS:
        raise InputFormatError(f"item count must be between 0 and {MAX_ITEMS}")
    items: List[Item] = []
    for index in range(count):
        items.append(
            Item(
                d_health=reader.next_int(f"item {index} health"),
                d_attack=reader.next_int(f"item {index} attack"),
                d_defense=reader.next_int(f"item {index} defense"),
                d_speed=reader.next_int(f"item {index} speed"),
            )
        )

    board_line_no = reader.line_no + 1
    board_text = lines[board_line_no] if board_line_no < len(lines) else ""
    if board_text.endswith("\r"):
        board_text = board_text[:-1]

    try:
        board = Board.from_encoded(board_text, height, width)
    except BoardStateError as exc:
        raise InputFormatError(f"invalid board: {exc}") from exc
    for _, entity in board.items():
        if entity.item_index >= len(items):
            raise InputFormatError(f"board references unknown item {entity.symbol}")

    state = GameState(players=(player_a, player_b), board=board)
    return GameSetup(height=height, width=width, side=side, state=state, items=items)


def load_game(path: str) -> GameSetup:
    with open(path, "r", encoding="utf-8", newline="") as f:
        text = f.read()
    return parse_game_text(text)
