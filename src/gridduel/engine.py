"""Game engine for grid duels.

Rules:
- Each side spends stamina: one point per step of Manhattan distance, ten per attack.
- Attacking the adjacent opponent deals max(0, attack - defense) damage.
- Killing an adjacent monster removes it and heals the attacker by ten.
- Walking onto an item consumes it and applies its stat deltas.
- A pass ends the side's turn without changing the board.
- The game is over once either side's health is zero or below.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Sequence, Tuple

from .board import BoardStateError
from .types import Entity, GameState, Item, Move, MoveType, Point, Side

ATTACK_COST = 10
MONSTER_HEAL = 10
WIN_SCORE = float("inf")

# Cells tried around a distant target: right, left, below, above.
ORTHOGONAL_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
# Cells tried around an adjacent opponent when an attack is unaffordable.
DIAGONAL_OFFSETS: Tuple[Tuple[int, int], ...] = ((-1, -1), (1, 1), (-1, 1), (1, -1))

Transition = Tuple[GameState, Move]


def is_terminal(state: GameState) -> bool:
    """Whether either side is out of health."""

    return state.players[0].health <= 0 or state.players[1].health <= 0


def evaluate(state: GameState, perspective: Side) -> float:
    """Static score of ``state`` for ``perspective``.

    Finished games score +/- infinity; otherwise the difference of the summed
    health, attack, defense and speed of both sides.
    """

    own = state.player(perspective)
    other = state.player(perspective.opponent())
    if is_terminal(state):
        return WIN_SCORE if own.health > 0 else -WIN_SCORE
    return own.total() - other.total()


def is_settled(state: GameState) -> bool:
    """Whether neither side has anything left to do but pass."""

    board = state.board
    if board.locate(Side.A) is None or board.locate(Side.B) is None:
        return True
    return state.players[0].stamina <= 0 and state.players[1].stamina <= 0


def _advance(origin: Point, target: Point, primary: int, secondary: int) -> Point:
    row, col = origin.row, origin.col
    # Primary budget: rows then columns.
    while row < target.row and primary:
        row += 1
        primary -= 1
    while col < target.col and primary:
        col += 1
        primary -= 1
    while row > target.row and primary:
        row -= 1
        primary -= 1
    while col > target.col and primary:
        col -= 1
        primary -= 1
    # Secondary budget: columns then rows.
    while col < target.col and secondary:
        col += 1
        secondary -= 1
    while col > target.col and secondary:
        col -= 1
        secondary -= 1
    while row < target.row and secondary:
        row += 1
        secondary -= 1
    while row > target.row and secondary:
        row -= 1
        secondary -= 1
    return Point(row, col)


def closest_valid_point(origin: Point, target: Point, budget: int, state: GameState) -> Point:
    """Approximate the furthest free cell toward ``target`` within ``budget`` steps.

    The walk ignores obstacles on the way and only checks the final cell. When
    that cell is off the board or occupied, the budget is split differently
    between the two walking orders, then shrunk by one, until a free cell turns
    up or the budget is spent. The result may still be unusable, so callers
    must check it with ``state.board.is_free`` before moving there.
    """

    board = state.board
    candidate = _advance(origin, target, budget, 0)
    while not board.is_free(candidate) and budget > 0:
        secondary = 0
        while not board.is_free(candidate) and secondary <= budget:
            candidate = _advance(origin, target, budget - secondary, secondary)
            secondary += 1
        budget -= 1
    return candidate


def pass_transition(state: GameState) -> Transition:
    return state.clone(), Move.pass_move()


def apply_relocation(state: GameState, side: Side, point: Point, stamina: int) -> Transition:
    """Move ``side`` to ``point`` leaving it ``stamina`` points."""

    next_state = state.clone()
    side_id = next_state.board.side_id(side)
    if side_id is None:
        raise BoardStateError(f"side {side.symbol} has no token to move")
    next_state.board.move(side_id, point)
    next_state.with_player(side, replace(state.player(side), stamina=stamina))
    return next_state, Move(MoveType.MOVE, point)


def apply_attack(state: GameState, side: Side) -> Transition:
    """Strike the opposing side, which must be adjacent."""

    opponent = side.opponent()
    target = state.board.locate(opponent)
    if target is None:
        raise BoardStateError(f"side {opponent.symbol} has no token to attack")
    attacker = state.player(side)
    defender = state.player(opponent)
    damage = max(0, attacker.attack - defender.defense)
    next_state = state.clone()
    next_state.with_player(opponent, replace(defender, health=defender.health - damage))
    next_state.with_player(side, replace(attacker, stamina=attacker.stamina - ATTACK_COST))
    return next_state, Move(MoveType.ATTACK, target)


def apply_pickup(state: GameState, side: Side, item_id: int, catalog: Sequence[Item]) -> Transition:
    """Walk onto an item, consuming it."""

    origin = state.board.locate(side)
    if origin is None:
        raise BoardStateError(f"side {side.symbol} has no token to move")
    next_state = state.clone()
    entity = next_state.board.remove(item_id)
    index = entity.item_index
    if index is None or index >= len(catalog):
        raise BoardStateError(f"item {entity.symbol} is not in the catalog")
    stats = state.player(side)
    next_state.board.move(next_state.board.side_id(side), entity.point)
    stats = replace(stats, stamina=stats.stamina - origin.distance(entity.point)).with_item(catalog[index])
    next_state.with_player(side, stats)
    return next_state, Move(MoveType.MOVE, entity.point)


def apply_monster_kill(state: GameState, side: Side, monster_id: int) -> Transition:
    """Kill an adjacent monster and take the heal."""

    next_state = state.clone()
    entity = next_state.board.remove(monster_id)
    stats = state.player(side)
    next_state.with_player(
        side,
        replace(stats, stamina=stats.stamina - ATTACK_COST, health=stats.health + MONSTER_HEAL),
    )
    return next_state, Move(MoveType.ATTACK, entity.point)


def _partial_advance(state: GameState, side: Side, origin: Point, target: Point) -> Transition:
    """Spend all stamina walking toward ``target``, or pass if no cell fits."""

    stamina = state.player(side).stamina
    closest = closest_valid_point(origin, target, stamina, state)
    if state.board.is_free(closest) and origin.distance(closest) <= stamina:
        return apply_relocation(state, side, closest, 0)
    return pass_transition(state)


def _opponent_transitions(state: GameState, side: Side, origin: Point, target: Point) -> List[Transition]:
    stamina = state.player(side).stamina
    board = state.board
    gap = origin.distance(target)

    if gap == 1:
        if stamina >= ATTACK_COST:
            return [apply_attack(state, side)]
        for d_row, d_col in DIAGONAL_OFFSETS:
            cell = target.offset(d_row, d_col)
            if board.is_free(cell) and origin.distance(cell) <= stamina:
                return [apply_relocation(state, side, cell, stamina - origin.distance(cell))]
        return []

    transitions: List[Transition] = []
    for d_row, d_col in ORTHOGONAL_OFFSETS:
        cell = target.offset(d_row, d_col)
        if not board.is_free(cell):
            continue
        dist = origin.distance(cell)
        # Only close in when an attack can still be paid for on arrival.
        if dist + ATTACK_COST <= stamina:
            transitions.append(apply_relocation(state, side, cell, stamina - dist))
            break
        if gap - 1 > stamina:
            transitions.append(_partial_advance(state, side, origin, cell))
            continue
        transitions.append(pass_transition(state))
        break
    return transitions


def _item_transition(
    state: GameState, side: Side, origin: Point, item_id: int, item: Entity, catalog: Sequence[Item]
) -> Transition:
    if origin.distance(item.point) <= state.player(side).stamina:
        return apply_pickup(state, side, item_id, catalog)
    return _partial_advance(state, side, origin, item.point)


def _monster_transitions(state: GameState, side: Side, origin: Point, monster_id: int, monster: Entity) -> List[Transition]:
    stamina = state.player(side).stamina
    gap = origin.distance(monster.point)
    if gap == 1 and stamina >= ATTACK_COST:
        return [apply_monster_kill(state, side, monster_id)]
    for d_row, d_col in ORTHOGONAL_OFFSETS:
        cell = monster.point.offset(d_row, d_col)
        if not state.board.is_free(cell):
            continue
        dist = origin.distance(cell)
        if dist <= stamina:
            return [apply_relocation(state, side, cell, stamina - dist)]
        if gap > stamina:
            return [_partial_advance(state, side, origin, cell)]
    return []


def generate_successors(state: GameState, side: Side, catalog: Sequence[Item]) -> List[Transition]:
    """Generate ``(next_state, move)`` pairs for ``side`` in a fixed order.

    Order: opponent interaction, items in notation order, monsters in notation
    order, then a closing pass. The list is never empty. Raises
    :class:`BoardStateError` if an edit does not match the board.
    """

    if state.player(side).stamina <= 0:
        return [pass_transition(state)]

    origin = state.board.locate(side)
    target = state.board.locate(side.opponent())
    if origin is None or target is None:
        return [pass_transition(state)]

    transitions = _opponent_transitions(state, side, origin, target)
    for item_id, item in state.board.items():
        transitions.append(_item_transition(state, side, origin, item_id, item, catalog))
    for monster_id, monster in state.board.monsters():
        transitions.extend(_monster_transitions(state, side, origin, monster_id, monster))
    transitions.append(pass_transition(state))
    return transitions


successors = generate_successors
