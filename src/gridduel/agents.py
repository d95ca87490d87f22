"""Agents choosing an action for one side."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple

from . import engine
from .board import BoardStateError
from .search_config import SearchConfig
from .types import GameState, Item, Move, Side


@dataclass
class SearchStats:
    """Aggregated statistics from a single decision."""

    nodes: int
    cutoffs: int
    duplicate_children: int
    skipped_branches: int
    tt_hits: int
    depth_reached: int
    root_children: int
    root_scored: int
    best_score: float
    budget_exhausted: bool
    elapsed_ms: float


class Agent:
    """Base class for agents."""

    def choose_move(self, state: GameState, side: Side, catalog: Sequence[Item]) -> Move:  # noqa: D401
        """Return the action ``side`` should take in ``state``."""

        raise NotImplementedError

    def _root_transitions(self, state: GameState, side: Side, catalog: Sequence[Item]) -> List[engine.Transition]:
        """Root expansion; an inconsistent board yields no transitions."""

        try:
            return engine.generate_successors(state, side, catalog)
        except BoardStateError:
            return []


class RandomAgent(Agent):
    """Agent that picks any root transition with reproducible seeding."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def choose_move(self, state: GameState, side: Side, catalog: Sequence[Item]) -> Move:
        transitions = self._root_transitions(state, side, catalog)
        if not transitions:
            return Move.pass_move()
        return self._rng.choice(transitions)[1]


class GreedyAgent(Agent):
    """One-ply agent: the first transition with the best static score wins."""

    def choose_move(self, state: GameState, side: Side, catalog: Sequence[Item]) -> Move:
        transitions = self._root_transitions(state, side, catalog)
        if not transitions:
            return Move.pass_move()
        best_move = transitions[0][1]
        best_score = float("-inf")
        for next_state, move in transitions:
            score = engine.evaluate(next_state, side)
            if score > best_score:
                best_score, best_move = score, move
        return best_move


class MinimaxAgent(Agent):
    """Depth-limited minimax with alpha-beta pruning and a transposition table.

    A side keeps moving until it passes: only a pass hands the turn over and
    consumes one level of depth. Depths are searched iteratively from 1 up to
    the configured depth; when a search limit runs out the move from the
    deepest finished iteration is kept.
    """

    class Bound(str, Enum):
        EXACT = "EXACT"
        LOWER = "LOWER"
        UPPER = "UPPER"

    @dataclass
    class TTEntry:
        value: float
        bound: "MinimaxAgent.Bound"

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()
        self.last_stats: Optional[SearchStats] = None
        self._catalog: Sequence[Item] = ()
        self._deadline: Optional[float] = None
        self._ttable: Dict[Tuple, "MinimaxAgent.TTEntry"] = {}
        self._nodes = 0
        self._cutoffs = 0
        self._duplicates = 0
        self._skipped = 0
        self._tt_hits = 0

    def choose_move(self, state: GameState, side: Side, catalog: Sequence[Item]) -> Move:
        self.last_stats = None
        self._catalog = catalog
        self._ttable = {}
        self._nodes = 0
        self._cutoffs = 0
        self._duplicates = 0
        self._skipped = 0
        self._tt_hits = 0
        start_time = time.monotonic()
        budget = self.config.time_budget_ms
        self._deadline = None if budget is None else start_time + budget / 1000.0

        transitions = self._root_transitions(state, side, catalog)
        best_move: Optional[Move] = None
        best_score = float("-inf")
        scored = 0
        depth_reached = 0
        exhausted = False
        depths = range(1, self.config.depth + 1) if self.config.depth > 0 else [0]
        for depth in depths:
            score, move, count, finished = self._search_root(transitions, depth, side)
            if finished:
                best_score, best_move, scored = score, move, count
                depth_reached = depth
                continue
            exhausted = True
            # A cut-short first iteration still beats no answer at all.
            if best_move is None:
                best_score, best_move, scored = score, move, count
            break

        self.last_stats = SearchStats(
            nodes=self._nodes,
            cutoffs=self._cutoffs,
            duplicate_children=self._duplicates,
            skipped_branches=self._skipped,
            tt_hits=self._tt_hits,
            depth_reached=depth_reached,
            root_children=len(transitions),
            root_scored=scored,
            best_score=best_score,
            budget_exhausted=exhausted,
            elapsed_ms=(time.monotonic() - start_time) * 1000.0,
        )
        if best_move is None:
            if transitions and exhausted:
                return transitions[0][1]
            return Move.pass_move()
        return best_move

    def _search_root(
        self, transitions: Sequence[engine.Transition], depth: int, side: Side
    ) -> Tuple[float, Optional[Move], int, bool]:
        """Score every root child at ``depth``; the first strictly greater score wins."""

        best_move: Optional[Move] = None
        best_score = float("-inf")
        scored = 0
        for child, move in transitions:
            try:
                # The root side keeps the move even after a root pass.
                score = self.search(child, depth, side, side)
            except BoardStateError:
                self._skipped += 1
                continue
            except TimeoutError:
                return best_score, best_move, scored, False
            scored += 1
            if best_move is None or score > best_score:
                best_score, best_move = score, move
        return best_score, best_move, scored, True

    def _budget_check(self) -> None:
        if self.config.max_nodes is not None and self._nodes > self.config.max_nodes:
            raise TimeoutError("node budget exhausted")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise TimeoutError("time budget exhausted")

    def _store_tt_entry(self, key: Tuple, value: float, bound: "MinimaxAgent.Bound") -> None:
        self._ttable[key] = self.TTEntry(value=value, bound=bound)

    def search(
        self,
        state: GameState,
        depth: int,
        to_move: Side,
        searching: Side,
        alpha: float = float("-inf"),
        beta: float = float("inf"),
    ) -> float:
        """Score ``state`` for ``searching`` with ``to_move`` acting next.

        Raises :class:`BoardStateError` when ``state`` cannot be expanded and
        ``TimeoutError`` when a configured search limit runs out.
        """

        self._nodes += 1
        self._budget_check()
        # Once neither side can act only passes remain, so depth no longer matters.
        if depth == 0 or engine.is_terminal(state) or engine.is_settled(state):
            return engine.evaluate(state, searching)

        key = (state.key(), to_move, searching, depth)
        entry = self._ttable.get(key)
        if entry is not None:
            self._tt_hits += 1
            if entry.bound is self.Bound.EXACT:
                return entry.value
            if entry.bound is self.Bound.LOWER:
                alpha = max(alpha, entry.value)
            else:
                beta = min(beta, entry.value)
            if alpha >= beta:
                self._cutoffs += 1
                return entry.value
        alpha_orig, beta_orig = alpha, beta

        transitions = engine.generate_successors(state, to_move, self._catalog)
        maximizing = to_move is searching
        best_value = float("-inf") if maximizing else float("inf")
        seen: Set[Tuple] = set()
        scored = 0
        for child, move in transitions:
            next_side = to_move.opponent() if move.is_pass else to_move
            next_depth = depth - 1 if move.is_pass else depth
            # Identical children score identically; search each once.
            child_key = (child.key(), next_side)
            if child_key in seen:
                self._duplicates += 1
                continue
            seen.add(child_key)
            try:
                value = self.search(child, next_depth, next_side, searching, alpha, beta)
            except BoardStateError:
                self._skipped += 1
                continue
            scored += 1
            if maximizing:
                best_value = max(best_value, value)
                alpha = max(alpha, value)
            else:
                best_value = min(best_value, value)
                beta = min(beta, value)
            if beta <= alpha:
                self._cutoffs += 1
                break
        if scored == 0:
            best_value = engine.evaluate(state, searching)
            self._store_tt_entry(key, best_value, self.Bound.EXACT)
            return best_value

        if best_value <= alpha_orig:
            bound = self.Bound.UPPER
        elif best_value >= beta_orig:
            bound = self.Bound.LOWER
        else:
            bound = self.Bound.EXACT
        self._store_tt_entry(key, best_value, bound)
        return best_value
