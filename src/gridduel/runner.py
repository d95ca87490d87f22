"""CLI runner for grid duels.

Usage examples:
- Best move for an input file: ``python -m gridduel.runner input.txt``
- Bounded search with stats: ``python -m gridduel.runner input.txt --preset fast --stats``
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, TextIO

from . import engine
from .agents import GreedyAgent, MinimaxAgent, RandomAgent
from .board import BoardStateError
from .codec import format_move
from .input_file import GameSetup, InputFormatError, load_game
from .search_config import SearchConfig, override, preset_search_config
from .types import Move

AGENT_CHOICES = ["minimax", "greedy", "random"]


def _build_agent(name: str, seed: Optional[int], config: SearchConfig):
    if name == "minimax":
        return MinimaxAgent(config=config)
    if name == "greedy":
        return GreedyAgent()
    if name == "random":
        return RandomAgent(seed=seed)
    raise ValueError(f"Unknown agent '{name}'")


def best_move(path: str, agent=None) -> Move:
    """Read ``path`` and return the move for the acting side; pass on bad input."""

    try:
        setup = load_game(path)
    except (OSError, InputFormatError):
        return Move.pass_move()
    agent = agent or MinimaxAgent()
    return agent.choose_move(setup.state, setup.side, setup.items)


class Runner:
    """Chooses one move and reports diagnostics on stderr."""

    def __init__(self, agent, *, fallback_agent=None, stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None, quiet: bool = False) -> None:
        self.agent = agent
        self.fallback_agent = fallback_agent or GreedyAgent()
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.quiet = quiet

    def _log(self, message: str, *, force: bool = False) -> None:
        if self.quiet and not force:
            return
        print(message, file=self.stderr)
        self.stderr.flush()

    def _emit(self, move: Move) -> None:
        print(format_move(move), file=self.stdout)
        self.stdout.flush()

    def show_successors(self, setup: GameSetup) -> None:
        try:
            transitions = engine.generate_successors(setup.state, setup.side, setup.items)
        except BoardStateError as exc:
            self._log(f"successors unavailable: {exc}", force=True)
            return
        for next_state, move in transitions:
            stamina = next_state.player(setup.side).stamina
            self._log(f"{format_move(move)} stamina={stamina} board='{next_state.encoded()}'", force=True)

    def select(self, setup: GameSetup) -> Move:
        try:
            return self.agent.choose_move(setup.state, setup.side, setup.items)
        except Exception as exc:  # noqa: BLE001
            self._log(f"Fallback to greedy due to exception: {exc}")
            return self.fallback_agent.choose_move(setup.state, setup.side, setup.items)

    def run(self, path: str, show_successors: bool = False, show_stats: bool = False) -> int:
        try:
            setup = load_game(path)
        except OSError as exc:
            self._log(f"ERROR cannot read {path}: {exc}", force=True)
            self._emit(Move.pass_move())
            return 1
        except InputFormatError as exc:
            self._log(f"Malformed input, passing: {exc}", force=True)
            self._emit(Move.pass_move())
            return 0

        if show_successors:
            self.show_successors(setup)
        move = self.select(setup)
        self._log(f"side={setup.side.symbol} board={setup.height}x{setup.width} move={format_move(move)}")
        stats = getattr(self.agent, "last_stats", None)
        if show_stats and stats is not None:
            self._log(
                f"search stats: nodes={stats.nodes} cutoffs={stats.cutoffs} "
                f"duplicates={stats.duplicate_children} skipped={stats.skipped_branches} "
                f"tt_hits={stats.tt_hits} depth={stats.depth_reached} "
                f"root={stats.root_scored}/{stats.root_children} best_score={stats.best_score} "
                f"exhausted={stats.budget_exhausted} elapsed_ms={stats.elapsed_ms:.2f}",
                force=True,
            )
        self._emit(move)
        return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pick the best action for the acting side")
    parser.add_argument("input", nargs="?", default="input.txt", help="Path to the game input file")
    parser.add_argument("--agent", choices=AGENT_CHOICES, default="minimax")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--preset", choices=["default", "fast", "deep"], default="default")
    parser.add_argument("--depth", type=int, default=None, help="Override the preset search depth")
    parser.add_argument("--max-nodes", type=int, default=None, help="Stop searching after this many nodes")
    parser.add_argument("--time-budget-ms", type=int, default=None, help="Stop searching after this long")
    parser.add_argument("--stats", action="store_true", help="Print search stats on stderr")
    parser.add_argument("--show-successors", action="store_true", help="List root transitions on stderr")
    parser.add_argument("--quiet", action="store_true", help="Suppress diagnostics (the move still goes to stdout)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        config = override(
            preset_search_config(args.preset),
            depth=args.depth,
            max_nodes=args.max_nodes,
            time_budget_ms=args.time_budget_ms,
        )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        raise SystemExit(2)

    runner = Runner(_build_agent(args.agent, args.seed, config), quiet=args.quiet)
    sys.exit(runner.run(args.input, show_successors=args.show_successors, show_stats=args.stats))


if __name__ == "__main__":
    main()
