"""Search limits for move selection."""
from dataclasses import dataclass
from typing import Optional

DEFAULT_DEPTH = 30
DEFAULT_MAX_NODES = 100_000


@dataclass
class SearchConfig:
    depth: int = DEFAULT_DEPTH
    max_nodes: Optional[int] = DEFAULT_MAX_NODES
    time_budget_ms: Optional[int] = None
    preset: str = "custom"

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError("depth must be non-negative")
        if self.max_nodes is not None and self.max_nodes <= 0:
            raise ValueError("max_nodes must be positive")
        if self.time_budget_ms is not None and self.time_budget_ms <= 0:
            raise ValueError("time_budget_ms must be positive")

    @property
    def bounded(self) -> bool:
        return self.max_nodes is not None or self.time_budget_ms is not None


def preset_search_config(name: str) -> SearchConfig:
    preset = name.lower()
    if preset == "fast":
        return SearchConfig(depth=6, max_nodes=20000, time_budget_ms=None, preset="fast")
    if preset == "deep":
        return SearchConfig(depth=40, max_nodes=1_000_000, time_budget_ms=None, preset="deep")
    if preset == "default":
        return SearchConfig(depth=DEFAULT_DEPTH, max_nodes=DEFAULT_MAX_NODES, time_budget_ms=None, preset="default")
    raise ValueError(f"Unknown search preset '{name}'")


def override(config: SearchConfig, depth: Optional[int] = None, max_nodes: Optional[int] = None,
             time_budget_ms: Optional[int] = None) -> SearchConfig:
    """Return a copy of ``config`` with any given limits replaced."""

    return SearchConfig(
        depth=config.depth if depth is None else depth,
        max_nodes=config.max_nodes if max_nodes is None else max_nodes,
        time_budget_ms=config.time_budget_ms if time_budget_ms is None else time_budget_ms,
        preset=config.preset if depth is None and max_nodes is None and time_budget_ms is None else "custom",
    )
