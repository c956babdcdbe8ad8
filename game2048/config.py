"""Tunable constants for the board, the spawner and the search."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict

# Board
BOARD_SIZE = 4
START_TILES = 2

# Bounds applied to board sizes coming from API requests
MIN_BOARD_SIZE = 2
MAX_BOARD_SIZE = 8

# Spawning
SPAWN_VALUES = (2, 4)
FOUR_PROBABILITY = 0.1

# Search
DEFAULT_TIME_LIMIT_S = 0.1
MAX_SEARCH_DEPTH = 8

# Bounds applied to time budgets coming from API requests
MIN_TIME_LIMIT_S = 0.01
MAX_TIME_LIMIT_S = 2.0


@dataclass(frozen=True)
class HeuristicWeights:
    """Coefficients of the evaluation terms.

    ``duplication`` is applied as a penalty (subtracted), every other
    coefficient multiplies its term directly.
    """

    empty: float = 1.0
    score: float = 0.07
    log_score: float = 0.0
    duplication: float = 0.05
    friendliness: float = 0.5

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


DEFAULT_WEIGHTS = HeuristicWeights()
