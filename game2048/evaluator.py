from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional

import math

from .board import GameState, Grid
from .config import DEFAULT_WEIGHTS, HeuristicWeights


class Evaluator:
    """Static evaluation for 2048 positions.

    Higher is better for the player. The score is a weighted sum of
    independent terms; the weights are held per instance so differently
    tuned players can coexist.
    """

    # Tiles up to this value can appear from a spawn and are not penalised
    # for being duplicated.
    MAX_SPAWN_TILE = 4

    def __init__(self, weights: Optional[HeuristicWeights] = None) -> None:
        self.weights = weights or DEFAULT_WEIGHTS

    def evaluate(self, state: GameState) -> float:
        terms = self.breakdown(state)
        w = self.weights
        return (
            w.empty * terms["empty"]
            + w.score * terms["score"]
            + w.log_score * terms["log_score"]
            - w.duplication * terms["duplication"]
            + w.friendliness * terms["friendliness"]
        )

    def breakdown(self, state: GameState) -> Dict[str, float]:
        grid = state.grid
        return {
            "empty": float(self.empty_cells(grid)),
            "score": float(state.score),
            "log_score": math.log(state.score) if state.score > 0 else 0.0,
            "duplication": float(self.duplication_penalty(grid)),
            "friendliness": float(self.friendliness(grid)),
        }

    @staticmethod
    def empty_cells(grid: Grid) -> int:
        return sum(1 for row in grid for tile in row if not tile)

    @classmethod
    def duplication_penalty(cls, grid: Grid) -> int:
        counts = Counter(tile for row in grid for tile in row if tile and tile > cls.MAX_SPAWN_TILE)
        return sum(value * (count - 1) for value, count in counts.items())

    @classmethod
    def friendliness(cls, grid: Grid) -> int:
        """Reward tiles sitting in monotone runs along both their row and column.

        Each tile is scored once on its row and once on its column; the
        smaller of the two counts.
        """
        size = len(grid)
        row_scores = [cls._line_scores(grid[row]) for row in range(size)]
        col_scores = [cls._line_scores([grid[row][col] for row in range(size)]) for col in range(size)]
        total = 0
        for row in range(size):
            for col in range(size):
                if grid[row][col]:
                    total += min(row_scores[row][col], col_scores[col][row])
        return total

    @staticmethod
    def _line_scores(line: List[Optional[int]]) -> List[int]:
        scores = [0] * len(line)
        tiles = [(index, int(math.log2(tile))) for index, tile in enumerate(line) if tile]
        for i, (index, rank) in enumerate(tiles):
            left = _sign(rank - tiles[i - 1][1]) if i > 0 else None
            right = _sign(tiles[i + 1][1] - rank) if i + 1 < len(tiles) else None
            # a line edge mirrors the one neighbour it has
            if left is None:
                left = right if right is not None else 0
            if right is None:
                right = left
            # an equal neighbour takes the slope of the other side
            if left == 0:
                left = right
            elif right == 0:
                right = left
            scores[index] = rank if left == right else -rank
        return scores


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)
