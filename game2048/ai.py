from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple

import logging
import math
import threading
import time

from . import board
from .board import Direction, GameState
from .config import DEFAULT_TIME_LIMIT_S, MAX_SEARCH_DEPTH, SPAWN_VALUES, HeuristicWeights
from .evaluator import Evaluator

logger = logging.getLogger(__name__)


class Ply(Enum):
    PLAYER = "player"
    CHANCE = "chance"


@dataclass
class SearchResult:
    best_direction: Optional[Direction]
    reached_depth: int
    evaluation: float
    nodes: int = 0
    scored_moves: List[Tuple[Direction, float]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "direction": self.best_direction.label if self.best_direction is not None else None,
            "depth": self.reached_depth,
            "evaluation": self.evaluation,
            "nodes": self.nodes,
            "scored_moves": [
                {"direction": direction.label, "value": value} for direction, value in self.scored_moves
            ],
        }


class _Node(NamedTuple):
    value: float
    completed: bool
    nodes: int


class AIPlayer:
    """Alpha-beta search over player moves and tile spawns, deepened iteratively
    until a wall-clock budget runs out.

    Spawn plies are searched exhaustively and scored by their minimum, so a
    move's value is a worst-case bound on what the board can do to it.

    Searches keep no state on the player, so one instance can serve several
    threads at once.
    """

    def __init__(
        self,
        weights: Optional[HeuristicWeights] = None,
        time_limit_s: Optional[float] = DEFAULT_TIME_LIMIT_S,
        max_depth: int = MAX_SEARCH_DEPTH,
        order_moves: bool = True,
    ) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.evaluator = Evaluator(weights)
        self.time_limit_s = time_limit_s
        self.max_depth = max_depth
        self.order_moves = order_moves

    def get_best_move(self, state: GameState) -> Optional[Direction]:
        return self.search(state).best_direction

    def search(self, state: GameState, cancel: Optional[threading.Event] = None) -> SearchResult:
        """Deepen one ply at a time and return the deepest fully searched result.

        Depth 1 ignores the clock so a move is always produced for a
        non-terminal state. A deeper pass that hits the deadline is thrown
        away. ``cancel`` is only looked at between passes.
        """
        root = board.clone(state)
        started = time.monotonic()
        deadline = started + self.time_limit_s if self.time_limit_s is not None else None

        best, _completed = self._search_root(root, 1, None)
        for depth in range(2, self.max_depth + 1):
            if cancel is not None and cancel.is_set():
                logger.debug("Search cancelled after depth %d", best.reached_depth)
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
            result, completed = self._search_root(root, depth, deadline)
            if not completed:
                logger.debug(
                    "Depth %d cut by time budget after %.1f ms; keeping depth %d",
                    depth,
                    (time.monotonic() - started) * 1000,
                    best.reached_depth,
                )
                break
            result.nodes += best.nodes
            best = result
        return best

    def search_depth(self, state: GameState, depth: int) -> SearchResult:
        """Single fixed-depth pass with no clock; fully deterministic."""
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")
        result, _completed = self._search_root(board.clone(state), depth, None)
        return result

    def _search_root(
        self, root: GameState, depth: int, deadline: Optional[float]
    ) -> Tuple[SearchResult, bool]:
        # every root move gets a full window so its scored value is exact
        best_value = -math.inf
        best_direction: Optional[Direction] = None
        completed = True
        nodes = 1
        scored_moves: List[Tuple[Direction, float]] = []

        for direction, child in self._player_children(root):
            result = self._search(child, depth - 1, -math.inf, math.inf, Ply.CHANCE, deadline)
            nodes += result.nodes
            completed = completed and result.completed
            scored_moves.append((direction, result.value))
            if best_direction is None or result.value > best_value:
                best_value = result.value
                best_direction = direction

        if best_direction is None:
            # No legal moves
            best_value = self.evaluator.evaluate(root)

        if completed:
            logger.debug(
                "Depth %d: best=%s value=%.2f nodes=%d",
                depth,
                best_direction.label if best_direction is not None else None,
                best_value,
                nodes,
            )
        result = SearchResult(
            best_direction=best_direction,
            reached_depth=depth,
            evaluation=best_value,
            nodes=nodes,
            scored_moves=scored_moves,
        )
        return result, completed

    def _search(
        self,
        state: GameState,
        depth: int,
        alpha: float,
        beta: float,
        ply: Ply,
        deadline: Optional[float],
    ) -> _Node:
        if depth == 0:
            return _Node(self.evaluator.evaluate(state), True, 1)
        if deadline is not None and time.monotonic() >= deadline:
            return _Node(self.evaluator.evaluate(state), False, 1)

        if ply is Ply.PLAYER:
            children = self._player_children(state)
            if not children:
                # no legal move: the game is over on this branch
                return _Node(self.evaluator.evaluate(state), True, 1)
            value = -math.inf
            completed = True
            nodes = 1
            for _direction, child in children:
                result = self._search(child, depth - 1, alpha, beta, Ply.CHANCE, deadline)
                nodes += result.nodes
                completed = completed and result.completed
                value = max(value, result.value)
                alpha = max(alpha, value)
                if alpha >= beta:
                    break
            return _Node(value, completed, nodes)

        cells = board.empty_cells(state.grid)
        if not cells:
            return _Node(self.evaluator.evaluate(state), True, 1)
        value = math.inf
        completed = True
        nodes = 1
        for child in self._chance_children(state, cells):
            result = self._search(child, depth - 1, alpha, beta, Ply.PLAYER, deadline)
            nodes += result.nodes
            completed = completed and result.completed
            value = min(value, result.value)
            beta = min(beta, value)
            if alpha >= beta:
                break
        return _Node(value, completed, nodes)

    def _player_children(self, state: GameState) -> List[Tuple[Direction, GameState]]:
        children = []
        for direction in Direction:
            child = board.clone(state)
            if board.move(child, direction).moved:
                children.append((direction, child))
        if self.order_moves and len(children) > 1:
            # stable sort keeps direction order among equal static scores
            children.sort(key=lambda item: self.evaluator.evaluate(item[1]), reverse=True)
        return children

    @staticmethod
    def _chance_children(state: GameState, cells: List[board.Position]) -> Iterator[GameState]:
        for row, col in cells:
            for tile in SPAWN_VALUES:
                child = board.clone(state)
                child.grid[row][col] = tile
                yield child
