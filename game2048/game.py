from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import logging
import random

from . import board, config
from .ai import AIPlayer
from .board import Direction, GameState, MoveOutcome, TileOrigin

logger = logging.getLogger(__name__)


class Game:
    """Owns the live game and exposes a clean interface for the web/API.

    The search never touches ``self.state`` directly; it always works on
    clones handed to it by ``board.clone``.
    """

    def __init__(
        self,
        size: int = config.BOARD_SIZE,
        rng: Optional[random.Random] = None,
        state: Optional[GameState] = None,
        over: Optional[bool] = None,
    ) -> None:
        self.size = state.size if state is not None else size
        self.rng = rng
        self.best_score = 0
        self.state: GameState
        self.over = False
        self.origins: List[List[Optional[TileOrigin]]] = []
        if state is None:
            self.reset()
        else:
            self.load(state, over)

    def reset(self, size: Optional[int] = None) -> None:
        if size is not None:
            self.size = size
        self.state = board.new_state(self.size, self.rng)
        self.over = False
        self.origins = self._all_new()
        logger.debug("New %dx%d game", self.size, self.size)

    def load(self, state: GameState, over: Optional[bool] = None) -> None:
        self.state = state
        self.size = state.size
        self.over = (not board.can_move(state.grid)) if over is None else over
        self.origins = self._all_new()
        self._track_best()

    @property
    def score(self) -> int:
        return self.state.score

    def is_game_over(self) -> bool:
        return self.over

    def move(self, direction: Union[Direction, int, str]) -> MoveOutcome:
        if self.over:
            raise ValueError("Game is over")
        outcome = board.move(self.state, direction)
        self.origins = outcome.origins
        if outcome.moved:
            position = board.add_random_tile(self.state.grid, self.rng)
            if position is not None:
                self.origins[position[0]][position[1]] = board.NEW_TILE
        if not board.can_move(self.state.grid):
            self.over = True
            logger.info("Game over: score=%d max_tile=%d", self.score, board.max_tile(self.state.grid))
        self._track_best()
        return outcome

    def play_ai(self, player: AIPlayer, max_moves: Optional[int] = None) -> int:
        """Let ``player`` drive until the game ends or ``max_moves`` is reached.

        Returns the number of moves played.
        """
        played = 0
        while not self.over and (max_moves is None or played < max_moves):
            direction = player.get_best_move(self.state)
            if direction is None:
                self.over = True
                break
            self.move(direction)
            played += 1
        return played

    def snapshot(self) -> Dict[str, Any]:
        return {
            "grid": [list(row) for row in self.state.grid],
            "score": self.state.score,
            "best_score": self.best_score,
            "over": self.over,
            "max_tile": board.max_tile(self.state.grid),
            "origins": [
                [origin.to_dict() if origin is not None else None for origin in row]
                for row in self.origins
            ],
        }

    def serialize(self) -> Dict[str, Any]:
        return {"game": self.state.to_dict(), "over": self.over}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], rng: Optional[random.Random] = None) -> "Game":
        over = data.get("over")
        return cls(state=GameState.from_dict(data["game"]), rng=rng, over=None if over is None else bool(over))

    def _track_best(self) -> None:
        if self.state.score > self.best_score:
            self.best_score = self.state.score

    def _all_new(self) -> List[List[Optional[TileOrigin]]]:
        return [
            [board.NEW_TILE if tile else None for tile in row]
            for row in self.state.grid
        ]
