"""2048 game package providing the board engine, evaluation, and AI search.

Modules:
- board: Grid model, move resolution, random tile spawning
- evaluator: Weighted heuristic evaluation of positions
- ai: Iterative-deepening alpha-beta over player moves and tile spawns
- worker: Background thread host for the AI with cancellation
- game: Live game orchestration atop the board engine
"""

from .board import Direction, GameState, MoveOutcome
from .config import HeuristicWeights
from .game import Game
from .ai import AIPlayer, SearchResult
from .evaluator import Evaluator
from .worker import AIWorker

__all__ = [
    "Direction",
    "GameState",
    "MoveOutcome",
    "HeuristicWeights",
    "Game",
    "AIPlayer",
    "SearchResult",
    "Evaluator",
    "AIWorker",
]
