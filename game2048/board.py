"""Board engine: grid model, move resolution, tile spawning and terminal test.

Every function here is deterministic except :func:`add_random_tile`, which
draws from ``random`` (or from the ``rng`` it is given).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

import random

from . import config

Grid = List[List[Optional[int]]]
Position = Tuple[int, int]


class Direction(IntEnum):
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: Union["Direction", int, str]) -> "Direction":
        """Accept a Direction, its integer value, or its label ("up", "Left", ...)."""
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            if key.isdigit():
                value = int(key)
            else:
                raise ValueError(f"Unknown direction: {value!r}")
        if isinstance(value, bool):
            raise ValueError(f"Unknown direction: {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown direction: {value!r}") from None


@dataclass
class GameState:
    grid: Grid
    score: int = 0

    @property
    def size(self) -> int:
        return len(self.grid)

    def to_dict(self) -> Dict[str, Any]:
        return {"grid": [list(row) for row in self.grid], "score": self.score}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        grid = [[_parse_tile(tile) for tile in row] for row in data["grid"]]
        _check_grid(grid)
        score = int(data.get("score", 0))
        if score < 0:
            raise ValueError(f"Score must be non-negative, got {score}")
        return cls(grid=grid, score=score)


@dataclass(frozen=True)
class TileOrigin:
    """Where the tile now sitting in a cell came from.

    ``sources`` holds ``(position, value)`` pairs: one for a slide, two for a
    merge, none for a freshly spawned tile.
    """

    kind: str
    sources: Tuple[Tuple[Position, int], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "sources": [{"position": list(pos), "tile": tile} for pos, tile in self.sources],
        }


NEW_TILE = TileOrigin(kind="new")


@dataclass
class MoveOutcome:
    moved: bool
    origins: List[List[Optional[TileOrigin]]] = field(default_factory=list)
    score_delta: int = 0


def create_grid(size: int, fill: Any = None) -> List[List[Any]]:
    if size < 1:
        raise ValueError(f"Grid size must be positive, got {size}")
    return [[fill for _ in range(size)] for _ in range(size)]


def new_state(size: int = config.BOARD_SIZE, rng: Optional[random.Random] = None) -> GameState:
    """Empty board seeded with the starting tiles."""
    state = GameState(grid=create_grid(size))
    for _ in range(config.START_TILES):
        add_random_tile(state.grid, rng)
    return state


def clone(state: GameState) -> GameState:
    return GameState(grid=[row[:] for row in state.grid], score=state.score)


def empty_cells(grid: Grid) -> List[Position]:
    return [
        (row, col)
        for row in range(len(grid))
        for col in range(len(grid))
        if not grid[row][col]
    ]


def max_tile(grid: Grid) -> int:
    return max((tile for row in grid for tile in row if tile), default=0)


def add_random_tile(grid: Grid, rng: Optional[random.Random] = None) -> Optional[Position]:
    """Drop a 2 (or, one time in ten, a 4) on a uniformly chosen empty cell.

    Returns the chosen position, or None if the grid is full.
    """
    _check_grid(grid)
    rng = rng or random
    cells = empty_cells(grid)
    if not cells:
        return None
    row, col = rng.choice(cells)
    two, four = config.SPAWN_VALUES
    grid[row][col] = four if rng.random() < config.FOUR_PROBABILITY else two
    return row, col


def can_move(grid: Grid) -> bool:
    _check_grid(grid)
    size = len(grid)
    for row in range(size):
        for col in range(size):
            tile = grid[row][col]
            if not tile:
                return True
            if col + 1 < size and grid[row][col + 1] == tile:
                return True
            if row + 1 < size and grid[row + 1][col] == tile:
                return True
    return False


def move(state: GameState, direction: Union[Direction, int, str]) -> MoveOutcome:
    """Slide and merge every tile of ``state`` toward ``direction`` in place.

    Each line is scanned from its leading edge with a target cursor. A tile
    slides into an empty target, merges with an equal target (after which the
    cursor moves on, so the new tile cannot merge again this move), or stops
    right behind a different target.
    """
    direction = Direction.parse(direction)
    grid = state.grid
    _check_grid(grid)
    size = len(grid)
    origins: List[List[Optional[TileOrigin]]] = create_grid(size)
    moved = False
    score_delta = 0

    for line in range(size):
        cells = _line_cells(direction, line, size)
        target = 0
        for index in range(1, size):
            row, col = cells[index]
            tile = grid[row][col]
            if not tile:
                continue
            t_row, t_col = cells[target]
            target_tile = grid[t_row][t_col]
            if not target_tile:
                grid[t_row][t_col] = tile
                grid[row][col] = None
                origins[t_row][t_col] = TileOrigin("moved", ((cells[index], tile),))
                moved = True
                # cursor holds: the tile just placed may still take a merge
                continue
            if target_tile == tile:
                merged = target_tile + tile
                grid[t_row][t_col] = merged
                grid[row][col] = None
                origins[t_row][t_col] = TileOrigin(
                    "merged",
                    (
                        (_source_position(origins, cells[target]), target_tile),
                        (cells[index], tile),
                    ),
                )
                score_delta += merged
                moved = True
            elif target + 1 != index:
                n_row, n_col = cells[target + 1]
                grid[n_row][n_col] = tile
                grid[row][col] = None
                origins[n_row][n_col] = TileOrigin("moved", ((cells[index], tile),))
                moved = True
            target += 1

    state.score += score_delta
    return MoveOutcome(moved=moved, origins=origins, score_delta=score_delta)


def format_grid(grid: Grid) -> str:
    return "\n".join("\t".join(str(tile or "-") for tile in row) for row in grid)


def _line_cells(direction: Direction, line: int, size: int) -> List[Position]:
    """Positions of one line, ordered from the edge the tiles slide toward."""
    if direction in (Direction.UP, Direction.LEFT):
        offsets = range(size)
    else:
        offsets = range(size - 1, -1, -1)
    if direction in (Direction.UP, Direction.DOWN):
        return [(offset, line) for offset in offsets]
    return [(line, offset) for offset in offsets]


def _source_position(origins: List[List[Optional[TileOrigin]]], position: Position) -> Position:
    origin = origins[position[0]][position[1]]
    if origin is not None and origin.kind == "moved":
        return origin.sources[0][0]
    return position


def _parse_tile(tile: Any) -> Optional[int]:
    if tile is None:
        return None
    if isinstance(tile, bool) or not isinstance(tile, int):
        raise ValueError(f"Tile values must be integers, got {tile!r}")
    if tile == 0:
        return None
    if tile < 2 or tile & (tile - 1):
        raise ValueError(f"Tile values must be powers of two >= 2, got {tile!r}")
    return tile


def _check_grid(grid: Grid) -> None:
    size = len(grid)
    if size == 0 or any(len(row) != size for row in grid):
        raise ValueError("Grid must be a non-empty square matrix")
