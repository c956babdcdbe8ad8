from __future__ import annotations

import threading

import pytest

from game2048 import AIPlayer, AIWorker, GameState

_ = None

OPEN_BOARD = [
    [2, 4, _, _],
    [_, 2, _, _],
    [_, _, 8, _],
    [_, _, _, 2],
]


class GatedPlayer(AIPlayer):
    """Holds every search until the test opens the gate."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.started = threading.Event()
        self.gate = threading.Event()

    def search(self, state, cancel=None):
        self.started.set()
        assert self.gate.wait(5)
        return super().search(state, cancel)


def _state() -> GameState:
    return GameState(grid=[row[:] for row in OPEN_BOARD])


def test_request_resolves_with_search_result():
    with AIWorker(AIPlayer(time_limit_s=0.05)) as worker:
        result = worker.request(_state()).result(timeout=5)
    assert result.best_direction is not None
    assert result.reached_depth >= 1


def test_one_outstanding_request_at_a_time():
    player = GatedPlayer(time_limit_s=None, max_depth=2)
    with AIWorker(player) as worker:
        future = worker.request(_state())
        assert player.started.wait(5)
        assert worker.busy
        with pytest.raises(RuntimeError):
            worker.request(_state())
        player.gate.set()
        assert future.result(timeout=5).reached_depth == 2
        assert not worker.busy
        # a finished request frees the worker again
        assert worker.request(_state()).result(timeout=5).reached_depth == 2


def test_cancel_returns_last_completed_depth():
    player = GatedPlayer(time_limit_s=None, max_depth=8)
    with AIWorker(player) as worker:
        future = worker.request(_state())
        assert player.started.wait(5)
        worker.cancel()
        player.gate.set()
        result = future.result(timeout=5)
    assert result.reached_depth == 1
    assert result.best_direction is not None


def test_request_works_on_a_copy():
    player = GatedPlayer(time_limit_s=None, max_depth=1)
    state = _state()
    with AIWorker(player) as worker:
        future = worker.request(state)
        assert player.started.wait(5)
        state.grid[0][0] = 1024
        player.gate.set()
        result = future.result(timeout=5)
    expected = AIPlayer(time_limit_s=None, max_depth=1).search(_state())
    assert result == expected
