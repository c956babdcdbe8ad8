from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import logging
import threading

from . import board
from .ai import AIPlayer, SearchResult
from .board import GameState

logger = logging.getLogger(__name__)


class AIWorker:
    """Runs an AIPlayer on a background thread, one request at a time.

    ``cancel()`` is best effort: the running search notices it between two
    deepening passes and resolves with the last depth it finished.
    """

    def __init__(self, player: Optional[AIPlayer] = None) -> None:
        self.player = player or AIPlayer()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ai-search")
        self._cancel = threading.Event()
        self._lock = threading.Lock()
        self._pending: Optional[Future] = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._pending is not None and not self._pending.done()

    def request(self, state: GameState) -> "Future[SearchResult]":
        snapshot = board.clone(state)
        with self._lock:
            if self._pending is not None and not self._pending.done():
                raise RuntimeError("A search is already running on this worker")
            self._cancel.clear()
            self._pending = self._executor.submit(self.player.search, snapshot, self._cancel)
            return self._pending

    def cancel(self) -> None:
        if self.busy:
            logger.debug("Cancelling running search")
        self._cancel.set()

    def shutdown(self, wait: bool = True) -> None:
        self._cancel.set()
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "AIWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
