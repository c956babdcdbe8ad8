from __future__ import annotations

from flask import Flask, jsonify, request
import logging
import sys
import threading
from pathlib import Path

# Ensure project root is importable when running this file directly
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from game2048 import AIPlayer, Direction, Game, GameState, HeuristicWeights
from game2048 import board, config

logger = logging.getLogger(__name__)


def _time_budget(payload: dict) -> float:
    """Requested budget in seconds, clamped so the API stays responsive."""
    raw = payload.get("time_limit_ms")
    if raw is None:
        return config.DEFAULT_TIME_LIMIT_S
    budget = float(raw) / 1000.0
    return min(config.MAX_TIME_LIMIT_S, max(config.MIN_TIME_LIMIT_S, budget))


def _board_size(payload: dict) -> int:
    size = int(payload.get("size") or config.BOARD_SIZE)
    return min(config.MAX_BOARD_SIZE, max(config.MIN_BOARD_SIZE, size))


def create_app(weights: HeuristicWeights = config.DEFAULT_WEIGHTS) -> Flask:
    app = Flask(__name__)

    game = Game()
    # one request at a time may touch the live game
    game_lock = threading.Lock()

    def player_for(payload: dict) -> AIPlayer:
        # a fresh player per request keeps concurrent searches apart
        return AIPlayer(weights=weights, time_limit_s=_time_budget(payload))

    @app.get("/api/state")
    def api_state():
        with game_lock:
            return jsonify(game.snapshot())

    @app.post("/api/new")
    def api_new():
        data = request.get_json(silent=True) or {}
        with game_lock:
            try:
                if data.get("grid") is not None:
                    game.load(GameState.from_dict(data))
                else:
                    game.reset(_board_size(data))
            except (KeyError, TypeError, ValueError) as exc:
                return jsonify({"error": str(exc)}), 400
            return jsonify(game.snapshot())

    @app.post("/api/move")
    def api_move():
        payload = request.get_json(silent=True) or {}
        raw = payload.get("direction")
        if raw is None:
            return jsonify({"error": "Missing direction"}), 400
        try:
            direction = Direction.parse(raw)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400

        with game_lock:
            if game.is_game_over():
                return jsonify({"error": "Game is over"}), 409
            outcome = game.move(direction)
            snap = game.snapshot()
        snap["moved"] = outcome.moved
        return jsonify(snap)

    @app.post("/api/ai-move")
    def api_ai_move():
        payload = request.get_json(silent=True) or {}
        try:
            ai = player_for(payload)
        except (TypeError, ValueError) as exc:
            return jsonify({"error": str(exc)}), 400

        with game_lock:
            if game.is_game_over():
                return jsonify({"error": "Game is over"}), 409
            result = ai.search(game.state)
            if result.best_direction is not None:
                game.move(result.best_direction)
            snap = game.snapshot()
        logger.info(
            "AI played %s at depth %d (nodes=%d)",
            result.best_direction.label if result.best_direction is not None else None,
            result.reached_depth,
            result.nodes,
        )

        snap["ai_move"] = result.best_direction.label if result.best_direction is not None else None
        snap["depth"] = result.reached_depth
        return jsonify(snap)

    @app.post("/api/hint")
    def api_hint():
        payload = request.get_json(silent=True) or {}
        try:
            ai = player_for(payload)
        except (TypeError, ValueError) as exc:
            return jsonify({"error": str(exc)}), 400
        with game_lock:
            state = board.clone(game.state)
        return jsonify(ai.search(state).to_dict())

    return app


app = create_app()

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    app.run(host="0.0.0.0", port=5000, debug=True)
