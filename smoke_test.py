from __future__ import annotations

import logging

from web import create_app


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = create_app()
    client = app.test_client()

    # new game
    resp = client.post("/api/new", json={})
    assert resp.status_code == 200, resp.data
    data = resp.get_json()
    assert "grid" in data and "score" in data

    # let the AI play a few moves
    for _ in range(10):
        resp = client.post("/api/ai-move", json={"time_limit_ms": 50})
        if resp.status_code == 409:
            break
        assert resp.status_code == 200, resp.data
        data = resp.get_json()
        assert "ai_move" in data
    print("Smoke OK. Score:", data["score"], "max tile:", data["max_tile"])


if __name__ == "__main__":
    main()
