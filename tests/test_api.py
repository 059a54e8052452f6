"""End-to-end tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from engine.store import Store, StoreKey
from main import create_app


@pytest.fixture
def client():
    """Client for an app backed by a fresh, non-persistent store."""
    return TestClient(create_app(store=Store(), persist=False))


def _create_game(client: TestClient, max_players: int = 4) -> int:
    resp = client.post("/games", json={"maxPlayers": max_players})
    assert resp.status_code == 200
    return resp.json()["id"]


def _join(client: TestClient, game_id: int, **body) -> dict:
    resp = client.put(f"/games/{game_id}/join", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestServiceInfo:
    """Tests for / and /health."""

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Hexline Server"

    def test_health(self, client):
        assert client.get("/health").json() == {"healthy": True}


class TestLobby:
    """Tests for game creation, listing and joining."""

    def test_create_requires_max_players(self, client):
        resp = client.post("/games", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Missing required field: maxPlayers"

    def test_list_games(self, client):
        game_id = _create_game(client, 2)
        _join(client, game_id)
        body = client.get("/games").json()
        assert body["gameIds"] == [game_id]
        assert body["games"] == [{"id": game_id, "playerCount": 1, "maxPlayers": 2, "isFull": False}]

    def test_join_response_shape(self, client):
        game_id = _create_game(client)
        body = _join(client, game_id, username="alice")
        assert set(body) == {"gameId", "playerId", "turn", "world", "playerCount", "maxPlayers"}
        assert body["turn"] == 1
        assert len(body["world"]["terrain"]) == 10
        assert len(body["world"]["actors"]) == 9

    def test_join_with_post(self, client):
        game_id = _create_game(client)
        resp = client.post(f"/games/{game_id}/join", json={"sessionId": "abc"})
        assert resp.status_code == 200

    def test_join_without_body(self, client):
        game_id = _create_game(client)
        assert client.put(f"/games/{game_id}/join").status_code == 200

    def test_join_unknown_game(self, client):
        resp = client.put("/games/99/join", json={})
        assert resp.status_code == 404
        assert "not found" in resp.json()["detail"]

    def test_join_full_game(self, client):
        game_id = _create_game(client, 2)
        _join(client, game_id)
        _join(client, game_id)
        resp = client.put(f"/games/{game_id}/join", json={})
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Game is full"

    def test_player_state(self, client):
        game_id = _create_game(client)
        player_id = _join(client, game_id)["playerId"]
        resp = client.get(f"/games/{game_id}/players/{player_id}")
        assert resp.status_code == 200
        assert resp.json()["playerId"] == player_id
        assert client.get(f"/games/{game_id}/players/{player_id + 50}").status_code == 403


class TestHostActions:
    """Tests for start, kick and host transfer."""

    def test_start(self, client):
        game_id = _create_game(client)
        host = _join(client, game_id)["playerId"]
        _join(client, game_id)
        resp = client.post(f"/games/{game_id}/start", headers={"X-Player-Id": str(host)})
        assert resp.status_code == 200
        assert resp.json()["status"] == "IN_PROGRESS"

    def test_start_without_header(self, client):
        game_id = _create_game(client)
        _join(client, game_id)
        _join(client, game_id)
        resp = client.post(f"/games/{game_id}/start")
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Only the host can perform this action"

    def test_kick(self, client):
        game_id = _create_game(client)
        host = _join(client, game_id)["playerId"]
        guest = _join(client, game_id)["playerId"]
        resp = client.delete(f"/games/{game_id}/players/{guest}", headers={"X-Player-Id": str(host)})
        assert resp.status_code == 200
        assert client.get("/games").json()["games"][0]["playerCount"] == 1

    def test_kick_completes_waiting_turn(self, client):
        game_id = _create_game(client)
        host = _join(client, game_id)["playerId"]
        guest = _join(client, game_id)["playerId"]
        client.post(f"/games/{game_id}/turns/1/players/{host}", json={"orders": []})

        resp = client.delete(f"/games/{game_id}/players/{guest}", headers={"X-Player-Id": str(host)})
        assert resp.status_code == 200
        assert client.get(f"/games/{game_id}/turns/1/players/{host}").json()["success"] is True
        assert client.get(f"/games/{game_id}/players/{host}").json()["turn"] == 2

    def test_transfer_host(self, client):
        game_id = _create_game(client)
        host = _join(client, game_id)["playerId"]
        guest = _join(client, game_id)["playerId"]
        resp = client.post(
            f"/games/{game_id}/host",
            json={"newHostPlayerId": guest},
            headers={"X-Player-Id": str(host)},
        )
        assert resp.status_code == 200
        resp = client.post(f"/games/{game_id}/start", headers={"X-Player-Id": str(guest)})
        assert resp.status_code == 200


class TestTurns:
    """Tests for order submission and turn results."""

    def test_single_player_game(self, client):
        game_id = _create_game(client)
        joined = _join(client, game_id)
        player_id = joined["playerId"]
        before = {a["id"]: a["pos"] for a in joined["world"]["actors"]}

        resp = client.post(f"/games/{game_id}/turns/1/players/{player_id}", json={"orders": []})
        assert resp.status_code == 200
        status = resp.json()["turnStatus"]
        assert status["complete"] is True
        assert status["turn"] == 2

        resp = client.get(f"/games/{game_id}/turns/1/players/{player_id}")
        body = resp.json()
        assert body["success"] is True
        actors = body["results"]["updatedActors"]
        assert len(actors) == 9
        assert {a["id"]: a["pos"] for a in actors} == before

    def test_two_player_barrier(self, client):
        game_id = _create_game(client)
        p1 = _join(client, game_id)["playerId"]
        p2 = _join(client, game_id)["playerId"]

        first = client.post(f"/games/{game_id}/turns/1/players/{p1}", json={"orders": []}).json()
        assert first["turnStatus"] == {
            "complete": False, "msg": "Not all turn orders have been submitted.",
        }
        assert client.get(f"/games/{game_id}/turns/1/players/{p1}").json() == {
            "success": False, "message": "turn results not available",
        }

        second = client.post(f"/games/{game_id}/turns/1/players/{p2}", json={"orders": []}).json()
        assert second["turnStatus"]["complete"] is True
        assert second["turnStatus"]["turn"] == 2

    def test_duplicate_submission(self, client):
        game_id = _create_game(client)
        p1 = _join(client, game_id)["playerId"]
        _join(client, game_id)
        url = f"/games/{game_id}/turns/1/players/{p1}"
        assert client.post(url, json={"orders": []}).status_code == 200
        resp = client.post(url, json={"orders": []})
        assert resp.status_code == 409

    def test_move_order(self, client):
        game_id = _create_game(client)
        joined = _join(client, game_id)
        player_id = joined["playerId"]
        actor = min(joined["world"]["actors"], key=lambda a: a["id"])
        orders = [{"actorId": actor["id"], "orderType": 0, "ordersList": [3]}]

        resp = client.post(f"/games/{game_id}/turns/1/players/{player_id}", json={"orders": orders})
        assert resp.status_code == 200

        result = client.get(f"/games/{game_id}/turns/1/players/{player_id}").json()["results"]
        moved = next(a for a in result["updatedActors"] if a["id"] == actor["id"])
        assert moved["pos"] == {"x": actor["pos"]["x"] + 1, "y": actor["pos"]["y"]}

    def test_invalid_direction(self, client):
        game_id = _create_game(client)
        joined = _join(client, game_id)
        actor_id = joined["world"]["actors"][0]["id"]
        orders = [{"actorId": actor_id, "orderType": 0, "ordersList": [9]}]
        resp = client.post(f"/games/{game_id}/turns/1/players/{joined['playerId']}", json={"orders": orders})
        assert resp.status_code == 400

    def test_malformed_orders_payload(self, client):
        game_id = _create_game(client)
        joined = _join(client, game_id)
        actor_id = joined["world"]["actors"][0]["id"]
        orders = [{"actorId": actor_id, "orderType": 0, "ordersList": ["north"]}]
        resp = client.post(f"/games/{game_id}/turns/1/players/{joined['playerId']}", json={"orders": orders})
        assert resp.status_code == 400
        assert "ordersList" in resp.json()["detail"]

    def test_missing_actor_id(self, client):
        game_id = _create_game(client)
        player_id = _join(client, game_id)["playerId"]
        resp = client.post(f"/games/{game_id}/turns/1/players/{player_id}", json={"orders": [{"orderType": 0}]})
        assert resp.status_code == 400
        assert "detail" in resp.json()

    def test_wrong_turn(self, client):
        game_id = _create_game(client)
        player_id = _join(client, game_id)["playerId"]
        resp = client.post(f"/games/{game_id}/turns/3/players/{player_id}", json={"orders": []})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "orders turn does not match game turn"

    def test_foreign_actor(self, client):
        game_id = _create_game(client)
        p1 = _join(client, game_id)["playerId"]
        joined = _join(client, game_id)
        enemy = next(a for a in joined["world"]["actors"] if a["owner"] == joined["playerId"])
        orders = [{"actorId": enemy["id"], "orderType": 0, "ordersList": [3]}]
        resp = client.post(f"/games/{game_id}/turns/1/players/{p1}", json={"orders": orders})
        assert resp.status_code == 403


class TestPersistence:
    """Tests for saving state after requests."""

    def test_state_saved(self, tmp_path, monkeypatch):
        path = str(tmp_path / "state.json")
        monkeypatch.setattr("api.games.SAVE_FILE", path)
        client = TestClient(create_app(store=Store(), persist=True))
        game_id = _create_game(client)

        loaded = Store.load(path)
        assert [g.id for g in loaded.read_all(StoreKey.GAMES)] == [game_id]
