"""Reference bot that plays Hexline Server via the REST API.

Creates a two-player game, joins it twice, and plays a few turns for both
players. Each turn every live actor:
  - attacks the first visible enemy, if there is one;
  - otherwise moves along a random list of directions.

Usage:
    1. Start the server:  uvicorn main:app --reload
    2. Run this bot:      python bots/example_bot.py

Environment variables:
    HEXLINE_URL    server base URL (default: "http://127.0.0.1:8000")
    HEXLINE_TURNS  number of turns to play (default: 5)
"""

import os
import random

import httpx

BASE_URL = os.environ.get("HEXLINE_URL", "http://127.0.0.1:8000")
TURNS = int(os.environ.get("HEXLINE_TURNS", "5"))
TIMESTEP_MAX = 10
MOVE, ATTACK = 0, 1
DIRECTIONS = range(7)   # UP_LEFT..NONE


def _join(client: httpx.Client, game_id: int, username: str) -> dict:
    """Join the game and return the player's initial view."""
    resp = client.put(f"/games/{game_id}/join", json={"username": username})
    resp.raise_for_status()
    view = resp.json()
    print(f"  {username}: player {view['playerId']} with {len(view['world']['actors'])} visible actors")
    return view


def _plan_orders(player_id: int, world: dict, rng: random.Random) -> list[dict]:
    """Pick orders for every live actor the player owns."""
    actors = world["actors"]
    enemies = [a for a in actors if a["owner"] != player_id and a["state"] == "ALIVE"]
    orders = []
    for actor in actors:
        if actor["owner"] != player_id or actor["state"] != "ALIVE":
            continue
        if enemies:
            orders.append({
                "actorId": actor["id"],
                "orderType": ATTACK,
                "targetId": rng.choice(enemies)["id"],
            })
        else:
            orders.append({
                "actorId": actor["id"],
                "orderType": MOVE,
                "ordersList": [rng.choice(DIRECTIONS) for _ in range(TIMESTEP_MAX)],
            })
    return orders


def _submit(client: httpx.Client, game_id: int, turn: int, player_id: int, orders: list[dict]) -> dict:
    """Submit orders and print the turn status. Returns the status."""
    resp = client.post(
        f"/games/{game_id}/turns/{turn}/players/{player_id}",
        json={"orders": orders},
    )
    if resp.status_code != 200:
        detail = resp.json().get("detail", resp.text)
        print(f"  player {player_id} -> FAILED: {detail}")
        resp.raise_for_status()
    status = resp.json()["turnStatus"]
    print(f"  player {player_id} -> {status.get('msg')}")
    return status


def main() -> None:
    """Play a short game between two bots."""
    rng = random.Random()
    client = httpx.Client(base_url=BASE_URL, timeout=10.0)

    print("Creating game...")
    resp = client.post("/games", json={"maxPlayers": 2})
    resp.raise_for_status()
    game_id = resp.json()["id"]
    print(f"  Game ID: {game_id}")

    print("Joining players...")
    views = [_join(client, game_id, "bot_a"), _join(client, game_id, "bot_b")]
    worlds = {v["playerId"]: v["world"] for v in views}

    host_id = views[0]["playerId"]
    resp = client.post(f"/games/{game_id}/start", headers={"X-Player-Id": str(host_id)})
    resp.raise_for_status()
    print(f"  {resp.json()['message']}")

    turn = views[0]["turn"]
    for _ in range(TURNS):
        print(f"\n--- TURN {turn} ---")
        for player_id, world in worlds.items():
            _submit(client, game_id, turn, player_id, _plan_orders(player_id, world, rng))

        for player_id in worlds:
            resp = client.get(f"/games/{game_id}/turns/{turn}/players/{player_id}")
            resp.raise_for_status()
            result = resp.json()
            if not result["success"]:
                print(f"  player {player_id}: {result['message']}")
                continue
            worlds[player_id] = result["results"]["world"]
            alive = [a for a in result["results"]["updatedActors"] if a["state"] == "ALIVE"]
            health = sum(a["health"] for a in alive)
            print(f"  player {player_id}: {len(alive)} actors alive, {health} total health")
        turn += 1

    client.close()


if __name__ == "__main__":
    main()
