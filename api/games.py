"""Game lobby, order submission and turn result endpoints."""

from fastapi import APIRouter, Header, HTTPException, Request

from config import SAVE_FILE
from engine.lifecycle import (
    create_game,
    get_player_game_state,
    join_game,
    kick_player,
    list_games,
    start_game,
    transfer_host,
)
from engine.orders import submit_orders
from engine.store import Store
from engine.turns import turn_results
from models.base import WireModel
from models.orders import PostOrdersBody

router = APIRouter()


class CreateGameRequest(WireModel):
    """Request body for creating a game."""
    max_players: int | None = None


class JoinGameRequest(WireModel):
    """Optional identity of a joining player."""
    username: str | None = None
    session_id: str | None = None


class TransferHostRequest(WireModel):
    new_host_player_id: int


def _get_store(request: Request) -> Store:
    """Get the entity store from app state."""
    return request.app.state.store


def _persist(request: Request) -> None:
    """Snapshot the store to disk when persistence is enabled."""
    if getattr(request.app.state, "persist", False):
        _get_store(request).save(SAVE_FILE)


@router.post("")
def create(body: CreateGameRequest, request: Request) -> dict:
    """Create a new game in the lobby."""
    if body.max_players is None:
        raise HTTPException(status_code=400, detail="Missing required field: maxPlayers")
    game_id = create_game(_get_store(request), body.max_players)
    _persist(request)
    return {"id": game_id}


@router.get("")
def list_all(request: Request) -> dict:
    """List every game with its player count."""
    return list_games(_get_store(request)).to_wire()


@router.api_route("/{game_id}/join", methods=["PUT", "POST"])
def join(game_id: int, request: Request, body: JoinGameRequest | None = None) -> dict:
    """Join a game and receive the new player's view of it."""
    body = body or JoinGameRequest()
    response = join_game(
        _get_store(request), game_id,
        username=body.username, session_id=body.session_id,
    )
    _persist(request)
    return response.to_wire()


@router.get("/{game_id}/players/{player_id}")
def player_state(game_id: int, player_id: int, request: Request) -> dict:
    """Current fog-of-war view of a game for one of its players."""
    return get_player_game_state(_get_store(request), game_id, player_id).to_wire()


@router.post("/{game_id}/turns/{turn}/players/{player_id}")
def post_orders(
    game_id: int,
    turn: int,
    player_id: int,
    body: PostOrdersBody,
    request: Request,
) -> dict:
    """Submit a player's orders for a turn.

    The turn resolves as soon as the last player in the game submits.
    """
    response = submit_orders(_get_store(request), body, game_id, turn, player_id)
    _persist(request)
    return response.to_wire(exclude_none=True)


@router.get("/{game_id}/turns/{turn}/players/{player_id}")
def get_turn_results(game_id: int, turn: int, player_id: int, request: Request) -> dict:
    """A player's result for a resolved turn."""
    return turn_results(_get_store(request), game_id, turn, player_id).to_wire(exclude_none=True)


@router.post("/{game_id}/start")
def start(
    game_id: int,
    request: Request,
    x_player_id: int | None = Header(default=None, alias="X-Player-Id"),
) -> dict:
    """Start a lobby game. Host only."""
    game = start_game(_get_store(request), game_id, x_player_id)
    _persist(request)
    return {"message": "Game started", "status": game.status.value}


@router.delete("/{game_id}/players/{player_id}")
def kick(
    game_id: int,
    player_id: int,
    request: Request,
    x_player_id: int | None = Header(default=None, alias="X-Player-Id"),
) -> dict:
    """Remove a player from a lobby game. Host only."""
    kick_player(_get_store(request), game_id, player_id, x_player_id)
    _persist(request)
    return {"message": f"Player {player_id} removed"}


@router.post("/{game_id}/host")
def host(
    game_id: int,
    body: TransferHostRequest,
    request: Request,
    x_player_id: int | None = Header(default=None, alias="X-Player-Id"),
) -> dict:
    """Hand the host role to another player. Host only."""
    transfer_host(_get_store(request), game_id, body.new_host_player_id, x_player_id)
    _persist(request)
    return {"message": "Host transferred", "hostPlayerId": body.new_host_player_id}
