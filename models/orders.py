"""Order submission, turn status and turn result models for Hexline Server."""

from enum import IntEnum

from models.base import WireModel
from models.world import Actor, WorldView


class Direction(IntEnum):
    """One movement step on the grid. Wire value is the integer."""
    UP_LEFT = 0
    UP_RIGHT = 1
    LEFT = 2
    RIGHT = 3
    DOWN_LEFT = 4
    DOWN_RIGHT = 5
    NONE = 6


class OrderType(IntEnum):
    """What an actor does during the turn. Wire value is the integer."""
    MOVE = 0
    ATTACK = 1


class RequestActorOrders(WireModel):
    """Raw per-actor orders as posted by a client, before validation."""
    actor_id: int
    order_type: int
    orders_list: list[int] | None = None   # For MOVE orders
    target_id: int | None = None           # For ATTACK orders


class PostOrdersBody(WireModel):
    orders: list[RequestActorOrders] = []


class ActorOrders(WireModel):
    """Validated orders for one actor."""
    actor_id: int
    order_type: OrderType
    orders_list: list[Direction] | None = None  # Always TIMESTEP_MAX long
    target_id: int | None = None


class TurnOrders(WireModel):
    """Everything one player ordered for one turn."""
    id: int | None = None
    game_id: int
    turn: int
    player_id: int
    orders: list[ActorOrders] = []


class TurnStatus(WireModel):
    complete: bool
    msg: str | None = None
    turn: int | None = None


class PostOrdersResponse(WireModel):
    turn_status: TurnStatus


class TurnResult(WireModel):
    """One player's outcome of a resolved turn."""
    id: int | None = None
    game_id: int
    turn: int
    player_id: int
    updated_actors: list[Actor] = []   # The player's own actors after the turn
    world: WorldView                    # The player's view after the turn


class TurnResultsResponse(WireModel):
    success: bool
    results: TurnResult | None = None
    message: str | None = None
