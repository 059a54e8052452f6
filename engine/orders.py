"""Order validation and submission.

Orders arrive as raw integers from the wire. They are checked against the
game (participant, current turn) and the world (actor exists, actor belongs
to the submitting player, attack target exists), then normalized so every
MOVE order carries exactly TIMESTEP_MAX directions.
"""

from __future__ import annotations

import logging

from config import TIMESTEP_MAX
from engine.errors import NotFoundError, UnauthorizedError, ValidationError
from engine.rules import in_weapon_range
from engine.store import Store, StoreKey
from engine.turns import process
from models.game import Game
from models.orders import (
    ActorOrders,
    Direction,
    OrderType,
    PostOrdersBody,
    PostOrdersResponse,
    RequestActorOrders,
    TurnOrders,
)
from models.world import Actor, World

logger = logging.getLogger(__name__)


def parse_direction(value: int) -> Direction:
    """Convert a wire integer to a Direction.

    Raises:
        ValidationError: If value is not a known direction.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Direction must be an integer, got {value!r}")
    try:
        return Direction(value)
    except ValueError:
        raise ValidationError(
            f"Invalid direction {value}: expected {Direction.UP_LEFT.value}..{Direction.NONE.value}"
        ) from None


def parse_order_type(value: int, actor_id: int) -> OrderType:
    """Convert a wire integer to an OrderType.

    Raises:
        ValidationError: If value is not a known order type.
    """
    try:
        return OrderType(value)
    except ValueError:
        raise ValidationError(f"Unknown order type: {value} for actor {actor_id}") from None


def normalize_orders_list(directions: list[Direction]) -> list[Direction]:
    """Pad with NONE or truncate so the list is exactly TIMESTEP_MAX long."""
    return [
        directions[i] if i < len(directions) else Direction.NONE
        for i in range(TIMESTEP_MAX)
    ]


def validate_request_order(request: RequestActorOrders) -> ActorOrders:
    """Turn one raw request order into validated ActorOrders.

    Raises:
        ValidationError: On an unknown order type, a MOVE without a
            direction list, a bad direction, or an ATTACK without a target.
    """
    order_type = parse_order_type(request.order_type, request.actor_id)

    if order_type == OrderType.MOVE:
        if request.orders_list is None:
            raise ValidationError(f"Move order for actor {request.actor_id} must have ordersList")
        directions = [parse_direction(n) for n in request.orders_list]
        orders = ActorOrders(
            actor_id=request.actor_id,
            order_type=order_type,
            orders_list=normalize_orders_list(directions),
        )
    else:
        if request.target_id is None:
            raise ValidationError(f"Attack order for actor {request.actor_id} must have targetId")
        orders = ActorOrders(
            actor_id=request.actor_id,
            order_type=order_type,
            target_id=request.target_id,
        )

    logger.debug("ActorOrders: %s", orders.to_wire())
    return orders


def _check_attack(orders: ActorOrders, actor: Actor, actors: dict[int, Actor]) -> None:
    target = actors.get(orders.target_id)
    if target is None:
        raise NotFoundError("Target actor", orders.target_id)
    if actor.weapon is None:
        raise ValidationError(f"Actor {actor.id} has no weapon and cannot perform attack")

    # Positions can still change before the attack is resolved.
    if not in_weapon_range(actor, target):
        logger.info(
            "Preliminary range check: target %s is out of range for actor %s",
            target.id, actor.id,
        )


def validate_orders(
    store: Store,
    request_orders: list[RequestActorOrders],
    game_id: int,
    turn: int,
    player_id: int,
) -> TurnOrders:
    """Check a player's order batch against the current game and world.

    Args:
        store: Entity store.
        request_orders: Raw orders from the request body.
        game_id: Game the orders are for.
        turn: Turn the orders are for.
        player_id: Submitting player.

    Returns:
        The validated TurnOrders (not yet stored).

    Raises:
        NotFoundError: If the game, an actor or an attack target does not exist.
        ValidationError: If the player is not in the game, the turn is not
            the current one, or an order is malformed.
        UnauthorizedError: If an order is for someone else's actor.
    """
    logger.debug("validate_orders(game=%s, turn=%s, player=%s)", game_id, turn, player_id)
    game: Game = store.read(StoreKey.GAMES, game_id)

    if player_id not in game.players:
        logger.debug("reject: playerId is not in game.players array")
        raise ValidationError("playerId is not in game.players array")

    if game.turn != turn:
        logger.debug("reject: orders turn (%s) does not match game turn (%s)", turn, game.turn)
        raise ValidationError("orders turn does not match game turn")

    world: World = store.read(StoreKey.WORLDS, game.world_id)
    actors = {a.id: a for a in (store.read(StoreKey.ACTORS, i) for i in world.actor_ids)}

    validated = []
    for request in request_orders:
        actor = actors.get(request.actor_id)
        if actor is None:
            raise NotFoundError("Actor", request.actor_id)
        if actor.owner != player_id:
            raise UnauthorizedError(f"Player {player_id} does not own actor {request.actor_id}")
        orders = validate_request_order(request)
        if orders.order_type == OrderType.ATTACK:
            _check_attack(orders, actor, actors)
        validated.append(orders)

    return TurnOrders(game_id=game_id, turn=turn, player_id=player_id, orders=validated)


def submit_orders(
    store: Store,
    body: PostOrdersBody,
    game_id: int,
    turn: int,
    player_id: int,
) -> PostOrdersResponse:
    """Validate and store a player's orders, resolving the turn if they were the last.

    Holding the game lock makes the duplicate check, the insert and the
    resolution one atomic step. If resolution fails, the orders are rolled
    back along with everything else so the player can resubmit.

    Raises:
        ConflictError: If this player already submitted orders for the turn.
        GameError: Anything raised by validation or resolution.
    """
    with store.game_lock(game_id):
        turn_orders = validate_orders(store, body.orders, game_id, turn, player_id)

        def _same_slot(o: TurnOrders) -> bool:
            return o.game_id == game_id and o.turn == turn and o.player_id == player_id

        with store.transaction():
            orders_id = store.create_if_absent(
                StoreKey.TURN_ORDERS,
                turn_orders,
                _same_slot,
                "turnOrders already exists for this game-turn-player",
            )
            status = process(store, orders_id)

    return PostOrdersResponse(turn_status=status)
