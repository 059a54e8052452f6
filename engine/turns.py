"""Turn resolution: the all-players-submitted barrier and the timestep loop.

A turn resolves once every player in the game has submitted orders. The
orders of all players are flattened into one list and simulated for
TIMESTEP_MAX timesteps; within a timestep each actor order applies its
movement and then its attack before the next order is looked at.
"""

from __future__ import annotations

import logging

from config import TIMESTEP_MAX
from engine.errors import GameError, NotFoundError
from engine.grid import move_actor
from engine.rules import resolve_attack
from engine.store import Store, StoreKey
from engine.visibility import visible_world_for_player
from models.game import Game
from models.orders import (
    ActorOrders,
    Direction,
    OrderType,
    TurnOrders,
    TurnResult,
    TurnResultsResponse,
    TurnStatus,
)
from models.world import Actor, World, WorldView

logger = logging.getLogger(__name__)


def find_orders_for_turn(store: Store, game_id: int, turn: int) -> list[TurnOrders]:
    """All stored TurnOrders for one game turn."""
    return store.read_all(
        StoreKey.TURN_ORDERS,
        lambda o: o.game_id == game_id and o.turn == turn,
    )


def all_turn_orders_received(store: Store, game_id: int, turn: int) -> bool:
    """Check whether every current player has submitted orders for the turn."""
    game: Game = store.read(StoreKey.GAMES, game_id)
    submitted = {o.player_id for o in find_orders_for_turn(store, game_id, turn)}
    received = len(submitted & set(game.players))
    logger.debug(
        "all_turn_orders_received: %s of %s players submitted", received, len(game.players)
    )
    return received == len(game.players)


def _find_actor(actors: list[Actor], actor_id: int) -> Actor:
    for actor in actors:
        if actor.id == actor_id:
            return actor
    raise NotFoundError("Actor", actor_id)


def apply_movement_orders(actor_orders: ActorOrders, world: WorldView, timestep: int) -> Actor:
    """Move one actor for one timestep according to its orders.

    Args:
        actor_orders: The actor's orders for the turn.
        world: World snapshot (actor mutated in place).
        timestep: Current timestep, 0-based.

    Returns:
        The (possibly moved) actor.

    Raises:
        NotFoundError: If the ordered actor is not in the world.
    """
    actor = _find_actor(world.actors, actor_orders.actor_id)
    if actor_orders.order_type != OrderType.MOVE or not actor_orders.orders_list:
        return actor

    directions = actor_orders.orders_list
    direction = directions[timestep] if timestep < len(directions) else Direction.NONE
    move_actor(actor, direction, world.terrain)
    return actor


def apply_firing_rules(actor_orders: ActorOrders, world: WorldView) -> Actor:
    """Resolve one actor's ATTACK order against the current world snapshot.

    Returns:
        The attacking actor.

    Raises:
        NotFoundError: If the ordered actor is not in the world.
    """
    attacker = _find_actor(world.actors, actor_orders.actor_id)
    if actor_orders.order_type != OrderType.ATTACK:
        return attacker

    if actor_orders.target_id is None:
        logger.debug("Actor %s has ATTACK order but no targetId", attacker.id)
        return attacker

    target = next((a for a in world.actors if a.id == actor_orders.target_id), None)
    if target is None:
        logger.warning(
            "ATTACK order: target %s not found for attacker %s",
            actor_orders.target_id, attacker.id,
        )
        return attacker

    resolve_attack(attacker, target, world.terrain, world.actors)
    return attacker


def apply_rules_to_actor_orders(world: WorldView, actor_orders: list[ActorOrders]) -> list[Actor]:
    """Run the full timestep simulation for one turn.

    Args:
        world: World snapshot, mutated in place.
        actor_orders: Flattened orders of every player, in resolution order.

    Returns:
        Every actor in the world after the turn.
    """
    if not actor_orders:
        logger.warning("apply_rules_to_actor_orders: did not receive any orders")
        return world.actors

    for timestep in range(TIMESTEP_MAX):
        for orders in actor_orders:
            apply_movement_orders(orders, world, timestep)
            apply_firing_rules(orders, world)

    return world.actors


def turn_results_per_player(game: Game, world: WorldView) -> list[TurnResult]:
    """Build each player's result: their own actors plus their view of the world."""
    return [
        TurnResult(
            game_id=game.id,
            turn=game.turn,
            player_id=player_id,
            updated_actors=[a.model_copy(deep=True) for a in world.actors if a.owner == player_id],
            world=visible_world_for_player(world, player_id),
        )
        for player_id in game.players
    ]


def process_game_turn(store: Store, game_id: int) -> TurnStatus:
    """Resolve the current turn of a game and advance its turn counter.

    Nothing is written unless the whole resolution succeeds.

    Raises:
        GameError: If the game, its world, actors or orders cannot be loaded.
    """
    try:
        game: Game = store.read(StoreKey.GAMES, game_id)
        world: World = store.read(StoreKey.WORLDS, game.world_id)
        actors: list[Actor] = [store.read(StoreKey.ACTORS, i) for i in world.actor_ids]
        turn_orders = find_orders_for_turn(store, game_id, game.turn)
    except GameError:
        logger.error("process_game_turn: failed to load stored objects for game %s", game_id)
        raise

    # Orders left behind by players no longer in the game are skipped.
    turn_orders = [o for o in turn_orders if o.player_id in game.players]
    # Sorted by player so resolution does not depend on submission order.
    turn_orders.sort(key=lambda o: o.player_id)
    flattened = [ao for to in turn_orders for ao in to.orders]

    snapshot = WorldView(terrain=world.terrain, actors=actors)
    logger.debug("process_game_turn: applying %s actor orders", len(flattened))
    updated_actors = apply_rules_to_actor_orders(snapshot, flattened)
    results = turn_results_per_player(game, snapshot)

    with store.transaction():
        for result in results:
            store.create(StoreKey.TURN_RESULTS, result)
        for actor in updated_actors:
            store.replace(StoreKey.ACTORS, actor.id, actor)
        store.update(StoreKey.GAMES, game.id, turn=game.turn + 1)

    logger.info("Game %s: turn %s complete", game_id, game.turn)
    return TurnStatus(complete=True, msg="Turn complete", turn=game.turn + 1)


def process(store: Store, orders_id: int) -> TurnStatus:
    """Resolve the turn of freshly stored orders if they completed the barrier."""
    orders: TurnOrders = store.read(StoreKey.TURN_ORDERS, orders_id)
    if all_turn_orders_received(store, orders.game_id, orders.turn):
        logger.debug("Turn %s of game %s is complete; processing orders", orders.turn, orders.game_id)
        return process_game_turn(store, orders.game_id)

    logger.debug("Turn %s of game %s is not yet complete", orders.turn, orders.game_id)
    return TurnStatus(complete=False, msg="Not all turn orders have been submitted.")


def turn_results(store: Store, game_id: int, turn: int, player_id: int) -> TurnResultsResponse:
    """Look up one player's result for a resolved turn.

    Raises:
        GameError: If more than one result exists for the same slot.
    """
    results: list[TurnResult] = store.read_all(
        StoreKey.TURN_RESULTS,
        lambda r: r.game_id == game_id and r.turn == turn and r.player_id == player_id,
    )
    logger.debug("turn_results: found %s results", len(results))

    if not results:
        return TurnResultsResponse(success=False, message="turn results not available")
    if len(results) > 1:
        logger.error(
            "Found %s turn results for game %s, turn %s, player %s; expected 1",
            len(results), game_id, turn, player_id,
        )
        raise GameError("Duplicate turn results found")
    return TurnResultsResponse(success=True, results=results[0])
