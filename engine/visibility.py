"""Line of sight and fog of war.

A hex is visible from an observer when the straight hex line between them
stays on the map and every hex strictly between them is free of BLOCKED
terrain and actors. The destination itself never hides itself: a wall or a
unit can be seen, just not seen past.
"""

from __future__ import annotations

import logging

from config import DEFAULT_SIGHT_RANGE
from engine.grid import within
from engine.hexes import Hex, grid_to_hex, hex_linedraw, hex_spiral, hex_to_grid
from models.world import Actor, GridPosition, Terrain, WorldView

logger = logging.getLogger(__name__)


def has_line_of_sight(
    start: Hex,
    end: Hex,
    terrain: list[list[Terrain]],
    actors: list[Actor],
) -> bool:
    """Check whether start can see end.

    Args:
        start: Observer's hex (never checked for obstruction).
        end: Target hex.
        terrain: World terrain, terrain[row][col].
        actors: Every actor in the world; any of them standing strictly
            between start and end blocks the line.

    Returns:
        True if the line is unobstructed.
    """
    line = hex_linedraw(start, end)
    last = len(line) - 1
    occupied = {(a.pos.x, a.pos.y) for a in actors}

    for i, h in enumerate(line):
        if i == 0:
            continue
        pos = hex_to_grid(h)
        if not within(pos.x, pos.y, terrain):
            return False  # Line leaves the map
        if i == last:
            break
        if terrain[pos.x][pos.y] == Terrain.BLOCKED:
            return False
        if (pos.x, pos.y) in occupied:
            return False

    return True


def sight_range(actor: Actor) -> int:
    """How far an actor can see, in hexes."""
    if actor.weapon is not None:
        return actor.weapon.range
    return DEFAULT_SIGHT_RANGE


def visible_from(
    origin: GridPosition,
    terrain: list[list[Terrain]],
    actors: list[Actor],
    max_range: int,
) -> list[list[bool]]:
    """Compute which cells can be seen from a single position.

    Args:
        origin: Observer's grid position.
        terrain: World terrain.
        actors: Every actor in the world (occluders).
        max_range: Sight range in hexes.

    Returns:
        A boolean grid the same shape as terrain.

    Raises:
        ValueError: If origin is not inside the terrain grid.
    """
    if not within(origin.x, origin.y, terrain):
        raise ValueError(
            f"Starting point ({origin.x},{origin.y}) is not within the terrain grid"
        )
    if terrain[origin.x][origin.y] == Terrain.BLOCKED:
        logger.warning("Checking visibility from blocked terrain (%s,%s)", origin.x, origin.y)

    visible = [[False] * len(row) for row in terrain]
    origin_hex = grid_to_hex(origin)
    for h in hex_spiral(origin_hex, max_range):
        pos = hex_to_grid(h)
        if not within(pos.x, pos.y, terrain):
            continue
        if has_line_of_sight(origin_hex, h, terrain, actors):
            visible[pos.x][pos.y] = True
    return visible


def visible_world_for(world: WorldView, observers: list[Actor]) -> WorldView:
    """Filter a world down to what a set of observers can see.

    Visibility is the union over all observers. Terrain outside it becomes
    UNEXPLORED. Actors owned by the observers' players are always kept;
    other actors are kept only if they stand on a visible cell.

    Args:
        world: Canonical world state (not modified).
        observers: The live actors doing the looking.

    Returns:
        A new WorldView sharing no objects with world.
    """
    if not observers:
        return WorldView(
            terrain=[[Terrain.UNEXPLORED for _ in row] for row in world.terrain],
            actors=[],
        )

    seen = [[False] * len(row) for row in world.terrain]
    for observer in observers:
        mask = visible_from(observer.pos, world.terrain, world.actors, sight_range(observer))
        for r, row in enumerate(mask):
            for c, cell in enumerate(row):
                if cell:
                    seen[r][c] = True

    terrain = [
        [tile if seen[r][c] else Terrain.UNEXPLORED for c, tile in enumerate(row)]
        for r, row in enumerate(world.terrain)
    ]

    owners = {o.owner for o in observers}
    actors = [
        a.model_copy(deep=True)
        for a in world.actors
        if a.owner in owners or (within(a.pos.x, a.pos.y, seen) and seen[a.pos.x][a.pos.y])
    ]
    return WorldView(terrain=terrain, actors=actors)


def visible_world_for_player(world: WorldView, player_id: int) -> WorldView:
    """Fog-of-war view of a world for one player, seen through their live actors."""
    observers = [a for a in world.actors if a.owner == player_id and a.is_alive]
    return visible_world_for(world, observers)
