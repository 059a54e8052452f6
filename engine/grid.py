"""Terrain grid, bounds checks and single-step movement for Hexline Server."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config import WORLD_HEIGHT, WORLD_WIDTH
from models.orders import Direction
from models.world import GridPosition, Terrain

if TYPE_CHECKING:
    from models.world import Actor

logger = logging.getLogger(__name__)

# Fixed obstacle layout as (row, col), clipped to the grid at generation time.
BLOCKED_CELLS: tuple[tuple[int, int], ...] = (
    (1, 3), (2, 3), (3, 0), (3, 1), (3, 4), (4, 6), (4, 7),
    (5, 2), (5, 3), (5, 7), (5, 8), (6, 5), (7, 4), (8, 4),
)

# (row offset, column offset) applied by each direction.
DIRECTION_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.UP_LEFT: (-1, 1),
    Direction.UP_RIGHT: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.DOWN_LEFT: (0, -1),
    Direction.DOWN_RIGHT: (1, -1),
    Direction.NONE: (0, 0),
}


def create_terrain(rows: int, cols: int) -> list[list[Terrain]]:
    """Initialize an all-EMPTY terrain grid.

    Args:
        rows: Number of rows.
        cols: Number of columns.

    Returns:
        A 2D list indexed as terrain[row][col].
    """
    return [[Terrain.EMPTY for _ in range(cols)] for _ in range(rows)]


def generate_terrain(rows: int = WORLD_HEIGHT, cols: int = WORLD_WIDTH) -> list[list[Terrain]]:
    """Build the terrain for a new world: empty ground plus the fixed obstacles."""
    terrain = create_terrain(rows, cols)
    for row, col in BLOCKED_CELLS:
        if within(row, col, terrain):
            terrain[row][col] = Terrain.BLOCKED
    return terrain


def within(x: int, y: int, grid: list[list]) -> bool:
    """Check if (row x, column y) is inside a rectangular grid.

    An empty grid contains nothing.
    """
    if not grid or not grid[0]:
        return False
    return 0 <= x < len(grid) and 0 <= y < len(grid[0])


def apply_direction(pos: GridPosition, direction: Direction) -> GridPosition:
    """Return the position one step from pos in the given direction.

    Args:
        pos: Starting position.
        direction: Step to take. NONE returns an equal position.

    Returns:
        A new GridPosition; pos is not modified. No bounds checking.
    """
    dx, dy = DIRECTION_OFFSETS[direction]
    return GridPosition(x=pos.x + dx, y=pos.y + dy)


def move_actor(actor: Actor, direction: Direction, terrain: list[list[Terrain]]) -> bool:
    """Step an actor in place if the destination is in bounds and EMPTY.

    Invalid steps are dropped silently (logged at debug level).

    Args:
        actor: The actor to move (mutated in place).
        direction: Step to take.
        terrain: The world terrain.

    Returns:
        True if the actor's position changed.
    """
    if direction == Direction.NONE:
        return False

    new_pos = apply_direction(actor.pos, direction)
    if not within(new_pos.x, new_pos.y, terrain):
        logger.debug(
            "Actor %s attempted to move outside the terrain to (%s,%s); remained at (%s,%s)",
            actor.id, new_pos.x, new_pos.y, actor.pos.x, actor.pos.y,
        )
        return False

    if terrain[new_pos.x][new_pos.y] != Terrain.EMPTY:
        logger.debug(
            "Actor %s attempted to move to blocked position (%s,%s); remained at (%s,%s)",
            actor.id, new_pos.x, new_pos.y, actor.pos.x, actor.pos.y,
        )
        return False

    actor.pos = new_pos
    return True
