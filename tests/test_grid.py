"""Tests for terrain generation, bounds checks and single-step movement."""

import pytest

from config import WORLD_HEIGHT, WORLD_WIDTH
from engine.grid import (
    BLOCKED_CELLS,
    apply_direction,
    create_terrain,
    generate_terrain,
    move_actor,
    within,
)
from models.orders import Direction
from models.world import Actor, GridPosition, Terrain


def _make_actor(x: int = 1, y: int = 1, actor_id: int = 1) -> Actor:
    """Helper to create a test actor."""
    return Actor(id=actor_id, pos=GridPosition(x=x, y=y), owner=1)


class TestCreateTerrain:
    """Tests for create_terrain() and generate_terrain()."""

    def test_dimensions(self):
        terrain = create_terrain(3, 5)
        assert len(terrain) == 3      # rows
        assert len(terrain[0]) == 5   # cols

    def test_cells_are_empty(self):
        assert all(t == Terrain.EMPTY for row in create_terrain(4, 4) for t in row)

    def test_generated_obstacles(self):
        terrain = generate_terrain()
        assert len(terrain) == WORLD_HEIGHT
        assert len(terrain[0]) == WORLD_WIDTH
        for row, col in BLOCKED_CELLS:
            assert terrain[row][col] == Terrain.BLOCKED
        blocked = sum(t == Terrain.BLOCKED for row in terrain for t in row)
        assert blocked == len(BLOCKED_CELLS)

    def test_obstacles_clipped_to_small_grid(self):
        terrain = generate_terrain(3, 3)
        assert all(t == Terrain.EMPTY for row in terrain for t in row)


class TestWithin:
    """Tests for within()."""

    def test_inside(self):
        grid = create_terrain(3, 4)
        assert within(0, 0, grid)
        assert within(2, 3, grid)

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (3, 0), (0, 4)])
    def test_outside(self, x, y):
        assert not within(x, y, create_terrain(3, 4))

    def test_empty_grid(self):
        assert not within(0, 0, [])
        assert not within(0, 0, [[]])


class TestApplyDirection:
    """Tests for apply_direction()."""

    @pytest.mark.parametrize("direction,expected", [
        (Direction.LEFT, (0, 1)),
        (Direction.RIGHT, (2, 1)),
        (Direction.UP_LEFT, (0, 2)),
        (Direction.UP_RIGHT, (1, 2)),
        (Direction.DOWN_LEFT, (1, 0)),
        (Direction.DOWN_RIGHT, (2, 0)),
        (Direction.NONE, (1, 1)),
    ])
    def test_offsets_from_1_1(self, direction, expected):
        pos = apply_direction(GridPosition(x=1, y=1), direction)
        assert (pos.x, pos.y) == expected

    @pytest.mark.parametrize("forward,back", [
        (Direction.LEFT, Direction.RIGHT),
        (Direction.UP_LEFT, Direction.DOWN_RIGHT),
        (Direction.UP_RIGHT, Direction.DOWN_LEFT),
    ])
    def test_opposites_cancel(self, forward, back):
        start = GridPosition(x=4, y=5)
        assert apply_direction(apply_direction(start, forward), back) == start
        assert apply_direction(apply_direction(start, back), forward) == start

    def test_does_not_modify_input(self):
        pos = GridPosition(x=1, y=1)
        apply_direction(pos, Direction.RIGHT)
        assert (pos.x, pos.y) == (1, 1)


class TestMoveActor:
    """Tests for move_actor()."""

    def test_valid_move(self):
        actor = _make_actor(1, 1)
        assert move_actor(actor, Direction.RIGHT, create_terrain(5, 5)) is True
        assert (actor.pos.x, actor.pos.y) == (2, 1)

    def test_none_does_nothing(self):
        actor = _make_actor(1, 1)
        assert move_actor(actor, Direction.NONE, create_terrain(5, 5)) is False
        assert (actor.pos.x, actor.pos.y) == (1, 1)

    def test_blocked_destination(self):
        terrain = create_terrain(5, 5)
        terrain[2][1] = Terrain.BLOCKED
        actor = _make_actor(1, 1)
        assert move_actor(actor, Direction.RIGHT, terrain) is False
        assert (actor.pos.x, actor.pos.y) == (1, 1)

    def test_out_of_bounds(self):
        actor = _make_actor(0, 0)
        assert move_actor(actor, Direction.LEFT, create_terrain(5, 5)) is False
        assert move_actor(actor, Direction.DOWN_LEFT, create_terrain(5, 5)) is False
        assert (actor.pos.x, actor.pos.y) == (0, 0)
