"""Terrain, actor, weapon and world models for Hexline Server."""

from enum import Enum, IntEnum

from pydantic import model_validator

from models.base import WireModel


class Terrain(IntEnum):
    """Terrain type of a single grid cell."""
    EMPTY = 0
    BLOCKED = 1
    UNEXPLORED = 2              # Only in a player-filtered view


class ActorState(str, Enum):
    """Whether an actor can still act."""
    ALIVE = "ALIVE"
    DEAD = "DEAD"


class GridPosition(WireModel):
    """Offset ("odd-q") grid coordinate: x is the row, y is the column."""
    x: int
    y: int


class Weapon(WireModel):
    """A weapon carried by an actor. Ranges are in hexes."""
    name: str
    min_range: int = 0          # 0 for melee weapons
    max_range: int
    damage: int
    ammo: int | None = None

    @model_validator(mode="after")
    def _check_ranges(self) -> "Weapon":
        if self.min_range < 0:
            raise ValueError(f"minRange must be >= 0, got {self.min_range}")
        if self.max_range < self.min_range:
            raise ValueError(
                f"maxRange ({self.max_range}) < minRange ({self.min_range})"
            )
        return self

    @property
    def range(self) -> int:
        """Effective reach of the weapon."""
        return self.max_range


class Actor(WireModel):
    """A unit on the battlefield owned by a player."""
    id: int
    pos: GridPosition
    owner: int                  # Player id
    state: ActorState = ActorState.ALIVE
    health: int = 100
    weapon: Weapon | None = None

    @property
    def is_alive(self) -> bool:
        return self.state == ActorState.ALIVE


class World(WireModel):
    """Stored form of a world: terrain[row][col] plus the ids of its actors."""
    id: int | None = None
    terrain: list[list[Terrain]]
    actor_ids: list[int] = []


class WorldView(WireModel):
    """Materialized world: terrain plus actor objects.

    Used as the mutable snapshot during turn resolution and as the
    fog-of-war filtered world returned to a player.
    """
    terrain: list[list[Terrain]]
    actors: list[Actor] = []
