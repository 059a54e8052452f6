"""Game, player and lobby response models for Hexline Server."""

from datetime import datetime
from enum import Enum

from models.base import WireModel
from models.world import WorldView


class GameStatus(str, Enum):
    """Possible states for a game."""
    LOBBY = "LOBBY"                 # Waiting for players
    IN_PROGRESS = "IN_PROGRESS"     # Started by the host
    COMPLETED = "COMPLETED"


class Game(WireModel):
    """A game and its turn counter."""
    id: int | None = None
    players: list[int] = []         # Player ids in join order
    host_player_id: int | None = None
    max_players: int
    status: GameStatus = GameStatus.LOBBY
    turn: int = 1
    world_id: int
    created_at: datetime | None = None
    started_at: datetime | None = None


class Player(WireModel):
    """A participant in one game."""
    id: int | None = None
    game_id: int
    username: str | None = None
    session_id: str | None = None
    is_host: bool = False
    joined_at: datetime | None = None


class JoinGameResponse(WireModel):
    """A player's fog-of-war view of a game."""
    game_id: int
    player_id: int
    turn: int
    world: WorldView
    player_count: int
    max_players: int


class GameSummary(WireModel):
    """One entry of the game listing."""
    id: int
    player_count: int
    max_players: int
    is_full: bool


class ListGamesResponse(WireModel):
    game_ids: list[int]
    games: list[GameSummary]
