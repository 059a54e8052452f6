"""Game creation, joining, squad placement and host-only lobby actions."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone

from config import (
    ACTOR_STARTING_HEALTH,
    ACTORS_PER_PLAYER,
    DEFAULT_MAX_PLAYERS,
    FORMATION_HEIGHT,
    FORMATION_WIDTH,
    MAX_PLAYERS_LIMIT,
    MIN_PLAYERS_LIMIT,
    PLACEMENT_MAX_ATTEMPTS,
)
from engine.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from engine.grid import generate_terrain, within
from engine.store import Store, StoreKey
from engine.turns import all_turn_orders_received, find_orders_for_turn, process_game_turn
from engine.visibility import visible_world_for_player
from engine.weapons import default_weapon
from models.game import (
    Game,
    GameStatus,
    GameSummary,
    JoinGameResponse,
    ListGamesResponse,
    Player,
)
from models.world import Actor, GridPosition, Terrain, World, WorldView

logger = logging.getLogger(__name__)


def create_world(store: Store) -> int:
    """Create a world with generated terrain and no actors. Returns its id."""
    return store.create(StoreKey.WORLDS, World(terrain=generate_terrain()))


def create_game(store: Store, max_players: int | None = None) -> int:
    """Create a new game in the lobby.

    Args:
        store: Entity store.
        max_players: Requested player limit, clamped to the allowed range.
            Defaults to DEFAULT_MAX_PLAYERS.

    Returns:
        The new game id.
    """
    limit = min(max(max_players or DEFAULT_MAX_PLAYERS, MIN_PLAYERS_LIMIT), MAX_PLAYERS_LIMIT)
    with store.transaction():
        world_id = create_world(store)
        game_id = store.create(StoreKey.GAMES, Game(
            max_players=limit,
            world_id=world_id,
            created_at=datetime.now(timezone.utc),
        ))
    logger.info("Created game %s (world %s, max %s players)", game_id, world_id, limit)
    return game_id


def _formation_cells(origin: GridPosition) -> list[GridPosition]:
    """Cells of a squad box anchored at origin, row-major."""
    return [
        GridPosition(x=origin.x + i // FORMATION_WIDTH, y=origin.y + i % FORMATION_WIDTH)
        for i in range(FORMATION_WIDTH * FORMATION_HEIGHT)
    ]


def _box_is_free(
    origin: GridPosition,
    terrain: list[list[Terrain]],
    occupied: set[tuple[int, int]],
) -> bool:
    for cell in _formation_cells(origin):
        if not within(cell.x, cell.y, terrain):
            return False
        if terrain[cell.x][cell.y] != Terrain.EMPTY or (cell.x, cell.y) in occupied:
            return False
    return True


def find_formation_origin(
    terrain: list[list[Terrain]],
    actors: list[Actor],
    rng: random.Random | None = None,
) -> GridPosition | None:
    """Find the top-left cell of a free squad box.

    Random origins are tried first, up to PLACEMENT_MAX_ATTEMPTS, then every
    origin is scanned in order.

    Args:
        terrain: World terrain.
        actors: Actors already in the world.
        rng: Optional random source (for deterministic testing).

    Returns:
        The origin, or None if no box fits.
    """
    rng = rng or random.Random()
    if not terrain or not terrain[0]:
        return None

    occupied = {(a.pos.x, a.pos.y) for a in actors}
    origins = [
        GridPosition(x=x, y=y)
        for x in range(len(terrain) - FORMATION_HEIGHT + 1)
        for y in range(len(terrain[0]) - FORMATION_WIDTH + 1)
    ]

    candidates = origins[:]
    rng.shuffle(candidates)
    for origin in candidates[:PLACEMENT_MAX_ATTEMPTS]:
        if _box_is_free(origin, terrain, occupied):
            return origin

    for origin in origins:
        if _box_is_free(origin, terrain, occupied):
            logger.debug("Random placement failed; scan found (%s,%s)", origin.x, origin.y)
            return origin
    return None


def setup_actors(
    store: Store,
    world: World,
    player_id: int,
    rng: random.Random | None = None,
) -> list[int]:
    """Create and place a new player's squad.

    Args:
        store: Entity store.
        world: The game's world; the caller stores the new actor ids on it.
        player_id: Owner of the new actors.
        rng: Optional random source.

    Returns:
        Ids of the created actors, empty if there was no room.
    """
    existing = [store.read(StoreKey.ACTORS, i) for i in world.actor_ids]
    origin = find_formation_origin(world.terrain, existing, rng)
    if origin is None:
        logger.error("No room to place a squad for player %s in world %s", player_id, world.id)
        return []

    actor_ids = []
    for pos in _formation_cells(origin)[:ACTORS_PER_PLAYER]:
        actor_ids.append(store.create(StoreKey.ACTORS, Actor(
            id=0,
            pos=pos,
            owner=player_id,
            health=ACTOR_STARTING_HEALTH,
            weapon=default_weapon(),
        )))
    logger.debug("Placed %s actors for player %s at (%s,%s)", len(actor_ids), player_id, origin.x, origin.y)
    return actor_ids


def _check_unique(store: Store, game: Game, username: str | None, session_id: str | None) -> None:
    for existing_id in game.players:
        existing: Player = store.read(StoreKey.PLAYERS, existing_id)
        if username and existing.username == username:
            raise ConflictError("Player already joined this game")
        if session_id and existing.session_id == session_id:
            raise ConflictError("Player with this session has already joined the game")


def join_game(
    store: Store,
    game_id: int,
    username: str | None = None,
    session_id: str | None = None,
    rng: random.Random | None = None,
) -> JoinGameResponse:
    """Add a new player to a lobby game and place their squad.

    The first player to join becomes the host.

    Args:
        store: Entity store.
        game_id: Game to join.
        username: Optional display name, unique within the game.
        session_id: Optional client session, unique within the game.
        rng: Optional random source for squad placement.

    Returns:
        The new player's view of the game.

    Raises:
        NotFoundError: If the game does not exist.
        ConflictError: If the game has started, is full, or the
            username or session already joined.
    """
    with store.game_lock(game_id):
        game: Game = store.read(StoreKey.GAMES, game_id)

        if game.status != GameStatus.LOBBY:
            raise ConflictError("Cannot join game: Game already started")
        if len(game.players) >= game.max_players:
            raise ConflictError("Game is full")
        _check_unique(store, game, username, session_id)

        with store.transaction():
            is_host = not game.players
            player_id = store.create(StoreKey.PLAYERS, Player(
                game_id=game_id,
                username=username,
                session_id=session_id,
                is_host=is_host,
                joined_at=datetime.now(timezone.utc),
            ))

            game.players.append(player_id)
            if is_host:
                game.host_player_id = player_id
            store.replace(StoreKey.GAMES, game_id, game)

            world: World = store.read(StoreKey.WORLDS, game.world_id)
            world.actor_ids.extend(setup_actors(store, world, player_id, rng))
            store.replace(StoreKey.WORLDS, world.id, world)

        logger.info("Player %s joined game %s (%s/%s)", player_id, game_id, len(game.players), game.max_players)
        return filter_game_for_player(store, game_id, player_id)


def filter_game_for_player(store: Store, game_id: int, player_id: int) -> JoinGameResponse:
    """Build a player's fog-of-war view of a game from stored state."""
    game: Game = store.read(StoreKey.GAMES, game_id)
    world: World = store.read(StoreKey.WORLDS, game.world_id)
    actors = [store.read(StoreKey.ACTORS, i) for i in world.actor_ids]
    view = visible_world_for_player(WorldView(terrain=world.terrain, actors=actors), player_id)
    return JoinGameResponse(
        game_id=game.id,
        player_id=player_id,
        turn=game.turn,
        world=view,
        player_count=len(game.players),
        max_players=game.max_players,
    )


def get_player_game_state(store: Store, game_id: int, player_id: int) -> JoinGameResponse:
    """Current view of a game for one of its players.

    Raises:
        NotFoundError: If the game does not exist.
        UnauthorizedError: If the player is not in the game.
    """
    game: Game = store.read(StoreKey.GAMES, game_id)
    if player_id not in game.players:
        raise UnauthorizedError("Player does not belong to this game")
    return filter_game_for_player(store, game_id, player_id)


def list_games(store: Store) -> ListGamesResponse:
    games: list[Game] = store.read_all(StoreKey.GAMES)
    return ListGamesResponse(
        game_ids=[g.id for g in games],
        games=[
            GameSummary(
                id=g.id,
                player_count=len(g.players),
                max_players=g.max_players,
                is_full=len(g.players) >= g.max_players,
            )
            for g in games
        ],
    )


def _require_host(game: Game, requesting_player_id: int | None) -> None:
    if requesting_player_id is None or game.host_player_id != requesting_player_id:
        raise UnauthorizedError("Only the host can perform this action")


def start_game(store: Store, game_id: int, requesting_player_id: int | None) -> Game:
    """Move a lobby game to IN_PROGRESS.

    Raises:
        UnauthorizedError: If the requester is not the host.
        ConflictError: If the game already started or has fewer than two players.
    """
    with store.game_lock(game_id):
        game: Game = store.read(StoreKey.GAMES, game_id)
        _require_host(game, requesting_player_id)

        if game.status != GameStatus.LOBBY:
            raise ConflictError("Game already started")
        if len(game.players) < MIN_PLAYERS_LIMIT:
            raise ConflictError(f"Need at least {MIN_PLAYERS_LIMIT} players to start game")

        store.update(
            StoreKey.GAMES, game_id,
            status=GameStatus.IN_PROGRESS,
            started_at=datetime.now(timezone.utc),
        )
        logger.info("Game %s started with %s players", game_id, len(game.players))
        return store.read(StoreKey.GAMES, game_id)


def kick_player(store: Store, game_id: int, player_id: int, requesting_player_id: int | None) -> None:
    """Remove a player, their actors and their pending orders from a lobby game.

    If everyone left in the game has already submitted orders for the
    current turn, the turn is resolved as part of the kick.

    Raises:
        UnauthorizedError: If the requester is not the host.
        ConflictError: If the game already started or the target is the host.
        NotFoundError: If the player is not in the game.
    """
    with store.game_lock(game_id):
        game: Game = store.read(StoreKey.GAMES, game_id)
        _require_host(game, requesting_player_id)

        if game.status != GameStatus.LOBBY:
            raise ConflictError("Cannot kick players: Game already started")
        if player_id == game.host_player_id:
            raise ConflictError("Cannot kick the host player")
        if player_id not in game.players:
            raise NotFoundError("Player", player_id)

        with store.transaction():
            game.players.remove(player_id)
            store.replace(StoreKey.GAMES, game_id, game)

            world: World = store.read(StoreKey.WORLDS, game.world_id)
            kept = []
            for actor_id in world.actor_ids:
                actor: Actor = store.read(StoreKey.ACTORS, actor_id)
                if actor.owner == player_id:
                    store.remove(StoreKey.ACTORS, actor_id)
                else:
                    kept.append(actor_id)
            world.actor_ids = kept
            store.replace(StoreKey.WORLDS, world.id, world)

            store.remove(StoreKey.PLAYERS, player_id)

            for orders in find_orders_for_turn(store, game_id, game.turn):
                if orders.player_id == player_id:
                    store.remove(StoreKey.TURN_ORDERS, orders.id)

            logger.info("Player %s kicked from game %s", player_id, game_id)
            if all_turn_orders_received(store, game_id, game.turn):
                process_game_turn(store, game_id)


def transfer_host(
    store: Store,
    game_id: int,
    new_host_player_id: int,
    requesting_player_id: int | None,
) -> None:
    """Hand the host role to another player in the game.

    Raises:
        UnauthorizedError: If the requester is not the host.
        ValidationError: If the new host is not in the game.
    """
    with store.game_lock(game_id):
        game: Game = store.read(StoreKey.GAMES, game_id)
        _require_host(game, requesting_player_id)

        if new_host_player_id not in game.players:
            raise ValidationError("New host must be a player in the game")

        with store.transaction():
            store.update(StoreKey.GAMES, game_id, host_player_id=new_host_player_id)
            store.update(StoreKey.PLAYERS, requesting_player_id, is_host=False)
            store.update(StoreKey.PLAYERS, new_host_player_id, is_host=True)
        logger.info("Host of game %s transferred from %s to %s", game_id, requesting_player_id, new_host_player_id)
