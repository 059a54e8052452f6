"""In-memory entity store with per-game locking and JSON snapshots.

Each entity kind lives in its own table keyed by an integer id allocated by
the store. Values are deep-copied in and out, so callers never hold a
reference into stored state and must write changes back with replace() or
update().
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator

from pydantic import BaseModel

from engine.errors import ConflictError, NotFoundError
from models.game import Game, Player
from models.orders import TurnOrders, TurnResult
from models.world import Actor, World

logger = logging.getLogger(__name__)


class StoreKey(str, Enum):
    """Entity kinds held by the store."""
    GAMES = "games"
    PLAYERS = "players"
    ACTORS = "actors"
    WORLDS = "worlds"
    TURN_ORDERS = "turnOrders"
    TURN_RESULTS = "turnResults"


MODELS: dict[StoreKey, type[BaseModel]] = {
    StoreKey.GAMES: Game,
    StoreKey.PLAYERS: Player,
    StoreKey.ACTORS: Actor,
    StoreKey.WORLDS: World,
    StoreKey.TURN_ORDERS: TurnOrders,
    StoreKey.TURN_RESULTS: TurnResult,
}

LABELS: dict[StoreKey, str] = {
    StoreKey.GAMES: "Game",
    StoreKey.PLAYERS: "Player",
    StoreKey.ACTORS: "Actor",
    StoreKey.WORLDS: "World",
    StoreKey.TURN_ORDERS: "TurnOrders",
    StoreKey.TURN_RESULTS: "TurnResult",
}


class Store:
    """Thread-safe arena of game entities."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: dict[StoreKey, dict[int, BaseModel]] = {k: {} for k in StoreKey}
        self._next_ids: dict[StoreKey, int] = {k: 1 for k in StoreKey}
        self._game_locks: dict[int, threading.RLock] = {}
        self._local = threading.local()

    # -- basic operations -------------------------------------------------

    def create(self, kind: StoreKey, value: BaseModel) -> int:
        """Insert a copy of value under a freshly allocated id.

        Any id already set on value is replaced.

        Returns:
            The new id.
        """
        with self._lock:
            entity_id = self._next_ids[kind]
            self._next_ids[kind] += 1
            self._tables[kind][entity_id] = value.model_copy(update={"id": entity_id}, deep=True)
            self._record(kind, entity_id, None)
            return entity_id

    def read(self, kind: StoreKey, entity_id: int) -> BaseModel:
        """Return a copy of one entity.

        Raises:
            NotFoundError: If there is no entity with that id.
        """
        with self._lock:
            value = self._tables[kind].get(entity_id)
            if value is None:
                raise NotFoundError(LABELS[kind], entity_id)
            return value.model_copy(deep=True)

    def read_all(
        self,
        kind: StoreKey,
        predicate: Callable[[BaseModel], bool] | None = None,
    ) -> list[BaseModel]:
        """Return copies of every entity of a kind matching predicate, in id order."""
        with self._lock:
            return [
                value.model_copy(deep=True)
                for _, value in sorted(self._tables[kind].items())
                if predicate is None or predicate(value)
            ]

    def replace(self, kind: StoreKey, entity_id: int, value: BaseModel) -> None:
        """Overwrite an existing entity with a copy of value.

        Raises:
            NotFoundError: If there is no entity with that id.
        """
        with self._lock:
            old = self._tables[kind].get(entity_id)
            if old is None:
                raise NotFoundError(LABELS[kind], entity_id)
            self._tables[kind][entity_id] = value.model_copy(update={"id": entity_id}, deep=True)
            self._record(kind, entity_id, old)

    def update(self, kind: StoreKey, entity_id: int, **diff) -> None:
        """Apply a partial change (field name -> new value) to an existing entity.

        Raises:
            NotFoundError: If there is no entity with that id.
        """
        with self._lock:
            old = self._tables[kind].get(entity_id)
            if old is None:
                raise NotFoundError(LABELS[kind], entity_id)
            self._tables[kind][entity_id] = old.model_copy(update=diff, deep=True)
            self._record(kind, entity_id, old)

    def remove(self, kind: StoreKey, entity_id: int) -> None:
        """Delete an entity.

        Raises:
            NotFoundError: If there is no entity with that id.
        """
        with self._lock:
            old = self._tables[kind].pop(entity_id, None)
            if old is None:
                raise NotFoundError(LABELS[kind], entity_id)
            self._record(kind, entity_id, old)

    def delete_all(self) -> None:
        """Empty every table. Ids keep increasing."""
        with self._lock:
            for table in self._tables.values():
                table.clear()

    def create_if_absent(
        self,
        kind: StoreKey,
        value: BaseModel,
        predicate: Callable[[BaseModel], bool],
        message: str,
    ) -> int:
        """Atomically insert value unless an entity matching predicate exists.

        Raises:
            ConflictError: With message, if a matching entity exists.
        """
        with self._lock:
            if any(predicate(v) for v in self._tables[kind].values()):
                raise ConflictError(message)
            return self.create(kind, value)

    # -- concurrency ------------------------------------------------------

    def game_lock(self, game_id: int) -> threading.RLock:
        """The lock serializing joins, order submission and resolution for one game."""
        with self._lock:
            lock = self._game_locks.get(game_id)
            if lock is None:
                lock = self._game_locks[game_id] = threading.RLock()
            return lock

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Undo every write made by this thread inside the block if it raises.

        Nested transactions join the outermost one.
        """
        if getattr(self._local, "journal", None) is not None:
            yield
            return

        self._local.journal = []
        try:
            yield
        except BaseException:
            self._rollback(self._local.journal)
            raise
        finally:
            self._local.journal = None

    def _record(self, kind: StoreKey, entity_id: int, old: BaseModel | None) -> None:
        journal = getattr(self._local, "journal", None)
        if journal is not None:
            journal.append((kind, entity_id, old))

    def _rollback(self, journal: list[tuple[StoreKey, int, BaseModel | None]]) -> None:
        with self._lock:
            for kind, entity_id, old in reversed(journal):
                if old is None:
                    self._tables[kind].pop(entity_id, None)
                else:
                    self._tables[kind][entity_id] = old
        logger.warning("Store transaction rolled back %s write(s)", len(journal))

    # -- snapshots --------------------------------------------------------

    def save(self, path: str) -> None:
        """Persist every table to a JSON file.

        Writes to a temporary file first, then renames for atomicity.
        """
        with self._lock:
            data = {
                "next_ids": {k.value: n for k, n in self._next_ids.items()},
                "tables": {
                    k.value: {str(i): v.model_dump(mode="json") for i, v in table.items()}
                    for k, table in self._tables.items()
                },
            }
        tmp_path = path + ".tmp"
        with open(tmp_path, "w") as f:
            json.dump(data, f)
        os.replace(tmp_path, path)

    @classmethod
    def load(cls, path: str) -> Store | None:
        """Load a store from a JSON file, or None if the file doesn't exist."""
        if not Path(path).exists():
            return None
        with open(path) as f:
            data = json.load(f)

        store = cls()
        for kind in StoreKey:
            model = MODELS[kind]
            rows = data.get("tables", {}).get(kind.value, {})
            store._tables[kind] = {int(i): model.model_validate(v) for i, v in rows.items()}
            store._next_ids[kind] = data.get("next_ids", {}).get(kind.value, 1)
        return store
