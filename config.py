"""Server-wide configuration constants for Hexline Server."""

import logging
import os

TIMESTEP_MAX = 10            # Sub-steps simulated per turn
WORLD_WIDTH = int(os.environ.get("HEXLINE_WORLD_WIDTH", "10"))    # Columns
WORLD_HEIGHT = int(os.environ.get("HEXLINE_WORLD_HEIGHT", "10"))  # Rows
DEFAULT_MAX_PLAYERS = int(os.environ.get("HEXLINE_MAX_PLAYERS", "4"))
MIN_PLAYERS_LIMIT = 2
MAX_PLAYERS_LIMIT = 8
DEFAULT_SIGHT_RANGE = int(os.environ.get("HEXLINE_DEFAULT_SIGHT_RANGE", "7"))  # Hexes
ACTORS_PER_PLAYER = 9
FORMATION_WIDTH = 3
FORMATION_HEIGHT = 3
ACTOR_STARTING_HEALTH = 100
DEFAULT_WEAPON_ID = "STANDARD_BLASTER"
PLACEMENT_MAX_ATTEMPTS = 50  # Random squad placements tried before scanning
DATA_DIR = os.environ.get("DATA_DIR", ".")  # Persistent data directory
SAVE_FILE = os.path.join(DATA_DIR, "hexline_state.json")
PERSIST_STATE = os.environ.get("HEXLINE_PERSIST", "false").lower() == "true"
DEBUG = os.environ.get("HEXLINE_DEBUG", "false").lower() == "true"
LOG_LEVEL = logging.DEBUG if DEBUG else logging.INFO
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
