"""
Game configuration.

Every setting can be overridden with a REALMS_* environment variable.
"""

import os
from pathlib import Path

# Content directories
DATA_DIR = Path(os.getenv("REALMS_DATA_DIR", str(Path(__file__).parent / "data")))
AREAS_DIR = DATA_DIR / "areas"
SKILLS_FILE = DATA_DIR / "skills.yaml"

# Database settings
DATABASE_URL = os.getenv("REALMS_DATABASE_URL", "sqlite+aiosqlite:///./realms.db")
SAVE_KEY = os.getenv("REALMS_SAVE_KEY", "savegame")

# Logging
LOG_LEVEL = os.getenv("REALMS_LOG_LEVEL", "WARNING")

# World layout
STARTING_AREA = os.getenv("REALMS_STARTING_AREA", "midgard")
STARTING_ROOM = os.getenv("REALMS_STARTING_ROOM", "midgard:center")
RESPAWN_ROOM = os.getenv("REALMS_RESPAWN_ROOM", STARTING_ROOM)
RECALL_ROOM = os.getenv("REALMS_RECALL_ROOM", "midgard:temple")
DEFAULT_PLAYER_NAME = "Adventurer"

# Timing (seconds)
COMBAT_ROUND_INTERVAL = float(os.getenv("REALMS_COMBAT_ROUND_INTERVAL", "2.5"))
TICK_INTERVAL = float(os.getenv("REALMS_TICK_INTERVAL", "1.0"))
RESPAWN_DELAY = float(os.getenv("REALMS_RESPAWN_DELAY", "30.0"))
AUTOSAVE_INTERVAL = float(os.getenv("REALMS_AUTOSAVE_INTERVAL", "30.0"))

# NPC behavior
WANDER_CHANCE = float(os.getenv("REALMS_WANDER_CHANCE", "0.05"))
