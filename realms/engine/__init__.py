"""
The game engine: world store, systems, commands and the GameEngine facade.
"""

from .engine import EngineConfig, GameEngine, MoveResult
from .loader import DirectoryAreaSource, MappingAreaSource, load_skills, parse_skills

__all__ = [
    "EngineConfig",
    "GameEngine",
    "MoveResult",
    "DirectoryAreaSource",
    "MappingAreaSource",
    "load_skills",
    "parse_skills",
]
