"""
NPC behavior scripts.

Importing this package registers every bundled behavior.
"""

from .base import (
    BehaviorContext,
    BehaviorResult,
    BehaviorScript,
    behavior,
    get_all_behaviors,
    get_behavior_instance,
)
from . import wandering  # noqa: F401  (registers "wanders")

WANDER_BEHAVIOR = "wanders"

__all__ = [
    "BehaviorContext",
    "BehaviorResult",
    "BehaviorScript",
    "behavior",
    "get_all_behaviors",
    "get_behavior_instance",
    "WANDER_BEHAVIOR",
]
