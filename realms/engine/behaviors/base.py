# realms/engine/behaviors/base.py
"""
Base classes and decorators for the behavior script system.

Behavior scripts are small, fixed-probability AI routines. Each one declares
its metadata and default configuration with the @behavior decorator and
implements the hooks it cares about.

Example behavior script:

    from .base import behavior, BehaviorContext, BehaviorResult, BehaviorScript

    @behavior(
        name="wanders",
        description="NPC occasionally moves to an adjacent room",
        defaults={"wander_chance": 0.05},
    )
    class Wanders(BehaviorScript):
        def on_wander_tick(self, ctx: BehaviorContext) -> BehaviorResult:
            if ctx.rng.random() >= ctx.config["wander_chance"]:
                return BehaviorResult.nothing()
            ...
"""
from __future__ import annotations

import logging
import random
from abc import ABC
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..world import World, WorldNpc, WorldRoom

logger = logging.getLogger(__name__)


# =============================================================================
# Behavior Context - passed to all behavior hooks
# =============================================================================


@dataclass
class BehaviorContext:
    """
    Context object passed to behavior hooks.

    Gives access to the NPC, the world and helpers for common decisions.
    """

    npc: "WorldNpc"
    world: "World"
    room_id: str  # Global id of the NPC's current room
    config: dict[str, Any]  # Resolved behavior config for this NPC
    rng: random.Random

    def get_room(self) -> "WorldRoom | None":
        return self.world.get_room(self.room_id)

    def get_random_exit(self, same_zone_only: bool = True) -> tuple[str, str] | None:
        """A random (direction, destination room global id), or None."""
        room = self.get_room()
        if not room:
            return None
        if same_zone_only:
            exits = room.same_zone_exits()
        else:
            exits = [(d, room.exit_target(d)) for d in room.get_exits()]
        if not exits:
            return None
        return self.rng.choice(exits)


# =============================================================================
# Behavior Result - returned from behavior hooks
# =============================================================================


@dataclass
class BehaviorResult:
    """What a behavior hook decided to do."""

    handled: bool = False
    message: str | None = None
    move_to: str | None = None  # Room global id to move the NPC to
    move_direction: str | None = None

    @classmethod
    def nothing(cls) -> "BehaviorResult":
        return cls(handled=False)

    @classmethod
    def move(cls, direction: str, room_id: str, message: str | None = None) -> "BehaviorResult":
        return cls(handled=True, move_to=room_id, move_direction=direction, message=message)


# =============================================================================
# Behavior Script Base Class
# =============================================================================


class BehaviorScript(ABC):
    """
    Base class for all behavior scripts.

    Subclass this and implement the hooks you need; every hook defaults to
    doing nothing.
    """

    # Metadata - set by the @behavior decorator
    name: str = "unnamed"
    description: str = ""
    defaults: dict[str, Any] = {}

    def resolve_config(self, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        config = dict(self.defaults)
        if overrides:
            config.update(overrides)
        return config

    def on_wander_tick(self, ctx: BehaviorContext) -> BehaviorResult:
        """
        Called once per world tick for NPCs allowed to wander.
        Return BehaviorResult.move(...) to relocate the NPC.
        """
        return BehaviorResult.nothing()


# =============================================================================
# Behavior Decorator - for registering behavior scripts
# =============================================================================

# Registry of all loaded behavior scripts
_BEHAVIOR_REGISTRY: dict[str, type[BehaviorScript]] = {}


def behavior(
    name: str,
    description: str = "",
    defaults: dict[str, Any] | None = None,
):
    """Decorator to register a behavior script class under `name`."""

    def decorator(cls: type[BehaviorScript]) -> type[BehaviorScript]:
        cls.name = name
        cls.description = description
        cls.defaults = defaults or {}

        if name in _BEHAVIOR_REGISTRY:
            logger.warning("Overwriting behavior '%s'", name)
        _BEHAVIOR_REGISTRY[name] = cls

        return cls

    return decorator


def get_all_behaviors() -> dict[str, type[BehaviorScript]]:
    return _BEHAVIOR_REGISTRY.copy()


def get_behavior_instance(name: str) -> BehaviorScript | None:
    """Get a new instance of a registered behavior."""
    cls = _BEHAVIOR_REGISTRY.get(name)
    return cls() if cls else None
