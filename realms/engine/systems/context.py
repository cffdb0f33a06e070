# realms/engine/systems/context.py
"""
GameContext - Shared context object for all game systems.

Provides:
- Access to the World store and the Player
- The message channel, RNG and colorize hook
- Cross-system references

This avoids circular imports and gives every system the same explicitly
constructed world instead of module-level registries.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

from ..formatting import Colorizer, plain_colorizer
from .events import KIND_SYSTEM, MessageChannel
from .skills import SkillBook

if TYPE_CHECKING:
    from ..world import World, WorldPlayer


class GameContext:
    """
    Shared context object passed to all game systems.

    Usage:
        ctx = GameContext(world, player)
        ticks = TickScheduler(ctx)
        ctx.ticks = ticks  # Register for cross-system access
    """

    def __init__(
        self,
        world: "World",
        player: "WorldPlayer",
        *,
        skills: SkillBook | None = None,
        channel: MessageChannel | None = None,
        rng: random.Random | None = None,
        colorize: Colorizer = plain_colorizer,
    ) -> None:
        self.world = world
        self.player = player
        self.skills = skills or SkillBook()
        self.channel = channel or MessageChannel()
        self.rng = rng or random.Random()
        self.colorize = colorize

        # System references (set by GameEngine during initialization)
        self.engine: Any = None  # GameEngine
        self.time_manager: Any = None  # TimeEventManager
        self.combat_system: Any = None  # CombatSystem
        self.ticks: Any = None  # TickScheduler

    def publish(self, text: str, *, kind: str = KIND_SYSTEM) -> None:
        if text:
            self.channel.publish(text, kind=kind)

    def current_room(self):
        return self.world.get_room(self.player.current_room)
