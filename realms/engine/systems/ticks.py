# realms/engine/systems/ticks.py
"""
TickScheduler - World simulation that runs without player input.

Provides:
- The NPC respawn queue
- Skill cooldown decay
- NPC wandering through the "wanders" behavior script

advance_tick() is a pure state transition: it reads the injected clock once,
runs the three sweeps and returns the messages the player would notice. The
real-time cadence comes from the TimeEventManager.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List

from ...config import RESPAWN_DELAY, TICK_INTERVAL, WANDER_CHANCE
from .. import formatting
from ..behaviors import WANDER_BEHAVIOR, BehaviorContext, get_behavior_instance

if TYPE_CHECKING:
    from ..world import NpcId, RoomId, WorldNpc
    from .context import GameContext

logger = logging.getLogger(__name__)


@dataclass
class TickConfig:
    """Configuration for the world tick."""
    interval: float = TICK_INTERVAL  # Seconds between ticks
    respawn_delay: float = RESPAWN_DELAY  # Seconds a dead hostile NPC stays down
    wander_chance: float = WANDER_CHANCE  # Per-tick chance for a wandering NPC to move


@dataclass
class RespawnEntry:
    respawn_at: float
    npc_id: "NpcId"
    room_id: "RoomId"


class TickScheduler:
    """
    Runs the respawn, cooldown and wander sweeps.

    Usage:
        ticks = TickScheduler(ctx, config=TickConfig())
        ticks.schedule_npc_respawn("midgard:rat", "midgard:west")
        messages = ticks.advance_tick()
    """

    def __init__(
        self,
        ctx: "GameContext",
        config: TickConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ctx = ctx
        self.config = config or TickConfig()
        self.clock = clock
        self.respawn_queue: List[RespawnEntry] = []

    def reset(self) -> None:
        self.respawn_queue = []

    # ---------- Respawn queue ----------

    def schedule_npc_respawn(self, npc_id: "NpcId", room_id: "RoomId") -> bool:
        """Queue a respawn. Only hostile NPCs come back."""
        npc = self.ctx.world.npcs.get(npc_id)
        if npc is None or not npc.is_hostile():
            return False
        self.respawn_queue.append(RespawnEntry(
            respawn_at=self.clock() + self.config.respawn_delay,
            npc_id=npc_id,
            room_id=room_id,
        ))
        logger.debug("Respawn of %s in %s queued", npc_id, room_id)
        return True

    def pending_respawns(self) -> List[RespawnEntry]:
        return list(self.respawn_queue)

    # ---------- Tick ----------

    def advance_tick(self, now: float | None = None) -> List[str]:
        """Run one tick and return the messages the player can observe."""
        now = self.clock() if now is None else now
        messages = self._process_respawns(now)
        messages.extend(self._tick_cooldowns())
        messages.extend(self._update_wandering_npcs())
        return messages

    def _process_respawns(self, now: float) -> List[str]:
        world = self.ctx.world
        messages: List[str] = []
        due = [entry for entry in self.respawn_queue if now >= entry.respawn_at]
        self.respawn_queue = [entry for entry in self.respawn_queue if now < entry.respawn_at]

        for entry in due:
            npc = world.npcs.get(entry.npc_id)
            room = world.get_room(entry.room_id)
            if npc is None or room is None:
                continue
            if room.has_npc(npc.id) or world.npc_room(entry.npc_id) is not None:
                logger.debug("Skipping respawn of %s: already placed", entry.npc_id)
                continue

            npc.respawn()
            world.place_npc(entry.npc_id, entry.room_id)
            if self.ctx.player.current_room == entry.room_id:
                messages.append(self.ctx.colorize(
                    f"{npc.name} emerges from the shadows!", formatting.COMBAT_NPC_DEATH
                ))
        return messages

    def _tick_cooldowns(self) -> List[str]:
        player = self.ctx.player
        messages: List[str] = []
        for skill_id, remaining in list(player.skill_cooldowns.items()):
            if remaining <= 0:
                continue
            remaining -= 1
            if remaining > 0:
                player.skill_cooldowns[skill_id] = remaining
                continue
            del player.skill_cooldowns[skill_id]
            skill = self.ctx.skills.get(skill_id)
            if skill:
                messages.append(self.ctx.colorize(
                    f'Skill "{skill.name}" is ready.', formatting.COMBAT_EXP_GAIN
                ))
        return messages

    def _update_wandering_npcs(self) -> List[str]:
        world = self.ctx.world
        script = get_behavior_instance(WANDER_BEHAVIOR)
        if script is None:
            return []

        behavior_config = script.resolve_config({"wander_chance": self.config.wander_chance})
        combat_target = self._combat_target_id()
        player_room = self.ctx.player.current_room
        messages: List[str] = []

        for npc_id, room_id in list(world.npc_locations.items()):
            npc = world.npcs.get(npc_id)
            if not self._can_wander(npc, npc_id, combat_target):
                continue

            result = script.on_wander_tick(BehaviorContext(
                npc=npc,
                world=world,
                room_id=room_id,
                config=behavior_config,
                rng=self.ctx.rng,
            ))
            if not result.handled or not result.move_to:
                continue
            if not world.move_npc(npc_id, result.move_to):
                continue

            if player_room == room_id and result.message:
                messages.append(self.ctx.colorize(result.message, formatting.NPC_NEUTRAL))
            elif player_room == result.move_to:
                messages.append(self.ctx.colorize(f"{npc.name} arrives.", formatting.NPC_NEUTRAL))
        return messages

    @staticmethod
    def _can_wander(npc: "WorldNpc | None", npc_id: "NpcId", combat_target: "NpcId | None") -> bool:
        return (
            npc is not None
            and npc.can_wander
            and npc.is_alive()
            and npc_id != combat_target
        )

    def _combat_target_id(self) -> "NpcId | None":
        combat = self.ctx.combat_system
        if combat is None or combat.target is None:
            return None
        return combat.target.global_id
