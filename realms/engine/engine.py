# realms/engine/engine.py
"""
GameEngine - the single-player game facade.

Wires the World, the Player and every system together through a shared
GameContext, and exposes what a front end needs:

- start_new_game() / process_command() / tick()
- get_available_actions() / get_suggestions()
- the MessageChannel for text produced off the command path
- start() / stop() for the real-time driver (ticks, combat rounds, autosave)
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from ..config import (
    AUTOSAVE_INTERVAL,
    DEFAULT_PLAYER_NAME,
    RECALL_ROOM,
    RESPAWN_ROOM,
    SAVE_KEY,
    STARTING_AREA,
    STARTING_ROOM,
)
from . import formatting
from .commands import register_all
from .errors import SaveError
from .formatting import Colorizer, plain_colorizer
from .loader import AreaLoader, AreaSource
from .systems import (
    ActionGenerator,
    ActionGroup,
    CombatConfig,
    CombatOutcome,
    CombatSystem,
    CommandRouter,
    ConsiderationSystem,
    GameContext,
    KeyValueStore,
    MemoryKeyValueStore,
    MessageChannel,
    RoundResult,
    SaveManager,
    SkillBook,
    Suggestion,
    SuggestionGenerator,
    TickConfig,
    TickScheduler,
    TimeEventManager,
)
from .systems.events import KIND_COMBAT, KIND_SYSTEM, KIND_WORLD, stat_update_event
from .world import (
    PlayerState,
    RoomId,
    World,
    WorldNpc,
    WorldPlayer,
    WorldRoom,
    parse_global_id,
)

logger = logging.getLogger(__name__)

COMBAT_ROUND_EVENT = "combat-round"
WORLD_TICK_EVENT = "world-tick"
AUTOSAVE_EVENT = "autosave"


@dataclass
class EngineConfig:
    """Where the game starts and how often the driver fires."""
    starting_area: str = STARTING_AREA
    starting_room: RoomId = STARTING_ROOM
    respawn_room: RoomId = RESPAWN_ROOM
    recall_room: RoomId = RECALL_ROOM
    save_key: str = SAVE_KEY
    autosave_interval: float = AUTOSAVE_INTERVAL  # 0 disables autosave
    combat: CombatConfig = field(default_factory=CombatConfig)
    ticks: TickConfig = field(default_factory=TickConfig)


@dataclass
class MoveResult:
    success: bool
    message: str


class GameEngine:
    """
    Core game engine.

    Usage:
        engine = GameEngine(DirectoryAreaSource("data/areas"), skills=load_skills(...))
        print(await engine.start_new_game("Sigrid"))
        queue = engine.channel.subscribe("terminal")
        await engine.start()
        print(await engine.process_command("kill rat"))
    """

    def __init__(
        self,
        area_source: AreaSource | None = None,
        *,
        skills: SkillBook | None = None,
        store: KeyValueStore | None = None,
        colorizer: Colorizer = plain_colorizer,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.world = World(AreaLoader(area_source) if area_source is not None else None)

        # Initialize game context and systems
        self.ctx = GameContext(
            self.world,
            WorldPlayer(current_room=self.config.starting_room),
            skills=skills,
            channel=MessageChannel(),
            rng=rng,
            colorize=colorizer,
        )
        self.ctx.engine = self
        self.time_manager = TimeEventManager(self.ctx)
        self.ctx.time_manager = self.time_manager
        self.combat = CombatSystem(self.ctx, self.config.combat)
        self.ctx.combat_system = self.combat
        self.ticks = TickScheduler(self.ctx, self.config.ticks, clock=clock)
        self.ctx.ticks = self.ticks

        self.consideration = ConsiderationSystem(self.ctx)
        self.saves = SaveManager(self.ctx, store or MemoryKeyValueStore(), self.config.save_key)

        self.router = CommandRouter(self)
        register_all(self.router)
        self.actions = ActionGenerator(self.ctx)
        self.suggestions = SuggestionGenerator(self.ctx, self.router)

        self.game_started = False

    # ---------- Shared state ----------

    @property
    def player(self) -> WorldPlayer:
        return self.ctx.player

    @property
    def skills(self) -> SkillBook:
        return self.ctx.skills

    @property
    def channel(self) -> MessageChannel:
        return self.ctx.channel

    @property
    def rng(self) -> random.Random:
        return self.ctx.rng

    def colorize(self, text: str, style: str) -> str:
        return self.ctx.colorize(text, style)

    def current_room(self) -> WorldRoom | None:
        return self.ctx.current_room()

    def find_npc_in_room(self, query: str) -> WorldNpc | None:
        room = self.current_room()
        if room is None:
            return None
        npc_id = room.find_npc(query, self.world)
        return self.world.get_npc(npc_id, room.area) if npc_id else None

    def npcs_here(self) -> List[WorldNpc]:
        room = self.current_room()
        return self.world.npcs_in_room(room) if room else []

    def describe_room(self) -> str:
        room = self.current_room()
        if room is None:
            return "You are nowhere."
        return room.get_full_description(self.world, self.ctx.colorize)

    # ---------- Game lifecycle ----------

    async def start_new_game(self, name: str = DEFAULT_PLAYER_NAME) -> str:
        """Reset everything and drop a fresh player into the starting room."""
        self._reset_runtime()
        self.world.reset()

        if not await self.world.load_area(self.config.starting_area):
            self.game_started = False
            return "The world could not be loaded. Check the area data and try again."

        player = WorldPlayer(name=name or DEFAULT_PLAYER_NAME, current_room=self.config.starting_room)
        self.ctx.player = player
        self.skills.award_skills(player)
        self.game_started = True
        logger.info("New game started for %s", player.name)

        area_name = self.world.area_name(self.config.starting_area)
        return (
            f"Welcome to {area_name}, {player.name}!\n\n"
            f"{self.describe_room()}\n\n"
            "Type 'help' for a list of commands."
        )

    def _reset_runtime(self) -> None:
        """Cancel the running encounter and forget pending respawns."""
        self.stop_combat()
        self.ticks.reset()

    async def process_command(self, raw: str) -> str:
        """Run one line of player input. Always returns a string."""
        text = await self.router.dispatch(raw)
        self.emit_stats()
        return text

    def get_stats(self) -> Dict[str, Any]:
        player = self.player
        return {
            "name": player.name,
            "level": player.level,
            "experience": player.experience,
            "experienceToNext": player.experience_to_next,
            "hitPoints": player.hit_points,
            "maxHitPoints": player.max_hit_points,
            "stamina": player.stamina,
            "maxStamina": player.max_stamina,
            "gold": player.gold,
            "state": player.state.value,
            "room": player.current_room,
        }

    def emit_stats(self) -> None:
        self.channel.emit(stat_update_event(self.get_stats()))

    # ---------- World tick ----------

    def tick(self) -> List[str]:
        """
        Advance the world by one tick.

        Returns the observable messages; they are also published on the
        message channel.
        """
        try:
            messages = self.ticks.advance_tick()
        except Exception:
            logger.exception("World tick failed")
            return []
        self.channel.publish_all(messages, kind=KIND_WORLD)
        return messages

    # ---------- Front-end helpers ----------

    def get_available_actions(self) -> List[ActionGroup]:
        return self.actions.get_available_actions()

    def get_suggestions(self, command: str | None, prefix: str = "") -> List[Suggestion]:
        return self.suggestions.get_suggestions(command, prefix)

    # ---------- Movement ----------

    async def move_to_room(self, room_id: RoomId, direction: str | None = None) -> MoveResult:
        """
        Move the player to a room, loading its area first if needed.

        A failed area load leaves the player where they are.
        """
        area_id, _ = parse_global_id(room_id)
        if area_id not in self.world.loaded_area_ids:
            self.channel.publish(f"Loading new area: {area_id}...", kind=KIND_SYSTEM)
            if not await self.world.load_area(area_id):
                return MoveResult(False, "A strange force blocks your way. That area cannot be reached.")

        if self.world.get_room(room_id) is None:
            logger.warning("Move to unknown room %s", room_id)
            return MoveResult(False, "That way leads nowhere.")

        self.player.current_room = room_id
        heading = f"You go {direction}." if direction else "You find yourself somewhere new."
        return MoveResult(True, f"{heading}\n\n{self.describe_room()}")

    # ---------- Combat ----------

    def start_combat(self, npc: WorldNpc) -> bool:
        if not self.combat.start(npc):
            return False
        if self.time_manager.is_running:
            self._schedule_combat_round()
        return True

    def stop_combat(self, player_fled: bool = False) -> CombatOutcome | None:
        self.time_manager.cancel(COMBAT_ROUND_EVENT)
        return self.combat.stop(player_fled=player_fled)

    def _schedule_combat_round(self) -> None:
        self.time_manager.schedule(
            self.config.combat.round_interval,
            self.run_combat_round,
            event_id=COMBAT_ROUND_EVENT,
            recurring=True,
        )

    async def run_combat_round(self) -> RoundResult:
        """Resolve one round, publish its text and carry out its consequences."""
        try:
            result = self.combat.advance_round()
        except Exception:
            logger.exception("Combat round failed")
            self.stop_combat()
            result = RoundResult(text="", outcome=CombatOutcome.DISENGAGED)

        if result.text:
            self.channel.publish(result.text, kind=KIND_COMBAT)
        if result.finished:
            self.time_manager.cancel(COMBAT_ROUND_EVENT)

        if result.relocate_to:
            move = await self.move_to_room(result.relocate_to, result.direction)
            self.channel.publish(move.message, kind=KIND_COMBAT)

        self.emit_stats()
        return result

    # ---------- Persistence ----------

    async def save_game(self) -> bool:
        try:
            await self.saves.save_game()
        except SaveError:
            logger.exception("Saving failed")
            return False
        return True

    async def load_game(self) -> bool:
        """
        Restore the saved game. Without a save nothing changes.

        Raises SaveError when the save cannot be read or is malformed; the
        running game is left as it was.
        """
        data = await self.saves.fetch()
        if data is None:
            return False

        parsed = self.saves.parse(data)
        self._reset_runtime()
        await self.saves.restore(parsed)

        self.game_started = True
        return True

    # ---------- Real-time driver ----------

    async def start(self) -> None:
        """Start ticking the world, running combat rounds and autosaving."""
        await self.time_manager.start()
        self.time_manager.schedule(
            self.config.ticks.interval, self._on_world_tick, event_id=WORLD_TICK_EVENT, recurring=True
        )
        if self.config.autosave_interval > 0:
            self.time_manager.schedule(
                self.config.autosave_interval, self._on_autosave, event_id=AUTOSAVE_EVENT, recurring=True
            )
        if self.combat.active:
            self._schedule_combat_round()

    async def stop(self) -> None:
        self.time_manager.clear()
        await self.time_manager.stop()

    async def _on_world_tick(self) -> None:
        if self.game_started:
            self.tick()

    async def _on_autosave(self) -> None:
        if self.game_started and self.player.state != PlayerState.DEAD:
            await self.save_game()
            logger.debug("Autosaved")

    # ---------- Formatting helpers ----------

    def npc_name(self, npc: WorldNpc) -> str:
        return self.colorize(npc.name, formatting.npc_style(npc.type.value))

    def item_name(self, name: str) -> str:
        return self.colorize(name, formatting.ITEM_NAME)
