# realms/engine/systems/__init__.py
"""
Game systems, each owning one concern of the engine:
- TimeEventManager: Real-time driver for scheduled and recurring events
- MessageChannel: Delivery of events not tied to a command
- CombatSystem: Encounter state machine, damage, death and loot
- TickScheduler: Respawn queue, cooldown decay and NPC wandering
- CommandRouter: Command parsing, state gates and handler routing
- SaveManager: Save snapshots over an injected key-value store
- SkillBook: Skill definitions and level-gated awards
- ConsiderationSystem: Item comparison and fight odds
- ActionGenerator / SuggestionGenerator: Hints for front ends
"""

from .actions import Action, ActionGenerator, ActionGroup, Suggestion, SuggestionGenerator
from .combat import CombatConfig, CombatOutcome, CombatSystem, RoundResult
from .consider import ConsiderationSystem
from .context import GameContext
from .events import MessageChannel
from .persistence import KeyValueStore, MemoryKeyValueStore, SaveManager, SqlKeyValueStore
from .router import CommandMeta, CommandRouter, ParsedCommand
from .skills import SkillBook, SkillData
from .ticks import TickConfig, TickScheduler
from .time_manager import TimeEventManager

__all__ = [
    "Action",
    "ActionGenerator",
    "ActionGroup",
    "Suggestion",
    "SuggestionGenerator",
    "CombatConfig",
    "CombatOutcome",
    "CombatSystem",
    "RoundResult",
    "ConsiderationSystem",
    "GameContext",
    "MessageChannel",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SaveManager",
    "SqlKeyValueStore",
    "CommandMeta",
    "CommandRouter",
    "ParsedCommand",
    "SkillBook",
    "SkillData",
    "TickConfig",
    "TickScheduler",
    "TimeEventManager",
]
