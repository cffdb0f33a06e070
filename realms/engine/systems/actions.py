# realms/engine/systems/actions.py
"""
Action and suggestion generation for front ends.

ActionGenerator groups the commands that make sense in the current room
(general, trader/healer, combat, per item, per NPC) so a UI can offer them as
buttons. SuggestionGenerator completes command arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from .. import formatting
from ..commands.system import GAIN_STATS

if TYPE_CHECKING:
    from .context import GameContext
    from .router import CommandRouter

KICK_SKILL = "kick"


@dataclass
class Action:
    label: str
    command: str
    danger: bool = False


@dataclass
class ActionTarget:
    name: str
    style: str


@dataclass
class ActionGroup:
    actions: List[Action] = field(default_factory=list)
    target: Optional[ActionTarget] = None  # None for general groups

    @property
    def is_general(self) -> bool:
        return self.target is None


@dataclass
class Suggestion:
    text: str
    type: str  # command | item | npc | exit


class ActionGenerator:
    def __init__(self, ctx: "GameContext") -> None:
        self.ctx = ctx

    def get_available_actions(self) -> List[ActionGroup]:
        room = self.ctx.current_room()
        if room is None:
            return []

        world = self.ctx.world
        player = self.ctx.player
        groups = [ActionGroup(actions=[
            Action("Look around", "look"),
            Action("Save", "save"),
            Action("Help", "help"),
        ])]

        npcs = world.npcs_in_room(room)

        service_actions = []
        if any(npc.can_trade() for npc in npcs):
            service_actions.append(Action("Trade", "list"))
        if any(npc.can_heal for npc in npcs):
            service_actions.append(Action("Heal", "heal"))
        if service_actions:
            groups.append(ActionGroup(actions=service_actions))

        combat = self.ctx.combat_system
        if combat is not None and combat.active:
            combat_actions = [Action("Flee", "flee", danger=True)]
            if player.has_skill(KICK_SKILL):
                combat_actions.append(Action("Kick", "kick"))
            groups.append(ActionGroup(actions=combat_actions))

        for item in world.items_in_room(room):
            groups.append(ActionGroup(
                target=ActionTarget(item.name, formatting.ITEM_NAME),
                actions=[
                    Action("Look", f"look {item.name}"),
                    Action("Consider", f"consider {item.name}"),
                    Action("Get", f"get {item.name}"),
                ],
            ))

        for npc in npcs:
            actions = [
                Action("Look", f"look {npc.name}"),
                Action("Consider", f"consider {npc.name}"),
            ]
            if npc.dialogue:
                actions.append(Action("Talk", f"talk {npc.name}"))
            if npc.is_hostile():
                actions.append(Action("Kill", f"kill {npc.name}", danger=True))
            groups.append(ActionGroup(
                target=ActionTarget(npc.name, formatting.npc_style(npc.type.value)),
                actions=actions,
            ))

        return groups


class SuggestionGenerator:
    def __init__(self, ctx: "GameContext", router: "CommandRouter") -> None:
        self.ctx = ctx
        self.router = router

    def get_suggestions(self, command: str | None, prefix: str = "") -> List[Suggestion]:
        prefix = prefix.lower()

        if not command:
            return [
                Suggestion(name, "command")
                for name in sorted(self.router.commands)
                if name.startswith(prefix)
            ]

        # Resolve aliases such as "k" -> "kill"
        command = self.router.parse(command).command

        room = self.ctx.current_room()
        world = self.ctx.world
        room_items = world.items_in_room(room) if room else []
        room_npcs = world.npcs_in_room(room) if room else []
        inventory = self.ctx.player.inventory

        if command == "go":
            exits = room.get_exits() if room else []
            return [Suggestion(d, "exit") for d in exits if d.startswith(prefix)]
        if command == "gain":
            return [Suggestion(s, "command") for s in GAIN_STATS if s.startswith(prefix)]

        sources: List[tuple] = []
        if command == "get":
            sources = [(room_items, "item")]
        elif command in ("drop", "equip", "unequip", "use", "sell"):
            sources = [(inventory, "item")]
        elif command in ("kill", "talk", "kick"):
            sources = [(room_npcs, "npc")]
        elif command in ("look", "consider"):
            sources = [(room_items, "item"), (room_npcs, "npc"), (inventory, "item")]

        seen: Dict[str, Suggestion] = {}
        for entities, kind in sources:
            for entity in entities:
                if entity.name.lower().startswith(prefix) and entity.name not in seen:
                    seen[entity.name] = Suggestion(entity.name, kind)
        return list(seen.values())
