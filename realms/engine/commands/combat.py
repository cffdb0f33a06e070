# realms/engine/commands/combat.py
"""
Combat commands.

Commands:
- kill <npc> (attack, k) - Start a fight
- kick [npc] - Skill: open a fight with a kick, or kick during one
- flee - Escape the current fight
- consider <target> (con) - Size up an item or an opponent
- scan - Look for hostiles in the neighbouring rooms
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from .. import formatting
from ..world import NpcType
from .helpers import check_skill_ready, spend_skill

if TYPE_CHECKING:
    from ..engine import GameEngine
    from ..systems.router import CommandRouter, ParsedCommand

KICK_SKILL = "kick"


def kill(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "Whom do you want to attack?"

    npc = engine.find_npc_in_room(cmd.target)
    if npc is None:
        return f'There is no "{cmd.target}" here to attack.'
    if npc.type == NpcType.FRIENDLY:
        return f"You can't attack {engine.npc_name(npc)}, they are friendly."

    if not engine.start_combat(npc):
        return "You are already fighting!"
    # The opening line goes out on the message channel
    return ""


def kick(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    player = engine.player
    problem = check_skill_ready(engine, KICK_SKILL)
    if problem:
        return problem

    if engine.combat.active:
        if player.skill_used_this_round:
            return "You already used a skill this round."
        spend_skill(engine, KICK_SKILL)
        player.next_attack_skill = KICK_SKILL
        player.skill_used_this_round = True
        return f"You get ready to kick {engine.npc_name(engine.combat.target)}."

    if not cmd.target:
        return "Whom do you want to kick?"

    npc = engine.find_npc_in_room(cmd.target)
    if npc is None:
        return f'There is no "{cmd.target}" here to kick.'
    if npc.type == NpcType.FRIENDLY:
        return f"You can't kick {engine.npc_name(npc)}, they are friendly."

    spend_skill(engine, KICK_SKILL)
    player.next_attack_skill = KICK_SKILL
    player.skill_used_this_round = True
    engine.start_combat(npc)
    return ""


def flee(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    target = engine.combat.target
    if not engine.combat.active or target is None:
        return "You are not fighting."

    engine.stop_combat(player_fled=True)
    return f"You escape from {engine.npc_name(target)}."


def consider(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to consider?"

    npc = engine.find_npc_in_room(cmd.target)
    if npc is not None:
        return engine.consideration.consider_npc(npc)

    player = engine.player
    room = engine.current_room()
    item = None
    item_id = room.find_item(cmd.target, engine.world) if room else None
    if item_id is not None:
        item = engine.world.items.get(item_id)
    if item is None:
        item = player.find_item(cmd.target)
    if item is None:
        for equipped in (player.equipped_weapon, player.equipped_armor):
            if equipped and equipped.matches(cmd.target):
                item = equipped
                break

    if item is None:
        return f'You see no "{cmd.target}" to consider.'
    return engine.consideration.consider_item(item)


def scan(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    room = engine.current_room()
    if room is None:
        return "You can't see anything."

    c = engine.colorize
    found = []
    for direction in room.get_exits():
        target_id = engine.world.resolve_exit(room, direction)
        neighbour = engine.world.get_room(target_id) if target_id else None
        if neighbour is None:
            # Not loaded yet
            continue
        hostiles = Counter(
            npc.name for npc in engine.world.npcs_in_room(neighbour) if npc.is_hostile()
        )
        for name, count in hostiles.items():
            label = c(name, formatting.npc_style(NpcType.HOSTILE.value))
            suffix = f" (x{count})" if count > 1 else ""
            found.append(f"  {c(direction, formatting.EXIT_NAME)}: {label}{suffix}")

    if not found:
        return "You scan the surroundings. No enemies nearby."

    header = c("---[ You scan the surroundings ]---", formatting.ROOM_NAME)
    footer = c("-----------------------------------", formatting.ROOM_NAME)
    return "\n".join([header, *found, footer])


def register(router: "CommandRouter") -> None:
    router.register_handler(
        "kill", kill, aliases=["attack", "k"], category="combat",
        description="Attack someone", usage="<target>",
    )
    router.register_handler(
        "kick", kick, category="combat",
        description="Kick an opponent (skill)", usage="[target]",
    )
    router.register_handler(
        "flee", flee, category="combat",
        description="Run from the fight",
    )
    router.register_handler(
        "consider", consider, aliases=["con"], category="combat",
        description="Size up an item or opponent", usage="<target>",
    )
    router.register_handler(
        "scan", scan, category="combat",
        description="Look for enemies nearby",
    )
