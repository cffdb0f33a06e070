# realms/engine/commands/info.py
"""
Information commands.

Commands:
- look [target] (l) - Describe the room, an item or an NPC
- stats (score) - Show your character sheet
- skills - Show learned skills and the next one to unlock
- help (?) - List every command
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import formatting
from ..world import ATTRIBUTES, PlayerState, attribute_modifier

if TYPE_CHECKING:
    from ..engine import GameEngine
    from ..systems.router import CommandRouter, ParsedCommand
    from ..world import WorldItem

BAR_WIDTH = 10
SPIRIT_MESSAGE = (
    "You are a bodiless spirit drifting above your own corpse.\n"
    "The world looks grey and blurred. All you can do is 'respawn'."
)


def _describe_item(engine: "GameEngine", item: "WorldItem") -> str:
    text = item.description or f"You see nothing special about {engine.item_name(item.name)}."
    if item.read_text:
        text += f'\n\nOn {engine.item_name(item.name)} is written: "{item.read_text}"'
    return text


def look(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if engine.player.state == PlayerState.DEAD:
        return engine.colorize(SPIRIT_MESSAGE, formatting.PLAYER_DEAD)

    room = engine.current_room()
    if room is None:
        return "You are nowhere."
    if not cmd.target:
        return engine.describe_room()

    world = engine.world
    item_id = room.find_item(cmd.target, world)
    if item_id is not None:
        return _describe_item(engine, world.items[item_id])

    carried = engine.player.find_item(cmd.target)
    if carried is not None:
        return _describe_item(engine, carried)

    for trader in engine.npcs_here():
        for local_id in trader.shop:
            ware = world.get_item(local_id, trader.area)
            if ware is not None and ware.matches(cmd.target):
                return _describe_item(engine, ware)

    for npc in world.npcs_in_room(room, alive_only=False):
        if npc.matches(cmd.target):
            text = npc.description or f"You see nothing special about {engine.npc_name(npc)}."
            if not npc.is_alive():
                text += engine.colorize(" (dead)", formatting.NPC_DEAD)
            return text

    return f'You don\'t see "{cmd.target}" here.'


def _bar(engine: "GameEngine", current: int, maximum: int, style: str) -> str:
    fraction = current / maximum if maximum > 0 else 0
    full = max(0, min(BAR_WIDTH, round(BAR_WIDTH * fraction)))
    return engine.colorize("#" * full, style) + engine.colorize("-" * (BAR_WIDTH - full), formatting.NPC_DEAD)


def stats(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    p = engine.player
    c = engine.colorize

    state_text = {
        PlayerState.FIGHTING: c("fighting", formatting.COMBAT_NPC_DEATH),
        PlayerState.DEAD: c("dead", formatting.PLAYER_DEAD),
    }.get(p.state, c("ready", formatting.COMBAT_EXP_GAIN))

    lines = [
        c(f"---[ Stats: {p.name} ]--------", formatting.ROOM_NAME),
        f"  {'Level:':<15} {p.level}",
        f"  {'Experience:':<15} [{_bar(engine, p.experience, p.experience_to_next, formatting.ROOM_NAME)}]"
        f" {p.experience}/{p.experience_to_next}",
        f"  {'Health:':<15} [{_bar(engine, p.hit_points, p.max_hit_points, formatting.COMBAT_NPC_DEATH)}]"
        f" {p.hit_points}/{p.max_hit_points}",
        f"  {'Stamina:':<15} [{_bar(engine, p.stamina, p.max_stamina, formatting.EXIT_NAME)}]"
        f" {p.stamina}/{p.max_stamina}",
        "",
    ]
    for attribute in ATTRIBUTES:
        score = getattr(p, attribute)
        lines.append(f"  {attribute.capitalize() + ':':<15} {score} ({attribute_modifier(score):+d})")
    lines.extend([
        "",
        f"  {'Defense:':<15} {p.total_defense()}",
        f"  {'Gold:':<15} {p.gold}",
        "",
        f"  State: {state_text}",
        c("------------------------------------", formatting.ROOM_NAME),
    ])
    return "\n".join(lines)


def skills(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    p = engine.player
    c = engine.colorize

    lines = [c(f"---[ Skills: {p.name} ]--------", formatting.ROOM_NAME)]
    lines.append(c("Learned skills:", formatting.EXIT_NAME))
    known = [engine.skills.get(skill_id) for skill_id in sorted(p.skills)]
    known = [skill for skill in known if skill is not None]
    if not known:
        lines.append("  You have not learned any skills yet.")
    for skill in known:
        remaining = p.skill_cooldowns.get(skill.id, 0)
        cooldown = c(f" (cooldown: {remaining})", formatting.COMBAT_NPC_DEATH) if remaining > 0 else ""
        lines.append(f"  - {c(skill.name, formatting.ITEM_NAME)}{cooldown}")

    lines.append("")
    lines.append(c("Next skill:", formatting.EXIT_NAME))
    upcoming = engine.skills.next_skill(p.level)
    if upcoming:
        level = c(str(upcoming.level), formatting.COMBAT_EXP_GAIN)
        lines.append(f"  - {c(upcoming.name, formatting.ITEM_NAME)} (at level {level})")
    else:
        lines.append("  You have learned every skill there is.")

    lines.append(c("------------------------------------", formatting.ROOM_NAME))
    return "\n".join(lines)


def help_command(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    return engine.router.generate_help()


def register(router: "CommandRouter") -> None:
    router.register_handler(
        "look", look, aliases=["l"], category="info",
        description="Look around or at something", usage="[target]",
    )
    router.register_handler(
        "stats", stats, aliases=["score"], category="info",
        description="Show your character sheet",
    )
    router.register_handler(
        "skills", skills, category="info",
        description="Show your skills",
    )
    router.register_handler(
        "help", help_command, aliases=["?"], category="info",
        description="Show this help",
    )
