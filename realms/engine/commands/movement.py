# realms/engine/commands/movement.py
"""
Movement commands.

Commands:
- go <direction> (walk) - Move through an exit; n/s/e/w/u/d expand to it
- respawn [here] - Return to the living after death
- recall - Skill: teleport back to the temple
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..world import PlayerState
from .helpers import check_skill_ready, skill_label, spend_skill

if TYPE_CHECKING:
    from ..engine import GameEngine
    from ..systems.router import CommandRouter, ParsedCommand

RECALL_SKILL = "recall"

DIRECTIONS = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "u": "up",
    "d": "down",
}


async def go(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.args:
        return "Where do you want to go?"

    direction = DIRECTIONS.get(cmd.args[0], cmd.args[0])
    room = engine.current_room()
    if room is None:
        return "You are nowhere. There is nowhere to go."

    target = engine.world.resolve_exit(room, direction)
    if target is None:
        return "You can't go that way."

    result = await engine.move_to_room(target, direction)
    return result.message


async def respawn(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    player = engine.player
    if player.state != PlayerState.DEAD:
        return "You are already alive."

    player.hit_points = player.max_hit_points
    player.state = PlayerState.IDLE

    destination = engine.config.respawn_room
    if cmd.target == "here" and player.death_room:
        destination = player.death_room

    result = await engine.move_to_room(destination)
    room_text = engine.describe_room()
    if not result.success:
        room_text = f"{result.message}\n\n{room_text}"
    return f"Life flows back into your body. You are alive again!\n\n{room_text}"


async def recall(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if engine.combat.active:
        return "You can't concentrate on that while fighting!"

    problem = check_skill_ready(engine, RECALL_SKILL)
    if problem:
        return problem

    spend_skill(engine, RECALL_SKILL)
    result = await engine.move_to_room(engine.config.recall_room)
    if not result.success:
        return result.message
    return (
        f'You use "{skill_label(engine, RECALL_SKILL)}". The world dissolves around you...'
        f"\n\n{engine.describe_room()}"
    )


def register(router: "CommandRouter") -> None:
    router.register_handler(
        "go", go, aliases=["walk"], category="movement",
        description="Move in a direction", usage="<direction>",
    )
    for short, direction in DIRECTIONS.items():
        router.register_alias(short, f"go {direction}")
        router.register_alias(direction, f"go {direction}")

    router.register_handler(
        "respawn", respawn, category="movement",
        description="Return to the living after death", usage="[here]",
    )
    router.register_handler(
        "recall", recall, category="movement",
        description="Teleport back to the temple (skill)",
    )
