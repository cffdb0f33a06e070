# realms/engine/commands/system.py
"""
Save, load and debug commands.

Commands:
- save - Save the game
- load - Restore the last save
- gain <stat> <amount> - Debug: raise a stat, level, experience or hit points
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .. import formatting
from ..errors import SaveError

if TYPE_CHECKING:
    from ..engine import GameEngine
    from ..systems.router import CommandRouter, ParsedCommand

logger = logging.getLogger(__name__)

GAIN_USAGE = "Usage: gain <stat> <amount>"

GAIN_STATS = {
    "str": "strength",
    "dex": "dexterity",
    "con": "constitution",
    "int": "intelligence",
    "wis": "wisdom",
    "cha": "charisma",
    "hp": "hit_points",
    "maxhp": "max_hit_points",
    "lvl": "level",
    "exp": "experience",
}


async def save(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if await engine.save_game():
        return "Game saved."
    return "The game could not be saved."


async def load(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    try:
        loaded = await engine.load_game()
    except SaveError as exc:
        logger.warning("Loading failed: %s", exc)
        return "The saved game is damaged and could not be loaded."
    if not loaded:
        return "Save not found."
    return f"Game loaded.\n\n{engine.describe_room()}"


def _gain_experience(engine: "GameEngine", amount: int) -> str:
    player = engine.player
    level_up = player.add_experience(amount, engine.rng)
    lines = [f"You gain {amount} experience."]
    if level_up:
        lines.append(level_up.message)
        learned = engine.skills.award_message(player)
        if learned:
            lines.append(learned)
    return "\n".join(lines)


def _gain_level(engine: "GameEngine", amount: int) -> str:
    player = engine.player
    if amount <= 0:
        player.level = max(1, player.level + amount)
        return f"Your level is now {player.level}."

    lines = [player.level_up(engine.rng).message for _ in range(amount)]
    learned = engine.skills.award_message(player)
    if learned:
        lines.append(learned)
    return "\n".join(lines)


def gain(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if len(cmd.args) < 2:
        return GAIN_USAGE

    stat, raw_amount = cmd.args[0], cmd.args[1]
    try:
        amount = int(raw_amount)
    except ValueError:
        return f'"{raw_amount}" is not a number.'

    field_name = GAIN_STATS.get(stat)
    if field_name is None:
        return f'Unknown stat: "{stat}". Available: {", ".join(GAIN_STATS)}.'

    player = engine.player
    if field_name == "experience":
        return _gain_experience(engine, amount)
    if field_name == "level":
        return _gain_level(engine, amount)
    if field_name == "hit_points":
        if amount < 0:
            before = player.hit_points
            player.take_damage(-amount)
            change = player.hit_points - before
        else:
            change = player.heal(amount)
        return f"Health changed by {change:+d}. Now {player.hit_points}/{player.max_hit_points}."
    if field_name == "max_hit_points":
        player.max_hit_points = max(1, player.max_hit_points + amount)
        player.hit_points = min(player.hit_points, player.max_hit_points)
        return f"Max health changed by {amount:+d}. Now {player.hit_points}/{player.max_hit_points}."

    setattr(player, field_name, getattr(player, field_name) + amount)
    label = engine.colorize(field_name.capitalize(), formatting.ITEM_NAME)
    return f"{label} changed by {amount:+d}. New value: {getattr(player, field_name)}."


def register(router: "CommandRouter") -> None:
    router.register_handler(
        "save", save, category="system",
        description="Save the game",
    )
    router.register_handler(
        "load", load, category="system",
        description="Load the saved game",
    )
    router.register_handler(
        "gain", gain, category="debug",
        description="Debug: raise a stat", usage="<stat> <amount>",
    )
