# realms/engine/commands/helpers.py
"""Shared checks for commands that spend a skill."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine import GameEngine


def skill_label(engine: "GameEngine", skill_id: str) -> str:
    skill = engine.skills.get(skill_id)
    return skill.name if skill else skill_id.capitalize()


def check_skill_ready(engine: "GameEngine", skill_id: str) -> str | None:
    """Why the player can't use a skill right now, or None if they can."""
    player = engine.player
    name = skill_label(engine, skill_id)
    if not player.has_skill(skill_id):
        return f'You don\'t know the skill "{name}".'

    remaining = player.skill_cooldowns.get(skill_id, 0)
    if remaining > 0:
        return f'Skill "{name}" is not ready yet ({remaining} ticks left).'

    skill = engine.skills.get(skill_id)
    if skill and player.stamina < skill.cost:
        return f'You are too tired to use "{name}".'
    return None


def spend_skill(engine: "GameEngine", skill_id: str) -> None:
    """Pay the stamina cost and start the cooldown."""
    skill = engine.skills.get(skill_id)
    if skill is None:
        return
    player = engine.player
    player.stamina = max(0, player.stamina - skill.cost)
    if skill.cooldown > 0:
        player.skill_cooldowns[skill_id] = skill.cooldown
