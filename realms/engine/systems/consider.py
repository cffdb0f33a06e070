# realms/engine/systems/consider.py
"""
Consideration - sizing up items and opponents.

Items are described with their stats and compared against whatever the
player has equipped in the same slot. NPCs get a verdict from the ratio of
rounds the NPC needs to kill the player to rounds the player needs to kill
the NPC.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Optional, Tuple

from .. import formatting
from ..world import ITEM_ARMOR, ITEM_WEAPON, UNARMED_DAMAGE, attribute_modifier

if TYPE_CHECKING:
    from ..world import WorldItem, WorldNpc
    from .context import GameContext

# Checked top to bottom; the first threshold the ratio reaches wins
NPC_CONSIDER_THRESHOLDS: List[Tuple[float, str, str]] = [
    (2.5, "An easy victory.", formatting.COMBAT_EXP_GAIN),
    (1.5, "You will most likely win.", formatting.EXIT_NAME),
    (0.9, "A hard fight. The odds are even.", formatting.COMBAT_PLAYER_ATTACK),
    (0.6, "Very dangerous. You will most likely lose.", formatting.COMBAT_NPC_ATTACK),
    (0.0, "Run! You don't stand a chance.", formatting.COMBAT_PLAYER_DEATH),
]


def verdict_for_ratio(ratio: float) -> Tuple[str, str]:
    """(text, style) for a rounds-to-lose / rounds-to-win ratio."""
    for threshold, text, style in NPC_CONSIDER_THRESHOLDS:
        if ratio >= threshold:
            return text, style
    _, text, style = NPC_CONSIDER_THRESHOLDS[-1]
    return text, style


class ConsiderationSystem:
    def __init__(self, ctx: "GameContext") -> None:
        self.ctx = ctx

    def average_player_damage(self) -> float:
        player = self.ctx.player
        weapon = player.equipped_weapon
        dice = weapon.damage if weapon and weapon.damage else UNARMED_DAMAGE
        return max(1.0, dice.average() + attribute_modifier(player.strength))

    # ---------- Items ----------

    def consider_item(self, item: "WorldItem") -> str:
        colorize = self.ctx.colorize
        lines = [f"You consider {colorize(item.name, formatting.ITEM_NAME)}."]
        if item.description:
            lines.append(colorize(item.description, formatting.NPC_NEUTRAL))
        lines.append("")
        lines.append("Stats:")
        lines.append(f"  Type: {item.type}")
        if item.damage is not None:
            lines.append(f"  Damage: {item.damage} (avg {item.damage.average():.1f})")
        if item.armor:
            lines.append(f"  Armor: {item.armor}")
        if item.heal_amount:
            lines.append(f"  Heals: {item.heal_amount}")
        if item.weight:
            lines.append(f"  Weight: {item.weight}")
        if item.value:
            lines.append(f"  Value: {item.value} gold")

        player = self.ctx.player
        if item.type == ITEM_WEAPON:
            lines.extend(self.compare_equipment(item, player.equipped_weapon, "weapon"))
        elif item.type == ITEM_ARMOR:
            lines.extend(self.compare_equipment(item, player.equipped_armor, "armor"))
        return "\n".join(lines)

    def compare_equipment(
        self, item: "WorldItem", equipped: Optional["WorldItem"], slot_name: str
    ) -> List[str]:
        if equipped is None:
            return ["", f"You have no {slot_name} equipped to compare with."]
        if equipped is item:
            return ["", "You are already using this."]

        lines = ["", f"Compared with your {equipped.name}:"]
        better = worse = 0

        def compare(name: str, new: float, current: float, lower_is_better: bool = False) -> None:
            nonlocal better, worse
            if new == current:
                lines.append(f"  {name}: {new:.1f} (=)")
                return
            improved = new < current if lower_is_better else new > current
            diff = new - current
            style = formatting.COMBAT_EXP_GAIN if improved else formatting.COMBAT_NPC_DEATH
            if improved:
                better += 1
            else:
                worse += 1
            lines.append(f"  {name}: {new:.1f} ({self.ctx.colorize(f'{diff:+.1f}', style)})")

        if item.damage is not None and equipped.damage is not None:
            compare("Average damage", item.damage.average(), equipped.damage.average())
        if item.type == ITEM_ARMOR:
            compare("Armor", item.armor, equipped.armor)
        compare("Weight", item.weight, equipped.weight, lower_is_better=True)

        if better > worse:
            lines.append("Overall it looks better.")
        elif worse > better:
            lines.append("Overall it looks worse.")
        else:
            lines.append("Overall they are about the same.")
        return lines

    # ---------- NPCs ----------

    def consider_npc(self, npc: "WorldNpc") -> str:
        colorize = self.ctx.colorize
        lines = [f"You size up {colorize(npc.name, formatting.npc_style(npc.type.value))}."]
        if npc.description:
            lines.append(colorize(npc.description, formatting.NPC_NEUTRAL))
        lines.append("")

        player_damage = self.average_player_damage()
        npc_damage = npc.damage.average()
        if npc_damage <= 0:
            lines.append("It does not look able to hurt you.")
            return "\n".join(lines)

        rounds_to_win = max(1, math.ceil(npc.hit_points / player_damage))
        rounds_to_lose = max(1, math.ceil(self.ctx.player.hit_points / npc_damage))

        lines.append(f"  Your average damage: {player_damage:.1f}")
        lines.append(f"  Its average damage: {npc_damage:.1f}")
        lines.append(f"  Rounds to defeat it: {rounds_to_win}")
        lines.append(f"  Rounds until it defeats you: {rounds_to_lose}")

        text, style = verdict_for_ratio(rounds_to_lose / rounds_to_win)
        lines.append(f"Verdict: {colorize(text, style)}")
        return "\n".join(lines)
