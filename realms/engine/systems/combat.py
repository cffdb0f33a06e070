# realms/engine/systems/combat.py
"""
CombatSystem - Handles the encounter state machine, damage and death.

Provides:
- Encounter start/stop (at most one encounter at a time)
- Round resolution: player attack, NPC flee check, special abilities, NPC attack
- Experience, level-up skill awards, loot drops and respawn scheduling
- A registry of scripted special-ability effects

advance_round() never sleeps or touches timers. The GameEngine schedules it
every round_interval seconds on the TimeEventManager and applies any
relocation the round asks for.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ...config import COMBAT_ROUND_INTERVAL
from .. import formatting
from ..dice import Dice
from ..world import PlayerState, attribute_modifier, get_global_id
from .events import KIND_COMBAT

if TYPE_CHECKING:
    from ..world import RoomId, SpecialAbility, WorldNpc, WorldRoom
    from .context import GameContext

logger = logging.getLogger(__name__)


@dataclass
class CombatConfig:
    """Configuration for combat mechanics."""
    round_interval: float = COMBAT_ROUND_INTERVAL  # Seconds between rounds
    unarmed_damage: str = "1d4"  # Damage roll with no weapon equipped


class CombatOutcome(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"
    NPC_FLED = "npc_fled"
    DISPLACED = "displaced"  # An ability forced the player out of the room
    DISENGAGED = "disengaged"  # Ended for any other reason


@dataclass
class Encounter:
    npc: "WorldNpc"
    room_id: "RoomId"
    rounds: int = 0


@dataclass
class RoundResult:
    """Text of one round plus what the driver must do next."""
    text: str
    outcome: Optional[CombatOutcome] = None  # None while the encounter continues
    relocate_to: Optional["RoomId"] = None  # Room the player must be moved to
    direction: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.outcome is not None


# =============================================================================
# Special ability effects
# =============================================================================

# An effect returns a RoundResult to end the round, or None to fall through
AbilityEffect = Callable[["CombatSystem", "SpecialAbility", List[str]], Optional[RoundResult]]

_ABILITY_EFFECTS: Dict[str, AbilityEffect] = {}


def ability_effect(name: str):
    """Decorator to register the effect of a named NPC special ability."""

    def decorator(func: AbilityEffect) -> AbilityEffect:
        _ABILITY_EFFECTS[name] = func
        return func

    return decorator


def get_ability_effect(name: str) -> AbilityEffect | None:
    return _ABILITY_EFFECTS.get(name)


@ability_effect("bark")
def _bark(combat: "CombatSystem", ability: "SpecialAbility", lines: List[str]) -> Optional[RoundResult]:
    """Scares the player through a random exit, ending the fight."""
    room = combat.ctx.current_room()
    if room is None or not room.exits:
        return None
    direction = combat.ctx.rng.choice(room.get_exits())
    target = room.exit_target(direction)

    lines.append(combat.ctx.colorize(ability.message, formatting.COMBAT_NPC_ATTACK))
    combat.stop(outcome=CombatOutcome.DISPLACED)
    return RoundResult(
        text="\n".join(lines),
        outcome=CombatOutcome.DISPLACED,
        relocate_to=target,
        direction=direction,
    )


# =============================================================================
# Combat system
# =============================================================================


class CombatSystem:
    """
    Manages the single active encounter between the player and an NPC.

    Usage:
        combat = CombatSystem(ctx, config=CombatConfig())
        combat.start(npc)
        result = combat.advance_round()
        if result.finished: ...
    """

    def __init__(self, ctx: "GameContext", config: CombatConfig | None = None) -> None:
        self.ctx = ctx
        self.config = config or CombatConfig()
        self.unarmed_damage = Dice.parse(self.config.unarmed_damage)
        self.encounter: Encounter | None = None
        self.last_outcome: CombatOutcome | None = None

    # ---------- State ----------

    @property
    def active(self) -> bool:
        return self.encounter is not None

    @property
    def target(self) -> "WorldNpc | None":
        return self.encounter.npc if self.encounter else None

    def _npc_name(self, npc: "WorldNpc") -> str:
        return self.ctx.colorize(npc.name, formatting.npc_style(npc.type.value))

    # ---------- Start / stop ----------

    def start(self, npc: "WorldNpc") -> bool:
        """Begin an encounter. Rejected while another one is active."""
        if self.encounter is not None:
            return False

        player = self.ctx.player
        player.state = PlayerState.FIGHTING
        self.encounter = Encounter(npc=npc, room_id=player.current_room)
        self.last_outcome = None
        logger.debug("Combat started against %s", npc.global_id)

        self.ctx.publish(f"You attack {self._npc_name(npc)}!", kind=KIND_COMBAT)
        return True

    def stop(self, player_fled: bool = False, outcome: CombatOutcome | None = None) -> CombatOutcome | None:
        """
        End the encounter. Safe to call when nothing is active.

        Cancelling the pending round timer is the caller's job.
        """
        if self.encounter is None:
            return None

        if outcome is None:
            outcome = CombatOutcome.FLED if player_fled else CombatOutcome.DISENGAGED

        player = self.ctx.player
        if player.state != PlayerState.DEAD:
            player.state = PlayerState.IDLE
        player.next_attack_skill = None
        player.skill_used_this_round = False

        logger.debug("Combat against %s ended: %s", self.encounter.npc.global_id, outcome.value)
        self.encounter = None
        self.last_outcome = outcome
        return outcome

    # ---------- Damage ----------

    def calculate_player_damage(self, skill_id: str | None = None) -> int:
        player = self.ctx.player
        if player.equipped_weapon and player.equipped_weapon.damage:
            base = player.equipped_weapon.damage.roll(self.ctx.rng)
        else:
            base = self.unarmed_damage.roll(self.ctx.rng)

        damage: float = base + attribute_modifier(player.strength)
        if skill_id:
            skill = self.ctx.skills.get(skill_id)
            if skill and skill.damage_multiplier:
                damage *= skill.damage_multiplier

        return max(1, math.floor(damage))

    # ---------- Rounds ----------

    def advance_round(self) -> RoundResult:
        """Resolve one full round of the active encounter."""
        if self.encounter is None:
            return RoundResult(text="", outcome=self.last_outcome or CombatOutcome.DISENGAGED)

        player = self.ctx.player
        npc = self.encounter.npc
        self.encounter.rounds += 1

        if not npc.is_alive():
            self.stop(outcome=CombatOutcome.DISENGAGED)
            return RoundResult(text="Your target is already dead.", outcome=CombatOutcome.DISENGAGED)

        player.skill_used_this_round = False
        lines: List[str] = []

        # --- Player's turn ---
        skill_id = player.next_attack_skill
        player.next_attack_skill = None
        damage = self.calculate_player_damage(skill_id)

        attack = "You hit"
        if skill_id:
            skill = self.ctx.skills.get(skill_id)
            attack = f'You use "{skill.name}" and hit' if skill else "You fumble an unknown skill and hit"

        npc_alive = npc.take_damage(damage)
        lines.append(self.ctx.colorize(
            f"{attack} {self._npc_name(npc)} for {damage} damage.", formatting.COMBAT_PLAYER_ATTACK
        ))

        if not npc_alive:
            return self._resolve_victory(npc, lines)

        percent = round(npc.health_fraction() * 100)
        lines.append(self.ctx.colorize(
            f"{self._npc_name(npc)} has {percent}% health left.", formatting.COMBAT_PLAYER_HP
        ))

        # --- NPC's turn ---
        fled = self._try_npc_flee(npc, lines)
        if fled:
            return fled

        for ability in npc.special_abilities:
            if self.ctx.rng.random() >= ability.chance:
                continue
            effect = get_ability_effect(ability.name)
            if effect is None:
                logger.warning("NPC %s has unknown ability '%s'", npc.global_id, ability.name)
                continue
            result = effect(self, ability, lines)
            if result is not None:
                return result

        return self._resolve_npc_attack(npc, lines)

    def _resolve_victory(self, npc: "WorldNpc", lines: List[str]) -> RoundResult:
        ctx = self.ctx
        player = ctx.player
        world = ctx.world
        room = ctx.current_room()

        lines.append(ctx.colorize(f"{self._npc_name(npc)} has been slain!", formatting.COMBAT_NPC_DEATH))

        if npc.experience > 0:
            level_up = player.add_experience(npc.experience, ctx.rng)
            lines.append(ctx.colorize(f"You gain {npc.experience} experience.", formatting.COMBAT_EXP_GAIN))
            if level_up:
                lines.append(ctx.colorize(level_up.message, formatting.COMBAT_EXP_GAIN))
                learned = ctx.skills.award_message(player)
                if learned:
                    lines.append(ctx.colorize(learned, formatting.COMBAT_EXP_GAIN))

        drops = npc.get_death_drops()
        if drops and room is not None:
            for local_item_id in drops:
                room.add_item(get_global_id(local_item_id, npc.area))
            lines.append(f"{self._npc_name(npc)} dropped something.")

        npc_id = npc.global_id
        room_id = world.remove_npc(npc_id) or player.current_room
        if ctx.ticks is not None:
            ctx.ticks.schedule_npc_respawn(npc_id, room_id)

        self.stop(outcome=CombatOutcome.VICTORY)
        return RoundResult(text="\n".join(lines), outcome=CombatOutcome.VICTORY)

    def _try_npc_flee(self, npc: "WorldNpc", lines: List[str]) -> RoundResult | None:
        if npc.flees_at_percent <= 0 or npc.health_fraction() > npc.flees_at_percent:
            return None

        room: "WorldRoom | None" = self.ctx.current_room()
        exits = room.same_zone_exits() if room else []
        if not exits:
            return None

        _direction, target = self.ctx.rng.choice(exits)
        if not self.ctx.world.move_npc(npc.global_id, target):
            return None

        lines.append(self.ctx.colorize(f"{npc.name} flees in terror!", formatting.COMBAT_NPC_DEATH))
        self.stop(outcome=CombatOutcome.NPC_FLED)
        return RoundResult(text="\n".join(lines), outcome=CombatOutcome.NPC_FLED)

    def _resolve_npc_attack(self, npc: "WorldNpc", lines: List[str]) -> RoundResult:
        player = self.ctx.player
        damage = npc.roll_damage(self.ctx.rng)
        player.take_damage(damage)

        lines.append(self.ctx.colorize(
            f"{self._npc_name(npc)} hits you for {damage} damage.", formatting.COMBAT_NPC_ATTACK
        ))
        lines.append(self.ctx.colorize(
            f"You have {player.hit_points}/{player.max_hit_points} HP left.", formatting.COMBAT_PLAYER_HP
        ))

        if not player.is_alive():
            lines.append(self.ctx.colorize("You have died!", formatting.COMBAT_PLAYER_DEATH))
            self.stop(outcome=CombatOutcome.DEFEAT)
            return RoundResult(text="\n".join(lines), outcome=CombatOutcome.DEFEAT)

        return RoundResult(text="\n".join(lines))
