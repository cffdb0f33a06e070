"""
Tests for the CombatSystem state machine.

Rounds are driven by calling advance_round() / run_combat_round() directly,
so no timers are involved.
"""

import pytest

from realms.engine.dice import Dice
from realms.engine.systems.combat import CombatOutcome, get_ability_effect
from realms.engine.systems.events import drain
from realms.engine.world import PlayerState, SpecialAbility, WorldItem


def arm(player, damage: int = 10) -> WorldItem:
    weapon = WorldItem(id="test_blade", area="town", name="test blade", type="weapon", damage=Dice.fixed(damage))
    player.add_item(weapon)
    assert player.equip_weapon(weapon).success
    return weapon


def npc(engine, local_id):
    return engine.world.get_npc(local_id, "town")


# ============================================================================
# Encounter lifecycle
# ============================================================================


@pytest.mark.systems
@pytest.mark.asyncio
async def test_start_sets_fighting_state(engine):
    engine.player.current_room = "town:alley"
    queue = engine.channel.subscribe("test")

    assert engine.combat.start(npc(engine, "rat"))
    assert engine.combat.active
    assert engine.player.state == PlayerState.FIGHTING
    assert [e["text"] for e in drain(queue)] == ["You attack rat!"]


@pytest.mark.systems
@pytest.mark.asyncio
async def test_only_one_encounter_at_a_time(engine):
    rat, wolf = npc(engine, "rat"), npc(engine, "wolf")
    assert engine.combat.start(rat)
    encounter = engine.combat.encounter

    assert engine.combat.start(wolf) is False
    assert engine.combat.encounter is encounter
    assert engine.combat.target is rat


@pytest.mark.systems
@pytest.mark.asyncio
async def test_stop_is_idempotent(engine):
    engine.combat.start(npc(engine, "rat"))
    assert engine.combat.stop() == CombatOutcome.DISENGAGED
    assert engine.combat.stop() is None
    assert engine.player.state == PlayerState.IDLE


@pytest.mark.systems
@pytest.mark.asyncio
async def test_player_flees(engine):
    engine.player.current_room = "town:alley"
    rat = npc(engine, "rat")
    engine.start_combat(rat)

    outcome = engine.stop_combat(player_fled=True)

    assert outcome == CombatOutcome.FLED
    assert engine.combat.last_outcome == CombatOutcome.FLED
    assert not engine.combat.active
    assert engine.player.state == PlayerState.IDLE
    assert engine.player.current_room == "town:alley"
    assert rat.hit_points == rat.max_hit_points


@pytest.mark.systems
@pytest.mark.asyncio
async def test_round_without_encounter(engine):
    result = engine.combat.advance_round()
    assert result.text == ""
    assert result.outcome == CombatOutcome.DISENGAGED


@pytest.mark.systems
@pytest.mark.asyncio
async def test_round_against_dead_target(engine):
    rat = npc(engine, "rat")
    engine.combat.start(rat)
    rat.take_damage(100)

    result = engine.combat.advance_round()

    assert result.outcome == CombatOutcome.DISENGAGED
    assert not engine.combat.active


# ============================================================================
# Damage
# ============================================================================


@pytest.mark.systems
@pytest.mark.asyncio
async def test_player_damage_formula(engine):
    player = engine.player
    arm(player, 10)
    player.strength = 14  # +2

    assert engine.combat.calculate_player_damage() == 12
    assert engine.combat.calculate_player_damage("kick") == 18


@pytest.mark.systems
@pytest.mark.asyncio
async def test_player_damage_never_below_one(engine):
    arm(engine.player, 1)
    engine.player.strength = 1  # -5
    assert engine.combat.calculate_player_damage() == 1


@pytest.mark.systems
@pytest.mark.asyncio
async def test_unarmed_damage_uses_configured_dice(engine):
    rolls = {engine.combat.calculate_player_damage() for _ in range(200)}
    assert rolls <= {1, 2, 3, 4}


# ============================================================================
# Round outcomes
# ============================================================================


@pytest.mark.systems
@pytest.mark.asyncio
async def test_victory_against_eight_hp_npc(engine, clock):
    """A resolved 10-damage hit kills an 8 HP hostile outright."""
    player = engine.player
    player.current_room = "town:alley"
    arm(player, 10)
    rat = npc(engine, "rat")
    engine.start_combat(rat)

    result = engine.combat.advance_round()

    assert result.outcome == CombatOutcome.VICTORY
    assert rat.hit_points == 0
    assert player.experience == 20
    assert player.state == PlayerState.IDLE
    assert not engine.combat.active
    assert "rat" not in engine.world.get_room("town:alley").npcs
    assert engine.world.npc_room("town:rat") is None

    [entry] = engine.ticks.pending_respawns()
    assert entry.npc_id == "town:rat"
    assert entry.room_id == "town:alley"
    assert entry.respawn_at == clock.now + 30.0

    assert "town:tail" in engine.world.get_room("town:alley").items
    assert "rat has been slain!" in result.text
    assert "You gain 20 experience." in result.text


@pytest.mark.systems
@pytest.mark.asyncio
async def test_victory_level_up_awards_skill(engine):
    player = engine.player
    player.current_room = "town:alley"
    player.experience = 90
    arm(player, 10)
    engine.start_combat(npc(engine, "rat"))

    result = engine.combat.advance_round()

    assert player.level == 2
    assert player.experience == 10
    assert player.has_skill("kick")
    assert "You have reached level 2!" in result.text
    assert 'You have learned a new skill: "Kick"!' in result.text


@pytest.mark.systems
@pytest.mark.asyncio
async def test_npc_attacks_back(engine):
    player = engine.player
    player.current_room = "town:alley"
    arm(player, 2)
    rat = npc(engine, "rat")
    engine.start_combat(rat)

    result = engine.combat.advance_round()

    assert result.outcome is None
    assert rat.hit_points == 6
    assert player.hit_points == 19
    assert "rat has 75% health left." in result.text
    assert "rat hits you for 1 damage." in result.text
    assert "You have 19/20 HP left." in result.text


@pytest.mark.systems
@pytest.mark.asyncio
async def test_player_defeat(engine):
    player = engine.player
    player.current_room = "town:alley"
    player.hit_points = 1
    arm(player, 1)
    engine.start_combat(npc(engine, "rat"))

    result = engine.combat.advance_round()

    assert result.outcome == CombatOutcome.DEFEAT
    assert player.state == PlayerState.DEAD
    assert player.death_room == "town:alley"
    assert not engine.combat.active
    assert "You have died!" in result.text


@pytest.mark.systems
@pytest.mark.asyncio
async def test_npc_flees_at_threshold(engine):
    player = engine.player
    player.current_room = "town:den"
    arm(player, 10)
    wolf = npc(engine, "wolf")
    engine.start_combat(wolf)

    result = engine.combat.advance_round()

    assert result.outcome == CombatOutcome.NPC_FLED
    assert wolf.hit_points == 10
    assert engine.world.npc_room("town:wolf") == "town:alley"
    assert "wolf" not in engine.world.get_room("town:den").npcs
    assert player.state == PlayerState.IDLE
    assert "grey wolf flees in terror!" in result.text


@pytest.mark.systems
@pytest.mark.asyncio
async def test_skill_attack_is_consumed(engine):
    player = engine.player
    player.current_room = "town:alley"
    player.learn_skill("kick")
    arm(player, 2)
    engine.start_combat(npc(engine, "rat"))
    player.next_attack_skill = "kick"
    player.skill_used_this_round = True

    result = engine.combat.advance_round()

    assert 'You use "Kick" and hit rat for 3 damage.' in result.text
    assert player.next_attack_skill is None
    assert player.skill_used_this_round is False


# ============================================================================
# Special abilities
# ============================================================================


@pytest.mark.systems
def test_bark_is_registered():
    assert get_ability_effect("bark") is not None
    assert get_ability_effect("nonexistent") is None


@pytest.mark.systems
@pytest.mark.asyncio
async def test_bark_displaces_player(engine):
    player = engine.player
    player.current_room = "town:den"
    arm(player, 1)
    dog = npc(engine, "dog")
    engine.start_combat(dog)
    queue = engine.channel.subscribe("test")

    result = await engine.run_combat_round()

    assert result.outcome == CombatOutcome.DISPLACED
    assert result.relocate_to == "town:alley"
    assert result.direction == "south"
    assert player.current_room == "town:alley"
    assert player.hit_points == player.max_hit_points
    assert not engine.combat.active

    texts = [e["text"] for e in drain(queue) if e["type"] == "message"]
    assert "The dog barks at you!" in texts[0]
    assert texts[1].startswith("You go south.")


@pytest.mark.systems
@pytest.mark.asyncio
async def test_unknown_ability_is_ignored(engine, caplog):
    player = engine.player
    player.current_room = "town:den"
    arm(player, 1)
    dog = npc(engine, "dog")
    dog.special_abilities = [SpecialAbility(name="sing", chance=1.0)]
    engine.start_combat(dog)

    result = engine.combat.advance_round()

    assert result.outcome is None
    assert "wild dog hits you" in result.text
    assert "unknown ability" in caplog.text


# ============================================================================
# Driver integration
# ============================================================================


@pytest.mark.systems
@pytest.mark.asyncio
async def test_run_combat_round_publishes_and_emits_stats(engine):
    engine.player.current_room = "town:alley"
    arm(engine.player, 10)
    engine.start_combat(npc(engine, "rat"))
    queue = engine.channel.subscribe("test")

    await engine.run_combat_round()

    events = drain(queue)
    assert events[0]["type"] == "message"
    assert events[0]["kind"] == "combat"
    assert events[-1]["type"] == "stat_update"
    assert events[-1]["payload"]["experience"] == 20


@pytest.mark.systems
@pytest.mark.asyncio
async def test_run_combat_round_contains_errors(engine, monkeypatch):
    engine.start_combat(npc(engine, "rat"))

    def explode():
        raise RuntimeError("round failed")

    monkeypatch.setattr(engine.combat, "advance_round", explode)
    result = await engine.run_combat_round()

    assert result.outcome == CombatOutcome.DISENGAGED
    assert not engine.combat.active
