"""
Unit tests for world entities: global ids, NPC and player invariants,
levelling, inventory and equipment.
"""

import random

import pytest

from realms.engine.world import (
    NpcType,
    PlayerState,
    WorldItem,
    WorldNpc,
    WorldPlayer,
    attribute_modifier,
    get_global_id,
    parse_global_id,
)

# ============================================================================
# Global ids
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("local_id", ["center", "room:with:colons", "a", ":leading", "trailing:"])
def test_global_id_round_trip(local_id):
    global_id = get_global_id(local_id, "midgard")
    assert parse_global_id(global_id) == ("midgard", local_id)


@pytest.mark.unit
def test_parse_global_id_splits_on_first_separator():
    assert parse_global_id("area:local:part") == ("area", "local:part")


@pytest.mark.unit
def test_attribute_modifier():
    assert attribute_modifier(10) == 0
    assert attribute_modifier(11) == 0
    assert attribute_modifier(12) == 1
    assert attribute_modifier(9) == -1
    assert attribute_modifier(3) == -4


# ============================================================================
# NPCs
# ============================================================================


def make_npc(**kwargs) -> WorldNpc:
    defaults = dict(id="rat", area="town", name="rat", type=NpcType.HOSTILE, hit_points=8, max_hit_points=8)
    defaults.update(kwargs)
    return WorldNpc(**defaults)


@pytest.mark.unit
@pytest.mark.parametrize("damage", [0, 1, 7, 8, 9, 1000])
def test_npc_hit_points_clamped(damage):
    npc = make_npc()
    alive = npc.take_damage(damage)
    assert 0 <= npc.hit_points <= npc.max_hit_points
    assert alive == npc.is_alive() == (npc.hit_points > 0)


@pytest.mark.unit
def test_npc_heal_clamped_and_reports_amount():
    npc = make_npc()
    npc.take_damage(5)
    assert npc.heal(100) == 5
    assert npc.hit_points == npc.max_hit_points


@pytest.mark.unit
def test_npc_construction_clamps_hit_points():
    assert make_npc(hit_points=50, max_hit_points=10).hit_points == 10


@pytest.mark.unit
def test_npc_dialogue_cycles():
    npc = make_npc(dialogue=["one", "two"])
    assert npc.speak() == 'rat says: "one"'
    assert npc.speak() == 'rat says: "two"'
    assert npc.speak() == 'rat says: "one"'


@pytest.mark.unit
def test_npc_respawn_restores_health():
    npc = make_npc()
    npc.take_damage(100)
    npc.respawn()
    assert npc.is_alive()
    assert npc.hit_points == npc.max_hit_points


@pytest.mark.unit
def test_npc_drops_always_granted():
    npc = make_npc(drops=["tail", "fang"])
    assert npc.get_death_drops() == ["tail", "fang"]


# ============================================================================
# Player health and levelling
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("damage", [0, 5, 19, 20, 500])
def test_player_hit_points_clamped(damage):
    player = WorldPlayer()
    player.take_damage(damage)
    assert 0 <= player.hit_points <= player.max_hit_points
    assert player.is_alive() == (player.hit_points > 0)


@pytest.mark.unit
def test_player_death_records_room():
    player = WorldPlayer(current_room="town:alley")
    assert player.take_damage(100) is False
    assert player.state == PlayerState.DEAD
    assert player.death_room == "town:alley"


@pytest.mark.unit
def test_player_heal_returns_amount_healed():
    player = WorldPlayer()
    player.take_damage(5)
    assert player.heal(3) == 3
    assert player.heal(10) == 2
    assert player.hit_points == player.max_hit_points


@pytest.mark.unit
def test_level_up():
    player = WorldPlayer()
    player.experience = 130
    result = player.level_up(random.Random(0))

    assert result.level == 2
    assert player.level == 2
    assert player.experience == 30
    assert player.experience_to_next == 200
    assert player.max_hit_points == 25
    assert player.hit_points == 25
    assert player.max_stamina == 110
    assert result.attribute in result.message


@pytest.mark.unit
def test_level_up_never_leaves_negative_experience():
    player = WorldPlayer()
    player.level_up(random.Random(0))
    assert player.experience == 0


@pytest.mark.unit
def test_add_experience_levels_multiple_times():
    player = WorldPlayer()
    result = player.add_experience(350, random.Random(0))
    # 100 to reach level 2, 200 to reach level 3, 50 left over
    assert player.level == 3
    assert player.experience == 50
    assert result.level == 3


@pytest.mark.unit
def test_add_experience_without_level_returns_none():
    player = WorldPlayer()
    assert player.add_experience(10) is None
    assert player.experience == 10


@pytest.mark.unit
@pytest.mark.parametrize("chunks", [[350], [100, 250], [50, 50, 50, 200], [1] * 350])
def test_levelling_is_associative(chunks):
    """Many small grants end where one big grant does."""
    split = WorldPlayer()
    for amount in chunks:
        split.add_experience(amount, random.Random(0))

    whole = WorldPlayer()
    whole.add_experience(sum(chunks), random.Random(0))

    assert split.level == whole.level
    assert split.experience == whole.experience
    assert split.experience_to_next == whole.experience_to_next
    assert split.max_hit_points == whole.max_hit_points
    assert split.max_stamina == whole.max_stamina


# ============================================================================
# Inventory and equipment
# ============================================================================


def make_item(item_id: str, **kwargs) -> WorldItem:
    return WorldItem(id=item_id, area="town", name=kwargs.pop("name", item_id), **kwargs)


@pytest.mark.unit
def test_can_carry_respects_strength():
    player = WorldPlayer(strength=10)
    player.add_item(make_item("rock", weight=95))
    assert player.can_carry(make_item("pebble", weight=5))
    assert not player.can_carry(make_item("boulder", weight=6))


@pytest.mark.unit
def test_find_and_remove_item():
    player = WorldPlayer()
    torch = make_item("torch", name="wooden torch")
    player.add_item(torch)
    assert player.find_item("WOODEN") is torch
    assert player.remove_item("town:torch") is torch
    assert player.remove_item("town:torch") is None


@pytest.mark.unit
def test_equip_weapon_swaps_with_previous():
    player = WorldPlayer()
    dagger = make_item("dagger", type="weapon")
    sword = make_item("sword", type="weapon")
    player.add_item(dagger)
    player.add_item(sword)

    assert player.equip_weapon(dagger).success
    assert player.equipped_weapon is dagger
    assert dagger not in player.inventory

    result = player.equip_weapon(sword)
    assert result.success
    assert result.previous is dagger
    assert player.equipped_weapon is sword
    assert dagger in player.inventory
    assert sword not in player.inventory


@pytest.mark.unit
def test_equip_rejects_wrong_type():
    player = WorldPlayer()
    bread = make_item("bread")
    player.add_item(bread)
    assert not player.equip_weapon(bread).success
    assert not player.equip_armor(bread).success
    assert bread in player.inventory


@pytest.mark.unit
def test_equip_rejected_when_previous_does_not_fit():
    player = WorldPlayer(strength=1)  # Capacity 10
    heavy = make_item("plate", type="armor", weight=8)
    light = make_item("cloth", type="armor", weight=4)
    player.add_item(heavy)
    assert player.equip_armor(heavy).success

    player.add_item(light)
    player.add_item(make_item("rock", weight=6))
    result = player.equip_armor(light)

    assert not result.success
    assert player.equipped_armor is heavy
    assert light in player.inventory


@pytest.mark.unit
def test_unequip_rejected_when_pack_is_full():
    player = WorldPlayer(strength=1)
    sword = make_item("sword", type="weapon", weight=5)
    player.add_item(sword)
    player.equip_weapon(sword)
    player.add_item(make_item("rock", weight=8))

    assert not player.unequip_weapon().success
    assert player.equipped_weapon is sword


@pytest.mark.unit
def test_unequip_returns_item_to_pack():
    player = WorldPlayer()
    sword = make_item("sword", type="weapon", weight=5)
    player.add_item(sword)
    player.equip_weapon(sword)

    assert player.unequip_weapon().success
    assert player.equipped_weapon is None
    assert sword in player.inventory
    assert not player.unequip_weapon().success


@pytest.mark.unit
def test_total_defense():
    player = WorldPlayer(dexterity=14)
    armor = make_item("leather", type="armor", armor=2)
    player.add_item(armor)
    player.equip_armor(armor)
    assert player.total_defense() == 10 + 2 + 2


# ============================================================================
# Serialization
# ============================================================================


@pytest.mark.unit
def test_player_dict_round_trip():
    player = WorldPlayer(name="Sigrid", gold=42, current_room="town:market")
    sword = make_item("sword", type="weapon", weight=5)
    player.add_item(sword)
    player.equip_weapon(sword)
    player.add_item(make_item("torch"))
    player.learn_skill("kick")
    player.skill_cooldowns["recall"] = 3

    data = player.to_dict()
    assert data["skills"] == ["kick"]

    restored = WorldPlayer.from_dict(data)
    assert restored.name == "Sigrid"
    assert restored.gold == 42
    assert restored.current_room == "town:market"
    assert restored.equipped_weapon.global_id == "town:sword"
    assert [item.global_id for item in restored.inventory] == ["town:torch"]
    assert restored.skills == {"kick"}
    assert restored.skill_cooldowns == {"recall": 3}


@pytest.mark.unit
def test_player_from_dict_fills_defaults():
    restored = WorldPlayer.from_dict({"name": "Bare"})
    assert restored.level == 1
    assert restored.hit_points == 20
    assert restored.strength == 10
    assert restored.state == PlayerState.IDLE
