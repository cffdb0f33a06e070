"""
Tests for item commands: get, drop, equip, unequip, use and inventory.
"""

import pytest


def give(engine, local_id):
    item = engine.world.get_item(local_id, "town").snapshot()
    engine.player.add_item(item)
    return item


@pytest.mark.commands
@pytest.mark.asyncio
async def test_get_item(engine):
    assert await engine.process_command("get torch") == "You take torch."

    assert "town:torch" not in engine.current_room().items
    assert [i.global_id for i in engine.player.inventory] == ["town:torch"]
    # The carried copy is independent of the definition
    assert engine.player.inventory[0] is not engine.world.items["town:torch"]


@pytest.mark.commands
@pytest.mark.asyncio
async def test_take_alias_and_partial_name(engine):
    assert await engine.process_command("take TOR") == "You take torch."


@pytest.mark.commands
@pytest.mark.asyncio
async def test_get_failures(engine):
    assert await engine.process_command("get") == "What do you want to get?"
    assert await engine.process_command("get banana") == 'There is no "banana" here.'
    assert await engine.process_command("get sign") == "You can't take wooden sign."
    assert "town:sign" in engine.current_room().items


@pytest.mark.commands
@pytest.mark.asyncio
async def test_get_too_heavy(engine):
    engine.player.current_room = "town:alley"
    assert await engine.process_command("get anvil") == "anvil is too heavy for you to carry."
    assert engine.player.inventory == []


@pytest.mark.commands
@pytest.mark.asyncio
async def test_drop_item(engine):
    await engine.process_command("get torch")
    await engine.process_command("e")

    assert await engine.process_command("drop torch") == "You drop torch."
    assert "town:torch" in engine.world.get_room("town:market").items
    assert engine.player.inventory == []
    assert await engine.process_command("drop torch") == 'You don\'t have "torch".'


@pytest.mark.commands
@pytest.mark.asyncio
async def test_dropped_copies_are_all_kept(engine):
    give(engine, "tail")
    give(engine, "tail")

    await engine.process_command("drop tail")
    await engine.process_command("drop tail")

    room = engine.world.get_room("town:square")
    assert room.items.count("town:tail") == 2
    assert engine.player.inventory == []

    assert await engine.process_command("get tail") == "You take rat tail."
    assert room.items.count("town:tail") == 1
    assert len(engine.player.inventory) == 1


@pytest.mark.commands
@pytest.mark.asyncio
async def test_equip_and_unequip_weapon(engine):
    sword = give(engine, "sword")

    assert await engine.process_command("wield sword") == "You wield steel sword."
    assert engine.player.equipped_weapon is sword
    assert sword not in engine.player.inventory

    assert await engine.process_command("remove weapon") == "You unequip steel sword."
    assert engine.player.equipped_weapon is None
    assert sword in engine.player.inventory


@pytest.mark.commands
@pytest.mark.asyncio
async def test_unequip_by_item_name(engine):
    give(engine, "leather")
    assert await engine.process_command("wear leather") == "You wear leather armor."
    assert engine.player.armor_bonus() == 2

    assert await engine.process_command("unequip leather") == "You unequip leather armor."
    assert engine.player.equipped_armor is None


@pytest.mark.commands
@pytest.mark.asyncio
async def test_equip_swaps_previous_item(engine):
    give(engine, "sword")
    await engine.process_command("equip sword")
    give(engine, "sword")

    text = await engine.process_command("equip sword")

    assert text == "You put away steel sword and wield steel sword."
    assert len(engine.player.inventory) == 1


@pytest.mark.commands
@pytest.mark.asyncio
async def test_equip_failures(engine):
    give(engine, "torch")
    assert await engine.process_command("equip torch") == "torch can't be equipped."
    assert await engine.process_command("equip axe") == 'You don\'t have "axe".'
    assert await engine.process_command("unequip") == "What do you want to remove? (weapon/armor)"
    assert await engine.process_command("unequip hat") == 'Specify "weapon" or "armor" to remove.'
    assert await engine.process_command("unequip weapon") == "You have no weapon equipped."


@pytest.mark.commands
@pytest.mark.asyncio
async def test_drink_potion(engine):
    give(engine, "potion")
    engine.player.hit_points = 17

    assert await engine.process_command("drink potion") == "You drink healing potion and recover 3 HP."
    assert engine.player.hit_points == 20
    assert engine.player.inventory == []


@pytest.mark.commands
@pytest.mark.asyncio
async def test_use_non_potion(engine):
    give(engine, "torch")
    assert await engine.process_command("use torch") == "You don't know how to use torch."
    assert len(engine.player.inventory) == 1


@pytest.mark.commands
@pytest.mark.asyncio
async def test_inventory_listing(engine):
    assert (await engine.process_command("i")).splitlines() == [
        "You are carrying:",
        "  Nothing.",
        "",
        "Weapon: none",
        "Armor: none",
        "",
        "Weight: 0/100",
        "Gold: 100",
    ]

    give(engine, "torch")
    give(engine, "sword")
    await engine.process_command("wield sword")

    lines = (await engine.process_command("inventory")).splitlines()
    assert lines[1] == "  torch"
    assert "Weapon: steel sword" in lines
    assert "Weight: 1/100" in lines


@pytest.mark.commands
@pytest.mark.asyncio
async def test_inventory_allowed_in_combat(engine):
    engine.player.current_room = "town:alley"
    engine.start_combat(engine.world.get_npc("rat", "town"))
    assert (await engine.process_command("inv")).startswith("You are carrying:")
