# realms/engine/commands/items.py
"""
Item and equipment commands.

Commands:
- get <item> (take) - Pick an item up from the room
- drop <item> - Leave an item in the room
- equip <item> (wield, wear) - Equip a weapon or armor
- unequip <weapon|armor|item> (remove) - Put equipment back in the pack
- use <item> (drink, quaff) - Drink a potion
- inventory (i, inv) - Show what you carry
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import formatting
from ..world import ITEM_ARMOR, ITEM_POTION, ITEM_WEAPON

if TYPE_CHECKING:
    from ..engine import GameEngine
    from ..systems.router import CommandRouter, ParsedCommand


def get(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to get?"

    room = engine.current_room()
    item_id = room.find_item(cmd.target, engine.world) if room else None
    if item_id is None:
        return f'There is no "{cmd.target}" here.'

    item = engine.world.items[item_id]
    name = engine.item_name(item.name)
    if not item.can_take:
        return f"You can't take {name}."
    if not engine.player.can_carry(item):
        return f"{name} is too heavy for you to carry."

    room.remove_item(item_id)
    engine.player.add_item(item.snapshot())
    return f"You take {name}."


def drop(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to drop?"

    item = engine.player.find_item(cmd.target)
    if item is None:
        return f'You don\'t have "{cmd.target}".'

    room = engine.current_room()
    if room is None:
        return "There is nowhere to drop it."

    engine.player.remove_item(item.global_id)
    room.add_item(item.global_id)
    return f"You drop {engine.item_name(item.name)}."


def equip(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to equip?"

    item = engine.player.find_item(cmd.target)
    if item is None:
        return f'You don\'t have "{cmd.target}".'

    if item.type == ITEM_WEAPON:
        return engine.player.equip_weapon(item).message
    if item.type == ITEM_ARMOR:
        return engine.player.equip_armor(item).message
    return f"{engine.item_name(item.name)} can't be equipped."


def unequip(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to remove? (weapon/armor)"

    player = engine.player
    target = cmd.target
    weapon = player.equipped_weapon
    armor = player.equipped_armor

    if "weapon" in target or (weapon and weapon.matches(target)):
        return player.unequip_weapon().message
    if "armor" in target or (armor and armor.matches(target)):
        return player.unequip_armor().message
    return 'Specify "weapon" or "armor" to remove.'


def use(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to use?"

    player = engine.player
    item = player.find_item(cmd.target)
    if item is None:
        return f'You don\'t have "{cmd.target}".'

    name = engine.item_name(item.name)
    if item.type == ITEM_POTION and item.heal_amount:
        healed = player.heal(item.heal_amount)
        player.remove_item(item.global_id)
        return f"You drink {name} and recover {healed} HP."
    return f"You don't know how to use {name}."


def inventory(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    player = engine.player
    c = engine.colorize

    lines = [c("You are carrying:", formatting.ROOM_NAME)]
    if player.inventory:
        for item in player.inventory:
            lines.append(f"  {c(item.name, formatting.ITEM_NAME)}")
    else:
        lines.append("  Nothing.")

    lines.append("")
    weapon = player.equipped_weapon
    armor = player.equipped_armor
    lines.append(f"Weapon: {c(weapon.name, formatting.ITEM_NAME) if weapon else 'none'}")
    lines.append(f"Armor: {c(armor.name, formatting.ITEM_NAME) if armor else 'none'}")
    lines.append("")
    lines.append(f"Weight: {player.total_weight()}/{player.carry_capacity()}")
    lines.append(f"Gold: {player.gold}")
    return "\n".join(lines)


def register(router: "CommandRouter") -> None:
    router.register_handler(
        "get", get, aliases=["take"], category="items",
        description="Pick up an item", usage="<item>",
    )
    router.register_handler(
        "drop", drop, category="items",
        description="Drop an item", usage="<item>",
    )
    router.register_handler(
        "equip", equip, aliases=["wield", "wear"], category="items",
        description="Equip a weapon or armor", usage="<item>",
    )
    router.register_handler(
        "unequip", unequip, aliases=["remove"], category="items",
        description="Remove equipped gear", usage="<weapon|armor>",
    )
    router.register_handler(
        "use", use, aliases=["drink", "quaff"], category="items",
        description="Use an item, such as a potion", usage="<item>",
    )
    router.register_handler(
        "inventory", inventory, aliases=["i", "inv"], category="items",
        description="Show your inventory",
    )
