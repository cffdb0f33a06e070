# realms/engine/commands/social.py
"""
Talking, trading and healing.

Commands:
- talk <npc> - Hear an NPC's next line
- say <message> - Speak to everyone in the room
- list - See what the local trader sells
- buy <item> - Buy from the trader
- sell <item> - Sell to the trader
- heal - Ask a healer to restore your health
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import formatting

if TYPE_CHECKING:
    from ..engine import GameEngine
    from ..systems.router import CommandRouter, ParsedCommand
    from ..world import WorldItem, WorldNpc

NO_TRADER_MESSAGE = "There is no trader here."


def _trader_here(engine: "GameEngine") -> "WorldNpc | None":
    for npc in engine.npcs_here():
        if npc.can_trade():
            return npc
    return None


def _shop_items(engine: "GameEngine", trader: "WorldNpc") -> "list[WorldItem]":
    wares = []
    for local_id in trader.shop:
        item = engine.world.get_item(local_id, trader.area)
        if item is not None:
            wares.append(item)
    return wares


def talk(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "Whom do you want to talk to?"

    npc = engine.find_npc_in_room(cmd.target)
    if npc is None:
        return f'There is nobody called "{cmd.target}" here.'
    return npc.speak()


def say(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to say?"

    # Keep the player's own capitalisation
    parts = cmd.original.split(None, 1)
    message = parts[1] if len(parts) > 1 else cmd.target
    lines = [f'You say: "{message}"', ""]

    responses = [npc.speak() for npc in engine.npcs_here() if npc.dialogue]
    if responses:
        lines.extend(responses)
    else:
        lines.append("Nobody answers.")
    return "\n".join(lines)


def list_wares(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    trader = _trader_here(engine)
    if trader is None:
        return NO_TRADER_MESSAGE

    wares = _shop_items(engine, trader)
    if not wares:
        return f'{engine.npc_name(trader)} says: "Sorry, I\'m sold out."'

    lines = [f"{engine.npc_name(trader)} offers:"]
    for index, item in enumerate(wares, start=1):
        lines.append(f"  {index}. {engine.item_name(item.name)} - {item.value} gold")
    lines.append("")
    lines.append("Type 'buy <item>' to buy something.")
    return "\n".join(lines)


def buy(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to buy?"

    trader = _trader_here(engine)
    if trader is None:
        return NO_TRADER_MESSAGE

    item = next((ware for ware in _shop_items(engine, trader) if ware.matches(cmd.target)), None)
    trader_name = engine.npc_name(trader)
    if item is None:
        return f'{trader_name} says: "I don\'t have anything like that."'

    player = engine.player
    if player.gold < item.value:
        return f'{trader_name} says: "That costs {item.value} gold. Come back when you can afford it."'
    if not player.can_carry(item):
        return f'{trader_name} says: "That is too heavy for you to carry."'

    player.gold -= item.value
    player.add_item(item.snapshot())
    return (
        f'{trader_name} says: "Here is your {engine.item_name(item.name)}. Enjoy!" '
        f"You pay {item.value} gold."
    )


def sell(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    if not cmd.target:
        return "What do you want to sell?"

    trader = _trader_here(engine)
    if trader is None:
        return NO_TRADER_MESSAGE

    player = engine.player
    item = player.find_item(cmd.target)
    if item is None:
        return f'You don\'t have "{cmd.target}".'

    price = item.value // 2
    player.remove_item(item.global_id)
    player.gold += price
    return (
        f'{engine.npc_name(trader)} says: "Thanks for the {engine.item_name(item.name)}!" '
        f"You receive {price} gold."
    )


def heal(engine: "GameEngine", cmd: "ParsedCommand") -> str:
    healer = next((npc for npc in engine.npcs_here() if npc.can_heal), None)
    if healer is None:
        return "There is nobody here who can heal you."

    player = engine.player
    name = engine.npc_name(healer)
    if player.hit_points >= player.max_hit_points:
        return f'{name} says: "You are already in perfect health."'

    player.heal(player.max_hit_points)
    return engine.colorize(f"{healer.name} heals your wounds. You are fully healed.", formatting.COMBAT_EXP_GAIN)


def register(router: "CommandRouter") -> None:
    router.register_handler(
        "talk", talk, category="social",
        description="Talk to someone", usage="<npc>",
    )
    router.register_handler(
        "say", say, category="social",
        description="Say something out loud", usage="<message>",
    )
    router.register_handler(
        "list", list_wares, category="trade",
        description="List a trader's wares",
    )
    router.register_handler(
        "buy", buy, category="trade",
        description="Buy an item", usage="<item>",
    )
    router.register_handler(
        "sell", sell, category="trade",
        description="Sell an item", usage="<item>",
    )
    router.register_handler(
        "heal", heal, category="social",
        description="Ask a healer for help",
    )
