# realms/engine/formatting.py
"""
Text styling hook.

The engine tags text with a style name and hands it to a colorizer. The
colorizer never affects game state: the default one returns text unchanged,
the CLI swaps in an ANSI one built on click.style.
"""

from __future__ import annotations

import textwrap
from typing import Callable, Dict

import click

Colorizer = Callable[[str, str], str]

# Style tags used across the engine
ROOM_NAME = "room-name"
EXIT_NAME = "exit-name"
ITEM_NAME = "item-name"
NPC_DEAD = "npc-dead"
NPC_NEUTRAL = "npc-neutral"
PLAYER_DEAD = "player-dead"
COMBAT_PLAYER_ATTACK = "combat-player-attack"
COMBAT_PLAYER_HP = "combat-player-hp"
COMBAT_NPC_ATTACK = "combat-npc-attack"
COMBAT_NPC_DEATH = "combat-npc-death"
COMBAT_PLAYER_DEATH = "combat-player-death"
COMBAT_EXP_GAIN = "combat-exp-gain"
SYSTEM = "system"

DESCRIPTION_WIDTH = 78


def npc_style(npc_type: str) -> str:
    """Style tag for an NPC name, e.g. 'npc-name npc-hostile'."""
    return f"npc-name npc-{npc_type}"


def plain_colorizer(text: str, style: str) -> str:
    return text


def wrap(text: str, width: int = DESCRIPTION_WIDTH) -> str:
    """Word-wrap a block of prose, keeping blank-line paragraph breaks."""
    paragraphs = text.split("\n\n")
    return "\n\n".join(textwrap.fill(p.strip(), width=width) for p in paragraphs if p.strip())


class AnsiColorizer:
    """Maps style tags onto terminal colours."""

    STYLES: Dict[str, dict] = {
        ROOM_NAME: {"fg": "cyan", "bold": True},
        EXIT_NAME: {"fg": "green"},
        ITEM_NAME: {"fg": "yellow"},
        NPC_DEAD: {"fg": "bright_black"},
        NPC_NEUTRAL: {"fg": "white"},
        PLAYER_DEAD: {"fg": "bright_black", "italic": True},
        COMBAT_PLAYER_ATTACK: {"fg": "bright_white"},
        COMBAT_PLAYER_HP: {"fg": "blue"},
        COMBAT_NPC_ATTACK: {"fg": "red"},
        COMBAT_NPC_DEATH: {"fg": "magenta"},
        COMBAT_PLAYER_DEATH: {"fg": "red", "bold": True},
        COMBAT_EXP_GAIN: {"fg": "bright_green"},
        SYSTEM: {"fg": "bright_black"},
        "npc-friendly": {"fg": "green"},
        "npc-neutral": {"fg": "white"},
        "npc-hostile": {"fg": "red"},
    }

    def __call__(self, text: str, style: str) -> str:
        # Compound tags ("npc-name npc-hostile") use the most specific known part
        for tag in reversed(style.split()):
            params = self.STYLES.get(tag)
            if params:
                return click.style(text, **params)
        return text
