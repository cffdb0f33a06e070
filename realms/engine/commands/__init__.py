# realms/engine/commands/__init__.py
"""
Player command handlers.

Each module groups related commands and exposes register(router). Handlers
take (engine, cmd) and return the response text.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import combat, info, items, movement, social, system

if TYPE_CHECKING:
    from ..systems.router import CommandRouter

COMMAND_MODULES = (movement, items, combat, social, info, system)


def register_all(router: "CommandRouter") -> None:
    """Register every built-in command on the router."""
    for module in COMMAND_MODULES:
        module.register(router)
