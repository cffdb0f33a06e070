# realms/engine/systems/router.py
"""
CommandRouter: Decorator-based command routing for player input.

Provides:
- @router.register() decorator and register_handler() for handler registration
- An alias table, including multi-token aliases such as "n" -> "go north"
- State gates for dead and fighting players
- Error containment: a failing handler never propagates out of dispatch()
- Command metadata and the help listing
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

from ..world import PlayerState

if TYPE_CHECKING:
    from ..engine import GameEngine

logger = logging.getLogger(__name__)

# Handlers take (engine, parsed command) and return the response text
CommandHandler = Callable[["GameEngine", "ParsedCommand"], Union[str, Awaitable[str]]]

RESPAWN_COMMAND = "respawn"
COMBAT_COMMANDS = frozenset({"flee", "look", "inventory", "stats", "use", "kick"})

DEAD_MESSAGE = "You are dead. Type 'respawn' to return to the living."
IN_COMBAT_MESSAGE = "You can't do that while fighting! Try 'flee'."
HANDLER_ERROR_MESSAGE = "Something went wrong executing that command."


@dataclass
class CommandMeta:
    """Metadata for a registered command."""
    name: str  # Primary command name
    handler: CommandHandler
    description: str = ""
    aliases: List[str] = field(default_factory=list)
    category: str = "misc"  # Command category (movement, combat, items, ...)
    usage: str = ""  # Usage string (e.g., "kill <target>")


@dataclass
class ParsedCommand:
    """A tokenized command line after alias expansion."""
    command: str
    args: List[str]
    target: str  # Arguments joined back together
    original: str

    @property
    def has_target(self) -> bool:
        return bool(self.target)


class CommandRouter:
    """
    Routes player commands to handlers.

    Usage:
        router = CommandRouter(engine)

        @router.register("look", aliases=["l"], category="info", description="Look around")
        def look(engine, cmd):
            ...

        text = await router.dispatch("l")
    """

    def __init__(self, engine: Any) -> None:
        self.engine = engine
        self.commands: Dict[str, CommandMeta] = {}  # name -> meta
        self.aliases: Dict[str, str] = {}  # token -> full command text
        self.categories: Dict[str, List[str]] = {}  # category -> [command names]

    # ---------- Registration ----------

    def register(
        self,
        name: str,
        aliases: Optional[List[str]] = None,
        category: str = "misc",
        description: str = "",
        usage: str = "",
    ) -> Callable[[CommandHandler], CommandHandler]:
        """Decorator form of register_handler()."""

        def decorator(handler: CommandHandler) -> CommandHandler:
            self.register_handler(
                name,
                handler,
                aliases=aliases,
                category=category,
                description=description,
                usage=usage,
            )
            return handler

        return decorator

    def register_handler(
        self,
        name: str,
        handler: CommandHandler,
        aliases: Optional[List[str]] = None,
        category: str = "misc",
        description: str = "",
        usage: str = "",
    ) -> None:
        """Register a command handler directly (without decorator)."""
        aliases = list(aliases or [])
        self.commands[name] = CommandMeta(
            name=name,
            handler=handler,
            description=description,
            aliases=aliases,
            category=category,
            usage=usage,
        )
        for alias in aliases:
            self.aliases[alias] = name

        names = self.categories.setdefault(category, [])
        if name not in names:
            names.append(name)

    def register_alias(self, alias: str, full_command: str) -> None:
        """Map a token onto a full command line, e.g. "n" -> "go north"."""
        self.aliases[alias.lower()] = full_command.lower()

    def get_command(self, name: str) -> CommandMeta | None:
        return self.commands.get(name)

    # ---------- Parsing ----------

    def parse(self, raw: str) -> ParsedCommand:
        original = (raw or "").strip()
        tokens = original.lower().split()
        if not tokens:
            return ParsedCommand(command="", args=[], target="", original=original)

        command, args = tokens[0], tokens[1:]
        expansion = self.aliases.get(command)
        if expansion:
            expanded = expansion.split()
            command = expanded[0]
            args = expanded[1:] + args

        return ParsedCommand(command=command, args=args, target=" ".join(args), original=original)

    # ---------- Dispatch ----------

    async def dispatch(self, raw: str) -> str:
        """Parse, gate and run a command. Always returns a string."""
        cmd = self.parse(raw)
        if not cmd.command:
            return ""

        gate = self._check_gates(cmd)
        if gate is not None:
            return gate

        meta = self.commands.get(cmd.command)
        if meta is None:
            return f"Unknown command: \"{cmd.command}\". Type 'help' for a list of commands."

        try:
            result = meta.handler(self.engine, cmd)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception("Command %r failed", cmd.original)
            return HANDLER_ERROR_MESSAGE
        return result or ""

    def _check_gates(self, cmd: ParsedCommand) -> str | None:
        player = self.engine.player
        if player.state == PlayerState.DEAD and cmd.command != RESPAWN_COMMAND:
            return DEAD_MESSAGE
        if self.engine.combat.active and cmd.command not in COMBAT_COMMANDS:
            return IN_COMBAT_MESSAGE
        return None

    # ---------- Help ----------

    def generate_help(self) -> str:
        """All commands sorted by name, with aliases and descriptions."""
        lines = ["Available commands:", ""]
        for name in sorted(self.commands):
            meta = self.commands[name]
            usage = f"{name} {meta.usage}" if meta.usage else name
            aliases = f" ({', '.join(meta.aliases)})" if meta.aliases else ""
            line = f"  {usage}{aliases}"
            if meta.description:
                line += f" - {meta.description}"
            lines.append(line)
        return "\n".join(lines)
