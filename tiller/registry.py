"""
Command registry: canonical names, aliases and lookup.

The registry owns every Command for the lifetime of its host. It is populated
only through register() and never mutated during dispatch. All access goes
through an internal re-entrant lock, so commands can be registered and
resolved from several threads without external locking.
"""
import difflib
import logging
import threading
from collections.abc import Mapping

from .commands import Command
from .faults import (
    FaultCode,
    CommandAlreadyExistsError,
    AliasAlreadyExistsError,
    CommandNotFoundError,
    getdoc,
)

logger = logging.getLogger(__name__)


class CommandsView(Mapping):
    """
    Read-only, alphabetically ordered view of canonical name -> Command.

    Ordering is computed when the view is iterated; the view reflects commands
    registered after it was created.
    """

    def __init__(self, registry, /):
        self._registry = registry

    def __getitem__(self, name):
        with self._registry._lock:
            return self._registry._commands[name]

    def __iter__(self):
        with self._registry._lock:
            names = sorted(self._registry._commands)
        return iter(names)

    def __len__(self):
        with self._registry._lock:
            return len(self._registry._commands)

    def __repr__(self):
        return f"commands-view({", ".join(map(repr, self))})"


class CommandRegistry:
    """
    Name and alias index over registered commands.

    Invariants
    - Canonical names are unique.
    - An alias never collides with another command's name or alias.
    - A failed register() leaves the registry exactly as it was.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._commands = {}
        self._aliases = {}

    def register(self, command, /):
        """
        Insert a fully-built Command.

        Raises
        - CommandAlreadyExistsError when the name is taken by a command or an alias.
        - AliasAlreadyExistsError when any alias is taken; no alias is committed.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")

        with self._lock:
            if command.name in self._commands or command.name in self._aliases:
                raise CommandAlreadyExistsError(
                    "a command with the name %r is already registered" % command.name,
                    title="command already exists",
                    code=FaultCode.COMMAND_ALREADY_EXISTS,
                    name=command.name,
                    hint="choose a different name or drop the earlier registration",
                    docs=getdoc(FaultCode.COMMAND_ALREADY_EXISTS),
                )

            # Every alias is checked before any is committed.
            for alias in command.aliases:
                if alias == command.name or alias in self._commands or alias in self._aliases:
                    owner = self._aliases.get(alias, alias)
                    raise AliasAlreadyExistsError(
                        "alias %r is already registered for command %r" % (alias, owner),
                        title="alias already exists",
                        code=FaultCode.ALIAS_ALREADY_EXISTS,
                        alias=alias,
                        name=command.name,
                        hint="remove the alias from %r or from %r" % (command.name, owner),
                        docs=getdoc(FaultCode.ALIAS_ALREADY_EXISTS),
                    )

            self._commands[command.name] = command
            for alias in command.aliases:
                self._aliases[alias] = command.name

        logger.debug("registered command %r (aliases: %s)", command.name, ", ".join(command.aliases) or "none")
        return command

    def get(self, token, default=None, /):
        """
        Return the command for a name or alias, or default.
        """
        with self._lock:
            name = self._aliases.get(token, token)
            return self._commands.get(name, default)

    def resolve(self, token, /):
        """
        Return the command for an exact name match, else an alias match.

        Raises CommandNotFoundError otherwise, with close matches as suggestions.
        """
        if (command := self.get(token)) is not None:
            return command

        with self._lock:
            known = list(self._commands) + list(self._aliases)
        suggestions = difflib.get_close_matches(token, known, n=3)
        hint = "did you mean %s?" % " or ".join(map(repr, suggestions)) if suggestions else None
        raise CommandNotFoundError(
            "command %r not found, use '--help' for available commands" % token,
            title="unknown command",
            code=FaultCode.COMMAND_NOT_FOUND,
            name=token,
            suggestions=tuple(suggestions),
            hint=hint or "run with '--help' to list the available commands",
            docs=getdoc(FaultCode.COMMAND_NOT_FOUND),
        )

    def all(self):
        """
        Lazy, alphabetically ordered view of canonical name -> Command.
        """
        return CommandsView(self)

    def __contains__(self, token):
        return self.get(token) is not None

    def __len__(self):
        with self._lock:
            return len(self._commands)

    def __repr__(self):
        return f"command-registry({", ".join(map(repr, self.all()))})"


__all__ = (
    "CommandRegistry",
    "CommandsView",
)
