"""
Tiller host: owns the registry and the output console, and dispatches tokens.

Dispatch (Host.run_async)
- no tokens, or a first token among --help / -h / help → global help, exit 0
- first token resolved by name, then alias; unknown → CommandNotFoundError is
  raised for the caller (Host.main renders it)
- --help / -h anywhere after the command → command help, exit 0
- otherwise bind, invoke (awaiting coroutines) and map the outcome to an exit
  code; parsing faults and target failures are rendered and give exit 1

Quick start
    from tiller import Host, command, Argument, Option

    host = Host("demo", "A demo application")

    @host.command("add", descr="Add two numbers")
    def add(a: int = Argument(), b: int = Argument(), *, verbose: bool = Option("-v")) -> int:
        print(a + b)
        return 0

    if __name__ == "__main__":
        host.main()
"""
import asyncio
import copy
import logging
import shlex
import sys
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .binding import bind
from .commands import Command, command, discover
from .faults import (
    FaultCode,
    CommandException,
    ArgumentParsingError,
    DelegatedCommandError,
    getdoc,
)
from .registry import CommandRegistry
from .rendering import render_help, render_command_help
from .utils import *

logger = logging.getLogger(__name__)

GLOBAL_HELP = frozenset(("--help", "-h", "help"))
COMMAND_HELP = frozenset(("--help", "-h"))


def _sanitize_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValueError("application name must be set using .name()")
    return name.strip()


def _tokenize(prompt):
    """
    Normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:]
    - str: shell-like string, split with shlex
    - Iterable[str]: used as-is
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("prompt must be a string or an iterable of strings")
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


def _innermost(exception):
    seen = {id(exception)}
    while exception.__cause__ is not None and id(exception.__cause__) not in seen:
        exception = exception.__cause__
        seen.add(id(exception))
    return exception


class Host:
    """
    A command-line application: a name, a registry of commands and a console.

    Parameters
    - name: program name shown in help and fault headers (required).
    - descr: one-line application description for the global help.
    - console: rich Console that receives help and faults; when given, the host
      takes ownership and close() closes its file.
    - custom_help: replaces the global help verbatim.
    - fancy: render help and faults inside panels.
    - colorful: apply the styling palette.
    """

    def __init__(self, name, /, descr=None, *, console=None, custom_help=None, fancy=False, colorful=True):
        self._name = _sanitize_name(name)
        self._descr = descr.strip() or None if isinstance(descr, str) else descr
        self._owned = console is not None
        self._console = console if console is not None else Console()
        self._custom_help = custom_help
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._registry = CommandRegistry()
        self._closed = False

    @property
    def name(self):
        return self._name

    @property
    def descr(self):
        return self._descr

    @property
    def console(self):
        return self._console

    @property
    def registry(self):
        return self._registry

    @classmethod
    def builder(cls):
        return HostBuilder(cls)

    def register(self, target, /, name=Unset, descr=Unset, aliases=Unset):
        """
        Register a Command, or build one from a callable and register it.

        Declaration metadata stored by @command fills whatever is not passed
        explicitly.
        """
        if isinstance(target, Command):
            if name is not Unset or descr is not Unset or aliases is not Unset:
                raise TypeError("register() cannot override the metadata of a built command")
            return self._registry.register(target)

        declaration = dict(getattr(target, "__command__", {}))
        if name is not Unset:
            declaration["name"] = name
        if descr is not Unset:
            declaration["descr"] = descr
        if aliases is not Unset:
            declaration["aliases"] = aliases
        return self._registry.register(Command(target, **declaration))

    def register_commands(self, container, /):
        """
        Register every @command-tagged callable of a module, class or instance.

        Returns the registered commands. Registration stops at the first
        conflict; commands registered before it stay registered.
        """
        return [self._registry.register(command) for command in discover(container)]

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Decorator form of register(): tag the callable and register it now.
        """
        if callable(source):
            self.register(command(source, *args, **kwargs))
            return source

        @rename("command")
        def wrapper(target, /):
            self.register(command(source, *args, **kwargs)(target))
            return target

        return wrapper

    def show_help(self):
        if self._custom_help is not None:
            help = Text(self._custom_help) if isinstance(self._custom_help, str) else self._custom_help
        else:
            help = render_help(self._registry, self._name, self._descr, colorful=self._colorful)
        self._print(help, title="help")

    def show_command_help(self, command, /):
        self._print(render_command_help(command, self._name, colorful=self._colorful), title=f"{command.name} help")

    def report(self, fault, /):
        """
        Render a fault on the host console with the host's runtime options.
        """
        self._console.print(copy.replace(fault, prog=self._name, fancy=self._fancy, colorful=self._colorful))

    def _print(self, renderable, *, title):
        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{self._name} {title}".upper(), " ]"),
                title_align="left",
            )
        self._console.print(renderable)

    async def run_async(self, prompt=Unset, /):
        """
        Dispatch one invocation and return its exit code.

        Raises CommandNotFoundError when the first token names no command.
        """
        if self._closed:
            raise RuntimeError("host is closed")
        tokens = _tokenize(prompt)

        if not tokens or tokens[0] in GLOBAL_HELP:
            self.show_help()
            return 0

        command = self._registry.resolve(tokens[0])
        logger.debug("resolved %r to command %r", tokens[0], command.name)

        arguments = tokens[1:]
        if any(token in COMMAND_HELP for token in arguments):
            self.show_command_help(command)
            return 0

        try:
            bound = bind(command, arguments)
        except ArgumentParsingError as fault:
            logger.debug("binding %r failed: %s", command.name, fault)
            self.report(fault)
            return 1

        try:
            outcome = await command.execute(bound)
        except Exception as exception:
            cause = _innermost(exception)
            logger.debug("command %r failed", command.name, exc_info=exception)
            self.report(DelegatedCommandError(
                "error executing command %r: %s" % (command.name, str(cause) or type(cause).__name__),
                title="command failed",
                code=FaultCode.DELEGATED_ERROR,
                name=command.name,
                cause=cause,
                hint="the command itself failed; its arguments were accepted",
                docs=getdoc(FaultCode.DELEGATED_ERROR),
            ))
            return 1

        logger.debug("command %r finished with %r", command.name, outcome)
        return outcome.code

    def run(self, prompt=Unset, /):
        """
        Synchronous wrapper over run_async(); must not be called from a running event loop.
        """
        return asyncio.run(self.run_async(prompt))

    def main(self, prompt=Unset, /):
        """
        Process entry point: dispatch, render any escaping fault, exit with the code.
        """
        try:
            code = self.run(prompt)
        except CommandException as fault:
            self.report(fault)
            code = 1
        sys.exit(code)

    def close(self):
        """
        Close the file behind a console handed to the host; the default
        console and the standard streams are never closed.
        """
        if self._closed:
            return
        self._closed = True
        file = self._console.file
        if self._owned and file not in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__):
            file.close()

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.close()

    def __repr__(self):
        return f"host(name={self._name!r}, descr={self._descr!r}, commands={len(self._registry)})"


class HostBuilder:
    """
    Fluent construction of a Host; build() validates the name.
    """

    def __init__(self, cls=Host, /):
        self._cls = cls
        self._options = {}
        self._name = Unset

    def name(self, name, /):
        self._name = name
        return self

    def descr(self, descr, /):
        self._options["descr"] = descr
        return self

    def console(self, console, /):
        self._options["console"] = console
        return self

    def custom_help(self, message, /):
        self._options["custom_help"] = message
        return self

    def fancy(self, fancy=True, /):
        self._options["fancy"] = fancy
        return self

    def colorful(self, colorful=True, /):
        self._options["colorful"] = colorful
        return self

    def build(self):
        return self._cls(_sanitize_name(self._name), **self._options)


__all__ = (
    "Host",
    "HostBuilder",
)
