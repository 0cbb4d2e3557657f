"""
Tiller faults and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault,
  grouped by domain so that logs and searches stay predictable.
- CommandException: base type carrying a message plus options (code, title,
  hint and the offending identifiers); renders itself through rich.
- Registration faults (raised synchronously while building the registry) and
  dispatch faults (rendered by the host and mapped to exit code 1).
- getdoc(): optional description lookup for a code from the host application.

Tone
- Lowercased, one-sentence messages with a single actionable hint.
- Styling is configurable via __styles__ in __main__; codes can be relabelled
  via __codes__ and the program name via __prog__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - registration (101xx)
      • COMMAND_ALREADY_EXISTS, ALIAS_ALREADY_EXISTS, INVALID_COMMAND_CONFIGURATION
    - routing (111xx)
      • COMMAND_NOT_FOUND
    - binding (1111x)
      • MISSING_REQUIRED_ARGUMENT, MISSING_OPTION_VALUE, UNRECOGNIZED_ARGUMENT,
        INVALID_ARGUMENT_VALUE
    - delegated (11131)
      • DELEGATED_ERROR

    normalize() lets the host remap codes to its own labels while the numeric
    identity stays stable.
    """
    # --- registration errors (10xxx) ---
    COMMAND_ALREADY_EXISTS        = 10101
    ALIAS_ALREADY_EXISTS          = 10102
    INVALID_COMMAND_CONFIGURATION = 10111

    # --- routing errors (11xxx) ---
    COMMAND_NOT_FOUND             = 11101

    # --- binding errors (11xxx) ---
    UNRECOGNIZED_ARGUMENT         = 11112
    MISSING_OPTION_VALUE          = 11117
    INVALID_ARGUMENT_VALUE        = 11119
    MISSING_REQUIRED_ARGUMENT     = 11125

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR               = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base of every fault raised by tiller.

    message is the one-line description; options is a read-only mapping with
    the rendering metadata (code, title, hint, prog, fancy, colorful) and the
    offending identifiers (name, alias, argument, value, type, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "")), styler("prog-name"))
        code = text(self.code.normalize() if self.code else "", styler("code"))
        message = text(self.message, styler("error-message"))

        if fancy:
            header = Text.assemble(
                "[ ", prog, " — ", code, " | ",
                text(self.options.get("title", "error").title(), styler("error-title")),
                " ]"
            )
            body = [message]
            if hint := self.options.get("hint"):
                body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
            return Panel(Group(*body), title=header, title_align="left")

        # One line: the message is the whole story outside fancy mode.
        return Text.assemble("[ ", prog, " — ", code, " ] ", message)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replica = type(self).__new__(type(self))
        replica.__dict__.update(self.__dict__)
        replica.args = self.args
        replica.options = MappingProxyType({**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class CommandRegistrationError(CommandException): ...
class CommandAlreadyExistsError(CommandRegistrationError): ...
class AliasAlreadyExistsError(CommandRegistrationError): ...
class InvalidCommandConfigurationError(CommandRegistrationError): ...

class CommandNotFoundError(CommandException): ...

class ArgumentParsingError(CommandException): ...
class MissingRequiredArgumentError(ArgumentParsingError): ...
class MissingOptionValueError(ArgumentParsingError): ...
class UnrecognizedArgumentError(ArgumentParsingError): ...
class InvalidArgumentValueError(ArgumentParsingError): ...

class DelegatedCommandError(CommandException): ...


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; when absent, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "CommandRegistrationError",
    "CommandAlreadyExistsError",
    "AliasAlreadyExistsError",
    "InvalidCommandConfigurationError",
    "CommandNotFoundError",
    "ArgumentParsingError",
    "MissingRequiredArgumentError",
    "MissingOptionValueError",
    "UnrecognizedArgumentError",
    "InvalidArgumentValueError",
    "DelegatedCommandError",
    "getdoc",
)
