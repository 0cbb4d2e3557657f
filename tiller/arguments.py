r"""
Tiller parameter model: declaration markers and the normalized Parameter.

Overview
- Markers (what command authors write)
  • Argument: tags a parameter as positional, e.g. ``input=Argument("input", descr="...")``.
  • Option: tags a parameter as a named option, e.g. ``count: int = Option("-c", "--count")``.
  Markers go either in the parameter's default slot or inside
  ``typing.Annotated[T, marker]``; the latter leaves the Python default free to
  act as the parameter default.

- Parameter (what the engine works with)
  • One formal parameter of a command, independent of how it was declared:
    name, kind (positional or option), value type, required flag, materialized
    default, position (positional only) and short/long flags (options only).

Validation highlights
- Option names must match r"--?[^\W\d_](-?[^\W_]+)*"; at most one single-dash
  (short) and one double-dash (long) name per option.
- descr strings are trimmed; empty strings are rejected.
"""
import builtins
import enum
import re

from rich.text import Text

from .coercion import unwrap, zero
from .utils import *
from .utils import IntrospectableType


class ParameterKind(enum.Enum):
    POSITIONAL = "positional"
    OPTION = "option"


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


def _sanitize_names(cls, names, /):
    """
    Internal: split option names into (short, long) without their dash prefixes.

    Accepted forms: "-c", "-vc" (short) and "--count", "--dry-run" (long).
    """
    short = long = None
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")

        if name.startswith("--"):
            if long is not None:
                raise ValueError(f"{cls.__typename__} accepts a single long name, got {long!r} and {name[2:]!r}")
            long = name[2:]
        else:
            if short is not None:
                raise ValueError(f"{cls.__typename__} accepts a single short name, got {short!r} and {name[1:]!r}")
            short = name[1:]
    return short, long


class Argument(metaclass=IntrospectableType):
    """
    Marks a command parameter as positional.

    Parameters
    - name: display name used in help and error messages; defaults to the
      Python parameter name.
    - descr: short description for help.
    - required: when True (the default) the binder reports the argument as
      missing if no token reached it.
    """
    __introspectable__ = (
        "name",
        "descr",
        "required",
    )

    def __init__(self, name=Unset, /, descr=Unset, *, required=True):
        if not isinstance(name, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        self._name = coalesce(name)
        self._descr = _sanitize_descr(type(self), descr)
        self._required = bool(required)

    def __argument__(self):
        """
        Introspection hook: identify this marker as an Argument.
        """
        return self


class Option(metaclass=IntrospectableType):
    """
    Marks a command parameter as a named option.

    Parameters
    - names: up to one short ("-c") and one long ("--count") spelling. When no
      long spelling is given the Python parameter name is used (underscores
      become hyphens).
    - descr: short description for help.
    - default: value used when the option is absent; takes precedence over the
      Python parameter default.

    Boolean options are set by presence alone; every other option consumes the
    following token as its value.
    """
    __introspectable__ = (
        "short",
        "long",
        "descr",
        "default",
    )
    __displayable__ = (
        "short",
        "long",
        "descr",
    )

    def __init__(self, *names, descr=Unset, default=Unset):
        self._short, self._long = _sanitize_names(type(self), names)
        self._descr = _sanitize_descr(type(self), descr)
        self._default = default

    def __option__(self):
        """
        Introspection hook: identify this marker as an Option.
        """
        return self


class Parameter(metaclass=IntrospectableType):
    """
    One formal parameter of a registered command.

    Built by the command extraction pass (see tiller.commands); read-only
    afterwards. The default is already materialized: the option marker
    default, else the Python default, else the zero-value of the type.
    """
    __introspectable__ = (
        "name",
        "kind",
        "type",
        "required",
        "default",
        "position",
        "short",
        "long",
        "descr",
    )
    __displayable__ = (
        "name",
        "kind",
        "type",
        "required",
        "default",
    )

    def __init__(
            self,
            name,
            kind,
            type=str,
            required=False,
            default=Unset,
            position=None,
            short=None,
            long=None,
            descr=None,
    ):
        if not isinstance(name, str) or not name:
            raise TypeError(f"{builtins.type(self).__typename__} 'name' must be a non-empty string")
        if not isinstance(kind, ParameterKind):
            raise TypeError(f"{builtins.type(self).__typename__} 'kind' must be a parameter kind")
        if kind is ParameterKind.POSITIONAL and (short or long):
            raise ValueError(f"{builtins.type(self).__typename__} positional {name!r} cannot have flags")
        if kind is ParameterKind.OPTION and not (short or long):
            raise ValueError(f"{builtins.type(self).__typename__} option {name!r} must have a flag")
        self._name = name
        self._kind = kind
        self._type = type
        self._required = bool(required)
        self._default = coalesce(default, zero(type))
        self._position = position if kind is ParameterKind.POSITIONAL else None
        self._short = short
        self._long = long
        self._descr = descr

    @property
    def positional(self):
        return self._kind is ParameterKind.POSITIONAL

    @property
    def boolean(self):
        """
        True for options satisfied by presence alone.
        """
        return unwrap(self._type)[0] is bool

    @property
    def flags(self):
        """
        Dash-prefixed spellings in display order, e.g. ("-c", "--count").
        """
        return tuple(
            prefix + flag for prefix, flag in (("-", self._short), ("--", self._long)) if flag
        )


__all__ = (
    "ParameterKind",
    "Argument",
    "Option",
    "Parameter",
)
