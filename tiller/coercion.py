"""
Value coercion: raw command-line tokens into typed values.

Rules, checked in order against the target type with any `T | None` wrapper
stripped:
- str                      → identity
- int / float / Decimal    → locale-invariant numeric parse: ASCII digits with an
                             optional sign, decimal point and exponent only
- bool                     → exact, case-sensitive "true" / "false"
- Enum subclasses          → case-insensitive member-name match
- anything else            → type.fromisoformat(token) when available
                             (date, time, datetime), else type(token)

Every failure surfaces as InvalidArgumentValueError carrying the parameter
name, the offending token and the target type name; the parser exception is
kept as __cause__.
"""
import builtins
import functools
import re
import types
import typing
from decimal import Decimal
from enum import Enum

from .faults import FaultCode, InvalidArgumentValueError, getdoc

NUMERIC = (int, float, Decimal)

INTEGER = re.compile(r"[+-]?[0-9]+")
DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def unwrap(type, /):
    """
    Strip a nullable wrapper: `int | None` and `Optional[int]` become int.

    Returns (type, nullable). Unions of several non-None members are returned
    unchanged and will go through the generic conversion.
    """
    if typing.get_origin(type) in (typing.Union, types.UnionType):
        members = [member for member in typing.get_args(type) if member is not types.NoneType]
        nullable = len(members) < len(typing.get_args(type))
        if len(members) == 1:
            return members[0], nullable
        return type, nullable
    return type, False


def typename(type, /):
    """
    Human-readable name of a (possibly nullable) value type, for messages and help.
    """
    inner, nullable = unwrap(type)
    name = getattr(inner, "__name__", None) or repr(inner)
    return f"{name} | None" if nullable else name


@functools.cache
def zero(type, /):
    """
    The zero-value of a value type: what a parameter slot holds when nothing
    else supplies a default.

    None for nullable, string, enum and unknown types; 0, 0.0, Decimal(0) and
    False for the numeric and boolean family.
    """
    inner, nullable = unwrap(type)
    if nullable:
        return None
    if inner is bool:
        return False
    if inner in NUMERIC:
        return inner(0)
    return None


def _parse_bool(token):
    match token:
        case "true":
            return True
        case "false":
            return False
    raise ValueError(f"expected 'true' or 'false', got {token!r}")


def _parse_enum(token, type):
    folded = token.casefold()
    for name, member in type.__members__.items():
        if name.casefold() == folded:
            return member
    raise ValueError(f"{token!r} is not a member of {type.__name__}")


def _parse_number(token, type):
    # No underscores, no non-ASCII digits, no nan or infinity literals.
    pattern = INTEGER if type is int else DECIMAL
    if not pattern.fullmatch(token):
        raise ValueError(f"{token!r} is not a plain {type.__name__} literal")
    return type(token)


def _convert(token, type):
    if type is str:
        return token
    if type in NUMERIC:
        return _parse_number(token, type)
    if type is bool:
        return _parse_bool(token)
    if isinstance(type, builtins.type) and issubclass(type, Enum):
        return _parse_enum(token, type)
    if callable(fromisoformat := getattr(type, "fromisoformat", None)):
        return fromisoformat(token)
    return type(token)


def coerce(token, type, /, name=""):
    """
    Convert token into a value of type for the parameter called name.

    Raises InvalidArgumentValueError on any failure.
    """
    if not isinstance(token, str):
        raise TypeError("coerce() argument must be a string")
    inner, _ = unwrap(type)
    try:
        return _convert(token, inner)
    except Exception as exception:
        raise InvalidArgumentValueError(
            "invalid value %r for %r, expected type: %s" % (token, name, typename(type)),
            title="invalid value",
            code=FaultCode.INVALID_ARGUMENT_VALUE,
            name=name,
            value=token,
            type=typename(type),
            hint="pass a value that reads as %s" % typename(type),
            docs=getdoc(FaultCode.INVALID_ARGUMENT_VALUE),
        ) from exception


__all__ = (
    "coerce",
    "zero",
    "unwrap",
    "typename",
)
