"""
Tiller command layer: declare commands and turn callables into Command records.

What this module provides
- command(...): decorator that tags a function or method with a command name,
  description and aliases. Tagged callables are picked up by discover() and by
  Host.register_commands().
- Command: the registered unit of execution. Built from a target callable, it
  inspects the signature once, materializes the Parameter model and validates
  the declaration (duplicate names or flags, unsupported return shapes) before
  the command is ever eligible for dispatch.
- Success / SuccessWithCode: the closed result variant every invocation is
  normalized to.

Quick start
    from typing import Annotated
    from tiller import Host, command, Argument, Option

    class Tools:
        @command("greet", descr="Say hello", aliases=("g",))
        def greet(self, name=Argument("name", descr="Who to greet"),
                  times: Annotated[int, Option("-t", "--times")] = 1):
            for _ in range(times):
                print(f"hello {name}")

    host = Host("demo")
    host.register_commands(Tools())
    host.main()

Design notes
- Markers live in the default slot (``x=Option(...)``) or in Annotated metadata.
- Positional-only Python parameters are passed positionally; every other
  parameter is passed by keyword, so declaration order never conflicts with
  Python's calling rules.
- Return shapes are decided here, at registration, not at call time.
"""
import collections
import collections.abc
import inspect
import logging
import re
import typing
from types import MappingProxyType, NoneType

from rich.text import Text

from .arguments import Parameter, ParameterKind
from .faults import FaultCode, InvalidCommandConfigurationError, getdoc
from .utils import *
from .utils import IntrospectableType

logger = logging.getLogger(__name__)


class Success(collections.namedtuple("Success", ())):
    """
    The target completed without an exit code of its own.
    """
    __slots__ = ()
    code = 0


class SuccessWithCode(collections.namedtuple("SuccessWithCode", ("code",))):
    """
    The target completed and returned an integer exit code.
    """
    __slots__ = ()


BoundArguments = collections.namedtuple("BoundArguments", ("args", "kwargs"))


def _void(result):
    return Success()


def _coded(result):
    return SuccessWithCode(int(result))


def _inferred(result):
    # Unannotated targets: an int (never a bool) is an exit code, anything else is success.
    if isinstance(result, int) and not isinstance(result, bool):
        return SuccessWithCode(result)
    return Success()


def _fault(target, message, /):
    return InvalidCommandConfigurationError(
        message,
        title="invalid command configuration",
        code=FaultCode.INVALID_COMMAND_CONFIGURATION,
        name=getattr(target, "__qualname__", repr(target)),
        hint="fix the command declaration; this is a programming error, not a usage error",
        docs=getdoc(FaultCode.INVALID_COMMAND_CONFIGURATION),
    )


def _resolve_marker(target, name, candidates):
    """
    Return the single Argument/Option marker among candidates, or None.
    """
    markers = []
    for candidate in candidates:
        if hasattr(candidate, "__argument__") and callable(candidate.__argument__):
            markers.append(candidate.__argument__())
        elif hasattr(candidate, "__option__") and callable(candidate.__option__):
            markers.append(candidate.__option__())
    if len(markers) > 1:
        raise _fault(target, f"parameter {name!r} carries more than one argument or option marker")
    return markers[0] if markers else None


def _process_source(cls, target):
    """
    Introspect the target callable and materialize its Parameter model.

    Returns
    - (parameters, slots, asynchronous, outcome) where slots pairs every
      parameter with its Python name and whether it is passed positionally.

    Errors
    - TypeError/ValueError for non-callable or non-inspectable targets.
    - InvalidCommandConfigurationError for declarations that can never be
      dispatched (variadic parameters, duplicate names or flags, unresolvable
      annotations, unsupported return types).
    """
    try:
        signature = inspect.signature(target, eval_str=True)
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'target' must be callable") from None
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'target' must be an inspectable callable") from None
    except (NameError, SyntaxError) as exception:
        raise _fault(target, f"annotations of {target.__qualname__!r} cannot be resolved: {exception}") from exception

    parameters = []
    slots = []
    names = set()
    flags = set()
    position = 0

    for pyname, parameter in signature.parameters.items():
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise _fault(target, f"variadic parameter {pyname!r} cannot be bound from command-line tokens")

        annotation = parameter.annotation
        metadata = ()
        if typing.get_origin(annotation) is typing.Annotated:
            metadata = annotation.__metadata__
            annotation = annotation.__origin__

        default = parameter.default
        marker = _resolve_marker(target, pyname, metadata)
        if marker is None and (marker := _resolve_marker(target, pyname, (default,))) is not None:
            # The marker sits in the default slot, so there is no Python default.
            default = inspect.Parameter.empty

        declared = Unset if default is inspect.Parameter.empty else default
        if hasattr(marker, "__option__") and marker.default is not Unset:
            declared = marker.default

        if annotation is inspect.Parameter.empty:
            annotation = type(declared) if declared is not Unset and declared is not None else str

        if marker is not None and hasattr(marker, "__option__"):
            long = marker.long or pyname.strip("_").replace("_", "-")
            record = Parameter(
                pyname,
                ParameterKind.OPTION,
                type=annotation,
                required=declared is Unset,
                default=declared,
                short=marker.short,
                long=long,
                descr=marker.descr,
            )
            for flag in record.flags:
                if flag in flags:
                    raise _fault(target, f"flag {flag!r} is declared by more than one option")
                flags.add(flag)
        else:
            record = Parameter(
                getattr(marker, "name", None) or pyname,
                ParameterKind.POSITIONAL,
                type=annotation,
                required=marker.required if marker is not None else declared is Unset,
                default=declared,
                position=position,
                descr=getattr(marker, "descr", None),
            )
            position += 1

        if record.name in names:
            raise _fault(target, f"duplicate parameter names found: {record.name!r}")
        names.add(record.name)

        parameters.append(record)
        slots.append((pyname, parameter.kind is inspect.Parameter.POSITIONAL_ONLY))

    asynchronous, outcome = _process_return(target, signature.return_annotation)
    return tuple(parameters), tuple(slots), asynchronous, outcome


def _process_return(target, annotation):
    """
    Decide, once, how the target's result maps onto Success / SuccessWithCode.
    """
    asynchronous = inspect.iscoroutinefunction(target)
    origin = typing.get_origin(annotation)

    if not asynchronous and origin in (collections.abc.Awaitable, collections.abc.Coroutine):
        asynchronous = True
        annotation = typing.get_args(annotation)[-1] if typing.get_args(annotation) else inspect.Parameter.empty

    if annotation is inspect.Parameter.empty or annotation is typing.Any:
        return asynchronous, _inferred
    if annotation is None or annotation is NoneType:
        return asynchronous, _void
    if annotation is int:
        return asynchronous, _coded

    raise _fault(target, f"unsupported return type {annotation!r}, expected None or int")


def _sanitize_declaration(name=Unset, descr=Unset, aliases=()):
    """
    Validate command-level metadata shared by the decorator and Command itself.
    """
    if not isinstance(name, str | Unset):
        raise TypeError("command 'name' must be a string")
    if isinstance(name, str) and not re.fullmatch(r"\S+", name := name.strip()):
        raise ValueError("command 'name' must be a non-empty string without whitespace")

    if not isinstance(descr, str | Text | Unset | None):
        raise TypeError("command 'descr' must be a string")
    if isinstance(descr, str):
        descr = descr.strip() or None

    if isinstance(aliases, str) or not isinstance(aliases, collections.abc.Iterable):
        raise TypeError("command 'aliases' must be an iterable of strings")
    sanitized = []
    for alias in aliases:
        if not isinstance(alias, str):
            raise TypeError("command 'aliases' must be an iterable of strings")
        if not re.fullmatch(r"\S+", alias := alias.strip()):
            raise ValueError("command aliases must be non-empty strings without whitespace")
        if alias in sanitized or alias == name:
            raise ValueError(f"command alias {alias!r} is repeated")
        sanitized.append(alias)

    return name, coalesce(descr), tuple(sanitized)


class Command(metaclass=IntrospectableType):
    """
    One registered unit of execution.

    Properties
    - name: canonical identifier (defaults to the target's __name__ with
      underscores turned into hyphens).
    - aliases: alternate names.
    - descr: help text (falls back to the first line of the target docstring).
    - parameters: Parameter records in declaration order.
    - asynchronous: whether the target must be awaited.
    - target: the bound callable.
    """
    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "parameters",
        "asynchronous",
        "target",
    )
    __displayable__ = (
        "name",
        "aliases",
        "descr",
        "asynchronous",
    )

    def __init__(self, target, /, name=Unset, descr=Unset, aliases=()):
        if not callable(target):
            raise TypeError(f"{type(self).__typename__} 'target' must be callable")
        name, descr, aliases = _sanitize_declaration(name, descr, aliases)

        if name is Unset:
            name = getattr(target, "__name__", "").strip("_").replace("_", "-")
            if not name:
                raise ValueError(f"{type(self).__typename__} 'name' cannot be derived from {target!r}")
        if descr is None and (doc := inspect.getdoc(target)):
            descr = doc.splitlines()[0].strip() or None

        self._target = target
        self._name = name
        self._descr = descr
        self._aliases = aliases
        self._parameters, self._slots, self._asynchronous, self._outcome = _process_source(type(self), target)

    @property
    def positionals(self):
        return tuple(parameter for parameter in self._parameters if parameter.positional)

    @property
    def options(self):
        return tuple(parameter for parameter in self._parameters if not parameter.positional)

    def arrange(self, values, /):
        """
        Pack per-parameter values (declaration order) into call arguments.
        """
        args = []
        kwargs = {}
        for (pyname, positional), value in zip(self._slots, values, strict=True):
            if positional:
                args.append(value)
            else:
                kwargs[pyname] = value
        return BoundArguments(tuple(args), kwargs)

    async def execute(self, bound, /):
        """
        Call the target with bound arguments and normalize its result.

        Exceptions raised by the target propagate unchanged; the dispatcher
        decides how to present them.
        """
        result = self._target(*bound.args, **bound.kwargs)
        # Unannotated wrappers (lambdas, partials) may still hand back an awaitable.
        if self._asynchronous or (self._outcome is _inferred and inspect.isawaitable(result)):
            result = await result
        return self._outcome(result)


def command(source=Unset, /, *args, **kwargs):
    """
    Tag a callable as a command, or return a decorator that will.

    Invocation modes
    - @command                          name derived from the function
    - @command("build", descr="...")    explicit name
    - @command(descr="...", aliases=("b",))

    The callable is returned unchanged (still directly callable); the metadata
    is stored on it as __command__ and consumed at registration time.
    """
    decorable = callable(source) or isinstance(source, classmethod)
    name, descr, aliases = _sanitize_declaration(Unset if decorable else source, *args, **kwargs)

    declaration = MappingProxyType({"name": name, "descr": descr, "aliases": aliases})

    @rename("command")
    def wrapper(source, /):
        if not callable(source) and not isinstance(source, staticmethod | classmethod):
            raise TypeError("@command() must be applied to a callable")
        function = source.__func__ if isinstance(source, staticmethod | classmethod) else source
        function.__command__ = declaration
        return source

    return wrapper(source) if decorable else wrapper


def _declared(object):
    function = object.__func__ if isinstance(object, staticmethod | classmethod) else object
    return getattr(function, "__command__", None)


def discover(container, /):
    """
    Yield a Command for every @command-tagged callable reachable from container.

    - module: functions defined in that module.
    - class: static and class methods (instance methods need an instance).
    - instance: every tagged method, bound to the instance.
    """
    if inspect.ismodule(container):
        for attribute, object in inspect.getmembers(container, callable):
            if (declaration := _declared(object)) is None:
                continue
            if getattr(object, "__module__", None) != container.__name__:
                continue
            yield Command(object, **declaration)
        return

    owner = container if isinstance(container, type) else type(container)
    for attribute in dir(owner):
        raw = inspect.getattr_static(owner, attribute, None)
        if (declaration := _declared(raw)) is None:
            continue
        if container is owner and not isinstance(raw, staticmethod | classmethod):
            logger.debug("skipping instance method %s.%s without an instance", owner.__qualname__, attribute)
            continue
        yield Command(getattr(container, attribute), **declaration)


__all__ = (
    "Command",
    "Success",
    "SuccessWithCode",
    "BoundArguments",
    "command",
    "discover",
)
