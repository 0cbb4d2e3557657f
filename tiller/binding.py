"""
Argument binder: map the tokens following a command name onto its parameters.

Single left-to-right scan:
1. every slot starts at its parameter default;
2. "-<digit>..." is positional data (negative numbers never look like flags);
   "--long" / "-short" select an option: booleans are set by presence, other
   options consume the next token; any other dash token is unrecognized;
   plain tokens queue as positional data;
3. queued tokens fill positional parameters in position order;
4. surplus positional tokens are reported together;
5. a required positional still equal to its type's zero-value is missing.

Step 5 compares against the zero-value, so a supplied value equal to it (for
example "0" for an int) is reported as missing as well.
"""
import logging
import re

from .coercion import coerce, zero
from .faults import (
    FaultCode,
    MissingRequiredArgumentError,
    MissingOptionValueError,
    UnrecognizedArgumentError,
    getdoc,
)

logger = logging.getLogger(__name__)

NEGATIVE_NUMBER = re.compile(r"-\d")


def _usage_hint(command):
    return "run '%s --help' to see the expected arguments and options" % command.name


def _lookup(command, token):
    if token.startswith("--"):
        flag = token[2:]
        return next((option for option in command.options if option.long == flag), None)
    flag = token[1:]
    return next((option for option in command.options if option.short == flag), None)


def bind(command, tokens, /):
    """
    Bind tokens to command parameters.

    Returns
    - BoundArguments(args, kwargs) ready to call the command target.

    Raises
    - MissingOptionValueError, UnrecognizedArgumentError,
      InvalidArgumentValueError, MissingRequiredArgumentError.
    """
    tokens = list(tokens)
    slots = {parameter.name: parameter.default for parameter in command.parameters}
    queue = []

    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1

        if NEGATIVE_NUMBER.match(token) or not token.startswith("-"):
            queue.append(token)
            continue

        if (option := _lookup(command, token)) is None:
            raise UnrecognizedArgumentError(
                "unrecognized argument or option %r" % token,
                title="unrecognized argument",
                code=FaultCode.UNRECOGNIZED_ARGUMENT,
                argument=token,
                hint=_usage_hint(command),
                docs=getdoc(FaultCode.UNRECOGNIZED_ARGUMENT),
            )

        if option.boolean:
            slots[option.name] = True
            continue

        if index >= len(tokens):
            raise MissingOptionValueError(
                "option %r requires a value but none was provided" % option.name,
                title="missing option value",
                code=FaultCode.MISSING_OPTION_VALUE,
                name=option.name,
                argument=token,
                hint="pass a value after %s (for example: %s <value>)" % (token, token),
                docs=getdoc(FaultCode.MISSING_OPTION_VALUE),
            )
        # Repeated options overwrite: the last value wins.
        slots[option.name] = coerce(tokens[index], option.type, option.name)
        index += 1

    positionals = sorted(command.positionals, key=lambda parameter: parameter.position)
    for parameter, token in zip(positionals, queue):
        slots[parameter.name] = coerce(token, parameter.type, parameter.name)

    if len(queue) > len(positionals):
        surplus = " ".join(queue[len(positionals):])
        raise UnrecognizedArgumentError(
            "unrecognized argument or option %r" % surplus,
            title="unrecognized argument",
            code=FaultCode.UNRECOGNIZED_ARGUMENT,
            argument=surplus,
            hint="remove the extra inputs; %s" % _usage_hint(command),
            docs=getdoc(FaultCode.UNRECOGNIZED_ARGUMENT),
        )

    for parameter in positionals:
        if parameter.required and slots[parameter.name] == zero(parameter.type):
            raise MissingRequiredArgumentError(
                "required argument %r is missing" % parameter.name,
                title="missing argument",
                code=FaultCode.MISSING_REQUIRED_ARGUMENT,
                name=parameter.name,
                hint=_usage_hint(command),
                docs=getdoc(FaultCode.MISSING_REQUIRED_ARGUMENT),
            )

    logger.debug("bound %r: %r", command.name, slots)
    return command.arrange([slots[parameter.name] for parameter in command.parameters])


__all__ = (
    "bind",
)
