import asyncio
import logging
import os
import sys
from typing import Annotated

from tiller import *

host = Host.builder().name("demo").descr("A small tiller demo").build()


@host.command("greet", descr="Say hello", aliases=("hi",))
def greet(
        name=Argument("name", descr="Who to greet"),
        times: Annotated[int, Option("-t", "--times", descr="How many times")] = 1,
        shout: bool = Option("-s", descr="Uppercase the greeting"),
):
    for _ in range(times):
        message = f"hello {name}"
        host.console.print(message.upper() if shout else message)


@host.command
async def countdown(start: int = Argument("start", descr="First number")) -> int:
    """Count down to zero, one second at a time."""
    for number in range(start, 0, -1):
        host.console.print(number)
        await asyncio.sleep(1)
    return 0


if __name__ == '__main__':
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logging.basicConfig(level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING), handlers=[handler])
    host.main()
