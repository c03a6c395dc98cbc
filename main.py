import asyncio
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.pretty import pprint

from parley import *

__prog__ = "parley-demo"

console = Console()

handler = Handler(
    default_prompt=Prompt(time=5, retry=lambda message, previous, data: f"{data.phrase!r} won't do, try again."),
    lookahead=lambda message: message.content.startswith("!"),
)

order = handler.register(Command(
    "order",
    Argument(
        "size",
        type=Choices(("small", "s"), ("medium", "m"), ("large", "l")),
        prompt=Prompt(start="Which size? (small, medium, large)"),
    ),
    Argument(
        "toppings",
        type="lowercase",
        prompt=Prompt(infinite=True, limit=3, start="Toppings? Say `stop` when done."),
    ),
    Argument(
        "tip",
        type=Range("number", 0, 100, inclusive=True),
        default=0.0,
        prompt=Prompt(optional=True, start="Tip in percent?"),
    ),
))


async def main():
    channel = QueueChannel("kitchen", console=console)
    customer = Author(42, "customer")
    message = channel.message(customer, "!order huge")

    for content in ("m", "olives", "Basil", "stop"):
        channel.feed(customer, content)

    previous = {}
    for argument, phrase in zip(order.arguments, ("huge", "", "")):
        result = await argument.process(phrase, message, previous)
        if isinstance(result, ParsingFlag):
            pprint(result)
            return
        previous[argument.id] = result

    pprint(previous)


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler(console=console)])
    asyncio.run(main())
