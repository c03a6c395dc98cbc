"""
In-memory message transport.

Prompt sessions talk to the outside world through three duck-typed objects (see
channels.pyi for the protocols):

- a message, with `id`, `content`, `author` and `channel`;
- an author, with `id`;
- a channel, with `id`, `async send(content) -> message` and
  `async await_reply(check, *, time) -> message` raising TimeoutError when no
  accepted message arrives in time.

QueueChannel implements that contract without any network: `feed()` delivers a
user message, `send()` records a bot message. It is what the test-suite and the
demo in main.py run on, and a template for adapting a real chat client.

Delivery rules
- A delivered message goes to the oldest waiter whose check accepts it.
- Messages nobody accepts are kept (in order) and offered to later waiters,
  unless they were sent by the channel's own bot.
- Every message is appended to `history`; bot messages also to `sent`.
"""
import asyncio
import itertools
import math
from collections import deque
from typing import NamedTuple, Any

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

_identifiers = itertools.count(1)


class Author(NamedTuple):
    id: int
    name: str = ""


class Message(NamedTuple):
    id: int
    content: str
    author: Author
    channel: Any = None


class QueueChannel:
    """
    Single chat channel backed by asyncio futures.

    Parameters
    - id: channel identifier (a fresh integer when omitted).
    - bot: author used for messages this channel sends.
    - console: optional rich Console echoing every message, for demos.
    """

    def __init__(self, id=Unset, /, *, bot=Author(0, "parley"), console=None):
        if console is not None and not isinstance(console, Console):
            raise TypeError("QueueChannel 'console' must be a rich Console")
        self._id = coalesce(id, next(_identifiers))
        self._bot = bot
        self._console = console
        self._waiters = deque()
        self._backlog = deque()
        self.history = []
        self.sent = []

    @property
    def id(self):
        return self._id

    @property
    def bot(self):
        return self._bot

    def message(self, author, content, /):
        """
        Build a message in this channel without delivering it.
        """
        return Message(next(_identifiers), content, author, self)

    async def send(self, content, /):
        message = self.message(self._bot, content)
        self.sent.append(message)
        self._deliver(message)
        return message

    def feed(self, author, content, /):
        """
        Deliver a user message and return it.
        """
        message = self.message(author, content)
        self._deliver(message)
        return message

    async def await_reply(self, check, /, *, time=None):
        """
        Wait for the first message accepted by `check`.

        Parameters
        - check: predicate over a message.
        - time: seconds to wait, or None (or math.inf) to wait forever.

        Raises
        - TimeoutError: nothing accepted within `time`.

        A message handed to this waiter after it timed out or was cancelled goes
        back to the front of the backlog.
        """
        for message in self._backlog:
            if check(message):
                self._backlog.remove(message)
                return message

        future = asyncio.get_running_loop().create_future()
        waiter = (check, future)
        self._waiters.append(waiter)
        try:
            async with asyncio.timeout(None if time is None or time == math.inf else time):
                return await future
        except (TimeoutError, asyncio.CancelledError):
            # delivered but never consumed
            if future.done() and not future.cancelled():
                self._backlog.appendleft(future.result())
            raise
        finally:
            self._waiters.remove(waiter)

    def _deliver(self, message):
        self.history.append(message)
        if self._console is not None:
            self._console.print(Text.assemble(
                (message.author.name or str(message.author.id), "bold cyan" if message.author != self._bot else "bold magenta"),
                ": ",
                str(message.content),
            ))

        for check, future in self._waiters:
            if not future.done() and check(message):
                future.set_result(message)
                return

        if message.author != self._bot:
            self._backlog.append(message)

    def __repr__(self):
        return "QueueChannel(%r)" % (self._id,)


__all__ = (
    "Author",
    "Message",
    "QueueChannel",
)
