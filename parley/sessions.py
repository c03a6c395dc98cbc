"""
Parley prompt sessions: the interactive collection state machine.

A session starts when an argument's input is missing or does not cast and the
argument has a prompt layer. It then takes turns with the author of the
triggering message, in the same channel, until it can hand back a value, a
list of values (infinite prompts), or a ParsingFlag.

Turn structure (one iteration of PromptSession.run)
- SEND: emit the `start` text on the first turn and `retry` afterwards. The first
  turn of an infinite prompt that already holds values stays silent.
- AWAIT: one reply from the same author, excluding the prompt just sent, within
  `time` seconds. Timeout → `timeout` text, then Cancel.
- BREAKOUT: with `breakout`, a reply the handler recognizes as a command → Retry(reply).
- CANCEL: the cancel word (case-insensitive) → `cancel` text, then Cancel.
- STOP: infinite only. The stop word ends with the values collected so far; before
  any value it asks again.
- CAST: a miss retries while the retry budget lasts, then `ended` text and Cancel.
  A hit ends the session, or, when infinite, is collected and the session waits
  for the next one until `limit` values were collected.

Retry counting
- The counter starts at 1, or 2 when the command already supplied a phrase (that
  phrase consumed the first attempt). A miss retries while counter <= retries, so
  a prompt with `retries = r` makes exactly r + 1 cast attempts in total.
- Each collected value of an infinite prompt resets the counter to 1.

Bookkeeping
- The (channel, author) pair is registered on the handler for the whole session
  and released on every exit path, exceptions and task cancellation included.
"""
import logging

from .flags import Cancel, Retry
from .prompts import PromptData

logger = logging.getLogger(__name__)


class PromptSession:
    """
    Transient state of one collect() call.

    Attributes
    - argument, message, previous: what the session collects for, what triggered
      it, and the command's already-resolved arguments.
    - prompt: the merged prompt configuration.
    - seed: the phrase the command supplied ("" when none).
    - offset: 1 when a seed was supplied, else 0.
    - infinite: whether values are accumulated.
    - retries: the current retry counter.
    - values: the collected values (infinite only, otherwise None).
    - last: the message that provides context for the next prompt.
    """
    __slots__ = (
        "argument",
        "message",
        "previous",
        "prompt",
        "seed",
        "offset",
        "infinite",
        "retries",
        "values",
        "last",
    )

    def __init__(self, argument, message, previous, seed="", /):
        self.argument = argument
        self.message = message
        self.previous = previous
        self.prompt = argument.effective_prompt()
        self.seed = seed or ""
        self.offset = 1 if self.seed else 0
        # A separate-match argument that already got a phrase from the command
        # collects a single value for that phrase.
        self.infinite = self.prompt.infinite and not (argument.match == "separate" and self.seed)
        self.retries = 1 + self.offset
        self.values = [] if self.infinite else None
        self.last = message

    @property
    def context(self):
        """
        The mapping handed to casters and suppliers: the command's previous
        arguments plus, when infinite, the values collected so far.
        """
        if self.infinite:
            return {**self.previous, self.argument.id: self.values}
        return self.previous

    def check(self, sent, /):
        author = self.message.author.id

        def accept(message):
            if sent is not None and message.id == sent.id:
                return False
            return message.author.id == author

        return accept

    async def say(self, phase, trigger, phrase, /):
        """
        Render `phase` and send it to the channel; returns the sent message or
        None when the phase has no text.
        """
        data = PromptData(self.retries, self.infinite, trigger, phrase)
        text = await self.prompt.render(phase, self.message, self.context, data)
        if not text:
            return None
        logger.debug("argument %r sends %s prompt (retry %d)", self.argument.id, phase, self.retries)
        return await self.message.channel.send(text)

    async def run(self):
        """
        Drive the conversation to its end.

        Returns
        - the cast value, the list of collected values, Cancel or Retry(reply).
        """
        channel = self.message.channel
        handler = self.argument.handler
        prompt = self.prompt

        while True:
            sent = None
            if self.retries != 1 or not self.infinite or not self.values:
                phrase = self.seed if self.retries <= 1 + self.offset else self.last.content
                sent = await self.say("start" if self.retries == 1 else "retry", self.last, phrase)

            try:
                reply = await channel.await_reply(self.check(sent), time=prompt.time)
            except TimeoutError:
                logger.debug("argument %r timed out after %s seconds", self.argument.id, prompt.time)
                await self.say("timeout", self.last, "")
                return Cancel

            if prompt.breakout and await handler.parse_command(reply):
                logger.debug("argument %r breaks out on %r", self.argument.id, reply.content)
                return Retry(reply)

            content = reply.content

            if content.casefold() == prompt.cancel_word.casefold():
                logger.debug("argument %r cancelled", self.argument.id)
                await self.say("cancel", reply, "")
                return Cancel

            if self.infinite and content.casefold() == prompt.stop_word.casefold():
                if self.values:
                    return list(self.values)
                self.last = reply
                self.retries += 1
                continue

            value = await self.argument.cast(content, reply, self.context)

            if value is None:
                if self.retries <= prompt.retries:
                    self.last = reply
                    self.retries += 1
                    continue
                logger.debug("argument %r ran out of retries", self.argument.id)
                await self.say("ended", reply, content)
                return Cancel

            if not self.infinite:
                return value

            self.values.append(value)
            if len(self.values) >= prompt.limit:
                return list(self.values)
            self.last = self.message
            self.retries = 1


async def collect(argument, message, previous, phrase="", /):
    """
    Prompt the author of `message` for `argument` until a value is produced.

    Parameters
    - argument: an Argument attached to a command registered on a handler.
    - message: the message that invoked the command.
    - previous: mapping of the command's already-resolved arguments (not mutated).
    - phrase: the phrase the command supplied for this argument, if any.

    Returns
    - the value, a list of values (infinite prompts), Cancel, or Retry(reply).

    Raises
    - TypeError: the argument is not attached to a handler.
    - anything the transport raises other than TimeoutError.
    """
    handler = argument.handler
    if handler is None:
        raise TypeError(f"argument {argument.id!r} must belong to a command registered on a handler to prompt")

    session = PromptSession(argument, message, previous, phrase)
    logger.debug(
        "prompting %r for argument %r (infinite=%s, seed=%r)",
        message.author.id, argument.id, session.infinite, session.seed
    )

    registered = handler.add_prompt(message.channel, message.author)
    try:
        result = await session.run()
    finally:
        if registered:
            handler.remove_prompt(message.channel, message.author)

    logger.debug("argument %r resolved to %r", argument.id, result)
    return result


__all__ = (
    "PromptSession",
    "collect",
)
