"""
Out-of-band parsing results.

A prompt session can end without producing a value for its argument. Those
outcomes are reported with ParsingFlag instances, which never collide with a
castable value: they are not None, not False, not an empty list, and they are
always truthy so a careless `if not result` check cannot mistake them for a
miss.

Flags
- Cancel: singleton. Abort this argument and the enclosing command invocation
  (timeout, cancel word, retries exhausted).
- Retry(message): the reply looked like a new command invocation; the
  dispatcher must redispatch `message` instead of using it as this argument's
  value.

Dispatcher contract
    result = await argument.process(phrase, message, previous)
    match result:
        case Retry(message=reply):
            return await dispatch(reply)
        case ParsingFlag():
            return  # cancelled
        case _:
            previous[argument.id] = result
"""
import functools

from rich.text import Text


class ParsingFlag:
    """
    Base type of every out-of-band parsing result.

    Notes
    - Not instantiable directly; use Cancel or Retry(message).
    - Instances are truthy and compare by identity (Cancel) or by captured
      message (Retry).
    """
    __slots__ = ()

    def __new__(cls, *args, **kwargs):
        if cls is ParsingFlag:
            raise TypeError("type 'ParsingFlag' cannot be instantiated directly")
        return super().__new__(cls)

    def __bool__(self):
        return True

    def __rich__(self):
        return Text.assemble(("<", "dim"), (type(self).__name__.removesuffix("Type").lower(), "bold magenta"), (">", "dim"))


class CancelType(ParsingFlag):
    """
    Flag type for an aborted argument (see the `Cancel` singleton).
    """
    __slots__ = ()

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "Cancel"

    def __reduce__(self):
        return "Cancel"


class Retry(ParsingFlag):
    """
    Flag for a breakout: the captured message must be dispatched afresh.
    """
    __slots__ = ("_message",)
    __match_args__ = ("message",)

    def __init__(self, message, /):
        self._message = message

    @property
    def message(self):
        return self._message

    def __eq__(self, other):
        if not isinstance(other, Retry):
            return NotImplemented
        return self._message is other._message

    def __hash__(self):
        return hash((Retry, id(self._message)))

    def __repr__(self):
        return "Retry(%r)" % (getattr(self._message, "content", self._message),)

    def __rich__(self):
        return Text.assemble(super().__rich__(), " ", Text(repr(getattr(self._message, "content", self._message))))


Cancel = CancelType()


__all__ = (
    "ParsingFlag",
    "CancelType",
    "Cancel",
    "Retry",
)
