r"""
Parley prompt configuration.

A Prompt describes how an argument re-asks the user when its input is missing
or does not cast: how many retries, how long to wait, which words cancel or stop
the conversation, whether to collect many values, and what to say at each phase.

Layers
- Handler default → command default → argument prompt. Each layer only carries the
  fields it sets (the others stay Unset); merging is field-by-field and the later
  layer wins:
      >>> effective = Prompt.merge(handler.default_prompt, command.default_prompt, argument.prompt)
      >>> effective = handler_layer | command_layer | argument_layer   # same thing

Fields (defaults applied when no layer sets them)
- retries: int >= 0 (1). Retries allowed after the first failed attempt.
- time: seconds to wait for each reply, or None to wait forever (30.0).
- cancel_word: reply that aborts the command, case-insensitive ("cancel").
- stop_word: reply that ends an infinite prompt, case-insensitive ("stop").
- optional: empty input resolves to the default without casting or prompting (False).
- infinite: collect values until the stop word or the limit (False).
- limit: most values an infinite prompt collects, positive int or math.inf (inf).
- breakout: a reply that looks like a command abandons this one (True).
- start, retry, timeout, ended, cancel: content per phase. A string, a list of
  lines, or a callable (message, previous, data) -> content. None sends nothing.
- modify_start, modify_retry, modify_timeout, modify_ended, modify_cancel:
  callables (text, message, previous, data) -> content applied after the phase
  content was resolved.

Suppliers and modifiers may be coroutine functions. `data` is a PromptData.
"""
import math
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, NamedTuple

from .utils import *

PHASES = ("start", "retry", "timeout", "ended", "cancel")

DEFAULTS = MappingProxyType({
    "retries": 1,
    "time": 30.0,
    "cancel_word": "cancel",
    "stop_word": "stop",
    "optional": False,
    "infinite": False,
    "limit": math.inf,
    "breakout": True,
} | dict.fromkeys(PHASES) | dict.fromkeys("modify_" + phase for phase in PHASES))


class PromptData(NamedTuple):
    """
    Context handed to phase suppliers and modifiers.

    - retries: the current retry count (1 on the first prompt).
    - infinite: whether the session collects many values.
    - message: the message that triggered this phase.
    - phrase: the phrase that triggered this phase, or "".
    """
    retries: int
    infinite: bool
    message: Any
    phrase: str


def _sanitize(cls, fields, /):
    """
    Internal: validate the fields a prompt layer sets (Unset ones are skipped).

    Raises
    - TypeError: wrong type for a field.
    - ValueError: out-of-range number or empty word.
    """
    for name, value in fields.items():
        match name:
            case "retries":
                if not isinstance(value, int) or isinstance(value, bool):
                    raise TypeError(f"{cls.__typename__} 'retries' must be an integer")
                if value < 0:
                    raise ValueError(f"{cls.__typename__} 'retries' cannot be negative")
            case "time":
                if value is None:
                    continue
                if not isinstance(value, int | float) or isinstance(value, bool):
                    raise TypeError(f"{cls.__typename__} 'time' must be a number of seconds or None")
                if not value > 0:
                    raise ValueError(f"{cls.__typename__} 'time' must be positive")
            case "cancel_word" | "stop_word":
                if not isinstance(value, str):
                    raise TypeError(f"{cls.__typename__} {name!r} must be a string")
                if not value.strip():
                    raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
                fields[name] = value.strip()
            case "optional" | "infinite" | "breakout":
                if not isinstance(value, bool):
                    raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")
            case "limit":
                if value != math.inf and (not isinstance(value, int) or isinstance(value, bool)):
                    raise TypeError(f"{cls.__typename__} 'limit' must be an integer or math.inf")
                if value < 1:
                    raise ValueError(f"{cls.__typename__} 'limit' must be positive")
            case _ if name in PHASES:
                if value is None or isinstance(value, str) or callable(value):
                    continue
                if isinstance(value, Sequence) and all(isinstance(line, str) for line in value):
                    fields[name] = tuple(value)
                    continue
                raise TypeError(f"{cls.__typename__} {name!r} must be a string, a list of lines, or a callable")
            case _:
                if value is not None and not callable(value):
                    raise TypeError(f"{cls.__typename__} {name!r} must be callable")


class Prompt(metaclass=SpecType):
    """
    One layer of prompt configuration.

    Attribute access returns the effective value (the set value, or its default);
    `fields` exposes only what this layer sets, which is what merging looks at.
    """

    __introspectable__ = tuple(DEFAULTS)

    def __init__(
            self,
            *,
            retries=Unset,
            time=Unset,
            cancel_word=Unset,
            stop_word=Unset,
            optional=Unset,
            infinite=Unset,
            limit=Unset,
            breakout=Unset,
            start=Unset,
            retry=Unset,
            timeout=Unset,
            ended=Unset,
            cancel=Unset,
            modify_start=Unset,
            modify_retry=Unset,
            modify_timeout=Unset,
            modify_ended=Unset,
            modify_cancel=Unset,
    ):
        fields = {name: value for name, value in locals().items() if name in DEFAULTS and value is not Unset}
        _sanitize(type(self), fields)
        self._fields = MappingProxyType(fields)
        for name, default in DEFAULTS.items():
            setattr(self, "_" + name, fields.get(name, default))

    @classmethod
    def coerce(cls, layer, /):
        """
        Normalize a layer: Unset/None/False → None, True → an empty Prompt,
        a mapping → Prompt(**mapping), a Prompt → itself.
        """
        match layer:
            case Prompt():
                return layer
            case None | False | UnsetType():
                return None
            case True:
                return cls()
            case Mapping():
                unknown = set(layer) - set(DEFAULTS)
                if unknown:
                    raise TypeError(f"{cls.__typename__} got unknown fields: {', '.join(sorted(unknown))}")
                return cls(**layer)
        raise TypeError(f"{cls.__typename__} layers must be prompts, mappings, or booleans")

    @classmethod
    def merge(cls, *layers):
        """
        Merge layers left to right; later layers override earlier ones per field.
        Unset/None layers are skipped.
        """
        fields = {}
        for layer in filter(None, map(cls.coerce, layers)):
            fields |= layer.fields
        return cls(**fields)

    def __or__(self, other):
        if not isinstance(other, Prompt | Mapping | bool):
            return NotImplemented
        return type(self).merge(self, other)

    def __ror__(self, other):
        if not isinstance(other, Mapping | bool):
            return NotImplemented
        return type(self).merge(other, self)

    @property
    def fields(self):
        return self._fields

    def isset(self, name, /):
        if name not in DEFAULTS:
            raise AttributeError(f"{type(self).__typename__} has no field {name!r}")
        return name in self._fields

    def __eq__(self, other):
        if not isinstance(other, Prompt):
            return NotImplemented
        return dict(self._fields) == dict(other._fields)

    __hash__ = None

    def __rich_repr__(self):
        yield from self._fields.items()

    async def render(self, phase, message, previous, data, /):
        """
        Resolve the content of `phase` into text.

        Steps
        - Call the phase supplier with (message, previous, data) when callable.
        - Join a list of lines into one block.
        - Apply the phase modifier (text, message, previous, data) when set, and
          join again if it returned lines.

        Returns
        - the text (None or "" when there is nothing to send).
        """
        if phase not in PHASES:
            raise ValueError(f"unknown prompt phase {phase!r}")

        text = getattr(self, phase)
        if callable(text):
            text = await invoke(text, message, previous, data)
        text = lines(text)

        if (modifier := getattr(self, "modify_" + phase)) is not None:
            text = lines(await invoke(modifier, text, message, previous, data))

        return text


__all__ = (
    "PHASES",
    "DEFAULTS",
    "PromptData",
    "Prompt",
)
