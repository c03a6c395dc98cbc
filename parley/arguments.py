r"""
Parley argument specifications.

Overview
- ArgumentMatch
  • How the dispatcher apportions phrases to an argument (phrase, rest, separate,
    flag, option, text, content, none). The argument layer only reads it to decide
    whether a separate-match argument re-enters infinite prompting.

- Argument
  • Immutable, validated description of one argument of a command: id, match,
    type spec, flag tokens, positional policy (index/unordered), limit, default
    value supplier and prompt layer.
  • process(): the dispatcher's entry point. Optional/default short-circuit,
    single-shot cast, then hand-off to an interactive prompt session.
  • cast(): the type interpreter alone, for match modes that never prompt.
  • collect(): the prompt session alone (see parley.sessions).

Result contract of process()
- any value (including None, False, 0, []) → the argument's value.
- Cancel → abort the whole command invocation.
- Retry(message) → abandon the command and dispatch `message` afresh.

Validation highlights
- id must be a non-empty string.
- flag/option match require at least one flag token; other matches forbid them.
- limit must be a positive integer or math.inf; index a non-negative integer.
- unordered is a bool, a non-negative integer, or an iterable of them.
- type must be a type spec understood by parley.casting.cast (enumerations are
  checked for empty alias groups).
- prompt is Unset, a bool, a Prompt or a mapping of Prompt fields.

Quick example:
    >>> from parley import Argument, Command, Handler, Prompt, Range
    >>> amount = Argument(
    ...     "amount",
    ...     type=Range("integer", 1, 100, inclusive=True),
    ...     prompt=Prompt(start="How many?", retry="Between 1 and 100, please."),
    ... )
    >>> handler = Handler()
    >>> handler.register(Command("buy", amount))
    >>> await amount.process("250", message, {})  # prompts, since 250 is out of range
"""
import builtins
import logging
import math
from collections.abc import Iterable, Sequence
from enum import StrEnum

from rich.text import Text

from .casting import cast, istype
from .prompts import Prompt
from .resolver import TypeResolver
from .sessions import collect
from .utils import *

logger = logging.getLogger(__name__)


class ArgumentMatch(StrEnum):
    """
    Phrase apportioning modes (interpreted by the dispatcher).

    - PHRASE: the next phrase, ignoring flags.
    - REST: the remaining phrases joined, ignoring flags.
    - SEPARATE: the remaining phrases, each processed on its own.
    - FLAG: presence of one of the flag tokens.
    - OPTION: the phrase following one of the flag tokens.
    - TEXT: the whole input after the command, ignoring flags.
    - CONTENT: the whole input after the command, verbatim.
    - NONE: nothing; the type sees an empty phrase.
    """
    PHRASE = "phrase"
    REST = "rest"
    SEPARATE = "separate"
    FLAG = "flag"
    OPTION = "option"
    TEXT = "text"
    CONTENT = "content"
    NONE = "none"


def _sanitize(cls, metadata, /):
    """
    Internal: validate and normalize argument metadata in place.

    Raises
    - TypeError: a field has the wrong type, or flag tokens are missing/forbidden.
    - ValueError: a field is empty or out of range.
    """
    if not isinstance(id := metadata["id"], str):
        raise TypeError(f"{cls.__typename__} 'id' must be a string")
    elif not (id := id.strip()):
        raise ValueError(f"{cls.__typename__} 'id' cannot be empty")
    metadata["id"] = id

    try:
        metadata["match"] = mode = ArgumentMatch(metadata["match"])
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'match' must be one of {', '.join(map(repr, ArgumentMatch))}") from None

    if not istype(type := metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be a type name, a caster, an enumeration, or a pattern")

    flag = metadata["flag"]
    if isinstance(flag, str):
        flag = (flag,)
    if not isinstance(flag, Iterable) or not all(isinstance(token, str) for token in flag):
        raise TypeError(f"{cls.__typename__} 'flag' must be a string or an iterable of strings")
    flag = tuple(token.strip() for token in flag)
    if not all(flag):
        raise ValueError(f"{cls.__typename__} 'flag' tokens cannot be empty")
    if len(set(flag)) != len(flag):
        raise ValueError(f"{cls.__typename__} 'flag' cannot contain duplicates")
    if mode in (ArgumentMatch.FLAG, ArgumentMatch.OPTION) and not flag:
        raise TypeError(f"{cls.__typename__} with {mode!s} match must specify at least one flag")
    if mode not in (ArgumentMatch.FLAG, ArgumentMatch.OPTION) and flag:
        raise TypeError(f"{cls.__typename__} with {mode!s} match cannot specify flags")
    metadata["flag"] = flag

    if (index := metadata["index"]) is not None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"{cls.__typename__} 'index' must be an integer")
        if index < 0:
            raise ValueError(f"{cls.__typename__} 'index' cannot be negative")

    match metadata["unordered"]:
        case bool():
            pass
        case int() as start:
            if start < 0:
                raise ValueError(f"{cls.__typename__} 'unordered' cannot be negative")
        case Iterable() as indices:
            indices = tuple(indices)
            if not all(isinstance(index, int) and not isinstance(index, bool) for index in indices):
                raise TypeError(f"{cls.__typename__} 'unordered' indices must be integers")
            if any(index < 0 for index in indices):
                raise ValueError(f"{cls.__typename__} 'unordered' indices cannot be negative")
            metadata["unordered"] = indices
        case _:
            raise TypeError(f"{cls.__typename__} 'unordered' must be a boolean, an integer, or integers")

    if (limit := metadata["limit"]) != math.inf:
        if not isinstance(limit, int) or isinstance(limit, bool):
            raise TypeError(f"{cls.__typename__} 'limit' must be an integer or math.inf")
        if limit < 1:
            raise ValueError(f"{cls.__typename__} 'limit' must be positive")

    metadata["prompt"] = Prompt.coerce(metadata["prompt"])

    description = metadata["description"]
    if isinstance(description, Sequence) and not isinstance(description, str):
        description = "\n".join(map(str, description))
    if not isinstance(description, str | Text):
        raise TypeError(f"{cls.__typename__} 'description' must be a string or lines")
    metadata["description"] = description


class Argument(metaclass=SpecType):
    """
    One argument of a command.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes,
      mirroring the sanitized metadata values.
    - command / handler: the owning Command and its Handler (None until bound).
    """

    __introspectable__ = (
        "id",
        "match",
        "type",
        "flag",
        "index",
        "unordered",
        "limit",
        "default",
        "prompt",
        "description",
    )
    __displayable__ = (
        "id",
        "match",
        "type",
        "flag",
        "limit",
        "prompt",
    )

    def __init__(
            self,
            id,
            /,
            match=ArgumentMatch.PHRASE,
            type="string",
            *,
            flag=(),
            index=None,
            unordered=False,
            limit=math.inf,
            default=None,
            prompt=Unset,
            description="",
    ):
        """
        Construct an Argument with the provided metadata.

        Parameters
        - id: str
          Key of the argument in the command's result mapping.
        - match: ArgumentMatch | str
          Phrase apportioning mode (default: phrase).
        - type: type spec
          Named type, caster, enumeration, pattern or combinator (default: "string").
        - flag: str | Iterable[str]
          Tokens for flag/option match.
        - index, unordered, limit:
          Positional selection policy, read by the dispatcher.
        - default: Any | Callable[[message, previous], Any]
          Value (or supplier, possibly async) used when input is missing or
          does not cast and no prompt is configured.
        - prompt: Unset | bool | Prompt | Mapping
          Argument-specific prompt layer. True prompts with the merged defaults.
        - description: str | list[str] | Text
          Human-readable description; lines are joined with newlines.
        """
        metadata = {
            "id": id,
            "match": match,
            "type": type,
            "flag": flag,
            "index": index,
            "unordered": unordered,
            "limit": limit,
            "default": default,
            "prompt": prompt,
            "description": description,
        }
        _sanitize(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._command = None
        self._resolver = Unset

    @property
    def command(self):
        return self._command

    @property
    def handler(self):
        return getattr(self._command, "handler", None)

    @property
    def resolver(self):
        """
        The handler's resolver; a private default resolver while unattached.
        """
        if (handler := self.handler) is not None:
            return handler.resolver
        if self._resolver is Unset:
            self._resolver = TypeResolver()
        return self._resolver

    def _bind(self, command, /):
        if self._command is not None and self._command is not command:
            raise ValueError(f"argument {self._id!r} already belongs to command {self._command.id!r}")
        self._command = command

    def layers(self):
        """
        Prompt layers in merge order: handler default, command default, own prompt.
        """
        handler = self.handler
        return (
            getattr(handler, "default_prompt", None),
            getattr(self._command, "default_prompt", None),
            self._prompt,
        )

    def effective_prompt(self):
        """
        The merged prompt configuration this argument prompts with.
        """
        return Prompt.merge(*self.layers())

    @property
    def optional(self):
        """
        True when any prompt layer marks the argument optional.
        """
        return any(layer.optional for layer in self.layers() if layer is not None)

    async def default_for(self, message, previous=None, /):
        """
        Resolve the default value: call it with (message, previous) when callable,
        await it when awaitable.
        """
        default = self.default
        if callable(default):
            return await invoke(default, message, {} if previous is None else previous)
        return await resolve(default)

    async def cast(self, phrase, message, previous=None, /):
        """
        Cast `phrase` to this argument's type; None is a miss.
        """
        return await cast(self._type, self.resolver, phrase, message, {} if previous is None else previous)

    async def process(self, phrase, message, previous=None, /):
        """
        Turn `phrase` into this argument's value, prompting when needed.

        Steps
        1. Trim the phrase.
        2. Empty phrase on an optional argument → the default (no cast, no prompt).
        3. Cast; a hit is returned as-is.
        4. On a miss, prompt when the argument has a prompt layer, otherwise
           return the default.

        Returns
        - the value, Cancel, or Retry(message).
        """
        phrase = (phrase or "").strip()
        previous = {} if previous is None else previous

        if not phrase and self.optional:
            logger.debug("argument %r is optional and empty, using its default", self._id)
            return await self.default_for(message, previous)

        result = await self.cast(phrase, message, previous)

        if result is None:
            if self._prompt is not None:
                logger.debug("argument %r missed on %r, prompting", self._id, phrase)
                return await self.collect(message, previous, phrase)
            logger.debug("argument %r missed on %r, using its default", self._id, phrase)
            return await self.default_for(message, previous)

        return result

    async def collect(self, message, previous=None, phrase="", /):
        """
        Run an interactive prompt session for this argument (see parley.sessions).
        """
        return await collect(self, message, {} if previous is None else previous, phrase)


__all__ = (
    "ArgumentMatch",
    "Argument",
)
