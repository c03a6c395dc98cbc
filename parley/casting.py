r"""
Parley type casting: turn a phrase into a typed value or a miss.

Overview
- cast(type, resolver, phrase, message, previous)
  • The interpreter. Always resolves to a value or None (a cast miss); ordinary
    invalid input never raises.

- Type specs understood by cast()
  • str: a named type, looked up in a TypeResolver. Unknown names fall back to
    the raw phrase (or a miss for an empty phrase).
  • list / tuple: an enumeration of alias groups, case-insensitive. Each entry is
    a string or a non-empty sequence of strings whose first member is canonical.
  • re.Pattern: a regular expression; hits produce a Match record.
  • callable: a caster invoked as caster(phrase, message, previous); may be async.
    None is a miss. A class (int, float, Decimal, ...) is called with the phrase
    alone, and a ValueError it raises is a miss too.
  • anything implementing __cast__(resolver, phrase, message, previous).

- Spec objects (all implement __cast__, so they nest arbitrarily)
  • Choices(*groups, sensitive=False): enumeration with optional case sensitivity.
  • Regex(pattern, every=False): regular expression; every=True also collects
    all non-overlapping matches.
  • Union(*types): first type that does not miss.
  • Tuple(*types): every type against the same phrase, as a list.
  • Validate(type, predicate): miss when predicate(value, phrase, message, previous) is falsy.
  • Range(type, min, max, inclusive=False): numeric bounds on top of Validate.
  • Compose(first, second, ignore_void=True): feed the first result into the second.

Quick example:
    >>> size = Range("integer", 1, 10, inclusive=True)
    >>> await cast(size, TypeResolver(), "7", message, {})
    7
    >>> await cast(Union([("all", "*")], "integer"), TypeResolver(), "*", message, {})
    'all'
"""
import builtins
import logging
import re
from collections.abc import Sequence
from typing import NamedTuple

from .utils import invoke

logger = logging.getLogger(__name__)


class Match(NamedTuple):
    """
    Result of a regular-expression cast.

    - match: the first re.Match found in the phrase (always present).
    - matches: every non-overlapping re.Match when the pattern is global,
      otherwise an empty tuple.
    """
    match: re.Match
    matches: tuple[re.Match, ...] = ()


def istype(object, /):
    """
    Return True when `object` is something cast() knows how to interpret.
    """
    return (
        (hasattr(object, "__cast__") and not isinstance(object, type))
        or isinstance(object, str | re.Pattern)
        or callable(object)
        or _isenumeration(object)
    )


def _isenumeration(object):
    if not isinstance(object, list | tuple) or not object:
        return False
    for entry in object:
        if isinstance(entry, str):
            continue
        if not isinstance(entry, Sequence) or not entry or not all(isinstance(alias, str) for alias in entry):
            return False
    return True


def _check(owner, type):
    if not istype(type):
        raise TypeError("%s operands must be type specs, not %r" % (owner, type))
    return type


async def cast(type, resolver, phrase, message, previous):
    """
    Cast `phrase` according to `type`.

    Parameters
    - type: a type spec (see module documentation).
    - resolver: TypeResolver used for named types, at any nesting depth.
    - phrase: str, the user input.
    - message: the message that triggered the cast (handed to casters as-is).
    - previous: mapping of already-resolved arguments of the command.

    Returns
    - the cast value, or None on a miss.
    """
    if hasattr(type, "__cast__") and not isinstance(type, builtins.type):
        return await type.__cast__(resolver, phrase, message, previous)

    if isinstance(type, list | tuple):
        return _choose(type, phrase, False)

    if isinstance(type, re.Pattern):
        return _search(type, phrase, False)

    if isinstance(type, str):
        caster = resolver.lookup(type)
        if caster is None:
            return phrase or None
        type = caster

    if isinstance(type, builtins.type):
        return await _call(type, phrase)

    if callable(type):
        return await _call(type, phrase, message, previous)

    raise TypeError("cannot cast with %r" % (type,))


async def _call(caster, phrase, *context):
    try:
        result = await invoke(caster, phrase, *context)
    except ValueError as exception:
        logger.debug("caster %r rejected %r: %s", caster, phrase, exception)
        return None
    return result


def _choose(groups, phrase, sensitive):
    folded = phrase if sensitive else phrase.casefold()
    for group in groups:
        aliases = (group,) if isinstance(group, str) else group
        for alias in aliases:
            if (alias if sensitive else alias.casefold()) == folded:
                return aliases[0]
    return None


def _search(pattern, phrase, every):
    match = pattern.search(phrase)
    if match is None:
        return None
    return Match(match, tuple(pattern.finditer(phrase)) if every else ())


class Choices:
    """
    Enumeration type spec: restrict input to a closed set of aliases.

    Each group is either a single string or a non-empty sequence of strings;
    any alias of a group resolves to the group's first member.

    Example
    - Choices(("yes", "y", "ok"), ("no", "n")) casts "Y" to "yes".
    - Choices("Alpha", "Beta", sensitive=True) casts "alpha" to a miss.
    """
    __slots__ = ("_groups", "_sensitive")

    def __init__(self, *groups, sensitive=False):
        if not groups:
            raise TypeError("Choices requires at least one group")
        normalized = []
        for group in groups:
            if isinstance(group, str):
                group = (group,)
            if not isinstance(group, Sequence) or not all(isinstance(alias, str) for alias in group):
                raise TypeError("Choices groups must be strings or sequences of strings")
            if not group:
                raise ValueError("Choices groups cannot be empty")
            normalized.append(tuple(group))
        self._groups = tuple(normalized)
        self._sensitive = bool(sensitive)

    @property
    def groups(self):
        return self._groups

    @property
    def sensitive(self):
        return self._sensitive

    async def __cast__(self, resolver, phrase, message, previous):
        return _choose(self._groups, phrase, self._sensitive)

    def __repr__(self):
        return "Choices(%s%s)" % (
            ", ".join(map(repr, self._groups)),
            ", sensitive=True" if self._sensitive else ""
        )


class Regex:
    """
    Regular-expression type spec.

    A compiled pattern passed directly to cast() behaves like Regex(pattern).
    With every=True the result also carries every non-overlapping match, the
    way a global expression would be applied.
    """
    __slots__ = ("_pattern", "_every")

    def __init__(self, pattern, /, *, every=False, flags=0):
        if isinstance(pattern, str):
            pattern = re.compile(pattern, flags)
        elif not isinstance(pattern, re.Pattern):
            raise TypeError("Regex pattern must be a string or a compiled pattern")
        elif flags:
            raise TypeError("Regex flags cannot be combined with a compiled pattern")
        self._pattern = pattern
        self._every = bool(every)

    @property
    def pattern(self):
        return self._pattern

    @property
    def every(self):
        return self._every

    async def __cast__(self, resolver, phrase, message, previous):
        return _search(self._pattern, phrase, self._every)

    def __repr__(self):
        return "Regex(%r%s)" % (self._pattern.pattern, ", every=True" if self._every else "")


class Union:
    """
    First type that resolves wins; a miss only when every type misses.

    Order is significant: later types are never tried once one succeeds.
    """
    __slots__ = ("_types",)

    def __init__(self, *types):
        if not types:
            raise TypeError("Union requires at least one type")
        self._types = tuple(_check("Union", type) for type in types)

    @property
    def types(self):
        return self._types

    async def __cast__(self, resolver, phrase, message, previous):
        for type in self._types:
            result = await cast(type, resolver, phrase, message, previous)
            if result is not None:
                return result
        return None

    def __repr__(self):
        return "Union(%s)" % ", ".join(map(repr, self._types))


class Tuple:
    """
    Every type must resolve on the same phrase; the results come back as a
    list in declaration order.
    """
    __slots__ = ("_types",)

    def __init__(self, *types):
        if not types:
            raise TypeError("Tuple requires at least one type")
        self._types = tuple(_check("Tuple", type) for type in types)

    @property
    def types(self):
        return self._types

    async def __cast__(self, resolver, phrase, message, previous):
        results = []
        for type in self._types:
            result = await cast(type, resolver, phrase, message, previous)
            if result is None:
                return None
            results.append(result)
        return results

    def __repr__(self):
        return "Tuple(%s)" % ", ".join(map(repr, self._types))


class Validate:
    """
    Wrap a type with a predicate over (value, phrase, message, previous).

    A falsy predicate result turns an otherwise successful cast into a miss.
    The predicate may be a coroutine function.
    """
    __slots__ = ("_type", "_predicate")

    def __init__(self, type, predicate):
        self._type = _check(builtins.type(self).__name__, type)
        if not callable(predicate):
            raise TypeError("%s predicate must be callable" % builtins.type(self).__name__)
        self._predicate = predicate

    @property
    def type(self):
        return self._type

    @property
    def predicate(self):
        return self._predicate

    async def __cast__(self, resolver, phrase, message, previous):
        result = await cast(self._type, resolver, phrase, message, previous)
        if result is None:
            return None
        if not await invoke(self._predicate, result, phrase, message, previous):
            return None
        return result

    def __repr__(self):
        return "Validate(%r, %r)" % (self._type, self._predicate)


class Range(Validate):
    """
    Validate that the value lies in [min, max) or [min, max] when inclusive.

    Values that cannot be compared with the bounds are misses.
    """
    __slots__ = ("_min", "_max", "_inclusive")

    def __init__(self, type, min, max, inclusive=False):
        self._min = min
        self._max = max
        self._inclusive = bool(inclusive)
        super().__init__(type, self._within)

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    @property
    def inclusive(self):
        return self._inclusive

    def _within(self, value, phrase, message, previous):
        try:
            return self._min <= value and (value <= self._max if self._inclusive else value < self._max)
        except TypeError:
            return False

    def __repr__(self):
        return "Range(%r, %r, %r%s)" % (
            self._type, self._min, self._max, ", inclusive=True" if self._inclusive else ""
        )


class Compose:
    """
    Run `first`, then cast its result with `second`.

    The first result is handed to `second` as a string: None becomes "", strings
    pass through, anything else goes through str(). With ignore_void=False a miss
    from `first` is a miss for the whole composition; by default the miss is
    handed on as "".
    """
    __slots__ = ("_first", "_second", "_ignore_void")

    def __init__(self, first, second, ignore_void=True):
        self._first = _check("Compose", first)
        self._second = _check("Compose", second)
        self._ignore_void = bool(ignore_void)

    @property
    def first(self):
        return self._first

    @property
    def second(self):
        return self._second

    @property
    def ignore_void(self):
        return self._ignore_void

    async def __cast__(self, resolver, phrase, message, previous):
        result = await cast(self._first, resolver, phrase, message, previous)
        if result is None and not self._ignore_void:
            return None
        if result is None:
            result = ""
        elif not isinstance(result, str):
            result = str(result)
        return await cast(self._second, resolver, result, message, previous)

    def __repr__(self):
        return "Compose(%r, %r%s)" % (
            self._first, self._second, ", ignore_void=False" if not self._ignore_void else ""
        )


__all__ = (
    "Match",
    "Choices",
    "Regex",
    "Union",
    "Tuple",
    "Validate",
    "Range",
    "Compose",
    "cast",
    "istype",
)
