"""
Named type registry.

A TypeResolver maps type names (the str form of a type spec) to casters. Every
handler owns one; arguments look their named types up through it at cast time,
so a type registered after a command was declared is still honored.

Built-in types
- string:     the phrase itself.
- lowercase:  the phrase, lowercased.
- uppercase:  the phrase, uppercased.
- charCodes:  list of code points of the phrase.
- number:     float; NaN is rejected.
- integer:    int (base 10, surrounding whitespace ignored).
- bigint:     int (same as integer; Python integers are unbounded).
- url:        urllib.parse.SplitResult with both scheme and network location.
- date:       datetime.datetime from an ISO 8601 phrase.
- color:      int from a hex color ("#ff8800", "ff8800", "#f80").

Every built-in returns None for an empty phrase or input it cannot read; none of
them raises on user input.
"""
import math
import re
from datetime import datetime
from urllib.parse import urlsplit


def _string(phrase, message, previous):
    return phrase or None


def _lowercase(phrase, message, previous):
    return phrase.lower() if phrase else None


def _uppercase(phrase, message, previous):
    return phrase.upper() if phrase else None


def _char_codes(phrase, message, previous):
    return list(map(ord, phrase)) if phrase else None


def _number(phrase, message, previous):
    try:
        number = float(phrase)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    return number


def _integer(phrase, message, previous):
    if not re.fullmatch(r"\s*[+-]?\d+\s*", phrase):
        return None
    return int(phrase)


def _url(phrase, message, previous):
    try:
        url = urlsplit(phrase.strip("<>"))
    except ValueError:
        return None
    if not url.scheme or not url.netloc:
        return None
    return url


def _date(phrase, message, previous):
    try:
        return datetime.fromisoformat(phrase)
    except ValueError:
        return None


def _color(phrase, message, previous):
    match = re.fullmatch(r"#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})", phrase)
    if match is None:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(digit * 2 for digit in digits)
    return int(digits, 16)


BUILTIN_TYPES = {
    "string": _string,
    "lowercase": _lowercase,
    "uppercase": _uppercase,
    "charCodes": _char_codes,
    "number": _number,
    "integer": _integer,
    "bigint": _integer,
    "url": _url,
    "date": _date,
    "color": _color,
}


class TypeResolver:
    """
    Registry of named casters.

    Parameters
    - types: optional mapping of extra name → caster entries, layered on top of
      the built-in types.
    - builtins: when False, start from an empty registry.
    """

    def __init__(self, types=None, /, *, builtins=True):
        self._types = dict(BUILTIN_TYPES) if builtins else {}
        if types is not None:
            self.update(types)

    def lookup(self, name, /):
        """
        Return the caster registered under `name`, or None.
        """
        return self._types.get(name)

    def register(self, name, caster=None, /):
        """
        Register `caster` under `name`; replaces any previous entry.

        Usable as a decorator when `caster` is omitted:
            @resolver.register("even")
            def even(phrase, message, previous): ...
        """
        if not isinstance(name, str):
            raise TypeError("type names must be strings")
        elif not (name := name.strip()):
            raise ValueError("type names cannot be empty")

        if caster is None:
            return lambda caster: self.register(name, caster)

        if not callable(caster):
            raise TypeError("type %r must be registered with a callable" % name)
        self._types[name] = caster
        return caster

    def update(self, types, /):
        for name, caster in dict(types).items():
            self.register(name, caster)

    def unregister(self, name, /):
        self._types.pop(name, None)

    @property
    def names(self):
        return frozenset(self._types)

    def __contains__(self, name):
        return name in self._types

    def __repr__(self):
        return "TypeResolver(%s)" % ", ".join(sorted(self._types))


__all__ = (
    "BUILTIN_TYPES",
    "TypeResolver",
)
