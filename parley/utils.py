"""
Parley utilities (internal helpers, carefully exposed)

Scope
- Core building blocks used across the package for consistent semantics.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the casting, prompting and argument layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with defensive copies
    for containers to discourage accidental mutation of public API state.

- resolve(value) / invoke(callable, *args)
  • Await a value only when it is awaitable, so user callbacks may be plain or async.

- SpecType
  • Metaclass giving configuration classes read-only mirrored fields and a stable repr.

- lines(content)
  • Flatten a list of lines into one newline-joined block (other content passes through).

Usage guidance
- Prefer Unset for API defaults when None is a meaningful user value; materialize with coalesce().
- Use rename() on dynamic callables so tracebacks remain readable.
- Use mirror() to expose internal state safely as read-only properties.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> await invoke(lambda x: x + 1, 1)   # 2
    >>> lines(["a", "b"])                  # "a\\nb"
"""
import builtins
import functools
import inspect
import operator
import re
from collections.abc import Sequence
from typing import final


@final
class UnsetType:
    """
    Singleton sentinel type representing an "unset" value.

    Intent
    - Used by the API to distinguish "not provided" from a user-supplied value
      (including None or other falsy values). Prompt layers rely on it to merge
      field-by-field.

    Behavior
    - Truthiness: bool(Unset) is False.
    - Identity: Unset is a process-wide singleton (see __new__).
    - Display: repr(Unset) -> "Unset".
    - Final: subclassing is forbidden to preserve semantics.
    """

    def __or__(self, other, /):
        """
        Support UnsetType | T in isinstance checks (internal convenience only).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support T | UnsetType in isinstance checks (internal convenience only).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is the Unset sentinel, in which case the
    provided default is returned. Falsey values like None, 0, "" or [] are
    preserved as-is; they are not treated as “unset”.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None   # None is preserved, not replaced
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Notes
    - Only metadata is updated; behavior is untouched.
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values, processing nested items.

    Behavior
    - list: returns a new list with each element processed.
    - dict: returns a new dict with the same keys and processed values.
    - set: returns a new set with each element processed.
    - Anything else (tuples, frozensets, mapping proxies, strings, callables,
      patterns) is returned as-is since it is immutable or owned elsewhere.
    """
    if isinstance(object, list):
        return list(map(_immortalize, object))
    elif isinstance(object, dict):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from an attribute named "_{name}" on the
    instance and hands out a copy for mutable containers.

    Example
    - Given self._flag, declare flag = mirror("flag") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


async def resolve(object, /):
    """
    Await `object` when it is awaitable, otherwise return it unchanged.
    """
    if inspect.isawaitable(object):
        return await object
    return object


async def invoke(callable, /, *args):
    """
    Call `callable` with positional `args` and resolve its result.

    Casters, predicates, default suppliers, prompt suppliers and modifiers may
    all be plain functions or coroutine functions; this is the single place
    where that difference is absorbed.
    """
    return await resolve(callable(*args))


def lines(content, /):
    """
    Join a list/tuple of lines with newlines; return anything else as-is.
    """
    if isinstance(content, Sequence) and not isinstance(content, str | bytes | bytearray):
        return "\n".join(map(str, content))
    return content


class SpecType(type):
    """
    Metaclass that turns configuration classes into introspectable specs.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__ (backed by "_{name}" attributes), unless
      the class body already defines them.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics, unless the class body provides its own.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in validation messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
        )

        if "__repr__" not in namespace:
            @rename("__repr__")
            def __repr__(self):
                return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
            self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                    yield name, getattr(self, name)
            self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "resolve",
    "invoke",
    "lines",

    # Types
    "UnsetType",
    "SpecType",

    # Constants
    "Unset",
)
