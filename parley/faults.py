"""
Parley faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for user-facing issues raised
  by the argument layer. Codes are grouped by domain to keep copy consistent and
  make logs/searches predictable.
- ArgumentException / ArgumentWarning: base types that carry message + options
  and know how to render themselves in a friendly, lowercased, actionable way.
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

What is *not* a fault
- A cast miss is a None result, never an exception.
- Timeouts, cancel words, exhausted retries and breakouts end a prompt session
  with a ParsingFlag (see parley.flags), never with an exception.
- Transport failures propagate untouched to the caller.

Integration
- The Handler surfaces faults through Handler.trigger(fault, **overrides), which
  merges its runtime options (shell, fancy, colorful, deferred).
- In non-shell mode, exceptions are raised and warnings are emitted through the
  warnings module; in shell mode, both are rendered via rich on stderr.
"""
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the argument layer (stable identifiers).

    grouping (by high-level domain)
    - sessions (211xx)
      • ACTIVE_PROMPT
    - types (212xx)
      • UNRESOLVED_TYPE

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired (e.g., to shorter labels).
    """
    # --- session errors (21xxx) ---
    ACTIVE_PROMPT               = 21101

    # --- warnings (22xxx) ---
    UNRESOLVED_TYPE             = 22201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, defaults):
    """
    shared rich renderer for exceptions and warnings.

    options read from the fault
    - colorful, fancy: presentation switches.
    - title, code, hint: header and footer copy.
    - prog: program name shown in the header (falls back to __prog__ in __main__,
      then to "parley").
    - ratio: optional width ratio when nested in a panel.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, defaults | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    width = console.width - 4 * fancy

    prog = text(options.get("prog", getattr(main, "__prog__", "parley")), styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if code else "?", styler("code")),
        " | ",
        text(str(options.get("title", "")).title(), styler("title")),
        " ]"
    )
    message = text(fault.message, styler("message"))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options.get("hint"), styler("hint")))

    if fancy:
        try:
            width = int(width * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(message, hint), title=header, title_align="left", width=width)

    return Group(header, message, hint)


class ArgumentException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ActivePromptError(ArgumentException): ...


class ArgumentWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnresolvedTypeWarning(ArgumentWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings are emitted.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgumentException",
    "ActivePromptError",
    "ArgumentWarning",
    "UnresolvedTypeWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
