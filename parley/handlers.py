"""
Parley handler and command seam.

The dispatcher that tokenizes messages and routes them to commands lives outside
this package. What the argument layer needs from it is modelled here:

- Command: groups the Arguments of one command, carries the command-wide default
  prompt layer, and binds each of its arguments to itself.
- Handler: the long-lived owner of
  • the TypeResolver used for named types,
  • the handler-wide default prompt layer,
  • the command lookahead used by breakouts (parse_command),
  • the registry of active prompt sessions, keyed by (channel id, author id),
  • the runtime options (shell, fancy, colorful, deferred) used to surface faults.

Typical wiring
    >>> handler = Handler(default_prompt=Prompt(time=60), lookahead=dispatcher.lookahead)
    >>> ping = handler.register(Command("ping", Argument("count", type="integer")))
    >>> if not handler.has_prompt(message.channel, message.author):
    ...     await dispatcher.dispatch(message)
"""
import logging

from .arguments import Argument
from .faults import *
from .prompts import Prompt
from .resolver import TypeResolver
from .utils import *

logger = logging.getLogger(__name__)


class Command(metaclass=SpecType):
    """
    A named group of arguments.

    Parameters
    - id: non-empty command identifier.
    - arguments: Argument instances, in declaration order. Ids must be unique and
      an argument can only belong to one command.
    - aliases: extra names for the command (informational for the dispatcher).
    - default_prompt: command-wide prompt layer (Prompt, mapping, or Unset).
    """
    __introspectable__ = (
        "id",
        "aliases",
        "arguments",
        "default_prompt",
    )
    __displayable__ = (
        "id",
        "aliases",
        "default_prompt",
    )

    def __init__(self, id, /, *arguments, aliases=(), default_prompt=Unset):
        if not isinstance(id, str):
            raise TypeError(f"{type(self).__typename__} 'id' must be a string")
        elif not (id := id.strip()):
            raise ValueError(f"{type(self).__typename__} 'id' cannot be empty")

        if isinstance(aliases, str) or not all(isinstance(alias, str) and alias.strip() for alias in aliases):
            raise TypeError(f"{type(self).__typename__} 'aliases' must be non-empty strings")

        ids = set()
        for argument in arguments:
            if not isinstance(argument, Argument):
                raise TypeError(f"{type(self).__typename__} arguments must be Argument instances")
            if argument.id in ids:
                raise ValueError(f"{type(self).__typename__} argument ids cannot contain duplicates ({argument.id!r})")
            if argument.command is not None:
                raise ValueError(f"argument {argument.id!r} already belongs to command {argument.command.id!r}")
            ids.add(argument.id)

        self._id = id
        self._aliases = tuple(alias.strip() for alias in aliases)
        self._arguments = tuple(arguments)
        self._default_prompt = Prompt.coerce(default_prompt)
        self._handler = None

        for argument in self._arguments:
            argument._bind(self)

    @property
    def handler(self):
        return self._handler

    def argument(self, id, /):
        """
        Return the argument registered under `id` (KeyError when missing).
        """
        for argument in self._arguments:
            if argument.id == id:
                return argument
        raise KeyError(id)


class Handler:
    """
    Long-lived owner of the resolver, default prompt, lookahead and the active
    prompt registry.

    Parameters
    - resolver: TypeResolver (a default one with the built-in types when omitted).
    - default_prompt: handler-wide prompt layer.
    - lookahead: callable(message) -> truthy when the message is a command
      invocation; may be a coroutine function. Without one, breakouts never fire.
    - options: fault surfacing options (shell, fancy, colorful, deferred).
    """

    def __init__(self, resolver=None, /, *, default_prompt=Unset, lookahead=None, **options):
        if resolver is not None and not isinstance(resolver, TypeResolver):
            raise TypeError("Handler 'resolver' must be a TypeResolver")
        if lookahead is not None and not callable(lookahead):
            raise TypeError("Handler 'lookahead' must be callable")

        self._resolver = resolver if resolver is not None else TypeResolver()
        self._default_prompt = Prompt.coerce(default_prompt)
        self._lookahead = lookahead
        self._options = {"shell": False, "fancy": False, "colorful": False, "deferred": False} | options
        self._commands = {}
        self._prompts = set()

    @property
    def resolver(self):
        return self._resolver

    @property
    def default_prompt(self):
        return self._default_prompt

    @property
    def commands(self):
        return dict(self._commands)

    def register(self, command, /):
        """
        Attach `command` to this handler and return it.

        Arguments whose named type is unknown to the resolver are reported with
        UnresolvedTypeWarning (casting them still falls back to the raw phrase).
        """
        if not isinstance(command, Command):
            raise TypeError("Handler.register() argument must be a Command")
        if command.id in self._commands:
            raise ValueError(f"command {command.id!r} is already registered")
        if command.handler is not None:
            raise ValueError(f"command {command.id!r} already belongs to another handler")

        command._handler = self
        self._commands[command.id] = command

        for argument in command.arguments:
            if isinstance(argument.type, str) and argument.type not in self._resolver:
                self.trigger(UnresolvedTypeWarning(
                    "argument %r of command %r uses unknown type %r" % (argument.id, command.id, argument.type),
                    title="unresolved type",
                    code=FaultCode.UNRESOLVED_TYPE,
                    argument=argument,
                    hint="register the type on the handler's resolver or the raw phrase will be used",
                    docs=getdoc(FaultCode.UNRESOLVED_TYPE),
                ))

        logger.debug("registered command %r with %d argument(s)", command.id, len(command.arguments))
        return command

    async def parse_command(self, message, /):
        """
        Ask the lookahead whether `message` is a command invocation.
        """
        if self._lookahead is None:
            return None
        return await invoke(self._lookahead, message)

    def add_prompt(self, channel, author, /):
        """
        Mark (channel, author) as having an active prompt session.

        Returns
        - True when registered; False when the fault was only reported (shell
          mode with deferred faults).

        Faults
        - ActivePromptError: the pair already has one.
        """
        key = (channel.id, author.id)
        if key in self._prompts:
            self.trigger(ActivePromptError(
                "author %r already has an active prompt in channel %r" % (author.id, channel.id),
                title="active prompt",
                code=FaultCode.ACTIVE_PROMPT,
                channel=channel,
                author=author,
                hint="skip dispatching messages while has_prompt() is true",
                docs=getdoc(FaultCode.ACTIVE_PROMPT),
            ))
            return False
        self._prompts.add(key)
        return True

    def remove_prompt(self, channel, author, /):
        self._prompts.discard((channel.id, author.id))

    def has_prompt(self, channel, author, /):
        return (channel.id, author.id) in self._prompts

    def trigger(self, fault, /, **overrides):
        """
        Surface `fault` with this handler's options merged with `overrides`.
        """
        trigger(fault, **self._options | overrides)

    def __repr__(self):
        return "Handler(commands=%r, prompts=%d)" % (tuple(self._commands), len(self._prompts))


__all__ = (
    "Command",
    "Handler",
)
