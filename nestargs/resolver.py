"""
Nestargs command resolver: the per-level field matching state machine.

Overview
- Session: mutable state of one parse call (token cursor, positional ordinal, command
  stack, skip/defer buffer, help collector, route). Never shared between calls.
- Resolver: one per open command level. It is pushed on the session's command stack when
  opened and popped when closed, strictly LIFO.

States of a Resolver
- scanning: match the token at the cursor against this level, in order
    1. help flag (when enabled): record the level, skip the token, repeat
    2. option alias → subcommand literal → command group case → parameter at the ordinal
    3. flag owned by an enclosing level: defer it (with its value token) and repeat
    4. anything else: UnrecognizedArgumentError
  then switch to draining once the cursor is exhausted.
- draining: claim the first deferred entry owned by this level, or report END.
- END: terminal. When the outermost level ends, any deferred entry left over is an
  UnclaimedOptionError.

Protocol (driven by nestargs.builder)
    with Resolver(session, command) as resolver:
        while (field := resolver.next()) is not END:
            value = resolver.read(field)  # not called for command groups
"""
import functools
import logging
from typing import NamedTuple, final

from .faults import UnrecognizedArgumentError, UnclaimedOptionError, MissingValueError
from .fields import CommandGroup
from .utils import Unset

logger = logging.getLogger(__name__)

HELP_FLAGS = ("-h", "--help")


@final
class EndOfType:
    """
    Sentinel reported by Resolver.next() once a level has nothing left to resolve.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "END"


END = EndOfType()

SCANNING = "scanning"
DRAINING = "draining"


class Deferral(NamedTuple):
    """
    An ancestor-owned option seen while a nested level was scanning.

    'value' is the raw token captured right after the flag, or None for flags.
    """
    flag: str
    value: str | None


def is_flag(token):
    return token.startswith("-")


class Session:
    """
    State shared by every level of one parse call.

    Attributes
    - tokens: immutable token tuple.
    - cursor: index of the next unconsumed token.
    - ordinal: positional ordinal, one counter for the whole nested chain.
    - stack: open resolvers, innermost last.
    - deferred: skip/defer buffer of Deferral entries, insertion ordered.
    - helps: (command, route) records of every level that saw a help flag.
    - route: case literals consumed on the way to the innermost level.
    - help: whether help flags are intercepted.
    """

    def __init__(self, tokens, /, *, help=False):
        if isinstance(tokens, str):
            raise TypeError("tokens must be a sequence of strings, not a single string")
        tokens = tuple(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("tokens must be strings")
        self.tokens = tokens
        self.cursor = 0
        self.ordinal = 0
        self.stack = []
        self.deferred = []
        self.helps = []
        self.route = []
        self.help = bool(help)

    @property
    def exhausted(self):
        return self.cursor >= len(self.tokens)

    @property
    def token(self):
        return None if self.exhausted else self.tokens[self.cursor]

    def take(self, flag):
        """
        Consume the token following an option verbatim, whatever it looks like.
        """
        if self.exhausted:
            raise MissingValueError(
                "option %r expects a value but none was given" % flag,
                token=flag,
                hint="pass the value right after the option",
            )
        token = self.tokens[self.cursor]
        self.cursor += 1
        return token


class Resolver:
    """
    Field resolver of one command level.

    next() selects the next field of this level (or returns END); read() returns the raw
    value of the field just selected. Command groups have no value of their own: the
    caller opens a nested resolver on the group's union command instead.
    """

    def __init__(self, session, command, /):
        self.session = session
        self.command = command
        self.state = SCANNING
        self.depth = len(session.stack)
        self._anchor = len(session.route)
        self._pending = Unset
        self._flag = None
        session.stack.append(self)
        logger.debug("open %r at depth %d", command.name, self.depth)

    @property
    def ancestors(self):
        """
        Enclosing resolvers, innermost first.
        """
        return tuple(reversed(self.session.stack[:self.depth]))

    def next(self):
        if self.state is END:
            return END
        if self.state == SCANNING and (field := self._scan()) is not END:
            return field
        return self._drain()

    def read(self, field, /):
        if not self._pending or self._pending[0] is not field:
            raise RuntimeError("read() must follow the next() call that selected the field")
        if isinstance(field, CommandGroup):
            raise TypeError("command groups are resolved by a nested resolver, not read")
        field, value = self._pending
        self._pending = Unset
        if value is Unset:
            value = self.session.take(self._flag)
        return value

    def close(self):
        session = self.session
        if not session.stack or session.stack[-1] is not self:
            raise RuntimeError("resolvers must be closed in reverse opening order")
        session.stack.pop()
        del session.route[self._anchor:]
        logger.debug("close %r", self.command.name)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _select(self, field, value):
        self._pending = (field, value)
        return field

    def _scan(self):
        session = self.session
        command = self.command

        while not session.exhausted:
            token = session.token

            if session.help and token in HELP_FLAGS:
                session.helps.append((command, tuple(session.route)))
                session.cursor += 1
                logger.debug("help requested at %r", command.name)
                continue

            if is_flag(token):
                if option := command.option(token):
                    session.cursor += 1
                    self._flag = token
                    logger.debug("%r selects option %r", command.name, token)
                    return self._select(option, Unset if option.takes_value else True)
            else:
                if subcommand := command.subcommand(token):
                    session.cursor += 1
                    if subcommand.command:
                        session.route.append(token)
                    logger.debug("%r selects case %r", command.name, token)
                    return self._select(subcommand, token)
                if group := command.group(token):
                    logger.debug("%r selects group %r on %r", command.name, group.field, token)
                    return self._select(group, Unset)
                if parameter := command.parameter(session.ordinal):
                    session.cursor += 1
                    session.ordinal += 1
                    logger.debug("%r selects parameter %d", command.name, parameter.ordinal)
                    return self._select(parameter, token)

            if is_flag(token) and self._defer(token):
                continue

            raise UnrecognizedArgumentError(
                "unrecognized argument %r" % token,
                token=token,
                hint="check the spelling, or where the argument sits relative to the subcommands",
            )

        self.state = DRAINING
        return END

    def _defer(self, token):
        """
        Push an ancestor-owned flag (and its value token) onto the buffer.
        """
        session = self.session
        for ancestor in self.ancestors:
            if option := ancestor.command.option(token):
                session.cursor += 1
                value = session.take(token) if option.takes_value else None
                session.deferred.append(Deferral(token, value))
                logger.debug("%r defers %r to %r", self.command.name, token, ancestor.command.name)
                return True
        return False

    def _drain(self):
        session = self.session
        for index, deferral in enumerate(session.deferred):
            if option := self.command.option(deferral.flag):
                del session.deferred[index]
                logger.debug("%r claims deferred %r", self.command.name, deferral.flag)
                return self._select(option, deferral.value if option.takes_value else True)

        self.state = END
        if self.depth == 0 and session.deferred:
            flag = session.deferred[0].flag
            raise UnclaimedOptionError(
                "option %r was not claimed by any command" % flag,
                token=flag,
            )
        return END


__all__ = (
    "END",
    "HELP_FLAGS",
    "Deferral",
    "Session",
    "Resolver",
)
