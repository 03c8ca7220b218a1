"""
Nestargs faults (syntax errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure.
- ArgumentSyntaxError: the single failure kind of a parse. It carries the message,
  the offending token and rendering options, and knows how to render itself with rich.
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).

UX goals
- Token-first messages: every message quotes the token that broke the parse.
- Short titles, one-sentence bodies, a single clear hint.

Integration
- The resolver and builder raise subclasses directly (fail-fast, no recovery).
- The driving CLI (nestargs.cmdline.invoke) catches them and calls trigger(fault, shell=True, ...).
- Hosts may remap code labels via __codes__, styles via __styles__ and the program name
  via __prog__ in __main__.
"""
import sys
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
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - tokens (2110x)
      • UNRECOGNIZED_ARGUMENT, UNCLAIMED_OPTION, MISSING_VALUE
    - values (2112x)
      • INVALID_VALUE
    - schema (2120x)
      • SCHEMA_CONFLICT
    """
    # --- token errors (211xx) ---
    UNRECOGNIZED_ARGUMENT = 21101
    UNCLAIMED_OPTION      = 21102
    MISSING_VALUE         = 21103

    # --- value errors (211xx) ---
    INVALID_VALUE         = 21121

    # --- schema errors (212xx) ---
    SCHEMA_CONFLICT       = 21201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgumentSyntaxError(Exception):
    """
    A token sequence (or schema) that cannot be turned into a command object.

    Options commonly carried
    - token: the offending token (always present for parse-time faults).
    - code, title, hint: rendering metadata.
    - prog, fancy, colorful, shell, usage: set by the driving CLI before rendering.
    """
    code = Unset
    title = "syntax error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message if message is not Unset else "")
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def token(self):
        return self.options.get("token")

    def __eq__(self, other):
        if not isinstance(other, ArgumentSyntaxError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message and self.token == other.token

    __hash__ = Exception.__hash__

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)

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

        code = self.options.get("code", self.code)
        prog = text(getattr(main, "__prog__", self.options.get("prog", "nestargs")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "?", styler("code")),
            " | ",
            text(self.options.get("title", self.title).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        if usage := self.options.get("usage"):
            renders.append(Text("\n") + text(usage))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedArgumentError(ArgumentSyntaxError):
    code = FaultCode.UNRECOGNIZED_ARGUMENT
    title = "unrecognized argument"


class UnclaimedOptionError(ArgumentSyntaxError):
    code = FaultCode.UNCLAIMED_OPTION
    title = "unclaimed option"


class MissingValueError(ArgumentSyntaxError):
    code = FaultCode.MISSING_VALUE
    title = "missing option value"


class InvalidValueError(ArgumentSyntaxError):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"


class SchemaConflictError(ArgumentSyntaxError):
    code = FaultCode.SCHEMA_CONFLICT
    title = "schema conflict"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ArgumentSyntaxError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is printed via the rich console and the process exits;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "ArgumentSyntaxError",
    "UnrecognizedArgumentError",
    "UnclaimedOptionError",
    "MissingValueError",
    "InvalidValueError",
    "SchemaConflictError",
    "trigger",
)
