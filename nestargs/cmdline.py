"""
Nestargs entry points.

- parse(tokens, schema): build the command object or raise ArgumentSyntaxError.
- parse_with_help(tokens, schema): same, but "-h"/"--help" at any level yields a
  HelpRequested carrying every level that asked for help. Syntax errors still win.
- render_help(schema, path=()): help text of a level (see nestargs.helptext).
- invoke(schema, argv): driving-CLI convenience; prints help (exit 0) or the fault and
  usage (exit 1), returns the object otherwise.

Schemas are Command objects or @command classes; tokens exclude the program name.
"""
import shlex
import sys

from rich.console import Console

from .builder import build
from .commands import Command
from .faults import ArgumentSyntaxError, trigger
from .helptext import help_text, usage_text, render_help
from .resolver import Session
from .utils import Unset


def _resolve(schema):
    if isinstance(schema, Command):
        return schema
    if not hasattr(schema, "__command__") or not callable(schema.__command__):
        raise TypeError("schema must be a command or a @command class")
    return schema.__command__()


class HelpRequested:
    """
    Outcome of parse_with_help() when at least one level saw a help flag.

    - levels: commands that saw the flag, in the order it was seen.
    - routes: case-name paths from the root to each of those levels.
    - render(): plain help of the innermost requesting level.
    """

    def __init__(self, root, records, /):
        self.root = root
        self.levels = tuple(command for command, _ in records)
        self.routes = tuple(route for _, route in records)

    @property
    def route(self):
        return max(self.routes, key=len)

    def text(self, *, colorful=True):
        return help_text(self.root, self.route, colorful=colorful)

    def render(self):
        return render_help(self.root, self.route)

    def __eq__(self, other):
        if not isinstance(other, HelpRequested):
            return NotImplemented
        return self.root is other.root and self.routes == other.routes

    __hash__ = None

    def __repr__(self):
        return "HelpRequested(routes=%r)" % (self.routes,)


def parse(tokens, schema, /):
    """
    Parse 'tokens' against 'schema' and return the built object.

    Help flags get no special treatment here: a schema declaring "-h" sees it as a
    regular option, otherwise it is an unrecognized argument.
    """
    return build(Session(tokens), _resolve(schema))


def parse_with_help(tokens, schema, /):
    command = _resolve(schema)
    session = Session(tokens, help=True)
    result = build(session, command)
    if session.helps:
        return HelpRequested(command, session.helps)
    return result


def invoke(schema, argv=Unset, /, *, fancy=False, colorful=True):
    """
    Run a parse the way a program entry point would.

    - argv: token list, a shell-like string (split with shlex) or sys.argv[1:] by default.
    - help: printed to stdout, then exit status 0.
    - syntax error: rendered fault and usage line on stderr, then exit status 1.
    """
    command = _resolve(schema)
    if argv is Unset:
        argv = sys.argv[1:]
    elif isinstance(argv, str):
        argv = shlex.split(argv)

    try:
        result = parse_with_help(argv, command)
    except ArgumentSyntaxError as fault:
        trigger(
            fault,
            shell=True,
            fancy=fancy,
            colorful=colorful,
            prog=command.name,
            usage=usage_text(command),
        )
        raise  # unreachable, trigger() exits in shell mode

    if isinstance(result, HelpRequested):
        Console(no_color=not colorful, highlight=False).print(result.text(colorful=colorful), end="", soft_wrap=True)
        sys.exit(0)
    return result


__all__ = (
    "HelpRequested",
    "parse",
    "parse_with_help",
    "render_help",
    "invoke",
)
