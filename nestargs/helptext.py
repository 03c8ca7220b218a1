"""
Nestargs help text formatter.

Layout (declaration order everywhere, parameters in ordinal order)

    usage: TopCommand [-v | --verbose] [-t | --string-option <stringOption>] <command>

    Options:
        -v, --verbose
        -t, --string-option  <stringOption>

    Commands:
        first
        second

- The usage name is the root command name followed by the path of case names.
- Sections (Options, Arguments, Commands) are only emitted when non-empty and are
  separated by one blank line; the text ends with a single newline.
- help_text() returns a styled rich Text, render_help() its plain string.

Palette keys (override through __main__.__styles__)
- usage-label, program-name, option-name, metavar, group-label, children, description
"""
from collections import defaultdict

from rich.text import Text

from .commands import Command
from .fields import SubCommand, CommandGroup

INDENT = " " * 4
GAP = " " * 2


def _resolve(schema):
    if isinstance(schema, Command):
        return schema
    if not hasattr(schema, "__command__") or not callable(schema.__command__):
        raise TypeError("help schema must be a command or a @command class")
    return schema.__command__()


def descend(command, name, /):
    """
    Follow one case name from a level to the level it selects.

    A subcommand without a command of its own has no level to show, neither does an
    unknown name: both raise ValueError.
    """
    if (subcommand := command.subcommand(name)) and subcommand.command:
        return subcommand.command
    if group := command.group(name):
        return group.command.subcommand(name).command
    raise ValueError("command %r has no subcommand %r" % (command.name, name))


def help_text(schema, path=(), /, *, colorful=True):
    """
    Render the help of 'schema', narrowed to the level reached by following 'path'.
    """
    command = _resolve(schema)
    if isinstance(path, str):
        path = (path,)
    names = [command.name]
    for name in path:
        command = descend(command, name)
        names.append(name)

    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "group-label": "bold #FFFFFF",
        "children": "bold #36C5F0",
        "description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styler(style))

    def placeholder(x):
        return Text.assemble("<", text(x.metavar, "metavar"), ">")

    def line(head, descr):
        if descr is None:
            return Text.assemble(INDENT, head)
        return Text.assemble(INDENT, head, GAP, text(descr, "description"))

    usage = [Text("usage:", styler("usage-label")), text(" ".join(names), "program-name")]
    for option in command.options:
        alias = Text(" | ").join(text(name, "option-name") for name in option.names)
        if option.takes_value:
            usage.append(Text.assemble("[", alias, " ", placeholder(option), "]"))
        else:
            usage.append(Text.assemble("[", alias, "]"))
    for parameter in command.parameters:
        usage.append(placeholder(parameter))
    if command.subcommands or command.groups:
        usage.append(Text("<command>"))

    sections = [Text(" ").join(usage)]

    if command.options:
        lines = [Text("Options:", styler("group-label"))]
        for option in command.options:
            head = Text(", ").join(text(name, "option-name") for name in option.names)
            if option.takes_value:
                head = Text.assemble(head, GAP, placeholder(option))
            lines.append(line(head, option.descr))
        sections.append(Text("\n").join(lines))

    if command.parameters:
        lines = [Text("Arguments:", styler("group-label"))]
        for parameter in command.parameters:
            lines.append(line(placeholder(parameter), parameter.descr))
        sections.append(Text("\n").join(lines))

    if command.subcommands or command.groups:
        lines = [Text("Commands:", styler("group-label"))]
        for field in command.fields:
            if isinstance(field, SubCommand):
                lines.append(line(text(field.name, "children"), field.descr))
            elif isinstance(field, CommandGroup):
                for name in field.names:
                    lines.append(line(text(name, "children"), None))
        sections.append(Text("\n").join(lines))

    return Text("\n\n").join(sections) + Text("\n")


def usage_text(schema, path=(), /):
    """
    Plain usage line (first line of the help), as shown under syntax errors.
    """
    return render_help(schema, path).split("\n", 1)[0]


def render_help(schema, path=(), /):
    """
    Plain help text of 'schema' (see help_text for the layout).
    """
    return help_text(schema, path, colorful=False).plain


__all__ = (
    "help_text",
    "usage_text",
    "render_help",
)
