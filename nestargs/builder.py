"""
Nestargs object builder.

build(session, command) drives one Resolver per command level and turns the selected
fields into objects:
- options and parameters: the raw token run through the descriptor's 'type'
  (flags are True);
- subcommands: the case literal, or the object built from the case's own command;
- command groups: the object built by the nested union level, which evaluates to the
  selected case object.

Fields never selected keep their descriptor default; an option given twice keeps the
last value. Levels with a factory (decorated classes) are built with
factory(**values), hand-written schemas build a Namespace.
"""
import logging
from types import SimpleNamespace

from .faults import InvalidValueError
from .fields import Option, SubCommand, CommandGroup
from .resolver import Resolver, END

logger = logging.getLogger(__name__)


class Namespace(SimpleNamespace):
    """
    Attribute bag built for schemas without a factory; compares structurally.
    """

    def __rich_repr__(self):
        yield from vars(self).items()


def convert(field, raw, /):
    """
    Apply the descriptor converter to a raw token.

    ValueError and TypeError raised by the converter become InvalidValueError citing the
    token; anything else propagates untouched.
    """
    if isinstance(field, Option) and not field.takes_value:
        return raw
    try:
        return field.type(raw)
    except (ValueError, TypeError) as error:
        name = field.names[0] if isinstance(field, Option) else "<%s>" % field.metavar
        raise InvalidValueError(
            "invalid value %r for %s: %s" % (raw, name, error),
            token=raw,
            hint="expected a value accepted by %s" % getattr(field.type, "__name__", repr(field.type)),
        ) from None


def build(session, command, /):
    """
    Build the object of one command level (and, recursively, of its selected cases).
    """
    values = {field.field: field.default for field in command.fields if not command.union}
    selected = None

    with Resolver(session, command) as resolver:
        while (field := resolver.next()) is not END:
            if isinstance(field, CommandGroup):
                value = build(session, field.command)
            elif isinstance(field, SubCommand):
                literal = resolver.read(field)
                value = build(session, field.command) if field.command else literal
            else:
                value = convert(field, resolver.read(field))

            if command.union:
                selected = value
            else:
                values[field.field] = value

    if command.union:
        return selected
    if command.factory:
        logger.debug("build %r with %r", command.name, values)
        return command.factory(**values)
    return Namespace(**values)


__all__ = (
    "Namespace",
    "build",
)
