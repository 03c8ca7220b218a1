r"""
Nestargs field descriptors.

Overview
- Descriptors (one per field of a command type)
  • Option: named field with one or more aliases (e.g. -t/--string-option). A bool-typed
    option is a flag (presence means True); any other type takes the next token as value.
  • Parameter: positional field selected by its zero-based ordinal.
  • SubCommand: literal case name; optionally carries the case's own Command.
  • CommandGroup: nested union of case commands, selected by any of their names.

- Declaration
  Descriptors are declared as class attributes of a @command class and learn their
  field identifier through __set_name__; hand-written schemas pass field= explicitly.

      @command
      class TopCommand:
          verbose = Option("-v", "--verbose", type=bool)
          string_option = Option("-t", "--string-option")
          subcommand = CommandGroup(FirstCommand, SecondCommand)

- Introspection & representation
  • FieldType metaclass provides stable __repr__/__rich_repr__ and exposes the names in
    __introspectable__ as read-only properties (see utils.mirror).

Metadata (sanitized on construction)
- field: Unset | identifier string.
- descr: Unset | str | Text, non-empty when provided.
- names (Option): non-empty, shell-style aliases, no duplicates, declaration order kept.
- metavar (Option/Parameter): Unset | non-empty string; defaults to the camel-cased field.
- type (Option/Parameter): callable converter; bool marks a flag.
- ordinal (Parameter): int >= 0.
- name (SubCommand): non-empty literal that does not look like a flag.

Errors
- TypeError for wrong metadata types, ValueError for empty or malformed values.
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *


class FieldType(type):
    """
    Metaclass for field descriptors.

    Responsibilities
    - Derive a hyphenated __typename__ from the class name for messages.
    - Mirror every name listed in __introspectable__ as a read-only property.
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name, detach=name != "default") for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize metadata shared by every descriptor ('field' and 'descr').

    - field: Unset or a valid Python identifier (it names an attribute of the built object
      for classes, or a key of the Namespace for hand-written schemas).
    - descr: Unset or a non-empty str/Text; Unset becomes None.
    """
    if not isinstance(field := metadata["field"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'field' must be a string")
    elif isinstance(field, str) and not field.isidentifier():
        raise ValueError(f"{cls.__typename__} 'field' must be a valid identifier")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: normalize metadata of value-bearing descriptors (Option, Parameter).

    - metavar: Unset or a non-empty string (trimmed).
    - type: callable converter applied by the builder to the raw token.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = metavar

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: validate option aliases.

    Each alias must match r"--?[^\W\d_](-?[^\W_]+)*" ("-v", "--verbose", "--string-option").
    Duplicates are rejected and declaration order is kept (the first alias leads in help).
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(names)


class Field(metaclass=FieldType):
    """
    Base of every descriptor: owns the field identifier and binds it from the class body.
    """

    def __set_name__(self, owner, name):
        if self._field is Unset:
            self._field = name
        elif self._field != name:
            raise TypeError(
                f"{type(self).__typename__} declared as {name!r} but bound to field {self._field!r}"
            )

    def _bind(self, metadata):
        for name, object in metadata.items():
            setattr(self, "_" + name, object)


class Option(Field):
    """
    Named field with one or more aliases.

    A bool-typed option is a flag: it never consumes a following token and its value is
    True. Any other type takes the next token verbatim as its value, whatever it looks
    like (a value token is never reinterpreted as a flag or command literal).
    """

    __introspectable__ = (
        "names",
        "field",
        "type",
        "default",
        "descr",
    )

    def __new__(
            cls,
            *names,
            field=Unset,
            type=str,
            metavar=Unset,
            default=None,
            descr=Unset,
    ):
        metadata = {
            "names": names,
            "field": field,
            "type": type,
            "metavar": metavar,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_names(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        self._bind(metadata)

        if not self.takes_value and metavar is not Unset:
            raise TypeError(f"flag {cls.__typename__} cannot specify a 'metavar'")

        return self

    @property
    def takes_value(self):
        return self._type is not bool

    @property
    def metavar(self):
        """
        Placeholder shown in help; the camel-cased field identifier unless given.
        """
        if self._metavar is not Unset:
            return self._metavar
        return camelize(self._field) if self._field is not Unset else "value"

    def __option__(self):
        return self


class Parameter(Field):
    """
    Positional field selected when the shared positional ordinal equals its ordinal.
    """

    __introspectable__ = (
        "ordinal",
        "field",
        "type",
        "default",
        "descr",
    )

    def __new__(
            cls,
            ordinal,
            /,
            field=Unset,
            *,
            type=str,
            metavar=Unset,
            default=None,
            descr=Unset,
    ):
        if not isinstance(ordinal, int) or isinstance(ordinal, bool):
            raise TypeError(f"{cls.__typename__} 'ordinal' must be an integer")
        elif ordinal < 0:
            raise ValueError(f"{cls.__typename__} 'ordinal' must be zero or positive")

        metadata = {
            "ordinal": ordinal,
            "field": field,
            "type": type,
            "metavar": metavar,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        self._bind(metadata)
        return self

    @property
    def metavar(self):
        if self._metavar is not Unset:
            return self._metavar
        return self._field if self._field is not Unset else "arg%d" % self._ordinal

    def __parameter__(self):
        return self


def _resolve_command(cls, x):
    """
    Internal: return the Command behind a @command class or a Command itself.
    """
    if not hasattr(x, "__command__") or not callable(x.__command__):
        raise TypeError(f"{cls.__typename__} case must be a command or a @command class")
    return x.__command__()


class SubCommand(Field):
    """
    Literal case selector.

    The literal token is consumed when the case is selected. When 'command' is given
    (a Command or @command class) the builder resolves that case's own fields in a new
    level; otherwise the field value is the literal itself.
    """

    __introspectable__ = (
        "name",
        "field",
        "command",
        "default",
        "descr",
    )

    def __new__(cls, name, /, command=Unset, *, field=Unset, default=None, descr=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()) or name.startswith("-") or re.search(r"\s", name):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty literal that is not a flag")

        metadata = {
            "name": name,
            "field": field,
            "command": command if command is Unset else _resolve_command(cls, command),
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        self._bind(metadata)
        return self

    def __subcommand__(self):
        return self


class CommandGroup(Field):
    """
    Nested union of case commands.

    The group is selected, without consuming anything, when the current token is one of
    its case names; the nested union level then consumes the literal as a SubCommand
    and the chosen case resolves its own fields one level deeper.
    """

    __introspectable__ = (
        "name",
        "field",
        "command",
        "default",
        "descr",
    )

    def __new__(cls, *cases, field=Unset, name="command", default=None, descr=Unset):
        from .commands import Command

        if not cases:
            raise TypeError(f"{cls.__typename__} must specify at least one case")
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        metadata = {
            "name": name,
            "field": field,
            "command": Command(
                name,
                [SubCommand(case.name, case) for case in (_resolve_command(cls, case) for case in cases)],
                union=True,
            ),
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        self._bind(metadata)
        return self

    @property
    def names(self):
        """
        Case names in declaration order.
        """
        return tuple(subcommand.name for subcommand in self._command.subcommands)

    def __group__(self):
        return self


__all__ = (
    "Field",
    "Option",
    "Parameter",
    "SubCommand",
    "CommandGroup",
)

# Internal metaclass, not part of the public API.
del FieldType
