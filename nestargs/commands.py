"""
Nestargs command layer: schemas for one command level, and the @command decorator.

What this module provides
- Command: the immutable field schema of one command type (ordered Options,
  SubCommand case selectors, CommandGroup selectors and Parameters) with
  the lookups the resolver needs (alias → option, literal → case, ordinal → parameter).
- command(...): class decorator that collects descriptors from the class body,
  synthesizes __init__/__eq__/__repr__ and attaches the derived Command.
- derive(cls): build (once per class) the Command of a @command class.

Static validity (checked when a Command is constructed, before any parse)
- option aliases, parameter ordinals, case literals and field identifiers are unique
  within a level (ValueError).
- a level declaring Parameters must not declare a CommandGroup (SchemaConflictError).
- no nested level may declare a flag already declared by one of its ancestors
  (SchemaConflictError); otherwise the owner of such a flag would depend on where it
  appears on the command line.

Quick start
    from nestargs import command, Option, Parameter, CommandGroup, parse

    @command("copy")
    class Copy:
        source = Parameter(0)
        destination = Parameter(1)

    @command
    class Tool:
        verbose = Option("-v", "--verbose", type=bool)
        action = CommandGroup(Copy)

    parse(["-v", "copy", "a.txt", "b.txt"], Tool)
    # Tool(verbose=True, action=Copy(source='a.txt', destination='b.txt'))
"""
import functools
import operator
import re
import textwrap

from .faults import SchemaConflictError, FaultCode
from .fields import Field, Option, Parameter, SubCommand, CommandGroup
from .utils import *


class CommandType(type):
    """
    Metaclass that gives Command a stable typename, mirrored read-only properties and
    readable __repr__/__rich_repr__ (same conventions as FieldType).
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
                name: mirror(name) for name in namespace.get("__introspectable__", ())
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


def _descendants(subcommands, groups, seen=None):
    """
    Yield every Command reachable through the given cases and groups (depth-first).
    """
    seen = set() if seen is None else seen
    nested = [subcommand.command for subcommand in subcommands if subcommand.command]
    nested += [group.command for group in groups]
    for child in nested:
        if id(child) in seen:
            continue
        seen.add(id(child))
        yield child
        yield from _descendants(child.subcommands, child.groups, seen)


def _process_fields(cls, metadata):
    """
    Split the ordered descriptors into kinds and build the lookup tables.

    Mutates metadata in place, adding: options, subcommands, groups, parameters,
    aliases (alias → Option), cases (literal → SubCommand), selectors (literal →
    CommandGroup) and ordinals (ordinal → Parameter).
    """
    fields = []
    options = metadata["options"] = []
    subcommands = metadata["subcommands"] = []
    groups = metadata["groups"] = []
    parameters = metadata["parameters"] = []
    aliases = metadata["aliases"] = {}
    cases = metadata["cases"] = {}
    selectors = metadata["selectors"] = {}
    ordinals = metadata["ordinals"] = {}
    identifiers = set()

    for field in metadata["fields"]:
        if not isinstance(field, Field):
            raise TypeError(f"{cls.__typename__} fields must be options, parameters, subcommands or command groups")

        # Union levels evaluate to their selected case; their selectors need no identifier.
        if not metadata["union"]:
            if field.field is Unset:
                raise TypeError(f"{cls.__typename__} {type(field).__typename__} must be bound to a field")
            if field.field in identifiers:
                raise ValueError(f"{cls.__typename__} field {field.field!r} is already in use")
            identifiers.add(field.field)
        elif not isinstance(field, SubCommand):
            raise TypeError(f"{cls.__typename__} union levels can only hold subcommands")

        if isinstance(field, Option):
            for name in field.names:
                if name in aliases:
                    raise ValueError(f"{cls.__typename__} name {name!r} is already in use")
                aliases[name] = field
            options.append(field)
        elif isinstance(field, Parameter):
            if field.ordinal in ordinals:
                raise ValueError(f"{cls.__typename__} ordinal {field.ordinal} is already in use")
            ordinals[field.ordinal] = field
            parameters.append(field)
        elif isinstance(field, SubCommand):
            if field.name in cases or field.name in selectors:
                raise ValueError(f"{cls.__typename__} command name {field.name!r} is already in use")
            cases[field.name] = field
            subcommands.append(field)
        elif isinstance(field, CommandGroup):
            for name in field.names:
                if name in cases or name in selectors:
                    raise ValueError(f"{cls.__typename__} command name {name!r} is already in use")
                selectors[name] = field
            groups.append(field)
        fields.append(field)

    metadata["fields"] = fields


def _process_conflicts(cls, metadata):
    """
    Reject schemas the resolver cannot handle deterministically.

    - Parameters and a CommandGroup on the same level: a non-flag token could be either
      a positional value or a case literal.
    - A nested level redeclaring an ancestor flag: the flag would belong to whichever
      level happens to be scanning when it appears.
    """
    if metadata["parameters"] and metadata["groups"]:
        group = metadata["groups"][0]
        raise SchemaConflictError(
            "command %r declares both parameters and the command group %r" % (metadata["name"], group.field),
            code=FaultCode.SCHEMA_CONFLICT,
            token=group.field,
            hint="move the parameters into the command group's cases",
        )

    aliases = metadata["aliases"]
    for descendant in _descendants(metadata["subcommands"], metadata["groups"]):
        for name in descendant.aliases:
            if name in aliases:
                raise SchemaConflictError(
                    "flag %r of command %r is already declared by its ancestor %r" % (
                        name, descendant.name, metadata["name"]
                    ),
                    code=FaultCode.SCHEMA_CONFLICT,
                    token=name,
                    hint="rename one of the flags so every level owns distinct names",
                )


class Command(metaclass=CommandType):
    """
    Immutable field schema of one command level.

    Lifecycle
    - Built once per command type (see derive) or by hand from descriptors with field=.
    - Holds no parse state: safe to cache and to share between parse calls.

    Lookups used by the resolver
    - option(token): Option owning the alias, or None.
    - subcommand(token): SubCommand with that literal, or None.
    - group(token): CommandGroup having that case name, or None.
    - parameter(ordinal): Parameter at that ordinal, or None.
    """

    __introspectable__ = (
        "name",
        "fields",
        "factory",
        "union",
    )

    def __new__(cls, name, fields=(), /, *, factory=Unset, union=False):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        if factory is not Unset and not callable(factory):
            raise TypeError(f"{cls.__typename__} 'factory' must be callable")

        metadata = {
            "name": name,
            "fields": fields,
            "factory": factory,
            "union": bool(union),
        }
        _process_fields(cls, metadata)
        _process_conflicts(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def options(self):
        return tuple(self._options)

    @property
    def subcommands(self):
        return tuple(self._subcommands)

    @property
    def groups(self):
        return tuple(self._groups)

    @property
    def parameters(self):
        return tuple(sorted(self._parameters, key=lambda x: x.ordinal))

    @property
    def aliases(self):
        return tuple(self._aliases)

    def option(self, token):
        return self._aliases.get(token)

    def subcommand(self, token):
        return self._cases.get(token)

    def group(self, token):
        return self._selectors.get(token)

    def parameter(self, ordinal):
        return self._ordinals.get(ordinal)

    def __command__(self):
        return self


def _initializer(cls, fields):
    """
    Build a keyword-only __init__ for a command class.

    Every field becomes a keyword-only parameter whose default is the descriptor
    default; values are stored as plain instance attributes (shadowing the class-level
    descriptors).
    """
    names = [field.field for field in fields]
    signature = ["self"] + (["*"] + names if names else [])
    body = [f"self.{name} = {name}" for name in names] or ["pass"]

    exec(textwrap.dedent(f"""
        @rename("__init__")
        def __init__({", ".join(signature)}):
            {"; ".join(body)}
    """), globals(), namespace := {})

    namespace["__init__"].__kwdefaults__ = {field.field: field.default for field in fields} or None
    namespace["__init__"].__qualname__ = f"{cls.__qualname__}.__init__"
    return namespace["__init__"]


def _collect_fields(cls):
    """
    Collect descriptors from the class body, bases first, keeping declaration order.
    A subclass redeclaring a field replaces the inherited one in place.
    """
    fields = {}
    for base in reversed(cls.__mro__):
        for name, object in vars(base).items():
            if isinstance(object, Field):
                fields[name] = object
    return list(fields.values())


@functools.cache
def derive(cls, /):
    """
    Return the Command of a class, built once and memoized per class.

    Only @command classes can be derived: their generated keyword-only __init__ is
    what the builder calls with the parsed values.
    """
    if not isinstance(cls, type):
        raise TypeError("derive() argument must be a class")
    if "__commandname__" not in vars(cls):
        raise TypeError(f"derive() argument must be a @command class, not {cls.__name__!r}")
    return Command(
        vars(cls)["__commandname__"],
        _collect_fields(cls),
        factory=cls,
    )


def command(source=Unset, /, name=Unset):
    """
    Turn a class into a command type, or return a decorator that will.

    Invocation modes
    - @command                   → name is the class name
    - @command("first")          → explicit case/command name
    - command(cls, "first")      → direct form

    Effects on the class
    - __commandname__: the command name.
    - __init__(self, *, field=default, ...), __eq__, __repr__, __rich_repr__ over the fields.
    - __command__(): returns the derived Command (validated eagerly at decoration time).
    """
    if isinstance(source, str):
        source, name = Unset, source

    @rename("command")
    def wrapper(cls, /):
        if not isinstance(cls, type):
            raise TypeError("@command() must be applied to a class")
        if not isinstance(name, str | Unset):
            raise TypeError("@command() 'name' must be a string")

        fields = _collect_fields(cls)

        cls.__commandname__ = coalesce(name, cls.__name__)
        cls.__init__ = _initializer(cls, fields)

        @rename("__eq__")
        def __eq__(self, other):
            if type(self) is not type(other):
                return NotImplemented
            return all(getattr(self, x.field) == getattr(other, x.field) for x in fields)
        cls.__eq__ = __eq__
        cls.__hash__ = None

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in fields:
                yield field.field, getattr(self, field.field)
        cls.__rich_repr__ = __rich_repr__

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__name__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        cls.__repr__ = __repr__

        cls.__command__ = classmethod(lambda cls: derive(cls))
        derive(cls)
        return cls

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "command",
    "derive",
)

# Internal metaclass, not part of the public API.
del CommandType
