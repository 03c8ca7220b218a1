"""
Nestargs utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the fields, commands and resolver layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, distinct from None (None is a legal field default).

- coalesce(value, default=None)
  • Replace Unset with a default while keeping falsey values such as None/0/"".

- rename(callable, name) / @rename("name")
  • Give generated callables (e.g. synthesized __init__) clean names for tracebacks.

- mirror("attr")
  • Read-only property over a private backing field (self._attr); containers come
    back as fresh copies so public state cannot be mutated from outside.

- camelize(text)
  • Turn a snake_case field identifier into the lowerCamel placeholder used in help.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> camelize("string_option")
    'stringOption'
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false, printable as "Unset", sealed, and a per-process singleton.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
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

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    None, 0, "" and other falsey values are returned untouched; only Unset is replaced.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator that will.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
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


def _detach(object):
    """
    Recursively copy containers so callers never hold our backing storage.

    - Sequence (non-string) → tuple, Mapping → dict, Set → set; anything else as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /, *, detach=True):
    """
    Define a read-only property that mirrors the private field "_{name}".

    Containers are returned as detached copies (see _detach) unless detach is False;
    user-supplied values such as field defaults must come back untouched.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        if not detach:
            return getattr(self, "_" + name)
        return _detach(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def camelize(text, /):
    """
    Convert a snake_case identifier into lowerCamel form.

    Leading/trailing underscores are dropped and runs of underscores count as one
    separator: "string_option" → "stringOption", "_dest__path_" → "destPath".
    """
    if not isinstance(text, str):
        raise TypeError("camelize() argument must be a string")
    head, *tail = re.split(r"_+", text.strip("_")) or [""]
    return head[:1].lower() + head[1:] + "".join(part[:1].upper() + part[1:] for part in tail)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Used as the default for descriptor metadata where None is itself a meaningful
value (for example a field default of None).
"""


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "camelize",
    "UnsetType",
    "Unset",
)
