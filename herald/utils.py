"""
small helpers shared by every herald layer.

- Unset: "not provided" marker, distinct from None; `str | Unset` works in
  isinstance checks.
- coalesce(value, default): Unset -> default, anything else unchanged.
- @rename(name): give generated functions a readable __name__/__qualname__.
- mirror(name): read-only property over the private "_name" field.
- startswith / prefixed: case-insensitive prefix filtering for completion.
"""
import functools
import re
from collections.abc import Iterable, MutableSequence, MutableSet
from typing import final


@final
class UnsetType:
    """
    singleton marker type; falsy, printed as "Unset", not subclassable.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    # isinstance(x, str | Unset) reads better than str | UnsetType
    def __or__(self, other, /):
        try:
            return UnsetType | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    object, or default when object is Unset (None is a real value here).
    """
    return default if object is Unset else object


def rename(name, /):
    """
    decorator setting __name__ and __qualname__ of a generated function.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() expects the new name as a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detached(object):
    # mutable containers are handed out as shallow copies
    if isinstance(object, dict | MutableSequence | MutableSet):
        return type(object)(object)
    return object


def mirror(name, /):
    """
    property returning the private field "_{name}"; there is no setter.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() expects a field name")

    @rename(name)
    def getter(self):
        return _detached(getattr(self, "_" + name))

    return property(getter)


def _rich_repr(self):
    cls = type(self)
    for field in getattr(cls, "__displayable__", None) or cls.__introspectable__:
        yield field, getattr(self, field)


def _repr(self):
    return "%s(%s)" % (type(self).__typename__, ", ".join(f"{field}={value!r}" for field, value in self.__rich_repr__()))


class SpecType(type):
    """
    metaclass of the immutable specification classes.

    - __typename__ is the hyphenated class name ("SessionValue" -> "session-value")
      and prefixes validation messages.
    - every name in __introspectable__ becomes a mirror() property.
    - __rich_repr__ yields __displayable__ (or __introspectable__) fields and
      __repr__ is built from it, unless the class defines its own.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        namespace = dict(namespace)
        namespace["__typename__"] = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name).lower()
        namespace.setdefault("__introspectable__", ())
        namespace.setdefault("__rich_repr__", _rich_repr)
        namespace.setdefault("__repr__", _repr)
        for field in namespace["__introspectable__"]:
            namespace[field] = mirror(field)
        return super().__new__(cls, name, bases, namespace, **options)


def startswith(text, prefix, /):
    return text.casefold().startswith(prefix.casefold())


def prefixed(candidates, partial, /):
    """
    the candidates starting with partial (ignoring case), in input order and
    without duplicates; an empty partial keeps them all.
    """
    if not isinstance(candidates, Iterable):
        raise TypeError("prefixed() expects an iterable of candidates")
    return list(dict.fromkeys(candidate for candidate in candidates if startswith(candidate, partial)))


__all__ = (
    "SpecType",
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "startswith",
    "prefixed",
)
