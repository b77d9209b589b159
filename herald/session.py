"""
per-call session: a key/value bag created for every external execute() call
and handed down through sub-command recursion.
"""
from collections.abc import MutableMapping

from .utils import Unset


class CommandSession(MutableMapping):
    """
    mutable key/value store scoped to one top-level command invocation.

    - behaves like a dict (session["name"] = value, "name" in session, ...).
    - value(key, type) is the typed accessor: a missing key raises KeyError,
      a value of another type raises TypeError.
    """

    def __init__(self, values=(), /):
        self._values = dict(values)

    def __getitem__(self, key):
        return self._values[key]

    def __setitem__(self, key, value):
        if not isinstance(key, str):
            raise TypeError("session keys must be strings")
        self._values[key] = value

    def __delitem__(self, key):
        del self._values[key]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"{type(self).__name__}({self._values!r})"

    def __rich_repr__(self):
        yield from self._values.items()

    def value(self, key, /, type=object, default=Unset):
        try:
            value = self._values[key]
        except KeyError:
            if default is not Unset:
                return default
            raise KeyError(f"session value {key!r} is not set") from None
        if not isinstance(value, type):
            raise TypeError(f"session value {key!r} must be {type.__name__}, got {value.__class__.__name__}")
        return value


__all__ = (
    "CommandSession",
)
