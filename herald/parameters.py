"""
herald parameter specifications.

overview
- parameters are declared as defaults of a command callback; the default
  object tells the dispatcher how to fill the argument:
  • Positional: filled by order from the tokens left after the flags.
  • Flag: named, always optional; boolean flags are presence-only, other
    flags take the following token as their value.
  • Rest: receives the tokens left after the positionals, as a tuple.
  • Special: supplied by the framework (actor, host context, session, label,
    help builder); ACTOR, CONTEXT, SESSION, LABEL and HELP are ready-made.
  • SessionValue: read from the per-call session under a key.
- every specification is immutable; read-only properties mirror the sanitized
  metadata and a stable repr / rich repr is generated by the metaclass.

example
    >>> @command("greet")
    ... def greet(self, actor=ACTOR, name=Positional(completer="players"),
    ...           option=Flag("-o", "--option", type=str)):
    ...     ...

notes
- metadata errors raise TypeError (wrong kind of value) or ValueError (bad
  value) when the specification is built; rules spanning several parameters
  are checked by the command declaration.
"""
import builtins
import copy
import re
from enum import StrEnum
from typing import Generic, TypeVar

from .utils import SpecType, Unset, coalesce

_T = TypeVar("_T")


class Parameter(metaclass=SpecType):
    """
    common base of every parameter specification (used for isinstance checks).
    """

    def __new__(cls, /, **metadata):
        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


def _sanitize_name(cls, name, /):
    """
    validate a parameter name (positional or rest): a non-empty word without
    whitespace, hyphens allowed inside ("player-name").
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\W\d](-?\w+)*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a single word, got {name!r}")
    return name


def _sanitize_metadata(cls, metadata, /):
    """
    validate the fields shared by value-bearing specifications.

    - type: a class (the converter table is looked up by it).
    - completer: Unset or a non-empty "name" / "name:argument" string.
    - descr: Unset or a non-empty string; becomes None when Unset.
    """
    if "type" in metadata and not isinstance(metadata["type"], builtins.type):
        raise TypeError(f"{cls.__typename__} 'type' must be a class")

    if not isinstance(completer := metadata["completer"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'completer' must be a string")
    elif isinstance(completer, str) and not (completer := completer.strip()):
        raise ValueError(f"{cls.__typename__} 'completer' cannot be empty")
    elif isinstance(completer, str) and not completer.partition(":")[0].strip():
        raise ValueError(f"{cls.__typename__} 'completer' must start with a completer name")
    metadata["completer"] = coalesce(completer)

    if not isinstance(descr := metadata.get("descr", Unset), str | Unset):
        raise TypeError(f"{cls.__typename__} description (descr) must be text")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} description (descr) cannot be blank")
    if "descr" in metadata:
        metadata["descr"] = coalesce(descr)


class Positional(Parameter, Generic[_T]):
    """
    positional, value-bearing parameter.

    fields
    - name: shown in usage ("<name>" or "[name]"); defaults to the name of the
      callback parameter it is bound to.
    - type: target type of the conversion (str by default).
    - optional: optional positionals must follow every required one; when
      absent they receive None (False for booleans).
    - completer: completer reference used by tab-completion.
    """
    __introspectable__ = (
        "name",
        "type",
        "optional",
        "completer",
        "descr",
    )

    def __new__(cls, name=Unset, *, type=str, optional=False, completer=Unset, descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "optional": bool(optional),
            "completer": completer,
            "descr": descr,
        }
        if name is not Unset:
            metadata["name"] = _sanitize_name(cls, name)
        _sanitize_metadata(cls, metadata)
        return super().__new__(cls, **metadata)

    @property
    def boolean(self):
        return self._type is bool

    def bind(self, name, /):
        """
        return this specification named after a callback parameter, unless it
        already carries an explicit name.
        """
        if self._name is not Unset:
            return self
        clone = copy.copy(self)
        clone._name = _sanitize_name(type(self), name.replace("_", "-"))
        return clone


class Flag(Parameter, Generic[_T]):
    """
    named parameter introduced by a dash token.

    fields
    - names: aliases in declaration order; the first one is canonical and is
      used in usage lines and errors. short names ("-f") can be clustered
      ("-fo"); long names ("--flag") cannot.
    - type: bool (the default) makes a presence-only flag; any other type
      makes the flag consume the following token as its value.
    - value_name: label of the value in usage lines ("[-o <value>]").
    - completer: completer reference for the value.
    """
    __introspectable__ = (
        "names",
        "type",
        "value_name",
        "completer",
        "descr",
    )

    def __new__(cls, *names, type=bool, value_name="value", completer=Unset, descr=Unset):
        metadata = {
            "names": names,
            "type": type,
            "value_name": value_name,
            "completer": completer,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        return super().__new__(cls, **metadata)

    @property
    def name(self):
        return self._names[0]

    @property
    def boolean(self):
        return self._type is bool

    @property
    def letters(self):
        """
        the single letters this flag answers to inside a cluster.
        """
        return tuple(name[1] for name in self._names if len(name) == 2)


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    validate flag names and the value label.

    - names: at least one; each matches r"--?[^\W\d_](-?[^\W_]+)*" ("-f",
      "--force", "--dry-run"); "--" alone is reserved. duplicates are rejected
      and declaration order is kept (the first name is canonical).
    - value_name: non-empty string without whitespace.
    """
    names = []
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} needs at least one dash-prefixed name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be blank")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} name {name!r} is not a valid flag name (expected '-x' or '--word')")
        elif name in names:
            raise ValueError(f"{cls.__typename__} name {name!r} is given twice")
        names.append(name)
    metadata["names"] = tuple(names)

    if not isinstance(value_name := metadata["value_name"], str):
        raise TypeError(f"{cls.__typename__} 'value_name' must be a string")
    elif not (value_name := value_name.strip()) or re.search(r"\s", value_name):
        raise ValueError(f"{cls.__typename__} 'value_name' must be a non-empty single word")
    metadata["value_name"] = value_name


class Rest(Parameter):
    """
    receives every token left after the positionals, as a tuple of strings.

    a command declares at most one; the completer (if any) serves every
    token position after the positionals.
    """
    __introspectable__ = (
        "name",
        "completer",
        "descr",
    )

    def __new__(cls, name=Unset, *, completer=Unset, descr=Unset):
        metadata = {
            "name": name,
            "completer": completer,
            "descr": descr,
        }
        if name is not Unset:
            metadata["name"] = _sanitize_name(cls, name)
        _sanitize_metadata(cls, metadata)
        return super().__new__(cls, **metadata)

    def bind(self, name, /):
        if self._name is not Unset:
            return self
        clone = copy.copy(self)
        clone._name = _sanitize_name(type(self), name.replace("_", "-"))
        return clone


class SpecialKind(StrEnum):
    ACTOR = "actor"
    CONTEXT = "context"
    SESSION = "session"
    LABEL = "label"
    HELP = "help"


class Special(Parameter):
    """
    parameter supplied by the framework rather than parsed from tokens.

    kinds
    - actor: the caller passed to execute().
    - context: the host context collaborator.
    - session: the CommandSession of the current external call.
    - label: the name the command was invoked with (alias included).
    - help: a HelpBuilder bound to the current dispatch.
    """
    __introspectable__ = (
        "kind",
    )

    def __new__(cls, kind, /):
        try:
            kind = SpecialKind(kind)
        except ValueError:
            raise ValueError(f"{cls.__typename__} 'kind' must be one of {', '.join(SpecialKind)}") from None
        return super().__new__(cls, kind=kind)


class SessionValue(Parameter):
    """
    parameter read from the session under key.

    a missing required value is a configuration error (a parent sub-command
    was expected to store it); a missing optional value gives None.
    """
    __introspectable__ = (
        "key",
        "type",
        "optional",
    )

    def __new__(cls, key, /, *, type=object, optional=False):
        if not isinstance(key, str):
            raise TypeError(f"{cls.__typename__} 'key' must be a string")
        elif not (key := key.strip()):
            raise ValueError(f"{cls.__typename__} 'key' cannot be empty")
        if not isinstance(type, builtins.type):
            raise TypeError(f"{cls.__typename__} 'type' must be a class")
        return super().__new__(cls, key=key, type=type, optional=bool(optional))


ACTOR = Special(SpecialKind.ACTOR)
CONTEXT = Special(SpecialKind.CONTEXT)
SESSION = Special(SpecialKind.SESSION)
LABEL = Special(SpecialKind.LABEL)
HELP = Special(SpecialKind.HELP)


__all__ = (
    "Parameter",
    "Positional",
    "Flag",
    "Rest",
    "SpecialKind",
    "Special",
    "SessionValue",
    "ACTOR",
    "CONTEXT",
    "SESSION",
    "LABEL",
    "HELP",
)
