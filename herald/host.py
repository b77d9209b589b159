"""
host collaborator: everything the dispatch engine needs from the application.

interface
- send_line(actor, text): deliver one line (str or rich Text) to the actor;
  Host flattens Text to its plain string, ConsoleHost keeps the styles.
- send_fault(actor, fault): report a CommandException; Host sends its
  message as one line, ConsoleHost prints the fault panel.
- has_permission(actor, name) -> bool: permission predicate.
- parse_value(type, text) -> value: convert a token to a declared type;
  raises ValueError/TypeError for bad input.
- context: opaque object handed to Special(CONTEXT) parameters.
- types: the parameter types parse_value supports.

implementations
- Host: delegates send_line/has_permission to the actor itself (duck typed:
  actor.send_line(text), actor.has_permission(name)).
- ConsoleHost: a single operator at a terminal; lines go to a rich console
  and permissions come from a fixed set.
"""
import logging
from collections.abc import Mapping
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


def to_bool(text, /):
    """
    parse a boolean token: true/yes/on/1 and false/no/off/0, any case.
    """
    match text.strip().casefold():
        case "true" | "yes" | "on" | "1":
            return True
        case "false" | "no" | "off" | "0":
            return False
    raise ValueError(f"not a boolean: {text!r}")


CONVERTERS = MappingProxyType({
    str: str,
    int: int,
    float: float,
    bool: to_bool,
})


class Host:
    """
    default collaborator; see the module documentation for the interface.

    parameters
    - context: object passed to Special(CONTEXT) parameters (None by default).
    - converters: mapping of extra or replacing converters, type -> callable(text).
    """

    def __init__(self, *, context=None, converters=Unset):
        converters = coalesce(converters, {})
        if not isinstance(converters, Mapping):
            raise TypeError(f"{type(self).__name__} 'converters' must be a mapping")
        for type_, converter in converters.items():
            if not isinstance(type_, type):
                raise TypeError(f"{type(self).__name__} 'converters' keys must be classes")
            if not callable(converter):
                raise TypeError(f"{type(self).__name__} 'converters' values must be callable")
        self._context = context
        self._converters = MappingProxyType(dict(CONVERTERS) | dict(converters))

    @property
    def context(self):
        return self._context

    @property
    def types(self):
        return frozenset(self._converters)

    def send_line(self, actor, text, /):
        actor.send_line(text.plain if isinstance(text, Text) else text)

    def send_fault(self, actor, fault, /):
        self.send_line(actor, Text(fault.message, style="red"))

    def has_permission(self, actor, permission, /):
        return bool(actor.has_permission(permission))

    def parse_value(self, type, text, /):
        try:
            converter = self._converters[type]
        except KeyError:
            raise TypeError(f"no converter for {type.__name__}") from None
        return converter(text)


class ConsoleHost(Host):
    """
    host for a terminal operator.

    - lines are printed to a rich console (markup disabled, so usage text
      such as "[-f]" is printed verbatim; Text lines keep their styles).
    - permissions is the set granted to every actor; "*" grants everything.
    """

    def __init__(self, *, console=Unset, permissions=(), context=None, converters=Unset):
        super().__init__(context=context, converters=converters)
        self._console = coalesce(console, Console())
        if isinstance(permissions, str):
            raise TypeError(f"{type(self).__name__} 'permissions' must be a collection of strings")
        self._permissions = frozenset(permissions)

    @property
    def console(self):
        return self._console

    @property
    def permissions(self):
        return self._permissions

    def send_line(self, actor, text, /):
        self._console.print(text, markup=False, highlight=False)

    def send_fault(self, actor, fault, /):
        self._console.print(fault)

    def has_permission(self, actor, permission, /):
        granted = "*" in self._permissions or permission in self._permissions
        if not granted:
            logger.debug("permission %r not granted to %r", permission, actor)
        return granted


__all__ = (
    "CONVERTERS",
    "to_bool",
    "Host",
    "ConsoleHost",
)
