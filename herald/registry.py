"""
herald registry: the commands declared by one or more handler objects.

behavior
- construction collects every Command found on the handlers (instance
  attributes first, then the class hierarchy, declaration order kept) and
  validates them against the supported parameter types.
- names and aliases must be unique across the whole registry; the same
  Command reachable under two attribute names counts once.
- child(key, handler) returns the registry of a handler object returned by a
  sub-command. entries are owned by this registry, reused while the handler
  is the very same object and rebuilt otherwise; construction happens under
  a lock so a key is never built twice concurrently.
"""
import logging
import threading
from types import MappingProxyType
from typing import NamedTuple

from .commands import Command, Role
from .faults import ConfigurationError, FaultCode
from .host import CONVERTERS
from .parameters import Flag, Positional

logger = logging.getLogger(__name__)


class Binding(NamedTuple):
    """
    a command together with the handler object it was found on.
    """
    command: Command
    handler: object

    @property
    def target(self):
        return self.command.bind(self.handler)


def _members(handler):
    """
    yield (attribute name, object) pairs in declaration order, without
    triggering descriptors.
    """
    namespaces = []
    if not isinstance(handler, type) and hasattr(handler, "__dict__"):
        namespaces.append(vars(handler))
    namespaces.extend(vars(cls) for cls in (handler if isinstance(handler, type) else type(handler)).__mro__)

    seen = set()
    for namespace in namespaces:
        for name, member in namespace.items():
            if name not in seen:
                seen.add(name)
                yield name, member


class Registry:
    """
    name -> Binding map built from handler objects.

    parameters
    - handlers: objects declaring commands (instances, classes or modules).
    - types: parameter types accepted by the host converter.
    """

    def __init__(self, *handlers, types=frozenset(CONVERTERS)):
        self._handlers = handlers
        self._types = frozenset(types)
        self._bindings = {}
        self._commands = []
        self._children = {}
        self._lock = threading.Lock()

        for handler in handlers:
            if handler is None:
                raise ConfigurationError("registry handlers cannot be None")
            declared = []
            for _, member in _members(handler):
                if isinstance(member, Command) and member not in declared:
                    declared.append(member)
            for command in declared:
                self._register(command, handler)

        logger.debug("registry built with %d command(s): %s", len(self._commands), ", ".join(self._bindings))

    def _register(self, command, handler):
        for _, specification in command.parameters:
            if isinstance(specification, Positional | Flag) and specification.type not in self._types:
                raise ConfigurationError(
                    f"command {command.name!r} parameter {specification.name!r} "
                    f"has unsupported type {specification.type.__name__}",
                    code=FaultCode.UNSUPPORTED_TYPE,
                )
        binding = Binding(command, handler)
        for name in command.names:
            if name in self._bindings:
                raise ConfigurationError(
                    f"duplicate command name {name!r} ({self._bindings[name].command.name!r} and {command.name!r})",
                    code=FaultCode.DUPLICATED_COMMAND,
                )
            self._bindings[name] = binding
        self._commands.append(binding)

    @property
    def handlers(self):
        return self._handlers

    @property
    def types(self):
        return self._types

    @property
    def commands(self):
        """
        read-only name -> Command map (aliases included).
        """
        return MappingProxyType({name: binding.command for name, binding in self._bindings.items()})

    @property
    def subcommands(self):
        """
        read-only name -> Command map restricted to sub-commands.
        """
        return MappingProxyType({
            name: binding.command for name, binding in self._bindings.items()
            if binding.command.role is Role.SUBCOMMAND
        })

    @property
    def bindings(self):
        """
        one Binding per command, in declaration order.
        """
        return tuple(self._commands)

    def lookup(self, name, /):
        return self._bindings.get(name)

    def __contains__(self, name):
        return name in self._bindings

    def __len__(self):
        return len(self._commands)

    def __iter__(self):
        return iter(self._bindings)

    def child(self, key, handler, /):
        """
        the registry of handler, cached under key.
        """
        with self._lock:
            entry = self._children.get(key)
            if entry is not None and entry[0] is handler:
                return entry[1]
            registry = type(self)(handler, types=self._types)
            self._children[key] = (handler, registry)
            logger.debug("child registry built for %r under %r", handler, key)
            return registry

    def __rich_repr__(self):
        yield "commands", tuple(binding.command.name for binding in self._commands)

    def __repr__(self):
        return f"registry(commands={tuple(binding.command.name for binding in self._commands)!r})"


__all__ = (
    "Binding",
    "Registry",
)
