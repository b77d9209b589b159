"""
herald tab-completion.

the engine replays the parser over the complete tokens (never invoking
handler logic, never touching a session) to find what the partial token is:

- a value still owed to a flag ("-o |")        -> the flag's value slot
- a dash token while the flag phase is open     -> flag names plus "--"
- the next positional                            -> that positional's slot
- past the positionals of a sub-command         -> child command names, or
                                                   recurse into the child
- past the positionals of a command with rest   -> the rest slot

value slots delegate to the TypeCompleter named by the parameter's completer
reference ("name" or "name:argument"). without a reference, an empty partial
gets a placeholder such as "<name>"; an unregistered completer yields
nothing. every candidate list is filtered by a case-insensitive prefix.
"""
import logging
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from .commands import Role
from .faults import UnknownFlagError
from .parsing import Scanner
from .utils import prefixed

logger = logging.getLogger(__name__)


@runtime_checkable
class TypeCompleter(Protocol):
    """
    provider of completion candidates.

    complete(type, argument, actor, partial) receives the declared type of
    the parameter, the argument part of the completer reference ("" when
    absent), the actor and the partial token.
    """

    def complete(self, type, argument, actor, partial, /):
        ...


class ConstantTypeCompleter:
    """
    completes from a fixed, whitespace-separated list given as the argument:
    Positional(completer="constant:red green blue").
    """

    def complete(self, type, argument, actor, partial, /):
        return prefixed(argument.split(), partial)


def reference(completer, /):
    """
    split a completer reference into (name, argument).
    """
    name, _, argument = completer.partition(":")
    return name.strip(), argument.strip()


class CompletionEngine:
    """
    parameters
    - host: used for permission checks.
    - completers: mapping of completer name -> TypeCompleter (or a plain
      callable with the same signature).
    """

    def __init__(self, host, completers, /):
        if not isinstance(completers, Mapping):
            raise TypeError("completion-engine 'completers' must be a mapping")
        for name, completer in completers.items():
            if not isinstance(name, str) or not name.strip():
                raise TypeError("completion-engine completer names must be non-empty strings")
            if not isinstance(completer, TypeCompleter) and not callable(completer):
                raise TypeError(f"completion-engine completer {name!r} must provide complete()")
        self._host = host
        self._completers = dict(completers)

    @property
    def completers(self):
        return dict(self._completers)

    def complete(self, registry, actor, name, tokens, partial, /):
        binding = registry.lookup(name)
        if binding is None or not binding.command.permitted(actor, self._host.has_permission):
            return []
        command = binding.command

        scanner = Scanner(command)
        try:
            for token in tokens:
                scanner.feed(token)
        except UnknownFlagError as fault:
            logger.debug("completion of %r stopped at %r", name, fault.flag)
            return []

        if scanner.pending:
            flag, _ = scanner.pending[0]
            return self._values(flag.type, flag.completer, f"<{flag.value_name}>", actor, partial)

        if scanner.flagging and partial.startswith("-"):
            names = [alias for flag in command.flags for alias in flag.names]
            return prefixed(sorted(names + ["--"]), partial)

        positionals = command.positionals
        if scanner.index < len(positionals):
            positional = positionals[scanner.index]
            return self._values(positional.type, positional.completer, f"<{positional.name}>", actor, partial)

        if command.role is Role.SUBCOMMAND:
            if command.children is None:
                return []
            child = registry.child(("children", command), command.children)
            if scanner.residual:
                following, *remaining = scanner.residual
                return self.complete(child, actor, following, remaining, partial)
            return prefixed(sorted(
                label for label, candidate in child.commands.items()
                if candidate.permitted(actor, self._host.has_permission)
            ), partial)

        if (rest := command.rest) is not None:
            return self._values(str, rest.completer, None, actor, partial)
        return []

    def _values(self, type, completer, placeholder, actor, partial):
        if completer is None:
            return [placeholder] if placeholder and not partial else []
        name, argument = reference(completer)
        if (provider := self._completers.get(name)) is None:
            logger.debug("no completer registered under %r", name)
            return []
        if isinstance(provider, TypeCompleter):
            candidates = provider.complete(type, argument, actor, partial)
        else:
            candidates = provider(type, argument, actor, partial)
        return prefixed(candidates or (), partial)


__all__ = (
    "TypeCompleter",
    "ConstantTypeCompleter",
    "CompletionEngine",
    "reference",
)
