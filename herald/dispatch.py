"""
herald dispatcher: resolve, gate, parse, convert, invoke, recurse.

per external call
    resolving(name) -> permission checking -> parsing -> invoking
        -> done | recursing(child registry, next name)

- an unknown top-level name returns False (not handled); an unknown name
  after a sub-command step raises UnknownCommandError.
- the permission gate runs before parsing, so a denied actor never sees a
  parse error.
- a fresh CommandSession is created per external call and handed down the
  recursion; the InvocationChain is extended per step without mutation.
- exceptions raised by handler logic are wrapped in InvocationError;
  framework faults raised by handlers propagate unchanged.
- every fault leaving execute() carries the chain it was raised under
  (fault.chain) so the caller can render usage.
"""
import logging
import shlex

from .commands import Role
from .completion import CompletionEngine, ConstantTypeCompleter
from .faults import (
    CommandException,
    ConfigurationError,
    FaultCode,
    InvalidValueError,
    InvocationError,
    UnknownCommandError,
)
from .host import Host
from .parameters import Flag, Positional, Rest, SessionValue, Special, SpecialKind
from .parsing import parse
from .permissions import require
from .registry import Registry
from .session import CommandSession
from .usage import HelpBuilder, InvocationChain, UsageOptions
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


def tokenize(tokens, /):
    """
    accept a sequence of tokens or a command line (split with shlex).
    """
    if isinstance(tokens, str):
        return shlex.split(tokens)
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"tokens must be strings, got {type(token).__name__}")
    return tokens


class Dispatcher:
    """
    entry point of the dispatch engine.

    parameters
    - handlers: objects declaring commands (see herald.commands).
    - host: collaborator (herald.host.Host by default).
    - completers: extra TypeCompleters by name ("constant" is built in).
    - usage: UsageOptions for usage and help lines.
    """

    def __init__(self, *handlers, host=Unset, completers=Unset, usage=Unset):
        self._host = coalesce(host, Host())
        self._usage = coalesce(usage, UsageOptions())
        if not isinstance(self._usage, UsageOptions):
            raise TypeError("dispatcher 'usage' must be a UsageOptions")
        self._registry = Registry(*handlers, types=self._host.types)
        self._completion = CompletionEngine(self._host, {
            "constant": ConstantTypeCompleter(),
        } | dict(coalesce(completers, {})))

    @property
    def host(self):
        return self._host

    @property
    def usage(self):
        return self._usage

    @property
    def registry(self):
        return self._registry

    def execute(self, actor, name, tokens=(), /, *, label=Unset):
        """
        run command name with tokens on behalf of actor.

        returns True when a command handled the call, False when name is not
        a known command; raises CommandException subtypes otherwise.
        """
        tokens = tokenize(tokens)
        logger.debug("execute %r %r for %r", name, tokens, actor)
        return self._execute(
            self._registry,
            actor,
            name,
            coalesce(label, name),
            tokens,
            InvocationChain(),
            CommandSession(),
        )

    def _execute(self, registry, actor, name, label, tokens, chain, session):
        if (binding := registry.lookup(name)) is None:
            return False
        command = binding.command

        try:
            require(actor, command.permissions, command.mode, self._host.has_permission)
        except CommandException as fault:
            fault.chain = chain
            raise

        chain = chain.extend(label, command)
        try:
            parsed = parse(command, tokens)
            arguments = self._arguments(registry, command, parsed, actor, label, chain, session)
            try:
                result = binding.target(**arguments)
            except CommandException:
                raise
            except Exception as exception:
                logger.debug("command %r raised %r", command.name, exception)
                raise InvocationError(exception) from exception

            if command.role is not Role.SUBCOMMAND or result is None:
                return True
            if not parsed.rest:
                logger.debug("sub-command %r returned a handler but no command followed", command.name)
                return True

            following, *remaining = parsed.rest
            child = registry.child(command, result)
            logger.debug("recursing from %r into %r", command.name, following)
            if not self._execute(child, actor, following, following, remaining, chain, session):
                raise UnknownCommandError(following)
            return True
        except CommandException as fault:
            if fault.chain is Unset:
                fault.chain = chain
            raise

    def _arguments(self, registry, command, parsed, actor, label, chain, session):
        arguments = {}
        for argument, specification in command.parameters:
            match specification:
                case Special(kind=SpecialKind.ACTOR):
                    arguments[argument] = actor
                case Special(kind=SpecialKind.CONTEXT):
                    arguments[argument] = self._host.context
                case Special(kind=SpecialKind.SESSION):
                    arguments[argument] = session
                case Special(kind=SpecialKind.LABEL):
                    arguments[argument] = label
                case Special(kind=SpecialKind.HELP):
                    arguments[argument] = HelpBuilder(registry, chain, actor, self._host, self._usage)
                case SessionValue():
                    arguments[argument] = self._session_value(command, specification, session)
                case Flag() if specification.boolean:
                    arguments[argument] = specification.name in parsed.present
                case Flag():
                    arguments[argument] = self._convert(specification, specification.name, parsed)
                case Positional():
                    arguments[argument] = self._convert(specification, specification.name, parsed)
                case Rest():
                    arguments[argument] = parsed.rest
        return arguments

    def _convert(self, specification, name, parsed):
        if (text := parsed.get(name)) is None:
            return False if isinstance(specification, Positional) and specification.boolean else None
        try:
            return self._host.parse_value(specification.type, text)
        except (TypeError, ValueError) as exception:
            raise InvalidValueError(name, text, specification.type) from exception

    @staticmethod
    def _session_value(command, specification, session):
        if specification.key not in session:
            if specification.optional:
                return None
            raise ConfigurationError(
                f"command {command.name!r} expects session value {specification.key!r}",
                code=FaultCode.MISSING_SESSION_VALUE,
            )
        try:
            return session.value(specification.key, specification.type)
        except TypeError as exception:
            raise ConfigurationError(
                f"command {command.name!r} session value {specification.key!r}: {exception}",
                code=FaultCode.MISSING_SESSION_VALUE,
            ) from exception

    def complete(self, actor, name, tokens=(), partial=Unset, /):
        """
        completion candidates for partial, typed after name and tokens.

        when partial is not given, the last token is the partial one.
        """
        tokens = tokenize(tokens)
        if partial is Unset:
            partial = tokens.pop() if tokens else ""
        candidates = self._completion.complete(self._registry, actor, name, tokens, partial)
        logger.debug("complete %r %r %r -> %r", name, tokens, partial, candidates)
        return candidates


__all__ = (
    "tokenize",
    "Dispatcher",
)
