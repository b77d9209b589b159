"""
herald executor: the front end that turns faults into messages for the actor.

policy
- permission denied  -> the denial lines ("You need ... permission ...").
- parse error        -> the fault through host.send_fault (its message, or its
                        panel on a console), then the usage line of the chain
                        the error was raised under.
- invocation error   -> the fallback hook when one is registered, otherwise a
  configuration error   generic failure line; the traceback is always logged.
- unknown command    -> not handled (False), nothing is sent.

every fault above counts as handled (True): the actor has been told.
"""
import logging

from rich.text import Text

from .faults import ConfigurationError, InvocationError, ParseError, PermissionDeniedError
from .utils import Unset

logger = logging.getLogger(__name__)


class Executor:
    """
    parameters
    - dispatcher: the Dispatcher to run commands with.
    - failure: line sent to the actor when handler logic fails.
    """

    def __init__(self, dispatcher, /, *, failure="Command failed; see log for details"):
        if not isinstance(failure, str):
            raise TypeError("executor 'failure' must be a string")
        elif not (failure := failure.strip()):
            raise ValueError("executor 'failure' cannot be empty")
        self._dispatcher = dispatcher
        self._failure = failure
        self._fallback = Unset

    @property
    def dispatcher(self):
        return self._dispatcher

    def fallback(self, fallback, /):
        """
        register a one-time handler for invocation and configuration faults.

        the callable receives (actor, fault) and replaces the generic failure
        line; it can be set only once. returns the callable, so it can be used
        as a decorator.
        """
        if not callable(fallback):
            raise TypeError("executor fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError("executor fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def on_command(self, actor, name, tokens=(), /, *, label=Unset):
        host = self._dispatcher.host
        try:
            return self._dispatcher.execute(actor, name, tokens, label=label)
        except PermissionDeniedError as fault:
            logger.info("%r denied %r (%s)", actor, name, fault.message)
            for line in fault.lines():
                host.send_line(actor, line)
        except ParseError as fault:
            if fault.message.strip():
                host.send_fault(actor, fault)
            if fault.chain:
                host.send_line(actor, fault.chain.render(self._dispatcher.usage))
        except (InvocationError, ConfigurationError) as fault:
            logger.exception("command %r failed for %r", name, actor)
            if self._fallback is not Unset:
                self._fallback(actor, fault)
            else:
                host.send_line(actor, Text(self._failure, style="red"))
        return True

    def on_complete(self, actor, name, tokens=(), partial=Unset, /):
        return self._dispatcher.complete(actor, name, tokens, partial)


__all__ = (
    "Executor",
)
