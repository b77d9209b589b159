"""
batch execution of command files.

- every line is read and resolved before anything runs: blank lines and
  "#" comments are skipped, a leading "/" is dropped, and an unknown command
  or an unsplittable line raises CommandReaderError naming the line.
- commands then run in order through an Executor; a command that is not
  handled, or a call to abort() from inside a command, stops the batch.
- batching() tells a command whether it runs inside a batch. the flag lives
  in a context variable, so concurrent batches do not see each other.
"""
import logging
import os
import shlex
from contextvars import ContextVar
from typing import NamedTuple

from rich.text import Text

from .faults import CommandReaderError, FaultCode

logger = logging.getLogger(__name__)

_aborted = ContextVar("herald-batch-aborted", default=None)


class Call(NamedTuple):
    line: int
    name: str
    tokens: tuple


def batching():
    """
    whether the current context runs a batch.
    """
    return _aborted.get() is not None


def abort():
    """
    stop the running batch after the current command; no-op outside a batch.
    """
    if batching():
        _aborted.set(True)


class CommandReader:
    """
    parameters
    - executor: the Executor the commands run through.
    - echo: send each command line to the actor before running it.
    """

    def __init__(self, executor, /, *, echo=True):
        self._executor = executor
        self._echo = bool(echo)

    def calls(self, lines, /):
        """
        resolve lines into Calls, raising CommandReaderError on the first bad one.
        """
        registry = self._executor.dispatcher.registry
        calls = []
        for number, line in enumerate(lines, start=1):
            if not (line := line.strip()) or line.startswith("#"):
                continue
            try:
                name, *tokens = shlex.split(line)
            except ValueError:
                raise CommandReaderError(number, line, reason="malformed line", code=FaultCode.MALFORMED_BATCH_LINE) from None
            name = name.removeprefix("/")
            if name not in registry:
                raise CommandReaderError(number, name)
            calls.append(Call(number, name, tuple(tokens)))
        return calls

    def read(self, actor, source, /):
        """
        run every command of source (a path or an iterable of lines).

        returns False when the batch stopped early, True otherwise.
        """
        if isinstance(source, str | os.PathLike):
            with open(source, encoding="utf-8") as stream:
                calls = self.calls(stream)
        else:
            calls = self.calls(source)

        host = self._executor.dispatcher.host
        prefix = self._executor.dispatcher.usage.prefix
        token = _aborted.set(False)
        try:
            for call in calls:
                if self._echo:
                    host.send_line(actor, Text(prefix + shlex.join((call.name, *call.tokens)), style="grey50"))
                logger.info("batch line %d: %s", call.line, call.name)
                if not self._executor.on_command(actor, call.name, call.tokens):
                    return False
                if _aborted.get():
                    logger.info("batch aborted after line %d", call.line)
                    return False
        finally:
            _aborted.reset(token)
        return True


__all__ = (
    "Call",
    "CommandReader",
    "batching",
    "abort",
)
