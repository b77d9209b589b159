"""
herald argument parser.

parse(command, tokens) -> ParsedInvocation, or a ParseError subtype.

flag phase
- skipped entirely when the command declares no flag (a leading "-word" is
  then an ordinary positional or rest token).
- a token naming a declared flag (any alias) is a flag; "-abc" is a cluster
  of declared single-letter flags.
- boolean flags are marked present; value-taking flags are queued, in letter
  order, and the following tokens are taken verbatim as their values.
- "--" ends the phase and is consumed; a token not starting with "-" ends
  the phase and is kept for the positionals.
- an unknown dash token raises UnknownFlagError; a value-taking flag left
  without a value at the end raises MissingValueError.

positional phase
- tokens fill the positionals in declaration order; a missing required one
  raises MissingArgumentError, optional ones stay absent.
- whatever remains is the residual (rest capture or next sub-command name).

values are kept as raw strings; conversion happens at dispatch time.
"""
from collections import deque
from types import MappingProxyType

from .faults import MissingArgumentError, MissingValueError, UnknownFlagError


class ParsedInvocation:
    """
    outcome of a successful parse.

    - values: positional name / canonical flag name -> raw string.
    - present: canonical names of the boolean flags that were given.
    - rest: residual tokens.
    """
    __slots__ = ("_values", "_present", "_rest")

    def __init__(self, values, present, rest):
        self._values = MappingProxyType(dict(values))
        self._present = frozenset(present)
        self._rest = tuple(rest)

    @property
    def values(self):
        return self._values

    @property
    def present(self):
        return self._present

    @property
    def rest(self):
        return self._rest

    def __contains__(self, name):
        return name in self._values or name in self._present

    def get(self, name, default=None, /):
        return self._values.get(name, default)

    def __rich_repr__(self):
        yield "values", dict(self._values)
        yield "present", set(self._present)
        yield "rest", self._rest

    def __repr__(self):
        return f"parsed-invocation(values={dict(self._values)!r}, present={set(self._present)!r}, rest={self._rest!r})"


def resolve(command, token, /):
    """
    map a dash token to [(flag, token), ...]; raise UnknownFlagError otherwise.
    """
    if (flag := command.flag(token)) is not None:
        return [(flag, token)]
    if len(token) > 2 and token[0] == "-" and token[1] != "-":
        cluster = []
        for letter in token[1:]:
            if (flag := command.flag("-" + letter)) is None:
                raise UnknownFlagError(token)
            cluster.append((flag, token))
        return cluster
    raise UnknownFlagError(token)


class Scanner:
    """
    incremental parser state, fed one token at a time.

    parse() drives it over every token and calls finish(); the completion
    engine feeds the complete tokens and inspects the state instead.

    state
    - pending: queued (flag, token) pairs still waiting for a value.
    - flagging: whether the flag phase is still open.
    - index: number of positionals filled so far.
    - residual: tokens left after the positionals.
    """

    def __init__(self, command, /):
        self.command = command
        self.values = {}
        self.present = set()
        self.pending = deque()
        self.flagging = bool(command.flags)
        self.index = 0
        self.residual = []
        self._positionals = command.positionals

    def feed(self, token, /):
        if not isinstance(token, str):
            raise TypeError(f"tokens must be strings, got {type(token).__name__}")

        if self.pending:
            flag, _ = self.pending.popleft()
            self.values[flag.name] = token
            return

        if self.flagging:
            if token == "--":
                self.flagging = False
                return
            if token.startswith("-"):
                for flag, text in resolve(self.command, token):
                    if flag.boolean:
                        self.present.add(flag.name)
                    else:
                        self.pending.append((flag, text))
                return
            self.flagging = False

        if self.index < len(self._positionals):
            self.values[self._positionals[self.index].name] = token
            self.index += 1
        else:
            self.residual.append(token)

    def finish(self):
        if self.pending:
            flag, text = self.pending[0]
            raise MissingValueError(flag.name, token=text)
        for positional in self._positionals[self.index:]:
            if not positional.optional:
                raise MissingArgumentError(positional.name)
            break
        return ParsedInvocation(self.values, self.present, self.residual)


def parse(command, tokens, /):
    scanner = Scanner(command)
    for token in tokens:
        scanner.feed(token)
    return scanner.finish()


__all__ = (
    "ParsedInvocation",
    "Scanner",
    "resolve",
    "parse",
)
