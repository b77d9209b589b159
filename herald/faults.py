"""
herald faults (errors raised by the dispatch engine) and their rendering.

scope
- FaultCode: stable numeric identifiers, grouped by family so logs stay searchable.
- CommandException: base type carrying a message plus read-only options, the
  invocation chain current when it was raised, and a rich renderer.
- families
  • ConfigurationError: malformed declarations, raised at build time (fatal).
  • PermissionDeniedError: the actor lacks the permissions of a command.
  • ParseError: user input did not match the command (missing argument,
    unknown flag, missing flag value, invalid value, unknown sub-command).
  • InvocationError: handler logic raised; the original exception is the cause.
  • CommandReaderError: a batch file names a command that does not exist.

rendering
- __rich__ returns a panel (fancy) or a plain group; colors and the program
  name can be overridden from __main__ via __styles__ and __prog__.
- FaultCode.normalize() consults __main__.__codes__ so hosts can relabel codes.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - configuration (211xx): declarations rejected at build time.
    - permission (221xx): permission gate failures.
    - parse (231xx/232xx): token stream does not fit the command.
    - invocation (241xx): handler logic failures.
    - reader (251xx): batch command files.
    """
    # --- configuration errors (21xxx) ---
    MALFORMED_DECLARATION       = 21101
    DUPLICATED_COMMAND          = 21102
    UNSUPPORTED_TYPE            = 21103
    MISSING_SESSION_VALUE       = 21104

    # --- permission errors (22xxx) ---
    PERMISSION_DENIED           = 22101

    # --- parse errors (23xxx) ---
    UNKNOWN_COMMAND             = 23101
    REJECTED_INPUT              = 23102
    UNKNOWN_FLAG                = 23111
    MISSING_VALUE               = 23112
    MISSING_ARGUMENT            = 23121
    INVALID_VALUE               = 23122

    # --- invocation errors (24xxx) ---
    DELEGATED_ERROR             = 24101

    # --- reader errors (25xxx) ---
    UNKNOWN_BATCH_COMMAND       = 25101
    MALFORMED_BATCH_LINE        = 25102

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__;
        without one, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base class of every fault raised by herald.

    attributes
    - message: one-line, user-facing description.
    - options: read-only mapping of structured details (names, flags, ...).
    - code: FaultCode (class default, overridable with the "code" option).
    - chain: the InvocationChain that was being resolved when the fault was
      raised, or Unset when raised outside of a dispatch.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "command error"
    hint = Unset

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.code = options.pop("code", type(self).code)
        self.options = MappingProxyType(options)
        self.chain = Unset

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", True)

        def text(fragment, style):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", "herald"), "prog-name"),
            " - ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]",
        )
        body = [text(self.message, "error-message")]
        if hint := self.options.get("hint", type(self).hint):
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if fancy:
            return Panel(Group(*body), title=header, title_align="left", width=min(console.width, 96))
        return Group(header, *body)


class ConfigurationError(CommandException):
    """
    raised while declaring commands or building a registry; never recoverable.
    """
    code = FaultCode.MALFORMED_DECLARATION
    title = "malformed declaration"


class PermissionDeniedError(CommandException):
    """
    the actor failed the permission gate of a command.

    permissions is the tuple of declared permission names, mode is "all" when
    every permission was required and "any" when one sufficed.
    """
    code = FaultCode.PERMISSION_DENIED
    title = "permission denied"

    def __init__(self, permissions, mode, /, **options):
        permissions = tuple(permissions)
        super().__init__(
            "missing %s of: %s" % ("all" if mode == "all" else "one", ", ".join(permissions)),
            permissions=permissions,
            mode=mode,
            **options,
        )

    permissions = property(lambda self: self.options["permissions"])
    mode = property(lambda self: self.options["mode"])

    def lines(self):
        """
        the denial text shown to the actor, one string per line.
        """
        if len(self.permissions) == 1:
            header = "You need the following permission to do this:"
        else:
            header = "You need %s of the following permissions to do this:" % (
                "all" if self.mode == "all" else "one"
            )
        return [header, *("- " + permission for permission in self.permissions)]


class ParseError(CommandException):
    """
    the token stream does not fit the command; render the message and usage.
    """
    code = FaultCode.REJECTED_INPUT
    title = "parse error"


class UnknownCommandError(ParseError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"

    def __init__(self, name, /, **options):
        super().__init__(f"unknown command: {name}", name=name, **options)

    name = property(lambda self: self.options["name"])


class UnknownFlagError(ParseError):
    code = FaultCode.UNKNOWN_FLAG
    title = "unknown flag"
    hint = "use '--' before arguments that start with a dash"

    def __init__(self, flag, /, **options):
        super().__init__(f"unknown flag: {flag}", flag=flag, **options)

    flag = property(lambda self: self.options["flag"])


class MissingValueError(ParseError):
    """
    a value-taking flag reached the end of the tokens without a value.

    flag is the canonical name of the flag, token is the text that named it
    (an alias or a cluster such as "-fo").
    """
    code = FaultCode.MISSING_VALUE
    title = "missing value"

    def __init__(self, flag, /, token=Unset, **options):
        super().__init__(f"missing value for flag: {flag}", flag=flag, token=coalesce(token, flag), **options)

    flag = property(lambda self: self.options["flag"])
    token = property(lambda self: self.options["token"])


class MissingArgumentError(ParseError):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"

    def __init__(self, name, /, **options):
        super().__init__(f"missing argument: {name}", name=name, **options)

    name = property(lambda self: self.options["name"])


class InvalidValueError(ParseError):
    """
    a token could not be converted to the declared type of its parameter.
    """
    code = FaultCode.INVALID_VALUE
    title = "invalid value"

    def __init__(self, name, text, type, /, **options):
        super().__init__(
            f"invalid {getattr(type, '__name__', type)} for {name}: {text!r}",
            name=name,
            text=text,
            type=type,
            **options,
        )

    name = property(lambda self: self.options["name"])
    text = property(lambda self: self.options["text"])
    type = property(lambda self: self.options["type"])


class InvocationError(CommandException):
    """
    handler logic raised a non-framework exception; cause is that exception.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "invocation error"
    hint = "see the log for the full traceback"

    def __init__(self, cause, /, **options):
        if not isinstance(cause, BaseException):
            raise TypeError(f"{type(self).__name__} cause must be an exception")
        super().__init__(f"{type(cause).__name__}: {cause}", **options)
        self.__cause__ = cause

    cause = property(lambda self: self.__cause__)


class CommandReaderError(CommandException):
    """
    a batch source holds a line that cannot be run: an unknown command, or
    a line that cannot be split into tokens (reason tells which).
    """
    code = FaultCode.UNKNOWN_BATCH_COMMAND
    title = "unreadable batch"

    def __init__(self, line, name, /, reason="unknown command", **options):
        super().__init__(f"{reason} at line {line}: {name}", line=line, name=name, reason=reason, **options)

    line = property(lambda self: self.options["line"])
    name = property(lambda self: self.options["name"])


__all__ = (
    "FaultCode",
    "CommandException",
    "ConfigurationError",
    "PermissionDeniedError",
    "ParseError",
    "UnknownCommandError",
    "UnknownFlagError",
    "MissingValueError",
    "MissingArgumentError",
    "InvalidValueError",
    "InvocationError",
    "CommandReaderError",
)
