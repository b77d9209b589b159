"""
herald command declarations.

overview
- Command: immutable specification built from a callback and its parameter
  defaults (see herald.parameters). it records
  • names: canonical name first, then aliases.
  • role: Role.COMMAND (leaf) or Role.SUBCOMMAND (returns a handler object
    whose own commands resolve the next token).
  • parameters: (argument name, specification) pairs in declaration order.
  • permissions and mode: the gate evaluated before any parsing.
  • description: shown by help lines.
  • children: optional handler object or class whose commands describe a
    sub-command's children to completion, read without invoking anything.
- decorators
  • @command(*names, ...) and @subcommand(*names, ...) declare the role.
  • @require(*permissions, mode=...) attaches permissions; it may sit above
    or below the role decorator.

callback shape
- an undefaulted first parameter is the receiver (the handler object, i.e.
  self); every other parameter must default to a parameter specification
  and accept keywords.

example
    >>> class Greeter:
    ...     @command("hello", "greetings", description="say hello")
    ...     def hello(self, actor=ACTOR, flag=Flag("-f")):
    ...         ...

errors
- every rule violation raises ConfigurationError when the decorator runs.
"""
import functools
import inspect
import re
from enum import StrEnum
from types import MappingProxyType

from .faults import ConfigurationError
from .parameters import Flag, Parameter, Positional, Rest
from .permissions import Mode, permitted
from .utils import SpecType, Unset, coalesce, rename


class Role(StrEnum):
    COMMAND = "command"
    SUBCOMMAND = "subcommand"


def _process_names(cls, metadata):
    """
    validate names: at least one, no whitespace, no duplicates, order kept.
    """
    names = []
    if not metadata["names"]:
        raise ConfigurationError(f"{cls.__typename__} needs at least one name")
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise ConfigurationError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ConfigurationError(f"{cls.__typename__} names cannot be blank")
        elif re.search(r"\s", name) or name.startswith("-"):
            raise ConfigurationError(f"{cls.__typename__} name {name!r} must be a single word not starting with '-'")
        elif name in names:
            raise ConfigurationError(f"{cls.__typename__} name {name!r} is given twice")
        names.append(name)
    metadata["names"] = tuple(names)


def _process_gate(cls, metadata):
    """
    validate permissions (non-blank strings, duplicates dropped) and the mode.
    """
    permissions = metadata["permissions"]
    if isinstance(permissions, str):
        permissions = (permissions,)
    sanitized = []
    for permission in permissions:
        if not isinstance(permission, str):
            raise ConfigurationError(f"{cls.__typename__} permissions must be strings")
        elif not (permission := permission.strip()):
            raise ConfigurationError(f"{cls.__typename__} permissions cannot be blank")
        if permission not in sanitized:
            sanitized.append(permission)
    metadata["permissions"] = tuple(sanitized)

    try:
        metadata["mode"] = Mode(metadata["mode"])
    except ValueError:
        raise ConfigurationError(f"{cls.__typename__} 'mode' must be 'all' or 'any'") from None


def _process_strings(cls, metadata):
    if not isinstance(description := metadata["description"], str | Unset):
        raise ConfigurationError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ConfigurationError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = coalesce(description)

    if metadata["children"] is None:
        raise ConfigurationError(f"{cls.__typename__} 'children' cannot be None")
    if metadata["children"] is not Unset and metadata["role"] is not Role.SUBCOMMAND:
        raise ConfigurationError(f"{cls.__typename__} 'children' is only meaningful for sub-commands")
    metadata["children"] = coalesce(metadata["children"])


def _process_callback(cls, metadata):
    """
    inspect the callback and materialize its parameter list.

    produces
    - receiver: whether the first parameter is the handler object.
    - parameters: tuple of (argument name, specification).

    rules
    - only the first parameter may lack a default (the receiver).
    - *args / **kwargs and positional-only parameters are rejected.
    - defaults must be parameter specifications.
    - required positionals precede optional ones; at most one rest.
    - flag names are unique; positional and rest names are unique.
    """
    name = metadata["names"][0]
    try:
        signature = inspect.signature(metadata["callback"])
    except TypeError:
        raise ConfigurationError(f"{cls.__typename__} {name!r} callback must be callable") from None
    except ValueError:
        raise ConfigurationError(f"{cls.__typename__} {name!r} callback must be inspectable") from None

    receiver = False
    parameters = []
    switches = {}
    labels = set()
    optional = Unset
    rest = None

    for index, (argument, parameter) in enumerate(signature.parameters.items()):
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise ConfigurationError(f"{cls.__typename__} {name!r} parameter {argument!r} cannot be variadic")
        if parameter.default is inspect.Parameter.empty:
            if index or parameter.kind not in (
                    inspect.Parameter.POSITIONAL_ONLY,
                    inspect.Parameter.POSITIONAL_OR_KEYWORD,
            ):
                raise ConfigurationError(f"{cls.__typename__} {name!r} parameter {argument!r} must have a default")
            receiver = True
            continue

        if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
            raise ConfigurationError(f"{cls.__typename__} {name!r} parameter {argument!r} must accept keywords")
        if not isinstance(specification := parameter.default, Parameter):
            raise ConfigurationError(
                f"{cls.__typename__} {name!r} parameter {argument!r} default must be a parameter specification"
            )

        if isinstance(specification, Positional | Rest):
            specification = specification.bind(argument)
            if specification.name in labels:
                raise ConfigurationError(f"{cls.__typename__} {name!r} name {specification.name!r} is already in use")
            labels.add(specification.name)

        if isinstance(specification, Positional):
            if specification.optional:
                optional = coalesce(optional, specification.name)
            elif optional is not Unset:
                raise ConfigurationError(
                    f"{cls.__typename__} {name!r} required positional {specification.name!r} "
                    f"cannot follow optional positional {optional!r}"
                )
        elif isinstance(specification, Rest):
            if rest is not None:
                raise ConfigurationError(f"{cls.__typename__} {name!r} cannot declare more than one rest parameter")
            rest = specification.name
        elif isinstance(specification, Flag):
            for alias in specification.names:
                if alias in switches:
                    raise ConfigurationError(f"{cls.__typename__} {name!r} flag {alias!r} is already in use")
                switches[alias] = specification

        parameters.append((argument, specification))

    metadata["receiver"] = receiver
    metadata["parameters"] = tuple(parameters)
    metadata["switches"] = MappingProxyType(switches)


class Command(metaclass=SpecType):
    """
    immutable command specification.

    the instance stays callable (it forwards to the callback) and behaves
    like a method when read from a handler instance, so decorated classes
    keep working as plain Python classes.
    """
    __introspectable__ = (
        "callback",
        "names",
        "role",
        "parameters",
        "permissions",
        "mode",
        "description",
        "children",
        "receiver",
    )
    __displayable__ = (
        "names",
        "role",
        "parameters",
        "permissions",
        "mode",
        "description",
    )

    def __new__(
            cls,
            callback,
            /,
            *names,
            role=Role.COMMAND,
            description=Unset,
            permissions=(),
            mode=Mode.ANY,
            children=Unset,
    ):
        if not callable(callback):
            raise ConfigurationError(f"{cls.__typename__} callback must be callable")
        if isinstance(callback, Command):
            raise ConfigurationError(f"{cls.__typename__} {callback.name!r} is already declared as a {callback.role}")
        try:
            role = Role(role)
        except ValueError:
            raise ConfigurationError(f"{cls.__typename__} 'role' must be 'command' or 'subcommand'") from None

        metadata = {
            "callback": callback,
            "names": names,
            "role": role,
            "description": description,
            "permissions": permissions,
            "mode": mode,
            "children": children,
        }
        if gate := getattr(callback, "__herald_require__", Unset):
            if permissions:
                raise ConfigurationError(f"{cls.__typename__} permissions cannot be declared twice")
            metadata["permissions"], metadata["mode"] = gate

        _process_names(cls, metadata)
        _process_gate(cls, metadata)
        _process_strings(cls, metadata)
        _process_callback(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        functools.update_wrapper(self, callback, updated=())
        return self

    def __call__(self, *args, **kwargs):
        return self._callback(*args, **kwargs)

    def __get__(self, instance, owner=None):
        if instance is None or not self._receiver:
            return self
        return functools.partial(self._callback, instance)

    @property
    def name(self):
        return self._names[0]

    @property
    def positionals(self):
        return tuple(spec for _, spec in self._parameters if isinstance(spec, Positional))

    @property
    def flags(self):
        return tuple(spec for _, spec in self._parameters if isinstance(spec, Flag))

    @property
    def rest(self):
        return next((spec for _, spec in self._parameters if isinstance(spec, Rest)), None)

    def flag(self, name, /):
        """
        the flag declared under name (any alias), or None.
        """
        return self._switches.get(name)

    def bind(self, handler, /):
        """
        the callable to invoke for handler (the callback, with handler as
        receiver when the callback declares one).
        """
        if self._receiver:
            return functools.partial(self._callback, handler)
        return self._callback

    def permitted(self, actor, check, /):
        return permitted(actor, self._permissions, self._mode, check)

    def __replace__(self, **changes):
        """
        rebuild this command with some declaration fields changed.
        """
        fields = {
            "role": self._role,
            "description": Unset if self._description is None else self._description,
            "permissions": self._permissions,
            "mode": self._mode,
            "children": Unset if self._children is None else self._children,
        } | changes
        names = fields.pop("names", self._names)
        return type(self)(self._callback, *names, **fields)


def _declare(role, names, options):
    @rename(role.value)
    def wrapper(callback, /):
        if isinstance(callback, Command):
            raise ConfigurationError(f"command {callback.name!r} is already declared as a {callback.role}")
        if not callable(callback):
            raise ConfigurationError(f"@{role.value}() must be applied to a callable")
        return Command(
            callback,
            *(names or (callback.__name__.replace("_", "-"),)),
            role=role,
            **options,
        )
    return wrapper


def command(*names, description=Unset, permissions=(), mode=Mode.ANY):
    """
    declare a leaf command; names default to the callback name.
    """
    return _declare(Role.COMMAND, names, {
        "description": description,
        "permissions": permissions,
        "mode": mode,
    })


def subcommand(*names, description=Unset, permissions=(), mode=Mode.ANY, children=Unset):
    """
    declare a sub-command: the callback returns the handler object whose
    commands resolve the next token (or None when it handled the call itself).
    """
    return _declare(Role.SUBCOMMAND, names, {
        "description": description,
        "permissions": permissions,
        "mode": mode,
        "children": children,
    })


def require(*permissions, mode=Mode.ANY):
    """
    attach permissions to a command.

    - below the role decorator, the permissions are recorded on the function.
    - above it, the command is rebuilt with the permissions.
    - requiring the same command twice raises ConfigurationError.
    """
    if not permissions:
        raise ConfigurationError("@require() must name at least one permission")

    @rename("require")
    def wrapper(target, /):
        if isinstance(target, Command):
            if target.permissions:
                raise ConfigurationError(f"command {target.name!r} permissions cannot be declared twice")
            return target.__replace__(permissions=permissions, mode=mode)
        if not callable(target):
            raise ConfigurationError("@require() must be applied to a callable")
        if hasattr(target, "__herald_require__"):
            raise ConfigurationError(f"{target.__name__!r} permissions cannot be declared twice")
        target.__herald_require__ = (permissions, mode)
        return target
    return wrapper


__all__ = (
    "Role",
    "Command",
    "command",
    "subcommand",
    "require",
)
