"""
permission gate shared by dispatch, usage rendering and completion.

- Mode.ALL: every declared permission is required.
- Mode.ANY: one declared permission is enough.
- a command declaring no permission is always permitted.
"""
from enum import StrEnum

from .faults import PermissionDeniedError


class Mode(StrEnum):
    ALL = "all"
    ANY = "any"


def permitted(actor, permissions, mode, check, /):
    """
    evaluate the gate for actor; check(actor, name) -> bool is the host predicate.
    """
    if not permissions:
        return True
    granted = (check(actor, permission) for permission in permissions)
    return all(granted) if mode == Mode.ALL else any(granted)


def require(actor, permissions, mode, check, /):
    """
    like permitted(), but raise PermissionDeniedError when the gate is closed.
    """
    if not permitted(actor, permissions, mode, check):
        raise PermissionDeniedError(permissions, Mode(mode))


__all__ = (
    "Mode",
    "permitted",
)
