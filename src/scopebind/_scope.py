from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ._errors import InvalidScopeError


# Provider scope that adopts the declaring injector's scope at registration.
INHERIT_SCOPE = -1


class Lifetime(IntEnum):
    UNSCOPED = 0
    SINGLETON = 1
    SCOPED = 2


@dataclass(frozen=True, order=True)
class Scope:
    """Lifetime tier of an injector. Larger ids are narrower tiers."""

    id: int

    @classmethod
    def create_child(cls, request: bool | int | Scope, parent: Scope | None = None) -> Scope:
        """Compute the scope of a child injector.

        - ``True``: a new tier one above ``parent`` (level 1 without a parent).
        - ``False``: ``parent`` itself (level 1 without a parent).
        - an int or ``Scope``: that level, which must not be broader than ``parent``.
        """
        # bool is an int subclass, check it first
        if isinstance(request, bool):
            if request:
                return cls(parent.id + 1 if parent is not None else 1)
            return parent if parent is not None else cls(1)

        scope = request if isinstance(request, Scope) else cls(int(request))

        if scope.id < 1:
            msg = f"Scope levels must be positive, got {scope.id}"
            raise InvalidScopeError(msg)

        if parent is not None and scope.id < parent.id:
            msg = f'Cannot create child scope "{scope.id}" for parent with larger scope "{parent.id}"'
            raise InvalidScopeError(msg)

        return scope
