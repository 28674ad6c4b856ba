from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ._flags import InjectFlags


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Dependency:
    """One injection point of a constructor, method or member.

    ``parameter`` is the positional index in the call; ``None`` marks a member
    injection. When ``args`` is set the dependency is created with those
    explicit arguments instead of being looked up. ``provides`` seeds an
    ephemeral child injector for this one resolution, and ``provide_self``
    exposes the instance being built or called under its class token.
    """

    token: Any
    flags: InjectFlags = InjectFlags.DEFAULT
    default: Any = MISSING
    parameter: int | None = None
    args: tuple[Any, ...] | None = None
    provides: tuple[Any, ...] = ()
    provide_self: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


class MetadataSource(Protocol):
    """Supplies the dependency descriptors of classes. Queries have no side effects."""

    def constructor_dependencies(self, cls: type) -> Sequence[Dependency]: ...

    def method_dependencies(self, cls: type, method: str) -> Sequence[Dependency]: ...

    def member_dependencies(self, cls: type) -> Mapping[str, Dependency]: ...

    def factories(self, cls: type) -> Mapping[str, Callable[[Any], Any]]: ...

    def hooks(self, cls: type) -> Mapping[str, tuple[str, ...]]: ...
