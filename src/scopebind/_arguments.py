from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._errors import MissingInstanceError, TokenNotFoundError
from ._flags import InjectFlags
from ._providers import ValueProvider


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ._dependencies import Dependency
    from ._injector import Injector


INIT_HOOK = "init"


def mix_arguments(resolved: Iterable[tuple[int | None, Any]], explicit: Sequence[Any]) -> list[Any]:
    """Interleave injected values with explicit positional arguments.

    Explicit arguments fill the positions no injected value claims, in order
    (``None`` once they run out); leftovers go after the last claimed position.
    Entries without a position are member injections and are ignored.
    """
    positioned = sorted(((index, value) for index, value in resolved if index is not None), key=lambda item: item[0])
    remaining = list(explicit)
    args: list[Any] = []

    for index, value in positioned:
        while len(args) < index:
            args.append(remaining.pop(0) if remaining else None)
        args.append(value)

    args.extend(remaining)
    return args


class ArgumentResolver:
    """Resolves dependency descriptors against an injector and builds call arguments."""

    def __init__(self, injector: Injector) -> None:
        self._injector = injector
        self._metadata = injector.metadata

    def construct(self, cls: type, args: Sequence[Any] = (), kwargs: Mapping[str, Any] | None = None) -> Any:
        """Instantiate ``cls``, then inject members, apply factories and run init hooks, in that order."""
        arguments = self.resolve(cls, None, args)
        instance = cls(*arguments, **(kwargs or {}))

        hooks = self._metadata.hooks(cls)

        for member, dependency in self._metadata.member_dependencies(cls).items():
            if member not in hooks:
                setattr(instance, member, self.resolve_dependency(cls, dependency, instance))

        for member, factory in self._metadata.factories(cls).items():
            setattr(instance, member, factory(instance))

        for member, names in hooks.items():
            if INIT_HOOK in names:
                logger.debug("Running init hook %s.%s", cls.__qualname__, member)
                hook_args = self.resolve(cls, member, (), instance)
                getattr(instance, member)(*hook_args)

        return instance

    def invoke(self, instance: Any, method: str, args: Sequence[Any] = (), kwargs: Mapping[str, Any] | None = None) -> Any:
        arguments = self.resolve(type(instance), method, args, instance)
        return getattr(instance, method)(*arguments, **(kwargs or {}))

    def resolve(self, cls: type, method: str | None, manual_args: Sequence[Any], instance: Any = None) -> list[Any]:
        """Final positional arguments of the constructor (``method=None``) or of ``method``."""
        dependencies = (
            self._metadata.constructor_dependencies(cls)
            if method is None
            else self._metadata.method_dependencies(cls, method)
        )

        resolved = [(dep.parameter, self.resolve_dependency(cls, dep, instance)) for dep in dependencies]
        return mix_arguments(resolved, manual_args)

    def resolve_dependency(self, cls: type, dependency: Dependency, instance: Any = None) -> Any:
        injector = self._injector

        if dependency.provide_self:
            if instance is None:
                msg = f"Cannot provide self for a constructor dependency in {cls.__qualname__}."
                raise MissingInstanceError(msg)

            injector = injector.create_child([ValueProvider(cls, instance)])

        if dependency.provides:
            logger.debug("Resolving %r for %s in an ephemeral child injector", dependency.token, cls.__qualname__)
            injector = injector.create_child(dependency.provides)

        try:
            if dependency.args is not None:
                value = injector.create(dependency.token, dependency.args)
            else:
                value = injector.get(dependency.token, dependency.flags)
        except TokenNotFoundError as exc:
            # keep the innermost requester
            if exc.requested_by is None:
                exc.requested_by = cls
            raise

        if value is None and dependency.flags & InjectFlags.OPTIONAL and dependency.has_default:
            value = dependency.default

        return value
