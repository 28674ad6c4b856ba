"""Dependency descriptors extracted from ``typing.Annotated`` markers.

Mark constructor or method parameters, and class-level attribute annotations::

    class Service:
        cache: Annotated[Cache, Inject()]
        created: Annotated[float, Factory(lambda self: time.time())]

        def __init__(self, db: Annotated[Database, Inject()], name: str) -> None: ...

        @hook
        def on_init(self, log: Annotated[Logger, optional()]) -> None: ...

Parameters without a marker are left to explicit arguments.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, TypeVar, get_args, get_origin, get_type_hints

from ._dependencies import MISSING, Dependency
from ._flags import InjectFlags


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._injector import Injector

    C = TypeVar("C", bound=type)
    F = TypeVar("F", bound=Callable[..., Any])


HOOKS_ATTR = "__scopebind_hooks__"


@dataclass(frozen=True)
class Inject:
    """Marks an injection point. ``token=None`` injects the annotated type."""

    token: Any = None
    flags: InjectFlags = InjectFlags.DEFAULT
    default: Any = MISSING
    args: tuple[Any, ...] | None = None
    provides: tuple[Any, ...] = ()
    provide_self: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "flags", InjectFlags(self.flags))
        object.__setattr__(self, "provides", tuple(self.provides))
        if self.args is not None:
            object.__setattr__(self, "args", tuple(self.args))

    def dependency(self, annotated: Any, parameter: int | None = None) -> Dependency:
        return Dependency(
            token=annotated if self.token is None else self.token,
            flags=self.flags,
            default=self.default,
            parameter=parameter,
            args=self.args,
            provides=self.provides,
            provide_self=self.provide_self,
        )


def optional(default: Any = MISSING, token: Any = None, flags: InjectFlags = InjectFlags.DEFAULT) -> Inject:
    """An ``Inject`` marker that yields ``default`` (or ``None``) when nothing provides the token."""
    return Inject(token=token, flags=flags | InjectFlags.OPTIONAL, default=default)


@dataclass(frozen=True)
class Factory:
    """Marks a member computed as ``function(instance)`` after member injection."""

    function: Callable[[Any], Any]


def _hook_name(member: str) -> str:
    if member.startswith("on_") and len(member) > 3:
        return member[3:]
    return member


def hook(name: str | F | None = None) -> Any:
    """Mark a method as a lifecycle hook.

    Bare ``@hook`` derives the hook name from the method name, ``on_init``
    becoming ``init``.
    """
    if callable(name):
        return hook()(name)

    def decorate(fn: F) -> F:
        hook_name = name or _hook_name(fn.__name__)
        setattr(fn, HOOKS_ATTR, (*getattr(fn, HOOKS_ATTR, ()), hook_name))
        return fn

    return decorate


def _find_marker(annotation: Any, kind: type) -> tuple[Any, Any] | None:
    if get_origin(annotation) is not Annotated:
        return None

    annotated, *extras = get_args(annotation)
    for extra in extras:
        if isinstance(extra, kind):
            return annotated, extra

    return None


def _get_type_hints(obj: Any, owner: type) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except TypeError:
        return {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, owner.__name__, owner.__qualname__)
        return dict(getattr(obj, "__annotations__", {}))


class AnnotationMetadata:
    """Default ``MetadataSource`` reading ``Inject``/``Factory`` markers and ``hook`` decorators."""

    def constructor_dependencies(self, cls: type) -> list[Dependency]:
        init = inspect.getattr_static(cls, "__init__")
        return self._parameter_dependencies(cls, init, skip=1)

    def method_dependencies(self, cls: type, method: str) -> list[Dependency]:
        raw = inspect.getattr_static(cls, method)

        if isinstance(raw, staticmethod):
            return self._parameter_dependencies(cls, raw.__func__, skip=0)
        if isinstance(raw, classmethod):
            return self._parameter_dependencies(cls, raw.__func__, skip=1)

        return self._parameter_dependencies(cls, raw, skip=1)

    def member_dependencies(self, cls: type) -> dict[str, Dependency]:
        members = {}
        for name, annotation in _get_type_hints(cls, cls).items():
            found = _find_marker(annotation, Inject)
            if found is not None:
                annotated, marker = found
                members[name] = marker.dependency(annotated)
        return members

    def factories(self, cls: type) -> dict[str, Callable[[Any], Any]]:
        factories = {}
        for name, annotation in _get_type_hints(cls, cls).items():
            found = _find_marker(annotation, Factory)
            if found is not None:
                factories[name] = found[1].function
        return factories

    def hooks(self, cls: type) -> dict[str, tuple[str, ...]]:
        hooks: dict[str, tuple[str, ...]] = {}

        # Base classes first; an override without the decorator is no longer a hook.
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                names = getattr(getattr(value, "__func__", value), HOOKS_ATTR, ())
                if names:
                    hooks[name] = names
                else:
                    hooks.pop(name, None)

        return hooks

    def _parameter_dependencies(self, cls: type, function: Any, skip: int) -> list[Dependency]:
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError):
            return []

        hints = _get_type_hints(function, cls)
        dependencies = []
        index = 0

        for param in list(signature.parameters.values())[skip:]:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            found = _find_marker(hints.get(param.name, param.annotation), Inject)

            if param.kind is param.KEYWORD_ONLY:
                if found is not None:
                    msg = f"Keyword-only parameter '{param.name}' of {cls.__qualname__} cannot be injected"
                    raise TypeError(msg)
                continue

            if found is not None:
                annotated, marker = found
                dependencies.append(marker.dependency(annotated, index))

            index += 1

        return dependencies


def injectable(injector: Injector, *, token: Any = None, tags: Iterable[Any] = (), **options: Any) -> Callable[[C], C]:
    """Register the decorated class on ``injector``, under ``token`` (the class itself by default)."""

    def decorate(cls: C) -> C:
        key = cls if token is None else token
        injector.set(key, cls, **options)

        for tag in tags:
            injector.tag(tag, [key])

        return cls

    return decorate
