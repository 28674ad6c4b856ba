from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ._flags import InjectFlags
from ._scope import INHERIT_SCOPE
from ._validation import validate_impl


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from ._injector import Injector


class Provider(ABC):
    """Strategy producing the value of one token.

    ``scope`` is the tier the provider belongs to. Values are memoized by the
    injectors only when ``cacheable`` is true.
    """

    token: Any
    scope: int = 0
    cacheable: bool = False

    @abstractmethod
    def resolve(self, injector: Injector) -> Any:
        """Produce the value, ``injector`` being the resolving injector."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(token={self.token!r}, scope={self.scope})"


class ValueProvider(Provider):
    cacheable = True

    def __init__(self, token: Any, value: Any) -> None:
        self.token = token
        self.value = value

    def resolve(self, injector: Injector) -> Any:
        return self.value


class ClassProvider(Provider):
    """Instantiates ``cls`` with injected constructor and member dependencies.

    ``args`` are explicit positional arguments mixed with the injected ones.
    With ``singleton=True`` the first instance is kept on the provider itself and
    returned by every later ``resolve``, whatever injector asks for it. The slot
    overrides the scope tiers: a scoped singleton built for one child injector
    is handed to its siblings too.
    """

    def __init__(
        self,
        token: Any,
        cls: type | None = None,
        *,
        scope: int = INHERIT_SCOPE,
        args: Sequence[Any] = (),
        singleton: bool = False,
        cacheable: bool = True,
    ) -> None:
        if cls is None:
            cls = token

        validate_impl(token, cls)

        self.token = token
        self.cls = cls
        self.scope = int(scope)
        self.args = tuple(args)
        self.singleton = singleton
        self.cacheable = cacheable
        self._instance: Any = None

    def resolve(self, injector: Injector) -> Any:
        if self.singleton and self._instance is not None:
            return self._instance

        instance = injector.create(self.cls, self.args)

        if self.singleton:
            self._instance = instance

        return instance


class FactoryProvider(Provider):
    """Calls ``factory(*values)``, one positional argument per token of ``dependencies``, in order."""

    def __init__(
        self,
        token: Any,
        factory: Callable[..., Any],
        dependencies: Sequence[Any] = (),
        *,
        scope: int = 0,
        cacheable: bool = False,
    ) -> None:
        self.token = token
        self.factory = factory
        self.dependencies = tuple(dependencies)
        self.scope = int(scope)
        self.cacheable = cacheable

    def resolve(self, injector: Injector) -> Any:
        return self.factory(*(injector.get(dependency) for dependency in self.dependencies))


class AliasProvider(Provider):
    """Resolving ``token`` is the same as resolving ``alias``, with ``flags``."""

    def __init__(
        self,
        token: Any,
        alias: Any,
        flags: InjectFlags = InjectFlags.DEFAULT,
        *,
        scope: int = 0,
        cacheable: bool = False,
    ) -> None:
        self.token = token
        self.alias = alias
        self.flags = InjectFlags(flags)
        self.scope = int(scope)
        self.cacheable = cacheable

    def resolve(self, injector: Injector) -> Any:
        return injector.get(self.alias, self.flags)


class TaggedProvider(Provider):
    """Resolves to the list of values of every token tagged under ``token``.

    With ``inherit`` the group of the same tag visible from the parent injector
    comes first.
    """

    def __init__(
        self,
        token: Any,
        items: Iterable[Any] = (),
        *,
        inherit: bool = True,
        scope: int = INHERIT_SCOPE,
    ) -> None:
        self.token = token
        self.inherit = inherit
        self.scope = int(scope)
        # dict as an insertion-ordered set
        self.items: dict[Any, None] = dict.fromkeys(items)

    def add(self, *tokens: Any) -> None:
        self.add_all(tokens)

    def add_all(self, tokens: Iterable[Any]) -> None:
        for token in tokens:
            self.items.setdefault(token, None)

    def resolve(self, injector: Injector) -> list[Any]:
        inherited: list[Any] = []
        if self.inherit:
            inherited = injector.get(self.token, InjectFlags.OPTIONAL | InjectFlags.SKIP_SELF) or []

        return [*inherited, *(injector.get(token) for token in self.items)]


class DefaultProvider(Provider):
    """Falls back to ``provider`` unless an ancestor of the resolving injector binds the token."""

    def __init__(self, provider: Provider, *, scope: int = 0) -> None:
        self.token = provider.token
        self.provider = provider
        self.scope = int(scope)

    @property
    def cacheable(self) -> bool:  # type: ignore[override]
        # The override has to be looked up again on every resolution.
        return False

    def resolve(self, injector: Injector) -> Any:
        value = injector.get(self.token, InjectFlags.OPTIONAL | InjectFlags.SKIP_SELF)

        if value is None:
            logger.debug("No override for %r above %r, using the default provider", self.token, injector)
            return self.provider.resolve(injector)

        return value
