from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, NamedTuple, TypeVar, overload

from ._arguments import ArgumentResolver
from ._errors import InvalidTagProviderError, ScopeMismatchError, TokenNotFoundError
from ._flags import InjectFlags
from ._providers import ClassProvider, Provider, TaggedProvider, ValueProvider
from ._scope import Scope
from .metadata import AnnotationMetadata


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ._dependencies import MetadataSource

    T = TypeVar("T")


class Located(NamedTuple):
    """Result of an ancestor walk.

    ``provider`` is ``None`` when ``value`` was served from a value cache.
    """

    owner: Injector
    resolving: Injector
    provider: Provider | None
    value: Any = None


class _Cached(NamedTuple):
    owner: Injector
    resolving: Injector
    item: Any


def find_resolving_injector(path: Sequence[Injector], located: Located) -> Injector:
    """Pick the injector a located provider must be resolved at.

    ``path`` lists the injectors walked, from the caller up to the one where the
    provider was found. Unscoped providers resolve at the caller. Others need
    an injector at least as narrow as both their own scope and their owner's;
    the first such injector going from the hit back down toward the caller
    wins. Returns the caller when none qualifies, leaving the scope check to
    fail there.
    """
    if located.provider is None:
        msg = f"Cannot pick a resolving injector for a cached value owned by {located.owner!r}"
        raise ValueError(msg)

    if located.provider.scope == 0:
        return path[0]

    required = max(located.provider.scope, located.owner.scope.id)

    if located.resolving.scope.id >= required:
        return located.resolving

    for injector in reversed(path):
        if injector.scope.id >= required:
            return injector

    return path[0]


class Injector:
    """Node of a tree of provider registries.

    - resolve tokens through the ancestor chain (``get``)
    - enforce scope tiers between parents and children
    - memoize providers and values along the walked path.
    """

    def __init__(
        self,
        providers: Iterable[Provider | type] = (),
        scope: bool | int | Scope = True,
        *,
        parent: Injector | None = None,
        metadata: MetadataSource | None = None,
    ) -> None:
        self.parent = parent
        self.scope = Scope.create_child(scope, parent.scope if parent is not None else None)

        if metadata is None:
            if parent is not None:
                metadata = parent.metadata
            else:
                metadata = AnnotationMetadata()
        self.metadata = metadata

        self._providers: dict[Any, Provider] = {}
        self._provider_cache: dict[Any, _Cached] = {}
        self._value_cache: dict[Any, _Cached] = {}
        self._lock = threading.RLock()

        for provider in providers:
            self.add(provider)

        self.add(ValueProvider(Injector, self))

    def __repr__(self) -> str:
        return f"<Injector scope={self.scope.id} at {id(self):#x}>"

    def add(self, provider: Provider | type) -> None:
        """Register a provider, or a class bound to itself."""
        if not isinstance(provider, Provider):
            provider = ClassProvider(provider)

        if provider.scope < 0:
            logger.debug("Provider for %r adopts scope %d", provider.token, self.scope.id)
            provider.scope = self.scope.id

        with self._lock:
            self._providers[provider.token] = provider

        logger.debug("Registered %r on %r", provider, self)

    def set(self, token: Any, cls: type, **options: Any) -> None:
        """Bind ``token`` to instances of ``cls``. ``options`` go to ``ClassProvider``."""
        self.add(ClassProvider(token, cls, **options))

    def locate(self, token: Any, flags: InjectFlags = InjectFlags.DEFAULT) -> Located | None:
        path: list[Injector] = []
        injector: Injector | None = self

        while injector is not None:
            path.append(injector)
            located = injector._lookup(token, flags)

            if located is not None:
                if located.provider is not None:
                    located = located._replace(resolving=find_resolving_injector(path, located))
                return located

            if flags & InjectFlags.SELF:
                break

            injector = injector.parent

        return None

    def _lookup(self, token: Any, flags: InjectFlags) -> Located | None:
        """Caches, then local providers of this injector only."""
        with self._lock:
            if not flags & InjectFlags.SKIP_CACHE:
                cached = self._value_cache.get(token)
                if cached is not None and self._visible(cached, flags):
                    return Located(cached.owner, cached.resolving, None, cached.item)

                cached = self._provider_cache.get(token)
                if cached is not None and self._visible(cached, flags):
                    return Located(cached.owner, cached.resolving, cached.item)

            provider = self._providers.get(token)

        if provider is not None:
            return Located(self, self, provider)

        return None

    def _visible(self, cached: _Cached, flags: InjectFlags) -> bool:
        # Entries owned by an ancestor are out of reach of a SELF lookup.
        return not flags & InjectFlags.SELF or cached.owner is self

    @overload
    def get(self, token: type[T], flags: InjectFlags = ...) -> T: ...

    @overload
    def get(self, token: Any, flags: InjectFlags = ...) -> Any: ...

    def get(self, token: Any, flags: InjectFlags = InjectFlags.DEFAULT) -> Any:
        """Resolve ``token``.

        Raises ``TokenNotFoundError`` when nothing provides it, unless ``OPTIONAL``
        is set, and ``ScopeMismatchError`` when the provider needs a narrower
        scope than any injector on the path offers.
        """
        flags = InjectFlags(flags)

        if flags & InjectFlags.SKIP_SELF:
            # SKIP_SELF|SELF can never match, nor can SKIP_SELF at the root.
            if flags & InjectFlags.SELF or self.parent is None:
                return self._not_found(token, flags)
            return self.parent.get(token, flags & ~InjectFlags.SKIP_SELF)

        located = self.locate(token, flags)
        if located is None:
            return self._not_found(token, flags)

        value = located.value
        provider = located.provider

        if provider is not None:
            if located.resolving.scope.id < provider.scope:
                raise ScopeMismatchError(provider, located.resolving.scope.id)

            value = provider.resolve(located.resolving)
            logger.debug("Resolved %r at %r for %r", provider, located.resolving, self)

        if not flags & InjectFlags.SKIP_CACHE:
            self._memoize(token, located, value)

        return value

    def _not_found(self, token: Any, flags: InjectFlags) -> None:
        if flags & InjectFlags.OPTIONAL:
            return None
        raise TokenNotFoundError(token)

    def _memoize(self, token: Any, located: Located, value: Any) -> None:
        owner, resolving, provider, _ = located

        if provider is not None and provider.scope == 0:
            # Unscoped: the calling injector is the point of first resolution.
            if owner is not self:
                self._store(self._provider_cache, token, _Cached(owner, resolving, provider))
            if provider.cacheable:
                self._store(self._value_cache, token, _Cached(owner, self, value))
            return

        if provider is None or provider.cacheable:
            entry = _Cached(owner, resolving, value)
            resolving._store(resolving._value_cache, token, entry)
            self._store(self._value_cache, token, entry)

    def _store(self, cache: dict[Any, _Cached], token: Any, entry: _Cached) -> None:
        with self._lock:
            cache.setdefault(token, entry)

    def create(self, cls: type[T], args: Sequence[Any] = ()) -> T:
        """Build a new instance of ``cls``, bypassing providers and caches."""
        return ArgumentResolver(self).construct(cls, args)

    def create_child(self, providers: Iterable[Provider | type] = (), scope: bool | int | Scope = False) -> Injector:
        return Injector(providers, scope, parent=self, metadata=self.metadata)

    def tag(self, tag: Any, tokens: Iterable[Any]) -> None:
        """Add ``tokens`` to the tag group ``tag`` of this injector."""
        with self._lock:
            provider = self._providers.get(tag)

        if provider is None:
            provider = TaggedProvider(tag)
            self.add(provider)

        if not isinstance(provider, TaggedProvider):
            raise InvalidTagProviderError(tag)

        provider.add_all(tokens)

    @overload
    def call(self, target: type[T], method: None = ..., *args: Any, **kwargs: Any) -> T: ...

    @overload
    def call(self, target: Any, method: str, *args: Any, **kwargs: Any) -> Any: ...

    def call(self, target: Any, method: str | None = None, *args: Any, **kwargs: Any) -> Any:
        """Construct ``target`` (``method=None``) or invoke ``target.method``.

        Injected arguments are mixed with the explicit positional ``args``.
        """
        resolver = ArgumentResolver(self)

        if method is None:
            return resolver.construct(target, args, kwargs)

        return resolver.invoke(target, method, args, kwargs)
