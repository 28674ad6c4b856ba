"""Hierarchical dependency injection.

This package resolves object graphs through a tree of injectors. Each injector
owns a set of providers and a scope tier; lookups walk towards the root, and
results are cached at the injectors whose tier fits the provider.

Exports:
- `Injector`: a node of the tree, with `get`, `create`, `create_child`, `tag` and `call`.
- `Scope`, `Lifetime`: scope tiers of injectors and providers.
- `InjectFlags`: modifiers of a single lookup (optional, skip-self, self, skip-cache).
- Providers: `ValueProvider`, `ClassProvider`, `FactoryProvider`, `AliasProvider`,
  `TaggedProvider`, `DefaultProvider`.
- `Inject`, `optional`, `Factory`, `hook`, `injectable`: annotation markers read by
  the default metadata source.
"""

from ._arguments import mix_arguments
from ._dependencies import MISSING, Dependency, MetadataSource
from ._errors import (
    InvalidScopeError,
    InvalidTagProviderError,
    MissingInstanceError,
    ResolutionError,
    ScopeMismatchError,
    TokenNotFoundError,
)
from ._flags import InjectFlags
from ._injector import Injector, Located, find_resolving_injector
from ._providers import (
    AliasProvider,
    ClassProvider,
    DefaultProvider,
    FactoryProvider,
    Provider,
    TaggedProvider,
    ValueProvider,
)
from ._scope import INHERIT_SCOPE, Lifetime, Scope
from .metadata import AnnotationMetadata, Factory, Inject, hook, injectable, optional


__all__ = [
    "INHERIT_SCOPE",
    "MISSING",
    "AliasProvider",
    "AnnotationMetadata",
    "ClassProvider",
    "DefaultProvider",
    "Dependency",
    "Factory",
    "FactoryProvider",
    "Inject",
    "InjectFlags",
    "Injector",
    "InvalidScopeError",
    "InvalidTagProviderError",
    "Lifetime",
    "Located",
    "MetadataSource",
    "MissingInstanceError",
    "Provider",
    "ResolutionError",
    "Scope",
    "ScopeMismatchError",
    "TaggedProvider",
    "TokenNotFoundError",
    "ValueProvider",
    "find_resolving_injector",
    "hook",
    "injectable",
    "mix_arguments",
    "optional",
]
