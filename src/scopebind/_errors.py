from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from ._providers import Provider


def _describe(token: Any) -> str:
    return getattr(token, "__qualname__", None) or repr(token)


class ResolutionError(RuntimeError):
    pass


class TokenNotFoundError(ResolutionError, LookupError):
    """No provider or cached value for ``token`` anywhere in the ancestor chain."""

    def __init__(self, token: Any, requested_by: type | None = None) -> None:
        super().__init__(token)
        self.token = token
        self.requested_by = requested_by

    def __str__(self) -> str:
        msg = f"Could not retrieve the dependency for token {_describe(self.token)}."
        if self.requested_by is not None:
            msg += f" Requested by {_describe(self.requested_by)}."
        return msg


class ScopeMismatchError(ResolutionError):
    def __init__(self, provider: Provider, scope_id: int) -> None:
        self.provider = provider
        self.scope_id = scope_id
        msg = (
            f"Cannot instantiate provider for {_describe(provider.token)} with scope {provider.scope} "
            f"from an injector with broader scope {scope_id}"
        )
        super().__init__(msg)


class InvalidScopeError(ResolutionError, ValueError):
    pass


class InvalidTagProviderError(ResolutionError, TypeError):
    def __init__(self, token: Any) -> None:
        self.token = token
        super().__init__(f"Invalid tag provider {_describe(token)}: token is bound to a non-tagged provider")


class MissingInstanceError(ResolutionError):
    pass
