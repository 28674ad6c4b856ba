from __future__ import annotations

import inspect
import typing
from typing import Any, Protocol, cast, get_type_hints


def is_protocol(tp: Any) -> bool:
    """Detect whether ``tp`` is a ``typing.Protocol`` class (safe)."""
    if not inspect.isclass(tp):
        return False

    if hasattr(typing, "is_protocol"):
        # https://docs.python.org/3/library/typing.html#typing.is_protocol
        return typing.is_protocol(tp)

    return issubclass(tp, cast("type", Protocol)) and getattr(tp, "_is_protocol", False)


def validate_impl(token: Any, impl: Any) -> None:
    """Validate that class provider ``impl`` can be instantiated for ``token``.

    - ``impl`` must be a class.
    - For Protocol tokens: accept nominal membership, otherwise check structural conformance.
    - Any other token is an opaque key; unrelated and duck-typed classes are accepted.
    """
    if not inspect.isclass(impl):
        msg = f"Implementation {impl!r} for {token!r} must be a class"
        raise TypeError(msg)

    if not is_protocol(token) or token in impl.__mro__:
        return

    _validate_structural_conformance(token, impl)


def _positional_arity(params: list[inspect.Parameter]) -> int:
    return sum(
        1
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )


def _validate_structural_conformance(proto: type, impl: type) -> None:
    """Best-effort structural conformance: member presence and positional arity."""
    missing: list[str] = []
    mismatches: list[str] = []

    try:
        proto_hints = get_type_hints(proto)
    except (NameError, TypeError):
        proto_hints = {}

    # Attributes declared by annotations
    for name in proto_hints:
        if not name.startswith("_") and not hasattr(impl, name):
            missing.append(name)

    for name, proto_attr in vars(proto).items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        impl_attr = getattr(impl, name, None)
        if impl_attr is None:
            missing.append(name)
            continue

        if not callable(impl_attr):
            mismatches.append(f"{name}: not callable on {impl.__name__}")
            continue

        try:
            proto_params = list(inspect.signature(proto_attr).parameters.values())[1:]
            impl_params = list(inspect.signature(impl_attr).parameters.values())[1:]
        except (TypeError, ValueError):
            continue

        if _positional_arity(impl_params) < _positional_arity(proto_params):
            mismatches.append(
                f"{name}: implementation requires fewer positional params "
                f"({_positional_arity(impl_params)}) than the protocol ({_positional_arity(proto_params)})"
            )

    if missing or mismatches:
        problems = []
        if missing:
            problems.append(f"missing members: {', '.join(missing)}")
        if mismatches:
            problems.append(f"signature mismatches: {', '.join(mismatches)}")

        msg = (
            f"Implementation {impl.__name__} does not structurally conform to protocol "
            f"{proto.__name__}: {'; '.join(problems)}"
        )
        raise TypeError(msg)
