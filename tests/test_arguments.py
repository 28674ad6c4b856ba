import unittest
from typing import Annotated

import pytest

from scopebind import (
    ClassProvider,
    Factory,
    Inject,
    InjectFlags,
    Injector,
    MissingInstanceError,
    TokenNotFoundError,
    ValueProvider,
    hook,
    mix_arguments,
    optional,
)


class DepA: ...


class DepB: ...


class Owner:
    holder: Annotated["Holder", Inject(provide_self=True, args=())]


class Holder:
    def __init__(self, owner: Annotated[Owner, Inject()]):
        self.owner = owner


class Echo:
    def handle(self, me: Annotated["Echo", Inject(provide_self=True)]):
        return me


def test_mix_arguments_fills_gaps_with_explicit_arguments():
    assert mix_arguments([(0, "A"), (2, "B")], ["X", "Y"]) == ["A", "X", "B", "Y"]


def test_mix_arguments_sorts_by_position():
    assert mix_arguments([(2, "B"), (0, "A")], ["X"]) == ["A", "X", "B"]


def test_mix_arguments_pads_missing_explicit_arguments_with_none():
    assert mix_arguments([(3, "D")], ["X"]) == ["X", None, None, "D"]


def test_mix_arguments_ignores_member_injections():
    assert mix_arguments([(None, "member"), (1, "B")], ["X", "Y"]) == ["X", "B", "Y"]


def test_mix_arguments_without_dependencies_keeps_explicit_arguments():
    assert mix_arguments([], [1, 2, 3]) == [1, 2, 3]


class TestConstruction(unittest.TestCase):
    injector: Injector

    def setUp(self):
        self.injector = Injector([ClassProvider(DepA), ClassProvider(DepB)])

    def test_constructor_and_member_dependencies_are_injected(self):
        class DepC:
            dep_b: Annotated[DepB, Inject()]

            def __init__(self, dep_a: Annotated[DepA, Inject()]):
                self.dep_a = dep_a

        instance = self.injector.create(DepC)

        assert instance.dep_a is self.injector.get(DepA)
        assert instance.dep_b is self.injector.get(DepB)

    def test_explicit_arguments_fill_positions_not_injected(self):
        class Mixed:
            def __init__(self, dep_a: Annotated[DepA, Inject()], name, dep_b: Annotated[DepB, Inject()], *rest):
                self.dep_a = dep_a
                self.name = name
                self.dep_b = dep_b
                self.rest = rest

        instance = self.injector.create(Mixed, ["svc", 1, 2])

        assert isinstance(instance.dep_a, DepA)
        assert instance.name == "svc"
        assert isinstance(instance.dep_b, DepB)
        assert instance.rest == (1, 2)

    def test_optional_dependency_uses_default_value(self):
        class WithDefault:
            def __init__(self, port: Annotated[int, optional(5555, token="port")]):
                self.port = port

        assert self.injector.create(WithDefault).port == 5555

        self.injector.add(ValueProvider("port", 1234))
        assert self.injector.create(WithDefault).port == 1234

    def test_optional_dependency_without_default_is_none(self):
        class WithOptional:
            def __init__(self, cache: Annotated[object, optional(token="cache")]):
                self.cache = cache

        assert self.injector.create(WithOptional).cache is None

    def test_missing_dependency_names_token_and_requesting_class(self):
        class Needy:
            def __init__(self, missing: Annotated[object, Inject("missing")]):
                self.missing = missing

        with pytest.raises(TokenNotFoundError) as ctx:
            self.injector.create(Needy)

        assert ctx.value.token == "missing"
        assert ctx.value.requested_by is Needy
        assert "Needy" in str(ctx.value)

    def test_missing_nested_dependency_keeps_innermost_requester(self):
        class Inner:
            def __init__(self, missing: Annotated[object, Inject("missing")]):
                self.missing = missing

        class Outer:
            def __init__(self, inner: Annotated[Inner, Inject()]):
                self.inner = inner

        self.injector.add(Inner)

        with pytest.raises(TokenNotFoundError) as ctx:
            self.injector.create(Outer)

        assert ctx.value.requested_by is Inner

    def test_dependency_with_args_is_created_instead_of_looked_up(self):
        class Point:
            def __init__(self, x, y):
                self.x = x
                self.y = y

        class Shape:
            def __init__(self, origin: Annotated[Point, Inject(args=(1, 2))]):
                self.origin = origin

        shape = self.injector.create(Shape)

        assert (shape.origin.x, shape.origin.y) == (1, 2)

    def test_provides_seeds_an_ephemeral_child_injector(self):
        class Client:
            def __init__(self, url: Annotated[str, Inject("url")]):
                self.url = url

        class Gateway:
            def __init__(self, client: Annotated[Client, Inject(provides=[Client, ValueProvider("url", "http://x")])]):
                self.client = client

        gateway = self.injector.create(Gateway)

        assert gateway.client.url == "http://x"
        assert self.injector.get("url", InjectFlags.OPTIONAL) is None

    def test_provide_self_in_constructor_raises(self):
        class Selfish:
            def __init__(self, me: Annotated[object, Inject(provide_self=True)]):
                self.me = me

        with pytest.raises(MissingInstanceError):
            self.injector.create(Selfish)

    def test_provide_self_in_member_sees_instance(self):
        owner = self.injector.create(Owner)

        assert owner.holder.owner is owner

    def test_factories_run_after_members_and_before_init_hooks(self):
        calls = []

        class Lifecycle:
            dep_a: Annotated[DepA, Inject()]
            label: Annotated[str, Factory(lambda self: calls.append("factory") or type(self.dep_a).__name__)]

            @hook
            def on_init(self, dep_b: Annotated[DepB, Inject()]):
                calls.append("init")
                self.seen = (self.label, dep_b)

        instance = self.injector.create(Lifecycle)

        assert calls == ["factory", "init"]
        assert instance.label == "DepA"
        assert instance.seen == ("DepA", self.injector.get(DepB))

    def test_non_init_hooks_are_not_run_on_construction(self):
        class Closable:
            closed = False

            @hook("destroy")
            def close(self):
                self.closed = True

        assert self.injector.create(Closable).closed is False

    def test_class_provider_runs_full_instantiation(self):
        class Service:
            dep_a: Annotated[DepA, Inject()]

            @hook
            def on_init(self):
                self.ready = True

        self.injector.add(Service)
        service = self.injector.get(Service)

        assert isinstance(service.dep_a, DepA)
        assert service.ready


class TestCall(unittest.TestCase):
    injector: Injector

    def setUp(self):
        self.injector = Injector([ClassProvider(DepA), ClassProvider(DepB)])

    def test_call_without_method_constructs_class(self):
        class Service:
            def __init__(self, dep_a: Annotated[DepA, Inject()], value):
                self.dep_a = dep_a
                self.value = value

        service = self.injector.call(Service, None, 7)

        assert isinstance(service.dep_a, DepA)
        assert service.value == 7

    def test_call_method_mixes_injected_and_manual_arguments(self):
        class Handler:
            def handle(self, dep_a: Annotated[DepA, Inject()], payload, *, retries=0):
                return dep_a, payload, retries

        dep_a, payload, retries = self.injector.call(Handler(), "handle", "body", retries=3)

        assert dep_a is self.injector.get(DepA)
        assert payload == "body"
        assert retries == 3

    def test_call_method_can_provide_self(self):
        echo = Echo()

        assert self.injector.call(echo, "handle") is echo

    def test_call_static_method(self):
        class Tools:
            @staticmethod
            def pair(dep_a: Annotated[DepA, Inject()], other):
                return dep_a, other

        dep_a, other = self.injector.call(Tools(), "pair", "x")

        assert isinstance(dep_a, DepA)
        assert other == "x"
