import unittest
from typing import Annotated

import pytest

from refinject import (
    ClassProvider,
    CyclicDependencyError,
    ExistingProvider,
    FactoryProvider,
    Inject,
    InjectionToken,
    Injector,
    InstantiationError,
    InvalidProviderError,
    MixingMultiProvidersWithRegularProvidersError,
    NoProviderError,
    Optional,
    OutOfBoundsError,
    ReflectiveInjector,
    Self,
    SkipSelf,
    ValueProvider,
    forward_ref,
)


class Engine: ...


class TurboEngine(Engine): ...


class Car:
    def __init__(self, engine: Engine):
        self.engine = engine


class CarWithOptionalEngine:
    def __init__(self, engine: Annotated[Engine, Optional()]):
        self.engine = engine


class CarWithDefaultEngine:
    def __init__(self, engine: Engine | None = None):
        self.engine = engine


class Door:
    def __init__(self, lock: Annotated[object, Inject(forward_ref(lambda: Lock))]):
        self.lock = lock


class Lock:
    def fits(self, door: "Door") -> bool:
        return isinstance(door, Door)


class CycleA:
    def __init__(self, b: Annotated[object, Inject(forward_ref(lambda: CycleB))]):
        self.b = b


class CycleB:
    def __init__(self, a: CycleA):
        self.a = a


TOKEN = InjectionToken("Token")


def test_class_providers_build_and_cache_instances():
    injector = ReflectiveInjector.resolve_and_create(
        [ClassProvider(provide=Engine, use_class=Engine), ClassProvider(provide=Car, use_class=Car)]
    )

    car = injector.get(Car)
    assert isinstance(car, Car)
    assert isinstance(car.engine, Engine)
    assert injector.get(Engine) is injector.get(Engine)
    assert car.engine is injector.get(Engine)


def test_value_provider_returns_literal():
    injector = ReflectiveInjector.resolve_and_create([ValueProvider(provide=TOKEN, use_value="Hello")])
    assert injector.get(TOKEN) == "Hello"


def test_unregistered_token_raises_no_provider():
    class T: ...

    injector = ReflectiveInjector.resolve_and_create([])

    with pytest.raises(NoProviderError) as ctx:
        injector.get(T)
    assert str(ctx.value) == "No provider for T!"


def test_unregistered_token_returns_not_found_value():
    class T: ...

    injector = ReflectiveInjector.resolve_and_create([])
    assert injector.get(T, "fallback") == "fallback"
    assert injector.get(T, None) is None


def test_explicit_throw_sentinel_raises():
    injector = ReflectiveInjector.resolve_and_create([])

    with pytest.raises(NoProviderError):
        injector.get(TOKEN, Injector.THROW_IF_NOT_FOUND)


def test_missing_nested_dependency_reports_path():
    injector = ReflectiveInjector.resolve_and_create([Car])

    with pytest.raises(NoProviderError) as ctx:
        injector.get(Car)
    assert str(ctx.value) == "No provider for Engine! (Car -> Engine)"
    assert [k.token for k in ctx.value.keys] == [Engine, Car]


def test_optional_unbound_dependency_is_none():
    injector = ReflectiveInjector.resolve_and_create([CarWithOptionalEngine, CarWithDefaultEngine])

    assert injector.get(CarWithOptionalEngine).engine is None
    assert injector.get(CarWithDefaultEngine).engine is None


def test_optional_bound_dependency_is_injected():
    injector = ReflectiveInjector.resolve_and_create([CarWithOptionalEngine, Engine])
    assert injector.get(CarWithOptionalEngine).engine is injector.get(Engine)


def test_forward_reference_to_later_class():
    injector = ReflectiveInjector.resolve_and_create([Door, Lock])

    door = injector.get(Door)
    assert isinstance(door.lock, Lock)
    assert door.lock.fits(door)


def test_constructor_cycle_raises():
    injector = ReflectiveInjector.resolve_and_create([CycleA, CycleB])

    with pytest.raises(CyclicDependencyError) as ctx:
        injector.get(CycleA)
    assert str(ctx.value) == "Cannot instantiate cyclic dependency! (CycleA -> CycleB -> CycleA)"


def test_factory_errors_are_wrapped():
    def broken():
        msg = "boom"
        raise ValueError(msg)

    injector = ReflectiveInjector.resolve_and_create([FactoryProvider("svc", broken, deps=[])])

    with pytest.raises(InstantiationError) as ctx:
        injector.get("svc")
    assert isinstance(ctx.value.original_exception, ValueError)
    assert ctx.value.__cause__ is ctx.value.original_exception
    assert ctx.value.cause_key.token == "svc"
    assert "Error during instantiation of svc!" in str(ctx.value)


def test_factory_provider_with_deps():
    injector = ReflectiveInjector.resolve_and_create(
        [Engine, FactoryProvider(Car, lambda engine: Car(engine), deps=[Engine])]
    )
    assert injector.get(Car).engine is injector.get(Engine)


def test_existing_provider_aliases_instance():
    injector = ReflectiveInjector.resolve_and_create([TurboEngine, ExistingProvider(Engine, TurboEngine)])
    assert injector.get(Engine) is injector.get(TurboEngine)


def test_multi_providers_return_list_in_order():
    injector = ReflectiveInjector.resolve_and_create(
        [
            ValueProvider("plugins", "a", multi=True),
            ValueProvider("plugins", "b", multi=True),
            ValueProvider("plugins", "c", multi=True),
        ]
    )
    assert injector.get("plugins") == ["a", "b", "c"]


def test_mixing_multi_and_regular_providers_raises():
    with pytest.raises(MixingMultiProvidersWithRegularProvidersError):
        ReflectiveInjector.resolve_and_create([ValueProvider("x", 1), ValueProvider("x", 2, multi=True)])


def test_last_regular_provider_wins():
    injector = ReflectiveInjector.resolve_and_create([ValueProvider("port", 1), ValueProvider("port", 2)])
    assert injector.get("port") == 2


def test_injector_token_returns_injector():
    class NeedsInjector:
        def __init__(self, injector: Injector):
            self.injector = injector

    injector = ReflectiveInjector.resolve_and_create([NeedsInjector])
    assert injector.get(Injector) is injector
    assert injector.get(NeedsInjector).injector is injector


def test_same_providers_build_same_graph():
    providers = [Engine, Car, ValueProvider(TOKEN, "Hello")]

    first = ReflectiveInjector.resolve_and_create(providers)
    second = ReflectiveInjector.resolve_and_create(providers)

    assert type(first.get(Car).engine) is type(second.get(Car).engine)
    assert first.get(Car) is not second.get(Car)
    assert first.get(TOKEN) == second.get(TOKEN)


def test_resolve_and_instantiate_does_not_cache():
    injector = ReflectiveInjector.resolve_and_create([Engine])

    a = injector.resolve_and_instantiate(Car)
    b = injector.resolve_and_instantiate(Car)

    assert a is not b
    assert a.engine is injector.get(Engine)
    with pytest.raises(NoProviderError):
        injector.get(Car)


def test_get_provider_at_index():
    injector = ReflectiveInjector.resolve_and_create([Engine, Car])

    assert injector.get_provider_at_index(1).key.token is Car
    with pytest.raises(OutOfBoundsError):
        injector.get_provider_at_index(2)
    with pytest.raises(OutOfBoundsError):
        injector.get_provider_at_index(-1)


def test_repr_lists_providers():
    injector = ReflectiveInjector.resolve_and_create([Engine, ValueProvider("port", 1)])
    assert repr(injector) == "ReflectiveInjector(providers=[Engine, port])"


class TestInjectorHierarchy(unittest.TestCase):
    parent: ReflectiveInjector

    def setUp(self):
        self.parent = ReflectiveInjector.resolve_and_create([Engine])

    def test_child_resolves_from_parent(self):
        child = self.parent.resolve_and_create_child([Car])

        assert child.parent is self.parent
        assert child.get(Car).engine is self.parent.get(Engine)

    def test_child_registration_overrides_parent(self):
        child = self.parent.resolve_and_create_child([ClassProvider(Engine, TurboEngine)])

        assert isinstance(child.get(Engine), TurboEngine)
        assert not isinstance(self.parent.get(Engine), TurboEngine)

    def test_parent_does_not_see_child_providers(self):
        self.parent.resolve_and_create_child([Car])

        with pytest.raises(NoProviderError):
            self.parent.get(Car)

    def test_self_only_looks_in_current_injector(self):
        class SelfCar:
            def __init__(self, engine: Annotated[Engine, Self()]):
                self.engine = engine

        child = self.parent.resolve_and_create_child([SelfCar])

        with pytest.raises(NoProviderError):
            child.get(SelfCar)

    def test_optional_self_dependency_is_none(self):
        class SelfCar:
            def __init__(self, engine: Annotated[Engine, Self(), Optional()]):
                self.engine = engine

        child = self.parent.resolve_and_create_child([SelfCar])
        assert child.get(SelfCar).engine is None

    def test_skip_self_starts_at_parent(self):
        class SkipSelfCar:
            def __init__(self, engine: Annotated[Engine, SkipSelf()]):
                self.engine = engine

        child = self.parent.resolve_and_create_child([Engine, SkipSelfCar])

        assert child.get(SkipSelfCar).engine is self.parent.get(Engine)
        assert child.get(Engine) is not self.parent.get(Engine)

    def test_create_child_from_resolved(self):
        child = self.parent.create_child_from_resolved(ReflectiveInjector.resolve([Car]))
        assert child.get(Car).engine is self.parent.get(Engine)

    def test_null_parent_is_asked_last(self):
        child = ReflectiveInjector.resolve_and_create([], parent=Injector.NULL)

        assert child.get(TOKEN, "fallback") == "fallback"
        with pytest.raises(NoProviderError):
            child.get(TOKEN)


@pytest.mark.parametrize("provider", [42, {"provide": "x"}, "not a provider"])
def test_malformed_provider_raises_invalid_provider(provider):
    with pytest.raises(InvalidProviderError) as ctx:
        ReflectiveInjector.resolve_and_create([provider])
    assert ctx.value.provider == provider
