"""Unit tests for ContextScope store selection and call shapes."""

import pytest
import typeguard

from radical.flowcontext.errors import CallbackTypeError, ContextError
from radical.flowcontext.scope import ContextScope
from radical.flowcontext.stores.memory import MemoryContextStore
from radical.flowcontext.stores.registry import StoreRegistry


@pytest.fixture
def registry():
    return StoreRegistry(MemoryContextStore())


@pytest.fixture
def stores(registry, spy_store_class):
    store1 = spy_store_class()
    store2 = spy_store_class()
    registry.register("store1", store1)
    registry.register("store2", store2)
    registry.alias_default("store1")
    return store1, store2


class TestFallbackCalls:
    def test_set_get_round_trip(self, registry):
        scope = ContextScope("n1", registry)

        scope.set("count", 7)

        assert scope.get("count") == 7
        assert registry.fallback.data == {"n1": {"count": 7}}

    def test_keys(self, registry):
        scope = ContextScope("n1", registry)
        scope.set("a", 1)
        scope.set("b", 2)

        assert scope.keys() == ["a", "b"]

    def test_fallback_ignores_configured_stores(self, registry, stores):
        store1, _ = stores
        scope = ContextScope("n1", registry)

        scope.set("a", 1)

        assert scope.get("a") == 1
        assert store1.calls == []

    def test_scopes_are_independent(self, registry):
        first = ContextScope("n1", registry)
        second = ContextScope("n2", registry)

        first.set("a", 1)

        assert second.get("a") is None

    def test_empty_store_name_uses_fallback(self, registry, stores):
        store1, _ = stores
        scope = ContextScope("n1", registry)

        scope.set("a", 1, store="")

        assert scope.get("a", store="") == 1
        assert store1.calls == []


class TestNamedStoreCalls:
    def test_get_from_named_store(self, registry, stores):
        _, store2 = stores
        store2.data["n1"] = {"a": "two"}
        results = []
        scope = ContextScope("n1", registry)

        scope.get("a", store="store2", callback=lambda err, v: results.append(v))

        assert results == ["two"]
        assert store2.calls == [("get", "n1", "a")]

    def test_callback_only_uses_default(self, registry, stores):
        store1, store2 = stores
        results = []
        scope = ContextScope("n1", registry)

        scope.set("a", 1, callback=lambda err: results.append(err))
        scope.keys(callback=lambda err, keys: results.append(keys))

        assert results == [None, ["a"]]
        assert store1.data == {"n1": {"a": 1}}
        assert store2.calls == []

    def test_empty_store_name_with_callback_uses_default(self, registry, stores):
        store1, _ = stores
        scope = ContextScope("n1", registry)

        scope.set("a", 1, store="", callback=lambda err: None)

        assert store1.data == {"n1": {"a": 1}}

    def test_unknown_store_uses_default(self, registry, stores):
        store1, _ = stores
        scope = ContextScope("n1", registry)

        scope.set("a", 1, store="nope")

        assert store1.data == {"n1": {"a": 1}}

    def test_set_without_callback_is_allowed(self, registry, stores):
        _, store2 = stores
        scope = ContextScope("n1", registry)

        assert scope.set("a", 1, store="store2") is None
        assert store2.data == {"n1": {"a": 1}}

    def test_get_without_callback_raises(self, registry, stores):
        store1, _ = stores
        scope = ContextScope("n1", registry)

        with pytest.raises(CallbackTypeError, match="Callback must be a function"):
            scope.get("a", store="store1")
        with pytest.raises(CallbackTypeError):
            scope.keys(store="store1")

        assert store1.calls == []

    @pytest.mark.parametrize("bad_callback", ["not callable", 42, ["x"]])
    def test_non_callable_callback_raises(self, registry, stores, bad_callback):
        scope = ContextScope("n1", registry)

        with pytest.raises(CallbackTypeError):
            scope.get("a", store="store1", callback=bad_callback)
        with pytest.raises(CallbackTypeError):
            scope.set("a", 1, store="store1", callback=bad_callback)
        with pytest.raises(CallbackTypeError):
            scope.keys(callback=bad_callback)

    def test_callback_error_is_also_a_type_error(self, registry):
        scope = ContextScope("n1", registry)

        with pytest.raises(TypeError):
            scope.get("a", store="store1")

    def test_undefined_store_without_default(self, registry, spy_store_class):
        registry.register("store1", spy_store_class())
        scope = ContextScope("n1", registry)

        with pytest.raises(ContextError):
            scope.get("a", store="unknown", callback=lambda err, v: None)
        with pytest.raises(ContextError):
            scope.get("a", callback=lambda err, v: None)


class TestAwaitableCalls:
    @pytest.mark.asyncio
    async def test_aset_aget(self, registry, stores):
        _, store2 = stores
        scope = ContextScope("n1", registry)

        await scope.aset("a", 1, store="store2")

        assert await scope.aget("a", store="store2") == 1
        assert await scope.akeys(store="store2") == ["a"]
        assert store2.data == {"n1": {"a": 1}}

    @pytest.mark.asyncio
    async def test_awaitable_defaults_to_default_store(self, registry, stores):
        store1, _ = stores
        scope = ContextScope("n1", registry)

        await scope.aset("a", "x")

        assert await scope.aget("a") == "x"
        assert store1.data == {"n1": {"a": "x"}}

    @pytest.mark.asyncio
    async def test_store_error_is_raised(self, registry):
        class BrokenStore(MemoryContextStore):
            def get(self, scope, key, callback=None):
                callback(KeyError(key))

        registry.register("broken", BrokenStore())
        scope = ContextScope("n1", registry)

        with pytest.raises(KeyError):
            await scope.aget("a", store="broken")

    @pytest.mark.asyncio
    async def test_deferred_callback(self, registry):
        import asyncio

        class SlowStore(MemoryContextStore):
            def get(self, scope, key, callback=None):
                loop = asyncio.get_running_loop()
                loop.call_later(0.01, callback, None, f"{scope}/{key}")

        registry.register("slow", SlowStore())
        scope = ContextScope("n1", registry)

        assert await scope.aget("a", store="slow") == "n1/a"


class TestScopeAttributes:
    def test_values_is_read_only(self, registry):
        scope = ContextScope("global", registry, {"count": 0})

        assert scope.values == {"count": 0}
        with pytest.raises(TypeError):
            scope.values["count"] = 1

    def test_defaults(self, registry):
        scope = ContextScope("n1", registry)

        assert scope.values == {}
        assert scope.flow is None
        assert scope.global_ is None
        assert repr(scope) == "ContextScope('n1')"

    def test_constructor_type_checked(self, registry):
        with pytest.raises(typeguard.TypeCheckError):
            ContextScope(123, registry)
