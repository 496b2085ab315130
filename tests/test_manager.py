"""Tests for WireManager: registry, instance lifetime and action execution."""

from __future__ import annotations

from typing import Any

import pytest

from bladewire import (
    ActionRequest,
    ComponentError,
    ComponentNotFoundError,
    ReactiveUpdate,
    WireManager,
)

from .components import Counter, Loader, Todo


class TestRegistration:
    def test_registered_names(self, wire: WireManager) -> None:
        assert wire.registered_names() == ["Counter", "Loader", "Todo"]
        assert wire.is_registered("Counter")
        assert not wire.is_registered("counter")

    def test_non_component_rejected(self, wire: WireManager) -> None:
        with pytest.raises(ComponentError, match="not a Component subclass"):
            wire.register("Bad", object)  # type: ignore[arg-type]

    def test_unknown_name_suggests(self, wire: WireManager) -> None:
        with pytest.raises(ComponentNotFoundError, match="Did you mean 'Counter'"):
            wire.create("Countr")


class TestCreation:
    def test_positional(self, wire: WireManager) -> None:
        counter = wire.create("Counter", 5)
        assert isinstance(counter, Counter)
        assert counter.count == 5
        assert counter.name == "Counter"
        assert wire.get(counter.id) is counter

    def test_options_normalized(self, wire: WireManager) -> None:
        todo = wire.create_with_options("Todo", {"Initial-Title": "Groceries", "extra": 1})
        assert isinstance(todo, Todo)
        assert todo.title == "Groceries"
        assert todo.items == []

    def test_declared_default(self, wire: WireManager) -> None:
        assert wire.create_with_options("Counter", {}).count == 0

    def test_constructor_default(self, wire: WireManager) -> None:
        loader = wire.create_with_options("Loader", {})
        assert isinstance(loader, Loader)
        assert loader._delay == 0.05

    def test_ids_are_unique(self, wire: WireManager) -> None:
        assert wire.create("Counter").id != wire.create("Counter").id


class TestLifetime:
    def test_evicted_instance_recreated_from_origin(self, wire: WireManager) -> None:
        counter = wire.create("Counter", 5)
        counter.count = 9
        assert wire.evict(counter.id)
        assert wire.get(counter.id) is None
        assert not wire.evict(counter.id)

        revived = wire.get_or_recreate(counter.id, "Counter")
        assert revived is not counter
        assert revived.id == counter.id
        assert revived.count == 5
        assert wire.get(counter.id) is revived

    def test_unknown_id_built_from_type(self, wire: WireManager) -> None:
        counter = wire.get_or_recreate("client-held", "Counter")
        assert counter.id == "client-held"
        assert counter.count == 0

    def test_live_instance_returned(self, wire: WireManager) -> None:
        counter = wire.create("Counter")
        assert wire.get_or_recreate(counter.id, "Todo") is counter

    def test_cleanup(self, wire: WireManager) -> None:
        counter = wire.create("Counter", 3)
        wire.cleanup()
        assert wire.get(counter.id) is None
        assert wire.get_or_recreate(counter.id, "Counter").count == 0


class TestCall:
    @pytest.mark.asyncio
    async def test_success(self, wire: WireManager) -> None:
        counter = wire.create_with_options("Counter", {"start": 5})
        result = await wire.call(
            ActionRequest(counter.id, "Counter", "increment", request_id="r1")
        )
        assert result.success
        assert result.updates == {"count": 6}
        assert result.new_state == {"count": 6}
        assert result.request_id == "r1"
        assert result.error is None
        assert f'data-nodewire-id="{counter.id}" data-nodewire-prop="count">6</span>' in (
            result.html or ""
        )

    @pytest.mark.asyncio
    async def test_arguments(self, wire: WireManager) -> None:
        counter = wire.create("Counter", 5)
        result = await wire.call(ActionRequest(counter.id, "Counter", "increment", args=(10,)))
        assert result.updates == {"count": 15}

    @pytest.mark.asyncio
    async def test_client_state_restored(self, wire: WireManager) -> None:
        counter = wire.create("Counter")
        result = await wire.call(
            ActionRequest(counter.id, "Counter", "increment", state={"count": 41, "id": "x"})
        )
        assert result.updates == {"count": 42}
        assert counter.id != "x"

    @pytest.mark.asyncio
    async def test_list_mutation_detected(self, wire: WireManager) -> None:
        todo = wire.create("Todo")
        result = await wire.call(ActionRequest(todo.id, "Todo", "add", args=("milk",)))
        assert result.updates == {"items": ["milk"]}
        assert "<li>milk</li>" in (result.html or "")

    @pytest.mark.asyncio
    async def test_evicted_instance(self, wire: WireManager) -> None:
        counter = wire.create("Counter", 2)
        wire.evict(counter.id)
        result = await wire.call(ActionRequest(counter.id, "Counter", "increment"))
        assert result.success
        assert result.new_state == {"count": 3}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["explode", "_secret", "render", "set_state"])
    async def test_not_an_action(self, wire: WireManager, method: str) -> None:
        counter = wire.create("Counter")
        result = await wire.call(ActionRequest(counter.id, "Counter", method))
        assert not result.success
        assert result.error == f"Method {method} does not exist in Counter"
        assert counter.count == 0

    @pytest.mark.asyncio
    async def test_action_error(self, wire: WireManager) -> None:
        counter = wire.create("Counter")
        result = await wire.call(ActionRequest(counter.id, "Counter", "fail", request_id="r2"))
        assert not result.success
        assert result.error == "boom"
        assert result.request_id == "r2"
        assert result.html is None
        assert wire.get(counter.id) is counter

    @pytest.mark.asyncio
    async def test_error_without_message(self, wire: WireManager) -> None:
        counter = wire.create("Counter")
        result = await wire.call(ActionRequest(counter.id, "Counter", "fail_silently"))
        assert result.error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_unregistered_component(self, wire: WireManager) -> None:
        result = await wire.call(ActionRequest("missing", "Nope", "increment"))
        assert not result.success
        assert result.error == "Component 'Nope' is not registered"


class TestAsyncActions:
    @pytest.mark.asyncio
    async def test_volatile_updates_pushed(self, wire: WireManager) -> None:
        loader = wire.create("Loader", 0.05)
        pushed: list[ReactiveUpdate] = []

        async def on_update(update: ReactiveUpdate) -> None:
            pushed.append(update)

        result = await wire.call(
            ActionRequest(loader.id, "Loader", "load", request_id="r3"), on_update=on_update
        )

        assert [update.updates for update in pushed] == [
            {"live_loading": True},
            {"live_loading": False},
        ]
        assert "<i>Loading</i>" in pushed[0].html
        assert "<i>Loading</i>" not in pushed[-1].html
        assert all(update.id == loader.id for update in pushed)
        assert all(update.request_id == "r3" for update in pushed)
        assert result.success
        assert result.updates == {"items": ["a", "b"]}

    @pytest.mark.asyncio
    async def test_without_update_callback(self, wire: WireManager) -> None:
        loader = wire.create("Loader", 0.01)
        result = await wire.call(ActionRequest(loader.id, "Loader", "load"))
        assert result.success
        assert result.new_state == {"items": ["a", "b"], "live_loading": False}

    @pytest.mark.asyncio
    async def test_plain_callback(self, wire: WireManager) -> None:
        loader = wire.create("Loader", 0.05)
        seen: list[dict[str, Any]] = []
        await wire.call(
            ActionRequest(loader.id, "Loader", "load"),
            on_update=lambda update: seen.append(update.updates),
        )
        assert seen[0] == {"live_loading": True}
        assert seen[-1] == {"live_loading": False}

    @pytest.mark.asyncio
    async def test_sync_action_pushes_nothing(self, wire: WireManager) -> None:
        counter = wire.create("Counter")
        seen: list[ReactiveUpdate] = []
        result = await wire.call(
            ActionRequest(counter.id, "Counter", "increment"), on_update=seen.append
        )
        assert result.success
        assert seen == []
