"""Tests for the action protocol payloads and the transport dispatcher."""

from __future__ import annotations

import json
from typing import Any

import pytest

from bladewire import (
    ActionDispatcher,
    ActionRequest,
    ActionResult,
    ProtocolError,
    ReactiveUpdate,
    WireManager,
)


class TestActionRequest:
    def test_from_payload(self) -> None:
        request = ActionRequest.from_payload(
            {
                "id": "c1",
                "component": "Counter",
                "method": "increment",
                "args": [2],
                "state": {"count": 1},
                "requestId": 7,
            }
        )
        assert request == ActionRequest("c1", "Counter", "increment", (2,), {"count": 1}, "7")

    def test_optional_fields(self) -> None:
        request = ActionRequest.from_payload({"id": "c1", "component": "C", "method": "m"})
        assert request.args == ()
        assert request.state == {}
        assert request.request_id is None

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ([], "JSON object"),
            ({"component": "C", "method": "m"}, "'id'"),
            ({"id": "c1", "component": "", "method": "m"}, "'component'"),
            ({"id": "c1", "component": "C", "method": 3}, "'method'"),
            ({"id": "c1", "component": "C", "method": "m", "args": "x"}, "'args'"),
            ({"id": "c1", "component": "C", "method": "m", "state": [1]}, "'state'"),
        ],
    )
    def test_invalid(self, payload: Any, message: str) -> None:
        with pytest.raises(ProtocolError, match=message):
            ActionRequest.from_payload(payload)


class TestPayloads:
    def test_success(self) -> None:
        result = ActionResult(
            success=True, html="<p>1</p>", new_state={"n": 1}, updates={"n": 1}, request_id="r"
        )
        assert result.to_payload() == {
            "success": True,
            "html": "<p>1</p>",
            "newState": {"n": 1},
            "updates": {"n": 1},
            "requestId": "r",
        }
        assert result.changed_keys == {"n"}

    def test_failure(self) -> None:
        result = ActionResult(success=False, error="boom")
        assert result.to_payload() == {"success": False, "error": "boom"}
        assert result.changed_keys == set()

    def test_update(self) -> None:
        update = ReactiveUpdate(id="c1", updates={"live_x": 1}, html="<b>1</b>", new_state={"live_x": 1})
        assert update.to_payload() == {
            "type": "update",
            "id": "c1",
            "html": "<b>1</b>",
            "newState": {"live_x": 1},
            "updates": {"live_x": 1},
        }


class TestDispatcher:
    @pytest.mark.asyncio
    async def test_handle_request(self, wire: WireManager) -> None:
        counter = wire.create("Counter", 1)
        body = await ActionDispatcher(wire).handle_request(
            {"id": counter.id, "component": "Counter", "method": "increment", "args": [4]}
        )
        assert body["success"] is True
        assert body["updates"] == {"count": 5}
        assert "requestId" not in body

    @pytest.mark.asyncio
    async def test_handle_request_invalid(self, wire: WireManager) -> None:
        body = await ActionDispatcher(wire).handle_request({"id": "c1"})
        assert body["success"] is False
        assert "'component'" in body["error"]

    @pytest.mark.asyncio
    async def test_invalid_json(self, wire: WireManager) -> None:
        frames: list[str] = []
        await ActionDispatcher(wire).handle_message("{nope", frames.append)
        (frame,) = map(json.loads, frames)
        assert frame["type"] == "result"
        assert frame["success"] is False
        assert frame["error"].startswith("Invalid JSON message")

    @pytest.mark.asyncio
    async def test_invalid_payload_keeps_request_id(self, wire: WireManager) -> None:
        frames: list[str] = []
        await ActionDispatcher(wire).handle_message(
            json.dumps({"id": "c1", "requestId": "r9"}), frames.append
        )
        (frame,) = map(json.loads, frames)
        assert frame["requestId"] == "r9"
        assert frame["success"] is False

    @pytest.mark.asyncio
    async def test_interim_updates_then_result(self, wire: WireManager) -> None:
        loader = wire.create("Loader", 0.05)
        frames: list[dict[str, Any]] = []

        async def send(text: str) -> None:
            frames.append(json.loads(text))

        message = {"id": loader.id, "component": "Loader", "method": "load", "requestId": "r1"}
        await ActionDispatcher(wire).handle_message(json.dumps(message), send)

        assert [frame["type"] for frame in frames] == ["update", "update", "result"]
        assert frames[0]["updates"] == {"live_loading": True}
        assert frames[1]["updates"] == {"live_loading": False}
        assert frames[-1]["success"] is True
        assert frames[-1]["updates"] == {"items": ["a", "b"]}
        assert {frame["requestId"] for frame in frames} == {"r1"}

    @pytest.mark.asyncio
    async def test_failed_action_result(self, wire: WireManager) -> None:
        counter = wire.create("Counter")
        frames: list[str] = []
        message = {"id": counter.id, "component": "Counter", "method": "fail"}
        await ActionDispatcher(wire).handle_message(json.dumps(message), frames.append)
        assert json.loads(frames[0]) == {"type": "result", "success": False, "error": "boom"}
