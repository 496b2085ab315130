"""Reactive counters -- components, actions and pushed updates.

Register a component type with the WireManager, render it inside a page
and run actions the way a transport would: a request/response call for
``increment`` and a push-channel message for the asynchronous ``save``.

Run:
    python app.py
"""

import asyncio
import json
from pathlib import Path

from bladewire import ActionDispatcher, Component, Environment, FileSystemLoader, Param, WireManager

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(templates_dir))


class Counter(Component):
    view = "components/counter"

    def __init__(self, start: int = 0):
        super().__init__()
        self.count = start
        self.live_saving = False

    def increment(self, step: int = 1) -> None:
        self.count += step

    async def save(self) -> None:
        self.live_saving = True
        await asyncio.sleep(0.02)
        self.live_saving = False


wire = WireManager(env, poll_interval=0.005)
wire.register("Counter", Counter, params=[Param("start", 0)])
dispatcher = ActionDispatcher(wire)

first = wire.create("Counter", 1)
page = env.render("pages/index", heading="Counters", counters=[first])


async def click(component: Component, method: str) -> dict:
    """Simulate a request/response action call."""
    payload = {"id": component.id, "component": component.name, "method": method, "state": component.get_state()}
    return await dispatcher.handle_request(payload)


async def push(component: Component, method: str) -> list[dict]:
    """Simulate a push-channel action; returns every frame sent."""
    frames: list[dict] = []
    message = {"id": component.id, "component": component.name, "method": method, "requestId": "1"}
    await dispatcher.handle_message(json.dumps(message), lambda text: frames.append(json.loads(text)))
    return frames


def main() -> None:
    print(page)
    print()
    print(asyncio.run(click(first, "increment")))
    for frame in asyncio.run(push(first, "save")):
        print(frame["type"], frame["updates"])


if __name__ == "__main__":
    main()
