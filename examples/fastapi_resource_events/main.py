from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from typed_event_dispatch.core import (
    DiagnosticEvent,
    Event,
    EventDispatcher,
    ListenersManager,
    Priority,
    method_binding,
)


@dataclass(eq=False)
class ResourceEvent(Event):
    resource: str = ""
    actor: str = "anonymous"


class AuditListener:
    """Records every open/close (demo only)."""

    def __init__(self) -> None:
        self.entries: list[dict[str, Any]] = []

    def on_opened(self, event: ResourceEvent) -> None:
        self.entries.append({"action": "opened", "resource": event.resource, "actor": event.actor})

    def on_closed(self, event: ResourceEvent) -> None:
        self.entries.append({"action": "closed", "resource": event.resource, "actor": event.actor})


class LockGuard:
    """Consumes OPEN events for locked resources so nothing after it runs."""

    def __init__(self) -> None:
        self.locked: set[str] = set()

    def on_opened(self, event: ResourceEvent) -> None:
        if event.resource in self.locked:
            event.consume()

    def on_closed(self, event: ResourceEvent) -> None:
        pass


class ResourceRequest(BaseModel):
    actor: str = Field(default="anonymous", description="Who performs the action.")


class ResourceResponse(BaseModel):
    resource: str
    action: str
    consumed: bool


app = FastAPI(title="typed-event-dispatch: resource events example")


OPEN_RESOURCES: set[str] = set()
DIAGNOSTICS: list[DiagnosticEvent] = []

audit = AuditListener()
guard = LockGuard()

dispatcher: EventDispatcher[ResourceEvent, Any, str] = EventDispatcher(
    routing_table={
        "OPEN": method_binding("on_opened"),
        "CLOSE": method_binding("on_closed"),
    },
    on_diagnostic=DIAGNOSTICS.append,
)
listeners = ListenersManager(dispatcher)
listeners.add_listener(guard, Priority.HIGHEST)
listeners.add_listener(audit)
listeners.add_consumer("OPEN", lambda event: OPEN_RESOURCES.add(event.resource))
listeners.add_consumer("CLOSE", lambda event: OPEN_RESOURCES.discard(event.resource))


@app.post("/resources/{name}/lock")
def lock_resource(name: str) -> dict[str, Any]:
    guard.locked.add(name)
    return {"resource": name, "locked": True}


@app.post("/resources/{name}/open", response_model=ResourceResponse)
def open_resource(name: str, req: ResourceRequest) -> ResourceResponse:
    event = ResourceEvent(resource=name, actor=req.actor)
    dispatcher.dispatch("OPEN", event)
    return ResourceResponse(resource=name, action="open", consumed=event.consumed)


@app.post("/resources/{name}/close", response_model=ResourceResponse)
def close_resource(name: str, req: ResourceRequest) -> ResourceResponse:
    if name not in OPEN_RESOURCES:
        raise HTTPException(status_code=404, detail="Resource is not open")
    event = ResourceEvent(resource=name, actor=req.actor)
    dispatcher.dispatch("CLOSE", event)
    return ResourceResponse(resource=name, action="close", consumed=event.consumed)


@app.get("/audit")
def audit_log() -> dict[str, Any]:
    return {
        "entries": audit.entries,
        "open": sorted(OPEN_RESOURCES),
        "diagnostics": [{"kind": d.kind, "key": d.payload.get("key")} for d in DIAGNOSTICS[-20:]],
    }
