"""
Shared fixtures: an in-memory stand-in for the Cachet API.

FakeCachetClient exposes the same coroutines as CachetClient and applies
writes to its own store, so that a later search sees earlier writes the
way the real service would.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from statushook.errors import TransportError
from statushook.models import (
    Component,
    ComponentStatus,
    HandlerSettings,
    Incident,
    IncidentStatus,
    ResourceType,
)


def make_component(id: int, name: str, status: int = 1, enabled: Any = True) -> Dict[str, Any]:
    return {"id": id, "name": name, "status": status, "enabled": enabled}


def make_incident(
    id: int,
    name: str,
    status: int = IncidentStatus.INVESTIGATING,
    component_id: Optional[int] = 1,
    visible: Any = 1,
    message: str = "",
) -> Dict[str, Any]:
    return {
        "id": id,
        "name": name,
        "status": int(status),
        "message": message,
        "component_id": component_id,
        "visible": visible,
    }


class FakeCachetClient:
    """
    ``fail_on`` maps a method name to the call number (1-based) that should
    raise TransportError, e.g. ``{"search": 2}`` fails the second search.
    """

    def __init__(self, components=(), incidents=(), fail_on=None) -> None:
        self.fail_on: Dict[str, int] = dict(fail_on or {})
        self.calls: Dict[str, int] = {}
        self.components: Dict[int, Dict[str, Any]] = {c["id"]: dict(c) for c in components}
        self.incidents: Dict[int, Dict[str, Any]] = {i["id"]: dict(i) for i in incidents}
        self.writes: List[tuple] = []
        self._next_id = 1000

    def _enter(self, method: str) -> None:
        self.calls[method] = self.calls.get(method, 0) + 1
        if self.fail_on.get(method) == self.calls[method]:
            raise TransportError(f"{method} failed with HTTP 503", status_code=503)

    def _store(self, resource: ResourceType) -> Dict[int, Dict[str, Any]]:
        if resource is ResourceType.COMPONENTS:
            return self.components
        if resource is ResourceType.INCIDENTS:
            return self.incidents
        return {}

    @property
    def incident_writes(self) -> List[tuple]:
        return [w for w in self.writes if w[0] in ("create_incident", "update_incident")]

    async def search(self, resource, filters):
        self._enter("search")
        return [
            dict(record)
            for record in self._store(resource).values()
            if all(str(record.get(k)) == str(v) for k, v in filters.items())
        ]

    async def get_component_by_id(self, component_id):
        self._enter("get_component_by_id")
        return Component.from_api(self.components[component_id])

    async def create_incident(
        self, name, status, message, component_id, component_status, notify=False, visible=True
    ):
        self._enter("create_incident")
        self._next_id += 1
        record = {
            "id": self._next_id,
            "name": name,
            "status": int(status),
            "message": message,
            "component_id": component_id,
            "visible": 1 if visible else 0,
            "notify": notify,
        }
        self.incidents[record["id"]] = record
        self.components[component_id]["status"] = int(component_status)
        self.writes.append(("create_incident", dict(record, component_status=component_status)))
        return Incident.from_api(record)

    async def update_incident(
        self,
        incident_id,
        name,
        status,
        message,
        component_id,
        component_status,
        notify=False,
        visible=True,
    ):
        self._enter("update_incident")
        record = self.incidents[incident_id]
        record.update(
            name=name,
            status=int(status),
            message=message,
            component_id=component_id,
            visible=1 if visible else 0,
            notify=notify,
        )
        if component_id:
            self.components[component_id]["status"] = int(component_status)
        self.writes.append(("update_incident", dict(record, component_status=component_status)))
        return Incident.from_api(record)

    async def set_component_status(self, component_id, status):
        self._enter("set_component_status")
        self.components[component_id]["status"] = int(status)
        self.writes.append(("set_component_status", {"id": component_id, "status": status}))
        return Component.from_api(self.components[component_id])


@pytest.fixture
def settings() -> HandlerSettings:
    return HandlerSettings(incident_prefix="[monitor]")


@pytest.fixture
def api_component() -> Dict[str, Any]:
    return make_component(1, "API", status=ComponentStatus.OPERATIONAL)
