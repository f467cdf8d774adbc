"""
Name lookups against the status page.

Search results include resolved, hidden and disabled records; these are
dropped before counting so that only *active* records take part in a
lookup:
  - incidents are active unless fixed or hidden
  - components are active unless disabled
  - metrics are never active
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from statushook.errors import AmbiguousMatchError, NotFoundError
from statushook.models import Component, Incident, ResourceType

_MODELS = {
    ResourceType.COMPONENTS: Component,
    ResourceType.INCIDENTS: Incident,
}


def to_records(resource: ResourceType, raw: Sequence[Mapping[str, Any]]) -> List[Any]:
    """Convert API dicts into Component / Incident objects. Metrics stay as dicts."""
    model = _MODELS.get(resource)
    if model is None:
        return list(raw)
    return [model.from_api(item) for item in raw]


def filter_active(resource: ResourceType, records: Sequence[Any]) -> List[Any]:
    """Return the active records, in their original order."""
    if resource is ResourceType.INCIDENTS:
        return [r for r in records if r.is_active]
    if resource is ResourceType.COMPONENTS:
        return [r for r in records if r.enabled]
    # Metrics have no notion of active
    return []


def expect_one(resource: ResourceType, name: str, records: Sequence[Any]) -> Any:
    """Return the only record, or raise if there are none or several."""
    if not records:
        raise NotFoundError(f"No active {resource.value} found where name={name}")
    if len(records) > 1:
        raise AmbiguousMatchError(
            f"Returned {len(records)} results for {resource.value} where name={name}",
            count=len(records),
        )
    return records[0]


async def find_all_by_name(client, resource: ResourceType, name: str) -> List[Any]:
    """All active records with exactly this name (possibly none)."""
    raw = await client.search(resource, {"name": name})
    return filter_active(resource, to_records(resource, raw))


async def find_one_by_name(client, resource: ResourceType, name: str) -> Any:
    """The single active record with this name."""
    return expect_one(resource, name, await find_all_by_name(client, resource, name))
