"""
Incident Reconciler — the core of the event handler.

Maps one monitoring event onto the status page:
  - a HARD failure with no open incident opens one (investigating)
  - later events move that incident to investigating / watching / fixed
  - the component's status is then recomputed from the incidents that
    are still active against it

Every API call is made in sequence and any failure propagates: a lookup
that is missing or ambiguous aborts the run before anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from statushook import notifier
from statushook.lookup import (
    expect_one,
    filter_active,
    find_all_by_name,
    find_one_by_name,
    to_records,
)
from statushook.models import (
    ComponentStatus,
    HandlerSettings,
    Incident,
    IncidentStatus,
    MonitoringEvent,
    ResourceType,
)


class Action(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    NOOP = "noop"


@dataclass(frozen=True)
class ReconcileResult:
    """What a single run did to the status page."""

    action: Action
    incident: Optional[Incident] = None
    component_status: Optional[ComponentStatus] = None


class Reconciler:
    """
    Applies monitoring events to a Cachet instance.

    Attributes:
        client: A CachetClient (or anything with the same coroutine API).
        settings: Handler settings (incident name prefix, notify flag).
    """

    def __init__(self, client, settings: HandlerSettings) -> None:
        self.client = client
        self.settings = settings

    @property
    def _debug(self) -> bool:
        return self.settings.log_level.upper() == "DEBUG"

    async def handle(self, event: MonitoringEvent) -> ReconcileResult:
        notifier.print_event(event)
        incident_name = self.settings.incident_name(event.description)

        existing = await find_all_by_name(self.client, ResourceType.INCIDENTS, incident_name)
        if not existing:
            return await self._open_incident(event, incident_name)

        incident = expect_one(ResourceType.INCIDENTS, incident_name, existing)
        return await self._update_incident(event, incident)

    async def _open_incident(self, event: MonitoringEvent, incident_name: str) -> ReconcileResult:
        if event.is_ok:
            if self._debug:
                notifier.print_skipped(f"{incident_name} is OK and has no open incident")
            return ReconcileResult(Action.NOOP)

        # Only confirmed failures open incidents; SOFT states are still retrying
        if not event.is_hard:
            notifier.print_skipped(
                f"{incident_name} is {event.state.value}/SOFT, waiting for a HARD state"
            )
            return ReconcileResult(Action.SKIPPED)

        component = await find_one_by_name(
            self.client, ResourceType.COMPONENTS, event.component_name
        )
        component_status = event.impact.component_status
        incident = await self.client.create_incident(
            incident_name,
            IncidentStatus.INVESTIGATING,
            event.output,
            component.id,
            component_status,
            notify=self.settings.notify_subscribers,
            visible=True,
        )
        notifier.print_incident_created(incident, component)
        return ReconcileResult(Action.CREATED, incident, component_status)

    async def _update_incident(self, event: MonitoringEvent, incident: Incident) -> ReconcileResult:
        old_status = incident.status
        component_id = incident.component_id
        new_status = event.target_incident_status()

        if new_status == old_status:
            if self._debug:
                notifier.print_incident_unchanged(incident)
            action = Action.UNCHANGED
        else:
            incident = await self.client.update_incident(
                incident.id,
                incident.name,
                new_status,
                incident.message,
                component_id,
                event.impact.component_status,
                notify=incident.notify,
                visible=incident.visible,
            )
            notifier.print_incident_updated(incident, old_status, new_status)
            action = Action.UPDATED

        component_status = None
        if component_id:
            component_status = await self.reconcile_component(component_id)
        return ReconcileResult(action, incident, component_status)

    async def reconcile_component(self, component_id: int) -> ComponentStatus:
        """
        Recompute a component's status from its remaining active incidents.

        Cachet's incident update sets the component status blindly, without
        regard for other incidents open against the same component.
        """
        raw = await self.client.search(ResourceType.INCIDENTS, {"component_id": component_id})
        active = filter_active(ResourceType.INCIDENTS, to_records(ResourceType.INCIDENTS, raw))
        target = ComponentStatus.PARTIAL if active else ComponentStatus.OPERATIONAL

        component = await self.client.get_component_by_id(component_id)
        if component.status != target:
            await self.client.set_component_status(component_id, target)
            notifier.print_component_status(component_id, component.status, target)
        return target
