"""
Data models for the status-page event handler.

Defines the monitoring event handed over by the monitoring system, the
Cachet records the handler reads back, and the connection / handler
settings. Status values use the integers Cachet puts on the wire.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional

from statushook.errors import ArgumentError, ConfigurationError, TransportError


class ResourceType(str, Enum):
    """API collections the handler can query."""

    COMPONENTS = "components"
    INCIDENTS = "incidents"
    METRICS = "metrics"


class ComponentStatus(IntEnum):
    UNKNOWN = 0
    OPERATIONAL = 1
    PERFORMANCE = 2
    PARTIAL = 3
    MAJOR = 4


class IncidentStatus(IntEnum):
    SCHEDULED = 0
    INVESTIGATING = 1
    IDENTIFIED = 2
    WATCHING = 3
    FIXED = 4


class Impact(str, Enum):
    """Impact an outage has on its component, as configured per service."""

    OPERATIONAL = "operational"
    PERFORMANCE = "performance"
    PARTIAL = "partial"
    MAJOR = "major"

    @property
    def component_status(self) -> ComponentStatus:
        return ComponentStatus[self.name]


class ServiceState(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    UNKNOWN = "UNKNOWN"
    CRITICAL = "CRITICAL"


class StateType(str, Enum):
    SOFT = "SOFT"
    HARD = "HARD"


# Raised while decoding a record that is not shaped as expected
_DECODE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def _truthy(value: Any) -> bool:
    """Cachet encodes flags as true, 1, "1" or "true" depending on version."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _parse_enum(enum_cls, raw: str, label: str):
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ArgumentError(
            f"Invalid {label}: {raw!r} (expected one of: {allowed})"
        ) from None


@dataclass(frozen=True)
class MonitoringEvent:
    """
    One service event, as passed in by the monitoring system.

    Attributes:
        component_name: Name of the status-page component the service feeds.
        impact: Component status to use while the service is failing.
        description: Service description; the incident is named after it.
        state: Service state (OK, WARNING, UNKNOWN, CRITICAL).
        state_type: HARD once the state is confirmed, SOFT while retrying.
        output: First line of the check output, used as incident message.
    """

    component_name: str
    impact: Impact
    description: str
    state: ServiceState
    state_type: StateType
    output: str

    @classmethod
    def parse(
        cls,
        component_name: str,
        impact: str,
        description: str,
        state: str,
        state_type: str,
        output: str,
    ) -> MonitoringEvent:
        """Build an event from raw command line strings."""
        return cls(
            component_name=component_name,
            impact=_parse_enum(Impact, impact.strip().lower(), "component impact"),
            description=description,
            state=_parse_enum(ServiceState, state.strip().upper(), "service state"),
            state_type=_parse_enum(StateType, state_type.strip().upper(), "service state type"),
            output=output,
        )

    @property
    def is_ok(self) -> bool:
        return self.state is ServiceState.OK

    @property
    def is_hard(self) -> bool:
        return self.state_type is StateType.HARD

    def target_incident_status(self) -> IncidentStatus:
        """Status an existing incident should move to for this event."""
        if self.is_ok:
            return IncidentStatus.FIXED if self.is_hard else IncidentStatus.WATCHING
        return IncidentStatus.INVESTIGATING


@dataclass(frozen=True)
class Component:
    """A status-page component snapshot."""

    id: int
    name: str
    status: ComponentStatus
    enabled: bool = True

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> Component:
        try:
            return cls(
                id=int(record["id"]),
                name=record.get("name", ""),
                status=ComponentStatus(int(record.get("status", ComponentStatus.OPERATIONAL))),
                enabled=_truthy(record.get("enabled", True)),
            )
        except _DECODE_ERRORS as exc:
            raise TransportError(f"Malformed component record {record!r}: {exc}") from exc


@dataclass(frozen=True)
class Incident:
    """
    A status-page incident snapshot.

    ``notify`` is not always echoed back by the API; it defaults to False.
    """

    id: int
    name: str
    status: IncidentStatus
    message: str = ""
    component_id: Optional[int] = None
    visible: bool = True
    notify: bool = False

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> Incident:
        try:
            component_id = record.get("component_id")
            return cls(
                id=int(record["id"]),
                name=record.get("name", ""),
                status=IncidentStatus(int(record["status"])),
                message=record.get("message") or "",
                component_id=int(component_id) if component_id else None,
                visible=_truthy(record.get("visible", True)),
                notify=_truthy(record.get("notify", False)),
            )
        except _DECODE_ERRORS as exc:
            raise TransportError(f"Malformed incident record {record!r}: {exc}") from exc

    @property
    def is_active(self) -> bool:
        return self.status is not IncidentStatus.FIXED and self.visible


@dataclass
class ClientConfig:
    """Connection settings for one Cachet instance."""

    base_url: str
    username: str = ""
    password: str = ""
    api_token: str = ""

    @property
    def api_url(self) -> str:
        return self.base_url.rstrip("/") + "/api/v1/"

    def check(self, auth_required: bool = False) -> None:
        """Raise ConfigurationError if a call cannot be made with these settings."""
        if not self.base_url:
            raise ConfigurationError("The Cachet base URL is not set.")
        if auth_required and not self.api_token and not (self.username and self.password):
            raise ConfigurationError(
                "No Cachet credentials: set api_token, or both username and password."
            )

    def auth_headers(self) -> Dict[str, str]:
        """Authentication headers; the API token takes precedence over basic auth."""
        if self.api_token:
            return {"X-Cachet-Token": self.api_token}
        if self.username and self.password:
            pair = f"{self.username}:{self.password}".encode()
            return {"Authorization": "Basic " + base64.b64encode(pair).decode()}
        return {}


@dataclass
class HandlerSettings:
    """Global handler settings."""

    log_level: str = "INFO"
    incident_prefix: str = "[monitor]"
    timeout: float = 15.0
    notify_subscribers: bool = False

    def incident_name(self, description: str) -> str:
        return f"{self.incident_prefix} {description}"
