"""
Console Notifier — structured output for event handler runs.

Each line is timestamped (UTC) and coloured by outcome, so the handler's
log file (or the monitoring system's event handler log) reads as a
history of what was done to the status page.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone

from statushook.models import (
    Component,
    ComponentStatus,
    Incident,
    IncidentStatus,
    MonitoringEvent,
)

# ANSI color codes for terminal styling
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_CYAN = "\033[96m"
_GRAY = "\033[90m"


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _incident_color(status: IncidentStatus) -> str:
    if status is IncidentStatus.FIXED:
        return _GREEN
    elif status is IncidentStatus.WATCHING:
        return _CYAN
    elif status is IncidentStatus.IDENTIFIED:
        return _YELLOW
    return _RED


def _component_color(status: ComponentStatus) -> str:
    if status is ComponentStatus.OPERATIONAL:
        return _GREEN
    elif status is ComponentStatus.PERFORMANCE:
        return _YELLOW
    return _RED


def _label(status) -> str:
    return status.name.lower()


def print_event(event: MonitoringEvent) -> None:
    """Print the event the handler was invoked with."""
    print(
        f"{_GRAY}[{_now()}]{_RESET} {_BOLD}{_BLUE}EVENT{_RESET} "
        f"{event.description} -> {event.component_name}: "
        f"{event.state.value}/{event.state_type.value} "
        f"{_DIM}({event.output}){_RESET}"
    )


def print_incident_created(incident: Incident, component: Component) -> None:
    color = _incident_color(incident.status)
    print(
        f"{_GRAY}[{_now()}]{_RESET} {_BOLD}{color}INCIDENT CREATED{_RESET} "
        f"#{incident.id} {incident.name} "
        f"[{_label(incident.status)}] on {component.name}"
    )


def print_incident_updated(
    incident: Incident,
    old_status: IncidentStatus,
    new_status: IncidentStatus,
) -> None:
    color = _incident_color(new_status)
    print(
        f"{_GRAY}[{_now()}]{_RESET} {_BOLD}{color}INCIDENT UPDATE{_RESET} "
        f"#{incident.id} {incident.name}: "
        f"{_label(old_status)} -> {color}{_label(new_status)}{_RESET}"
    )


def print_incident_unchanged(incident: Incident) -> None:
    """Debug-level line for an update that had nothing to change."""
    print(
        f"{_DIM}[{_now()}] #{incident.id} {incident.name} "
        f"already {_label(incident.status)}{_RESET}"
    )


def print_component_status(
    component_id: int,
    old_status: ComponentStatus,
    new_status: ComponentStatus,
) -> None:
    color = _component_color(new_status)
    print(
        f"{_GRAY}[{_now()}]{_RESET} {_BOLD}{color}COMPONENT{_RESET} "
        f"#{component_id}: {_label(old_status)} -> {color}{_label(new_status)}{_RESET}"
    )


def print_skipped(reason: str) -> None:
    print(f"{_DIM}[{_now()}] Skipped: {reason}{_RESET}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    print(
        f"{_GRAY}[{_now()}]{_RESET} {_RED}ERROR{_RESET} {message}",
        file=sys.stderr,
    )
