"""
statushook — Cachet status page event handler.

Invoked by a monitoring system's event handler on every service state
change; opens, updates and resolves Cachet incidents and keeps the
affected component's status in line with them.
"""

__version__ = "1.0.0"
