"""
Analytics Package

- events.py: Event kinds and the LogEntry record
- event_log.py: Append-only, day-partitioned JSON-lines event log
- alerts.py: Threshold-based alert evaluation over recent events
"""

from .alerts import Alert, AlertSeverity, count_events, evaluate_alerts
from .event_log import EventLog
from .events import EventKind, LogEntry

__all__ = [
    "Alert",
    "AlertSeverity",
    "EventKind",
    "EventLog",
    "LogEntry",
    "count_events",
    "evaluate_alerts",
]
