"""
Analytics Event Model

Every line of the event log is a LogEntry: a UTC timestamp, an event name
and a free-form payload. The event name is mapped onto EventKind so that
consumers (the alert evaluator) can switch on a closed set of kinds while
still tolerating event names introduced later:

- known names map to their own kind
- any other ``widget_*`` name maps to EventKind.WIDGET
- everything else maps to EventKind.OTHER
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    """Tag identifying the kind of an analytics event"""

    TOOL_CALL_SUCCESS = "tool_call_success"
    TOOL_CALL_EMPTY = "tool_call_empty"
    TOOL_CALL_ERROR = "tool_call_error"
    PARAMETER_PARSE_ERROR = "parameter_parse_error"
    FILE_PARSE_SUCCESS = "file_parse_success"
    FILE_PARSE_ERROR = "file_parse_error"
    WIDGET_CRASH = "widget_crash"
    SUBSCRIBE = "widget_notify_me_subscribe"
    SUBSCRIBE_ERROR = "widget_notify_me_subscribe_error"
    WIDGET = "widget"  # any other widget_* event
    OTHER = "other"  # unrecognized event names

    @classmethod
    def from_name(cls, name: str) -> "EventKind":
        """Map a raw event name onto its kind."""
        try:
            kind = cls(name)
        except ValueError:
            kind = None

        if kind is not None and kind not in (cls.WIDGET, cls.OTHER):
            return kind

        if name.startswith("widget_"):
            return cls.WIDGET
        return cls.OTHER


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (Z suffix accepted) into an aware UTC datetime."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class LogEntry:
    """One append-only analytics event"""

    timestamp: datetime
    event: str
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> EventKind:
        return EventKind.from_name(self.event)

    def to_dict(self) -> dict:
        # Event-specific keys are flattened next to timestamp/event
        entry = {"timestamp": format_timestamp(self.timestamp), "event": self.event}
        for key, value in self.payload.items():
            if key not in entry:
                entry[key] = value
        return entry

    def to_json_line(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_json_line(cls, line: str) -> "LogEntry":
        """
        Parse one log line.

        Raises:
            ValueError: If the line is not a JSON object with a timestamp and event
        """
        data = json.loads(line)
        if not isinstance(data, dict):
            raise ValueError("log line is not a JSON object")

        timestamp = data.pop("timestamp", None)
        event = data.pop("event", None)
        if not isinstance(timestamp, str) or not isinstance(event, str):
            raise ValueError("log line missing timestamp or event")

        return cls(timestamp=parse_timestamp(timestamp), event=event, payload=data)
