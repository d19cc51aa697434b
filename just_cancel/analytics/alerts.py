"""
Alert Evaluator

Computes threshold-based operational alerts from a window of event log
entries. Evaluation is a pure function of its input: the same entries and
reference time always yield the same alerts.

Rules (independent and additive):
- tool-errors        24h  tool_call_error count > 5                  critical
- parse-errors       7d   parameter_parse_error count > 3            warning
- empty-results      7d   empty / (success + empty) > 20%            warning
- widget-crash       24h  widget_crash count > 0                     critical
- subscribe-failures 7d   >= 5 attempts and failure rate > 10%       warning
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .events import EventKind, LogEntry, utc_now

DAY = timedelta(hours=24)
WEEK = timedelta(days=7)

TOOL_ERROR_THRESHOLD = 5
PARSE_ERROR_THRESHOLD = 3
EMPTY_RATE_THRESHOLD = 0.20
SUBSCRIBE_MIN_ATTEMPTS = 5
SUBSCRIBE_FAILURE_RATE_THRESHOLD = 0.10


class AlertSeverity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Alert:
    """Derived operational alert (never persisted)"""

    id: str
    severity: AlertSeverity
    message: str

    def to_dict(self) -> dict:
        return {"id": self.id, "level": self.severity.value, "message": self.message}


def _count(entries: list[LogEntry], kinds: set[EventKind], since: datetime) -> int:
    return sum(1 for entry in entries if entry.kind in kinds and entry.timestamp >= since)


def evaluate_alerts(entries: Iterable[LogEntry], now: datetime | None = None) -> list[Alert]:
    """
    Evaluate all alert rules over a window of entries.

    Args:
        entries: Event log entries (any order)
        now: Reference time for the 24h/7d windows (defaults to current UTC time)

    Returns:
        Active alerts in rule order
    """
    entries = list(entries)
    now = now or utc_now()
    day_ago = now - DAY
    week_ago = now - WEEK

    alerts: list[Alert] = []

    # 1. Tool call failures
    tool_errors = _count(entries, {EventKind.TOOL_CALL_ERROR}, day_ago)
    if tool_errors > TOOL_ERROR_THRESHOLD:
        alerts.append(
            Alert(
                id="tool-errors",
                severity=AlertSeverity.CRITICAL,
                message=f"Tool failures in last 24h: {tool_errors} (>{TOOL_ERROR_THRESHOLD} threshold)",
            )
        )

    # 2. Parameter parsing errors
    parse_errors = _count(entries, {EventKind.PARAMETER_PARSE_ERROR}, week_ago)
    if parse_errors > PARSE_ERROR_THRESHOLD:
        alerts.append(
            Alert(
                id="parse-errors",
                severity=AlertSeverity.WARNING,
                message=f"Parameter parse errors in last 7d: {parse_errors} (>{PARSE_ERROR_THRESHOLD} threshold)",
            )
        )

    # 3. Empty result rate
    successes = _count(entries, {EventKind.TOOL_CALL_SUCCESS}, week_ago)
    empties = _count(entries, {EventKind.TOOL_CALL_EMPTY}, week_ago)
    total_calls = successes + empties
    if total_calls > 0:
        empty_rate = empties / total_calls
        if empty_rate > EMPTY_RATE_THRESHOLD:
            alerts.append(
                Alert(
                    id="empty-results",
                    severity=AlertSeverity.WARNING,
                    message=f"Empty result rate {empty_rate * 100:.1f}% (>{EMPTY_RATE_THRESHOLD:.0%} threshold)",
                )
            )

    # 4. Widget crashes
    crashes = _count(entries, {EventKind.WIDGET_CRASH}, day_ago)
    if crashes > 0:
        alerts.append(
            Alert(
                id="widget-crash",
                severity=AlertSeverity.CRITICAL,
                message=f"Widget crashes in last 24h: {crashes} (Fix immediately)",
            )
        )

    # 5. Mailing-list subscribe failures
    attempts = _count(entries, {EventKind.SUBSCRIBE, EventKind.SUBSCRIBE_ERROR}, week_ago)
    failures = _count(entries, {EventKind.SUBSCRIBE_ERROR}, week_ago)
    failure_rate = failures / attempts if attempts else 0.0
    if attempts >= SUBSCRIBE_MIN_ATTEMPTS and failure_rate > SUBSCRIBE_FAILURE_RATE_THRESHOLD:
        alerts.append(
            Alert(
                id="subscribe-failures",
                severity=AlertSeverity.WARNING,
                message=f"Subscribe failure rate {failure_rate * 100:.1f}% over last 7d ({failures}/{attempts})",
            )
        )

    return alerts


def count_events(entries: Iterable[LogEntry]) -> dict[str, int]:
    """Count entries per event name, most frequent first."""
    counts: dict[str, int] = {}
    for entry in entries:
        counts[entry.event] = counts.get(entry.event, 0) + 1
    return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))
