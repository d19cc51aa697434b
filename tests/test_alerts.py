"""Alert evaluator tests.

Each rule is checked at and just past its threshold.
"""

from datetime import datetime, timedelta, timezone

from just_cancel.analytics import AlertSeverity, LogEntry, count_events, evaluate_alerts

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_entries(event: str, count: int, age: timedelta = timedelta(hours=1)) -> list[LogEntry]:
    return [LogEntry(timestamp=NOW - age, event=event, payload={}) for _ in range(count)]


def alert_ids(entries) -> list[str]:
    return [alert.id for alert in evaluate_alerts(entries, now=NOW)]


def test_no_entries_no_alerts():
    """Test empty window."""
    assert evaluate_alerts([], now=NOW) == []


def test_tool_errors_threshold_is_exclusive():
    """Test 5 errors is fine, 6 is critical, back to 5 clears it."""
    assert "tool-errors" not in alert_ids(make_entries("tool_call_error", 5))

    alerts = evaluate_alerts(make_entries("tool_call_error", 6), now=NOW)
    assert [a.id for a in alerts] == ["tool-errors"]
    assert alerts[0].severity == AlertSeverity.CRITICAL

    assert "tool-errors" not in alert_ids(make_entries("tool_call_error", 5))


def test_tool_errors_outside_24h_ignored():
    """Test the 24h window."""
    entries = make_entries("tool_call_error", 10, age=timedelta(hours=25))
    assert "tool-errors" not in alert_ids(entries)


def test_window_boundary_is_inclusive():
    """Test that an entry exactly 24h old still counts."""
    entries = make_entries("widget_crash", 1, age=timedelta(hours=24))
    assert "widget-crash" in alert_ids(entries)


def test_parse_errors_warning():
    """Test 3 parse errors is fine, 4 warns."""
    assert "parse-errors" not in alert_ids(make_entries("parameter_parse_error", 3, timedelta(days=3)))

    alerts = evaluate_alerts(make_entries("parameter_parse_error", 4, timedelta(days=3)), now=NOW)
    assert alerts[0].id == "parse-errors"
    assert alerts[0].severity == AlertSeverity.WARNING


def test_empty_rate():
    """Test the empty-result rate rule."""
    # 1 / 5 = 20%: not above threshold
    entries = make_entries("tool_call_success", 4) + make_entries("tool_call_empty", 1)
    assert "empty-results" not in alert_ids(entries)

    # 2 / 6 > 20%
    entries = make_entries("tool_call_success", 4) + make_entries("tool_call_empty", 2)
    assert "empty-results" in alert_ids(entries)


def test_empty_rate_needs_calls():
    """Test that the rate is not evaluated without calls."""
    assert "empty-results" not in alert_ids(make_entries("tool_call_error", 1))


def test_widget_crash_is_critical():
    """Test that any crash in 24h alerts."""
    alerts = evaluate_alerts(make_entries("widget_crash", 1), now=NOW)
    assert alerts[0].id == "widget-crash"
    assert alerts[0].severity == AlertSeverity.CRITICAL


def test_subscribe_failures_need_minimum_attempts():
    """Test the >= 5 attempt gate."""
    # 4 attempts, all failed
    entries = make_entries("widget_notify_me_subscribe_error", 4)
    assert "subscribe-failures" not in alert_ids(entries)

    # 5 attempts, 1 failed (20%)
    entries = make_entries("widget_notify_me_subscribe", 4) + make_entries(
        "widget_notify_me_subscribe_error", 1
    )
    assert "subscribe-failures" in alert_ids(entries)


def test_subscribe_failure_rate_is_exclusive():
    """Test that exactly 10% does not alert."""
    entries = make_entries("widget_notify_me_subscribe", 9) + make_entries(
        "widget_notify_me_subscribe_error", 1
    )
    assert "subscribe-failures" not in alert_ids(entries)


def test_rules_are_additive():
    """Test that several rules fire together in rule order."""
    entries = (
        make_entries("tool_call_error", 6)
        + make_entries("parameter_parse_error", 4)
        + make_entries("tool_call_empty", 1)
        + make_entries("widget_crash", 1)
    )
    assert alert_ids(entries) == ["tool-errors", "parse-errors", "empty-results", "widget-crash"]


def test_alert_to_dict():
    """Test alert serialization."""
    alert = evaluate_alerts(make_entries("widget_crash", 2), now=NOW)[0]
    assert alert.to_dict() == {
        "id": "widget-crash",
        "level": "critical",
        "message": "Widget crashes in last 24h: 2 (Fix immediately)",
    }


def test_count_events_most_frequent_first():
    """Test event counting."""
    entries = make_entries("tool_call_success", 3) + make_entries("widget_click", 1)
    assert list(count_events(entries).items()) == [("tool_call_success", 3), ("widget_click", 1)]
