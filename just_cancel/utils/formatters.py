"""
Response Formatting

Utilities for assembling the ``just-cancel`` structured payload.

Provides:
- Timestamp formatting
- Savings summary generation
- Structured content assembly
- Error payload formatting
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ..analytics.events import format_timestamp, utc_now
from ..detection.classifier import SubscriptionCandidate, SubscriptionStatus

SUGGESTED_FOLLOWUPS = [
    "Which subscriptions should I cancel?",
    "How much can I save monthly?",
    "Show me my most expensive subscriptions",
    "Help me lower my monthly bills",
]


def _money(value: float) -> float:
    return round(value, 2)


def format_summary(
    candidates: list[SubscriptionCandidate],
    monthly_spend: float,
    from_file: bool = False,
) -> dict:
    """
    Build the savings summary.

    Args:
        candidates: All subscriptions in the response
        monthly_spend: Total monthly spend (computed or user supplied)
        from_file: Whether a statement file was analyzed

    Returns:
        Summary dict; savings count only subscriptions marked cancelling
    """
    counts = {status: 0 for status in SubscriptionStatus}
    for candidate in candidates:
        counts[candidate.status] += 1

    monthly_savings = sum(
        c.monthly_cost for c in candidates if c.status == SubscriptionStatus.CANCELLING
    )

    return {
        "monthly_savings": _money(monthly_savings),
        "yearly_savings": _money(monthly_savings * 12),
        "total_yearly_spending": _money(monthly_spend * 12),
        "cancelling_count": counts[SubscriptionStatus.CANCELLING],
        "investigating_count": counts[SubscriptionStatus.INVESTIGATING],
        "keeping_count": counts[SubscriptionStatus.KEEPING],
        "total_count": len(candidates),
        "monthly_spend": _money(monthly_spend),
        "yearly_spend": _money(monthly_spend * 12),
        "analysis_type": "File Analysis" if from_file else "Subscription Analysis",
    }


def total_monthly_spend(
    candidates: Iterable[SubscriptionCandidate], override: float | None = None
) -> float:
    """Sum of candidate costs, unless the caller supplied a total."""
    if override is not None:
        return float(override)
    return _money(sum(candidate.monthly_cost for candidate in candidates))


def format_structured_content(
    candidates: list[SubscriptionCandidate],
    monthly_spend: float,
    view_filter: str | None,
    input_source: str,
    file_parsing_error: str | None,
    from_file: bool = False,
    now: datetime | None = None,
) -> dict:
    """
    Assemble the tool's structured payload.

    Returns:
        Dict conforming to the tool output schema
    """
    return {
        "ready": True,
        "timestamp": format_timestamp(now or utc_now()),
        "subscriptions": [candidate.to_dict() for candidate in candidates],
        "total_monthly_spend": monthly_spend,
        "view_filter": view_filter,
        "input_source": input_source,
        "file_parsing_error": file_parsing_error,
        "summary": format_summary(candidates, monthly_spend, from_file=from_file),
        "suggested_followups": list(SUGGESTED_FOLLOWUPS),
    }


def format_error_response(error: Exception, context: dict | None = None) -> dict:
    """
    Format error payload for MCP error data and route responses.

    Args:
        error: Exception that occurred
        context: Optional context (endpoint, parameters, etc.)

    Returns:
        Formatted error dict
    """
    # Handle custom error types with to_dict() method
    if hasattr(error, "to_dict"):
        return error.to_dict()

    response: dict[str, Any] = {
        "error": type(error).__name__,
        "message": str(error),
        "timestamp": format_timestamp(utc_now()),
    }

    if context:
        response["context"] = context

    return response
