"""
Client Context

Helpers that read the request ``_meta`` sent by the assistant client:
device category from the user agent, location and locale, and a spend
figure inferred from the user's free-text message when the tool was called
without one.
"""

import re
from dataclasses import dataclass
from typing import Any

# Free-text meta fields, in order of preference
USER_TEXT_KEYS = (
    "openai/subject",
    "openai/userPrompt",
    "openai/userText",
    "openai/lastUserMessage",
    "openai/inputText",
    "openai/requestText",
)

SPEND_RE = re.compile(r"\$(\d+)")


def classify_device(user_agent: str | None) -> str:
    """
    Map a user agent string onto a coarse device category.

    Returns:
        iOS, Android, macOS, Windows, Linux, ChromeOS, Other, or Unknown
        when no user agent was sent
    """
    if not user_agent:
        return "Unknown"

    ua = user_agent.lower()
    if "iphone" in ua or "ipad" in ua or "ipod" in ua:
        return "iOS"
    if "android" in ua:
        return "Android"
    if "mac os" in ua or "macintosh" in ua:
        return "macOS"
    if "windows" in ua:
        return "Windows"
    if "cros" in ua:
        return "ChromeOS"
    if "linux" in ua:
        return "Linux"
    return "Other"


def user_text(meta: dict[str, Any]) -> str:
    """First non-blank free-text field in meta, or ''."""
    for key in USER_TEXT_KEYS:
        value = meta.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def infer_total_spend(meta: dict[str, Any]) -> int | None:
    """Whole-dollar amount from the first ``$<digits>`` in the user's message."""
    match = SPEND_RE.search(user_text(meta))
    if match:
        return int(match.group(1))
    return None


@dataclass
class ClientContext:
    """Client details captured for analytics"""

    user_agent: str | None
    device: str
    location: dict | None
    locale: str | None

    @classmethod
    def from_meta(cls, meta: dict[str, Any] | None) -> "ClientContext":
        meta = meta or {}
        user_agent = meta.get("openai/userAgent")
        user_agent = user_agent if isinstance(user_agent, str) else None

        location = meta.get("openai/userLocation")
        if isinstance(location, dict):
            location = {
                key: location.get(key) for key in ("city", "region", "country", "timezone")
            }
        else:
            location = None

        locale = meta.get("openai/locale")

        return cls(
            user_agent=user_agent,
            device=classify_device(user_agent),
            location=location,
            locale=locale if isinstance(locale, str) else None,
        )
