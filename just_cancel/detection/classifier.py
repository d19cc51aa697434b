"""
Subscription Classifier

Scans free-form statement text line by line and produces one candidate per
recognized subscription service.

Algorithm:
1. Split text on any newline convention, skip lines under 5 characters
2. Lower-case each line for matching (original kept for display)
3. Test every registered pattern (a line may match several)
4. Extract the first fixed-point price (e.g. 15.49) from the original line,
   falling back to the pattern's default cost, else 0 (unknown)
5. Aggregate by service name: repeated matches bump the count and only
   backfill the cost while it is still unknown

Multiple transactions for the same merchant collapse into one candidate:
a subscription is a merchant-level concept, not a transaction-level one.
"""

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from .patterns import SUBSCRIPTION_PATTERNS, SubscriptionPattern

# Lines shorter than this can't carry a merchant name and an amount
MIN_LINE_LENGTH = 5

LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
PRICE_RE = re.compile(r"(\d+\.\d{2})")


class SubscriptionStatus(str, Enum):
    """Classification status shown to the user"""

    CONFIRMED = "confirmed"
    CANCELLING = "cancelling"
    KEEPING = "keeping"
    INVESTIGATING = "investigating"
    NOT_SUBSCRIPTION = "not_subscription"
    UNKNOWN = "unknown"


def new_candidate_id() -> str:
    """Generate a collision-free candidate identifier."""
    return f"sub-{uuid.uuid4().hex}"


@dataclass
class SubscriptionCandidate:
    """Subscription detected in one classification run"""

    service: str
    monthly_cost: float  # 0 = unknown cost, confirmed presence
    category: str
    status: SubscriptionStatus = SubscriptionStatus.CONFIRMED
    count: int = 1
    source_line: str | None = None
    logo: str | None = None
    cancel_link: str | None = None
    id: str = field(default_factory=new_candidate_id)

    def to_dict(self) -> dict:
        """Serialize to the tool output shape."""
        result = {
            "id": self.id,
            "service": self.service,
            "monthly_cost": self.monthly_cost,
            "status": self.status.value,
            "category": self.category,
            "count": self.count,
            "notes": self.notes,
        }

        if self.logo:
            result["logo"] = self.logo

        if self.cancel_link:
            result["cancel_link"] = self.cancel_link

        if self.source_line:
            result["source_line"] = self.source_line

        return result

    @property
    def notes(self) -> str:
        """Human-readable note summarizing the evidence."""
        parts = []
        if self.count > 1:
            parts.append(f"Seen {self.count} times")
        if self.monthly_cost == 0:
            parts.append("Price not found")
        return ". ".join(parts)


def extract_price(line: str) -> float | None:
    """
    Extract the first fixed-point currency amount from a line.

    Args:
        line: Original (not lower-cased) statement line

    Returns:
        Amount as float (e.g. 15.49) or None if no amount present

    Examples:
        >>> extract_price("NETFLIX.COM 01/03 $15.49")
        15.49
        >>> extract_price("SPOTIFY P1234")
    """
    match = PRICE_RE.search(line)
    if match:
        return float(match.group(1))
    return None


def split_lines(text: str) -> list[str]:
    """Split text on \\r\\n, \\n or \\r and drop lines too short to matter."""
    return [line for line in LINE_SPLIT_RE.split(text) if len(line) >= MIN_LINE_LENGTH]


def classify(
    text: str,
    patterns: Mapping[str, SubscriptionPattern] = SUBSCRIPTION_PATTERNS,
) -> list[SubscriptionCandidate]:
    """
    Detect subscription services in statement text.

    Args:
        text: Raw statement or transaction list text
        patterns: Pattern registry keyed by service name

    Returns:
        Deduplicated candidates in first-seen order ([] if nothing matched)
    """
    if not text:
        return []

    found: dict[str, SubscriptionCandidate] = {}

    for line in split_lines(text):
        lower_line = line.lower()

        for pattern in patterns.values():
            if not pattern.matches(lower_line):
                continue

            cost = extract_price(line)
            if cost is None:
                cost = pattern.default_cost

            key = pattern.name.lower()
            existing = found.get(key)
            if existing:
                existing.count += 1
                if existing.monthly_cost == 0 and cost > 0:
                    existing.monthly_cost = cost
                continue

            found[key] = SubscriptionCandidate(
                service=pattern.name,
                monthly_cost=cost if cost > 0 else 0.0,
                category=pattern.category,
                source_line=line.strip(),
                logo=pattern.logo,
                cancel_link=pattern.cancel_url,
            )

    return list(found.values())


def merge_candidates(
    primary: list[SubscriptionCandidate], extra: list[SubscriptionCandidate]
) -> list[SubscriptionCandidate]:
    """
    Merge two classifier runs without duplicating a service.

    Candidates from ``extra`` whose service name (case-insensitive) already
    appears in ``primary`` are dropped.

    Returns:
        New list: primary candidates followed by the new ones from extra
    """
    seen = {candidate.service.lower() for candidate in primary}
    merged = list(primary)
    for candidate in extra:
        if candidate.service.lower() not in seen:
            merged.append(candidate)
            seen.add(candidate.service.lower())
    return merged
