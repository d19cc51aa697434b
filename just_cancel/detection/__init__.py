"""
Subscription Detection Package

- patterns.py: Immutable registry of merchant detection rules
- classifier.py: Line-oriented classifier producing deduplicated candidates
"""

from .classifier import (
    SubscriptionCandidate,
    SubscriptionStatus,
    classify,
    merge_candidates,
)
from .patterns import SUBSCRIPTION_PATTERNS, SubscriptionPattern, get_pattern

__all__ = [
    "SUBSCRIPTION_PATTERNS",
    "SubscriptionCandidate",
    "SubscriptionPattern",
    "SubscriptionStatus",
    "classify",
    "get_pattern",
    "merge_candidates",
]
