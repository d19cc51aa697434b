"""Subscription classifier and pattern registry tests.

Tests the detection engine including:
- Line splitting and short-line filtering
- Price extraction and default costs
- Deduplication by service name
- Merging of two classification runs
"""

import pytest

from just_cancel.detection import (
    SUBSCRIPTION_PATTERNS,
    SubscriptionCandidate,
    SubscriptionStatus,
    classify,
    get_pattern,
    merge_candidates,
)
from just_cancel.detection.classifier import extract_price, split_lines


def test_empty_text_returns_no_candidates():
    """Test that empty input is not an error."""
    assert classify("") == []


def test_unrecognized_lines_return_no_candidates():
    """Test that generic statement lines produce no false positives."""
    text = "GROCERY STORE 42.10\nGAS STATION 38.00\nATM WITHDRAWAL 100.00\nabc"
    assert classify(text) == []


def test_short_lines_are_ignored():
    """Test that lines under 5 characters are never matched."""
    assert split_lines("hulu\nHULU 7.99") == ["HULU 7.99"]
    assert classify("hulu") == []


def test_single_match_extracts_exact_price():
    """Test that a $15.49 line yields exactly 15.49."""
    candidates = classify("03/01 NETFLIX.COM $15.49")

    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.service == "Netflix"
    assert candidate.monthly_cost == 15.49
    assert candidate.category == "Streaming"
    assert candidate.status == SubscriptionStatus.CONFIRMED
    assert candidate.count == 1
    assert candidate.source_line == "03/01 NETFLIX.COM $15.49"


def test_duplicate_service_lines_collapse_into_one_candidate():
    """Test that two Netflix lines give one candidate seen twice."""
    text = "NETFLIX.COM 15.49\r\nnetflix.com 15.49"
    candidates = classify(text)

    assert len(candidates) == 1
    assert candidates[0].count == 2
    assert candidates[0].monthly_cost == 15.49


def test_default_cost_used_when_no_price():
    """Test fallback to the well-known default cost."""
    candidates = classify("SPOTIFY P2B4C1D")
    assert candidates[0].monthly_cost == 11.99


def test_unknown_cost_is_zero_and_backfilled():
    """Test that a later priced line fills in an unknown cost."""
    text = "HULU SUBSCRIPTION\nHULU 7.99\nHULU 9.99"
    candidates = classify(text)

    assert len(candidates) == 1
    assert candidates[0].count == 3
    assert candidates[0].monthly_cost == 7.99


def test_known_cost_is_not_overwritten():
    """Test that only an unknown (zero) cost gets backfilled."""
    candidates = classify("NETFLIX 15.49\nNETFLIX 22.99")
    assert candidates[0].monthly_cost == 15.49


def test_line_matching_two_patterns_yields_two_candidates():
    """Test that different services on one line are not collapsed."""
    candidates = classify("NETFLIX AND SPOTIFY BUNDLE 25.00")

    assert {c.service for c in candidates} == {"Netflix", "Spotify"}
    assert all(c.monthly_cost == 25.00 for c in candidates)


def test_mixed_newline_conventions():
    """Test splitting on \\r\\n, \\n and \\r."""
    text = "NETFLIX 15.49\rSPOTIFY 11.99\r\nCHATGPT PLUS 20.00\nAUDIBLE 14.95"
    services = [c.service for c in classify(text)]
    assert services == ["Netflix", "Spotify", "ChatGPT", "Audible"]


def test_candidate_ids_are_unique():
    """Test that every candidate gets its own id."""
    candidates = classify("NETFLIX 15.49\nSPOTIFY 11.99\nHULU 7.99")
    ids = [c.id for c in candidates]
    assert len(set(ids)) == len(ids)
    assert all(i.startswith("sub-") for i in ids)


@pytest.mark.parametrize(
    "line,expected",
    [
        ("NETFLIX $15.49", 15.49),
        ("Total 1234.56 due 9.99", 1234.56),
        ("SPOTIFY 11.9", None),
        ("no price here", None),
    ],
)
def test_extract_price(line, expected):
    """Test fixed-point price extraction."""
    assert extract_price(line) == expected


def test_candidate_to_dict_notes():
    """Test serialization and the evidence notes."""
    candidate = SubscriptionCandidate(service="Hulu", monthly_cost=0.0, category="Streaming", count=2)
    data = candidate.to_dict()

    assert data["status"] == "confirmed"
    assert data["notes"] == "Seen 2 times. Price not found"
    assert "cancel_link" not in data


def test_merge_drops_services_already_present():
    """Test case-insensitive merge of two runs."""
    from_file = classify("NETFLIX 15.49")
    from_text = classify("netflix 17.99\nSPOTIFY 11.99")

    merged = merge_candidates(from_file, from_text)

    assert [c.service for c in merged] == ["Netflix", "Spotify"]
    assert merged[0].monthly_cost == 15.49


def test_registry_lookup_is_case_insensitive():
    """Test pattern lookup by name."""
    assert get_pattern("netflix") is SUBSCRIPTION_PATTERNS["Netflix"]
    assert get_pattern("not-a-service") is None


def test_registry_is_read_only():
    """Test that the pattern registry cannot be mutated."""
    with pytest.raises(TypeError):
        SUBSCRIPTION_PATTERNS["Fake"] = SUBSCRIPTION_PATTERNS["Netflix"]
