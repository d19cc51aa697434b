"""Catalog tests: widget loading and descriptors."""

import pytest

from just_cancel.catalog import Catalog, read_widget_html, widget_meta


def test_reads_direct_widget_file(assets_dir):
    """Test loading just-cancel.html."""
    assert "just-cancel-root" in read_widget_html(assets_dir)


def test_falls_back_to_latest_hashed_build(tmp_path):
    """Test fallback to the last just-cancel-*.html."""
    (tmp_path / "just-cancel-aaaa.html").write_text("old", encoding="utf-8")
    (tmp_path / "just-cancel-bbbb.html").write_text("new", encoding="utf-8")

    assert read_widget_html(tmp_path) == "new"


def test_missing_assets_raise(tmp_path):
    """Test clear errors when the widget was never built."""
    with pytest.raises(FileNotFoundError):
        read_widget_html(tmp_path / "nope")

    with pytest.raises(FileNotFoundError):
        read_widget_html(tmp_path)


def test_template_uri_carries_version(catalog):
    """Test cache-busting version in the URI."""
    widget = catalog.widget_for_tool("just-cancel")
    assert widget.template_uri == "ui://widget/just-cancel.html?v=test123"
    assert catalog.widget_for_uri(widget.template_uri) is widget
    assert catalog.widget_for_tool("other") is None


def test_widget_meta(catalog):
    """Test presentation metadata."""
    meta = widget_meta(catalog.widgets[0])

    assert meta["openai/outputTemplate"] == "ui://widget/just-cancel.html?v=test123"
    assert meta["openai/widgetAccessible"] is True
    assert "subscriptions" in meta["openai/widgetKeywords"]
    assert all({"user", "assistant"} <= set(pair) for pair in meta["openai/sampleConversations"])
    assert meta["openai/starterPrompts"]


def test_output_schema_status_enum(catalog):
    """Test that every classification status is declared."""
    status = catalog.tools()[0]["outputSchema"]["properties"]["subscriptions"]["items"]["properties"]["status"]
    assert set(status["enum"]) == {
        "confirmed",
        "cancelling",
        "keeping",
        "investigating",
        "not_subscription",
        "unknown",
    }


def test_catalog_from_assets_with_multiple_lookups(assets_dir):
    """Test that a second catalog build gives identical descriptors."""
    assert Catalog.from_assets(assets_dir, "v1").resources() == Catalog.from_assets(assets_dir, "v1").resources()
