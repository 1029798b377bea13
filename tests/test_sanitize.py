"""Tests for sanitize.py and resources.py."""

from __future__ import annotations

import pytest

from choicemap.resources import RESOURCE_ICONS, RESOURCE_LABELS, ResourceType
from choicemap.sanitize import escape_html, sanitize_node_id, sanitize_url

# ─── sanitize_url ─────────────────────────────────────────────────────────────


class TestSanitizeUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "http://example.com",
            "https://example.com/a?b=c",
            "mailto:someone@example.com",
            "tel:+123456",
            "/docs/intro",
            "./local.pdf",
            "../up.html",
            "plain-page.html",
        ],
    )
    def test_allowed(self, url):
        assert sanitize_url(url) == url

    @pytest.mark.parametrize(
        "url",
        [
            "javascript:alert(1)",
            "JavaScript:alert(1)",
            "data:text/html,<b>x</b>",
            "data:image/png;base64,AAAA",
            "ftp://example.com",
            "vbscript:x",
        ],
    )
    def test_blocked(self, url):
        assert sanitize_url(url) == ""

    def test_strips_whitespace(self):
        assert sanitize_url("  https://example.com  ") == "https://example.com"

    @pytest.mark.parametrize("url", [None, "", 42, ["http://x"]])
    def test_non_strings(self, url):
        assert sanitize_url(url) == ""


# ─── sanitize_node_id ─────────────────────────────────────────────────────────


class TestSanitizeNodeId:
    def test_replaces_unsafe_characters(self):
        assert sanitize_node_id(" intro scene!") == "intro_scene_"

    def test_keeps_safe_characters(self):
        assert sanitize_node_id("node-1_A") == "node-1_A"

    @pytest.mark.parametrize("node_id", [None, "", 7])
    def test_non_strings(self, node_id):
        assert sanitize_node_id(node_id) == ""


# ─── escape_html ──────────────────────────────────────────────────────────────


class TestEscapeHtml:
    def test_escapes_all_specials(self):
        assert escape_html("<a href=\"x\">Tom & Jerry's</a>") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;"
        )

    def test_plain_text_unchanged(self):
        assert escape_html("hello") == "hello"

    @pytest.mark.parametrize("text", [None, "", 3])
    def test_non_strings(self, text):
        assert escape_html(text) == ""


# ─── Resources ────────────────────────────────────────────────────────────────


class TestResourceType:
    def test_icons_and_labels(self):
        assert ResourceType.LINK.icon == "🔗"
        assert ResourceType.DOWNLOAD.label == "Download"
        assert ResourceType("video").label == "Watch"

    def test_maps_cover_every_type(self):
        assert set(RESOURCE_ICONS) == {t.value for t in ResourceType}
        assert set(RESOURCE_LABELS) == {t.value for t in ResourceType}
