"""Input sanitization for values that end up in markup."""

from __future__ import annotations

import re
from typing import Any

_SAFE_URL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "/", "./", "../")
_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_HTML_SPECIAL = re.compile("[&<>\"']")


def sanitize_url(url: Any) -> str:
    """Return ``url`` stripped, or ``""`` when its scheme is not allowed.

    Only web, mail and phone links plus relative paths pass through;
    ``javascript:`` and ``data:`` URLs never do.
    """
    if not url or not isinstance(url, str):
        return ""

    trimmed = url.strip()
    lower = trimmed.lower()
    if lower.startswith("javascript:"):
        return ""
    if lower.startswith("data:") and not lower.startswith("data:image/"):
        return ""

    if trimmed.startswith(_SAFE_URL_PREFIXES) or ":" not in trimmed:
        return trimmed
    return ""


def sanitize_node_id(node_id: Any) -> str:
    """Strip ``node_id`` and replace anything outside ``[A-Za-z0-9_-]`` with ``_``."""
    if not node_id or not isinstance(node_id, str):
        return ""
    return _UNSAFE_ID_CHARS.sub("_", node_id.strip())


def escape_html(text: Any) -> str:
    """Escape ``& < > " '`` for safe inclusion in HTML/SVG text and attributes."""
    if not text or not isinstance(text, str):
        return ""
    return _HTML_SPECIAL.sub(lambda m: _HTML_ESCAPES[m.group(0)], text)
