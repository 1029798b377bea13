"""Resource link types attached to scenario nodes."""

from __future__ import annotations

from enum import Enum


class ResourceType(str, Enum):
    LINK = "link"
    DOWNLOAD = "download"
    VIDEO = "video"

    @property
    def icon(self) -> str:
        return RESOURCE_ICONS[self.value]

    @property
    def label(self) -> str:
        return RESOURCE_LABELS[self.value]


RESOURCE_ICONS: dict[str, str] = {
    "link": "🔗",
    "download": "📥",
    "video": "▶️",
}

RESOURCE_LABELS: dict[str, str] = {
    "link": "Open",
    "download": "Download",
    "video": "Watch",
}
