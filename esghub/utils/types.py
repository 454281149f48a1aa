from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Literal

PAGE_MARKER = "\n\nPage {number}:\n"

CATEGORY_ICONS = {
    "Uncategorized": "📊",
    "Sustainability": "🌱",
    "Carbon Footprint": "🌍",
    "Social Impact": "🤝",
    "Governance": "⚖️",
    "Environmental": "🏭",
    "Supply Chain": "🔗",
    "Renewable Energy": "⚡",
    "Diversity & Inclusion": "👥",
    "Water Conservation": "💧",
    "Waste Reduction": "♻️",
}
DEFAULT_ICON = "📄"

Role = Literal["system", "user", "assistant"]


def format_upload_date(value: str) -> str:
    """ISO timestamp -> 'Mar 5, 2025'; unparseable values are returned unchanged."""
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return value or ""
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


@dataclass(frozen=True)
class Document:
    id: str
    title: str
    file_name: str = ""
    file_path: Optional[str] = None
    category: str = "Uncategorized"
    description: str = ""
    upload_date: str = ""
    source_count: int = 0
    content: Optional[bytes] = field(default=None, repr=False, compare=False)

    @property
    def icon(self) -> str:
        return CATEGORY_ICONS.get(self.category, DEFAULT_ICON)

    @property
    def display_date(self) -> str:
        return format_upload_date(self.upload_date)

    @property
    def display_name(self) -> str:
        return self.file_name or self.title or "ESG Report"


@dataclass(frozen=True)
class ExtractedText:
    pages: List[str] = field(default_factory=list)  # text per page, page 1 first

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def text(self) -> str:
        return "".join(PAGE_MARKER.format(number=i) + page for i, page in enumerate(self.pages, start=1))


@dataclass(frozen=True)
class ChatTurn:
    role: Role
    content: str

    def as_message(self) -> dict:
        return {"role": self.role, "content": self.content}
