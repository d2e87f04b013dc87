from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class Announcement:
    announcement_id: str
    text: str
    date: str  # ISO-8601 timestamp; display date and sort key
    author_id: str
    pinned: bool = False

    def to_document(self) -> dict:
        return {
            "text": self.text,
            "date": self.date,
            "authorId": self.author_id,
            "pinned": self.pinned,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Announcement":
        return cls(
            announcement_id=doc_id,
            text=str(data.get("text") or ""),
            date=str(data.get("date") or ""),
            author_id=str(data.get("authorId") or ""),
            pinned=bool(data.get("pinned", False)),
        )

    def edited(self, text: str, date: str) -> "Announcement":
        return replace(self, text=text, date=date)

    def to_dict(self) -> dict:
        return {
            "id": self.announcement_id,
            "text": self.text,
            "date": self.date,
            "author_id": self.author_id,
            "pinned": self.pinned,
        }


def sort_for_display(items) -> list[Announcement]:
    """Pinned first, then unpinned; each group newest first."""
    ordered = sorted(items, key=lambda a: (a.date, a.announcement_id), reverse=True)
    return [a for a in ordered if a.pinned] + [a for a in ordered if not a.pinned]
