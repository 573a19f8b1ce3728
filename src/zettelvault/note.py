"""Core Note dataclass and Zettelkasten id helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

NOTE_EXTENSION = ".md"
ID_FORMAT = "%Y%m%d%H%M%S"

# [[Target]] or [[#20250109140000]]
_WIKILINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")
_SLUG_MAX = 50


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive *value*; aware values pass through unchanged."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def generate_id(now: datetime | None = None) -> str:
    """Return a 14-digit ``yyyyMMddHHmmss`` id for *now* (local time by default)."""
    return (now or datetime.now()).strftime(ID_FORMAT)


def slugify(title: str) -> str:
    """Filesystem-safe form of *title*; ``"untitled"`` when nothing survives."""
    slug = _SLUG_STRIP_RE.sub("", (title or "untitled").lower().replace(" ", "-"))
    slug = slug[:_SLUG_MAX].strip("-")
    return slug or "untitled"


def extract_wikilinks(text: str) -> list[str]:
    """Return every ``[[...]]`` target in *text*, in order, duplicates kept."""
    return [m.group(1) for m in _WIKILINK_RE.finditer(text)]


@dataclass
class Note:
    """A single note: identity, metadata and markdown body."""

    id: str
    title: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    body: str = ""

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at)
        self.updated_at = max(as_utc(self.updated_at), self.created_at)

    @classmethod
    def create(
        cls,
        title: str = "",
        tags: list[str] | None = None,
        body: str = "",
        note_id: str | None = None,
    ) -> "Note":
        """Build a brand-new note with an id derived from the current time."""
        now = utc_now()
        return cls(
            id=note_id or generate_id(),
            title=title,
            tags=list(tags or []),
            created_at=now,
            updated_at=now,
            body=body,
        )

    @property
    def slug(self) -> str:
        return slugify(self.title)

    @property
    def filename(self) -> str:
        return f"{self.id} {self.slug}{NOTE_EXTENSION}"

    @property
    def display_title(self) -> str:
        return self.title or "Untitled"

    @property
    def wikilinks(self) -> list[str]:
        return extract_wikilinks(self.body)

    def touch(self) -> None:
        """Refresh ``updated_at``; it never moves backwards."""
        now = utc_now()
        self.updated_at = now if now > self.updated_at else self.updated_at

    def contains_wikilink(self, target: str) -> bool:
        """True if the body links to *target* by exact title or by ``#id``."""
        lowered = target.lower()
        return any(link.lower() == lowered or link == f"#{target}" for link in self.wikilinks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "body": self.body,
            "filename": self.filename,
        }
