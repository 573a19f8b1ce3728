"""Wikilink resolution, rewriting, and the link panels built on them.

A wikilink target resolves to zero, one or many notes:

- ``#<id>`` matches only the note with that id.
- Anything else matches every note whose title contains the target,
  case-insensitively.  Several matches are a normal outcome that callers
  present as a choice.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from zettelvault.note import Note

if TYPE_CHECKING:
    from zettelvault.index import NoteIndex


def resolves_to(target: str, note: Note) -> bool:
    """True if the wikilink *target* resolves to *note*."""
    if target.startswith("#"):
        return note.id == target[1:]
    return target.lower() in note.title.lower()


def resolve_wikilink(target: str, notes: Iterable[Note]) -> list[Note]:
    """Return the notes *target* resolves to, in the order of *notes*."""
    if target.startswith("#"):
        note_id = target[1:]
        for note in notes:
            if note.id == note_id:
                return [note]
        return []
    lowered = target.lower()
    return [note for note in notes if lowered in note.title.lower()]


def rewrite_wikilinks(body: str, old_title: str, new_title: str) -> str:
    """Replace every ``[[old_title]]`` (any case) in *body* with ``[[new_title]]``."""
    if not old_title:
        return body
    pattern = re.compile(r"\[\[" + re.escape(old_title) + r"\]\]", re.IGNORECASE)
    replacement = f"[[{new_title}]]"
    return pattern.sub(lambda _m: replacement, body)


# ---------------------------------------------------------------------------
# Panels
# ---------------------------------------------------------------------------


@dataclass
class OutgoingLink:
    target: str
    matches: list[Note] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.matches:
            return "missing"
        return "resolved" if len(self.matches) == 1 else "ambiguous"


def backlinks_panel(index: "NoteIndex", note: Note) -> list[dict[str, str]]:
    """Return ``{id, title}`` dicts for notes that link to *note*."""
    return [{"id": n.id, "title": n.display_title} for n in index.get_backlinks(note)]


def outgoing_links(index: "NoteIndex", note: Note) -> list[OutgoingLink]:
    """Resolve each distinct wikilink in *note*, in order of first appearance."""
    seen: set[str] = set()
    result: list[OutgoingLink] = []
    for target in note.wikilinks:
        if target in seen:
            continue
        seen.add(target)
        result.append(OutgoingLink(target, index.find_notes(target)))
    return result
