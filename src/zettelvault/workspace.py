"""Workspace: the caller-side pairing of a NoteStore with a NoteIndex.

Every operation writes through the store first and touches the index only
after the store call succeeded.  There is no rollback: if a later step
fails, :meth:`Workspace.open` re-syncs the index from disk.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from zettelvault.config import VaultConfig
from zettelvault.errors import BatchResult
from zettelvault.index import NoteIndex
from zettelvault.note import Note
from zettelvault.store import NoteStore

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(self, store: NoteStore, index: NoteIndex | None = None) -> None:
        self.store = store
        self.index = index if index is not None else NoteIndex(store)

    @classmethod
    def from_config(cls, config: VaultConfig, **index_kwargs: Any) -> "Workspace":
        store = NoteStore.from_config(config)
        index_kwargs.setdefault("debounce_delay", config.debounce_delay)
        return cls(store, NoteIndex(store, **index_kwargs))

    def open(self) -> BatchResult[Note]:
        """Load (or reload) every note from disk."""
        return self.index.load_notes()

    def close(self) -> None:
        self.index.set_actively_editing(False)
        self.index.close()

    # ------------------------------------------------------------------
    # Note lifecycle
    # ------------------------------------------------------------------

    def create_note(self, title: str = "New Note", body: str = "", tags: list[str] | None = None) -> Note:
        note = Note.create(title=title, tags=tags, body=body, note_id=self.index.unused_id())
        self.store.save(note)
        self.index.add(note)
        logger.info("Created note %s", note.id)
        return note

    def save_note(self, note: Note) -> Note:
        """Persist edits to *note*; a retitled note also moves file and links."""
        updated, _ = self._write(note, self._stored_version(note.id))
        return updated

    def rename_note(self, note: Note, new_title: str) -> tuple[Note, BatchResult[Note]]:
        """Retitle *note*, move its file, and rewrite links in other notes."""
        previous = self._stored_version(note.id) or note
        return self._write(replace(note, title=new_title), previous)

    def delete_note(self, note: Note) -> None:
        """Move *note* to the trash and drop it from the index."""
        self.store.delete(self._stored_version(note.id) or note)
        self.index.remove(note)

    # ------------------------------------------------------------------
    # Editing sessions
    # ------------------------------------------------------------------

    def begin_editing(self) -> None:
        self.index.set_actively_editing(True)

    def end_editing(self) -> None:
        self.index.set_actively_editing(False)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _stored_version(self, note_id: str) -> Note | None:
        return self.index.pending_update(note_id) or self.index.find_note_by_id(note_id)

    def _write(self, note: Note, previous: Note | None) -> tuple[Note, BatchResult[Note]]:
        updated = replace(note, tags=list(note.tags))
        updated.touch()

        if previous is not None:
            self.store.rename(updated, previous.filename)
        self.store.save(updated)

        propagated: BatchResult[Note] = BatchResult()
        if previous is not None and previous.title != updated.title:
            propagated = self.index.update_wikilinks(previous.title, updated.title, note.id)
        self.index.update(updated)
        return updated, propagated
