"""NoteIndex: in-memory derived state over every note in the vault.

The index owns the ordered note collection (most recently updated first)
and three derived maps:

- ``title_index``: lowercased title -> note id (last writer wins)
- ``tags_index``: tag -> ids of notes carrying it
- ``backlinks_index``: note id -> ids of notes whose wikilinks resolve to it

While the user is actively editing, :meth:`NoteIndex.update` only records
the latest value per note and (re)starts a short timer; nothing is
re-sorted until editing ends, so the visible list does not jump around
under the cursor.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Callable
from dataclasses import replace
from functools import partial
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from zettelvault.errors import BatchResult, VaultError
from zettelvault.hooks import fire_hook
from zettelvault.links import resolve_wikilink, resolves_to, rewrite_wikilinks
from zettelvault.note import Note, generate_id

if TYPE_CHECKING:
    from zettelvault.store import NoteStore

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], Any]


class NoteIndex:
    """Queryable view of all notes, kept consistent under incremental edits."""

    def __init__(
        self,
        store: "NoteStore",
        *,
        debounce_delay: float = 1.0,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.store = store
        self.debounce_delay = debounce_delay
        self.notes: list[Note] = []
        self.title_index: dict[str, str] = {}
        self.tags_index: dict[str, set[str]] = {}
        self.backlinks_index: dict[str, set[str]] = {}

        self.search_text = ""
        self.selected_tags: set[str] = set()

        self._timer_factory = timer_factory
        self._timer: Any = None
        self._timer_generation = 0
        self._pending: dict[str, Note] = {}
        self._editing = False
        self._lock = threading.RLock()
        self._observers: list[Any] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Any) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: Any) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # ------------------------------------------------------------------
    # Load / mutate
    # ------------------------------------------------------------------

    def load_notes(self) -> BatchResult[Note]:
        """Reload every note from the store and rebuild all indexes."""
        result = self.store.scan()
        with self._lock:
            self._cancel_timer()
            self._pending.clear()
            self.notes = list(result.items)
            self._sort()
            self._rebuild()
        logger.info("Loaded %d notes", len(self.notes))
        fire_hook(self._observers, "on_load", index=self)
        return result

    def add(self, note: Note) -> None:
        with self._lock:
            if self.find_note_by_id(note.id) is not None:
                logger.warning("Note %s is already indexed; applying as an update", note.id)
                self._apply(note)
                self._sort()
                return
            self.notes.append(note)
            self._sort()
            self._index_note(note)
        fire_hook(self._observers, "on_note_indexed", note=note)

    def update(self, note: Note) -> None:
        """Replace the indexed version of *note*.

        Applied at once when idle.  While editing, the value waits in a
        per-note slot (later calls overwrite it) until the debounce timer
        fires or editing ends.
        """
        with self._lock:
            self._pending[note.id] = note
            self._cancel_timer()
            if self._editing:
                callback = partial(self._on_timer, self._timer_generation)
                self._timer = self._timer_factory(self.debounce_delay, callback)
                self._timer.daemon = True
                self._timer.start()
            else:
                self.flush()

    def remove(self, note: Note) -> None:
        with self._lock:
            self._pending.pop(note.id, None)
            stored = self.find_note_by_id(note.id) or note
            self.notes = [n for n in self.notes if n.id != note.id]
            self._deindex_note(stored)
        fire_hook(self._observers, "on_note_removed", note=stored)

    def set_actively_editing(self, editing: bool) -> None:
        with self._lock:
            self._editing = editing
            if not editing:
                self.flush()

    def flush(self) -> None:
        """Apply every pending update now; re-sort unless still editing."""
        with self._lock:
            self._cancel_timer()
            pending = list(self._pending.values())
            self._pending.clear()
            for note in pending:
                self._apply(note)
            if not self._editing:
                self._sort()

    def close(self) -> None:
        with self._lock:
            self._cancel_timer()

    @property
    def is_actively_editing(self) -> bool:
        return self._editing

    @property
    def has_pending_updates(self) -> bool:
        return bool(self._pending)

    def pending_update(self, note_id: str) -> Note | None:
        return self._pending.get(note_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[Note, ...]:
        """Read-only view of the current collection for external indexers."""
        return tuple(self.notes)

    def get_backlinks(self, note: Note) -> list[Note]:
        ids = self.backlinks_index.get(note.id, set())
        return [n for n in self.notes if n.id in ids]

    def find_notes(self, target: str) -> list[Note]:
        return resolve_wikilink(target, self.notes)

    def find_note_by_id(self, note_id: str) -> Note | None:
        return next((n for n in self.notes if n.id == note_id), None)

    def unused_id(self) -> str:
        """A fresh id for now, stepped forward a second at a time past indexed ids."""
        moment = datetime.now()
        note_id = generate_id(moment)
        with self._lock:
            while self.find_note_by_id(note_id) is not None:
                moment += timedelta(seconds=1)
                note_id = generate_id(moment)
        return note_id

    def find_note_by_title(self, title: str) -> Note | None:
        lowered = title.lower()
        if lowered not in self.title_index:
            return None
        return next((n for n in self.notes if n.title.lower() == lowered), None)

    @property
    def filtered_notes(self) -> list[Note]:
        """Notes matching the selected tags AND the search text, in list order."""
        notes = self.notes
        if self.selected_tags:
            ids: set[str] = set()
            for tag in self.selected_tags:
                ids |= self.tags_index.get(tag, set())
            notes = [n for n in notes if n.id in ids]
        if self.search_text:
            query = self.search_text.lower()
            notes = [
                n
                for n in notes
                if query in n.title.lower()
                or query in n.body.lower()
                or any(query in t.lower() for t in n.tags)
            ]
        return list(notes)

    @property
    def tag_counts(self) -> list[tuple[str, int]]:
        counts: Counter[str] = Counter()
        for note in self.filtered_notes:
            counts.update(note.tags)
        return sorted(counts.items())

    def toggle_tag(self, tag: str) -> None:
        if tag in self.selected_tags:
            self.selected_tags.discard(tag)
        else:
            self.selected_tags.add(tag)

    def clear_filters(self) -> None:
        self.search_text = ""
        self.selected_tags.clear()

    # ------------------------------------------------------------------
    # Rename propagation
    # ------------------------------------------------------------------

    def update_wikilinks(self, old_title: str, new_title: str, note_id: str) -> BatchResult[Note]:
        """Rewrite ``[[old_title]]`` to ``[[new_title]]`` in every other note.

        Each changed note is touched and saved, then updated in the index.
        A note whose save fails is recorded and left untouched in the index.
        """
        result: BatchResult[Note] = BatchResult()
        with self._lock:
            candidates = [self._pending.get(n.id, n) for n in self.notes if n.id != note_id]
        for note in candidates:
            body = rewrite_wikilinks(note.body, old_title, new_title)
            if body == note.body:
                continue
            changed = replace(note, body=body, tags=list(note.tags))
            changed.touch()
            try:
                self.store.save(changed)
            except VaultError as exc:
                logger.warning("Could not update wikilinks in note %s: %s", note.id, exc)
                result.fail(note.id, exc)
                continue
            self.update(changed)
            result.items.append(changed)
        if result.items:
            logger.info("Rewrote [[%s]] -> [[%s]] in %d notes", old_title, new_title, len(result.items))
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        self._timer_generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        # A cancelled timer may already be blocked on the lock.
        with self._lock:
            if generation != self._timer_generation:
                return
            self.flush()

    def _sort(self) -> None:
        self.notes.sort(key=lambda n: n.updated_at, reverse=True)

    def _apply(self, note: Note) -> None:
        for position, existing in enumerate(self.notes):
            if existing.id == note.id:
                break
        else:
            logger.debug("Dropping update for unknown note %s", note.id)
            return
        self.notes[position] = note
        self._deindex_note(existing)
        self._index_note(note)
        fire_hook(self._observers, "on_note_indexed", note=note)

    def _rebuild(self) -> None:
        self.title_index.clear()
        self.tags_index.clear()
        self.backlinks_index.clear()
        for note in self.notes:
            self._index_note(note, inbound=False)

    def _index_note(self, note: Note, *, inbound: bool = True) -> None:
        self.title_index[note.title.lower()] = note.id
        for tag in note.tags:
            self.tags_index.setdefault(tag, set()).add(note.id)

        for link in note.wikilinks:
            for target in resolve_wikilink(link, self.notes):
                self.backlinks_index.setdefault(target.id, set()).add(note.id)

        if inbound:
            for other in self.notes:
                if other.id != note.id and any(resolves_to(link, note) for link in other.wikilinks):
                    self.backlinks_index.setdefault(note.id, set()).add(other.id)

    def _deindex_note(self, note: Note) -> None:
        key = note.title.lower()
        if self.title_index.get(key) == note.id:
            del self.title_index[key]
            for other in self.notes:
                if other.id != note.id and other.title.lower() == key:
                    self.title_index[key] = other.id
                    break

        for tag in note.tags:
            ids = self.tags_index.get(tag)
            if ids is not None:
                ids.discard(note.id)
                if not ids:
                    del self.tags_index[tag]

        for target in list(self.backlinks_index):
            sources = self.backlinks_index[target]
            sources.discard(note.id)
            if not sources:
                del self.backlinks_index[target]
        self.backlinks_index.pop(note.id, None)
