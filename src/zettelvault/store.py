"""NoteStore: one markdown file per note inside a notes directory.

File lifecycle: absent -> present (first save) -> present under a new name
(title change, via :meth:`NoteStore.rename`) -> trashed (:meth:`NoteStore.delete`).
Trashed files are never brought back by the store.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from zettelvault.config import VaultConfig
from zettelvault.errors import BatchResult, IOFailure, ParseFailure, StorageUnavailable
from zettelvault.note import NOTE_EXTENSION, Note
from zettelvault.parser import encode_note, parse_note

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


class NoteStore:
    """Persists :class:`Note` values as front-matter markdown files."""

    def __init__(self, notes_dir: Path | None, trash_dir: Path | None = None) -> None:
        self.notes_dir = Path(notes_dir) if notes_dir is not None else None
        if trash_dir is not None:
            self.trash_dir: Path | None = Path(trash_dir)
        elif self.notes_dir is not None:
            self.trash_dir = self.notes_dir.parent / "trash"
        else:
            self.trash_dir = None

    @classmethod
    def from_config(cls, config: VaultConfig) -> "NoteStore":
        return cls(config.notes_dir, config.trash_dir)

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def ensure_directories(self) -> Path:
        """Create the notes and trash directories if needed; return the notes dir."""
        if self.notes_dir is None:
            raise StorageUnavailable()
        for directory in (self.notes_dir, self.trash_dir):
            if directory is None:
                continue
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageUnavailable(f"Cannot create {directory}: {exc}", path=directory) from exc
        return self.notes_dir

    def path_for(self, note: Note) -> Path:
        if self.notes_dir is None:
            raise StorageUnavailable()
        return self.notes_dir / note.filename

    def exists(self, note: Note) -> bool:
        if self.notes_dir is None:
            return False
        return (self.notes_dir / note.filename).exists()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, note: Note) -> Path:
        """Write *note* to a temp sibling, then atomically replace the target."""
        notes_dir = self.ensure_directories()
        target = notes_dir / note.filename
        temp = target.with_name(target.name + TEMP_SUFFIX)
        try:
            with open(temp, "w", encoding="utf-8", newline="") as fh:
                fh.write(encode_note(note))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(temp, target)
        except OSError as exc:
            temp.unlink(missing_ok=True)
            raise IOFailure("save", target, str(exc)) from exc
        logger.debug("Saved note %s to %s", note.id, target.name)
        return target

    def delete(self, note: Note) -> bool:
        """Move the note's file into the trash directory.

        Returns ``False`` (and does nothing) when the file is already gone.
        """
        self.ensure_directories()
        source = self.path_for(note)
        if self.trash_dir is None or not source.exists():
            return False
        destination = self.trash_dir / note.filename
        try:
            os.replace(source, destination)
        except OSError as exc:
            raise IOFailure("trash", source, str(exc)) from exc
        logger.info("Moved %s to trash", note.filename)
        return True

    def rename(self, note: Note, old_filename: str) -> bool:
        """Move ``old_filename`` to ``note.filename``; no-op if equal or missing."""
        notes_dir = self.ensure_directories()
        if old_filename == note.filename:
            return False
        source = notes_dir / old_filename
        if not source.exists():
            return False
        destination = notes_dir / note.filename
        try:
            os.replace(source, destination)
        except OSError as exc:
            raise IOFailure("rename", source, str(exc)) from exc
        logger.info("Renamed %s -> %s", old_filename, note.filename)
        return True

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load(self, path: Path) -> Note | None:
        """Parse a single note file; ``None`` if it is not a recognised note."""
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IOFailure("read", path, str(exc)) from exc
        return parse_note(content)

    def scan(self) -> BatchResult[Note]:
        """Parse every note file, recording unreadable or unparseable ones."""
        notes_dir = self.ensure_directories()
        result: BatchResult[Note] = BatchResult()
        for path in sorted(notes_dir.glob(f"*{NOTE_EXTENSION}")):
            if path.name.startswith(".") or not path.is_file():
                continue
            try:
                note = self.load(path)
            except IOFailure as exc:
                logger.warning("Skipping unreadable note file %s: %s", path.name, exc)
                result.fail(path.name, exc)
                continue
            if note is None:
                logger.warning("Skipping %s: no front matter id", path.name)
                result.fail(path.name, ParseFailure(path.name))
                continue
            result.items.append(note)
        logger.debug("Scanned %d notes (%d skipped)", len(result.items), len(result.failures))
        return result

    def load_all(self) -> list[Note]:
        """Every parseable note in the notes directory, in no particular order."""
        return self.scan().items
