"""Import and export of markdown notes.

Importing accepts both files written by this package (front matter with an
``id``) and plain markdown from elsewhere, which becomes a fresh note.
Both directions keep going past individual failures and report them in a
:class:`~zettelvault.errors.BatchResult`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from zettelvault.errors import BatchResult, IOFailure, StorageUnavailable, VaultError
from zettelvault.note import NOTE_EXTENSION, Note, utc_now
from zettelvault.parser import (
    encode_note,
    extract_heading_title,
    parse_note,
    parse_tags,
    parse_yaml_frontmatter,
)

if TYPE_CHECKING:
    from zettelvault.index import NoteIndex
    from zettelvault.store import NoteStore

logger = logging.getLogger(__name__)


def note_from_markdown(content: str, fallback_title: str, note_id: str) -> Note:
    """Build a new note from markdown that carries no note id."""
    meta, text = parse_yaml_frontmatter(content)

    title = meta.get("title")
    if not isinstance(title, str) or not title.strip():
        title = extract_heading_title(text) or fallback_title

    fm_tags = meta.get("tags") or []
    if isinstance(fm_tags, str):
        fm_tags = [t.strip() for t in fm_tags.split(",") if t.strip()]
    tags = sorted({str(t) for t in fm_tags} | set(parse_tags(text)))

    now = utc_now()
    return Note(id=note_id, title=title.strip(), tags=tags, created_at=now, updated_at=now, body=content)


def import_file(path: Path, store: "NoteStore", index: "NoteIndex") -> Note:
    """Import one markdown file: save it, then add or update it in *index*.

    Re-importing a known id under a new title moves the existing file first.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IOFailure("read", path, str(exc)) from exc

    note = parse_note(content)
    if note is None:
        note = note_from_markdown(content, path.stem, index.unused_id())

    indexed = index.find_note_by_id(note.id)
    if indexed is not None:
        store.rename(note, (index.pending_update(note.id) or indexed).filename)
    store.save(note)
    if indexed is None:
        index.add(note)
    else:
        index.update(note)
    return note


def import_folder(folder: Path, store: "NoteStore", index: "NoteIndex") -> BatchResult[Note]:
    """Import every markdown file directly inside *folder*."""
    result: BatchResult[Note] = BatchResult()
    try:
        paths = sorted(
            p
            for p in Path(folder).iterdir()
            if p.is_file() and not p.name.startswith(".") and p.suffix.lower() == NOTE_EXTENSION
        )
    except OSError as exc:
        raise IOFailure("list", Path(folder), str(exc)) from exc

    for path in paths:
        try:
            result.items.append(import_file(path, store, index))
        except StorageUnavailable:
            raise
        except VaultError as exc:
            logger.warning("Error importing %s: %s", path.name, exc)
            result.fail(path.name, exc)
    logger.info("Imported %d of %d files from %s", len(result.items), len(paths), folder)
    return result


def export_notes(notes: list[Note], folder: Path) -> BatchResult[Path]:
    """Write each note, front matter included, to ``folder/<filename>``."""
    result: BatchResult[Path] = BatchResult()
    folder = Path(folder)
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailure("create", folder, str(exc)) from exc

    for note in notes:
        target = folder / note.filename
        try:
            target.write_text(encode_note(note), encoding="utf-8")
        except OSError as exc:
            failure = IOFailure("export", target, str(exc))
            logger.warning("Error exporting note %s: %s", note.id, failure)
            result.fail(note.id, failure)
            continue
        result.items.append(target)
    return result


def backup_vault(index: "NoteIndex", folder: Path) -> BatchResult[Path]:
    """Export every indexed note to *folder*."""
    return export_notes(list(index.notes), folder)
