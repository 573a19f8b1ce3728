"""Front-matter codec, tag parser, and YAML header reader.

Notes are persisted as::

    ---
    id: 20250109140000
    title: My Note
    createdAt: 2025-01-09T14:00:00Z
    updatedAt: 2025-01-09T14:05:00Z
    tags: [zettel, ideas]
    ---

    Body text with [[Wikilinks]].

The header is a small YAML subset: ``key: value`` lines, bracketed lists
and ISO-8601 date-times.  Header values are not escaped.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

import yaml

from zettelvault.note import Note, as_utc, utc_now

logger = logging.getLogger(__name__)

DELIMITER = "---"

# Full ISO-8601 date-time; bare dates and 14-digit ids must stay strings.
_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$"
)
# Inline #tags (not inside code-spans, URLs or wikilinks)
_TAG_RE = re.compile(r"(?<![`\w/#\[])#([\w/-]+)")
# Standard YAML front-matter block, as written by other markdown tools
_YAML_BLOCK_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


def format_timestamp(value: datetime) -> str:
    """Render *value* as a UTC ``YYYY-MM-DDTHH:MM:SSZ`` string."""
    return as_utc(value).astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 date-time; naive values are taken as UTC."""
    text = value.strip()
    if not _DATETIME_RE.match(text):
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return as_utc(parsed)


def parse_value(raw: str) -> Any:
    """Interpret one header value: list, date-time, or plain string."""
    value = raw.strip()
    if value.startswith("[") and value.endswith("]"):
        return [item.strip() for item in value[1:-1].split(",") if item.strip()]
    timestamp = parse_timestamp(value)
    if timestamp is not None:
        return timestamp
    return value


def _parse_line(line: str) -> tuple[str, Any] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    key, sep, value = stripped.partition(": ")
    if not sep:
        return None
    return key.strip(), parse_value(value)


# ---------------------------------------------------------------------------
# Decode / encode
# ---------------------------------------------------------------------------


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split the header block from body text.

    Returns ``(metadata, body)``.  Without a leading delimiter, or when the
    block is never closed, ``metadata`` is empty and ``body`` is *content*
    unchanged.
    """
    lines = content.split("\n")
    if lines[0].strip() != DELIMITER:
        return {}, content

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == DELIMITER:
            break
    else:
        return {}, content

    metadata: dict[str, Any] = {}
    for line in lines[1:end]:
        parsed = _parse_line(line)
        if parsed is not None:
            key, value = parsed
            metadata[key] = value
    return metadata, "\n".join(lines[end + 1 :])


def generate_frontmatter(note: Note) -> str:
    """Return the header block for *note*, including the trailing blank line."""
    tags = f"[{', '.join(note.tags)}]" if note.tags else "[]"
    lines = [
        DELIMITER,
        f"id: {note.id}",
        f"title: {note.title}",
        f"createdAt: {format_timestamp(note.created_at)}",
        f"updatedAt: {format_timestamp(note.updated_at)}",
        f"tags: {tags}",
        DELIMITER,
        "",
        "",
    ]
    return "\n".join(lines)


def encode_note(note: Note) -> str:
    return generate_frontmatter(note) + note.body


def parse_note(content: str) -> Note | None:
    """Build a :class:`Note` from persisted text, or ``None`` if it has no ``id``."""
    metadata, body = parse_frontmatter(content)

    note_id = metadata.get("id")
    if not isinstance(note_id, str) or not note_id:
        return None

    title = metadata.get("title")
    tags = metadata.get("tags")
    created_at = metadata.get("createdAt")
    updated_at = metadata.get("updatedAt")
    now = utc_now()

    # The encoder separates header and body with one blank line.
    if body.startswith("\n"):
        body = body[1:]
    elif body.startswith("\r\n"):
        body = body[2:]

    return Note(
        id=note_id,
        title=title if isinstance(title, str) else "",
        tags=tags if isinstance(tags, list) else [],
        created_at=created_at if isinstance(created_at, datetime) else now,
        updated_at=updated_at if isinstance(updated_at, datetime) else now,
        body=body,
    )


# ---------------------------------------------------------------------------
# Foreign markdown
# ---------------------------------------------------------------------------


def parse_yaml_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split a standard YAML front-matter block from body text.

    Used for markdown written by other tools.  Returns ``({}, content)`` when
    there is no block or it is not valid YAML mapping syntax.
    """
    match = _YAML_BLOCK_RE.match(content)
    if not match:
        return {}, content
    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        logger.debug("Ignoring invalid YAML front matter: %s", exc)
        return {}, content
    if not isinstance(meta, dict):
        return {}, content
    return meta, content[match.end() :]


def parse_tags(text: str) -> list[str]:
    """Return all inline ``#tag`` values found in *text* (de-duped, ordered)."""
    seen: set[str] = set()
    result: list[str] = []
    for m in _TAG_RE.finditer(text):
        tag = m.group(1)
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def extract_heading_title(text: str) -> str | None:
    """Return the text of the first ``# `` heading, if any."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped[2:].strip()
    return None
