"""zettelvault: local-first Zettelkasten note library."""

from zettelvault.config import VaultConfig, configure_logging
from zettelvault.db import NoteDB
from zettelvault.errors import (
    BatchFailure,
    BatchResult,
    ConfigError,
    IOFailure,
    ParseFailure,
    StorageUnavailable,
    VaultError,
)
from zettelvault.index import NoteIndex
from zettelvault.note import Note, generate_id, slugify
from zettelvault.parser import encode_note, parse_frontmatter, parse_note
from zettelvault.store import NoteStore
from zettelvault.workspace import Workspace

__all__ = [
    "Note",
    "NoteDB",
    "NoteIndex",
    "NoteStore",
    "Workspace",
    "VaultConfig",
    "configure_logging",
    "generate_id",
    "slugify",
    "encode_note",
    "parse_frontmatter",
    "parse_note",
    "VaultError",
    "ConfigError",
    "StorageUnavailable",
    "IOFailure",
    "ParseFailure",
    "BatchFailure",
    "BatchResult",
]
