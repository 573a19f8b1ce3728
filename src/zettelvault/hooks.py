"""Change notification for :class:`~zettelvault.index.NoteIndex` observers.

An observer implements any subset of the hooks below and is registered
with :meth:`NoteIndex.subscribe`::

    class SearchMirror:
        def on_load(self, index): ...
        def on_note_indexed(self, note): ...
        def on_note_removed(self, note): ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from zettelvault.index import NoteIndex
    from zettelvault.note import Note

logger = logging.getLogger(__name__)

HOOKS = ("on_load", "on_note_indexed", "on_note_removed")


@runtime_checkable
class IndexObserver(Protocol):
    def on_load(self, index: "NoteIndex") -> None: ...
    def on_note_indexed(self, note: "Note") -> None: ...
    def on_note_removed(self, note: "Note") -> None: ...


def fire_hook(observers: list[Any], hook: str, **kwargs: Any) -> None:
    """Call *hook* on every observer that defines it.

    A failing observer is logged and skipped so the rest still run.
    """
    if hook not in HOOKS:
        raise ValueError(f"Unknown hook {hook!r}")
    for observer in list(observers):
        callback = getattr(observer, hook, None)
        if callback is None:
            continue
        try:
            callback(**kwargs)
        except Exception:  # noqa: BLE001
            logger.exception("Observer %r failed in %s", observer, hook)
