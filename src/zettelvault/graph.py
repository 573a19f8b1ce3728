"""Local link graph around a single note.

Builds a :mod:`networkx` digraph of the note, the notes that link to it,
and the notes its own wikilinks resolve to.  Layout and drawing are left to
whichever front end consumes the graph.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from zettelvault.index import NoteIndex
    from zettelvault.note import Note


def connected_notes(index: "NoteIndex", note: "Note") -> list["Note"]:
    """Backlinks plus resolved outgoing links of *note*, without duplicates."""
    ids: set[str] = {n.id for n in index.get_backlinks(note)}
    for link in note.wikilinks:
        ids.update(n.id for n in index.find_notes(link))
    ids.discard(note.id)
    return [n for n in index.notes if n.id in ids]


def local_graph(index: "NoteIndex", note: "Note") -> nx.DiGraph:
    """Return the one-hop link graph centred on *note*.

    Nodes are note ids with ``title`` and ``center`` attributes; an edge
    ``a -> b`` means a wikilink in ``a`` resolves to ``b``.
    """
    G: nx.DiGraph = nx.DiGraph()
    G.add_node(note.id, title=note.display_title, center=True)
    for other in connected_notes(index, note):
        G.add_node(other.id, title=other.display_title, center=False)

    for source in index.get_backlinks(note):
        if source.id != note.id:
            G.add_edge(source.id, note.id)
    for link in note.wikilinks:
        for target in index.find_notes(link):
            if target.id != note.id:
                G.add_edge(note.id, target.id)
    return G
