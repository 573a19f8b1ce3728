"""Unit tests for zettelvault.parser."""

import textwrap
from datetime import datetime, timezone

from zettelvault.note import Note
from zettelvault.parser import (
    encode_note,
    extract_heading_title,
    generate_frontmatter,
    parse_frontmatter,
    parse_note,
    parse_tags,
    parse_value,
    parse_yaml_frontmatter,
)

_T = datetime(2024, 1, 9, 14, 0, 0, tzinfo=timezone.utc)


def _note(**overrides) -> Note:
    fields = dict(
        id="20250109140000",
        title="Test Note",
        tags=["test", "sample"],
        created_at=_T,
        updated_at=_T,
        body="Test body",
    )
    fields.update(overrides)
    return Note(**fields)


# ---------------------------------------------------------------------------
# parse_frontmatter
# ---------------------------------------------------------------------------


class TestParseFrontmatter:
    def test_basic_block(self):
        content = textwrap.dedent("""\
            ---
            id: 20250109140000
            title: Test Note
            tags: [test, sample]
            createdAt: 2024-01-09T14:00:00.000Z
            updatedAt: 2024-01-09T14:00:00.000Z
            ---

            This is the body content.
        """)
        meta, body = parse_frontmatter(content)
        assert meta["id"] == "20250109140000"
        assert meta["title"] == "Test Note"
        assert meta["tags"] == ["test", "sample"]
        assert meta["createdAt"] == _T
        assert body.strip() == "This is the body content."

    def test_no_frontmatter_returns_input_unchanged(self):
        content = "Just some text.\n---\nnot: front matter\n"
        meta, body = parse_frontmatter(content)
        assert meta == {}
        assert body == content

    def test_unterminated_block_falls_back_to_body(self):
        content = "---\nid: 1\ntitle: Broken\n\nBody without a closing delimiter."
        meta, body = parse_frontmatter(content)
        assert meta == {}
        assert body == content

    def test_empty_input(self):
        assert parse_frontmatter("") == ({}, "")

    def test_skips_comments_blank_and_malformed_lines(self):
        content = "---\n# comment\n\nno separator here\nkey:nospace\ntitle: Kept\n---\nBody"
        meta, body = parse_frontmatter(content)
        assert meta == {"title": "Kept"}
        assert body == "Body"

    def test_splits_on_first_separator_only(self):
        meta, _ = parse_frontmatter("---\ntitle: Ratio: 3: 1\n---\n")
        assert meta["title"] == "Ratio: 3: 1"

    def test_body_is_lines_after_closing_delimiter(self):
        _, body = parse_frontmatter("---\nid: 1\n---\nline one\nline two\n")
        assert body == "line one\nline two\n"

    def test_delimiter_with_surrounding_whitespace(self):
        meta, body = parse_frontmatter("  ---  \nid: 7\n --- \nbody")
        assert meta == {"id": "7"}
        assert body == "body"


# ---------------------------------------------------------------------------
# parse_value
# ---------------------------------------------------------------------------


class TestParseValue:
    def test_list(self):
        assert parse_value("[a,  b , c]") == ["a", "b", "c"]

    def test_empty_list(self):
        assert parse_value("[]") == []

    def test_timestamp(self):
        assert parse_value("2024-01-09T14:00:00Z") == _T

    def test_timestamp_with_offset(self):
        parsed = parse_value("2024-01-09T16:00:00+02:00")
        assert parsed == _T

    def test_id_stays_string(self):
        assert parse_value("20250109140000") == "20250109140000"

    def test_bare_date_stays_string(self):
        assert parse_value("2024-01-09") == "2024-01-09"

    def test_trimmed_string(self):
        assert parse_value("  hello  ") == "hello"


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


class TestEncode:
    def test_generate_frontmatter(self):
        header = generate_frontmatter(_note())
        assert header == (
            "---\n"
            "id: 20250109140000\n"
            "title: Test Note\n"
            "createdAt: 2024-01-09T14:00:00Z\n"
            "updatedAt: 2024-01-09T14:00:00Z\n"
            "tags: [test, sample]\n"
            "---\n"
            "\n"
        )

    def test_empty_tags(self):
        assert "tags: []\n" in generate_frontmatter(_note(tags=[]))

    def test_body_appended_verbatim(self):
        text = encode_note(_note(body="Line [[Link]]\n"))
        assert text.endswith("---\n\nLine [[Link]]\n")


# ---------------------------------------------------------------------------
# parse_note
# ---------------------------------------------------------------------------


class TestParseNote:
    def test_round_trip(self):
        note = _note(body="First line\n\nSee [[Other]].\n")
        parsed = parse_note(encode_note(note))
        assert parsed == note

    def test_round_trip_drops_sub_second_precision(self):
        precise = datetime(2024, 1, 9, 14, 0, 0, 987654, tzinfo=timezone.utc)
        parsed = parse_note(encode_note(_note(created_at=precise, updated_at=precise)))
        assert abs((parsed.updated_at - precise).total_seconds()) < 1

    def test_round_trip_body_with_leading_blank_lines(self):
        note = _note(body="\n\nindented start")
        assert parse_note(encode_note(note)).body == note.body

    def test_round_trip_empty_body_and_title(self):
        note = _note(title="", tags=[], body="")
        assert parse_note(encode_note(note)) == note

    def test_missing_id_is_not_a_note(self):
        assert parse_note("---\ntitle: No id\n---\nBody") is None

    def test_plain_text_is_not_a_note(self):
        assert parse_note("# Heading\n\nJust markdown.") is None

    def test_defaults(self):
        before = datetime.now(timezone.utc)
        note = parse_note("---\nid: 20250101000000\n---\nBody")
        assert note.title == ""
        assert note.tags == []
        assert note.created_at >= before
        assert note.updated_at >= before
        assert note.body == "Body"

    def test_unparseable_timestamp_defaults_to_now(self):
        before = datetime.now(timezone.utc)
        note = parse_note("---\nid: 1\ncreatedAt: yesterday\n---\n")
        assert note.created_at >= before

    def test_crlf_content(self):
        content = "---\r\nid: 1\r\ntitle: Windows\r\n---\r\n\r\nBody\r\n"
        note = parse_note(content)
        assert note.id == "1"
        assert note.title == "Windows"
        assert note.body == "Body\r\n"


# ---------------------------------------------------------------------------
# Foreign markdown helpers
# ---------------------------------------------------------------------------


class TestForeignMarkdown:
    def test_yaml_frontmatter(self):
        raw = "---\ntitle: Elsewhere\ntags:\n  - a\n  - b\n---\nBody here.\n"
        meta, body = parse_yaml_frontmatter(raw)
        assert meta == {"title": "Elsewhere", "tags": ["a", "b"]}
        assert body == "Body here.\n"

    def test_invalid_yaml_returns_empty(self):
        raw = "---\ntitle: [unclosed\n---\nBody."
        meta, body = parse_yaml_frontmatter(raw)
        assert meta == {}
        assert body == raw

    def test_no_yaml_block(self):
        assert parse_yaml_frontmatter("text") == ({}, "text")

    def test_parse_tags(self):
        text = "Tagged #python and #open-source, again #python. [[#20250101000000]]"
        assert parse_tags(text) == ["python", "open-source"]

    def test_url_fragment_not_a_tag(self):
        assert parse_tags("Visit https://example.com/page#section") == []

    def test_heading_title(self):
        assert extract_heading_title("intro\n# The Title \n## Sub") == "The Title"
        assert extract_heading_title("no heading") is None
