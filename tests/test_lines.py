"""Tests for search, tokenizing and line rendering."""

from inipwn._render import LineKind, TaggedLine, build_tagged_lines, colorize
from inipwn._search import search
from inipwn._tokenize import tokenize
from inipwn.document import IniDocument

LINES = [
    "[global]",
    "  key1 = a",
    "",
    "[Net]",
    "  host = localhost",
    "",
]


class TestSearch:
    def test_single_match(self):
        state = search(LINES, "host")
        assert state.match_positions == [4]
        assert state.cursor == 0
        assert state.current == 4

    def test_single_match_wraps_onto_itself(self):
        state = search(LINES, "host")
        assert state.next() == 4
        assert state.previous() == 4
        assert state.cursor == 0

    def test_case_insensitive(self):
        assert search(LINES, "NET").match_positions == [3]

    def test_positions_ascend(self):
        assert search(LINES, "a").match_positions == [0, 1, 4]

    def test_n_steps_return_to_start(self):
        state = search(LINES, "a")
        for _ in range(state.count):
            state.next()
        assert state.cursor == 0

    def test_previous_from_first_wraps_to_last(self):
        state = search(LINES, "a")
        assert state.previous() == 4
        assert state.cursor == 2
        assert state.position_label() == "3 of 3"

    def test_no_match(self):
        state = search(LINES, "missing")
        assert state.count == 0
        assert state.current is None
        assert state.next() is None
        assert state.previous() is None

    def test_repeat_search_same_result(self):
        first = search(LINES, "a")
        first.next()
        second = search(LINES, "a")
        assert second.match_positions == first.match_positions
        assert second.cursor == 0


class TestTokenize:
    def test_plain(self):
        assert tokenize("set Net host localhost") == ["set", "Net", "host", "localhost"]

    def test_quoted_segment(self):
        assert tokenize('set Net host "local host"') == ["set", "Net", "host", "local host"]

    def test_extra_whitespace(self):
        assert tokenize("   list \t  now ") == ["list", "now"]

    def test_empty_quotes_dropped(self):
        assert tokenize('""') == []
        assert tokenize('save ""') == ["save"]

    def test_quotes_inside_word(self):
        assert tokenize('a"b c"d') == ["ab cd"]


class TestTaggedLines:
    def test_build(self):
        doc = IniDocument()
        doc.loads("key1=a\n[Net]\nhost = localhost\n")
        lines = build_tagged_lines(doc)
        assert [t.text for t in lines] == doc.render_lines()
        assert [t.kind for t in lines] == [
            LineKind.SECTION,
            LineKind.KEY_VALUE,
            LineKind.BLANK,
            LineKind.SECTION,
            LineKind.KEY_VALUE,
            LineKind.BLANK,
        ]
        assert lines[4] == TaggedLine("  host = localhost", LineKind.KEY_VALUE, "Net", "host")
        assert lines[2].section is None


class TestColorize:
    def test_section_header(self):
        text = colorize("[Net]")
        assert text.plain == "[Net]"
        assert [span.style for span in text.spans] == ["yellow"]

    def test_key_value(self):
        text = colorize("  host = localhost")
        assert text.plain == "  host = localhost"
        assert [span.style for span in text.spans] == ["green", "white", "cyan"]

    def test_selected(self):
        text = colorize("  host = localhost", selected=True)
        assert text.plain == "  host = localhost"
        assert "on dark_blue" in str(text.style)

    def test_other_line_unstyled(self):
        assert colorize("").spans == []
