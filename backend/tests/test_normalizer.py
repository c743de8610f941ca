"""Tests for rich text normalisation."""

import pytest

from services.slide_sync.normalizer import is_markup, normalize, visible_text
from services.slide_sync.segmenter import segment


class TestNormalize:
    """Canonical text from editor markup."""

    def test_plain_text_passes_through_unchanged(self):
        text = "Amazing grace\nhow sweet the sound\n\nThat saved a wretch"
        assert normalize(text) == text

    def test_empty_content(self):
        assert normalize("") == ""

    def test_single_and_double_breaks(self):
        raw = "Line 1<br>Line 2<br><br>Line 3"
        assert normalize(raw) == "Line 1\nLine 2\n\nLine 3"

    def test_double_break_with_whitespace_and_self_closing(self):
        raw = "Verse<br/> <br />Chorus"
        assert normalize(raw) == "Verse\n\nChorus"

    def test_paragraph_blocks_without_blank_lines_become_paragraphs(self):
        raw = "<p>Verse one</p><p>Verse two</p><p>Verse three</p>"
        assert normalize(raw) == "Verse one\n\nVerse two\n\nVerse three"

    def test_empty_block_marks_blank_line(self):
        raw = "<div>A</div><div><br></div><div>B</div>"
        assert normalize(raw).strip() == "A\n\nB"

    def test_consecutive_divs_with_explicit_break_keep_line_structure(self):
        raw = "<div>Line 1</div><div>Line 2</div><div><br></div><div>Line 3</div>"
        assert normalize(raw).strip() == "Line 1\nLine 2\n\nLine 3"

    def test_source_newlines_between_blocks_are_ignored(self):
        raw = "<div>Line 1</div>\n<div>Line 2</div>\n<div><br></div>\n<div>Line 3</div>"
        assert segment(normalize(raw)) == ["Line 1\nLine 2", "Line 3"]

    def test_bare_text_before_first_block_keeps_its_line(self):
        raw = "Line 1<div>Line 2</div><div><br></div><div>Line 3</div>"
        assert segment(normalize(raw)) == ["Line 1\nLine 2", "Line 3"]

    def test_inline_tag_before_block_keeps_its_line(self):
        raw = "<b>Line 1</b><div>Line 2</div>"
        assert normalize(raw).strip() == "Line 1\nLine 2"

    def test_non_breaking_spaces_become_spaces(self):
        assert normalize("<p>Hello&nbsp;there</p>").strip() == "Hello there"

    def test_inline_tags_are_stripped(self):
        assert normalize("<b>Bold</b> and <i>italic</i>") == "Bold and italic"

    def test_entities_are_decoded(self):
        assert normalize("<p>Faith &amp; hope</p>").strip() == "Faith & hope"

    def test_excess_newlines_collapse(self):
        raw = "A<br><br><br><br>B"
        assert normalize(raw) == "A\n\nB"

    @pytest.mark.parametrize("raw", ["<br>", "<p></p>", "<div><br></div>"])
    def test_markup_without_text(self, raw):
        assert normalize(raw).strip() == ""


class TestHelpers:
    def test_is_markup(self):
        assert is_markup("<p>x</p>")
        assert not is_markup("just words")

    def test_visible_text_collapses_whitespace(self):
        assert visible_text("<p>Hello</p>\n<p>  world&nbsp;!</p>") == "Hello world !"

    def test_visible_text_of_empty_markup(self):
        assert visible_text("<p>&nbsp;</p>") == ""
        assert visible_text("") == ""
