"""Tests for slide synthesis and background markers."""

from services.slide_sync.synthesizer import (
    DEFAULT_CONTAINER_STYLE,
    apply_background,
    background_of_first_slide,
    extract_background,
    make_manual_slide,
    render_body,
    synthesize,
)
from shared.models import Sermon, Slide
from shared.utils import config


class TestSynthesize:
    """Slide records built from segments."""

    def test_ids_titles_and_order(self):
        slides = synthesize("song-1", "Amazing Grace", ["Verse", "Chorus", "Bridge"], timestamp=1700000000000)

        assert [s.id for s in slides] == [
            "slide-song-1-1700000000000-0",
            "slide-song-1-1700000000000-1",
            "slide-song-1-1700000000000-2",
        ]
        assert [s.title for s in slides] == [
            "Amazing Grace - Slide 1",
            "Amazing Grace - Slide 2",
            "Amazing Grace - Slide 3",
        ]
        assert [s.order for s in slides] == [1, 2, 3]

    def test_deterministic_for_fixed_timestamp(self):
        first = synthesize("song-1", "Song", ["A", "B"], timestamp=42)
        second = synthesize("song-1", "Song", ["A", "B"], timestamp=42)
        assert [s.id for s in first] == [s.id for s in second]
        assert [s.html for s in first] == [s.html for s in second]

    def test_batch_shares_one_timestamp(self):
        slides = synthesize("song-1", "Song", ["A", "B", "C"])
        stamps = {s.id.rsplit("-", 2)[1] for s in slides}
        assert len(stamps) == 1

    def test_no_segments_no_slides(self):
        assert synthesize("song-1", "Song", []) == []

    def test_html_uses_container_style_and_line_breaks(self):
        slide = synthesize("song-1", "Song", ["Line one\nLine two"], timestamp=1)[0]
        assert slide.html == f'<div style="{DEFAULT_CONTAINER_STYLE}">Line one<br>Line two</div>'

    def test_container_style_is_configurable(self):
        config.set_presentation_config({"slides": {"container_style": "color: red;"}})
        slide = synthesize("song-1", "Song", ["Hi"], timestamp=1)[0]
        assert slide.html == '<div style="color: red;">Hi</div>'

    def test_background_marker_prefixes_every_slide(self):
        slides = synthesize("song-1", "Song", ["A", "B"], background_url="https://img/bg.jpg", timestamp=1)
        for slide in slides:
            assert slide.html.startswith("<!--BACKGROUND:https://img/bg.jpg--><div")
            assert extract_background(slide.html) == "https://img/bg.jpg"


class TestRenderBody:
    def test_escapes_markup(self):
        assert render_body("Tom & <Jerry>") == "Tom &amp; &lt;Jerry&gt;"

    def test_collapses_whitespace_runs_within_lines(self):
        assert render_body("a   b\t c\nd") == "a b c<br>d"


class TestBackgroundMarkers:
    def test_extract_without_marker(self):
        assert extract_background("<div>x</div>") is None

    def test_apply_replaces_existing_marker(self):
        html = apply_background("<!--BACKGROUND:old.png--><div>x</div>", "new.png")
        assert html == "<!--BACKGROUND:new.png--><div>x</div>"

    def test_apply_none_removes_marker(self):
        assert apply_background("<!--BACKGROUND:old.png--><div>x</div>", None) == "<div>x</div>"

    def test_only_first_slide_is_consulted(self):
        slides = [
            Slide(id="a", title="a", html="<div>1</div>"),
            Slide(id="b", title="b", html="<!--BACKGROUND:second.png--><div>2</div>"),
        ]
        assert background_of_first_slide(slides) is None
        assert background_of_first_slide(list(reversed(slides))) == "second.png"
        assert background_of_first_slide([]) is None


class TestManualSlide:
    def test_numbered_after_existing_slides(self):
        sermon = Sermon(id="sermon-1", title="Easter", slide_ids=["s1", "s2"])
        slide = make_manual_slide(sermon, "He is risen", timestamp=99)

        assert slide.id == "slide-sermon-1-99-2"
        assert slide.title == "Easter - Slide 3"
        assert slide.order == 3
        assert "He is risen" in slide.html
