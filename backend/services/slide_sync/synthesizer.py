"""Build slide records from segmented text."""

import html
import re
from collections.abc import Iterable, Sequence

from shared.config import config
from shared.models import Collection, Slide
from shared.utils import epoch_millis

DEFAULT_CONTAINER_STYLE = (
    "text-align: center; padding: 40px; color: white; font-weight: bold; line-height: 1.4;"
)

BACKGROUND_MARKER_RE = re.compile(r"<!--BACKGROUND:(.*?)-->", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


def background_marker(url: str) -> str:
    return f"<!--BACKGROUND:{url}-->"


def extract_background(slide_html: str) -> str | None:
    """URL from the slide's background marker, if it has one."""
    match = BACKGROUND_MARKER_RE.search(slide_html or "")
    if not match:
        return None
    return match.group(1).strip() or None


def strip_background(slide_html: str) -> str:
    return BACKGROUND_MARKER_RE.sub("", slide_html or "", count=1).lstrip()


def apply_background(slide_html: str, url: str | None) -> str:
    """Replace (or remove, when ``url`` is falsy) the leading background marker."""
    body = strip_background(slide_html)
    return f"{background_marker(url)}{body}" if url else body


def background_of_first_slide(slides: Sequence[Slide]) -> str | None:
    """Background carried into the next generation: only slide #1 is consulted."""
    if not slides:
        return None
    return extract_background(slides[0].html)


def render_body(segment_text: str) -> str:
    """Escape one slide's text, collapse whitespace runs and keep its line breaks."""
    lines = [_WHITESPACE_RE.sub(" ", line).strip() for line in segment_text.splitlines()]
    return "<br>".join(html.escape(line, quote=False) for line in lines)


def render_slide_html(segment_text: str, background_url: str | None = None) -> str:
    style = config.get_presentation_value("slides.container_style", DEFAULT_CONTAINER_STYLE)
    container = f'<div style="{style}">{render_body(segment_text)}</div>'
    return apply_background(container, background_url)


def synthesize(
    owner_id: str,
    owner_title: str,
    segments: Iterable[str],
    background_url: str | None = None,
    timestamp: int | None = None,
) -> list[Slide]:
    """One slide per segment, ids ``slide-{owner}-{timestamp}-{index}``.

    Deterministic for a fixed ``timestamp``; every slide of the batch shares it
    so ids sort in generation order.
    """
    batch_timestamp = epoch_millis() if timestamp is None else timestamp
    return [
        Slide(
            id=f"slide-{owner_id}-{batch_timestamp}-{index}",
            title=f"{owner_title} - Slide {index + 1}",
            html=render_slide_html(text, background_url),
            order=index + 1,
        )
        for index, text in enumerate(segments)
    ]


def make_manual_slide(owner: Collection, text: str, timestamp: int | None = None) -> Slide:
    """Slide created by hand from selected sermon text, appended after existing slides."""
    number = len(owner.slide_ids) + 1
    batch_timestamp = epoch_millis() if timestamp is None else timestamp
    return Slide(
        id=f"slide-{owner.id}-{batch_timestamp}-{number - 1}",
        title=f"{owner.title} - Slide {number}",
        html=render_slide_html(text),
        order=number,
    )
