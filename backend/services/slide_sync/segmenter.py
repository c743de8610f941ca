"""Split canonical text into slide-sized blocks on blank lines."""

import re
from collections.abc import Iterator

# Two or more line breaks, each optionally padded with spaces or tabs.
BLANK_LINE_RE = re.compile(r"(?:[ \t]*\r?\n[ \t]*){2,}")


def iter_segments(canonical_text: str) -> Iterator[str]:
    """Yield trimmed, non-empty slide texts lazily; call again to restart."""
    if not canonical_text:
        return
    position = 0
    for match in BLANK_LINE_RE.finditer(canonical_text):
        chunk = canonical_text[position:match.start()].strip()
        if chunk:
            yield chunk
        position = match.end()
    tail = canonical_text[position:].strip()
    if tail:
        yield tail


def segment(canonical_text: str) -> list[str]:
    """All slide texts for ``canonical_text``; an empty list means "no slides"."""
    return list(iter_segments(canonical_text))
