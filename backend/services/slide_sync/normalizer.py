"""Normalise rich text pasted or typed into the editor into canonical plain text.

Canonical form: lines separated by ``"\\n"``, blank lines (slide breaks) by
``"\\n\\n"``. Plain text passes through untouched.
"""

import re

from bs4 import BeautifulSoup, NavigableString, Tag

BLOCK_TAGS = ("div", "p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote")
_BLOCK_PATTERN = "|".join(BLOCK_TAGS)

_MULTI_BREAK_RE = re.compile(r"(?:<br\s*/?>\s*){2,}", re.IGNORECASE)
_SINGLE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(rf"</(?:{_BLOCK_PATTERN})\s*>", re.IGNORECASE)
_BLOCK_OPEN_RE = re.compile(rf"<(?:{_BLOCK_PATTERN})(?:\s[^>]*)?>", re.IGNORECASE)
_LAYOUT_TAG = rf"(?:<br\s*/?>|</?(?:{_BLOCK_PATTERN})(?:\s[^>]*)?>)"
_INTER_TAG_SPACE_RE = re.compile(rf"({_LAYOUT_TAG})\s+(?={_LAYOUT_TAG})", re.IGNORECASE)
_TEXT_BEFORE_BLOCK_RE = re.compile(
    rf"([^>\n]|</(?!(?:{_BLOCK_PATTERN})\b)[a-z][a-z0-9]*\s*>)(?=<(?:{_BLOCK_PATTERN})(?:\s[^>]*)?>)",
    re.IGNORECASE,
)
_NBSP_RE = re.compile(r"&nbsp;|&#160;|&#xa0;", re.IGNORECASE)
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_LINE_PADDING_RE = re.compile(r"[ \t]+\n")


def is_markup(content: str) -> bool:
    """True when the content carries any tag characters."""
    return "<" in content or ">" in content


def _top_level_blocks(soup: BeautifulSoup) -> list[Tag]:
    return [child for child in soup.children if isinstance(child, Tag) and child.name in BLOCK_TAGS]


def _is_empty_block(block: Tag) -> bool:
    return not block.get_text().replace("\xa0", " ").strip()


def _has_blank_line_signal(raw_content: str, blocks: list[Tag]) -> bool:
    return bool(_MULTI_BREAK_RE.search(raw_content)) or any(_is_empty_block(b) for b in blocks)


def _stray_text_between(soup: BeautifulSoup) -> bool:
    return any(
        isinstance(child, NavigableString) and child.strip()
        for child in soup.children
    )


def _prepare_markup(raw_content: str) -> str:
    """Drop source formatting between layout tags; break bare text off a following block."""
    text = _INTER_TAG_SPACE_RE.sub(r"\1", raw_content)
    return _TEXT_BEFORE_BLOCK_RE.sub(r"\1" + "\n", text)


def _html_to_text(fragment: str) -> str:
    """Apply the break/block rewrites and extract visible text from one HTML fragment."""
    text = _MULTI_BREAK_RE.sub("\n\n", fragment)
    text = _SINGLE_BREAK_RE.sub("\n", text)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _BLOCK_OPEN_RE.sub("", text)
    text = _NBSP_RE.sub(" ", text)
    text = BeautifulSoup(text, "html.parser").get_text()
    return text.replace("\xa0", " ")


def _tidy(text: str) -> str:
    text = _LINE_PADDING_RE.sub("\n", text)
    return _EXCESS_NEWLINES_RE.sub("\n\n", text)


def normalize(raw_content: str) -> str:
    """Convert raw editor content into canonical plain text.

    Double ``<br>`` runs are rewritten before single ones so the empty-line
    signal survives. When the markup consists of several top-level blocks with
    no explicit empty line anywhere (typical word-processor paste), each block
    becomes its own paragraph separated by a blank line.
    """
    if not raw_content or not is_markup(raw_content):
        return raw_content

    raw_content = _prepare_markup(raw_content)
    soup = BeautifulSoup(raw_content, "html.parser")
    blocks = _top_level_blocks(soup)

    if (
        len(blocks) > 1
        and not _stray_text_between(soup)
        and not _has_blank_line_signal(raw_content, blocks)
    ):
        paragraphs = [_html_to_text(str(block)).strip("\n") for block in blocks]
        return _tidy("\n\n".join(paragraphs))

    return _tidy(_html_to_text(raw_content))


def visible_text(raw_content: str) -> str:
    """Tag-stripped text with whitespace collapsed; used to detect non-empty content."""
    if not raw_content:
        return ""
    if is_markup(raw_content):
        raw_content = BeautifulSoup(raw_content, "html.parser").get_text(" ")
    return " ".join(raw_content.replace("\xa0", " ").split())
