"""Lenient tag and attribute extraction for loosely formed markup.

These helpers work on raw text with regular expressions, so they keep
working on pages and feed fragments that a strict parser would reject.
"""

import re
from html import unescape

CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")
SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,;:!?)\]])")


def unwrap_cdata(text: str) -> str:
    """Replace every CDATA section with its raw content."""
    return CDATA_RE.sub(lambda m: m.group(1), text or "")


def decode_entities(text: str) -> str:
    """Decode HTML entities (&amp; &lt; &gt; &quot; &#39; and friends)."""
    return unescape(text or "")


def strip_markup(text: str) -> str:
    """Remove tags, decode entities and collapse whitespace."""
    if not text:
        return ""
    text = unwrap_cdata(text)
    text = TAG_RE.sub(" ", text)
    text = decode_entities(text)
    # Escaped markup only becomes visible after decoding
    text = TAG_RE.sub(" ", text)
    text = WHITESPACE_RE.sub(" ", text).strip()
    # Tags replaced by spaces leave gaps before closing punctuation
    return SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)


def first_tag_text(block: str, tag_names: list[str]) -> str:
    """Return the decoded inner text of the first matching tag.

    Tags are tried in the order given; the match is case-insensitive and
    non-greedy, so the first closing tag ends the content.
    """
    if not block:
        return ""
    for tag in tag_names:
        name = re.escape(tag)
        m = re.search(
            rf"<{name}(?:\s[^>]*)?>(.*?)</{name}\s*>",
            block,
            re.IGNORECASE | re.DOTALL,
        )
        if m:
            return decode_entities(unwrap_cdata(m.group(1))).strip()
    return ""


def first_attr(block: str, tag_pattern: str, attr_name: str) -> str:
    """Return an attribute value from the first tag matching ``tag_pattern``.

    ``tag_pattern`` is a regex that should match a whole opening tag, e.g.
    ``r"<link[^>]+rel=\"alternate\"[^>]*>"``.
    """
    if not block:
        return ""
    tag = re.search(tag_pattern, block, re.IGNORECASE | re.DOTALL)
    if not tag:
        return ""
    attr = re.search(
        rf"""(?:^|\s){re.escape(attr_name)}\s*=\s*(?:"([^"]*)"|'([^']*)')""",
        tag.group(0),
        re.IGNORECASE,
    )
    if not attr:
        return ""
    value = attr.group(1) if attr.group(1) is not None else attr.group(2)
    return decode_entities(value).strip()
