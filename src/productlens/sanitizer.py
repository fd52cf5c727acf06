# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Text and description-markup sanitization.

Product records leave this package for downstream consumers that render or
re-prompt with them, so every string is cleaned on the way out:

1. sanitize_text(): short fields (titles, brands, spec keys and values)
2. sanitize_description(): allow-listed markup plus plain text for a description block
"""

from __future__ import annotations

import copy
import html as _html
import re

from lxml import etree
from lxml.html import HtmlElement, tostring

DESCRIPTION_MAX_LEN = 15_000

# Zero-width chars, bidi overrides, interlinear annotations, C0/C1 controls
_CONTROL_CHAR_RE = re.compile(
    r"[\u200B-\u200F\u202A-\u202E\u2060-\u2069\uFEFF\uFFF9-\uFFFB"
    r"\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F-\u009F]"
)

# ANSI escape sequences
_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")

_WHITESPACE_RE = re.compile(r"\s+")

ALLOWED_TAGS = frozenset(
    {
        "p",
        "ul",
        "ol",
        "li",
        "em",
        "strong",
        "b",
        "i",
        "br",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
    }
)
ALLOWED_ATTRS = frozenset({"href", "src", "alt", "title"})

# Removed together with everything inside them.
_DROP_WITH_CONTENT = frozenset({"script", "style", "noscript", "template", "iframe", "object", "embed", "svg"})

_BLOCK_TAGS = frozenset({"p", "li", "br", "tr", "th", "td", "h1", "h2", "h3", "h4", "h5", "h6", "div", "section"})

_UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:text/html")


def sanitize_text(text: str | None, max_len: int = 512) -> str:
    """Sanitize a short text field.

    - Strips Unicode control characters (zero-width, bidi overrides)
    - Removes ANSI escape sequences
    - Collapses all whitespace runs (including newlines) to one space
    - Truncates to max_len
    """
    if not text:
        return ""

    text = _ANSI_ESCAPE_RE.sub("", text)
    text = _CONTROL_CHAR_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()

    if len(text) > max_len:
        text = text[:max_len].rstrip()

    return text


def unescape_text(text: str | None, max_len: int = 512) -> str:
    """sanitize_text for values that may still carry HTML entities (JSON-LD, meta content)."""
    if not text:
        return ""
    return sanitize_text(_html.unescape(text), max_len=max_len)


def _remove_keep_tail(node: etree._Element) -> None:
    parent = node.getparent()
    if parent is None:
        return
    tail = node.tail
    if tail:
        prev = node.getprevious()
        if prev is not None:
            prev.tail = (prev.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(node)


def _clean_attributes(node: HtmlElement) -> None:
    for name in list(node.attrib):
        if name not in ALLOWED_ATTRS:
            del node.attrib[name]
            continue
        if name in ("href", "src"):
            value = node.attrib[name].strip().lower()
            if value.startswith(_UNSAFE_SCHEMES):
                del node.attrib[name]


def _inner_html(container: HtmlElement, max_len: int) -> str:
    parts: list[str] = []
    size = 0
    if container.text:
        head = _html.escape(container.text, quote=False)
        parts.append(head)
        size += len(head)
    for child in container:
        if size >= max_len:
            break
        chunk = tostring(child, encoding="unicode")
        parts.append(chunk)
        size += len(chunk)
    markup = _WHITESPACE_RE.sub(" ", "".join(parts)).strip()
    return markup[:max_len]


def sanitize_description(element: HtmlElement, max_len: int = DESCRIPTION_MAX_LEN) -> tuple[str, str]:
    """Reduce a description container to allow-listed markup and plain text.

    Script, style and similar subtrees are removed with their content; other
    disallowed tags are unwrapped so their text survives. Attributes outside
    the allow-list are dropped. The input element is not modified.

    Returns:
        (html, text), each capped at max_len characters.
    """
    container = copy.deepcopy(element)
    container.tail = None

    # Reverse document order: children are handled before their parents.
    for node in reversed(list(container.iterdescendants())):
        tag = node.tag
        if not isinstance(tag, str):
            _remove_keep_tail(node)  # comments, processing instructions
            continue
        tag = tag.lower()
        if tag in _DROP_WITH_CONTENT:
            _remove_keep_tail(node)
        elif tag not in ALLOWED_TAGS:
            node.drop_tag()
        else:
            _clean_attributes(node)

    markup = _inner_html(container, max_len)

    for node in container.iter():
        if isinstance(node.tag, str) and node.tag.lower() in _BLOCK_TAGS:
            node.tail = " " + (node.tail or "")
            if node.tag.lower() != "br":
                node.text = " " + (node.text or "")
    text = sanitize_text(container.text_content(), max_len=max_len)

    return markup, text
