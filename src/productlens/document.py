# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document snapshot: one parsed view of a rendered page for one analysis pass.

A snapshot is built from the page URL and its serialized HTML (plus,
optionally, the names of page-level script globals a live browser reported).
The parsed tree is created lazily, once, and shared by every extractor in
the pass. Snapshots are never reused across passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from urllib.parse import urljoin, urlparse

import lxml.html
from cssselect import SelectorError
from lxml import etree
from lxml.cssselect import CSSSelector
from lxml.html import HtmlElement

from productlens.sanitizer import sanitize_text

logger = logging.getLogger(__name__)

_EMPTY_DOCUMENT = "<html><head></head><body></body></html>"

_VISIBLE_TEXT_XPATH = etree.XPath(
    "//body//text()[not(ancestor::script) and not(ancestor::style) "
    "and not(ancestor::noscript) and not(ancestor::template)]"
)


@lru_cache(maxsize=512)
def compile_selector(css: str) -> CSSSelector | None:
    """Compile a CSS selector once. Invalid selectors compile to None (never match)."""
    try:
        return CSSSelector(css, translator="html")
    except SelectorError:
        logger.debug("Invalid CSS selector ignored: %s", css)
        return None


def select(node: HtmlElement, css: str) -> list[HtmlElement]:
    compiled = compile_selector(css)
    if compiled is None:
        return []
    return compiled(node)


def select_one(node: HtmlElement, css: str) -> HtmlElement | None:
    found = select(node, css)
    return found[0] if found else None


def element_text(node: HtmlElement, max_len: int = 512) -> str:
    """Whitespace-normalized text content of an element."""
    return sanitize_text(node.text_content(), max_len=max_len)


@dataclass(frozen=True)
class DocumentSnapshot:
    """URL + serialized HTML of the current document, with lazy parsed views.

    ``globals`` holds marker global names (``Shopify``, ``wc_add_to_cart_params``)
    reported by a live page; offline snapshots can leave it empty and rely on
    inline-script sniffing in the signal readers.
    """

    url: str
    html: str
    globals: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_html(cls, html: str, url: str, globals: frozenset[str] | set[str] | None = None) -> DocumentSnapshot:
        return cls(url=url, html=html or "", globals=frozenset(globals or ()))

    @cached_property
    def root(self) -> HtmlElement:
        try:
            return lxml.html.document_fromstring(self.html) if self.html.strip() else self._empty()
        except (etree.ParserError, ValueError):
            logger.debug("HTML parse failed for %s, using empty document", self.url, exc_info=True)
            return self._empty()

    @staticmethod
    def _empty() -> HtmlElement:
        return lxml.html.document_fromstring(_EMPTY_DOCUMENT)

    @cached_property
    def hostname(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    @cached_property
    def pathname(self) -> str:
        return urlparse(self.url).path or "/"

    @cached_property
    def visible_text(self) -> str:
        """Body text excluding script/style content, whitespace-collapsed."""
        return sanitize_text(" ".join(_VISIBLE_TEXT_XPATH(self.root)), max_len=1_000_000)

    @cached_property
    def paragraph_count(self) -> int:
        return len(self.root.xpath("//body//p"))

    @cached_property
    def inline_scripts(self) -> tuple[str, ...]:
        """Text of inline (non-JSON) script elements."""
        scripts = []
        for el in self.root.iter("script"):
            script_type = (el.get("type") or "").strip().lower()
            if el.get("src") or "json" in script_type:
                continue
            if el.text:
                scripts.append(el.text)
        return tuple(scripts)

    def select(self, css: str) -> list[HtmlElement]:
        return select(self.root, css)

    def select_one(self, css: str) -> HtmlElement | None:
        return select_one(self.root, css)

    def meta(self, key: str) -> str | None:
        """Content of the first ``<meta property=key>`` or ``<meta name=key>``."""
        for el in self.root.iter("meta"):
            if el.get("property") == key or el.get("name") == key:
                content = el.get("content")
                if content is not None:
                    return content
        return None

    def absolute_url(self, href: str) -> str:
        return urljoin(self.url, href.strip())
