# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Signal readers: stateless, read-only queries over a DocumentSnapshot.

Shared by the platform classifier, the page qualifier and the extractors.
None of these mutate the document or keep references past the call.
"""

from __future__ import annotations

import re
from functools import lru_cache

from productlens.document import DocumentSnapshot

JSONLD_SELECTOR = 'script[type="application/ld+json"]'


@lru_cache(maxsize=64)
def _global_re(name: str) -> re.Pattern[str]:
    # `window.Shopify = ...`, `var Shopify = ...`, `Shopify.theme = ...`, `window["Shopify"]`
    escaped = re.escape(name)
    return re.compile(
        rf"(?:window\.{escaped}\b|window\[['\"]{escaped}['\"]\]"
        rf"|\b(?:var|let|const)\s+{escaped}\b|\b{escaped}\s*(?:\.|=[^=]))"
    )


def hostname_contains(snapshot: DocumentSnapshot, token: str) -> bool:
    return token in snapshot.hostname


def has_global(snapshot: DocumentSnapshot, name: str) -> bool:
    """Marker global present: reported by the live page, or assigned in an inline script."""
    if name in snapshot.globals:
        return True
    pattern = _global_re(name)
    return any(pattern.search(script) for script in snapshot.inline_scripts)


def has_element(snapshot: DocumentSnapshot, css: str) -> bool:
    return snapshot.select_one(css) is not None


def meta_contains(snapshot: DocumentSnapshot, key: str, needle: str) -> bool:
    """Case-insensitive substring test on a meta tag's content."""
    content = snapshot.meta(key)
    return content is not None and needle.lower() in content.lower()


def body_has_class(snapshot: DocumentSnapshot, token: str) -> bool:
    body = snapshot.root.find("body")
    if body is None:
        return False
    return token in (body.get("class") or "").lower().split()


def script_src_contains(snapshot: DocumentSnapshot, token: str) -> bool:
    return any(token in (el.get("src") or "") for el in snapshot.root.iter("script"))


def link_href_contains(snapshot: DocumentSnapshot, token: str) -> bool:
    return any(token in (el.get("href") or "") for el in snapshot.root.iter("link"))


def jsonld_blocks(snapshot: DocumentSnapshot) -> list[str]:
    """Raw text of every linked-data script block, in document order."""
    return [el.text or "" for el in snapshot.select(JSONLD_SELECTOR)]


def jsonld_mentions(snapshot: DocumentSnapshot, token: str) -> bool:
    """Vendor hint: token appears anywhere in the raw linked-data text."""
    return any(token in block for block in jsonld_blocks(snapshot))


def text_length(snapshot: DocumentSnapshot) -> int:
    return len(snapshot.visible_text)


def paragraph_count(snapshot: DocumentSnapshot) -> int:
    return snapshot.paragraph_count
