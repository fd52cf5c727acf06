# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Merge semantic and positional partial records into one ProductRecord.

Precedence per field: a present, non-empty semantic value wins; otherwise
the positional value. Arrays are taken whole. Composite fields:

- price: taken as a unit, semantic wins when it carries an amount
- description: taken as a unit, so ``text`` always belongs to ``html``; a
  semantic description carries text only and leaves ``html`` empty
- reviews: ``count`` and ``average`` chosen independently

All strings are whitespace-normalized on the way in.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from productlens import Description, Platform, Price, ProductImage, ProductRecord, Reviews, SpecEntry, Variant
from productlens.errors import MissingRequiredField
from productlens.normalize import clamp_rating, is_empty, normalize_currency
from productlens.sanitizer import DESCRIPTION_MAX_LEN, sanitize_text

logger = logging.getLogger(__name__)

SEMANTIC = "semantic"
POSITIONAL = "positional"

_TEXT_FIELDS = ("brand", "sku", "gtin", "mpn", "availability")
_ARRAY_FIELDS = ("bullets", "images", "variants", "specs", "category_path")


def _pick(
    name: str,
    semantic: Mapping[str, Any],
    positional: Mapping[str, Any],
    sources: dict[str, str],
) -> Any:
    value = semantic.get(name)
    if not is_empty(value):
        sources[name] = SEMANTIC
        return value
    value = positional.get(name)
    if not is_empty(value):
        sources[name] = POSITIONAL
        return value
    return None


def _normalize_array(name: str, items: list) -> list:
    if name in ("bullets", "category_path"):
        cleaned = (sanitize_text(str(i)) for i in items)
        return [i for i in cleaned if i]
    if name == "images":
        images: list[ProductImage] = []
        seen: set[str] = set()
        for image in items:
            if image.src in seen:
                continue
            seen.add(image.src)
            images.append(ProductImage(src=image.src, alt=sanitize_text(image.alt)))
        return images
    if name == "variants":
        return [Variant(name=sanitize_text(v.name), values=[sanitize_text(x) for x in v.values]) for v in items]
    if name == "specs":
        return [SpecEntry(key=sanitize_text(s.key).lower(), value=sanitize_text(s.value)) for s in items]
    return list(items)


def _merge_price(semantic: Price | None, positional: Price | None, sources: dict[str, str]) -> Price:
    if semantic is not None and semantic.amount is not None:
        chosen, sources["price"] = semantic, SEMANTIC
    elif positional is not None and not positional.is_empty():
        chosen, sources["price"] = positional, POSITIONAL
    elif semantic is not None and not semantic.is_empty():
        chosen, sources["price"] = semantic, SEMANTIC
    else:
        return Price()
    return Price(
        amount=chosen.amount,
        currency=normalize_currency(chosen.currency),
        raw=sanitize_text(chosen.raw, max_len=128) or None,
        low=chosen.low,
        high=chosen.high,
    )


def _merge_description(
    semantic: Description | None,
    positional: Description | None,
    sources: dict[str, str],
) -> Description:
    if semantic is not None and not is_empty(semantic):
        chosen, sources["description"] = semantic, SEMANTIC
    elif positional is not None and not is_empty(positional):
        chosen, sources["description"] = positional, POSITIONAL
    else:
        return Description()
    return Description(
        html=chosen.html[:DESCRIPTION_MAX_LEN],
        text=sanitize_text(chosen.text, max_len=DESCRIPTION_MAX_LEN),
    )


def _merge_reviews(semantic: Reviews | None, positional: Reviews | None, sources: dict[str, str]) -> Reviews:
    semantic = semantic or Reviews()
    positional = positional or Reviews()
    count = semantic.count if semantic.count is not None else positional.count
    average = semantic.average if semantic.average is not None else positional.average
    if count is not None or average is not None:
        from_semantic = semantic.count is not None or semantic.average is not None
        sources["reviews"] = SEMANTIC if from_semantic else POSITIONAL
    return Reviews(count=count, average=clamp_rating(average) if average is not None else None)


def merge_record(
    semantic: Mapping[str, Any],
    positional: Mapping[str, Any],
    *,
    url: str,
    platform: Platform,
    extracted_at: float | None = None,
) -> ProductRecord:
    """Combine two partial records (field name -> value) into a ProductRecord.

    Raises:
        MissingRequiredField: if neither side supplies a non-empty title.
    """
    sources: dict[str, str] = {}

    title = sanitize_text(_pick("title", semantic, positional, sources) or "")
    if not title:
        raise MissingRequiredField(f"no title extracted from {url}", field="title")

    record = ProductRecord(
        title=title,
        url=url,
        platform=platform,
        extracted_at=time.time() if extracted_at is None else extracted_at,
    )

    for name in _TEXT_FIELDS:
        value = _pick(name, semantic, positional, sources)
        if value is not None:
            setattr(record, name, sanitize_text(str(value)) or None)

    for name in _ARRAY_FIELDS:
        value = _pick(name, semantic, positional, sources)
        if value is not None:
            setattr(record, name, _normalize_array(name, value))

    record.price = _merge_price(semantic.get("price"), positional.get("price"), sources)
    record.description = _merge_description(semantic.get("description"), positional.get("description"), sources)
    record.reviews = _merge_reviews(semantic.get("reviews"), positional.get("reviews"), sources)

    record.debug["sources"] = sources
    logger.debug("Merged record for %s: %d field(s) from %s", url, len(sources), sorted(set(sources.values())))
    return record
