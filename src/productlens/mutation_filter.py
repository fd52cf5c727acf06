# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document-mutation significance filter.

Leaf module. The browser side reports coalesced mutation batches as
``MutationRecord`` objects (the target's ancestor path plus the markup that
was added); this module decides whether a batch looks like product content
changing in the main region (variant swap, client-side route render) as
opposed to ads, carousels and chat widgets ticking over.

Thresholds live in ``MutationPolicy`` and can be tuned or switched off.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from productlens.config import MutationPolicy

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MutationRecord:
    """One child-list mutation.

    ``target_path`` lists node descriptors from the mutated node up to
    ``body``, each shaped like ``tag#id.class1.class2[role=x]``.
    """

    target_path: tuple[str, ...]
    added_html: str = ""

    @classmethod
    def from_dict(cls, raw: dict) -> MutationRecord:
        path = raw.get("path") or raw.get("target_path") or ()
        added = raw.get("added") or raw.get("added_html") or ""
        return cls(target_path=tuple(str(p) for p in path), added_html=str(added))


@dataclass
class MutationVerdict:
    """Result of evaluating one mutation batch."""

    significant: bool
    reasons: list[str] = field(default_factory=list)
    region_records: int = 0
    markers: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_MAIN_REGION_RE = re.compile(
    r"^(?:main|article)\b|\[role=main\]|#(?:content|main|main-?content)\b|[.#][\w-]*product",
    re.IGNORECASE,
)

_PRODUCT_MARKERS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("price", re.compile(r"itemprop=[\"']price|class=[\"'][^\"']*price|[$£€¥₹₩]\s?\d", re.IGNORECASE)),
    ("add_to_cart", re.compile(r"add[\s_-]?to[\s_-]?(?:cart|bag|basket)", re.IGNORECASE)),
    (
        "product_title",
        re.compile(r"id=[\"']productTitle|class=[\"'][^\"']*product[-_]?(?:title|name)", re.IGNORECASE),
    ),
    (
        "itemprop",
        re.compile(r"itemtype=[\"'][^\"']*schema\.org/Product|itemprop=[\"'](?:name|sku|brand)", re.IGNORECASE),
    ),
    ("json_ld", re.compile(r"application/ld\+json", re.IGNORECASE)),
)


def in_main_region(record: MutationRecord) -> bool:
    return any(_MAIN_REGION_RE.search(node) for node in record.target_path)


def product_markers(html: str) -> set[str]:
    """Names of the product-shaped markers present in ``html``."""
    return {name for name, pattern in _PRODUCT_MARKERS if pattern.search(html)}


# ---------------------------------------------------------------------------
# Evaluation (pure function)
# ---------------------------------------------------------------------------


def evaluate_mutations(batch: Sequence[MutationRecord], policy: MutationPolicy | None = None) -> MutationVerdict:
    """Decide whether a mutation batch warrants re-analysis."""
    policy = policy or MutationPolicy()
    if not batch:
        return MutationVerdict(significant=False, reasons=["empty batch"])

    region = [r for r in batch if in_main_region(r)]
    scanned = region if policy.require_main_region else list(batch)

    markers: set[str] = set()
    for record in scanned:
        if record.added_html:
            markers |= product_markers(record.added_html)

    reasons: list[str] = []
    significant = True

    if policy.require_main_region:
        if len(region) < policy.min_records:
            significant = False
            reasons.append(f"{len(region)} record(s) in main content, need {policy.min_records}")
        else:
            reasons.append(f"{len(region)} record(s) in main content")

    if policy.require_product_markers:
        if len(markers) < policy.min_product_markers:
            significant = False
            reasons.append(f"{len(markers)} product marker(s), need {policy.min_product_markers}")
        else:
            reasons.append("product markers: " + ", ".join(sorted(markers)))

    verdict = MutationVerdict(
        significant=significant,
        reasons=reasons,
        region_records=len(region),
        markers=tuple(sorted(markers)),
    )
    logger.debug("Mutation batch of %d: significant=%s (%s)", len(batch), significant, "; ".join(reasons))
    return verdict
