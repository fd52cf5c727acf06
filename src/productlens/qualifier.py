# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page qualifier: is this document a product listing worth extracting?

An ordered ladder of checks, evaluated top to bottom; the first layer that
reaches a verdict decides, and its reason string is kept for telemetry.

  1. skip_url     – auth/error paths                      reject  1.0
  2. linked_data  – JSON-LD Product                        accept 0.95
     microdata    – inline Product scope                   accept 0.85
  3. social_meta  – og/product price, brand or type tags   accept 0.70
  4. url_shape    – /dp/, /product/, /item/, ...           accept 0.6 (strong) / 0.5 (weak)
  5. content      – currency token + purchase phrase       accept 0.4
  6. legacy       – long text with several paragraphs      accept 0.3, else reject
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from productlens import CHANNEL_CONFIDENCE, Channel
from productlens.document import DocumentSnapshot
from productlens.semantic import SemanticParse, extract_semantic
from productlens.signals import paragraph_count, text_length

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Qualification:
    """Verdict of the qualifier ladder."""

    accepted: bool
    layer: str  # name of the deciding layer
    reason: str
    confidence: float


# ---------------------------------------------------------------------------
# Layer tables
# ---------------------------------------------------------------------------

SKIP_PATH_RE = re.compile(
    r"/(?:login|log-in|signin|sign-in|register|signup|sign-up|error|404)/?$",
    re.IGNORECASE,
)

STRONG_PATH_RE = re.compile(
    r"/dp/[A-Z0-9]+|/gp/product/|/products?/|/listing/|/item/|/itm/|/ip/",
    re.IGNORECASE,
)
WEAK_PATH_RE = re.compile(r"/p/", re.IGNORECASE)

CURRENCY_TOKEN_RE = re.compile(r"[$£€¥₹₩]\s?\d|\b(?:USD|EUR|GBP)\s?\d")
PURCHASE_PHRASE_RE = re.compile(r"add to (?:cart|bag|basket)|buy (?:it )?now|purchase", re.IGNORECASE)

STRONG_PATH_CONFIDENCE = 0.6
WEAK_PATH_CONFIDENCE = 0.5
CONTENT_CONFIDENCE = 0.4
LEGACY_CONFIDENCE = 0.3

LEGACY_MIN_TEXT = 1000
LEGACY_MIN_PARAGRAPHS = 5


# ---------------------------------------------------------------------------
# Ladder
# ---------------------------------------------------------------------------


def qualify(snapshot: DocumentSnapshot, semantic: SemanticParse | None = None) -> Qualification:
    """Run the qualifier ladder. ``semantic`` may be passed in to avoid re-parsing."""
    path = snapshot.pathname

    if SKIP_PATH_RE.search(path):
        return _verdict(snapshot, False, "skip_url", "Skipped URL pattern (auth/error page)", 1.0)

    if semantic is None:
        semantic = extract_semantic(snapshot)

    if semantic.has(Channel.JSON_LD):
        return _verdict(
            snapshot, True, "linked_data", "Linked-data Product found", CHANNEL_CONFIDENCE[Channel.JSON_LD]
        )
    if semantic.has(Channel.MICRODATA):
        return _verdict(
            snapshot, True, "microdata", "Inline Product markup found", CHANNEL_CONFIDENCE[Channel.MICRODATA]
        )
    if semantic.has(Channel.SOCIAL_META):
        return _verdict(
            snapshot, True, "social_meta", "Product social/meta tags found", CHANNEL_CONFIDENCE[Channel.SOCIAL_META]
        )

    if STRONG_PATH_RE.search(path):
        return _verdict(snapshot, True, "url_shape", "Product URL pattern", STRONG_PATH_CONFIDENCE)
    if WEAK_PATH_RE.search(path):
        return _verdict(snapshot, True, "url_shape", "Weak product URL pattern", WEAK_PATH_CONFIDENCE)

    text = snapshot.visible_text
    if CURRENCY_TOKEN_RE.search(text) and PURCHASE_PHRASE_RE.search(text):
        return _verdict(snapshot, True, "content", "Price and purchase action in content", CONTENT_CONFIDENCE)

    if text_length(snapshot) >= LEGACY_MIN_TEXT and paragraph_count(snapshot) >= LEGACY_MIN_PARAGRAPHS:
        return _verdict(snapshot, True, "legacy", "Substantial text content", LEGACY_CONFIDENCE)

    return _verdict(snapshot, False, "legacy", "No product signals detected", 0.0)


def _verdict(snapshot: DocumentSnapshot, accepted: bool, layer: str, reason: str, confidence: float) -> Qualification:
    logger.debug(
        "Qualifier %s at %s (%.2f): %s for %s",
        "accepted" if accepted else "rejected",
        layer,
        confidence,
        reason,
        snapshot.url,
    )
    return Qualification(accepted=accepted, layer=layer, reason=reason, confidence=confidence)
