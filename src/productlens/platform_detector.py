# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Weighted-signal storefront platform classifier.

Every signal is a declarative entry (name, platform, weight, check) over the
signal readers: hostname substrings, marker globals, element/attribute
presence, linked-data vendor hints and meta-tag patterns. Scores are summed
per platform; the arg-max wins if it reaches the floor, ties are broken by a
fixed priority order, and anything else is ``generic``.

Pure and idempotent: the same snapshot always yields the same result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from productlens import Platform
from productlens.document import DocumentSnapshot
from productlens.signals import (
    body_has_class,
    has_element,
    has_global,
    hostname_contains,
    jsonld_mentions,
    link_href_contains,
    meta_contains,
    script_src_contains,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PlatformSignal:
    """A single signal contributing a weight to one platform."""

    name: str
    platform: Platform
    weight: int
    check: Callable[[DocumentSnapshot], bool]


@dataclass(frozen=True, slots=True)
class PlatformResult:
    """Result of platform classification."""

    platform: Platform
    confidence: float  # 0.0–1.0
    score: int  # raw weighted sum of the winner (0 for generic)
    scores: dict[Platform, int]
    signals: tuple[str, ...]  # names of fired signals


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

SCORE_FLOOR = 40
CONFIDENCE_SCALE = 100

PLATFORM_PRIORITY: tuple[Platform, ...] = (
    Platform.AMAZON,
    Platform.EBAY,
    Platform.ETSY,
    Platform.WALMART,
    Platform.SHOPIFY,
    Platform.WOOCOMMERCE,
)

# ---------------------------------------------------------------------------
# Signal registry
# ---------------------------------------------------------------------------

SIGNALS: tuple[PlatformSignal, ...] = (
    # ---- amazon ----
    PlatformSignal("host_amazon", Platform.AMAZON, 100, lambda s: hostname_contains(s, "amazon.")),
    PlatformSignal("amazon_product_title", Platform.AMAZON, 20, lambda s: has_element(s, "#productTitle")),
    PlatformSignal("amazon_dp_container", Platform.AMAZON, 20, lambda s: has_element(s, "#dp-container, #dp")),
    PlatformSignal(
        "amazon_asin_input", Platform.AMAZON, 20, lambda s: has_element(s, 'input#ASIN, input[name="ASIN"]')
    ),
    PlatformSignal("amazon_feature_bullets", Platform.AMAZON, 10, lambda s: has_element(s, "#feature-bullets")),
    # ---- ebay ----
    PlatformSignal("host_ebay", Platform.EBAY, 100, lambda s: hostname_contains(s, "ebay.")),
    PlatformSignal("ebay_item_title", Platform.EBAY, 20, lambda s: has_element(s, ".x-item-title, #itemTitle")),
    PlatformSignal("ebay_site_name", Platform.EBAY, 20, lambda s: meta_contains(s, "og:site_name", "ebay")),
    PlatformSignal("ebay_static_assets", Platform.EBAY, 15, lambda s: script_src_contains(s, "ebaystatic.com")),
    # ---- etsy ----
    PlatformSignal("host_etsy", Platform.ETSY, 100, lambda s: hostname_contains(s, "etsy.")),
    PlatformSignal(
        "etsy_listing_title", Platform.ETSY, 20, lambda s: has_element(s, "h1[data-buy-box-listing-title]")
    ),
    PlatformSignal("etsy_app_meta", Platform.ETSY, 20, lambda s: meta_contains(s, "al:ios:app_name", "etsy")),
    PlatformSignal("etsy_static_assets", Platform.ETSY, 15, lambda s: link_href_contains(s, "etsystatic.com")),
    # ---- walmart ----
    PlatformSignal("host_walmart", Platform.WALMART, 100, lambda s: hostname_contains(s, "walmart.")),
    PlatformSignal("walmart_site_name", Platform.WALMART, 20, lambda s: meta_contains(s, "og:site_name", "walmart")),
    PlatformSignal("walmart_main_title", Platform.WALMART, 15, lambda s: has_element(s, "h1#main-title")),
    PlatformSignal("walmart_images_cdn", Platform.WALMART, 15, lambda s: jsonld_mentions(s, "walmartimages.com")),
    # ---- shopify ----
    PlatformSignal("shopify_global", Platform.SHOPIFY, 50, lambda s: has_global(s, "Shopify")),
    PlatformSignal(
        "shopify_digital_wallet", Platform.SHOPIFY, 40, lambda s: has_element(s, 'meta[name="shopify-digital-wallet"]')
    ),
    PlatformSignal("shopify_cdn_script", Platform.SHOPIFY, 30, lambda s: script_src_contains(s, "cdn.shopify.com")),
    PlatformSignal("shopify_cdn_link", Platform.SHOPIFY, 20, lambda s: link_href_contains(s, "cdn.shopify.com")),
    PlatformSignal("shopify_jsonld_vendor", Platform.SHOPIFY, 20, lambda s: jsonld_mentions(s, "myshopify.com")),
    PlatformSignal(
        "shopify_product_form", Platform.SHOPIFY, 10, lambda s: has_element(s, "form[action*='/cart/add']")
    ),
    # ---- woocommerce ----
    PlatformSignal("woo_body_class", Platform.WOOCOMMERCE, 40, lambda s: body_has_class(s, "woocommerce")),
    PlatformSignal("woo_generator", Platform.WOOCOMMERCE, 40, lambda s: meta_contains(s, "generator", "woocommerce")),
    PlatformSignal("woo_class", Platform.WOOCOMMERCE, 30, lambda s: has_element(s, '[class*="woocommerce"]')),
    PlatformSignal("woo_cart_params", Platform.WOOCOMMERCE, 30, lambda s: has_global(s, "wc_add_to_cart_params")),
    PlatformSignal("woo_plugin_assets", Platform.WOOCOMMERCE, 20, lambda s: script_src_contains(s, "/woocommerce/")),
)


# ---------------------------------------------------------------------------
# Classification (pure function)
# ---------------------------------------------------------------------------


def detect_platform(snapshot: DocumentSnapshot, signals: tuple[PlatformSignal, ...] = SIGNALS) -> PlatformResult:
    """Score every platform and return the winner, or ``generic`` below the floor."""
    scores: dict[Platform, int] = {}
    fired: list[str] = []

    for sig in signals:
        if sig.check(snapshot):
            fired.append(sig.name)
            scores[sig.platform] = scores.get(sig.platform, 0) + sig.weight

    if not scores:
        return PlatformResult(Platform.GENERIC, 0.0, 0, {}, ())

    best = max(scores.values())
    if best < SCORE_FLOOR:
        return PlatformResult(Platform.GENERIC, 0.0, 0, scores, tuple(fired))

    # Priority order decides between equal top scores.
    winner = next(p for p in PLATFORM_PRIORITY if scores.get(p) == best)
    confidence = min(1.0, best / CONFIDENCE_SCALE)

    logger.debug("Platform %s (score=%d, signals=%s) for %s", winner, best, fired, snapshot.url)
    return PlatformResult(winner, confidence, best, scores, tuple(fired))
