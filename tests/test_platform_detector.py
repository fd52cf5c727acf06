# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for productlens.platform_detector: weighted signal scoring."""

from __future__ import annotations

import pytest

from productlens import Platform
from productlens.platform_detector import (
    PLATFORM_PRIORITY,
    SCORE_FLOOR,
    SIGNALS,
    PlatformSignal,
    detect_platform,
)
from tests._helpers import AMAZON_BODY, jsonld, page


class TestHostnameSignals:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.amazon.com/dp/B0TEST", Platform.AMAZON),
            ("https://www.amazon.co.jp/dp/B0TEST", Platform.AMAZON),
            ("https://www.ebay.com/itm/1234", Platform.EBAY),
            ("https://www.etsy.com/listing/1/mug", Platform.ETSY),
            ("https://www.walmart.com/ip/5", Platform.WALMART),
        ],
    )
    def test_marketplace_host(self, url, expected):
        result = detect_platform(page("<h1>x</h1>", url=url))
        assert result.platform == expected
        assert result.confidence == 1.0

    def test_marketplace_host_beats_cart_markup(self):
        snap = page('<div class="woocommerce">x</div>', url="https://www.amazon.com/dp/B0TEST")
        assert detect_platform(snap).platform == Platform.AMAZON


class TestSelfHostedCarts:
    def test_shopify_global_and_cdn(self):
        snap = page(
            '<script src="https://cdn.shopify.com/s/files/app.js"></script>',
            url="https://coolstore.example.com/products/tee",
            globals={"Shopify"},
        )
        result = detect_platform(snap)
        assert result.platform == Platform.SHOPIFY
        assert result.score == 80
        assert result.confidence == pytest.approx(0.8)
        assert "shopify_global" in result.signals
        assert "shopify_cdn_script" in result.signals

    def test_shopify_inline_global(self):
        snap = page("<script>window.Shopify = window.Shopify || {};</script>")
        assert detect_platform(snap).platform == Platform.SHOPIFY

    def test_woocommerce_body_class_and_generator(self):
        snap = page(
            "<p>x</p>",
            head='<meta name="generator" content="WooCommerce 8.5.1">',
            body_attrs='class="product-template-default single-product woocommerce"',
        )
        result = detect_platform(snap)
        assert result.platform == Platform.WOOCOMMERCE
        assert result.score >= 80

    def test_amazon_markup_without_host(self):
        result = detect_platform(page(AMAZON_BODY, url="https://mirror.example.com/item"))
        assert result.platform == Platform.AMAZON
        assert result.score == 70


class TestGenericFallback:
    def test_no_signals(self):
        result = detect_platform(page("<h1>Plain page</h1>"))
        assert result.platform == Platform.GENERIC
        assert result.confidence == 0.0
        assert result.score == 0
        assert result.signals == ()

    def test_below_floor(self):
        snap = page('<form action="/cart/add"></form>' + jsonld({"url": "https://x.myshopify.com"}))
        result = detect_platform(snap)
        assert result.scores[Platform.SHOPIFY] == 30
        assert result.scores[Platform.SHOPIFY] < SCORE_FLOOR
        assert result.platform == Platform.GENERIC

    def test_idempotent(self):
        snap = page("<script>var Shopify = {};</script>")
        assert detect_platform(snap) == detect_platform(snap)


class TestScoring:
    def test_tie_broken_by_priority(self):
        signals = (
            PlatformSignal("a", Platform.WOOCOMMERCE, 50, lambda s: True),
            PlatformSignal("b", Platform.SHOPIFY, 50, lambda s: True),
        )
        assert detect_platform(page(), signals).platform == Platform.SHOPIFY

    def test_confidence_capped(self):
        signals = (PlatformSignal("big", Platform.ETSY, 250, lambda s: True),)
        result = detect_platform(page(), signals)
        assert result.confidence == 1.0
        assert result.score == 250

    def test_signal_table_is_well_formed(self):
        names = [s.name for s in SIGNALS]
        assert len(names) == len(set(names))
        assert all(s.weight > 0 for s in SIGNALS)
        assert {s.platform for s in SIGNALS} == set(PLATFORM_PRIORITY)
