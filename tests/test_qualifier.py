# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for productlens.qualifier: the ordered qualification ladder."""

from __future__ import annotations

import pytest

from productlens.qualifier import qualify
from tests._helpers import MOUSE_PRODUCT, jsonld, meta, page


class TestSkipList:
    @pytest.mark.parametrize(
        "path",
        ["/login", "/account/signin", "/sign-in/", "/register", "/signup", "/sign-up", "/error", "/404"],
    )
    def test_auth_and_error_paths_rejected(self, path):
        # Structured data on the page does not override the skip list.
        q = qualify(page(jsonld(MOUSE_PRODUCT), url=f"https://shop.example.com{path}"))
        assert not q.accepted
        assert q.layer == "skip_url"
        assert q.confidence == 1.0

    def test_skip_only_at_path_end(self):
        q = qualify(page(url="https://shop.example.com/login/help-center-article"))
        assert q.layer != "skip_url"


class TestStructuredLayers:
    def test_linked_data(self):
        q = qualify(page(jsonld(MOUSE_PRODUCT)))
        assert q.accepted
        assert q.layer == "linked_data"
        assert q.confidence == 0.95

    def test_microdata(self):
        markup = '<div itemscope itemtype="https://schema.org/Product"><h1 itemprop="name">Cap</h1></div>'
        q = qualify(page(markup))
        assert (q.accepted, q.layer, q.confidence) == (True, "microdata", 0.85)

    def test_social_meta(self):
        q = qualify(page(head=meta("og:type", "product") + meta("og:title", "Cap")))
        assert (q.accepted, q.layer, q.confidence) == (True, "social_meta", 0.70)


class TestUrlShapes:
    @pytest.mark.parametrize(
        "path",
        ["/dp/B0ABC12345", "/gp/product/B0ABC", "/product/mug", "/products/mug", "/listing/77/mug", "/itm/123"],
    )
    def test_strong_patterns(self, path):
        q = qualify(page("<p>x</p>", url=f"https://shop.example.com{path}"))
        assert (q.accepted, q.layer, q.confidence) == (True, "url_shape", 0.6)

    def test_weak_pattern(self):
        q = qualify(page("<p>x</p>", url="https://shop.example.com/p/12345"))
        assert (q.accepted, q.layer, q.confidence) == (True, "url_shape", 0.5)


class TestContentLayers:
    def test_price_and_purchase_phrase(self):
        q = qualify(page("<p>Only $24.00</p><button>Add to Cart</button>", url="https://a.example.com/mug"))
        assert (q.accepted, q.layer, q.confidence) == (True, "content", 0.4)

    def test_price_without_purchase_phrase_falls_through(self):
        q = qualify(page("<p>Only $24.00</p>", url="https://a.example.com/mug"))
        assert not q.accepted

    def test_legacy_long_text(self):
        body = "".join(f"<p>{'Lorem ipsum dolor sit amet. ' * 8}</p>" for _ in range(6))
        q = qualify(page(body, url="https://a.example.com/story"))
        assert (q.accepted, q.layer, q.confidence) == (True, "legacy", 0.3)

    def test_final_reject(self):
        q = qualify(page("<p>Welcome</p>", url="https://a.example.com/"))
        assert not q.accepted
        assert q.confidence == 0.0
        assert q.reason == "No product signals detected"

    def test_reason_preserved(self):
        q = qualify(page(jsonld(MOUSE_PRODUCT)))
        assert q.reason == "Linked-data Product found"
