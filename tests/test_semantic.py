# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for productlens.semantic: linked-data, microdata and social/meta channels."""

from __future__ import annotations

import pytest

from productlens import CHANNEL_CONFIDENCE, Channel, Price
from productlens import semantic as semantic_mod
from productlens.errors import ExtractorFault, MalformedStructuredData
from productlens.semantic import (
    decode_jsonld,
    extract_semantic,
    parse_json_ld,
    parse_microdata,
    parse_social_meta,
)
from tests._helpers import MOUSE_PRODUCT, jsonld, meta, page

# ---------------------------------------------------------------------------
# Tolerant decode
# ---------------------------------------------------------------------------


class TestDecodeJsonLd:
    def test_plain(self):
        assert decode_jsonld('{"a": 1}') == {"a": 1}

    def test_comment_wrapper(self):
        assert decode_jsonld('<!-- {"a": 1} -->') == {"a": 1}

    def test_cdata_wrapper(self):
        assert decode_jsonld('//<![CDATA[\n{"a": 1}\n//]]>') == {"a": 1}

    def test_raw_newline_in_string(self):
        assert decode_jsonld('{"d": "line1\nline2"}') == {"d": "line1\nline2"}

    def test_trailing_comma(self):
        assert decode_jsonld('{"a": [1, 2,],}') == {"a": [1, 2]}

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            decode_jsonld("{not json")

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            decode_jsonld("   ")


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------


class TestJsonLd:
    def test_basic_product(self):
        result = parse_json_ld(page(jsonld(MOUSE_PRODUCT)))
        assert len(result.candidates) == 1
        fields = result.candidates[0].fields
        assert fields["title"] == "Wireless Mouse"
        assert fields["price"].amount == pytest.approx(19.99)
        assert fields["price"].currency == "USD"

    def test_graph_and_list_containers(self):
        data = {"@context": "https://schema.org", "@graph": [{"@type": "WebPage"}, {"@type": "Product", "name": "A"}]}
        assert parse_json_ld(page(jsonld(data))).candidates[0].title == "A"
        assert parse_json_ld(page(jsonld([{"@type": "Product", "name": "B"}]))).candidates[0].title == "B"

    def test_main_entity(self):
        data = {"@type": "WebPage", "mainEntity": {"@type": "Product", "name": "C"}}
        assert parse_json_ld(page(jsonld(data))).candidates[0].title == "C"

    def test_type_list_and_full_iri(self):
        data = {"@type": ["Thing", "https://schema.org/Product"], "name": "D"}
        assert parse_json_ld(page(jsonld(data))).candidates[0].title == "D"

    def test_item_list_not_searched(self):
        data = {"@type": "ItemList", "itemListElement": [{"@type": "Product", "name": "E"}]}
        assert parse_json_ld(page(jsonld(data))).candidates == []

    def test_malformed_block_is_fault_not_error(self):
        snap = page('<script type="application/ld+json">{broken</script>' + jsonld(MOUSE_PRODUCT))
        result = parse_json_ld(snap)
        assert len(result.faults) == 1
        assert result.faults[0].block_index == 0
        assert result.candidates[0].title == "Wireless Mouse"

    def test_fields(self):
        data = {
            "@type": "Product",
            "name": "Desk Lamp",
            "description": "Bright &amp; warm",
            "image": ["/img/lamp.jpg", {"url": "https://cdn.example.com/lamp2.jpg"}],
            "brand": {"@type": "Brand", "name": "Lumo"},
            "sku": "L-1",
            "gtin13": "0123456789012",
            "mpn": "MPN1",
            "offers": {
                "@type": "Offer",
                "price": "49.00",
                "priceCurrency": "EUR",
                "availability": "https://schema.org/InStock",
            },
            "aggregateRating": {"@type": "AggregateRating", "ratingValue": "9", "bestRating": "10", "reviewCount": 12},
        }
        fields = parse_json_ld(page(jsonld(data), url="https://shop.example.com/p/lamp")).candidates[0].fields
        assert fields["brand"] == "Lumo"
        assert fields["description"].text == "Bright & warm"
        assert [i.src for i in fields["images"]] == [
            "https://shop.example.com/img/lamp.jpg",
            "https://cdn.example.com/lamp2.jpg",
        ]
        assert fields["sku"] == "L-1"
        assert fields["gtin"] == "0123456789012"
        assert fields["mpn"] == "MPN1"
        assert fields["price"] == Price(amount=49.0, currency="EUR")
        assert fields["availability"] == "InStock"
        assert fields["reviews"].count == 12
        assert fields["reviews"].average == pytest.approx(4.5)

    def test_first_offer_wins_with_same_currency_range(self):
        data = {
            "@type": "Product",
            "name": "Tee",
            "offers": [
                {"@type": "Offer", "price": 25, "priceCurrency": "USD"},
                {"@type": "Offer", "price": 20, "priceCurrency": "USD"},
                {"@type": "Offer", "price": 30, "priceCurrency": "USD"},
            ],
        }
        price = parse_json_ld(page(jsonld(data))).candidates[0].fields["price"]
        assert price.amount == 25
        assert (price.low, price.high) == (20, 30)

    def test_mixed_currencies_no_range(self):
        data = {
            "@type": "Product",
            "name": "Tee",
            "offers": [
                {"@type": "Offer", "price": 25, "priceCurrency": "USD"},
                {"@type": "Offer", "price": 20, "priceCurrency": "EUR"},
            ],
        }
        price = parse_json_ld(page(jsonld(data))).candidates[0].fields["price"]
        assert price.amount == 25
        assert price.currency == "USD"
        assert price.low is None

    def test_aggregate_offer(self):
        data = {
            "@type": "Product",
            "name": "Sofa",
            "offers": {"@type": "AggregateOffer", "lowPrice": "499", "highPrice": "899", "priceCurrency": "GBP"},
        }
        price = parse_json_ld(page(jsonld(data))).candidates[0].fields["price"]
        assert price.amount == 499
        assert (price.low, price.high) == (499, 899)
        assert price.currency == "GBP"

    def test_price_specification(self):
        data = {
            "@type": "Product",
            "name": "Kettle",
            "offers": {"@type": "Offer", "priceSpecification": {"price": "35.5", "priceCurrency": "EUR"}},
        }
        price = parse_json_ld(page(jsonld(data))).candidates[0].fields["price"]
        assert price == Price(amount=35.5, currency="EUR")

    def test_product_group_variant_offers(self):
        data = {
            "@type": "ProductGroup",
            "name": "Sneaker",
            "hasVariant": [{"@type": "Product", "offers": {"@type": "Offer", "price": 80, "priceCurrency": "USD"}}],
        }
        assert parse_json_ld(page(jsonld(data))).candidates[0].fields["price"].amount == 80

    def test_breadcrumbs(self):
        crumbs = {
            "@type": "BreadcrumbList",
            "itemListElement": [
                {"@type": "ListItem", "position": 2, "name": "Mice"},
                {"@type": "ListItem", "position": 1, "item": {"name": "Electronics"}},
            ],
        }
        result = parse_json_ld(page(jsonld(crumbs) + jsonld(MOUSE_PRODUCT)))
        assert result.category_path == ["Electronics", "Mice"]


# ---------------------------------------------------------------------------
# Microdata
# ---------------------------------------------------------------------------

_MICRODATA = """
<div itemscope itemtype="https://schema.org/Product">
  <h1 itemprop="name">Trail Backpack</h1>
  <img itemprop="image" src="/img/pack.jpg" alt="Backpack">
  <div itemprop="brand" itemscope itemtype="https://schema.org/Brand"><span itemprop="name">Summit</span></div>
  <meta itemprop="sku" content="TB-30">
  <div itemprop="offers" itemscope itemtype="https://schema.org/Offer">
    <span itemprop="price" content="129.00">$129</span>
    <meta itemprop="priceCurrency" content="USD">
    <link itemprop="availability" href="https://schema.org/OutOfStock">
  </div>
  <div itemprop="aggregateRating" itemscope itemtype="https://schema.org/AggregateRating">
    <span itemprop="ratingValue">4.2</span> from <span itemprop="reviewCount">88</span> reviews
  </div>
  <p itemprop="description">Thirty litres.</p>
</div>
"""


class TestMicrodata:
    def test_product_scope(self):
        result = parse_microdata(page(_MICRODATA, url="https://outdoor.example.com/packs/trail"))
        assert len(result.candidates) == 1
        c = result.candidates[0]
        assert c.channel == Channel.MICRODATA
        f = c.fields
        assert f["title"] == "Trail Backpack"
        assert f["brand"] == "Summit"
        assert f["sku"] == "TB-30"
        assert f["price"] == Price(amount=129.0, currency="USD")
        assert f["availability"] == "OutOfStock"
        assert f["reviews"].count == 88
        assert f["reviews"].average == pytest.approx(4.2)
        assert f["images"][0].src == "https://outdoor.example.com/img/pack.jpg"
        assert f["description"].text == "Thirty litres."

    def test_nested_scope_name_not_taken_as_title(self):
        markup = (
            '<div itemscope itemtype="https://schema.org/Product">'
            '<div itemprop="brand" itemscope itemtype="https://schema.org/Brand"><span itemprop="name">B</span></div>'
            '<span itemprop="name">Real Name</span></div>'
        )
        assert parse_microdata(page(markup)).candidates[0].title == "Real Name"

    def test_scope_without_name_or_price_ignored(self):
        markup = '<div itemscope itemtype="https://schema.org/Product"><meta itemprop="sku" content="X"></div>'
        assert parse_microdata(page(markup)).candidates == []


# ---------------------------------------------------------------------------
# Social / meta
# ---------------------------------------------------------------------------


class TestSocialMeta:
    def test_product_tags(self):
        head = (
            meta("og:type", "product")
            + meta("og:title", "Ceramic Mug")
            + meta("og:description", "Holds 350ml")
            + meta("og:image", "/mug.jpg")
            + meta("product:price:amount", "14.00")
            + meta("product:price:currency", "cad")
            + meta("product:brand", "Kiln")
            + meta("product:retailer_item_id", "MUG-7")
        )
        result = parse_social_meta(page(head=head, url="https://kiln.example.com/products/mug"))
        fields = result.candidates[0].fields
        assert fields["title"] == "Ceramic Mug"
        assert fields["description"].text == "Holds 350ml"
        assert fields["price"] == Price(amount=14.0, currency="CAD")
        assert fields["brand"] == "Kiln"
        assert fields["sku"] == "MUG-7"
        assert fields["images"][0].src == "https://kiln.example.com/mug.jpg"

    def test_price_tag_without_og_type(self):
        head = meta("og:title", "Mug") + meta("og:price:amount", "9")
        assert parse_social_meta(page(head=head)).has(Channel.SOCIAL_META)

    def test_generic_tags_alone_produce_nothing(self):
        head = meta("og:title", "About us") + meta("og:type", "website") + '<meta name="description" content="x">'
        assert parse_social_meta(page(head=head)).candidates == []


# ---------------------------------------------------------------------------
# Selection across channels
# ---------------------------------------------------------------------------


class TestSelection:
    def _all_channels(self):
        head = meta("og:type", "product") + meta("og:title", "Social Title") + meta("product:brand", "SocialBrand")
        body = (
            jsonld({"@type": "Product", "name": "LD Title", "offers": {"price": 10, "priceCurrency": "USD"}})
            + '<div itemscope itemtype="http://schema.org/Product"><span itemprop="name">MD Title</span>'
            + '<meta itemprop="mpn" content="MD-MPN"></div>'
        )
        return extract_semantic(page(body, head=head))

    def test_confidences_fixed_and_ordered(self):
        assert CHANNEL_CONFIDENCE[Channel.JSON_LD] >= CHANNEL_CONFIDENCE[Channel.MICRODATA]
        assert CHANNEL_CONFIDENCE[Channel.MICRODATA] >= CHANNEL_CONFIDENCE[Channel.SOCIAL_META]
        result = self._all_channels()
        assert [c.channel for c in result.ordered] == [Channel.JSON_LD, Channel.MICRODATA, Channel.SOCIAL_META]
        assert [c.confidence for c in result.ordered] == [0.95, 0.85, 0.70]

    def test_field_level_first_non_empty_wins(self):
        fields, sources = self._all_channels().select()
        assert fields["title"] == "LD Title"
        assert sources["title"] == Channel.JSON_LD
        assert fields["mpn"] == "MD-MPN"
        assert sources["mpn"] == Channel.MICRODATA
        assert fields["brand"] == "SocialBrand"
        assert sources["brand"] == Channel.SOCIAL_META

    def test_primary_is_highest_with_title(self):
        assert self._all_channels().primary.channel == Channel.JSON_LD

    def test_no_candidates(self):
        result = extract_semantic(page("<p>nothing</p>"))
        assert result.candidates == []
        assert result.primary is None
        assert result.select() == ({}, {})


# ---------------------------------------------------------------------------
# Fault isolation
# ---------------------------------------------------------------------------

_GOOD_MUG_MICRODATA = (
    '<div itemscope itemtype="https://schema.org/Product"><span itemprop="name">Good Mug</span></div>'
)
_OVERFLOW_BLOCK = (
    '<script type="application/ld+json">'
    '{"@type":"Product","name":"Bad","aggregateRating":{"reviewCount":1e400,"ratingValue":4}}'
    "</script>"
)


class TestFaultIsolation:
    def test_overflowing_count_dropped(self):
        result = parse_json_ld(page(_OVERFLOW_BLOCK))
        assert result.faults == []
        (candidate,) = result.candidates
        assert candidate.title == "Bad"
        assert candidate.fields["reviews"].count is None
        assert candidate.fields["reviews"].average == pytest.approx(4.0)

    def test_failing_block_skipped(self, monkeypatch):
        node_fields = semantic_mod._node_fields

        def fragile(node, snapshot):
            if node.name == "Bad":
                raise OverflowError("cannot convert float infinity to integer")
            return node_fields(node, snapshot)

        monkeypatch.setattr(semantic_mod, "_node_fields", fragile)
        bad = jsonld({"@type": "Product", "name": "Bad"})
        result = parse_json_ld(page(bad + jsonld(MOUSE_PRODUCT)))
        assert [c.title for c in result.candidates] == ["Wireless Mouse"]
        (fault,) = result.faults
        assert isinstance(fault, MalformedStructuredData)
        assert fault.block_index == 0
        assert "OverflowError" in str(fault)

    def test_failing_channel_skipped(self, monkeypatch):
        def broken(snapshot):
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(semantic_mod, "parse_json_ld", broken)
        result = extract_semantic(page(jsonld(MOUSE_PRODUCT) + _GOOD_MUG_MICRODATA))
        assert [c.channel for c in result.candidates] == [Channel.MICRODATA]
        assert result.primary.title == "Good Mug"
        (fault,) = result.faults
        assert isinstance(fault, ExtractorFault)
        assert fault.extractor == "semantic/json_ld"
        assert str(fault) == "semantic/json_ld failed: RuntimeError: parser exploded"
