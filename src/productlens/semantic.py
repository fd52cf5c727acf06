# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Semantic metadata extraction: JSON-LD, microdata, social/meta tags.

Each channel yields zero or more SemanticCandidate objects at a fixed
confidence (JSON-LD 0.95 > microdata 0.85 > social/meta 0.70). Selection is
field-level: candidates are ordered by confidence and each field takes the
first non-empty value.

JSON-LD is decoded tolerantly, then Product nodes are validated with
pydantic models. One malformed block never aborts the others; it is
reported as a MalformedStructuredData fault on the parse result.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from lxml.html import HtmlElement
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from productlens import CHANNEL_CONFIDENCE, Channel, Description, Price, ProductImage, Reviews
from productlens.document import DocumentSnapshot, element_text
from productlens.errors import ExtractorFault, MalformedStructuredData, ProductLensError
from productlens.normalize import (
    is_empty,
    normalize_currency,
    parse_amount,
    parse_count,
    parse_price_text,
    parse_rating,
    short_availability,
)
from productlens.sanitizer import DESCRIPTION_MAX_LEN, unescape_text
from productlens.signals import jsonld_blocks

logger = logging.getLogger(__name__)

MAX_IMAGES = 12

_PRODUCT_TYPES = ("Product", "IndividualProduct", "ProductModel", "ProductGroup")
_CONTAINER_KEYS = ("@graph", "mainEntity", "mainEntityOfPage")
_GTIN_KEYS = ("gtin", "gtin13", "gtin14", "gtin12", "gtin8")

# --- Helpers ---


def _short_type(t: str) -> str:
    """``"http://schema.org/Product"`` / ``"schema:Product"`` -> ``"Product"``."""
    return re.split(r"[/:#]", t.strip())[-1]


def _has_type(node: dict, type_names: tuple[str, ...]) -> bool:
    schema_type = node.get("@type", "")
    types = schema_type if isinstance(schema_type, list) else [schema_type]
    return any(isinstance(t, str) and _short_type(t) in type_names for t in types)


def _first_scalar(v: Any) -> Any:
    while isinstance(v, list):
        if not v:
            return None
        v = v[0]
    if isinstance(v, dict):
        for key in ("name", "@value", "value", "@id"):
            if v.get(key) not in (None, ""):
                return v[key]
        return None
    return v


def _as_text(v: Any) -> str | None:
    v = _first_scalar(v)
    if v is None or isinstance(v, bool):
        return None
    text = unescape_text(str(v))
    return text or None


def _is_image_ref(u: Any) -> bool:
    """Absolute, protocol-relative or root-relative reference; resolved later against the page URL."""
    return isinstance(u, str) and len(u) <= 2048 and u.startswith(("http://", "https://", "/"))


# --- JSON-LD: tolerant decode ---

_COMMENT_WRAPPER_RE = re.compile(r"^\s*(?:<!--|//\s*<!\[CDATA\[|<!\[CDATA\[)|(?:-->|//\s*\]\]>|\]\]>)\s*$")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def decode_jsonld(text: str) -> Any:
    """Decode one linked-data block, tolerating HTML comment/CDATA wrappers,
    raw control characters in strings, and trailing commas.

    Raises:
        ValueError: if the block is still not valid JSON after cleanup.
    """
    cleaned = _COMMENT_WRAPPER_RE.sub("", text).strip().rstrip(";")
    if not cleaned:
        raise ValueError("empty linked-data block")
    try:
        return json.loads(cleaned, strict=False)
    except json.JSONDecodeError:
        return json.loads(_TRAILING_COMMA_RE.sub(r"\1", cleaned), strict=False)


def _find_nodes(data: Any, type_names: tuple[str, ...], max_depth: int = 8) -> list[dict]:
    """All objects with a matching @type (handles @graph, arrays, mainEntity, list @type)."""
    if max_depth <= 0:
        return []
    if isinstance(data, list):
        found: list[dict] = []
        for item in data:
            found.extend(_find_nodes(item, type_names, max_depth - 1))
        return found
    if not isinstance(data, dict):
        return []
    if _has_type(data, type_names):
        return [data]
    found = []
    for key in _CONTAINER_KEYS:
        if key in data:
            found.extend(_find_nodes(data[key], type_names, max_depth - 1))
    return found


# --- JSON-LD: validation models ---


class _Offer(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str | None = Field(None, alias="@type")
    price: float | None = None
    low_price: float | None = Field(None, alias="lowPrice")
    high_price: float | None = Field(None, alias="highPrice")
    currency: str | None = Field(None, alias="priceCurrency")
    availability: str | None = None
    offers: list[_Offer] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_price_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        spec = data.get("priceSpecification")
        if isinstance(spec, list):
            spec = spec[0] if spec else None
        if isinstance(spec, dict) and data.get("price") in (None, ""):
            currency = data.get("priceCurrency") or spec.get("priceCurrency")
            data = {**data, "price": spec.get("price"), "priceCurrency": currency}
        # "price": "$19.99" without priceCurrency
        price = data.get("price")
        if isinstance(price, str) and not data.get("priceCurrency"):
            currency = parse_price_text(price).currency
            if currency:
                data = {**data, "priceCurrency": currency}
        return data

    @field_validator("type", "availability", mode="before")
    @classmethod
    def _scalar_text(cls, v: Any) -> Any:
        v = _first_scalar(v)
        return _short_type(v) if isinstance(v, str) else None

    @field_validator("price", "low_price", "high_price", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float | None:
        return parse_amount(_first_scalar(v))

    @field_validator("currency", mode="before")
    @classmethod
    def _currency(cls, v: Any) -> str | None:
        return normalize_currency(_first_scalar(v))

    @field_validator("offers", mode="before")
    @classmethod
    def _offer_list(cls, v: Any) -> list:
        if isinstance(v, dict):
            return [v]
        return [o for o in v if isinstance(o, dict)] if isinstance(v, list) else []


_Offer.model_rebuild()


class _Rating(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    rating_value: float | None = Field(None, alias="ratingValue")
    best_rating: float | None = Field(None, alias="bestRating")
    review_count: int | None = Field(None, alias="reviewCount")
    rating_count: int | None = Field(None, alias="ratingCount")

    @field_validator("rating_value", "best_rating", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float | None:
        return parse_amount(_first_scalar(v))

    @field_validator("review_count", "rating_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int | None:
        return parse_count(_first_scalar(v))

    def to_reviews(self) -> Reviews:
        average = None
        if self.rating_value is not None:
            scale = self.best_rating if self.best_rating and self.best_rating > 0 else 5.0
            average = parse_rating(self.rating_value * 5.0 / scale)
        count = self.review_count if self.review_count is not None else self.rating_count
        return Reviews(count=count, average=average)


class ProductNode(BaseModel):
    """A schema.org Product node after tolerant coercion."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    description: str | None = None
    image: list[str] = Field(default_factory=list)
    brand: str | None = None
    manufacturer: str | None = None
    sku: str | None = None
    gtin: str | None = None
    mpn: str | None = None
    offers: list[_Offer] = Field(default_factory=list)
    aggregate_rating: _Rating | None = Field(None, alias="aggregateRating")

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError("Product node must be an object")
        data = dict(data)
        if data.get("gtin") in (None, ""):
            data["gtin"] = next((data[k] for k in _GTIN_KEYS if data.get(k) not in (None, "")), None)
        # ProductGroup: offers usually live on the first variant.
        variants = data.get("hasVariant")
        if not data.get("offers") and isinstance(variants, list) and variants and isinstance(variants[0], dict):
            data["offers"] = variants[0].get("offers")
        if isinstance(data.get("aggregateRating"), list):
            data["aggregateRating"] = data["aggregateRating"][0] if data["aggregateRating"] else None
        if not isinstance(data.get("aggregateRating"), dict):
            data["aggregateRating"] = None
        return data

    @field_validator("name", "brand", "manufacturer", "sku", "gtin", "mpn", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)

    @field_validator("description", mode="before")
    @classmethod
    def _long_text(cls, v: Any) -> str | None:
        v = _first_scalar(v)
        if v is None:
            return None
        return unescape_text(str(v), max_len=DESCRIPTION_MAX_LEN) or None

    @field_validator("image", mode="before")
    @classmethod
    def _images(cls, v: Any) -> list[str]:
        items = v if isinstance(v, list) else [v]
        urls: list[str] = []
        for item in items:
            if isinstance(item, dict):
                item = item.get("url") or item.get("contentUrl")
            if _is_image_ref(item) and item not in urls:
                urls.append(item)
        return urls

    @field_validator("offers", mode="before")
    @classmethod
    def _offer_list(cls, v: Any) -> list:
        if isinstance(v, dict):
            return [v]
        return [o for o in v if isinstance(o, dict)] if isinstance(v, list) else []


def price_from_offers(offers: list[_Offer]) -> tuple[Price, str | None]:
    """First offer wins. Several offers sharing one currency also yield a low/high range.

    Returns:
        (price, availability of the first offer)
    """
    flat: list[_Offer] = []
    for offer in offers:
        if offer.type == "AggregateOffer" and offer.offers:
            for inner in offer.offers:
                if inner.currency is None and offer.currency is not None:
                    inner = inner.model_copy(update={"currency": offer.currency})
                flat.append(inner)
        else:
            flat.append(offer)
    if not flat:
        return Price(), None

    first = flat[0]
    if first.type == "AggregateOffer" and first.price is None and first.low_price is None:
        return Price(currency=first.currency), first.availability

    amount = first.price if first.price is not None else first.low_price
    price = Price(amount=amount, currency=first.currency)

    if first.type == "AggregateOffer" and first.low_price is not None:
        price.low = first.low_price
        price.high = first.high_price if first.high_price is not None else first.low_price
    elif len(flat) > 1:
        currencies = {o.currency for o in flat}
        amounts = [o.price for o in flat if o.price is not None]
        if len(currencies) == 1 and len(amounts) > 1:
            price.low = min(amounts)
            price.high = max(amounts)
            if price.currency is None:
                price.currency = next(iter(currencies))
    return price, first.availability


def _node_fields(node: ProductNode, snapshot: DocumentSnapshot) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if node.name:
        fields["title"] = node.name
    brand = node.brand or node.manufacturer
    if brand:
        fields["brand"] = brand
    if node.description:
        fields["description"] = Description(text=node.description)
    if node.image:
        fields["images"] = [ProductImage(src=snapshot.absolute_url(u)) for u in node.image[:MAX_IMAGES]]
    price, availability = price_from_offers(node.offers)
    if not price.is_empty():
        fields["price"] = price
    availability = short_availability(availability)
    if availability:
        fields["availability"] = availability
    for key in ("sku", "gtin", "mpn"):
        value = getattr(node, key)
        if value:
            fields[key] = value
    if node.aggregate_rating is not None:
        reviews = node.aggregate_rating.to_reviews()
        if not is_empty(reviews):
            fields["reviews"] = reviews
    return fields


def _breadcrumb_path(data: Any) -> list[str]:
    for crumb_list in _find_nodes(data, ("BreadcrumbList",)):
        elements = crumb_list.get("itemListElement", [])
        if not isinstance(elements, list):
            continue
        crumbs: list[tuple[int, str]] = []
        for i, el in enumerate(elements):
            if not isinstance(el, dict):
                continue
            item = el.get("item")
            name = el.get("name") or (item.get("name") if isinstance(item, dict) else None)
            name = _as_text(name)
            if not name:
                continue
            position = parse_count(el.get("position"))
            crumbs.append((position if position is not None else i, name))
        if crumbs:
            crumbs.sort(key=lambda c: c[0])
            return [name for _, name in crumbs]
    return []


# --- Data classes ---


@dataclass(frozen=True)
class SemanticCandidate:
    """Partial product record from one metadata channel."""

    channel: Channel
    fields: dict[str, Any]

    @property
    def confidence(self) -> float:
        return CHANNEL_CONFIDENCE[self.channel]

    @property
    def title(self) -> str | None:
        return self.fields.get("title")


@dataclass
class SemanticParse:
    """All candidates from one pass, plus non-fatal decode faults."""

    candidates: list[SemanticCandidate] = field(default_factory=list)
    faults: list[ProductLensError] = field(default_factory=list)
    category_path: list[str] = field(default_factory=list)

    def has(self, channel: Channel) -> bool:
        return any(c.channel == channel for c in self.candidates)

    @property
    def ordered(self) -> list[SemanticCandidate]:
        """Highest confidence first; document order within a channel."""
        return sorted(self.candidates, key=lambda c: c.confidence, reverse=True)

    @property
    def primary(self) -> SemanticCandidate | None:
        """Highest-confidence candidate that carries a title."""
        return next((c for c in self.ordered if c.title), None)

    def select(self) -> tuple[dict[str, Any], dict[str, Channel]]:
        """Field-level selection across candidates.

        Returns:
            (fields, sources): merged partial record and the channel each field came from.
        """
        fields: dict[str, Any] = {}
        sources: dict[str, Channel] = {}
        for candidate in self.ordered:
            for key, value in candidate.fields.items():
                if key not in fields and not is_empty(value):
                    fields[key] = value
                    sources[key] = candidate.channel
        if "category_path" not in fields and self.category_path:
            fields["category_path"] = list(self.category_path)
            sources["category_path"] = Channel.JSON_LD
        return fields, sources


# --- Channel parsers ---


def parse_json_ld(snapshot: DocumentSnapshot) -> SemanticParse:
    """Parse every linked-data block; one candidate per valid Product node.

    A block that fails in any way is recorded as a fault and skipped; the
    remaining blocks are still parsed.
    """
    result = SemanticParse()
    for index, block in enumerate(jsonld_blocks(snapshot)):
        try:
            data = decode_jsonld(block)
        except ValueError as e:
            fault = MalformedStructuredData(f"linked-data block {index} is not valid JSON: {e}", block_index=index)
            logger.warning("Skipping malformed linked-data block %d on %s: %s", index, snapshot.url, e)
            result.faults.append(fault)
            continue

        try:
            _parse_jsonld_block(data, index, snapshot, result)
        except Exception as e:
            fault = MalformedStructuredData(
                f"linked-data block {index} could not be read: {type(e).__name__}: {e}",
                block_index=index,
            )
            logger.warning("Skipping linked-data block %d on %s: %s", index, snapshot.url, fault, exc_info=True)
            result.faults.append(fault)
    return result


def _parse_jsonld_block(data: Any, index: int, snapshot: DocumentSnapshot, result: SemanticParse) -> None:
    category_path = result.category_path or _breadcrumb_path(data)
    candidates: list[SemanticCandidate] = []
    for raw_node in _find_nodes(data, _PRODUCT_TYPES):
        try:
            node = ProductNode.model_validate(raw_node)
        except ValidationError as e:
            fault = MalformedStructuredData(
                f"linked-data block {index} has an invalid Product node: {e.error_count()} error(s)",
                block_index=index,
            )
            logger.warning("Invalid Product node in linked-data block %d on %s", index, snapshot.url)
            result.faults.append(fault)
            continue
        candidates.append(SemanticCandidate(Channel.JSON_LD, _node_fields(node, snapshot)))
    result.category_path = category_path
    result.candidates.extend(candidates)


# --- Microdata ---

_MICRODATA_PRODUCT_SELECTOR = (
    '[itemscope][itemtype*="schema.org/Product"], [itemscope][itemtype*="schema.org/IndividualProduct"]'
)

_MICRODATA_FIELD_MAP: dict[str, str] = {
    "name": "title",
    "brand": "brand",
    "manufacturer": "brand",
    "sku": "sku",
    "mpn": "mpn",
    "gtin": "gtin",
    "gtin13": "gtin",
    "gtin14": "gtin",
    "gtin12": "gtin",
    "gtin8": "gtin",
}


def _scope_props(scope: HtmlElement) -> dict[str, list[HtmlElement]]:
    """itemprop elements owned by this itemscope (not by a nested one)."""
    props: dict[str, list[HtmlElement]] = {}
    for el in scope.iterdescendants():
        if not isinstance(el.tag, str):
            continue
        names = el.get("itemprop")
        if not names:
            continue
        owner = next((a for a in el.iterancestors() if a.get("itemscope") is not None), None)
        if owner is not scope:
            continue
        for name in names.split():
            props.setdefault(name, []).append(el)
    return props


def _prop_value(el: HtmlElement, snapshot: DocumentSnapshot, max_len: int = 512) -> str | None:
    """content attr > meta@content > img@src > a/link@href > nested scope name > text."""
    if el.get("itemscope") is not None:
        nested = _scope_props(el).get("name")
        return _prop_value(nested[0], snapshot) if nested else element_text(el) or None
    content = el.get("content")
    if content is not None:
        return unescape_text(content, max_len=max_len) or None
    tag = el.tag.lower()
    if tag in ("img", "source", "video", "audio"):
        src = el.get("src") or el.get("data-src")
        return snapshot.absolute_url(src) if src else None
    if tag in ("a", "link", "area"):
        href = el.get("href")
        return snapshot.absolute_url(href) if href else None
    if tag in ("data", "meter"):
        return el.get("value") or element_text(el) or None
    return element_text(el, max_len=max_len) or None


def _first_prop(
    props: dict[str, list[HtmlElement]],
    name: str,
    snapshot: DocumentSnapshot,
    max_len: int = 512,
) -> str | None:
    for el in props.get(name, []):
        value = _prop_value(el, snapshot, max_len=max_len)
        if value:
            return value
    return None


def _nested_props(props: dict[str, list[HtmlElement]], name: str) -> dict[str, list[HtmlElement]]:
    for el in props.get(name, []):
        if el.get("itemscope") is not None:
            return _scope_props(el)
    return {}


def _microdata_fields(scope: HtmlElement, snapshot: DocumentSnapshot) -> dict[str, Any]:
    props = _scope_props(scope)
    fields: dict[str, Any] = {}

    for prop, field_name in _MICRODATA_FIELD_MAP.items():
        if field_name in fields:
            continue
        value = _first_prop(props, prop, snapshot)
        if value:
            fields[field_name] = value

    description = _first_prop(props, "description", snapshot, max_len=DESCRIPTION_MAX_LEN)
    if description:
        fields["description"] = Description(text=description)

    images: list[ProductImage] = []
    for el in props.get("image", []):
        src = _prop_value(el, snapshot)
        if not src:
            continue
        src = snapshot.absolute_url(src)
        if src.startswith(("http://", "https://")) and all(i.src != src for i in images):
            images.append(ProductImage(src=src, alt=el.get("alt") or ""))
    if images:
        fields["images"] = images[:MAX_IMAGES]

    # Offer properties may sit in a nested Offer scope or directly on the product.
    offer_props = _nested_props(props, "offers") or props
    amount = parse_amount(_first_prop(offer_props, "price", snapshot))
    currency = normalize_currency(_first_prop(offer_props, "priceCurrency", snapshot))
    if amount is not None:
        fields["price"] = Price(amount=amount, currency=currency)
    availability = short_availability(_first_prop(offer_props, "availability", snapshot))
    if availability:
        fields["availability"] = availability

    rating_props = _nested_props(props, "aggregateRating") or props
    count_text = _first_prop(rating_props, "reviewCount", snapshot)
    if count_text is None:
        count_text = _first_prop(rating_props, "ratingCount", snapshot)
    reviews = Reviews(
        count=parse_count(count_text),
        average=parse_rating(_first_prop(rating_props, "ratingValue", snapshot)),
    )
    if not is_empty(reviews):
        fields["reviews"] = reviews
    return fields


def parse_microdata(snapshot: DocumentSnapshot) -> SemanticParse:
    """One candidate per inline Product scope that carries a name or a price."""
    result = SemanticParse()
    for scope in snapshot.select(_MICRODATA_PRODUCT_SELECTOR):
        fields = _microdata_fields(scope, snapshot)
        if "title" in fields or "price" in fields:
            result.candidates.append(SemanticCandidate(Channel.MICRODATA, fields))
    return result


# --- Social / meta tags ---

_SOCIAL_FIELD_MAP: dict[str, tuple[str, ...]] = {
    "title": ("og:title", "twitter:title"),
    "description": ("og:description", "twitter:description", "description"),
    "brand": ("og:brand", "product:brand"),
    "availability": ("og:availability", "product:availability"),
    "sku": ("product:retailer_item_id", "og:retailer_item_id"),
}
_SOCIAL_AMOUNT_KEYS = ("product:price:amount", "og:price:amount", "product:sale_price:amount")
_SOCIAL_CURRENCY_KEYS = ("product:price:currency", "og:price:currency", "product:sale_price:currency")
_SOCIAL_IMAGE_KEYS = ("og:image", "og:image:secure_url", "og:image:url", "twitter:image")


def _first_meta(snapshot: DocumentSnapshot, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = snapshot.meta(key)
        if value and value.strip():
            return value
    return None


def parse_social_meta(snapshot: DocumentSnapshot) -> SemanticParse:
    """One candidate when product-oriented social tags are present.

    Product orientation: ``og:type`` containing "product", or a price or
    brand tag. Generic title/description tags alone never produce a candidate.
    """
    result = SemanticParse()
    og_type = (snapshot.meta("og:type") or "").lower()
    amount_text = _first_meta(snapshot, _SOCIAL_AMOUNT_KEYS)
    brand_text = _first_meta(snapshot, _SOCIAL_FIELD_MAP["brand"])
    if "product" not in og_type and amount_text is None and brand_text is None:
        return result

    fields: dict[str, Any] = {}
    for field_name, keys in _SOCIAL_FIELD_MAP.items():
        value = _first_meta(snapshot, keys)
        if value is None:
            continue
        if field_name == "description":
            text = unescape_text(value, max_len=DESCRIPTION_MAX_LEN)
            if text:
                fields["description"] = Description(text=text)
        elif field_name == "availability":
            availability = short_availability(unescape_text(value))
            if availability:
                fields["availability"] = availability
        else:
            text = unescape_text(value)
            if text:
                fields[field_name] = text

    amount = parse_amount(amount_text)
    if amount is not None:
        currency = normalize_currency(_first_meta(snapshot, _SOCIAL_CURRENCY_KEYS))
        fields["price"] = Price(amount=amount, currency=currency)

    images: list[ProductImage] = []
    for key in _SOCIAL_IMAGE_KEYS:
        value = snapshot.meta(key)
        if not value:
            continue
        src = snapshot.absolute_url(value)
        if src.startswith(("http://", "https://")) and all(i.src != src for i in images):
            images.append(ProductImage(src=src, alt=unescape_text(snapshot.meta("og:image:alt"))))
    if images:
        fields["images"] = images

    result.candidates.append(SemanticCandidate(Channel.SOCIAL_META, fields))
    return result


def extract_semantic(snapshot: DocumentSnapshot) -> SemanticParse:
    """Run all three channel parsers and combine their candidates and faults.

    A channel parser that raises contributes an ``ExtractorFault`` and no
    candidates; the other channels are unaffected.
    """
    combined = SemanticParse()
    parsers = (
        (Channel.JSON_LD, parse_json_ld),
        (Channel.MICRODATA, parse_microdata),
        (Channel.SOCIAL_META, parse_social_meta),
    )
    for channel, parser in parsers:
        try:
            part = parser(snapshot)
        except Exception as e:
            fault = ExtractorFault(f"semantic/{channel}", e)
            logger.warning("Channel fault on %s: %s", snapshot.url, fault, exc_info=True)
            combined.faults.append(fault)
            continue
        combined.candidates.extend(part.candidates)
        combined.faults.extend(part.faults)
        if not combined.category_path:
            combined.category_path = part.category_path
    logger.debug(
        "Semantic extraction on %s: %d candidate(s), %d fault(s)",
        snapshot.url,
        len(combined.candidates),
        len(combined.faults),
    )
    return combined
