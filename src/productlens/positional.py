# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Positional extraction: per-field ordered CSS selector lists.

For every field the platform's own selectors are tried first, then the
generic list. The first selector yielding a non-empty value wins (images and
spec rows accumulate across the whole chain up to their caps). A field with
no match at all is recorded in ``exhausted`` and left absent.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from lxml.html import HtmlElement

from productlens import Description, Platform, Price, ProductImage, Reviews, SpecEntry, Variant
from productlens.document import DocumentSnapshot, element_text
from productlens.errors import ExtractorFault, SelectorExhausted
from productlens.normalize import (
    normalize_currency,
    parse_amount,
    parse_count,
    parse_price_text,
    parse_rating,
    short_availability,
)
from productlens.sanitizer import sanitize_description, sanitize_text

logger = logging.getLogger(__name__)

MAX_BULLETS = 10
MAX_IMAGES = 12
MAX_VARIANT_VALUES = 30
MAX_VARIANT_AXES = 6
MAX_SPECS = 40
MAX_SPEC_KEY_LEN = 80
MAX_DATA_URI_LEN = 2048
MAX_CATEGORY_DEPTH = 10

_SHIPPING_KEYWORDS = re.compile(r"(?:shipping|handling|delivery)", re.IGNORECASE)
_PLACEHOLDER_OPTION_RE = re.compile(r"^(?:choose|select|pick|please select)\b|^-+|^\W*$", re.IGNORECASE)
_QUANTITY_AXIS_RE = re.compile(r"^(?:quantity|qty)$", re.IGNORECASE)
_BRACKETED_NAME_RE = re.compile(r"\[([^\]]+)\]$")
_PURCHASE_FORM_RE = re.compile(r"cart|basket|\bbag\b|checkout|buy|product|variation|twister", re.IGNORECASE)
_ADD_TO_CART_RE = re.compile(r"add to (?:cart|bag|basket|trolley)|buy (?:it )?now", re.IGNORECASE)
_SEARCH_FORM_RE = re.compile(r"search", re.IGNORECASE)
_BRAND_NOISE_RE = re.compile(r"^(?:visit the|brand:)\s*|\s*store$", re.IGNORECASE)
_BREADCRUMB_SEPARATORS = frozenset({"›", ">", "/", "»", "|", "-"})


# ---------------------------------------------------------------------------
# Selector tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelectorTable:
    """Ordered selectors per field for one platform."""

    title: tuple[str, ...] = ()
    price: tuple[str, ...] = ()
    bullets: tuple[str, ...] = ()  # list containers
    description: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    variant_forms: tuple[str, ...] = ()
    spec_rows: tuple[str, ...] = ()
    review_count: tuple[str, ...] = ()
    review_average: tuple[str, ...] = ()
    brand: tuple[str, ...] = ()
    sku: tuple[str, ...] = ()
    availability: tuple[str, ...] = ()
    breadcrumbs: tuple[str, ...] = ()


PLATFORM_SELECTORS: dict[Platform, SelectorTable] = {
    Platform.AMAZON: SelectorTable(
        title=("#productTitle", "#title"),
        price=(
            "#corePrice_feature_div .a-offscreen",
            "#corePriceDisplay_desktop_feature_div .a-offscreen",
            "#priceblock_ourprice",
            "#priceblock_dealprice",
            "#price_inside_buybox",
            "span.a-price span.a-offscreen",
            "span.a-offscreen",
        ),
        bullets=("#feature-bullets ul", "#feature-bullets"),
        description=("#productDescription", "#aplus_feature_div", "#aplus"),
        images=("#altImages img", "#imgTagWrapperId img", "#landingImage", "#main-image-container img"),
        variant_forms=("form#twister", "#twister"),
        spec_rows=(
            "#productDetails_techSpec_section_1 tr",
            "#productDetails_detailBullets_sections1 tr",
            "table.prodDetTable tr",
            "#detailBullets_feature_div li",
            "#productOverview_feature_div tr",
        ),
        review_count=("#acrCustomerReviewText",),
        review_average=("#acrPopover", "#averageCustomerReviews span.a-icon-alt", "span.a-icon-alt"),
        brand=("#bylineInfo",),
        sku=("input#ASIN", 'input[name="ASIN"]'),
        availability=("#availability",),
        breadcrumbs=("#wayfinding-breadcrumbs_feature_div li a", "#wayfinding-breadcrumbs_container li a"),
    ),
    Platform.EBAY: SelectorTable(
        title=(".x-item-title__mainTitle", ".x-item-title", "#itemTitle"),
        price=(".x-price-primary", "#prcIsum", "#mm-saleDscPrc"),
        description=("#desc_div", "#viTabs_0_is"),
        images=(".ux-image-carousel-item img", "#icImg", ".ux-image-filmstrip-carousel img"),
        variant_forms=('form[action*="cart"]', "#mainContent form"),
        spec_rows=(".ux-labels-values", ".itemAttr tr"),
        review_count=(".ux-summary__count", ".reviews-star-rating"),
        review_average=(".ux-summary__start--rating", ".reviews-star-rating"),
        brand=(".ux-labels-values--brand .ux-labels-values__values",),
        breadcrumbs=("nav.breadcrumbs li a", ".seo-breadcrumbs-container a"),
    ),
    Platform.ETSY: SelectorTable(
        title=("h1[data-buy-box-listing-title]",),
        price=('[data-buy-box-region="price"] p', '[data-selector="price-only"]'),
        bullets=('[data-product-details-description-text-content] ul', "#product-details-content-toggle ul"),
        description=("[data-product-details-description-text-content]", "#wt-content-toggle-product-details-read-more"),
        images=('[data-carousel-pane] img', ".listing-page-image-carousel-component img"),
        variant_forms=('form[data-buy-box-form]', 'form[action*="cart"]'),
        review_count=('[data-reviews-total]',),
        review_average=('input[name="initial-rating"]', '[data-reviews-rating]'),
        brand=('[data-shop-name]', "#listing-page-cart .wt-text-body-01 a"),
        breadcrumbs=('[data-breadcrumb] a', 'nav[aria-label="Breadcrumb"] a'),
    ),
    Platform.WALMART: SelectorTable(
        title=("h1#main-title", 'h1[itemprop="name"]'),
        price=('[itemprop="price"]', '[data-testid="price-wrap"] span'),
        bullets=('[data-testid="product-description-content"] ul',),
        description=('[data-testid="product-description-content"]', ".about-desc"),
        images=('[data-testid="media-thumbnail"] img', '[data-testid="hero-image-container"] img'),
        spec_rows=('[data-testid="product-specifications"] tr',),
        review_count=('[itemprop="ratingCount"]', '[data-testid="item-review-section-link"]'),
        review_average=('[itemprop="ratingValue"]', ".rating-number"),
        brand=('[data-seo-id="brand-name"]', 'a[link-identifier="brandName"]'),
        breadcrumbs=('nav[aria-label="breadcrumb"] li a',),
    ),
    Platform.SHOPIFY: SelectorTable(
        title=("h1.product-single__title", "h1.product__title", ".product__title h1", ".product-meta__title"),
        price=(
            ".price-item--sale",
            ".price-item--regular",
            ".product__price",
            ".product-single__price",
            "[data-product-price]",
        ),
        bullets=(".product-single__description ul", ".product__description ul", ".product-features ul"),
        description=(".product-single__description", ".product__description", ".product-description", ".rte"),
        images=(
            ".product-single__photo-wrapper img",
            ".product__media img",
            ".product-gallery img",
            ".product-single__photos img",
        ),
        variant_forms=('form[action*="/cart/add"]',),
        brand=(".product-single__vendor", ".product__vendor", ".product-meta__vendor"),
        sku=(".product-single__sku", ".product__sku", "[data-sku]"),
    ),
    Platform.WOOCOMMERCE: SelectorTable(
        title=(".product_title", "h1.entry-title"),
        price=(
            ".summary p.price ins .woocommerce-Price-amount",
            ".summary p.price .woocommerce-Price-amount",
            "p.price",
            "span.woocommerce-Price-amount",
        ),
        bullets=(".woocommerce-product-details__short-description ul",),
        description=(
            "#tab-description",
            ".woocommerce-Tabs-panel--description",
            ".woocommerce-product-details__short-description",
        ),
        images=("div.woocommerce-product-gallery__image img", ".woocommerce-product-gallery img"),
        variant_forms=("form.variations_form", "form.cart"),
        spec_rows=(".woocommerce-product-attributes tr", "table.shop_attributes tr"),
        review_count=(".woocommerce-review-link .count", ".woocommerce-product-rating .count"),
        review_average=(".woocommerce-product-rating .star-rating", ".star-rating"),
        sku=(".product_meta .sku", ".sku"),
        availability=(".summary .stock", "p.stock"),
        breadcrumbs=(".woocommerce-breadcrumb a",),
    ),
}

GENERIC_SELECTORS = SelectorTable(
    title=(
        'h1[itemprop="name"]',
        "h1.product-title",
        "h1.product-name",
        'h1[class*="product"]',
        'h1[class*="title"]',
        "main h1",
        "article h1",
        '[role="main"] h1',
        ".product-title",
        ".product-name",
        ".productTitle",
        ".pdp-title",
        "[data-product-title]",
        '[data-testid="product-title"]',
        "h1",
    ),
    price=(
        '[itemprop="price"]',
        ".product-price",
        ".productPrice",
        ".current-price",
        ".sale-price",
        ".final-price",
        ".price .amount",
        ".price",
        "#price",
        "[data-price]",
        '[class*="price"]',
    ),
    bullets=(
        ".product-features ul",
        ".product-highlights ul",
        ".features ul",
        ".key-features ul",
        '[class*="highlights"] ul',
    ),
    description=(
        '[itemprop="description"]',
        ".product-description",
        ".product-details",
        "#description",
        "#product-description",
        '[class*="description"]',
    ),
    images=(
        '[itemprop="image"]',
        ".product-image img",
        ".product-images img",
        ".product-gallery img",
        ".product-photo img",
        "[data-product-image]",
        ".gallery img",
    ),
    variant_forms=(
        'form[action*="cart"]',
        "form.cart",
        'form[id*="product"]',
        'form[class*="product"]',
        "form",
    ),
    spec_rows=(
        "table.specs tr",
        "table.specifications tr",
        'table[class*="spec"] tr',
        ".product-specs tr",
        '[class*="specification"] tr',
        '[class*="specs"] li',
    ),
    review_count=('[itemprop="reviewCount"]', '[itemprop="ratingCount"]', ".review-count", "[data-review-count]"),
    review_average=('[itemprop="ratingValue"]', ".rating-value", "[data-rating]", ".average-rating"),
    brand=('[itemprop="brand"]', ".brand", ".product-brand", "[data-brand]", 'a[href*="/brand/"]', ".manufacturer"),
    sku=('[itemprop="sku"]', ".product-sku", ".sku", "[data-sku]"),
    availability=('[itemprop="availability"]', ".availability", ".stock-status", ".stock"),
    breadcrumbs=(
        '[itemtype*="BreadcrumbList"] [itemprop="name"]',
        "nav.breadcrumb a",
        "ol.breadcrumb li",
        ".breadcrumbs a",
        ".breadcrumb a",
        '[class*="breadcrumb"] a',
    ),
)


def selector_chain(platform: Platform, field_name: str) -> tuple[str, ...]:
    """Platform selectors followed by the generic ones, without repeats."""
    own = getattr(PLATFORM_SELECTORS.get(platform, GENERIC_SELECTORS), field_name)
    generic = getattr(GENERIC_SELECTORS, field_name)
    return tuple(dict.fromkeys((*own, *generic)))


# ---------------------------------------------------------------------------
# Element readers
# ---------------------------------------------------------------------------


def _read(el: HtmlElement, attrs: tuple[str, ...] = ("content",), max_len: int = 512) -> str:
    """First non-empty attribute from ``attrs``, else the element's text."""
    for attr in attrs:
        value = el.get(attr)
        if value and value.strip():
            return sanitize_text(value, max_len=max_len)
    return element_text(el, max_len=max_len)


def _first_text(
    snapshot: DocumentSnapshot,
    selectors: tuple[str, ...],
    field_name: str,
    attrs: tuple[str, ...] = ("content",),
) -> str:
    for css in selectors:
        for el in snapshot.select(css):
            value = _read(el, attrs)
            if value:
                return value
    raise SelectorExhausted(field_name)


def _image_src(el: HtmlElement) -> str | None:
    """Highest-fidelity source, preferring lazy-load attributes over placeholder data URIs."""
    src = (el.get("src") or "").strip()
    for attr in ("data-old-hires", "data-zoom-image", "data-large_image"):
        value = (el.get(attr) or "").strip()
        if value:
            return value
    if src and not src.startswith("data:"):
        return src
    for attr in ("data-src", "data-lazy-src", "data-original"):
        value = (el.get(attr) or "").strip()
        if value:
            return value
    return src or None


# ---------------------------------------------------------------------------
# Field rules
# ---------------------------------------------------------------------------


def extract_title(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> str:
    return _first_text(snapshot, selectors, "title", attrs=())


def _page_currency(snapshot: DocumentSnapshot) -> str | None:
    for el in snapshot.select('[itemprop="priceCurrency"]'):
        currency = normalize_currency(el.get("content") or element_text(el))
        if currency:
            return currency
    return normalize_currency(snapshot.meta("product:price:currency") or snapshot.meta("og:price:currency"))


def extract_price(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> Price:
    """First parseable price; an unparseable first match is kept as raw only."""
    fallback: Price | None = None
    for css in selectors:
        for el in snapshot.select(css):
            text = _read(el, attrs=("content", "data-price"), max_len=128)
            if not text or _SHIPPING_KEYWORDS.search(text):
                continue
            price = parse_price_text(text)
            if price.amount is None:
                amount = parse_amount(text) if re.fullmatch(r"[\d.,\s]+", text) else None
                if amount is not None:
                    price = Price(amount=amount, currency=_page_currency(snapshot), raw=text)
            if price.amount is not None:
                return price
            if fallback is None:
                fallback = price
    if fallback is not None:
        return fallback
    raise SelectorExhausted("price")


def extract_bullets(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> list[str]:
    """Trimmed list items of the first container with any; consecutive repeats dropped."""
    for css in selectors:
        for container in snapshot.select(css):
            bullets: list[str] = []
            for li in container.iter("li"):
                text = element_text(li)
                if not text or (bullets and bullets[-1] == text):
                    continue
                bullets.append(text)
                if len(bullets) >= MAX_BULLETS:
                    break
            if bullets:
                return bullets
    raise SelectorExhausted("bullets")


def extract_description(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> Description:
    for css in selectors:
        for el in snapshot.select(css):
            markup, text = sanitize_description(el)
            if text:
                return Description(html=markup, text=text)
    raise SelectorExhausted("description")


def _keep_image_url(url: str) -> bool:
    if url.startswith("data:"):
        return len(url) <= MAX_DATA_URI_LEN
    return url.startswith(("http://", "https://"))


def extract_images(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> list[ProductImage]:
    """Gallery images across the whole chain: absolute, deduplicated, capped."""
    images: list[ProductImage] = []
    seen: set[str] = set()
    for css in selectors:
        for el in snapshot.select(css):
            src = _image_src(el)
            if not src:
                continue
            url = src if src.startswith("data:") else snapshot.absolute_url(src)
            if url in seen or not _keep_image_url(url):
                continue
            seen.add(url)
            images.append(ProductImage(src=url, alt=sanitize_text(el.get("alt"))))
            if len(images) >= MAX_IMAGES:
                return images
    if not images:
        raise SelectorExhausted("images")
    return images


def _axis_name(snapshot: DocumentSnapshot, select_el: HtmlElement) -> str:
    el_id = select_el.get("id")
    if el_id:
        for label in snapshot.root.iter("label"):
            if label.get("for") == el_id:
                text = element_text(label).rstrip(":").strip()
                if text:
                    return text
    aria = sanitize_text(select_el.get("aria-label"))
    if aria:
        return aria
    name = (select_el.get("name") or "").strip()
    if name:
        m = _BRACKETED_NAME_RE.search(name)
        return m.group(1) if m else name
    return el_id or "option"


def is_purchase_form(form: HtmlElement) -> bool:
    """A form is a purchase form when its attributes or a submit control say so.

    Search forms (``role="search"``, a search action or class) never qualify.
    """
    attrs = " ".join(f"{k} {v}" for k, v in form.attrib.items())
    if _SEARCH_FORM_RE.search(attrs):
        return False
    if _PURCHASE_FORM_RE.search(attrs):
        return True
    for control in form.iter("button", "input"):
        if control.tag == "input" and (control.get("type") or "").lower() not in ("submit", "button", "image"):
            continue
        label = " ".join(filter(None, (element_text(control), control.get("value"), control.get("name"))))
        if _ADD_TO_CART_RE.search(label) or (control.get("name") or "").lower() == "add":
            return True
    return False


def extract_variants(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> list[Variant]:
    """Selection controls inside the first recognized purchase form(s)."""
    for css in selectors:
        variants: list[Variant] = []
        for form in snapshot.select(css):
            if not is_purchase_form(form):
                continue
            for select_el in form.iter("select"):
                name = _axis_name(snapshot, select_el)
                if _QUANTITY_AXIS_RE.match(name):
                    continue
                values: list[str] = []
                for option in select_el.iter("option"):
                    text = element_text(option)
                    if not text or _PLACEHOLDER_OPTION_RE.search(text) or text in values:
                        continue
                    values.append(text)
                    if len(values) >= MAX_VARIANT_VALUES:
                        break
                if values:
                    variants.append(Variant(name=name, values=values))
                if len(variants) >= MAX_VARIANT_AXES:
                    return variants
        if variants:
            return variants
    raise SelectorExhausted("variants")


def _spec_from_row(row: HtmlElement) -> SpecEntry | None:
    cells = [c for c in row if isinstance(c.tag, str) and c.tag.lower() in ("th", "td")]
    if len(cells) >= 2:
        key = element_text(cells[0])
        value = sanitize_text(" ".join(element_text(c) for c in cells[1:]))
    else:
        key, sep, value = element_text(row, max_len=1024).partition(":")
        if not sep:
            return None
    key = sanitize_text(key).rstrip(":").strip().lower()
    value = sanitize_text(value)
    if not key or not value or len(key) > MAX_SPEC_KEY_LEN:
        return None
    return SpecEntry(key=key, value=value)


def extract_specs(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> list[SpecEntry]:
    """Key/value rows across the chain; first occurrence of a key wins."""
    specs: list[SpecEntry] = []
    keys: set[str] = set()
    for css in selectors:
        for row in snapshot.select(css):
            entry = _spec_from_row(row)
            if entry is None or entry.key in keys:
                continue
            keys.add(entry.key)
            specs.append(entry)
            if len(specs) >= MAX_SPECS:
                return specs
    if not specs:
        raise SelectorExhausted("specs")
    return specs


def extract_reviews(snapshot: DocumentSnapshot, table: tuple[tuple[str, ...], tuple[str, ...]]) -> Reviews:
    count_selectors, average_selectors = table
    count: int | None = None
    average: float | None = None
    for css in count_selectors:
        for el in snapshot.select(css):
            count = parse_count(_read(el, attrs=("content", "data-review-count", "data-reviews-total")))
            if count is not None:
                break
        if count is not None:
            break
    for css in average_selectors:
        for el in snapshot.select(css):
            average = parse_rating(_read(el, attrs=("content", "data-rating", "value", "title", "aria-label")))
            if average is not None:
                break
        if average is not None:
            break
    if count is None and average is None:
        raise SelectorExhausted("reviews")
    return Reviews(count=count, average=average)


def _plausible_brand(text: str) -> bool:
    return 2 <= len(text) < 100


def extract_brand(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> str:
    raw = _first_text(snapshot, selectors, "brand", attrs=("content", "data-brand"))
    brand = _BRAND_NOISE_RE.sub("", raw).strip()
    if not _plausible_brand(brand):
        raise SelectorExhausted("brand")
    return brand


def extract_sku(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> str:
    raw = _first_text(snapshot, selectors, "sku", attrs=("content", "value", "data-sku"))
    return re.sub(r"^(?:sku|asin)\s*:?\s*", "", raw, flags=re.IGNORECASE) or raw


def extract_availability(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> str:
    raw = _first_text(snapshot, selectors, "availability", attrs=("content", "href"))
    return short_availability(raw) or raw


def extract_breadcrumbs(snapshot: DocumentSnapshot, selectors: tuple[str, ...]) -> list[str]:
    for css in selectors:
        path: list[str] = []
        for el in snapshot.select(css):
            text = element_text(el, max_len=200)
            if not text or text in _BREADCRUMB_SEPARATORS or (path and path[-1] == text):
                continue
            path.append(text)
        if path:
            return path[:MAX_CATEGORY_DEPTH]
    raise SelectorExhausted("category_path")


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


@dataclass
class PositionalResult:
    """Partial record from positional scanning plus the fields nothing matched.

    ``faults`` holds field rules that raised unexpectedly; those fields are
    treated as absent and the other rules still run.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    exhausted: list[str] = field(default_factory=list)
    faults: list[ExtractorFault] = field(default_factory=list)

    def run(
        self,
        field_name: str,
        rule: Callable[[DocumentSnapshot, Any], Any],
        snapshot: DocumentSnapshot,
        chain: Any,
    ) -> None:
        try:
            self.fields[field_name] = rule(snapshot, chain)
        except SelectorExhausted as e:
            self.exhausted.append(e.field)
        except Exception as e:
            fault = ExtractorFault(f"positional/{field_name}", e)
            logger.warning("Field rule fault on %s: %s", snapshot.url, fault, exc_info=True)
            self.faults.append(fault)


_FIELD_RULES: tuple[tuple[str, str, Callable[[DocumentSnapshot, Any], Any]], ...] = (
    ("title", "title", extract_title),
    ("price", "price", extract_price),
    ("bullets", "bullets", extract_bullets),
    ("description", "description", extract_description),
    ("images", "images", extract_images),
    ("variants", "variant_forms", extract_variants),
    ("specs", "spec_rows", extract_specs),
    ("brand", "brand", extract_brand),
    ("sku", "sku", extract_sku),
    ("availability", "availability", extract_availability),
    ("category_path", "breadcrumbs", extract_breadcrumbs),
)


def extract_positional(snapshot: DocumentSnapshot, platform: Platform) -> PositionalResult:
    """Run every field rule with the platform-first selector chain."""
    result = PositionalResult()
    for field_name, table_key, rule in _FIELD_RULES:
        result.run(field_name, rule, snapshot, selector_chain(platform, table_key))
    review_chains = (selector_chain(platform, "review_count"), selector_chain(platform, "review_average"))
    result.run("reviews", extract_reviews, snapshot, review_chains)

    logger.debug(
        "Positional extraction on %s (%s): %d field(s), exhausted=%s, faults=%d",
        snapshot.url,
        platform,
        len(result.fields),
        result.exhausted,
        len(result.faults),
    )
    return result
