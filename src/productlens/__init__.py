# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""productlens: product-page analysis for rendered storefront documents.

Decides whether a document is a purchasable product listing, which storefront
platform produced it, and which normalized product facts it carries:
- semantic metadata (JSON-LD, microdata, social/meta tags)
- positional document-tree scanning with platform-specific selectors
- a weighted gap report of missing product attributes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Platform(StrEnum):
    """Storefront platform families."""

    AMAZON = "amazon"
    EBAY = "ebay"
    ETSY = "etsy"
    WALMART = "walmart"
    SHOPIFY = "shopify"
    WOOCOMMERCE = "woocommerce"
    GENERIC = "generic"


class Channel(StrEnum):
    """Semantic metadata channel a candidate was parsed from."""

    JSON_LD = "json_ld"
    MICRODATA = "microdata"
    SOCIAL_META = "social_meta"


# Fixed per channel; selection order depends on it.
CHANNEL_CONFIDENCE: dict[Channel, float] = {
    Channel.JSON_LD: 0.95,
    Channel.MICRODATA: 0.85,
    Channel.SOCIAL_META: 0.70,
}


@dataclass
class Price:
    """Display price. ``low``/``high`` are set only for same-currency offer ranges."""

    amount: float | None = None
    currency: str | None = None  # ISO-4217
    raw: str | None = None
    low: float | None = None
    high: float | None = None

    def is_empty(self) -> bool:
        return self.amount is None and self.raw is None


@dataclass
class Description:
    html: str = ""
    text: str = ""


@dataclass(frozen=True)
class ProductImage:
    src: str
    alt: str = ""


@dataclass
class Variant:
    """One selectable axis (size, color, ...) and its distinct values."""

    name: str
    values: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SpecEntry:
    key: str  # lower-cased
    value: str


@dataclass
class Reviews:
    count: int | None = None
    average: float | None = None  # 0.0-5.0


@dataclass
class ProductRecord:
    """Normalized product facts for one analysis pass.

    A record is valid only when ``title`` is non-empty. ``debug`` carries
    per-field provenance and extractor diagnostics and is never serialized
    for consumers.
    """

    title: str
    url: str
    platform: Platform = Platform.GENERIC
    brand: str | None = None
    price: Price = field(default_factory=Price)
    bullets: list[str] = field(default_factory=list)
    description: Description = field(default_factory=Description)
    images: list[ProductImage] = field(default_factory=list)
    variants: list[Variant] = field(default_factory=list)
    specs: list[SpecEntry] = field(default_factory=list)
    category_path: list[str] = field(default_factory=list)
    reviews: Reviews = field(default_factory=Reviews)
    sku: str | None = None
    gtin: str | None = None
    mpn: str | None = None
    availability: str | None = None
    extracted_at: float = 0.0  # epoch seconds
    debug: dict = field(default_factory=dict)

    @property
    def spec_keys(self) -> frozenset[str]:
        return frozenset(s.key for s in self.specs)

    def __str__(self) -> str:
        parts = [f"[{self.platform}]", self.title]
        if self.price.amount is not None:
            parts.append(f"{self.price.amount:g} {self.price.currency or ''}".rstrip())
        return " ".join(parts)


__all__ = [
    "CHANNEL_CONFIDENCE",
    "Channel",
    "Description",
    "Platform",
    "Price",
    "ProductImage",
    "ProductRecord",
    "Reviews",
    "SpecEntry",
    "Variant",
]
