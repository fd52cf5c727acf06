# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Value normalization shared by the semantic and positional extractors.

Amounts, currencies, counts and ratings arrive as free text in every
locale format a storefront can produce; these helpers turn them into the
record's canonical types or None.
"""

from __future__ import annotations

import math
import re
from typing import Any

from productlens import Description, Price, Reviews

# Symbol -> ISO-4217. Ambiguous "$" resolves to USD.
CURRENCY_SYMBOLS: dict[str, str] = {
    "$": "USD",
    "US$": "USD",
    "£": "GBP",
    "€": "EUR",
    "¥": "JPY",
    "円": "JPY",
    "₹": "INR",
    "₩": "KRW",
    "원": "KRW",
}

_ISO_CODE_RE = re.compile(r"^[A-Z]{3}$")

# Codes recognized in free display text; structured data may carry any code.
_DISPLAY_CODES = "USD|EUR|GBP|JPY|INR|KRW|CAD|AUD|NZD|CHF|CNY|HKD|SGD|SEK|NOK|DKK|PLN|MXN|BRL"

# "$19.99", "£ 1,299.00", "19,99 €", "USD 19.99", "19.99 USD", "12,000원"
_PRICE_TEXT_RE = re.compile(
    r"(?P<pre>US\$|[£$€¥₹₩])\s?(?P<amount_a>\d[\d,.]*\d|\d)"
    r"|(?P<amount_b>\d[\d,.]*\d|\d)\s?(?P<post>[£$€¥₹₩]|円|원)"
    rf"|\b(?P<code_pre>{_DISPLAY_CODES})\s?(?P<amount_c>\d[\d,.]*\d|\d)"
    rf"|(?P<amount_d>\d[\d,.]*\d|\d)\s?(?P<code_post>(?:{_DISPLAY_CODES})\b)"
)

_RATING_OUT_OF_RE = re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:out of|/|of)\s*(\d+(?:[.,]\d+)?)", re.IGNORECASE)
_FIRST_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)?")
_COUNT_RE = re.compile(r"\d[\d,.\s]*")

RATING_MAX = 5.0


def parse_amount(v: Any) -> float | None:
    """Parse a monetary amount, tolerating thousands separators in either convention.

    ``"1.234,56"`` -> 1234.56, ``"1,234.56"`` -> 1234.56, ``"19,99"`` -> 19.99,
    ``"1,5"`` -> 1.5, ``"12,000"`` -> 12000.0.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        try:
            amount = float(v)
        except OverflowError:
            return None
        return amount if math.isfinite(amount) else None
    s = re.sub(r"[^\d.,]", "", str(v))
    if not s or not any(c.isdigit() for c in s):
        return None
    if "." in s and "," in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        head, _, tail = s.rpartition(",")
        # A single comma followed by one or two digits is a decimal comma.
        s = f"{head.replace(',', '')}.{tail}" if len(tail) in (1, 2) and "," not in head else s.replace(",", "")
    elif s.count(".") > 1:
        head, _, tail = s.rpartition(".")
        s = f"{head.replace('.', '')}.{tail}" if len(tail) != 3 else s.replace(".", "")
    try:
        amount = float(s)
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


def normalize_currency(v: Any) -> str | None:
    """Map a currency symbol or code to an upper-case ISO-4217 code."""
    if not isinstance(v, str):
        return None
    s = v.strip()
    if not s:
        return None
    if s in CURRENCY_SYMBOLS:
        return CURRENCY_SYMBOLS[s]
    upper = s.upper()
    return upper if _ISO_CODE_RE.match(upper) else None


def parse_price_text(text: str | None) -> Price:
    """Parse display text such as ``"$19.99"`` into a Price.

    Unparseable text is preserved as ``raw`` with amount and currency None.
    """
    if not text or not text.strip():
        return Price()
    raw = text.strip()
    m = _PRICE_TEXT_RE.search(raw)
    if not m:
        return Price(raw=raw)
    amount_text = m.group("amount_a") or m.group("amount_b") or m.group("amount_c") or m.group("amount_d")
    currency_text = m.group("pre") or m.group("post") or m.group("code_pre") or m.group("code_post")
    currency = normalize_currency(currency_text)
    amount = parse_amount(amount_text)
    if amount is None or currency is None:
        return Price(raw=raw)
    return Price(amount=amount, currency=currency, raw=raw)


def parse_count(v: Any) -> int | None:
    """Parse a review count such as ``"1,234 ratings"``."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v if v >= 0 else None
    if isinstance(v, float):
        return int(v) if math.isfinite(v) and v >= 0 else None
    m = _COUNT_RE.search(str(v))
    if not m:
        return None
    digits = re.sub(r"[^\d]", "", m.group())
    return int(digits) if digits else None


def parse_rating(v: Any) -> float | None:
    """Parse an average rating; ``"4.5 out of 5 stars"`` is rescaled to a 5-point scale."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return clamp_rating(float(v))
    text = str(v)
    m = _RATING_OUT_OF_RE.search(text)
    if m:
        value = float(m.group(1).replace(",", "."))
        scale = float(m.group(2).replace(",", "."))
        if scale <= 0:
            return None
        return clamp_rating(value * RATING_MAX / scale)
    m = _FIRST_NUMBER_RE.search(text)
    if not m:
        return None
    return clamp_rating(float(m.group().replace(",", ".")))


def clamp_rating(value: float) -> float:
    return max(0.0, min(RATING_MAX, value))


def short_availability(v: Any) -> str | None:
    """``"https://schema.org/InStock"`` -> ``"InStock"``; plain text passes through."""
    if not isinstance(v, str) or not v.strip():
        return None
    s = v.strip()
    if "schema.org/" in s:
        s = s.rsplit("/", 1)[-1]
    return s or None


def is_empty(value: Any) -> bool:
    """True for values the merge treats as absent."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    if isinstance(value, Price):
        return value.is_empty()
    if isinstance(value, Reviews):
        return value.count is None and value.average is None
    if isinstance(value, Description):
        return not value.text and not value.html
    return False
