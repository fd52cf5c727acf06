# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Analysis result serialization: JSON for consumers, one-line summary for humans.

``debug`` (field provenance, exhausted selectors) never leaves the process.
"""

from __future__ import annotations

import json
from typing import Any

from . import ProductRecord
from .gap import GapReport
from .pipeline import AnalysisResult


def record_to_dict(record: ProductRecord) -> dict[str, Any]:
    """Consumer view of a record. Empty optional fields are omitted."""
    price = record.price
    return {
        "title": record.title,
        "url": record.url,
        "platform": str(record.platform),
        **({"brand": record.brand} if record.brand else {}),
        "price": {
            "amount": price.amount,
            "currency": price.currency,
            **({"raw": price.raw} if price.raw else {}),
            **({"low": price.low, "high": price.high} if price.low is not None else {}),
        },
        "bullets": list(record.bullets),
        "description": {"html": record.description.html, "text": record.description.text},
        "images": [{"src": i.src, **({"alt": i.alt} if i.alt else {})} for i in record.images],
        "variants": [{"name": v.name, "values": list(v.values)} for v in record.variants],
        "specs": [{"key": s.key, "value": s.value} for s in record.specs],
        **({"category_path": list(record.category_path)} if record.category_path else {}),
        "reviews": {"count": record.reviews.count, "average": record.reviews.average},
        **({"sku": record.sku} if record.sku else {}),
        **({"gtin": record.gtin} if record.gtin else {}),
        **({"mpn": record.mpn} if record.mpn else {}),
        **({"availability": record.availability} if record.availability else {}),
        "extracted_at": record.extracted_at,
    }


def gap_to_dict(gap: GapReport) -> dict[str, Any]:
    return {
        "gap_score": gap.gap_score,
        "classification": str(gap.classification),
        "missing": [
            {"key": e.key, "weight": e.weight, "severity": e.severity, "suggestion": e.suggestion}
            for e in gap.missing
        ],
    }


def to_dict(result: AnalysisResult) -> dict[str, Any]:
    q = result.qualification
    data: dict[str, Any] = {
        "url": result.url,
        "outcome": str(result.outcome),
        "qualification": {
            "accepted": q.accepted,
            "layer": q.layer,
            "reason": q.reason,
            "confidence": q.confidence,
        },
    }
    if result.platform is not None:
        data["platform"] = {
            "name": str(result.platform.platform),
            "confidence": result.platform.confidence,
            "score": result.platform.score,
        }
    if result.record is not None:
        data["record"] = record_to_dict(result.record)
    if result.gap is not None:
        data["gap"] = gap_to_dict(result.gap)
    if result.warnings:
        data["warnings"] = list(result.warnings)
    data["meta"] = {"elapsed_ms": result.elapsed_ms}
    return data


def to_json(result: AnalysisResult, indent: int | None = 2) -> str:
    """Serialize an AnalysisResult to a JSON string.

    Args:
        result: AnalysisResult to serialize
        indent: JSON indentation level, None for a single line
    """
    return json.dumps(to_dict(result), ensure_ascii=False, indent=indent)


def to_summary(result: AnalysisResult) -> str:
    """One-line human summary."""
    if result.record is None:
        return f"{result.outcome}: {result.qualification.reason} ({result.url})"
    line = str(result.record)
    if result.gap is not None:
        line += f" | gap {result.gap.gap_score} ({result.gap.classification})"
    return line
