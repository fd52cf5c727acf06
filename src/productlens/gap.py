# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Attribute-completeness (gap) scoring.

Each canonical attribute key carries an importance weight. Every key the
merged record does not cover adds its weight to the gap score, which is then
bucketed into ``none`` / ``mild`` / ``moderate`` / ``severe``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from functools import lru_cache

from productlens import ProductRecord
from productlens.config import AnalyzerConfig

logger = logging.getLogger(__name__)


class GapClass(StrEnum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


# Upper bound (inclusive) of each bucket, lowest first; anything above is severe.
_BREAKPOINTS: tuple[tuple[int, GapClass], ...] = (
    (0, GapClass.NONE),
    (4, GapClass.MILD),
    (8, GapClass.MODERATE),
)

_SEVERITY_BY_WEIGHT = {3: "high", 2: "medium", 1: "low"}

# Keys that name record fields rather than spec rows.
_RECORD_FIELDS = ("brand", "sku", "gtin", "mpn")


@dataclass(frozen=True)
class GapEntry:
    key: str
    weight: int
    severity: str  # high | medium | low
    suggestion: str


@dataclass
class GapReport:
    missing: list[GapEntry] = field(default_factory=list)
    gap_score: int = 0
    classification: GapClass = GapClass.NONE

    @property
    def missing_keys(self) -> list[str]:
        return [e.key for e in self.missing]


def classify(score: int) -> GapClass:
    """Map a gap score onto its completeness bucket."""
    for upper, label in _BREAKPOINTS:
        if score <= upper:
            return label
    return GapClass.SEVERE


def severity_for(weight: int) -> str:
    if weight >= 3:
        return "high"
    return _SEVERITY_BY_WEIGHT.get(weight, "low")


@lru_cache(maxsize=256)
def _word_re(key: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![a-z0-9]){re.escape(key)}(?![a-z0-9])")


def is_covered(key: str, record: ProductRecord) -> bool:
    """True when the record carries ``key``: a spec row naming it, or a filled record field."""
    key = key.lower()
    if key in _RECORD_FIELDS and getattr(record, key):
        return True
    pattern = _word_re(key)
    return any(spec.key == key or pattern.search(spec.key) for spec in record.specs)


def score_gaps(
    record: ProductRecord,
    config: AnalyzerConfig | None = None,
    *,
    weights: Mapping[str, int] | None = None,
) -> GapReport:
    """Score the record's missing canonical keys.

    ``weights`` overrides the table entirely; otherwise the config's defaults
    plus the record platform's additions are used.
    """
    if weights is None:
        weights = (config or AnalyzerConfig()).weights_for(record.platform)

    report = GapReport()
    for key, weight in weights.items():
        if weight <= 0 or is_covered(key, record):
            continue
        report.missing.append(
            GapEntry(
                key=key,
                weight=weight,
                severity=severity_for(weight),
                suggestion=f"Add {key} for completeness",
            )
        )
        report.gap_score += weight

    report.classification = classify(report.gap_score)
    logger.debug(
        "Gap score %d (%s) for %s, missing=%s",
        report.gap_score,
        report.classification,
        record.url,
        report.missing_keys,
    )
    return report
