# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Telemetry event types, TypedDict payload definitions, and builder functions."""

from __future__ import annotations

from typing import TypedDict

# ── Event type constants ─────────────────────────────────────────

NAVIGATION_TRIGGER = "productlens.navigation.trigger"
QUALIFICATION_VERDICT = "productlens.qualification.verdict"
PLATFORM_DETECTED = "productlens.platform.detected"
EXTRACTION_OUTCOME = "productlens.extraction.outcome"
EXTRACTOR_FAULT = "productlens.extractor.fault"

# Major record fields reported as present/absent on every outcome event.
OUTCOME_FIELDS = ("title", "price", "brand", "bullets", "description", "images", "variants", "specs", "reviews")


# ── TypedDict payload definitions ────────────────────────────────


class NavigationTriggerPayload(TypedDict):
    kind: str
    url: str
    state: str  # scheduled | dropped


class QualificationVerdictPayload(TypedDict):
    url: str
    accepted: bool
    layer: str
    reason: str
    confidence: float


class PlatformDetectedPayload(TypedDict):
    url: str
    platform: str
    score: int
    confidence: float
    signals: list[str]


class ExtractionOutcomePayload(TypedDict):
    url: str
    outcome: str
    platform: str
    gap_score: int
    classification: str
    sources: dict[str, int]
    fields: dict[str, bool]
    elapsed_ms: int


class ExtractorFaultPayload(TypedDict):
    url: str
    extractor: str
    error_type: str


# ── Payload builder functions ────────────────────────────────────


def navigation_trigger(*, kind: str, url: str, state: str) -> NavigationTriggerPayload:
    return NavigationTriggerPayload(kind=kind, url=url, state=state)


def qualification_verdict(
    *,
    url: str,
    accepted: bool,
    layer: str,
    reason: str,
    confidence: float,
) -> QualificationVerdictPayload:
    return QualificationVerdictPayload(
        url=url,
        accepted=accepted,
        layer=layer,
        reason=reason,
        confidence=round(confidence, 2),
    )


def platform_detected(
    *,
    url: str,
    platform: str,
    score: int,
    confidence: float,
    signals: list[str],
) -> PlatformDetectedPayload:
    return PlatformDetectedPayload(
        url=url,
        platform=platform,
        score=score,
        confidence=round(confidence, 2),
        signals=signals,
    )


def extraction_outcome(
    *,
    url: str,
    outcome: str,
    platform: str,
    gap_score: int,
    classification: str,
    sources: dict[str, str],
    fields: dict[str, bool] | None = None,
    elapsed_ms: int,
) -> ExtractionOutcomePayload:
    presence = fields or {}
    # Per-side counts for provenance; presence is reported per major field.
    counts: dict[str, int] = {}
    for side in sources.values():
        counts[side] = counts.get(side, 0) + 1
    return ExtractionOutcomePayload(
        url=url,
        outcome=outcome,
        platform=platform,
        gap_score=gap_score,
        classification=classification,
        sources=counts,
        fields={name: bool(presence.get(name, False)) for name in OUTCOME_FIELDS},
        elapsed_ms=elapsed_ms,
    )


def extractor_fault(*, url: str, extractor: str, error_type: str) -> ExtractorFaultPayload:
    return ExtractorFaultPayload(url=url, extractor=extractor, error_type=error_type)
