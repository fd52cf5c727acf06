# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""One analysis pass over a document snapshot.

    qualify -> detect platform -> semantic + positional -> merge -> gap score

The chain is synchronous and never raises for page content: extractor
faults degrade to absent output plus a warning, rejections and title-less
pages are reported through ``AnalysisResult.outcome``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeVar

from productlens import Platform, ProductRecord
from productlens import telemetry as _telemetry
from productlens.config import AnalyzerConfig
from productlens.document import DocumentSnapshot
from productlens.errors import ExtractorFault, MissingRequiredField, NotAProductPage
from productlens.gap import GapReport, score_gaps
from productlens.logging_config import analysis_context
from productlens.merge import SEMANTIC, merge_record
from productlens.normalize import is_empty
from productlens.platform_detector import PlatformResult, detect_platform
from productlens.positional import PositionalResult, extract_positional
from productlens.qualifier import SKIP_PATH_RE, Qualification, qualify
from productlens.semantic import SemanticParse, extract_semantic
from productlens.telemetry import events as _events
from productlens.telemetry.privacy import sanitize_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalysisOutcome(StrEnum):
    EXTRACTED = "extracted"
    NOT_A_PRODUCT = "not_a_product"
    NOT_EXTRACTABLE = "not_extractable"


@dataclass
class AnalysisResult:
    """Result of one analysis pass."""

    url: str
    outcome: AnalysisOutcome
    qualification: Qualification
    platform: PlatformResult | None = None
    record: ProductRecord | None = None
    gap: GapReport | None = None
    warnings: list[str] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome == AnalysisOutcome.EXTRACTED

    def raise_for_outcome(self) -> AnalysisResult:
        """Return self when a record was extracted, otherwise raise.

        Raises:
            NotAProductPage: the qualifier rejected the document.
            MissingRequiredField: the page qualified but no title was found.
        """
        if self.outcome == AnalysisOutcome.NOT_A_PRODUCT:
            raise NotAProductPage(self.qualification.reason, url=self.url, layer=self.qualification.layer)
        if self.outcome == AnalysisOutcome.NOT_EXTRACTABLE:
            raise MissingRequiredField(f"no title extracted from {self.url}", field="title")
        return self


_GENERIC_PLATFORM = PlatformResult(Platform.GENERIC, 0.0, 0, {}, ())


def _record_fault(fault: ExtractorFault, *, url: str, warnings: list[str]) -> None:
    warnings.append(str(fault))
    _telemetry.emit(
        _events.EXTRACTOR_FAULT,
        dict(_events.extractor_fault(url=url, extractor=fault.extractor, error_type=type(fault.cause).__name__)),
    )


def _guarded(
    name: str,
    fn: Callable[..., T],
    *args: Any,
    default: T,
    url: str,
    warnings: list[str],
) -> T:
    """Run one extractor; an unexpected exception yields ``default`` and a warning."""
    try:
        return fn(*args)
    except Exception as e:
        fault = ExtractorFault(name, e)
        logger.warning("Extractor fault on %s: %s", url, fault, exc_info=True)
        _record_fault(fault, url=url, warnings=warnings)
        return default


def analyze_document(snapshot: DocumentSnapshot, config: AnalyzerConfig | None = None) -> AnalysisResult:
    """Run the full analysis chain on one snapshot."""
    with analysis_context(page=sanitize_url(snapshot.url)):
        return _analyze(snapshot, config or AnalyzerConfig())


def _analyze(snapshot: DocumentSnapshot, config: AnalyzerConfig) -> AnalysisResult:
    t0 = time.monotonic()
    url = snapshot.url
    warnings: list[str] = []

    # Auth/error paths are rejected before any extractor touches the document.
    if SKIP_PATH_RE.search(snapshot.pathname):
        semantic = SemanticParse()
    else:
        semantic = _guarded("semantic", extract_semantic, snapshot, default=SemanticParse(), url=url, warnings=warnings)
    for fault in semantic.faults:
        if isinstance(fault, ExtractorFault):
            _record_fault(fault, url=url, warnings=warnings)
        else:
            warnings.append(str(fault))

    qualification = qualify(snapshot, semantic)
    _telemetry.emit(
        _events.QUALIFICATION_VERDICT,
        dict(
            _events.qualification_verdict(
                url=url,
                accepted=qualification.accepted,
                layer=qualification.layer,
                reason=qualification.reason,
                confidence=qualification.confidence,
            )
        ),
    )

    if not qualification.accepted:
        logger.info("Not a product page: %s (%s)", sanitize_url(url), qualification.reason)
        result = AnalysisResult(url, AnalysisOutcome.NOT_A_PRODUCT, qualification, warnings=warnings)
        return _finish(result, t0, sources={})

    platform = _guarded("platform", detect_platform, snapshot, default=_GENERIC_PLATFORM, url=url, warnings=warnings)
    _telemetry.emit(
        _events.PLATFORM_DETECTED,
        dict(
            _events.platform_detected(
                url=url,
                platform=str(platform.platform),
                score=platform.score,
                confidence=platform.confidence,
                signals=list(platform.signals),
            )
        ),
    )

    positional = _guarded(
        "positional",
        extract_positional,
        snapshot,
        platform.platform,
        default=PositionalResult(),
        url=url,
        warnings=warnings,
    )
    for fault in positional.faults:
        _record_fault(fault, url=url, warnings=warnings)

    semantic_fields, channels = semantic.select()
    try:
        record = merge_record(semantic_fields, positional.fields, url=url, platform=platform.platform)
    except MissingRequiredField as e:
        logger.info("Qualified page without a title: %s", sanitize_url(url))
        warnings.append(str(e))
        result = AnalysisResult(url, AnalysisOutcome.NOT_EXTRACTABLE, qualification, platform, warnings=warnings)
        return _finish(result, t0, sources={})

    sources = record.debug["sources"]
    record.debug["channels"] = {
        k: str(channels[k]) for k, side in sources.items() if side == SEMANTIC and k in channels
    }
    record.debug["exhausted"] = list(positional.exhausted)
    primary = semantic.primary
    record.debug["primary_channel"] = str(primary.channel) if primary else None
    record.debug["qualifier_layer"] = qualification.layer

    gap = score_gaps(record, config)
    result = AnalysisResult(
        url,
        AnalysisOutcome.EXTRACTED,
        qualification,
        platform,
        record=record,
        gap=gap,
        warnings=warnings,
    )
    return _finish(result, t0, sources=sources)


def _finish(result: AnalysisResult, t0: float, *, sources: dict[str, str]) -> AnalysisResult:
    result.elapsed_ms = int((time.monotonic() - t0) * 1000)
    _telemetry.emit(
        _events.EXTRACTION_OUTCOME,
        dict(
            _events.extraction_outcome(
                url=result.url,
                outcome=str(result.outcome),
                platform=str(result.platform.platform) if result.platform else str(Platform.GENERIC),
                gap_score=result.gap.gap_score if result.gap else 0,
                classification=str(result.gap.classification) if result.gap else "",
                sources=sources,
                fields=_field_presence(result.record),
                elapsed_ms=result.elapsed_ms,
            )
        ),
    )
    logger.debug(
        "Analysis %s for %s in %dms (%d warning(s))",
        result.outcome,
        sanitize_url(result.url),
        result.elapsed_ms,
        len(result.warnings),
    )
    return result


def _field_presence(record: ProductRecord | None) -> dict[str, bool]:
    if record is None:
        return {name: False for name in _events.OUTCOME_FIELDS}
    return {name: not is_empty(getattr(record, name)) for name in _events.OUTCOME_FIELDS}
