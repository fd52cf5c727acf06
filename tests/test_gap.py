# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for productlens.gap: weighted attribute completeness."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from productlens import Platform, ProductRecord, SpecEntry
from productlens.config import DEFAULT_GAP_WEIGHTS, AnalyzerConfig
from productlens.gap import GapClass, classify, is_covered, score_gaps, severity_for


def _record(*keys: str, platform: Platform = Platform.GENERIC, **fields) -> ProductRecord:
    specs = [SpecEntry(k, "x") for k in keys]
    return ProductRecord(title="Desk", url="https://shop.example.com/p/1", platform=platform, specs=specs, **fields)


class TestClassification:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, GapClass.NONE),
            (2, GapClass.MILD),
            (4, GapClass.MILD),
            (6, GapClass.MODERATE),
            (8, GapClass.MODERATE),
            (9, GapClass.SEVERE),
            (10, GapClass.SEVERE),
        ],
    )
    def test_breakpoints(self, score, expected):
        assert classify(score) == expected

    def test_severity(self):
        assert [severity_for(w) for w in (5, 3, 2, 1)] == ["high", "high", "medium", "low"]


class TestScoring:
    def test_missing_material_dimensions_warranty(self):
        report = score_gaps(_record("weight", "color", "size"))
        assert sorted(report.missing_keys) == ["dimensions", "material", "warranty"]
        assert report.gap_score == 8
        assert report.classification == GapClass.MODERATE

    def test_complete_record(self):
        report = score_gaps(_record(*DEFAULT_GAP_WEIGHTS))
        assert report.missing == []
        assert report.classification == GapClass.NONE

    def test_entries(self):
        report = score_gaps(_record(), weights={"material": 3})
        (entry,) = report.missing
        assert entry.key == "material"
        assert entry.severity == "high"
        assert entry.suggestion == "Add material for completeness"

    def test_zero_weight_ignored(self):
        report = score_gaps(_record(), weights={"material": 0, "color": 1})
        assert report.missing_keys == ["color"]

    def test_platform_additions(self):
        record = _record(*DEFAULT_GAP_WEIGHTS, platform=Platform.AMAZON)
        report = score_gaps(record)
        assert sorted(report.missing_keys) == ["asin", "brand"]
        assert report.gap_score == 4

        record.brand = "Acme"
        assert score_gaps(record).missing_keys == ["asin"]

    def test_config_weights(self):
        config = AnalyzerConfig().with_gap_weights({"finish": 2})
        assert score_gaps(_record(), config).missing_keys == ["finish"]


class TestCoverage:
    def test_whole_word_spec_key(self):
        record = _record("item weight", "frame material")
        assert is_covered("weight", record)
        assert is_covered("material", record)

    def test_substring_does_not_count(self):
        assert not is_covered("size", _record("oversized"))

    def test_record_field(self):
        assert is_covered("sku", _record(sku="AB-1"))
        assert not is_covered("sku", _record())


@given(st.sets(st.sampled_from(sorted(DEFAULT_GAP_WEIGHTS))))
def test_covering_more_never_raises_score(keys):
    fewer = score_gaps(_record(*keys)).gap_score
    more = score_gaps(_record(*keys, "material")).gap_score
    assert more <= fewer
    assert 0 <= fewer <= sum(DEFAULT_GAP_WEIGHTS.values())
