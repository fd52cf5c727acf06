# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for productlens.telemetry.collector and the module-level API."""

from __future__ import annotations

from productlens import telemetry
from productlens.pipeline import analyze_document
from productlens.telemetry import events
from productlens.telemetry.collector import TelemetryCollector, TelemetryConfig
from tests._helpers import MOUSE_PRODUCT, jsonld, page

# ── TelemetryCollector ───────────────────────────────────────────


class TestCollector:
    def test_disabled_by_default(self):
        collector = TelemetryCollector(TelemetryConfig())
        collector.emit("productlens.test", {"a": 1})
        assert collector.events == []
        assert collector.meta.emitted == 0

    def test_records_sanitized_event(self):
        collector = TelemetryCollector(TelemetryConfig(enabled=True))
        collector.emit("productlens.test", {"url": "https://x.example.com/p?q=1", "html": "<p>secret</p>", "n": 2})
        (event,) = collector.events
        assert event["event"] == "productlens.test"
        assert event["attributes"] == {"url": "https://x.example.com/p", "n": 2}
        assert isinstance(event["timestamp"], float)

    def test_bounded(self):
        collector = TelemetryCollector(TelemetryConfig(enabled=True, max_events=2))
        for i in range(5):
            collector.emit("productlens.test", {"i": i})
        assert [e["attributes"]["i"] for e in collector.events] == [0, 1]
        assert collector.meta.snapshot() == {"emitted": 2, "dropped": 3, "drained": 0}

    def test_drain_and_of_type(self):
        collector = TelemetryCollector(TelemetryConfig(enabled=True))
        collector.emit("productlens.a", {})
        collector.emit("productlens.b", {})
        assert len(collector.of_type("productlens.a")) == 1
        assert len(collector.drain()) == 2
        assert collector.events == []
        assert collector.meta.drained == 2

    def test_hash_paths(self):
        collector = TelemetryCollector(TelemetryConfig(enabled=True, hash_url_paths=True))
        collector.emit("productlens.test", {"url": "https://x.example.com/products/secret-item"})
        url = collector.events[0]["attributes"]["url"]
        assert url.startswith("https://x.example.com/")
        assert "secret-item" not in url

    def test_shutdown_stops_collection(self):
        collector = TelemetryCollector(TelemetryConfig(enabled=True))
        collector.shutdown()
        collector.emit("productlens.test", {})
        assert collector.events == []

    def test_bad_payload_swallowed(self):
        collector = TelemetryCollector(TelemetryConfig(enabled=True))
        collector.emit("productlens.test", None)  # type: ignore[arg-type]
        assert collector.events == []


# ── Module API ───────────────────────────────────────────────────


class TestModuleApi:
    def test_emit_without_configure_is_noop(self):
        telemetry.emit("productlens.test", {"a": 1})
        assert telemetry.get_collector() is None

    def test_configure_idempotent(self):
        first = telemetry.configure()
        assert telemetry.configure(TelemetryConfig(enabled=False)) is first
        assert first.config.enabled

    def test_emit_routes_to_collector(self, collector):
        telemetry.emit("productlens.test", {"a": 1})
        assert collector.events[0]["attributes"] == {"a": 1}

    def test_reset_for_testing(self, collector):
        telemetry._reset_for_testing()
        assert telemetry.get_collector() is None
        telemetry.emit("productlens.test", {})
        assert collector.events == []

    def test_shutdown(self, collector):
        telemetry.shutdown()
        telemetry.emit("productlens.test", {})
        assert collector.events == []


# ── Environment configuration ────────────────────────────────────


class TestConfigureFromEnv:
    def test_off_by_default(self):
        assert telemetry.configure_from_env({}) is None
        assert telemetry.get_collector() is None

    def test_switched_on(self):
        collector = telemetry.configure_from_env({"PRODUCTLENS_TELEMETRY": "1"})
        assert collector is telemetry.get_collector()
        assert collector.config.enabled
        assert not collector.config.hash_url_paths

    def test_hash_paths(self):
        env = {"PRODUCTLENS_TELEMETRY": "true", "PRODUCTLENS_TELEMETRY_HASH_PATHS": "yes"}
        assert telemetry.configure_from_env(env).config.hash_url_paths


# ── Outcome summary ──────────────────────────────────────────────


class TestOutcomeSummary:
    def test_empty_without_collector(self):
        summary = telemetry.outcome_summary()
        assert summary["passes"] == 0
        assert summary["mean_gap_score"] is None
        assert set(summary["field_hits"]) == set(events.OUTCOME_FIELDS)

    def test_aggregates_passes(self, collector):
        analyze_document(page(jsonld(MOUSE_PRODUCT)))
        analyze_document(page(jsonld({"@type": "Product", "name": "Plain Mug"})))
        analyze_document(page("<p>hello</p>", url="https://shop.example.com/"))
        summary = telemetry.outcome_summary()
        assert summary["passes"] == 3
        assert summary["outcomes"] == {"extracted": 2, "not_a_product": 1}
        assert summary["platforms"] == {"generic": 2}
        assert summary["field_hits"]["title"] == 2
        assert summary["field_hits"]["price"] == 1
        assert summary["field_hits"]["reviews"] == 0
        assert len(collector.of_type(events.EXTRACTION_OUTCOME)) == 3
