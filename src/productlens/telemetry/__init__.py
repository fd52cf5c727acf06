# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Analysis telemetry: one event per trigger, verdict, platform decision,
outcome and extractor fault (names and payloads in ``events``).

Nothing is recorded until a collector is configured, explicitly or from the
environment. Events stay in memory for the caller to drain or summarize:

    from productlens import telemetry

    telemetry.configure_from_env()      # PRODUCTLENS_TELEMETRY=1
    ...                                 # analysis passes
    telemetry.outcome_summary()         # {"passes": 3, "outcomes": {...}, ...}

Emitting never raises and never changes an analysis result.
"""

from __future__ import annotations

import atexit
import contextlib
import os
from collections import Counter
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from . import events

if TYPE_CHECKING:
    from .collector import TelemetryCollector, TelemetryConfig

_TRUTHY = frozenset({"1", "true", "yes", "on"})

_collector: TelemetryCollector | None = None


def configure(config: TelemetryConfig | None = None) -> TelemetryCollector:
    """Install the process-wide collector (enabled unless ``config`` says otherwise).

    The first call wins; later calls return the installed collector.
    """
    global _collector
    if _collector is None:
        from .collector import TelemetryCollector, TelemetryConfig

        _collector = TelemetryCollector(config or TelemetryConfig(enabled=True))
        atexit.register(shutdown)
    return _collector


def configure_from_env(env: Mapping[str, str] | None = None) -> TelemetryCollector | None:
    """Configure from ``PRODUCTLENS_TELEMETRY`` / ``PRODUCTLENS_TELEMETRY_HASH_PATHS``.

    Returns None (and installs nothing) unless telemetry is switched on.
    """
    from .collector import TelemetryConfig

    env = os.environ if env is None else env
    if env.get("PRODUCTLENS_TELEMETRY", "").strip().lower() not in _TRUTHY:
        return None
    hash_paths = env.get("PRODUCTLENS_TELEMETRY_HASH_PATHS", "").strip().lower() in _TRUTHY
    return configure(TelemetryConfig(enabled=True, hash_url_paths=hash_paths))


def get_collector() -> TelemetryCollector | None:
    return _collector


def emit(event_type: str, payload: Mapping[str, Any]) -> None:
    """Record one event on the configured collector; no-op otherwise."""
    if _collector is None:
        return
    with contextlib.suppress(Exception):
        _collector.emit(event_type, dict(payload))


def outcome_summary() -> dict[str, Any]:
    """Aggregate the buffered extraction-outcome events.

    Returns pass count, outcome and platform tallies, mean gap score over
    extracted passes, and per-field hit counts. Buffered events are left in
    place.
    """
    outcomes = [e["attributes"] for e in _collector.of_type(events.EXTRACTION_OUTCOME)] if _collector else []
    extracted = [o for o in outcomes if o.get("outcome") == "extracted"]
    field_hits = Counter(name for o in extracted for name, present in o.get("fields", {}).items() if present)
    return {
        "passes": len(outcomes),
        "outcomes": dict(Counter(o.get("outcome", "") for o in outcomes)),
        "platforms": dict(Counter(o.get("platform", "") for o in extracted)),
        "mean_gap_score": (
            round(sum(o.get("gap_score", 0) for o in extracted) / len(extracted), 2) if extracted else None
        ),
        "field_hits": {name: field_hits.get(name, 0) for name in events.OUTCOME_FIELDS},
    }


def shutdown() -> None:
    """Stop accepting events; buffered events stay readable."""
    if _collector is None:
        return
    with contextlib.suppress(Exception):
        _collector.shutdown()


def _reset_for_testing() -> None:
    """Drop the collector so each test starts unconfigured."""
    global _collector
    shutdown()
    _collector = None
