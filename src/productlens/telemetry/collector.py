# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Bounded in-memory telemetry collector, config, and meta tracking."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass

from .privacy import sanitize_payload

logger = logging.getLogger(__name__)


# ── Config ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class TelemetryConfig:
    """Immutable telemetry configuration."""

    enabled: bool = False
    max_events: int = 10_000
    hash_url_paths: bool = False


# ── Meta (internal counters) ─────────────────────────────────────


class TelemetryMeta:
    """Approximate telemetry counters. Best-effort diagnostics."""

    __slots__ = ("emitted", "dropped", "drained")

    def __init__(self) -> None:
        self.emitted: int = 0
        self.dropped: int = 0
        self.drained: int = 0

    def snapshot(self) -> dict:
        return {"emitted": self.emitted, "dropped": self.dropped, "drained": self.drained}


# ── Collector ────────────────────────────────────────────────────


class TelemetryCollector:
    """Fire-and-forget event collector.

    Events past ``max_events`` are counted as dropped rather than evicting
    older ones. All exceptions are suppressed: telemetry never affects analysis.
    """

    def __init__(self, config: TelemetryConfig) -> None:
        self.config = config
        self.meta = TelemetryMeta()
        self._events: deque[dict] = deque()
        self._shutdown = False

    def emit(self, event_type: str, payload: dict) -> None:
        """Record a sanitized event. Never raises."""
        try:
            if self._shutdown or not self.config.enabled:
                return

            if len(self._events) >= self.config.max_events:
                self.meta.dropped += 1
                return

            self._events.append(
                {
                    "event": event_type,
                    "timestamp": time.time(),
                    "attributes": sanitize_payload(payload, hash_paths=self.config.hash_url_paths),
                }
            )
            self.meta.emitted += 1
        except Exception:  # nosec B110
            pass  # Fire-and-forget, never propagate

    @property
    def events(self) -> list[dict]:
        return list(self._events)

    def of_type(self, event_type: str) -> list[dict]:
        return [e for e in self._events if e["event"] == event_type]

    def drain(self) -> list[dict]:
        """Return and clear all buffered events."""
        batch = list(self._events)
        self._events.clear()
        self.meta.drained += len(batch)
        return batch

    def shutdown(self) -> None:
        if not self._shutdown:
            logger.debug("Telemetry shutdown: %s", self.meta.snapshot())
        self._shutdown = True
