# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Re-analysis trigger state machine.

    Idle --trigger--> Debouncing --timer expiry--> Analyzing --done--> Idle
                        ^    |
                        +----+ trigger (window restarts)

Triggers come from document readiness, in-place URL changes, history
traversal, significant mutation batches and manual requests. Every trigger
(re)starts the debounce window so a burst collapses into one pass. A window
that expires while a pass is running is dropped, never queued. A pass whose
snapshot URL equals the last analyzed URL is skipped unless forced.

All state lives in ``NavigationState`` and is mutated only by the monitor.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol, runtime_checkable

from productlens import telemetry as _telemetry
from productlens.config import AnalyzerConfig
from productlens.document import DocumentSnapshot
from productlens.mutation_filter import MutationRecord, evaluate_mutations
from productlens.pipeline import AnalysisResult, analyze_document
from productlens.telemetry import events as _events

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TriggerKind(StrEnum):
    DOCUMENT_READY = "document_ready"
    URL_CHANGE = "url_change"  # pushState / replaceState
    HISTORY = "history"  # back / forward
    MUTATIONS = "mutations"
    MANUAL = "manual"


@runtime_checkable
class DocumentSource(Protocol):
    """Anything that can produce a snapshot of the current document."""

    async def snapshot(self) -> DocumentSnapshot: ...


ResultCallback = Callable[[AnalysisResult], Awaitable[None] | None]
Analyzer = Callable[[DocumentSnapshot, AnalyzerConfig], AnalysisResult]


@dataclass
class NavigationState:
    """Mutable monitor state. Owned exclusively by one NavigationMonitor."""

    last_url: str = ""
    analyzing: bool = False
    pending_timer: asyncio.TimerHandle | None = None
    observers: list[Callable[[], object]] = field(default_factory=list)
    passes: int = 0  # completed analysis passes (skipped duplicates excluded)

    @property
    def debouncing(self) -> bool:
        return self.pending_timer is not None


# ---------------------------------------------------------------------------
# Monitor
# ---------------------------------------------------------------------------


class NavigationMonitor:
    """Debounced, re-entrancy-guarded driver of the analysis chain."""

    def __init__(
        self,
        source: DocumentSource,
        on_result: ResultCallback,
        *,
        config: AnalyzerConfig | None = None,
        analyzer: Analyzer = analyze_document,
    ) -> None:
        self._source = source
        self._on_result = on_result
        self._config = config or AnalyzerConfig()
        self._analyzer = analyzer
        self.state = NavigationState()
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def config(self) -> AnalyzerConfig:
        return self._config

    # --- triggers ---

    def notify(self, kind: TriggerKind | str, url: str | None = None) -> None:
        """Record a trigger and (re)start the debounce window.

        Must be called from the event loop thread.
        """
        kind = TriggerKind(kind)
        if self._stopped:
            return
        loop = asyncio.get_running_loop()
        if self.state.pending_timer is not None:
            self.state.pending_timer.cancel()
        self.state.pending_timer = loop.call_later(self._config.debounce_s, self._on_window_expired)
        logger.debug("Trigger %s (%s), window restarted", kind, url or "-")
        _telemetry.emit(
            _events.NAVIGATION_TRIGGER,
            dict(_events.navigation_trigger(kind=str(kind), url=url or "", state="scheduled")),
        )

    def notify_mutations(self, batch: Sequence[MutationRecord]) -> bool:
        """Feed one coalesced mutation batch; trigger only if it is significant."""
        if not self._config.observe_mutations:
            return False
        verdict = evaluate_mutations(batch, self._config.mutation_policy)
        if not verdict.significant:
            return False
        self.notify(TriggerKind.MUTATIONS)
        return True

    async def force(self) -> AnalysisResult | None:
        """Re-analyze now, bypassing URL deduplication.

        Returns None when a pass is already in flight.
        """
        if self.state.analyzing:
            logger.debug("Forced analysis dropped: pass in flight")
            return None
        self._cancel_timer()
        self.state.last_url = ""
        _telemetry.emit(
            _events.NAVIGATION_TRIGGER,
            dict(_events.navigation_trigger(kind=str(TriggerKind.MANUAL), url="", state="forced")),
        )
        return await self._run_pass()

    # --- lifecycle ---

    def add_observer(self, detach: Callable[[], object]) -> None:
        """Register a detach callable run on ``stop()``."""
        self.state.observers.append(detach)

    def start(self) -> None:
        """Schedule the initial document-ready pass."""
        self._stopped = False
        self.notify(TriggerKind.DOCUMENT_READY)

    async def stop(self) -> None:
        """Cancel pending work and detach observers."""
        self._stopped = True
        self._cancel_timer()
        observers, self.state.observers = self.state.observers, []
        for detach in observers:
            try:
                result = detach()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.debug("Observer detach failed", exc_info=True)
        if self._task is not None and not self._task.done():
            try:
                await self._task
            except Exception:
                logger.debug("In-flight pass failed during stop", exc_info=True)

    async def wait_idle(self) -> None:
        """Wait for a pending window and any in-flight pass to finish."""
        while self.state.pending_timer is not None or (self._task is not None and not self._task.done()):
            if self._task is not None and not self._task.done():
                await asyncio.gather(self._task, return_exceptions=True)
            else:
                await asyncio.sleep(self._config.debounce_s / 4 or 0.001)

    # --- internals ---

    def _cancel_timer(self) -> None:
        if self.state.pending_timer is not None:
            self.state.pending_timer.cancel()
            self.state.pending_timer = None

    def _on_window_expired(self) -> None:
        self.state.pending_timer = None
        if self.state.analyzing:
            logger.info("Debounce window expired during analysis; trigger dropped")
            _telemetry.emit(
                _events.NAVIGATION_TRIGGER,
                dict(_events.navigation_trigger(kind="window", url=self.state.last_url, state="dropped")),
            )
            return
        self._task = asyncio.get_running_loop().create_task(self._run_pass())

    async def _run_pass(self) -> AnalysisResult | None:
        self.state.analyzing = True
        analyzed_url: str | None = None
        try:
            snapshot = await self._source.snapshot()
            if snapshot.url == self.state.last_url:
                logger.debug("URL unchanged (%s); pass skipped", snapshot.url)
                return None
            analyzed_url = snapshot.url
            result = self._analyzer(snapshot, self._config)
            self.state.passes += 1
            delivered = self._on_result(result)
            if inspect.isawaitable(delivered):
                await delivered
            return result
        except Exception:
            logger.exception("Analysis pass failed")
            return None
        finally:
            if analyzed_url is not None:
                self.state.last_url = analyzed_url
            self.state.analyzing = False
