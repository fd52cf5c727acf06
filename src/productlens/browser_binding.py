# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Playwright binding: feed a live page into a NavigationMonitor.

``PlaywrightDocumentSource`` snapshots the rendered document (markup, URL
and the platform marker globals visible on ``window``). ``attach_page()``
installs an in-page observer that reports history API calls, back/forward
traversal and coalesced mutation batches back to Python, and wires the
page's load/navigation events to the monitor's triggers.

Requires the ``browser`` extra (playwright).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from productlens.document import DocumentSnapshot
from productlens.mutation_filter import MutationRecord
from productlens.navigation_monitor import NavigationMonitor, TriggerKind

if TYPE_CHECKING:
    from playwright.async_api import Frame, Page

logger = logging.getLogger(__name__)

# Globals looked up on window for platform detection.
MARKER_GLOBALS: tuple[str, ...] = ("Shopify", "wc_add_to_cart_params", "woocommerce_params")

HISTORY_BINDING = "__productlensHistory"
MUTATION_BINDING = "__productlensMutations"

_MUTATION_COALESCE_MS = 250
_MAX_ADDED_HTML = 4000

_GLOBALS_JS = """(names) => names.filter((n) => {
  try { return typeof window[n] !== 'undefined' && window[n] !== null; } catch (e) { return false; }
})"""

# Installed before any page script runs; survives full navigations.
_OBSERVER_JS = f"""(() => {{
  if (window.__productlensObserver) return;
  window.__productlensObserver = true;

  const report = (kind) => {{
    try {{ window.{HISTORY_BINDING}(kind, location.href); }} catch (e) {{}}
  }};
  for (const name of ['pushState', 'replaceState']) {{
    const original = history[name];
    history[name] = function (...args) {{
      const ret = original.apply(this, args);
      report('url_change');
      return ret;
    }};
  }}
  window.addEventListener('popstate', () => report('history'));

  const describe = (node) => {{
    if (!node || node.nodeType !== 1) return '';
    let d = node.tagName.toLowerCase();
    if (node.id) d += '#' + node.id;
    if (typeof node.className === 'string' && node.className.trim()) {{
      d += '.' + node.className.trim().split(/\\s+/).join('.');
    }}
    const role = node.getAttribute('role');
    if (role) d += '[role=' + role + ']';
    return d;
  }};
  const pathOf = (node) => {{
    const path = [];
    for (let n = node; n && n.nodeType === 1 && n !== document.body; n = n.parentElement) {{
      path.push(describe(n));
    }}
    return path;
  }};

  let pending = [];
  let timer = null;
  const flush = () => {{
    timer = null;
    const batch = pending;
    pending = [];
    if (batch.length) {{
      try {{ window.{MUTATION_BINDING}(batch); }} catch (e) {{}}
    }}
  }};
  const start = () => {{
    new MutationObserver((records) => {{
      for (const r of records) {{
        if (r.type !== 'childList' || !r.addedNodes.length) continue;
        let added = '';
        for (const n of r.addedNodes) {{
          if (n.nodeType === 1) added += n.outerHTML;
          if (added.length > {_MAX_ADDED_HTML}) break;
        }}
        pending.push({{ path: pathOf(r.target), added: added.slice(0, {_MAX_ADDED_HTML}) }});
      }}
      if (pending.length && !timer) timer = setTimeout(flush, {_MUTATION_COALESCE_MS});
    }}).observe(document.documentElement, {{ childList: true, subtree: true }});
  }};
  if (document.documentElement) start();
  else document.addEventListener('DOMContentLoaded', start);
}})()"""


class PlaywrightDocumentSource:
    """DocumentSource over a Playwright page."""

    def __init__(self, page: Page, *, marker_globals: tuple[str, ...] = MARKER_GLOBALS) -> None:
        self._page = page
        self._marker_globals = marker_globals

    async def snapshot(self) -> DocumentSnapshot:
        html = await self._page.content()
        try:
            present = await self._page.evaluate(_GLOBALS_JS, list(self._marker_globals))
        except Exception:
            logger.debug("Marker global lookup failed", exc_info=True)
            present = []
        return DocumentSnapshot.from_html(html, self._page.url, frozenset(present or ()))


class PageBinding:
    """Live wiring between one page and one monitor. Created by ``attach_page()``."""

    def __init__(self, page: Page, monitor: NavigationMonitor) -> None:
        self._page = page
        self._monitor = monitor
        self.attached = False

    async def install(self) -> None:
        page = self._page
        await page.expose_binding(HISTORY_BINDING, self._on_history)
        await page.expose_binding(MUTATION_BINDING, self._on_mutations)
        await page.add_init_script(script=_OBSERVER_JS)
        # Current document predates the init script.
        try:
            await page.evaluate(_OBSERVER_JS)
        except Exception:
            logger.debug("Observer injection into current document failed", exc_info=True)
        page.on("load", self._on_load)
        page.on("framenavigated", self._on_frame_navigated)
        self.attached = True
        self._monitor.add_observer(self.detach)

    def detach(self) -> None:
        """Stop forwarding page events. Exposed bindings become no-ops."""
        if not self.attached:
            return
        self.attached = False
        self._page.remove_listener("load", self._on_load)
        self._page.remove_listener("framenavigated", self._on_frame_navigated)

    # --- page event handlers ---

    def _on_load(self, page: Any = None) -> None:
        if self.attached:
            self._monitor.notify(TriggerKind.DOCUMENT_READY, self._page.url)

    def _on_frame_navigated(self, frame: Frame) -> None:
        if self.attached and frame == self._page.main_frame:
            self._monitor.notify(TriggerKind.URL_CHANGE, frame.url)

    def _on_history(self, source: Any, kind: str, url: str) -> None:
        if not self.attached:
            return
        trigger = TriggerKind.HISTORY if kind == "history" else TriggerKind.URL_CHANGE
        self._monitor.notify(trigger, url)

    def _on_mutations(self, source: Any, batch: list[dict]) -> bool:
        if not self.attached:
            return False
        records = [MutationRecord.from_dict(raw) for raw in batch or () if isinstance(raw, dict)]
        return self._monitor.notify_mutations(records)


async def attach_page(page: Page, monitor: NavigationMonitor) -> PageBinding:
    """Install the observer on ``page`` and start the monitor.

    Detach with ``binding.detach()`` or ``await monitor.stop()``.
    """
    binding = PageBinding(page, monitor)
    await binding.install()
    monitor.start()
    logger.info("Navigation monitor attached to %s", page.url)
    return binding
