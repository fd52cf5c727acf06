# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Log output for productlens: structlog rendering over stdlib ``logging``.

Library modules log with ``logging.getLogger(__name__)`` and never configure
handlers. The CLI calls ``configure()`` once, which routes every record to
stderr as console lines (for people) or JSON lines (for log shippers); stdout
stays reserved for analysis results.

``analysis_context()`` binds the page under analysis, so every record one
pass emits (qualifier, platform, extractor faults) carries the same ``page``
field.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog

# Loggers that chatter at DEBUG during a monitored browser session.
_QUIET_LOGGERS = ("asyncio", "playwright")


def _pre_chain() -> list:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.UnicodeDecoder(),
    ]


def _render_chain(json_output: bool, stream: TextIO) -> list:
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    colors = bool(getattr(stream, "isatty", lambda: False)())
    return [structlog.dev.ConsoleRenderer(colors=colors)]


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Install the single root handler; calling again replaces it.

    Args:
        json_output: True for JSON lines, False for console lines.
        level: Root logger level name. Unknown names fall back to INFO.
        stream: Output stream (default stderr).
    """
    stream = stream if stream is not None else sys.stderr
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(json_output, stream),
            ],
            foreign_pre_chain=pre_chain,
        )
    )

    root_level = logging.getLevelName(level.upper())
    if not isinstance(root_level, int):
        root_level = logging.INFO
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(root_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


@contextmanager
def analysis_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to every record logged inside the block; None values are skipped."""
    bound = {k: v for k, v in fields.items() if v is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield
