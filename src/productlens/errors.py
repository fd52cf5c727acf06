# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""productlens exception hierarchy.

All productlens-specific errors inherit from ProductLensError, allowing
callers to catch the base class for any analysis failure or specific
subclasses for targeted handling. Most of these never cross the analysis
boundary: the pipeline records them as warnings and keeps going.
"""

from __future__ import annotations


class ProductLensError(Exception):
    """Base exception for all productlens errors."""


class NotAProductPage(ProductLensError):
    """Qualifier rejected the document. A normal outcome, not a failure."""

    def __init__(self, message: str, *, url: str = "", layer: str = "") -> None:
        super().__init__(message)
        self.url = url
        self.layer = layer


class MalformedStructuredData(ProductLensError):
    """One linked-data block could not be decoded or validated."""

    def __init__(self, message: str, *, block_index: int = -1) -> None:
        super().__init__(message)
        self.block_index = block_index


class MissingRequiredField(ProductLensError):
    """Merge produced a record without a title."""

    def __init__(self, message: str, *, field: str = "title") -> None:
        super().__init__(message)
        self.field = field


class SelectorExhausted(ProductLensError):
    """No selector in a field's ordered list matched."""

    def __init__(self, field: str) -> None:
        super().__init__(f"no selector matched for {field!r}")
        self.field = field


class ExtractorFault(ProductLensError):
    """An extractor raised unexpectedly; its output is treated as absent."""

    def __init__(self, extractor: str, cause: BaseException) -> None:
        super().__init__(f"{extractor} failed: {type(cause).__name__}: {cause}")
        self.extractor = extractor
        self.cause = cause


class ConfigError(ProductLensError):
    """Invalid configuration value (environment or explicit)."""
