# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Privacy utilities for telemetry data sanitization."""

from __future__ import annotations

import hashlib
from urllib.parse import urlparse, urlunparse

# Content field names that must never appear in telemetry payloads
_BLOCKED_FIELDS = frozenset(
    {
        "html",
        "raw_html",
        "text",
        "content",
        "description",
        "body",
        "inner_html",
        "outer_html",
        "snapshot",
        "bullets",
        "record",
    }
)

_URL_FIELDS = ("url",)


def sanitize_url(url: str, *, hash_paths: bool = False) -> str:
    """Remove query/fragment from URL, optionally hash path segments.

    Args:
        url: URL to sanitize.
        hash_paths: If True, replace each path segment with a truncated SHA-256 hash.
            Domain is preserved for analytics.

    Returns:
        Sanitized URL string.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return ""

    path = parsed.path
    if hash_paths and path:
        path = "/".join(hashlib.sha256(seg.encode("utf-8")).hexdigest()[:4] if seg else seg for seg in path.split("/"))

    return urlunparse((parsed.scheme, parsed.netloc, path, "", "", ""))


def sanitize_payload(payload: dict, *, hash_paths: bool = False) -> dict:
    """Drop blocked content fields (shallow + one level nested) and strip URLs.

    Nested boolean values are kept under any key: ``{"fields": {"description": True}}``
    reports presence only.

    Returns a new dict; the input is left untouched.
    """
    cleaned: dict = {}
    for key, value in payload.items():
        if key in _BLOCKED_FIELDS:
            continue
        if isinstance(value, dict):
            cleaned[key] = {k: v for k, v in value.items() if k not in _BLOCKED_FIELDS or isinstance(v, bool)}
        elif key in _URL_FIELDS and isinstance(value, str):
            cleaned[key] = sanitize_url(value, hash_paths=hash_paths)
        else:
            cleaned[key] = value
    return cleaned
