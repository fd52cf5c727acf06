# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import productlens  # noqa: F401
except ImportError:
    raise ImportError("productlens is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from productlens import telemetry


@pytest.fixture(autouse=True)
def _reset_telemetry():
    """Telemetry is a module singleton; keep it unconfigured between tests."""
    telemetry._reset_for_testing()
    yield
    telemetry._reset_for_testing()


@pytest.fixture()
def collector():
    """A configured in-memory telemetry collector."""
    from productlens.telemetry.collector import TelemetryConfig

    return telemetry.configure(TelemetryConfig(enabled=True))
