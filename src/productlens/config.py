# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Analyzer configuration: debounce window, gap weights, mutation policy.

Immutable dataclasses with defaults; ``load_config()`` applies
``PRODUCTLENS_*`` environment overrides on top of them.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import suppress
from dataclasses import dataclass, field, replace

from productlens import Platform
from productlens.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500

DEFAULT_GAP_WEIGHTS: dict[str, int] = {
    "material": 3,
    "dimensions": 3,
    "weight": 2,
    "warranty": 2,
    "color": 1,
    "size": 1,
}

# Added on top of the defaults for the given platform.
DEFAULT_PLATFORM_GAP_WEIGHTS: dict[Platform, dict[str, int]] = {
    Platform.AMAZON: {"asin": 2, "brand": 2},
    Platform.SHOPIFY: {"sku": 2, "brand": 2},
    Platform.WOOCOMMERCE: {"sku": 2},
}

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class MutationPolicy:
    """Thresholds deciding whether a mutation batch warrants re-analysis."""

    min_records: int = 1  # records touching a main-content region
    min_product_markers: int = 1  # product-shaped markers in added markup
    require_main_region: bool = True
    require_product_markers: bool = True


@dataclass(frozen=True)
class AnalyzerConfig:
    """Immutable analyzer configuration."""

    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    gap_weights: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_GAP_WEIGHTS))
    platform_gap_weights: Mapping[Platform, Mapping[str, int]] = field(
        default_factory=lambda: {p: dict(w) for p, w in DEFAULT_PLATFORM_GAP_WEIGHTS.items()}
    )
    mutation_policy: MutationPolicy = field(default_factory=MutationPolicy)
    observe_mutations: bool = True

    def __post_init__(self) -> None:
        if self.debounce_ms < 0:
            raise ConfigError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        for key, weight in self.gap_weights.items():
            if weight < 0:
                raise ConfigError(f"gap weight for {key!r} must be >= 0, got {weight}")

    @property
    def debounce_s(self) -> float:
        return self.debounce_ms / 1000.0

    def weights_for(self, platform: Platform) -> dict[str, int]:
        """Default gap weights merged with the platform's additions."""
        weights = dict(self.gap_weights)
        weights.update(self.platform_gap_weights.get(platform, {}))
        return weights

    def with_gap_weights(self, weights: Mapping[str, int]) -> AnalyzerConfig:
        return replace(self, gap_weights=dict(weights))


def parse_gap_weights(raw: str) -> dict[str, int]:
    """Parse ``"material=3,dimensions=3"`` into a weight table.

    Raises:
        ConfigError: on a malformed pair or a non-integer weight.
    """
    weights: dict[str, int] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        key = key.strip().lower()
        if not sep or not key:
            raise ConfigError(f"malformed gap weight entry: {pair!r}")
        try:
            weights[key] = int(value.strip())
        except ValueError:
            raise ConfigError(f"gap weight for {key!r} is not an integer: {value!r}") from None
    return weights


def load_config(env: Mapping[str, str] | None = None) -> AnalyzerConfig:
    """Build an AnalyzerConfig from defaults plus environment overrides.

    Recognized variables:
        PRODUCTLENS_DEBOUNCE_MS: debounce window in milliseconds.
        PRODUCTLENS_GAP_WEIGHTS: ``key=weight`` pairs replacing the default table.
        PRODUCTLENS_OBSERVE_MUTATIONS: ``0``/``false`` disables mutation triggers.
        PRODUCTLENS_MUTATION_MIN_RECORDS / PRODUCTLENS_MUTATION_MIN_MARKERS.
    """
    if env is None:
        env = os.environ

    config = AnalyzerConfig()

    env_debounce = env.get("PRODUCTLENS_DEBOUNCE_MS", "").strip()
    if env_debounce:
        with suppress(ValueError):
            config = replace(config, debounce_ms=int(env_debounce))

    env_weights = env.get("PRODUCTLENS_GAP_WEIGHTS", "").strip()
    if env_weights:
        config = config.with_gap_weights(parse_gap_weights(env_weights))

    env_observe = env.get("PRODUCTLENS_OBSERVE_MUTATIONS", "").strip().lower()
    if env_observe:
        config = replace(config, observe_mutations=env_observe in _TRUTHY)

    policy = config.mutation_policy
    env_records = env.get("PRODUCTLENS_MUTATION_MIN_RECORDS", "").strip()
    if env_records:
        with suppress(ValueError):
            policy = replace(policy, min_records=int(env_records))
    env_markers = env.get("PRODUCTLENS_MUTATION_MIN_MARKERS", "").strip()
    if env_markers:
        with suppress(ValueError):
            policy = replace(policy, min_product_markers=int(env_markers))
    if policy is not config.mutation_policy:
        config = replace(config, mutation_policy=policy)

    logger.debug("Analyzer config loaded: debounce_ms=%d weights=%s", config.debounce_ms, dict(config.gap_weights))
    return config
