# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge


class FlavourClusterWideMetrics:
    """Container for all FlavourClusterWide Prometheus metrics."""

    def __init__(
        self,
        prefix: str = "flavour_clusterwide",
        registry: Optional[CollectorRegistry] = None,
    ):
        registry = registry if registry is not None else REGISTRY

        # Cache maintenance
        self.refreshes = Counter(
            f"{prefix}_cache_refreshes",
            "Full rebuilds of the distribution cache",
            registry=registry,
        )
        self.refresh_failures = Counter(
            f"{prefix}_cache_refresh_failures",
            "Cache rebuilds aborted because the inventory was unavailable",
            registry=registry,
        )
        self.placements_recorded = Counter(
            f"{prefix}_placements_recorded",
            "Placements applied incrementally to the cache",
            registry=registry,
        )

        # Cache shape
        self.cached_targets = Gauge(
            f"{prefix}_cached_targets",
            "Number of nodes in the distribution cache",
            registry=registry,
        )
        self.known_categories = Gauge(
            f"{prefix}_known_categories",
            "Number of distinct label values in the distribution cache",
            registry=registry,
        )
        self.last_refresh_timestamp = Gauge(
            f"{prefix}_last_refresh_timestamp_seconds",
            "Time of the last successful cache rebuild",
            registry=registry,
        )

        # Scoring outcomes: preferred, not_preferred, skipped
        self.scores = Counter(
            f"{prefix}_scores",
            "Score calls by outcome",
            ["result"],
            registry=registry,
        )

    def observe_table(self, num_targets: int, num_categories: int) -> None:
        self.cached_targets.set(num_targets)
        self.known_categories.set(num_categories)
