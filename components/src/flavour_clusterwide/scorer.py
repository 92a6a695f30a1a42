# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Optional, Tuple

from flavour_clusterwide.defaults import MAX_NODE_SCORE, MIN_NODE_SCORE
from flavour_clusterwide.distribution_cache import DistributionCache
from flavour_clusterwide.protocol import Status, StatusCode
from flavour_clusterwide.scoring import BinaryScoringStrategy, ScoringStrategy
from flavour_clusterwide.utils.logging import configure_flavour_logging
from flavour_clusterwide.utils.metrics import FlavourClusterWideMetrics

configure_flavour_logging()
logger = logging.getLogger(__name__)


class FlavourScorer:
    """Scores nodes by how many pods with the same label value they already host.

    Reads the distribution cache (refreshing it when stale) and hands the
    fleet-wide counts to a ScoringStrategy. A node absent from the cache is
    treated as hosting zero pods and takes part in the minimum, so an empty
    cache yields MAX_NODE_SCORE for every node.
    """

    def __init__(
        self,
        cache: DistributionCache,
        strategy: Optional[ScoringStrategy] = None,
        metrics: Optional[FlavourClusterWideMetrics] = None,
    ):
        self.cache = cache
        self.strategy = strategy if strategy is not None else BinaryScoringStrategy()
        self.metrics = metrics

    def score(self, category_value: Optional[str], target_id: str) -> Tuple[int, Status]:
        if not category_value:
            self._observe("skipped")
            return MIN_NODE_SCORE, Status(
                code=StatusCode.SKIP,
                message=(
                    f"Pod does not have the '{self.cache.label_name}' label, "
                    "scoring is not applied"
                ),
            )

        self.cache.refresh_if_stale()

        counts = self.cache.counts_for(category_value)
        count = counts.setdefault(target_id, 0)
        score = self.strategy.score(count, counts)

        self._observe("preferred" if score == MAX_NODE_SCORE else "not_preferred")
        logger.debug(
            f"Node {target_id} hosts {count} '{category_value}' pods "
            f"(fleet min {min(counts.values())}): score {score}"
        )
        return score, Status()

    def on_placement_committed(self, category_value: Optional[str], target_id: str) -> None:
        self.cache.record_placement(target_id, category_value)

    def _observe(self, result: str) -> None:
        if self.metrics is not None:
            self.metrics.scores.labels(result=result).inc()
