# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
FlavourClusterWide - scheduler score plugin.

Scores nodes based on the distribution of pods with a given label (by
default "flavour", with values such as gold, silver, bronze) across the
whole cluster. A node hosting the fewest pods with the incoming pod's label
value is preferred, which spreads each value evenly over the nodes.

Pod counts come from a DistributionCache that is rebuilt from the
Kubernetes API at most once a minute and updated after every bind.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from flavour_clusterwide.defaults import MAX_NODE_SCORE, PLUGIN_NAME
from flavour_clusterwide.distribution_cache import DistributionCache
from flavour_clusterwide.inventory import InventorySource, KubernetesInventory
from flavour_clusterwide.protocol import FlavourClusterWideArgs, NodeScore, Status
from flavour_clusterwide.scorer import FlavourScorer
from flavour_clusterwide.scoring import get_scoring_strategy
from flavour_clusterwide.utils.logging import configure_flavour_logging
from flavour_clusterwide.utils.metrics import FlavourClusterWideMetrics

configure_flavour_logging()
logger = logging.getLogger(__name__)


def get_pod_labels(pod: Any) -> Dict[str, str]:
    """Labels of a kubernetes V1Pod or of a pod decoded from JSON."""
    if pod is None:
        return {}
    if isinstance(pod, dict):
        return (pod.get("metadata") or {}).get("labels") or {}
    metadata = getattr(pod, "metadata", None)
    return getattr(metadata, "labels", None) or {}


def get_pod_name(pod: Any) -> str:
    if isinstance(pod, dict):
        return (pod.get("metadata") or {}).get("name", "")
    metadata = getattr(pod, "metadata", None)
    return getattr(metadata, "name", "") or ""


class FlavourClusterWide:
    """Score and post-bind plugin balancing label values across all nodes."""

    def __init__(
        self,
        inventory: InventorySource,
        args: Optional[FlavourClusterWideArgs] = None,
        metrics: Optional[FlavourClusterWideMetrics] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.args = args if args is not None else FlavourClusterWideArgs()
        self.label_name = self.args.label_name
        self.cache = DistributionCache(
            inventory, label_name=self.label_name, metrics=metrics, clock=clock
        )
        self.scorer = FlavourScorer(
            self.cache,
            strategy=get_scoring_strategy(self.args.scoring_strategy),
            metrics=metrics,
        )

    @classmethod
    def new(
        cls,
        args: Union[FlavourClusterWideArgs, Dict[str, Any], None] = None,
        inventory: Optional[InventorySource] = None,
        metrics: Optional[FlavourClusterWideMetrics] = None,
    ) -> "FlavourClusterWide":
        """Plugin factory.

        Args:
            args: Plugin arguments as a model or plain dict; an absent or
                empty label name falls back to "flavour"
            inventory: Inventory to read the cluster from; defaults to the
                Kubernetes API using in-cluster configuration

        Raises:
            InventoryConfigurationError: If no inventory is given and the
                in-cluster configuration cannot be loaded
            UnknownScoringStrategyError: If the scoring strategy is not registered
        """
        if args is None:
            args = FlavourClusterWideArgs()
        elif isinstance(args, dict):
            args = FlavourClusterWideArgs(**args)

        if inventory is None:
            inventory = KubernetesInventory.from_config()

        plugin = cls(inventory, args=args, metrics=metrics)
        logger.info(
            f"{PLUGIN_NAME} initialized with label '{plugin.label_name}' "
            f"and '{args.scoring_strategy}' scoring"
        )
        return plugin

    def name(self) -> str:
        return PLUGIN_NAME

    def score(self, pod: Any, node_name: str) -> Tuple[int, Status]:
        """Score ``node_name`` for ``pod``.

        Returns MAX_NODE_SCORE when the node hosts the fewest pods with the
        pod's label value, otherwise less. Pods without the label get a
        neutral score and a skip status.
        """
        flavour = get_pod_labels(pod).get(self.label_name, "")
        score, status = self.scorer.score(flavour, node_name)
        if flavour and score == MAX_NODE_SCORE:
            logger.debug(
                f"Pod {get_pod_name(pod)} with {self.label_name} {flavour} "
                f"is the least common in node {node_name}"
            )
        return score, status

    def post_bind(self, pod: Any, node_name: str) -> None:
        """Record that ``pod`` was bound to ``node_name``. Pods without the label are ignored."""
        flavour = get_pod_labels(pod).get(self.label_name, "")
        if not flavour:
            return
        self.scorer.on_placement_committed(flavour, node_name)

    def score_extensions(self) -> "FlavourClusterWide":
        return self

    def normalize_score(self, pod: Any, scores: List[NodeScore]) -> Status:
        # Scores are already within [MIN_NODE_SCORE, MAX_NODE_SCORE]
        return Status()
