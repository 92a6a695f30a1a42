# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
FlavourClusterWide - cluster-wide label spreading for pod placement.

Scores candidate nodes for a pod so that pods sharing a label value (the
"flavour") end up evenly spread over every node of the cluster, counting
pods in all namespaces.

Architecture:
- DistributionCache keeps node -> label value -> pod count, rebuilt lazily
  from the inventory at most once a minute
- FlavourScorer reads the cache and applies a ScoringStrategy
- FlavourClusterWide adapts both to pods and is what the scheduler calls
- The extender serves the plugin over HTTP for kube-scheduler

Usage:
    python -m flavour_clusterwide --label-name flavour
"""

__all__ = [
    "DistributionCache",
    "FlavourClusterWide",
    "FlavourClusterWideArgs",
    "FlavourScorer",
    "InventorySource",
    "KubernetesInventory",
    "PlacedWorkload",
    "StaticInventory",
    "Status",
    "StatusCode",
]

from flavour_clusterwide.distribution_cache import DistributionCache
from flavour_clusterwide.inventory import (
    InventorySource,
    KubernetesInventory,
    PlacedWorkload,
    StaticInventory,
)
from flavour_clusterwide.plugin import FlavourClusterWide
from flavour_clusterwide.protocol import FlavourClusterWideArgs, Status, StatusCode
from flavour_clusterwide.scorer import FlavourScorer
