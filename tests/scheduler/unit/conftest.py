# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
from flavour_test_utils import FakeClock, workloads
from prometheus_client import CollectorRegistry

from flavour_clusterwide.inventory import StaticInventory
from flavour_clusterwide.utils.metrics import FlavourClusterWideMetrics


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return FlavourClusterWideMetrics(registry=registry)


@pytest.fixture
def gold_inventory():
    """A:{gold:2}, B:{gold:5}, C:{gold:2}"""
    return StaticInventory(
        targets=["A", "B", "C"],
        workloads=workloads({("A", "gold"): 2, ("B", "gold"): 5, ("C", "gold"): 2}),
    )
