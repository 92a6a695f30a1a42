# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import time
from typing import Callable, Dict, FrozenSet, Optional, Set

from flavour_clusterwide.defaults import CACHE_TTL_SECONDS, DEFAULT_LABEL_NAME
from flavour_clusterwide.inventory import InventorySource
from flavour_clusterwide.utils.exceptions import InventoryUnavailableError
from flavour_clusterwide.utils.logging import configure_flavour_logging
from flavour_clusterwide.utils.metrics import FlavourClusterWideMetrics
from flavour_clusterwide.utils.rwlock import ReadWriteLock

configure_flavour_logging()
logger = logging.getLogger(__name__)

DistributionTable = Dict[str, Dict[str, int]]


class DistributionCache:
    """Per-node pod counts for every value of a label, across all namespaces.

    The table maps node name -> label value -> number of pods. Every row
    always holds an entry for every label value known to the table, so a
    value missing from a row never has to be interpreted at read time.

    The table is rebuilt from the inventory at most once per
    CACHE_TTL_SECONDS, lazily from refresh_if_stale(); in between,
    record_placement() applies committed placements incrementally.
    """

    def __init__(
        self,
        inventory: InventorySource,
        label_name: str = DEFAULT_LABEL_NAME,
        metrics: Optional[FlavourClusterWideMetrics] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._inventory = inventory
        self._label_name = label_name
        self._metrics = metrics
        self._clock = clock

        self._lock = ReadWriteLock()
        self._table: DistributionTable = {}
        self._categories: Set[str] = set()
        # Epoch, so the first refresh_if_stale() always rebuilds
        self._last_refreshed = 0.0

    @property
    def label_name(self) -> str:
        return self._label_name

    def _is_stale_locked(self) -> bool:
        return self._clock() - self._last_refreshed >= CACHE_TTL_SECONDS

    def is_stale(self) -> bool:
        with self._lock.read_lock():
            return self._is_stale_locked()

    def refresh_if_stale(self) -> bool:
        """Rebuild the table from the inventory if the TTL has expired.

        Returns True if this call rebuilt the table. Inventory failures are
        logged and swallowed: the previous table and timestamp are kept, so
        the next call after the TTL tries again.
        """
        if not self.is_stale():
            logger.debug("Cache is still valid, not updating")
            return False

        with self._lock.write_lock():
            # Another caller may have rebuilt while we waited for the lock
            if not self._is_stale_locked():
                logger.debug("Cache was refreshed by a concurrent caller")
                return False

            try:
                targets = self._inventory.list_eligible_targets()
                workloads = self._inventory.list_labeled_workloads(self._label_name)
            except InventoryUnavailableError as e:
                logger.warning(f"Keeping stale distribution cache: {e}")
                self._record_refresh_failure()
                return False
            except Exception:
                # Inventory broke its contract; scoring must still not fail
                logger.exception(
                    "Unexpected inventory error, keeping stale distribution cache"
                )
                self._record_refresh_failure()
                return False

            # Pending pods contribute their label value but no count
            categories = {w.category_value for w in workloads if w.category_value}
            placed = [w for w in workloads if w.target and w.category_value]

            table: DistributionTable = {
                target: dict.fromkeys(categories, 0) for target in targets
            }
            for workload in placed:
                row = table.get(workload.target)
                if row is None:
                    # Pod runs on a node outside the eligible set; count it anyway
                    row = table[workload.target] = dict.fromkeys(categories, 0)
                row[workload.category_value] += 1

            self._table = table
            self._categories = categories
            self._last_refreshed = self._clock()

            if self._metrics is not None:
                self._metrics.refreshes.inc()
                self._metrics.last_refresh_timestamp.set(self._last_refreshed)
                self._metrics.observe_table(len(table), len(categories))

            logger.info(
                f"Cache recreated from API with label '{self._label_name}': {table}"
            )
            return True

    def _record_refresh_failure(self) -> None:
        if self._metrics is not None:
            self._metrics.refresh_failures.inc()

    def record_placement(self, target_id: str, category_value: Optional[str]) -> None:
        """Count one pod with ``category_value`` as placed on ``target_id``."""
        if not category_value:
            return

        with self._lock.write_lock():
            if category_value not in self._categories:
                self._categories.add(category_value)
                for row in self._table.values():
                    row.setdefault(category_value, 0)

            row = self._table.get(target_id)
            if row is None:
                row = self._table[target_id] = dict.fromkeys(self._categories, 0)

            row[category_value] += 1

            if self._metrics is not None:
                self._metrics.placements_recorded.inc()
                self._metrics.observe_table(len(self._table), len(self._categories))

            logger.info(
                f"Cache updated with label '{self._label_name}': "
                f"{target_id}[{category_value}] = {row[category_value]}"
            )

    def counts_for(self, category_value: str) -> Dict[str, int]:
        """Count of ``category_value`` pods on every cached node; unknown values count as 0."""
        with self._lock.read_lock():
            return {
                target: row.get(category_value, 0)
                for target, row in self._table.items()
            }

    def snapshot(self) -> DistributionTable:
        with self._lock.read_lock():
            return {target: dict(row) for target, row in self._table.items()}

    @property
    def categories(self) -> FrozenSet[str]:
        with self._lock.read_lock():
            return frozenset(self._categories)

    @property
    def last_refreshed(self) -> float:
        with self._lock.read_lock():
            return self._last_refreshed

    def __len__(self) -> int:
        with self._lock.read_lock():
            return len(self._table)
