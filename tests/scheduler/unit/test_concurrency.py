# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Concurrency tests for ReadWriteLock and the distribution cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from flavour_test_utils import FakeClock, assert_uniform, workloads

from flavour_clusterwide.defaults import CACHE_TTL_SECONDS
from flavour_clusterwide.distribution_cache import DistributionCache
from flavour_clusterwide.inventory import StaticInventory
from flavour_clusterwide.scorer import FlavourScorer
from flavour_clusterwide.utils.rwlock import ReadWriteLock

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.scheduler,
]


class WriterInterrupted(Exception):
    pass


class SlowInventory(StaticInventory):
    """Holds every pod query long enough for callers to pile up on the lock."""

    def __init__(self, *args, delay=0.05, **kwargs):
        super().__init__(*args, **kwargs)
        self.delay = delay

    def list_labeled_workloads(self, label_name):
        time.sleep(self.delay)
        return super().list_labeled_workloads(label_name)


# ── ReadWriteLock tests ─────────────────────────────────────────────────


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(3, timeout=5)

        def reader():
            with lock.read_lock():
                # All three must be inside together to pass the barrier
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not inside.broken

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        writer_inside = threading.Event()

        def writer():
            with lock.write_lock():
                writer_inside.set()
                time.sleep(0.05)
                events.append("write-done")

        def reader():
            writer_inside.wait(timeout=5)
            with lock.read_lock():
                events.append("read")

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert events == ["write-done", "read"]

    def test_write_is_reentrant_and_allows_read(self):
        lock = ReadWriteLock()

        with lock.write_lock():
            with lock.write_lock():
                with lock.read_lock():
                    pass

        # Fully released: another thread can write
        acquired = []

        def writer():
            with lock.write_lock():
                acquired.append(True)

        t = threading.Thread(target=writer)
        t.start()
        t.join(timeout=5)
        assert len(acquired) == 1

    def test_upgrade_is_rejected(self):
        lock = ReadWriteLock()

        with lock.read_lock():
            with pytest.raises(RuntimeError, match="upgrade"):
                lock.acquire_write()

    def test_release_without_acquire(self):
        lock = ReadWriteLock()

        with pytest.raises(RuntimeError):
            lock.release_read()
        with pytest.raises(RuntimeError):
            lock.release_write()

    def test_interrupted_writer_wakes_queued_readers(self):
        """A writer leaving the queue by exception lets blocked readers in."""
        lock = ReadWriteLock()
        holder_inside = threading.Event()
        holder_release = threading.Event()
        queued_reader_inside = threading.Event()
        writer_ident = threading.get_ident()
        real_wait = lock._cond.wait
        queued = []

        def holder():
            with lock.read_lock():
                holder_inside.set()
                holder_release.wait(timeout=5)

        def queued_reader():
            with lock.read_lock():
                queued_reader_inside.set()

        def interrupted_wait(timeout=None):
            if threading.get_ident() != writer_ident:
                return real_wait(timeout)
            # Queue a reader behind the waiting writer, then give up
            queued.append(threading.Thread(target=queued_reader))
            queued[0].start()
            real_wait(0.2)
            raise WriterInterrupted()

        holder_thread = threading.Thread(target=holder)
        holder_thread.start()
        assert holder_inside.wait(timeout=5)

        try:
            with patch.object(lock._cond, "wait", interrupted_wait):
                with pytest.raises(WriterInterrupted):
                    lock.acquire_write()
                # The holder still reads; only the writer's exit can wake this one
                assert queued_reader_inside.wait(timeout=2)
        finally:
            holder_release.set()
            holder_thread.join(timeout=5)
            for t in queued:
                t.join(timeout=5)


# ── DistributionCache under contention ──────────────────────────────────


def test_concurrent_stale_refresh_queries_once():
    inventory = SlowInventory(
        targets=["A", "B"], workloads=workloads({("A", "gold"): 1})
    )
    cache = DistributionCache(inventory)
    start = threading.Barrier(16, timeout=5)

    def refresh():
        start.wait()
        return cache.refresh_if_stale()

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda _: refresh(), range(16)))

    assert results.count(True) == 1
    assert inventory.query_count == 1


@pytest.mark.stress
def test_concurrent_scores_and_placements_lose_nothing():
    """Scores and placements racing on one cache: no lost increments, rows stay uniform."""
    nodes = [f"node-{i}" for i in range(8)]
    flavours = ["gold", "silver", "bronze", "copper"]
    inventory = StaticInventory(targets=nodes, workloads=workloads({("node-0", "gold"): 1}))
    cache = DistributionCache(inventory)
    scorer = FlavourScorer(cache)
    scorer.score("gold", "node-0")

    placements_per_thread = 250
    num_placers = 6
    num_scorers = 8
    errors = []

    def place(worker):
        for i in range(placements_per_thread):
            flavour = flavours[(worker + i) % len(flavours)]
            # Some placements land on nodes the cache has never seen
            node = f"node-{(worker * 7 + i) % 12}"
            scorer.on_placement_committed(flavour, node)

    def score(worker):
        for i in range(placements_per_thread):
            flavour = flavours[i % len(flavours)]
            value, status = scorer.score(flavour, nodes[(worker + i) % len(nodes)])
            if value not in (0, 100) or not status.is_success():
                errors.append((value, status))
            if i % 50 == 0:
                assert_uniform(cache.snapshot())

    with ThreadPoolExecutor(max_workers=num_placers + num_scorers) as pool:
        futures = [pool.submit(place, w) for w in range(num_placers)]
        futures += [pool.submit(score, w) for w in range(num_scorers)]
        for future in futures:
            future.result()

    table = cache.snapshot()
    assert not errors
    assert_uniform(table)
    assert cache.categories == frozenset(flavours)
    total = sum(sum(row.values()) for row in table.values())
    # One pod from the initial refresh plus every recorded placement
    assert total == 1 + num_placers * placements_per_thread
    assert inventory.query_count == 1


@pytest.mark.stress
def test_refreshes_racing_placements_keep_rows_uniform():
    """Refreshes swapping the table under concurrent placements never break uniformity."""
    clock = FakeClock()
    inventory = StaticInventory(
        targets=["A", "B", "C"],
        workloads=workloads({("A", "gold"): 1, ("B", "silver"): 1}),
    )
    cache = DistributionCache(inventory, clock=clock)
    stop = threading.Event()

    def expire():
        while not stop.is_set():
            clock.advance(CACHE_TTL_SECONDS)
            cache.refresh_if_stale()

    def place():
        for i in range(500):
            cache.record_placement(["A", "B", "D"][i % 3], ["gold", "bronze"][i % 2])
            assert_uniform(cache.snapshot())

    expirer = threading.Thread(target=expire)
    expirer.start()
    try:
        with ThreadPoolExecutor(max_workers=4) as pool:
            for future in [pool.submit(place) for _ in range(4)]:
                future.result()
    finally:
        stop.set()
        expirer.join(timeout=5)

    assert inventory.query_count >= 1
    assert_uniform(cache.snapshot())
