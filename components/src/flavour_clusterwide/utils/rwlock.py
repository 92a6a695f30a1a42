# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Shared/exclusive lock for the distribution cache."""

import threading
from contextlib import contextmanager
from typing import Optional


class ReadWriteLock:
    """Writer-preferring read/write lock.

    Any number of threads may hold the shared side at once; the exclusive
    side is held by a single thread with no readers. Once a writer is
    waiting, new readers queue behind it so a steady stream of scoring calls
    cannot starve a refresh.

    The thread holding the exclusive side may re-acquire it and may also
    take the shared side. Upgrading from shared to exclusive is not
    supported and raises RuntimeError instead of deadlocking.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._reader_threads: dict[int, int] = {}
        self._writer: Optional[int] = None
        self._writer_depth = 0
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._writer_depth += 1
                return
            while self._writer is not None or self._writers_waiting > 0:
                # A thread already reading must not queue behind a waiting
                # writer, or it would deadlock against itself.
                if self._reader_threads.get(me):
                    break
                self._cond.wait()
            self._readers += 1
            self._reader_threads[me] = self._reader_threads.get(me, 0) + 1

    def release_read(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._writer_depth -= 1
                return
            held = self._reader_threads.get(me, 0)
            if held <= 0:
                raise RuntimeError("release_read() called without a read lock held")
            if held == 1:
                del self._reader_threads[me]
            else:
                self._reader_threads[me] = held - 1
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        me = threading.get_ident()
        with self._cond:
            if self._writer == me:
                self._writer_depth += 1
                return
            if self._reader_threads.get(me):
                raise RuntimeError(
                    "Cannot upgrade a read lock to a write lock; release it first"
                )
            self._writers_waiting += 1
            try:
                while self._writer is not None or self._readers > 0:
                    self._cond.wait()
            except BaseException:
                # Wake readers that queued behind this writer
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer = me
            self._writer_depth = 1

    def release_write(self) -> None:
        with self._cond:
            if self._writer != threading.get_ident():
                raise RuntimeError("release_write() called by a thread not holding it")
            self._writer_depth -= 1
            if self._writer_depth == 0:
                self._writer = None
                self._cond.notify_all()

    @contextmanager
    def read_lock(self):
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_lock(self):
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
