from __future__ import annotations

"""
Unit tests for the worker pool: exactly-once delivery, completion order and
early shutdown.
"""

import threading
import time
from typing import List

import pytest

from inactive_checker.fetcher import HostResult
from inactive_checker.pool import WorkerPool


def test_one_result_per_host(fake_fetch) -> None:
    hosts = [f"r{i}" for i in range(20)]
    pool = WorkerPool(fake_fetch({h: [f"path-{h}"] for h in hosts}), num_workers=4)
    results = list(pool.run(hosts))
    assert sorted(r.host for r in results) == sorted(hosts)
    assert all(r.paths == (f"path-{r.host}",) for r in results)


def test_results_in_completion_order() -> None:
    release_slow = threading.Event()

    def fetch(host: str) -> HostResult:
        if host == "slow":
            release_slow.wait(timeout=5)
        return HostResult(host=host)

    it = WorkerPool(fetch, num_workers=2).run(["slow", "fast"])
    first = next(it)
    release_slow.set()
    rest = list(it)
    assert first.host == "fast"
    assert [r.host for r in rest] == ["slow"]


def test_errors_are_results(fake_fetch) -> None:
    boom = ConnectionError("unreachable")
    pool = WorkerPool(fake_fetch({"r1": ["a"], "r2": boom}), num_workers=2)
    by_host = {r.host: r for r in pool.run(["r1", "r2"])}
    assert by_host["r1"].ok
    assert by_host["r2"].error is boom
    assert by_host["r2"].paths == ()


def test_unexpected_exception_tagged_with_host() -> None:
    def fetch(host: str) -> HostResult:
        raise RuntimeError(f"bug while handling {host}")

    results = list(WorkerPool(fetch, num_workers=1).run(["r9"]))
    assert len(results) == 1
    assert results[0].host == "r9"
    assert isinstance(results[0].error, RuntimeError)


def test_pool_size_bounds_concurrency() -> None:
    lock = threading.Lock()
    active: List[int] = [0]
    peak: List[int] = [0]

    def fetch(host: str) -> HostResult:
        with lock:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        time.sleep(0.02)
        with lock:
            active[0] -= 1
        return HostResult(host=host)

    list(WorkerPool(fetch, num_workers=3).run([f"r{i}" for i in range(12)]))
    assert 1 <= peak[0] <= 3


def test_closing_early_cancels_pending_hosts() -> None:
    started: List[str] = []

    def fetch(host: str) -> HostResult:
        started.append(host)
        if host == "r0":
            return HostResult(host=host, error=OSError("down"))
        time.sleep(0.01)
        return HostResult(host=host)

    it = WorkerPool(fetch, num_workers=1).run([f"r{i}" for i in range(50)])
    first = next(it)
    it.close()
    assert first.host == "r0"
    assert len(started) < 50


def test_empty_host_list() -> None:
    assert list(WorkerPool(lambda h: HostResult(host=h), num_workers=2).run([])) == []


def test_invalid_pool_size() -> None:
    with pytest.raises(ValueError):
        WorkerPool(lambda h: HostResult(host=h), num_workers=0)
