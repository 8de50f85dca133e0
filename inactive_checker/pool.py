from __future__ import annotations

import concurrent.futures as cf
import logging
import threading
from typing import Callable, Iterator, Sequence

from .fetcher import HostResult

log = logging.getLogger(__name__)

Fetch = Callable[[str], HostResult]


class WorkerPool:
    """
    Fixed-size pool of worker threads auditing hosts concurrently.

    ``run()`` yields exactly one ``HostResult`` per submitted host, in
    completion order. Closing the iterator early (e.g. after the first
    failure) cancels hosts that have not started yet and joins the workers.
    """

    def __init__(self, fetch: Fetch, num_workers: int):
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")
        self.fetch = fetch
        self.num_workers = num_workers

    def _work(self, host: str) -> HostResult:
        worker = threading.current_thread().name
        log.info("Worker %s started working on %s", worker, host)
        try:
            result = self.fetch(host)
        except Exception as e:
            result = HostResult(host=host, error=e)
        log.info("Worker %s finished working on %s", worker, host)
        return result

    def run(self, hosts: Sequence[str]) -> Iterator[HostResult]:
        ex = cf.ThreadPoolExecutor(max_workers=self.num_workers, thread_name_prefix="worker")
        try:
            futs = [ex.submit(self._work, host) for host in hosts]
            for fut in cf.as_completed(futs):
                yield fut.result()
        finally:
            ex.shutdown(wait=True, cancel_futures=True)
