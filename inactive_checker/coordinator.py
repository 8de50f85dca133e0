"""
One execution of the inactive configuration audit.

The coordinator is the only consumer of worker results, the only writer to
the staleness cache and the only writer to standard output. Results are
gathered for the whole fleet before anything is printed or stored: a single
failed host aborts the run with no output and no cache mutation.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from .cache import Classification, StalenessCache, classify_age
from .errors import HostFetchError
from .fetcher import HostResult
from .pool import WorkerPool
from .settings import AuditConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FleetSnapshot:
    """Every host answered; results in completion order."""
    results: Tuple[HostResult, ...]


@dataclass(frozen=True)
class HostFailure:
    """The first host that failed; everything else from the run is discarded."""
    host: str
    error: BaseException


def collect_results(results: Iterable[HostResult]) -> Union[FleetSnapshot, HostFailure]:
    """Short-circuit on the first failed host, otherwise keep every result."""
    collected: List[HostResult] = []
    for result in results:
        if not result.ok:
            return HostFailure(result.host, result.error)
        collected.append(result)
    return FleetSnapshot(tuple(collected))


def format_age(seconds: float) -> str:
    return str(timedelta(seconds=int(seconds)))


@dataclass(frozen=True)
class Finding:
    host: str
    path: str
    status: Classification
    first_seen: Optional[int] = None
    age: Optional[int] = None

    @property
    def identifier(self) -> str:
        return f"{self.host}:{self.path}"


@dataclass
class RunReport:
    findings: List[Finding] = field(default_factory=list)
    lines: List[str] = field(default_factory=list)

    def by_status(self, status: Classification) -> List[Finding]:
        return [f for f in self.findings if f.status is status]


@dataclass
class RunContext:
    """Everything a run needs, built once by the caller."""
    config: AuditConfig
    verbose: bool = False
    use_cache: bool = False
    cache: Optional[StalenessCache] = None
    clock: Callable[[], float] = time.time
    emit: Callable[[str], None] = print

    def __post_init__(self) -> None:
        if self.verbose:
            self.use_cache = True
        if self.use_cache and self.cache is None:
            raise ValueError("cache mode requires an open StalenessCache")


def _split_identifier(identifier: str) -> Tuple[str, str]:
    host, _, path = identifier.partition(":")
    return host, path


class RunCoordinator:
    def __init__(self, ctx: RunContext, pool: WorkerPool):
        self.ctx = ctx
        self.pool = pool
        self.report = RunReport()

    def _emit(self, line: str) -> None:
        self.report.lines.append(line)
        self.ctx.emit(line)

    def run(self) -> RunReport:
        """
        Audit every configured host and report.

        Raises:
            HostFetchError: for the first host that could not be audited.
            CacheError: if the staleness store cannot be read or updated.
        """
        config = self.ctx.config
        older: Dict[str, int] = self.ctx.cache.load_all() if self.ctx.use_cache else {}

        results = self.pool.run(config.hosts)
        try:
            outcome = collect_results(results)
        finally:
            results.close()
        if isinstance(outcome, HostFailure):
            raise HostFetchError(outcome.host, outcome.error)

        log.info("Collected results from %d host(s)", len(outcome.results))
        if self.ctx.use_cache:
            touched = self._classify(outcome, older)
            self._reconcile(older, touched)
        else:
            self._observe(outcome)
        return self.report

    def _visible(self, result: HostResult) -> Iterable[Tuple[str, str]]:
        for path, identifier in zip(result.paths, result.identifiers):
            if identifier in self.ctx.config.whitelist:
                log.debug("Whitelisted: %s", identifier)
                continue
            yield path, identifier

    def _observe(self, outcome: FleetSnapshot) -> None:
        for result in outcome.results:
            for path, identifier in self._visible(result):
                self.report.findings.append(Finding(result.host, path, Classification.OBSERVED))
                self._emit(identifier)

    def _classify(self, outcome: FleetSnapshot, older: Dict[str, int]) -> Set[str]:
        cache = self.ctx.cache
        verbose = self.ctx.verbose
        now = self.ctx.clock()
        touched: Set[str] = set()

        for result in outcome.results:
            for path, identifier in self._visible(result):
                if identifier in touched:
                    continue
                touched.add(identifier)

                first_seen = older.get(identifier)
                if first_seen is None:
                    recorded = cache.record_seen(identifier)
                    self.report.findings.append(Finding(result.host, path, Classification.NEW, recorded, 0))
                    if verbose:
                        self._emit(f"new:   {identifier}")
                    continue

                age = max(0, int(now - first_seen))
                status = classify_age(age)
                self.report.findings.append(Finding(result.host, path, status, first_seen, age))
                if status is Classification.STALE:
                    if verbose:
                        self._emit(f"STALE: {identifier} age: {format_age(age)}")
                    else:
                        self._emit(identifier)
                elif verbose:
                    self._emit(f"fresh: {identifier} age: {format_age(age)}")
        return touched

    def _reconcile(self, older: Dict[str, int], touched: Set[str]) -> None:
        for identifier in sorted(set(older) - touched):
            self.ctx.cache.remove(identifier)
            host, path = _split_identifier(identifier)
            self.report.findings.append(Finding(host, path, Classification.REMOVED, older[identifier]))
            if self.ctx.verbose:
                self._emit(f"rem:   {identifier}")
