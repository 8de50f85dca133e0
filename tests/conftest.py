from __future__ import annotations

"""
Shared fixtures for the inactive configuration checker tests.
"""

from typing import Any, Callable, Dict, Generator, List

import pytest

from inactive_checker.cache import StalenessCache
from inactive_checker.fetcher import HostResult
from inactive_checker.settings import AuditConfig, SSHClientSettings

DAY = 86400
T0 = 1_700_000_000


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = T0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path: Any, clock: FakeClock) -> Generator[StalenessCache, None, None]:
    """Open StalenessCache in a temporary directory, closed after the test."""
    with StalenessCache(str(tmp_path / "database.db"), clock=clock) as c:
        yield c


@pytest.fixture
def make_config() -> Callable[..., AuditConfig]:
    def _make(hosts: List[str], whitelist: List[str] = (), workers: int = 2) -> AuditConfig:
        return AuditConfig(
            ssh_client=SSHClientSettings(user="netops", num_workers=workers, password="secret"),
            hosts=tuple(hosts),
            whitelist=frozenset(whitelist),
        )
    return _make


@pytest.fixture
def fake_fetch() -> Callable[[Dict[str, Any]], Callable[[str], HostResult]]:
    """
    Build a fetch callable from a host -> paths mapping.

    A mapping value that is an exception makes that host fail.
    """
    def _build(answers: Dict[str, Any]) -> Callable[[str], HostResult]:
        def _fetch(host: str) -> HostResult:
            answer = answers[host]
            if isinstance(answer, BaseException):
                return HostResult(host=host, error=answer)
            return HostResult(host=host, paths=tuple(answer))
        return _fetch
    return _build
