"""
Inactive Configuration Checker Package
"""
__version__ = "1.0.0"

from .cache import Classification, StalenessCache
from .coordinator import RunContext, RunCoordinator, collect_results
from .errors import InactiveCheckerError
from .fetcher import HostResult, fetch_host
from .paths import find_inactive, resolve_path
from .pool import WorkerPool
from .settings import AuditConfig, load_config

__all__ = [
    "AuditConfig",
    "Classification",
    "HostResult",
    "InactiveCheckerError",
    "RunContext",
    "RunCoordinator",
    "StalenessCache",
    "WorkerPool",
    "collect_results",
    "fetch_host",
    "find_inactive",
    "load_config",
    "resolve_path",
]

# package logger
import logging
logger = logging.getLogger(__name__)
