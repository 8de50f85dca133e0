#!/usr/bin/env python3
"""
Junos Inactive Configuration Checker
====================================

Overview
--------
Logs into every configured Junos device over SSH, retrieves the configuration
as XML (``show configuration | display xml``) and lists every statement that
has been deactivated (``inactive="inactive"``). Only the outermost inactive
element of a subtree is reported, as ``<host>:<path>``, where the path is built
from the element's ancestors (``ge-0/0/0 interface``, ``protocols bgp PEERS group``...).

With ``-s`` the tool remembers when each inactive statement was first seen and
only reports those that have stayed inactive for more than 30 days, so it can
run from cron and point at configuration cruft. Entries for statements that
have disappeared are pruned at the end of each run.

Inputs & CLI
------------
* **config.yml** (``-c``): SSH user and password or key file, worker count,
  host list and an optional whitelist of identifiers to ignore.
* **Arguments**:
  - ``-s``: cache mode, report only stale (> 30 days) entries.
  - ``-v``: verbose; implies ``-s`` and also shows fresh, new and removed
    entries with their age, plus worker progress.
  - ``--db``: cache file (default: ``database.db``).
  - ``--output, -o``: also write the run's findings to an Excel workbook.
  - ``--debug``: debug logging.

Reliability
-----------
* Any host that cannot be reached, or returns unparsable output, aborts the
  whole run before anything is printed or written to the cache: a partial
  picture of the fleet is never reported.
* Configuration, credential, cache and workbook errors exit with status 1.
"""
from __future__ import annotations

import argparse
import contextlib
import functools
import logging
import sys
from typing import List, Optional

from inactive_checker.cache import StalenessCache
from inactive_checker.config import CACHE_PATH, CONFIG_PATH
from inactive_checker.coordinator import RunContext, RunCoordinator
from inactive_checker.credentials import complete_credentials
from inactive_checker.errors import InactiveCheckerError
from inactive_checker.fetcher import fetch_host
from inactive_checker.pool import WorkerPool
from inactive_checker.report import write_workbook
from inactive_checker.settings import load_config

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report inactive Junos configuration and how long it has been inactive")
    parser.add_argument("-v", dest="verbose", action="store_true", help="More output: fresh/new/removed entries and worker progress (implies -s)")
    parser.add_argument("-s", dest="store", action="store_true", help="Use cache to determine stale entries (>30days)")
    parser.add_argument("--config", "-c", type=str, default=CONFIG_PATH, help="Path to YAML configuration")
    parser.add_argument("--db", type=str, default=CACHE_PATH, help="Path to staleness cache")
    parser.add_argument("--output", "-o", type=str, default=None, help="Optional Excel workbook for the findings")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    return parser


def _log_level(args: argparse.Namespace) -> int:
    if args.debug:
        return logging.DEBUG
    if args.verbose:
        return logging.INFO
    return logging.CRITICAL


def run(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    client = complete_credentials(config.ssh_client)
    use_cache = args.store or args.verbose

    pool = WorkerPool(functools.partial(fetch_host, client), client.num_workers)
    cache_cm = StalenessCache(args.db) if use_cache else contextlib.nullcontext()
    with cache_cm as cache:
        ctx = RunContext(config=config, verbose=args.verbose, use_cache=use_cache, cache=cache)
        report = RunCoordinator(ctx, pool).run()

    if args.output:
        write_workbook(report, config.hosts, args.output)


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entrypoint:
    - Parses args and loads config.yml
    - Audits all hosts concurrently
    - Prints inactive (or stale) identifiers, one per line
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=_log_level(args), format="%(message)s")

    try:
        run(args)
    except InactiveCheckerError as e:
        log.critical("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
