from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import READ_TIMEOUT, RETRIEVAL_COMMAND
from .jump_manager import JumpManager
from .netmiko_utils import connect_to_device
from .paths import find_inactive, parse_document
from .settings import SSHClientSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostResult:
    """Outcome of auditing one host: its inactive paths, or the error that stopped it."""
    host: str
    paths: Tuple[str, ...] = ()
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def identifiers(self) -> Tuple[str, ...]:
        """Fleet-wide identifiers, ``<host>:<path>``."""
        return tuple(f"{self.host}:{p}" for p in self.paths)


def _retrieve_configuration(client: SSHClientSettings, host: str, jump: Optional[JumpManager]) -> str:
    conn = connect_to_device(
        host,
        client.user,
        password=client.password,
        key_file=client.key_file,
        jump=jump,
        port=client.port,
    )
    try:
        return conn.send_command(RETRIEVAL_COMMAND, read_timeout=READ_TIMEOUT, use_textfsm=False)
    finally:
        try:
            conn.disconnect()
        except Exception:
            log.debug("Disconnect from %s failed", host, exc_info=True)


def fetch_host(client: SSHClientSettings, host: str) -> HostResult:
    """
    Connect to a single device and list its inactive configuration subtrees.

    - Establishes SSH session (direct or via jump host), key auth first
    - Retrieves the configuration as XML
    - Returns the canonical path of every top-level inactive subtree

    Any connection, command or parse failure is returned in the result's
    ``error``; partial results are never returned.
    """
    try:
        if client.jump_host:
            with JumpManager(client.jump_host, client.user, client.password, client.key_file) as jump:
                payload = _retrieve_configuration(client, host, jump)
        else:
            payload = _retrieve_configuration(client, host, None)
        paths = find_inactive(parse_document(payload))
    except Exception as e:
        log.debug("Audit of %s failed: %s", host, e)
        return HostResult(host=host, error=e)
    return HostResult(host=host, paths=tuple(paths))
