"""
Run configuration loaded from YAML.

Expected layout::

    ssh-client:
      user: netops
      pass: secret            # optional
      key-file: ~/.ssh/id_rsa # optional, wins over pass
      num-workers: 4
      jump-host: 10.0.0.1     # optional
      port: 22                # optional
    ssh-hosts:
      - r1.example.net
      - r2.example.net
    whitelist:
      - "r1.example.net:ge-0/0/1 interface"
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, FrozenSet, Mapping, Optional, Tuple

import yaml

from .config import CONFIG_PATH, SSH_PORT
from .errors import ConfigError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SSHClientSettings:
    user: str
    num_workers: int
    password: Optional[str] = None
    key_file: Optional[str] = None
    jump_host: Optional[str] = None
    port: int = SSH_PORT

    @property
    def uses_key(self) -> bool:
        """Key-based auth takes precedence whenever a key file is configured."""
        return bool(self.key_file)

    def with_password(self, password: str) -> "SSHClientSettings":
        return replace(self, password=password)


@dataclass(frozen=True)
class AuditConfig:
    ssh_client: SSHClientSettings
    hosts: Tuple[str, ...]
    whitelist: FrozenSet[str] = field(default_factory=frozenset)


def _optional_str(section: Mapping[str, Any], key: str) -> Optional[str]:
    value = section.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigError(f"ssh-client.{key} must be a string")
    return value


def _str_list(doc: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    value = doc.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def parse_config(doc: Any) -> AuditConfig:
    """
    Validate a decoded YAML document.

    Raises:
        ConfigError: on missing required keys or wrongly typed values.
    """
    if not isinstance(doc, Mapping):
        raise ConfigError("configuration must be a mapping")

    section = doc.get("ssh-client")
    if not isinstance(section, Mapping):
        raise ConfigError("missing ssh-client section")

    user = section.get("user")
    if not isinstance(user, str) or not user.strip():
        raise ConfigError("ssh-client.user is required")

    workers = section.get("num-workers")
    # bool is an int subclass; reject it explicitly
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise ConfigError("ssh-client.num-workers must be an integer")
    if workers < 1:
        raise ConfigError("ssh-client.num-workers must be at least 1")

    port = section.get("port", SSH_PORT)
    if isinstance(port, bool) or not isinstance(port, int):
        raise ConfigError("ssh-client.port must be an integer")

    key_file = _optional_str(section, "key-file")
    if key_file:
        key_file = os.path.expanduser(key_file)

    client = SSHClientSettings(
        user=user.strip(),
        num_workers=workers,
        password=_optional_str(section, "pass"),
        key_file=key_file,
        jump_host=_optional_str(section, "jump-host"),
        port=port,
    )

    hosts = _str_list(doc, "ssh-hosts")
    if not hosts:
        raise ConfigError("No hosts found in ssh-hosts")

    return AuditConfig(
        ssh_client=client,
        hosts=hosts,
        whitelist=frozenset(_str_list(doc, "whitelist")),
    )


def load_config(path: str = CONFIG_PATH) -> AuditConfig:
    """Read and validate the YAML configuration file at *path*."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"malformed YAML in {path}: {e}") from e

    config = parse_config(doc)
    log.debug("Loaded %s: %d host(s), %d whitelisted", path, len(config.hosts), len(config.whitelist))
    return config
