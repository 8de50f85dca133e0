import logging
from typing import Any, Optional

from netmiko import ConnectHandler
from netmiko.base_connection import BaseConnection

from .config import AUTH_TIMEOUT, BANNER_TIMEOUT, CONNECTION_TIMEOUT, DEVICE_TYPE, SSH_PORT
from .jump_manager import JumpManager

log = logging.getLogger(__name__)


def connect_to_device(
    host: str,
    username: str,
    password: Optional[str] = None,
    key_file: Optional[str] = None,
    device_type: str = DEVICE_TYPE,
    jump: Optional[JumpManager] = None,
    port: int = SSH_PORT,
    **extras: Any,
) -> BaseConnection:
    """
    Lightweight wrapper around Netmiko.ConnectHandler.
    A key file, when given, is used instead of the password.
    Accepts optional jump (JumpManager) which must provide a direct-tcpip channel via .open_channel().
    """
    kwargs: dict[str, Any] = {
        "device_type": device_type,
        "host": host,
        "username": username,
        "port": port,
        "auth_timeout": AUTH_TIMEOUT,
        "banner_timeout": BANNER_TIMEOUT,
        "conn_timeout": CONNECTION_TIMEOUT,
        "fast_cli": False,
    }
    if key_file:
        kwargs.update(use_keys=True, key_file=key_file, allow_agent=False)
    else:
        kwargs["password"] = password or ""
    kwargs.update(extras)
    if jump:
        try:
            kwargs["sock"] = jump.open_channel(host, port)
            log.debug("Opened jump channel to %s:%s", host, port)
        except Exception:
            log.exception("Failed to open jump channel to %s:%s", host, port)
            raise

    log.debug("Connecting to device %s (%s, %s auth)", host, device_type, "key" if key_file else "password")
    try:
        return ConnectHandler(**kwargs)
    except Exception:
        log.exception("ConnectHandler failed for %s", host)
        raise
