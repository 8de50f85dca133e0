import getpass
import logging
import os

from .config import CRED_TARGET, PASSWORD_ENV_VARS
from .errors import ConfigError
from .settings import SSHClientSettings

log = logging.getLogger(__name__)


def get_password_with_fallback(user: str) -> str:
    """
    Try environment variables, then Windows Credential Manager, then interactive prompt.
    Environment variables checked (in order):
      - INACTIVE_CHECKER_PASS
      - SSH_PASS
    For win32 cred the target name can be set via CREDENTIAL_TARGET (default 'InactiveChecker/SSH').
    """
    # 1) Environment overrides
    for env in PASSWORD_ENV_VARS:
        pwd = os.environ.get(env)
        if pwd:
            log.debug("Using SSH password from %s", env)
            return pwd

    # 2) Windows Credential Manager (optional)
    target = os.environ.get("CREDENTIAL_TARGET", CRED_TARGET)
    try:
        import win32cred  # type: ignore
        cred = win32cred.CredRead(target, win32cred.CRED_TYPE_GENERIC)  # type: ignore
        blob = cred.get("CredentialBlob")
        if blob and cred.get("UserName") == user:
            # CredentialBlob is typically UTF-16LE for Windows generic creds
            try:
                return blob.decode("utf-16le")
            except UnicodeDecodeError:
                return blob.decode("utf-8", errors="ignore")
    except Exception:
        log.debug("Win32 credential read failed or not available for target %s", target, exc_info=True)

    # 3) Interactive prompt
    try:
        pwd = getpass.getpass(f"Enter SSH password for {user}: ")
    except EOFError as e:
        raise ConfigError(f"No SSH password for {user} and stdin is closed") from e
    if not pwd:
        raise ConfigError("Credentials not found in config, env vars, Windows Credential Manager, or provided interactively.")
    return pwd


def complete_credentials(client: SSHClientSettings) -> SSHClientSettings:
    """Return *client* with a password filled in when neither pass nor key-file is configured."""
    if client.uses_key or client.password:
        return client
    return client.with_password(get_password_with_fallback(client.user))
