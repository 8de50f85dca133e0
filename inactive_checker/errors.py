"""Exception types raised by the inactive configuration checker."""


class InactiveCheckerError(Exception):
    """Base class for every fatal condition of a run."""


class ConfigError(InactiveCheckerError):
    """The YAML configuration is missing, unreadable or malformed."""


class CacheError(InactiveCheckerError):
    """The staleness store could not be opened, read or written."""


class DocumentError(InactiveCheckerError):
    """A device returned a configuration payload that is not valid XML."""


class HostFetchError(InactiveCheckerError):
    """A host could not be audited; the whole run is aborted."""

    def __init__(self, host: str, error: BaseException):
        super().__init__(f"{host} : {error}")
        self.host = host
        self.error = error


class ReportError(InactiveCheckerError):
    """The Excel workbook could not be written."""
