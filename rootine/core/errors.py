"""
Error taxonomy.

Every framework failure is a ``RootineError`` carrying the exit status
the process should report. The router logs and converts these; command
bodies never need to catch them.
"""

from __future__ import annotations

from rootine.core.models.status import ExitStatus


class RootineError(Exception):
    """Base class for framework errors."""

    exit_status: int = ExitStatus.FAILURE

    def __init__(self, message: str, *, exit_status: int | None = None):
        super().__init__(message)
        if exit_status is not None:
            self.exit_status = exit_status

    @property
    def message(self) -> str:
        return str(self)


class UsageError(RootineError):
    """Malformed or incomplete caller input.

    ``help_text`` holds the regenerated help so the caller can
    self-correct.
    """

    exit_status = ExitStatus.USAGE

    def __init__(self, message: str, *, help_text: str = ""):
        super().__init__(message)
        self.help_text = help_text


class AccessControlError(RootineError):
    """A namespace was requested from the wrong privilege level."""

    exit_status = ExitStatus.NOPERM


class NotFoundError(RootineError):
    """No resolution strategy matched the command name."""

    exit_status = ExitStatus.COMMAND_NOT_FOUND


class LoadError(RootineError):
    """A required library module is missing or unreadable."""

    exit_status = ExitStatus.CONFIG


class ConfigError(RootineError):
    """Settings file or environment is invalid."""

    exit_status = ExitStatus.CONFIG


class LockError(RootineError):
    """Base class for package-manager lock failures."""

    exit_status = ExitStatus.TEMPFAIL


class LockTimeoutError(LockError):
    """The lock was not acquired within the timeout."""

    exit_status = ExitStatus.TEMPFAIL


class LockAcquisitionError(LockError):
    """The lock file could not be validated, created or opened."""

    exit_status = ExitStatus.CANTCREAT


class PackageManagerBusyError(LockError):
    """The package manager is running outside the framework's control."""

    exit_status = ExitStatus.TEMPFAIL


class NetworkUnreachableError(RootineError):
    """The connectivity precondition failed."""

    exit_status = ExitStatus.NETWORK_UNREACHABLE
