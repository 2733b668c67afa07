"""
Exclusive-operation lock for the package-manager critical section.

States:
    RELEASED → ACQUIRED:  lock file validated, opened and locked in time
    ACQUIRED → RELEASED:  scope exit (return, exception, signal)

Guarantees:
    - Mutual exclusion across processes via a ``portalocker`` exclusive
      lock (``flock`` on POSIX) on a well-known file. No fairness among
      waiters.
    - Waiting is bounded by a timeout; expiry raises ``LockTimeoutError``.
    - Release is registered on an ``ExitStack`` at acquisition time, so
      every exit path runs it. SIGTERM/SIGHUP/SIGQUIT are turned into
      ``SystemExit`` while the lock is held so the scope unwinds.
    - Releasing twice is a no-op.
    - No retries: callers layer their own policy outside.
"""

from __future__ import annotations

import logging
import os
import signal
import threading
import time
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import portalocker

from rootine.core.config.settings import Settings
from rootine.core.errors import LockAcquisitionError, LockTimeoutError
from rootine.core.models.status import ExitStatus
from rootine.core.services.process_status import check_package_manager_status

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOCK_FILE = "/var/lib/dpkg/lock-frontend"

_TERMINATION_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP", "SIGQUIT") if hasattr(signal, name)
)


@dataclass(frozen=True)
class LockHandle:
    """Ownership of the lock, valid until the owning scope exits."""

    file_path: str
    file_descriptor: int
    acquired_at: float


def _terminate(signum: int, _frame) -> None:
    logger.warning("Received signal %d while holding the package-manager lock", signum)
    raise SystemExit(ExitStatus.TERMINATED)


class PackageManagerLock:
    """Non-reentrant, timeout-bounded exclusive lock on a file.

    Args:
        path: Lock file (created if absent).
        timeout: Seconds to wait for the lock.
        poll_interval: Seconds between non-blocking attempts.
        check_conflicts: Verify, once held, that the package manager is
            not running outside the framework.
        conflict_check: Callable raising when the package manager is
            busy. Receives ``ignore_pids``.

    Usage::

        with PackageManagerLock("/var/lib/dpkg/lock-frontend", timeout=60):
            run_command(["apt-get", "update"])
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_LOCK_FILE,
        timeout: float = 60.0,
        poll_interval: float = 0.1,
        check_conflicts: bool = True,
        conflict_check: Callable[..., None] | None = None,
    ):
        if timeout < 0:
            raise ValueError(f"timeout must not be negative, got {timeout}")
        self.path = Path(path)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.check_conflicts = check_conflicts
        self._conflict_check = conflict_check or check_package_manager_status
        self._handle: LockHandle | None = None
        self._stack: ExitStack | None = None

    def __repr__(self) -> str:
        return f"<PackageManagerLock path={str(self.path)!r} held={self.held}>"

    @property
    def held(self) -> bool:
        return self._handle is not None

    @property
    def handle(self) -> LockHandle | None:
        return self._handle

    # ── Acquisition ─────────────────────────────────────────────

    def _validate(self) -> None:
        """Parent directory must exist and be writable."""
        lock_dir = self.path.parent
        if not lock_dir.is_dir():
            logger.error("Lock directory does not exist: %s", lock_dir)
            raise LockAcquisitionError(f"Lock directory does not exist: {lock_dir}")
        if not os.access(lock_dir, os.W_OK):
            logger.error("Lock directory is not writable: %s", lock_dir)
            raise LockAcquisitionError(f"Lock directory is not writable: {lock_dir}")

    def _opener(self, path: str, flags: int) -> int:
        return os.open(path, flags, 0o640)

    def _take(self) -> portalocker.Lock:
        """Open the lock file and wait for an exclusive lock on it."""
        file_lock = portalocker.Lock(
            self.path,
            mode="a",
            timeout=self.timeout,
            check_interval=self.poll_interval,
            fail_when_locked=False,
            flags=portalocker.LockFlags.EXCLUSIVE | portalocker.LockFlags.NON_BLOCKING,
            opener=self._opener,
        )
        try:
            file_lock.acquire()
        except portalocker.AlreadyLocked as e:
            logger.error("Failed to acquire lock after %ss: %s", self.timeout, self.path)
            raise LockTimeoutError(
                f"Timed out after {self.timeout}s waiting for lock {self.path}"
            ) from e
        except (portalocker.LockException, OSError) as e:
            logger.error("Cannot lock %s: %s", self.path, e)
            raise LockAcquisitionError(f"Cannot lock {self.path}: {e}") from e
        return file_lock

    def _trap_signals(self, stack: ExitStack) -> None:
        # signal.signal only works from the main thread
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in _TERMINATION_SIGNALS:
            previous = signal.signal(signum, _terminate)
            stack.callback(signal.signal, signum, previous)

    def acquire(self) -> LockHandle:
        """Take the lock or raise.

        Raises:
            LockAcquisitionError: Already held through this instance, or
                the lock file cannot be validated or created.
            LockTimeoutError: Not acquired within ``timeout``.
            PackageManagerBusyError: Acquired, but the package manager is
                running outside our control (the lock is released first).
        """
        if self._handle is not None:
            raise LockAcquisitionError(f"Lock already held: {self.path} (locks are not reentrant)")

        self._validate()
        file_lock = self._take()
        fd = file_lock.fh.fileno()

        # Registered now so every exit path unlocks; LIFO order runs
        # signal restore, then unlock and close.
        stack = ExitStack()
        stack.callback(self._unlock, file_lock)
        self._trap_signals(stack)

        self._handle = LockHandle(
            file_path=str(self.path),
            file_descriptor=fd,
            acquired_at=time.time(),
        )
        self._stack = stack
        logger.debug("Lock acquired: %s (fd=%d)", self.path, fd)

        if self.check_conflicts:
            try:
                self._conflict_check(ignore_pids=[os.getpid()])
            except BaseException:
                self.release()
                raise

        return self._handle

    # ── Release ─────────────────────────────────────────────────

    def _unlock(self, file_lock: portalocker.Lock) -> None:
        try:
            file_lock.release()
        except (portalocker.LockException, OSError) as e:
            logger.error("Failed to unlock %s: %s", self.path, e)

    def release(self) -> None:
        """Release the lock and close its descriptor. Idempotent."""
        stack = self._stack
        if stack is None:
            logger.debug("Lock already released: %s", self.path)
            return
        self._stack = None
        self._handle = None
        stack.close()
        logger.debug("Lock released: %s", self.path)

    def __enter__(self) -> LockHandle:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def package_manager_lock(settings: Settings) -> PackageManagerLock:
    """Build the package-manager lock described by ``settings``."""
    return PackageManagerLock(
        settings.lock_file,
        timeout=settings.lock_timeout,
        poll_interval=settings.lock_poll_interval,
        check_conflicts=settings.check_conflicts,
    )


def with_lock(
    timeout: float,
    body: Callable[..., T],
    *args: Any,
    lock_file: str | Path = DEFAULT_LOCK_FILE,
    poll_interval: float = 0.1,
    check_conflicts: bool = True,
    conflict_check: Callable[..., None] | None = None,
    **kwargs: Any,
) -> T:
    """Run ``body(*args, **kwargs)`` while holding the package-manager lock.

    ``lock_file``, ``poll_interval``, ``check_conflicts`` and
    ``conflict_check`` configure the lock and are not passed to ``body``.
    The lock is released before this returns, whether ``body`` returns,
    raises, or the process is told to terminate.
    """
    lock = PackageManagerLock(
        lock_file,
        timeout=timeout,
        poll_interval=poll_interval,
        check_conflicts=check_conflicts,
        conflict_check=conflict_check,
    )
    with lock:
        return body(*args, **kwargs)
