"""
Process and lock-file probes.

Read-only checks used to detect a package manager running outside the
framework's control: ``pgrep`` for processes, ``fuser`` for lock files.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from collections.abc import Iterable
from pathlib import Path

from rootine.core.errors import PackageManagerBusyError, RootineError, UsageError
from rootine.core.models.status import ExitStatus
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

PACKAGE_MANAGER_PROCESSES: tuple[str, ...] = ("dpkg", "apt-get", "apt")

PACKAGE_MANAGER_LOCK_FILES: tuple[str, ...] = (
    "/var/lib/dpkg/lock",
    "/var/lib/dpkg/lock-frontend",
    "/var/lib/apt/lists/lock",
    "/var/cache/apt/archives/lock",
)

_PROCESS_NAME = re.compile(r"^[a-zA-Z0-9_.-]+$")
_LOCK_PATH = re.compile(r"^[a-zA-Z0-9/_.-]+$")


def missing_commands(*commands: str) -> list[str]:
    """Names from ``commands`` that are not on PATH."""
    return [c for c in commands if c and shutil.which(c) is None]


def _require(command: str, package: str) -> None:
    if shutil.which(command) is None:
        logger.error("Required command '%s' not found (install package '%s')", command, package)
        raise RootineError(
            f"Required command '{command}' not found",
            exit_status=ExitStatus.UNAVAILABLE,
        )


def is_process_running(name: str) -> bool:
    """Whether a process with exactly this name is running."""
    if not _PROCESS_NAME.match(name):
        raise UsageError(f"Invalid process name format: {name}")
    _require("pgrep", "procps")

    receipt = run_command(["pgrep", "-x", name], timeout=10)
    if receipt.ok and receipt.stdout.strip():
        pids = " ".join(receipt.stdout.split())
        logger.debug("Process '%s' is running with PID(s): %s", name, pids)
        return True
    logger.debug("Process '%s' is not running", name)
    return False


def lock_file_holders(path: str) -> list[int]:
    """PIDs of processes that have ``path`` open (empty when none)."""
    if not _LOCK_PATH.match(path):
        raise UsageError(f"Invalid lock file path format: {path}")

    real_path = Path(path).resolve()
    if not real_path.exists():
        logger.debug("Lock file does not exist: %s", real_path)
        return []
    if not os.access(real_path, os.R_OK):
        logger.error("Permission denied: cannot read %s", real_path)
        raise RootineError(f"Cannot read {real_path}", exit_status=ExitStatus.NOPERM)
    _require("fuser", "psmisc")

    # fuser writes PIDs to stdout and the file name/access codes to stderr
    receipt = run_command(["fuser", str(real_path)], timeout=10)
    return [int(pid) for pid in re.findall(r"\d+", receipt.stdout)]


def is_lock_file_held(path: str, ignore_pids: Iterable[int] = ()) -> bool:
    """Whether any process other than ``ignore_pids`` holds ``path`` open."""
    ignored = set(ignore_pids)
    holders = [pid for pid in lock_file_holders(path) if pid not in ignored]
    if holders:
        logger.debug("Lock file %s is held by PID(s): %s", path, holders)
        return True
    logger.debug("No process is holding %s", path)
    return False


def check_package_manager_status(
    processes: Iterable[str] = PACKAGE_MANAGER_PROCESSES,
    lock_files: Iterable[str] = PACKAGE_MANAGER_LOCK_FILES,
    ignore_pids: Iterable[int] = (),
) -> None:
    """Fail when the package manager is busy outside our control.

    Raises:
        PackageManagerBusyError: A package-manager process is running or
            one of its lock files is held by another process.
    """
    logger.debug("Checking package manager processes and lock files...")
    ignored = set(ignore_pids) | {os.getpid()}

    for process in processes:
        if is_process_running(process):
            logger.warning("Package manager process '%s' is running", process)
            raise PackageManagerBusyError(f"Package manager process '{process}' is running")

    for lock_file in lock_files:
        if is_lock_file_held(lock_file, ignore_pids=ignored):
            logger.warning("Package manager lock file '%s' is held", lock_file)
            raise PackageManagerBusyError(f"Package manager lock file '{lock_file}' is held")

    logger.debug("Package manager is not running and no lock files are held")
