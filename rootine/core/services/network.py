"""
Connectivity probing.

Pings a well-known host with a fixed retry budget and a fixed sleep
between attempts (linear, not exponential).
"""

from __future__ import annotations

import logging
import re
import shutil

from rootine.core.errors import NetworkUnreachableError, UsageError
from rootine.core.reliability.retry import LinearRetry
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")


def ping_once(host: str, timeout: int) -> bool:
    """Send a single ICMP echo request."""
    receipt = run_command(
        ["ping", "-c", "1", "-W", str(timeout), host],
        timeout=timeout + 1,
    )
    return receipt.ok


def check_internet_connection(
    host: str = "8.8.8.8",
    retries: int | str = 3,
    timeout: int | str = 5,
    interval: float = 1.0,
) -> bool:
    """Whether ``host`` answers within the retry budget.

    ``retries`` and ``timeout`` accept the string form the CLI passes.

    Raises:
        UsageError: ``retries`` or ``timeout`` is not a positive integer.
    """
    if not _POSITIVE_INT.match(str(retries)):
        raise UsageError(f"Invalid retry count: {retries} (must be a positive integer)")
    if not _POSITIVE_INT.match(str(timeout)):
        raise UsageError(f"Invalid timeout value: {timeout} (must be a positive integer)")
    if shutil.which("ping") is None:
        logger.error("Required command 'ping' not found (install package 'iputils-ping')")
        return False

    logger.info("Checking internet connection to %s...", host)
    policy = LinearRetry(attempts=int(retries), interval=interval, label="Ping")
    if policy.run(lambda: ping_once(host, int(timeout))):
        logger.info("Internet connection is active")
        return True
    logger.error("No internet connection after %s attempts", retries)
    return False


def require_internet_connection(
    host: str = "8.8.8.8",
    retries: int = 3,
    timeout: int = 5,
    interval: float = 1.0,
) -> None:
    """Like ``check_internet_connection`` but raises when offline.

    Raises:
        NetworkUnreachableError: ``host`` did not answer.
    """
    if not check_internet_connection(host, retries, timeout, interval):
        raise NetworkUnreachableError(f"Network unreachable: no reply from {host}")
