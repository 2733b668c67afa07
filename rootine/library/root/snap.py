"""
Snap Store helpers.
"""

from __future__ import annotations

import logging

from rootine.core.config.settings import Settings
from rootine.core.reliability.retry import LinearRetry
from rootine.core.services import process_status
from rootine.core.services.network import require_internet_connection
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

__all__ = ["snap_refresh", "snap_stop"]


def snap_stop(*, settings: Settings) -> bool:
    """Stop the Snap Store if it is running."""
    missing = process_status.missing_commands("pgrep", "killall")
    if missing:
        logger.error("Missing required commands: %s", " ".join(missing))
        return False

    store = settings.snap_store
    if not run_command(["pgrep", store], timeout=10).ok:
        logger.info("Snap Store is not running")
        return True

    logger.info("Stopping %s...", store)
    if not run_command(["killall", "-q", "-w", store], timeout=60).ok:
        logger.error("Failed to stop %s using killall", store)
        return False

    logger.info("Snap Store stopped successfully")
    return True


def snap_refresh(*, settings: Settings) -> bool:
    """Refresh all snaps, retrying with a fixed delay.

    Raises:
        NetworkUnreachableError: The host is offline.
    """
    missing = process_status.missing_commands("snap")
    if missing:
        logger.error("Missing required commands: %s", " ".join(missing))
        return False

    require_internet_connection(
        settings.ping_host,
        settings.ping_retries,
        settings.ping_timeout,
        settings.ping_interval,
    )

    policy = LinearRetry(
        attempts=settings.snap_refresh_retries,
        interval=settings.snap_refresh_delay,
        label="Snap refresh",
    )
    if policy.run(lambda: run_command(["snap", "refresh"], timeout=None, capture=False).ok):
        logger.info("Snap packages refreshed successfully")
        return True
    return False
