"""
Connectivity check exposed to commands and the CLI.
"""

from __future__ import annotations

from rootine.core.config.settings import Settings
from rootine.core.services.network import check_internet_connection as _check

__all__ = ["check_internet_connection"]


def check_internet_connection(
    host: str | None = None,
    retries: str | None = None,
    timeout: str | None = None,
    *,
    settings: Settings,
) -> bool:
    """Ping ``host`` (default from settings) with linear retries."""
    return _check(
        host or settings.ping_host,
        retries or settings.ping_retries,
        timeout or settings.ping_timeout,
        interval=settings.ping_interval,
    )
