"""
Linear retry — fixed attempt budget, fixed sleep between attempts.

Used by connectivity checks and snap refreshes. The lock manager never
retries; callers layer this around their own work instead.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class LinearRetry:
    """Retry policy with a constant delay.

    Args:
        attempts: Total number of tries (not retries).
        interval: Seconds to sleep between tries.
        label: Name used in log messages.
    """

    attempts: int = 3
    interval: float = 1.0
    label: str = "operation"
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError(f"attempts must be a positive integer, got {self.attempts}")
        if self.interval < 0:
            raise ValueError(f"interval must not be negative, got {self.interval}")

    def run(self, probe: Callable[[], bool]) -> bool:
        """Call ``probe`` until it returns True or the budget is spent.

        Returns:
            True on the first successful attempt, False when exhausted.
        """
        for attempt in range(1, self.attempts + 1):
            if probe():
                return True
            if attempt < self.attempts:
                logger.warning(
                    "%s attempt %d/%d failed, retrying in %ss...",
                    self.label,
                    attempt,
                    self.attempts,
                    self.interval,
                )
                self.sleep(self.interval)
        logger.error("%s failed after %d attempts", self.label, self.attempts)
        return False
