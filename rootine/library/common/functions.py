"""
General host checks shared by every command.

All functions accept the string arguments the CLI passes, so each one
can be called directly as ``rootine lib::common::<name> ...``.
"""

from __future__ import annotations

import logging
import re
import shutil

import click

from rootine.core.config.settings import Settings
from rootine.core.errors import UsageError
from rootine.core.services import process_status
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

__all__ = [
    "alnum_str",
    "check_disk_space",
    "is_command_available",
    "is_lock_file_held",
    "is_package_installed",
    "is_process_running",
]


def is_command_available(*commands: str) -> bool:
    """Whether every command is on PATH.

    A single argument containing spaces is split into several names.
    """
    if len(commands) == 1 and " " in commands[0]:
        commands = tuple(commands[0].split())
    missing = process_status.missing_commands(*commands)
    if missing:
        logger.error("Missing required system commands: %s", " ".join(f"'{c}'" for c in missing))
        return False
    return True


def is_process_running(name: str) -> bool:
    return process_status.is_process_running(name)


def is_lock_file_held(path: str) -> bool:
    return process_status.is_lock_file_held(path)


def is_package_installed(package: str) -> bool:
    """Whether dpkg knows ``package`` as installed."""
    receipt = run_command(["dpkg-query", "-W", "-f=${Status}", package], timeout=30)
    if receipt.ok and "ok installed" in receipt.stdout:
        return True
    logger.error("Package '%s' is NOT installed", package)
    return False


def check_disk_space(*paths: str, settings: Settings) -> bool:
    """Whether every path has at least ``min_disk_space_mb`` available."""
    min_kb = settings.min_disk_space_mb * 1024
    for path in paths or tuple(settings.disk_space_paths):
        try:
            usage = shutil.disk_usage(path)
        except FileNotFoundError:
            logger.error("Path not found: %s", path)
            return False
        except OSError as e:
            logger.error("Failed to determine available space for %s: %s", path, e)
            return False

        available_kb = usage.free // 1024
        if available_kb < min_kb:
            logger.error(
                "Insufficient space in %s. Need: %dMB, Have: %dMB",
                path,
                settings.min_disk_space_mb,
                available_kb // 1024,
            )
            return False
    return True


def alnum_str(*words: str) -> str:
    """Strip whitespace and replace every other non-alphanumeric with ``_``."""
    if not words:
        raise UsageError("alnum_str: a string argument is required")
    result = re.sub(r"[^0-9A-Za-z]", "_", "".join("".join(words).split()))
    click.echo(result)
    return result
