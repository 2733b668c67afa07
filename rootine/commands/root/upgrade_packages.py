"""
Upgrade snap and APT packages, then tidy up.

    rootine upgrade-packages [upgrade-type] [autoremove] [clean]
"""

from __future__ import annotations

import logging
import shutil

from rootine.core.engine.router import InvocationContext
from rootine.core.models.arguments import ArgumentSchema, ArgumentSpec
from rootine.core.models.status import ExitStatus
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

ARGUMENTS = ArgumentSchema(
    ArgumentSpec(
        name="upgrade-type",
        description="Type of upgrade to perform",
        requires_value=True,
        default="safe",
        pattern=r"^(full|safe)$",
    ),
    ArgumentSpec(
        name="autoremove",
        description="Remove unused packages",
        requires_value=True,
        default="true",
        pattern=r"^(true|false)$",
    ),
    ArgumentSpec(
        name="clean",
        description="Clean package cache after upgrade",
        requires_value=True,
        default="true",
        pattern=r"^(true|false)$",
    ),
)

UPGRADE_COMMANDS = {"full": "dist-upgrade", "safe": "upgrade"}


def upgrade_snap_packages(context: InvocationContext) -> bool:
    if shutil.which("snap") is None:
        logger.debug("Snap is not installed, skipping snap updates")
        return True
    if context.call("snap_stop") != ExitStatus.SUCCESS:
        logger.warning("Failed to stop snap store, continuing anyway...")
    if context.call("snap_refresh") != ExitStatus.SUCCESS:
        logger.error("Failed to refresh snap packages")
        return False
    return True


def cleanup_packages(context: InvocationContext) -> bool:
    ok = True
    if context.args.flag("autoremove"):
        logger.info("Removing unused packages...")
        if context.call("apt_get_do", "autoremove") != ExitStatus.SUCCESS:
            logger.error("Failed to remove unused packages")
            ok = False
    if context.args.flag("clean"):
        logger.info("Cleaning package cache...")
        if context.call("apt_get_do", "clean") != ExitStatus.SUCCESS:
            logger.error("Failed to clean package cache")
            ok = False
    return ok


def verify_system_state() -> bool:
    """dpkg reports no broken or half-configured packages."""
    logger.info("Verifying system state...")
    if run_command(["dpkg", "--audit"], timeout=120).stdout.strip():
        logger.error("Found package inconsistencies")
        return False
    if run_command(["dpkg", "--configure", "-a"], timeout=600).stdout.strip():
        logger.error("Found unconfigured packages")
        return False
    logger.debug("Package system is consistent")
    return True


def main(context: InvocationContext) -> int:
    upgrade_type = context.args["upgrade-type"]
    logger.info("Starting system package updates...")
    logger.debug("Upgrade type: %s", upgrade_type)

    status = context.call("check_internet_connection")
    if status != ExitStatus.SUCCESS:
        logger.error("No internet connection available")
        return ExitStatus.NETWORK_UNREACHABLE
    if context.call("check_disk_space", "/") != ExitStatus.SUCCESS:
        return ExitStatus.DISK_SPACE

    if not upgrade_snap_packages(context):
        logger.warning("Snap package updates failed, continuing with APT updates")

    logger.info("Starting APT package updates...")
    if context.call("apt_get_do", "update") != ExitStatus.SUCCESS:
        return ExitStatus.FAILURE
    if context.call("apt_get_do", UPGRADE_COMMANDS[upgrade_type]) != ExitStatus.SUCCESS:
        logger.error("%s system upgrade failed", upgrade_type.capitalize())
        return ExitStatus.FAILURE

    if not cleanup_packages(context):
        return ExitStatus.FAILURE
    if not verify_system_state():
        return ExitStatus.FAILURE

    logger.info("System package updates completed successfully")
    return ExitStatus.SUCCESS
