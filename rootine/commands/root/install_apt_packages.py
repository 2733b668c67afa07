"""
Install the baseline APT packages.

    rootine install-apt-packages [restart-xrdp]
"""

from __future__ import annotations

import logging

from rootine.core.engine.router import InvocationContext
from rootine.core.models.arguments import ArgumentSchema, ArgumentSpec
from rootine.core.models.status import ExitStatus
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

DEFAULT_PACKAGES: tuple[str, ...] = (
    "apt-transport-https",
    "coreutils",
    "curl",
    "dbus-x11",
    "gdebi",
    "gnupg",
    "usb-creator-gtk",
)

ARGUMENTS = ArgumentSchema(
    ArgumentSpec(
        name="restart-xrdp",
        description="Restart XRDP service after installation",
        requires_value=True,
        default="true",
        pattern=r"^(true|false)$",
    ),
)


def restart_xrdp() -> bool:
    """Restart xrdp when it is active; an inactive service is left alone."""
    if not run_command(["systemctl", "is-active", "--quiet", "xrdp"], timeout=30).ok:
        logger.debug("XRDP service is not active, skipping restart")
        return True

    logger.info("Restarting XRDP service...")
    if run_command(["systemctl", "restart", "xrdp"], timeout=60).failed:
        logger.error("Failed to restart XRDP service")
        return False
    return True


def main(context: InvocationContext) -> int:
    packages = list(DEFAULT_PACKAGES)
    logger.info("Starting package installation...")
    logger.debug("Packages to install: %s", " ".join(packages))

    if context.call("apt_get_do", "update") != ExitStatus.SUCCESS:
        logger.error("Failed to update package lists")
        return ExitStatus.FAILURE

    if context.call("apt_get_do", "install", *packages) != ExitStatus.SUCCESS:
        logger.error("Failed to install packages: %s", " ".join(packages))
        return ExitStatus.FAILURE

    if context.args.flag("restart-xrdp") and not restart_xrdp():
        return ExitStatus.FAILURE

    logger.info("Verifying installation...")
    for package in packages:
        receipt = run_command(["dpkg-query", "-W", "-f=${Status}", package], timeout=30)
        if receipt.ok and "ok installed" in receipt.stdout:
            logger.debug("Package '%s' installed successfully", package)
        else:
            logger.warning("Package '%s' installation status uncertain", package)

    logger.info("Package installation completed successfully")
    return ExitStatus.SUCCESS
