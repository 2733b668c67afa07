"""
Install nvm and a Node.js release for the current user.

    rootine install-nodejs [nvm-version] [node-version]
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
from pathlib import Path

from rootine.core.engine.router import InvocationContext
from rootine.core.models.arguments import ArgumentSchema, ArgumentSpec
from rootine.core.models.status import ExitStatus
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/{version}/install.sh"

ARGUMENTS = ArgumentSchema(
    ArgumentSpec(
        name="nvm-version",
        description="nvm version to install",
        requires_value=True,
        default="v0.40.1",
        pattern=r"^v[0-9]+\.[0-9]+\.[0-9]+$",
    ),
    ArgumentSpec(
        name="node-version",
        description="Node.js version to install",
        requires_value=True,
        default="22",
        pattern=r"^([0-9]+|lts/[a-zA-Z]+|latest)$",
    ),
)


def nvm_dir() -> Path:
    return Path(os.environ.get("NVM_DIR") or Path.home() / ".nvm")


def _nvm(script: str, directory: Path, *, capture: bool = True):
    """Run ``script`` in a bash that has sourced nvm."""
    setup = f"source {shlex.quote(str(directory / 'nvm.sh'))}"
    return run_command(
        ["bash", "-c", f"{setup} && {script}"],
        timeout=None,
        env_overrides={"NVM_DIR": str(directory)},
        capture=capture,
    )


def main(context: InvocationContext) -> int:
    nvm_version = context.args["nvm-version"]
    node_version = context.args["node-version"]

    if shutil.which("curl") is None:
        logger.error("Required command 'curl' not found")
        logger.info("Install using: sudo apt-get install curl")
        return ExitStatus.USAGE

    logger.info("Installing nvm %s...", nvm_version)
    url = NVM_INSTALL_URL.format(version=nvm_version)
    installer = run_command(
        ["bash", "-o", "pipefail", "-c", f"curl -fsSL {shlex.quote(url)} | bash"],
        timeout=None,
        capture=False,
    )
    if installer.failed:
        logger.error("Failed to install nvm")
        return ExitStatus.CANTCREAT

    directory = nvm_dir()
    nvm_script = directory / "nvm.sh"
    if not nvm_script.is_file() or nvm_script.stat().st_size == 0:
        logger.error("nvm installation files not found")
        return ExitStatus.NOINPUT

    logger.info("Installing Node.js %s...", node_version)
    if _nvm(f"nvm install {shlex.quote(node_version)}", directory, capture=False).failed:
        logger.error("Failed to install Node.js %s", node_version)
        return ExitStatus.CANTCREAT

    logger.info("Verifying installation...")
    for label, probe in (
        ("nvm", "nvm --version"),
        ("Node.js", "node -v"),
        ("npm", "npm -v"),
        ("current Node.js", "nvm current"),
    ):
        receipt = _nvm(probe, directory)
        if receipt.failed:
            logger.error("Failed to get %s version", label)
            return ExitStatus.NOINPUT
        logger.debug("%s version: %s", label, receipt.stdout.strip())

    logger.info("Installation completed successfully")
    return ExitStatus.SUCCESS
