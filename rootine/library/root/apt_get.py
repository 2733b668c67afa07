"""
apt-get wrappers for the Elevated level.

Every call runs inside the package-manager lock and with the
non-interactive environment below. Connectivity is checked first;
an offline host fails with ``NetworkUnreachableError`` (92).
"""

from __future__ import annotations

import logging
import shutil

from rootine.core.config.settings import Settings
from rootine.core.errors import PackageManagerBusyError, UsageError
from rootine.core.models.receipt import Receipt
from rootine.core.reliability.lock import package_manager_lock
from rootine.core.services import process_status
from rootine.core.services.network import require_internet_connection
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

__all__ = [
    "add_apt_repository",
    "apt_get_do",
    "check_package_manager_status",
]

APT_ENVIRONMENT: dict[str, str] = {
    "LC_ALL": "C.UTF-8",
    "LANG": "C.UTF-8",
    "LANGUAGE": "C.UTF-8",
    "DEBIAN_FRONTEND": "noninteractive",
    "DEBIAN_PRIORITY": "critical",
    "APT_LISTCHANGES_FRONTEND": "none",
}

# Option groups; "{retries}" and "{lock_timeout}" are filled from settings.
_LOCK = ("-o", "DPkg::Lock::Timeout={lock_timeout}")
_FETCH = (
    "-o", "Acquire::Retries={retries}",
    "-o", "APT::Get::AllowUnauthenticated=false",
    *_LOCK,
)

APT_COMMAND_OPTIONS: dict[str, tuple[str, ...]] = {
    "update": ("--no-allow-insecure-repositories", *_FETCH),
    "upgrade": ("-y", "--with-new-pkgs", *_FETCH),
    "dist-upgrade": ("-y", *_FETCH),
    "dselect-upgrade": ("-y", *_FETCH),
    "install": ("-y", "-f", "--auto-remove", *_FETCH),
    "reinstall": ("-y", "-f", "--auto-remove", *_FETCH),
    "remove": ("-y", "--auto-remove", *_LOCK),
    "purge": ("-y", "--auto-remove", *_LOCK),
    "source": ("-f", *_FETCH),
    "build-dep": ("-y", "-f", *_FETCH),
    "satisfy": ("-y", "-f", *_FETCH),
    "check": _LOCK,
    "download": _FETCH,
    "clean": _LOCK,
    "autoclean": _LOCK,
    "auto-clean": _LOCK,
    "autoremove": ("-y", *_LOCK),
    "auto-remove": ("-y", *_LOCK),
    "changelog": _FETCH,
    "indextargets": _LOCK,
}


def apt_options(command: str, settings: Settings) -> list[str]:
    """Options apt-get gets for ``command``.

    Raises:
        UsageError: ``command`` is not a known apt-get command.
    """
    try:
        template = APT_COMMAND_OPTIONS[command]
    except KeyError:
        raise UsageError(
            f"Invalid APT command: {command} "
            f"(valid commands: {', '.join(sorted(APT_COMMAND_OPTIONS))})"
        ) from None

    values = {
        "retries": settings.apt_update_retries,
        "lock_timeout": int(settings.lock_timeout),
    }
    options = [option.format(**values) for option in template]
    if settings.apt_quiet:
        options.insert(0, "-qq")
    return options


def _require_online(settings: Settings) -> None:
    require_internet_connection(
        settings.ping_host,
        settings.ping_retries,
        settings.ping_timeout,
        settings.ping_interval,
    )


def _run_locked(cmd: list[str], settings: Settings) -> Receipt:
    with package_manager_lock(settings):
        logger.debug("Running '%s'", " ".join(cmd))
        return run_command(
            cmd,
            timeout=settings.apt_command_timeout,
            env_overrides=APT_ENVIRONMENT,
            capture=False,
        )


def apt_get_do(command: str = "update", *args: str, settings: Settings) -> int:
    """Run ``apt-get <options> <command> <args...>`` under the lock.

    Returns apt-get's exit code.

    Raises:
        UsageError: Unknown apt-get command.
        NetworkUnreachableError: The host is offline.
        LockTimeoutError: The lock was not acquired in time.
        PackageManagerBusyError: apt/dpkg is running outside our control.
    """
    options = apt_options(command, settings)
    _require_online(settings)

    receipt = _run_locked(["apt-get", *options, command, *args], settings)
    if receipt.failed:
        logger.error("Command failed with %d error code", receipt.return_code)
        return receipt.return_code
    logger.debug("apt-get %s has been executed successfully", command)
    return 0


def add_apt_repository(repo_spec: str, *, settings: Settings) -> int:
    """Add an APT repository (``ppa:user/name`` or a deb line).

    Installs ``software-properties-common`` first when
    ``add-apt-repository`` is missing.
    """
    if not repo_spec:
        raise UsageError("Missing repository specification")

    if shutil.which("add-apt-repository") is None:
        logger.warning("add-apt-repository not found. Installing software-properties-common...")
        status = apt_get_do("install", "software-properties-common", settings=settings)
        if status != 0:
            logger.error("Failed to install software-properties-common")
            return status

    _require_online(settings)

    receipt = _run_locked(["add-apt-repository", "-y", repo_spec], settings)
    if receipt.failed:
        logger.error("Failed to add repository: %s", repo_spec)
        return receipt.return_code
    logger.info("Successfully added repository: %s", repo_spec)
    return 0


def check_package_manager_status() -> bool:
    """Whether apt/dpkg is idle (no process running, no lock file held)."""
    try:
        process_status.check_package_manager_status()
    except PackageManagerBusyError as e:
        logger.error("%s; package manager is busy, try again later", e)
        return False
    return True
