"""
Git helpers for the Standard level.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from rootine.core.errors import UsageError
from rootine.core.services.subprocess_runner import run_command

logger = logging.getLogger(__name__)

__all__ = ["git_clone"]

_REPOSITORY_URL = re.compile(r"^(https?|git|ssh)://")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")


def derive_destination(url: str) -> str:
    """Directory name git would pick: last path segment, ``.git`` stripped."""
    name = url.rstrip("/")
    if name.endswith(".git"):
        name = name[:-4]
    name = name.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[0] if "." in name else name


def _clone_options(options: Sequence[str]) -> list[str]:
    flags: list[str] = []
    recurse = True
    tokens = list(options)
    index = 0

    while index < len(tokens):
        token = tokens[index]
        if token in ("--bare", "--single-branch"):
            flags.append(token)
        elif token == "--depth":
            value = tokens[index + 1] if index + 1 < len(tokens) else ""
            if not _POSITIVE_INT.match(value):
                raise UsageError("Depth must be a positive integer")
            flags += ["--depth", value]
            index += 1
        elif token == "--branch":
            if index + 1 >= len(tokens) or not tokens[index + 1]:
                raise UsageError("--branch requires a value")
            flags += ["--branch", tokens[index + 1]]
            index += 1
        elif token == "--recurse-submodules":
            if index + 1 < len(tokens) and tokens[index + 1] in ("true", "false"):
                recurse = tokens[index + 1] == "true"
                index += 1
        else:
            raise UsageError(f"Invalid argument '{token}'")
        index += 1

    if recurse:
        flags.append("--recurse-submodules")
    return flags


def git_clone(url: str, destination: str = "", *options: str) -> bool:
    """Clone ``url`` into ``destination``.

    ``destination`` defaults to the repository name. An existing,
    non-empty destination is refused. Accepted options: ``--bare``,
    ``--depth N``, ``--branch NAME``, ``--single-branch`` and
    ``--recurse-submodules true|false`` (on by default).

    Raises:
        UsageError: Malformed URL or option.
    """
    if not _REPOSITORY_URL.match(url):
        raise UsageError(f"Invalid repository URL format: {url}")

    if destination.startswith("--"):
        options = (destination, *options)
        destination = ""
    flags = _clone_options(options)

    if not destination:
        destination = derive_destination(url)
        if not destination:
            logger.error("Cannot determine destination directory")
            return False

    target = Path(destination)
    if target.is_dir() and any(target.iterdir()):
        logger.error("Destination directory exists and is not empty: %s", destination)
        return False

    receipt = run_command(["git", "clone", *flags, url, destination], timeout=None, capture=False)
    if receipt.failed:
        logger.error("Clone failed for repository: %s", url)
        return False

    logger.info("Successfully cloned %s to %s", url, destination)
    return True
