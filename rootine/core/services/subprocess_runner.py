"""
Core subprocess runner.

The single place where ``subprocess.run`` is called for library
functions and command scripts. Logging and error capture are
centralised here; callers get a ``Receipt`` and never an exception.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time

from rootine.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# Output kept in receipts is truncated to the tail
_OUTPUT_TAIL = 4000


def run_command(
    cmd: list[str],
    *,
    timeout: float | None = 300,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
    capture: bool = True,
    input_text: str | None = None,
) -> Receipt:
    """Run a command and describe the outcome.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before ``TimeoutExpired``; None waits forever.
        env_overrides: Extra environment variables.
        cwd: Working directory for the command.
        capture: Capture stdout/stderr. When False the command writes
            straight to the terminal (long-running installers).
        input_text: Text fed to stdin.

    Returns:
        A success receipt on exit code 0, a failure receipt otherwise.
    """
    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd or ".")
    start = time.monotonic()

    try:
        result = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            timeout=timeout,
            input=input_text,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        logger.error("Command timed out after %ss: %s", timeout, cmd[0])
        return Receipt.failure(
            command=cmd,
            error=f"Command timed out ({timeout}s)",
            return_code=124,
            metadata={"timeout": timeout},
        )
    except FileNotFoundError:
        logger.error("Command not found: %s", cmd[0])
        return Receipt.failure(command=cmd, error=f"Command not found: {cmd[0]}", return_code=127)
    except OSError as e:
        logger.error("Cannot execute %s: %s", cmd[0], e)
        return Receipt.failure(command=cmd, error=str(e), return_code=126)

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = (result.stdout or "")[-_OUTPUT_TAIL:]
    stderr = (result.stderr or "")[-_OUTPUT_TAIL:]

    if result.returncode == 0:
        return Receipt.success(command=cmd, stdout=stdout, stderr=stderr, duration_ms=elapsed_ms)

    logger.debug("Command exited with %d: %s", result.returncode, " ".join(cmd))
    return Receipt.failure(
        command=cmd,
        error=f"Command failed (exit {result.returncode})",
        return_code=result.returncode,
        stdout=stdout,
        stderr=stderr,
        duration_ms=elapsed_ms,
    )
