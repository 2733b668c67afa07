"""
Receipt model — the outcome of one shell-out.

Shell-outs never raise. Failures are captured in the receipt so the
calling command can map them onto an exit status.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of running an external command."""

    command: list[str] = Field(default_factory=list)
    status: Literal["ok", "failed"] = "ok"
    return_code: int | None = None

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def exit_status(self) -> int:
        """Exit status to propagate (1 when the command never ran)."""
        if self.return_code is not None:
            return self.return_code
        return 0 if self.ok else 1

    @classmethod
    def success(cls, command: list[str], stdout: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(command=command, status="ok", return_code=0, stdout=stdout, **kwargs)

    @classmethod
    def failure(cls, command: list[str], error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(command=command, status="failed", error=error, **kwargs)
