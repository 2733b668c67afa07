"""
Settings — framework-wide configuration.

Constructed once at startup and passed explicitly into the loader,
binder and router. Frozen: nothing mutates it after construction.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from rootine import __version__


def _default_namespaces() -> dict[str, list[str]]:
    # Load order within each namespace; the first module defining a
    # function name wins.
    return {
        "common": ["functions", "network"],
        "root": ["apt_get", "snap"],
        "user": ["git"],
    }


class Settings(BaseModel):
    """Framework configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = __version__
    installed: bool = False         # IS_ROOTINE_INSTALLED, cosmetic only

    # ── Namespaces and commands ─────────────────────────────────
    library_package: str = "rootine.library"
    commands_package: str = "rootine.commands"
    namespaces: dict[str, list[str]] = Field(default_factory=_default_namespaces)

    # ── Package-manager lock ────────────────────────────────────
    lock_file: str = "/var/lib/dpkg/lock-frontend"
    lock_timeout: float = Field(default=60.0, gt=0)
    lock_poll_interval: float = Field(default=0.1, gt=0)
    check_conflicts: bool = True

    # ── Connectivity ────────────────────────────────────────────
    ping_host: str = "8.8.8.8"
    ping_retries: int = Field(default=3, ge=1)
    ping_timeout: int = Field(default=5, ge=1)
    ping_interval: float = Field(default=1.0, ge=0)

    # ── apt-get ─────────────────────────────────────────────────
    apt_update_retries: int = Field(default=3, ge=1)
    apt_command_timeout: int = Field(default=300, ge=1)
    apt_quiet: bool = False

    # ── snap ────────────────────────────────────────────────────
    snap_store: str = "snap-store"
    snap_refresh_retries: int = Field(default=3, ge=1)
    snap_refresh_delay: float = Field(default=5.0, ge=0)

    # ── Host requirements ───────────────────────────────────────
    min_disk_space_mb: int = Field(default=10240, ge=0)
    disk_space_paths: list[str] = Field(default_factory=lambda: ["/usr", "/var"])

    # ── Logging ─────────────────────────────────────────────────
    log_level: str = "WARNING"
    log_file: str | None = None

    @property
    def program_name(self) -> str:
        """Name shown in usage text."""
        return "rootine" if self.installed else "./rootine"

    def namespace_modules(self, namespace: str) -> list[str]:
        """Dotted module paths of a namespace, in load order."""
        return [
            f"{self.library_package}.{namespace}.{module}"
            for module in self.namespaces.get(namespace, [])
        ]
