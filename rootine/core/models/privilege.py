"""
Privilege level — the caller's effective identity class.

The enum value doubles as the name of the library namespace and the
command directory that belong to the level.
"""

from __future__ import annotations

from enum import StrEnum

COMMON_NAMESPACE = "common"


class PrivilegeLevel(StrEnum):
    """Effective privilege of the running process."""

    ELEVATED = "root"
    STANDARD = "user"

    @property
    def namespace(self) -> str:
        """Library namespace owned by this level."""
        return self.value

    def may_access(self, namespace: str) -> bool:
        """Whether this level may call into ``namespace``.

        Two-tier model: every level reaches ``common`` and its own
        namespace, never another level's.
        """
        return namespace in (COMMON_NAMESPACE, self.namespace)


def all_namespaces() -> tuple[str, ...]:
    """Every known namespace, common first."""
    return (COMMON_NAMESPACE, *(level.namespace for level in PrivilegeLevel))
