"""
Exit status vocabulary.

Follows the BSD ``sysexits`` convention for 64-78 and extends it with
package, network and runtime ranges. Command scripts return values
from this table so the router can propagate them unchanged.
"""

from __future__ import annotations

from enum import IntEnum


class ExitStatus(IntEnum):
    """Process exit statuses."""

    SUCCESS = 0
    FAILURE = 1
    BUILTIN_ERROR = 2

    # ── sysexits ────────────────────────────────────────────────
    USAGE = 64
    DATAERR = 65
    NOINPUT = 66
    NOUSER = 67
    NOHOST = 68
    UNAVAILABLE = 69
    SOFTWARE = 70
    OSERR = 71
    OSFILE = 72
    CANTCREAT = 73
    IOERR = 74
    TEMPFAIL = 75
    PROTOCOL = 76
    NOPERM = 77
    CONFIG = 78

    # ── Packages ────────────────────────────────────────────────
    PACKAGE_ERROR = 80
    DEPENDENCY_ERROR = 81
    DISK_SPACE = 82
    PACKAGE_CONFLICT = 83
    PACKAGE_CORRUPT = 84

    # ── Network ─────────────────────────────────────────────────
    NETWORK_ERROR = 90
    NETWORK_TIMEOUT = 91
    NETWORK_UNREACHABLE = 92
    SSL_ERROR = 93
    DNS_ERROR = 94

    # ── Runtime / signals ───────────────────────────────────────
    RUNTIME_ERROR = 100
    TIMEOUT = 124
    NOT_EXECUTABLE = 126
    COMMAND_NOT_FOUND = 127
    INVALID_EXIT = 128
    TERMINATED = 130
