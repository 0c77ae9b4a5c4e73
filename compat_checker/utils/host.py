"""Platform capability detection."""

from __future__ import annotations

import sys
from enum import Enum

WINDOWS_EXE_SUFFIX = ".exe"


class CheckerVariant(str, Enum):
    """Which checks a host is able to run."""

    FULL = "full"
    PROBE_ONLY = "probe-only"

    @property
    def scans_files(self) -> bool:
        return self is CheckerVariant.FULL


def is_windows(platform: str | None = None) -> bool:
    return (platform or sys.platform).startswith(("win32", "cygwin"))


def is_macos(platform: str | None = None) -> bool:
    return (platform or sys.platform) == "darwin"


def resolve_variant(platform: str | None = None) -> CheckerVariant:
    """The file scan only applies to Linux-like hosts; Windows and macOS run the probe alone."""

    if is_windows(platform) or is_macos(platform):
        return CheckerVariant.PROBE_ONLY
    return CheckerVariant.FULL


def executable_suffix(platform: str | None = None) -> str:
    return WINDOWS_EXE_SUFFIX if is_windows(platform) else ""
