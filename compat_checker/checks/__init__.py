"""Compatibility checks run before a job starts."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict


@dataclass
class CheckOutcome:
    """Result of a single check run."""

    check: str
    compatible: bool = True
    warned: bool = False
    error: str | None = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
