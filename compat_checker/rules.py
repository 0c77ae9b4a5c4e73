"""Warning rules describing known-incompatible host conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

RULE_FIELDS = ("file_path", "pattern", "message")

FIELD_DESCRIPTIONS = {
    "file_path": "file path",
    "pattern": "regular expression",
    "message": "warning message",
}


@dataclass(frozen=True)
class WarningRule:
    """A file, a pattern to look for in it, and the warning to show on a match."""

    file_path: str = ""
    pattern: str = ""
    message: str = ""

    def missing_field(self) -> Optional[str]:
        """Return the first empty field name, or ``None`` when the rule is complete."""

        for name in RULE_FIELDS:
            if not getattr(self, name):
                return name
        return None

    @property
    def is_valid(self) -> bool:
        return self.missing_field() is None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "WarningRule":
        values = {}
        for name in RULE_FIELDS:
            value = data.get(name)
            values[name] = "" if value is None else str(value)
        return cls(**values)
