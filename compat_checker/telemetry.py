"""Job telemetry entries recorded by the checks."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Iterator, List


class TelemetryType(str, Enum):
    """Enumerate the telemetry categories a job can carry."""

    GENERAL = "General"


@dataclass(frozen=True)
class TelemetryEntry:
    type: TelemetryType
    message: str

    def to_dict(self) -> Dict[str, str]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass
class JobTelemetry:
    """Append-only telemetry collection owned by the job."""

    entries: List[TelemetryEntry] = field(default_factory=list)

    def add(self, message: str, type: TelemetryType = TelemetryType.GENERAL) -> TelemetryEntry:
        entry = TelemetryEntry(type=type, message=message)
        self.entries.append(entry)
        return entry

    def __iter__(self) -> Iterator[TelemetryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_list(self) -> List[Dict[str, str]]:
        return [entry.to_dict() for entry in self.entries]
