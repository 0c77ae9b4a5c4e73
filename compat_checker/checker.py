"""Run the host compatibility checks for a job."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Sequence

from .checks import CheckOutcome
from .checks.file_patterns import FilePatternScan
from .checks.runtime_probe import RuntimeProbe
from .config import ProbeSettings
from .context import ExecutionContext
from .errors import CheckCancelled
from .process import AsyncProcessInvoker, ProcessInvoker
from .rules import WarningRule
from .utils import CheckerVariant, resolve_variant

logger = logging.getLogger(__name__)

START_MESSAGE = "Testing runner upgrade compatibility"


@dataclass
class CheckReport:
    """Outcome of one checker invocation."""

    variant: CheckerVariant
    file_scan: CheckOutcome | None = None
    probe: CheckOutcome | None = None
    cancelled: bool = False

    @property
    def compatible(self) -> bool | None:
        """``False`` on any failed check, ``None`` when a check errored without failing."""

        outcomes = [outcome for outcome in (self.file_scan, self.probe) if outcome is not None]
        if not all(outcome.compatible for outcome in outcomes):
            return False
        if any(outcome.error for outcome in outcomes):
            return None
        return True

    def to_dict(self) -> Dict[str, object]:
        return {
            "compatible": self.compatible,
            "variant": self.variant.value,
            "cancelled": self.cancelled,
            "file_scan": self.file_scan.to_dict() if self.file_scan else None,
            "probe": self.probe.to_dict() if self.probe else None,
        }


class CompatibilityChecker:
    """Scan host files (where applicable), then run the runtime probe.

    At most one compatibility warning reaches the operator: when the file scan
    has already warned, the probe still runs and records telemetry but its
    annotation is withheld.
    """

    def __init__(
        self,
        probe_settings: ProbeSettings | None = None,
        invoker: ProcessInvoker | None = None,
        variant: CheckerVariant | None = None,
        platform: str | None = None,
    ) -> None:
        self.variant = variant or resolve_variant(platform)
        self._probe = RuntimeProbe(probe_settings or ProbeSettings(), invoker or AsyncProcessInvoker(), platform)

    async def check(self, context: ExecutionContext, rules: Sequence[WarningRule]) -> CheckReport:
        if context is None:
            raise ValueError("context must not be None")
        if rules is None:
            raise ValueError("rules must not be None")

        context.output(START_MESSAGE)
        report = CheckReport(variant=self.variant)
        try:
            compatible = True
            if self.variant.scans_files:
                report.file_scan = await FilePatternScan(rules).run(context)
                compatible = report.file_scan.compatible
            else:
                logger.debug("Skipping OS file checks on this platform")

            report.probe = await self._probe.run(context, omit_annotation=not compatible)
        except CheckCancelled:
            logger.info("Compatibility check cancelled")
            context.output("Compatibility check was cancelled.")
            report.cancelled = True
        return report
