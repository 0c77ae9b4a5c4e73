"""Confirm the managed runtime can execute a trivial program on this host."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from compat_checker.config import ProbeSettings
from compat_checker.context import ExecutionContext
from compat_checker.errors import CheckCancelled, ProbeNotFoundError
from compat_checker.process import ProcessInvoker
from compat_checker.utils import executable_suffix

from . import CheckOutcome

logger = logging.getLogger(__name__)

MAX_TELEMETRY_OUTPUT = 200
TRUNCATION_MARKER = "[...]"


@dataclass
class ProbeResult:
    """Exit code and combined output lines of one probe run."""

    exit_code: int
    lines: List[str] = field(default_factory=list)

    @property
    def output(self) -> str:
        return "\n".join(self.lines).strip()

    def succeeded(self, expected_output: str) -> bool:
        return self.exit_code == 0 and self.output == expected_output


def truncate_output(text: str, limit: int = MAX_TELEMETRY_OUTPUT) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with ``[...]``."""

    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


class _OutputBuffer:
    """Single ordered buffer fed from both output streams."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: List[str] = []

    def on_stdout(self, line: str) -> None:
        if not line:
            return
        with self._lock:
            self._lines.append(line)
            logger.info(line)

    def on_stderr(self, line: str) -> None:
        if not line:
            return
        with self._lock:
            self._lines.append(line)
            logger.error(line)

    def snapshot(self) -> List[str]:
        with self._lock:
            return list(self._lines)


class RuntimeProbe:
    """Run the pre-built probe executable and compare what it prints to the expected greeting."""

    name = "runtime_probe"

    def __init__(self, settings: ProbeSettings, invoker: ProcessInvoker, platform: str | None = None) -> None:
        self._settings = settings
        self._invoker = invoker
        self._platform = platform

    def probe_path(self) -> Path:
        settings = self._settings
        file_name = f"{settings.name}{executable_suffix(self._platform)}"
        return Path(settings.bin_dir) / settings.directory / file_name

    async def execute(self, context: ExecutionContext) -> ProbeResult:
        path = self.probe_path()
        if not path.is_file():
            raise ProbeNotFoundError(f"Probe executable '{path}' was not found.")

        buffer = _OutputBuffer()
        exit_code = await self._invoker.execute(
            working_directory=str(self._settings.root_dir),
            file_name=str(path),
            arguments=(),
            environment=None,
            cancellation=context.cancellation,
            on_stdout=buffer.on_stdout,
            on_stderr=buffer.on_stderr,
        )
        return ProbeResult(exit_code=exit_code, lines=buffer.snapshot())

    async def run(self, context: ExecutionContext, omit_annotation: bool = False) -> CheckOutcome:
        runtime = self._settings.runtime_name
        outcome = CheckOutcome(check=self.name)
        try:
            result = await self.execute(context)
            if not result.succeeded(self._settings.expected_output):
                outcome.compatible = False
                if not omit_annotation:
                    context.warning(f"The runner is not compatible with {runtime}.")
                    outcome.warned = True
                context.telemetry.add(
                    f"{runtime} OS compatibility test failed with exit code '{result.exit_code}' "
                    f"and output: {truncate_output(result.output)}"
                )
        except CheckCancelled:
            raise
        except Exception as exc:
            logger.exception("An error occurred while testing %s compatibility", runtime)
            error_type = f"{type(exc).__module__}.{type(exc).__qualname__}"
            outcome.error = str(exc)
            context.telemetry.add(
                f"An error occurred while testing {runtime} compatibility; "
                f"exception type '{error_type}'; message: {exc}"
            )
        return outcome
