"""Execution context handed to the checks by the job host."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Protocol

from .errors import CheckCancelled
from .telemetry import JobTelemetry

logger = logging.getLogger(__name__)


class CancellationToken:
    """Job-wide cancellation signal shared by every awaitable operation."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if not self._event.is_set():
            logger.debug("Cancellation requested")
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CheckCancelled("The operation was cancelled.")

    async def wait(self) -> None:
        await self._event.wait()


class ExecutionContext(Protocol):
    """What the checks need from the running job."""

    cancellation: CancellationToken
    telemetry: JobTelemetry

    def output(self, text: str) -> None:
        """Write an informational line to the job log."""

    def warning(self, text: str) -> None:
        """Surface a warning annotation to the job operator."""


@dataclass
class JobContext:
    """Standalone execution context that prints to the console and keeps annotations."""

    cancellation: CancellationToken = field(default_factory=CancellationToken)
    telemetry: JobTelemetry = field(default_factory=JobTelemetry)
    outputs: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    echo: bool = True

    def output(self, text: str) -> None:
        self.outputs.append(text)
        if self.echo:
            print(text)

    def warning(self, text: str) -> None:
        self.warnings.append(text)
        if self.echo:
            print(f"##[warning]{text}")
