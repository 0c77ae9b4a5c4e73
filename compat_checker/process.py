"""Launch external programs and stream their output line by line."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import suppress
from typing import Callable, Dict, Optional, Protocol, Sequence

from .context import CancellationToken
from .errors import CheckCancelled

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]


class ProcessInvoker(Protocol):
    """Run a program to completion, reporting each output line as it arrives."""

    async def execute(
        self,
        *,
        working_directory: str,
        file_name: str,
        arguments: Sequence[str],
        environment: Optional[Dict[str, str]],
        cancellation: CancellationToken,
        on_stdout: LineCallback,
        on_stderr: LineCallback,
    ) -> int:
        """Return the exit code, or raise ``CheckCancelled`` if the token fires first."""


class AsyncProcessInvoker:
    """``ProcessInvoker`` backed by ``asyncio`` subprocesses."""

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def execute(
        self,
        *,
        working_directory: str,
        file_name: str,
        arguments: Sequence[str],
        environment: Optional[Dict[str, str]],
        cancellation: CancellationToken,
        on_stdout: LineCallback,
        on_stderr: LineCallback,
    ) -> int:
        cancellation.raise_if_cancelled()
        argv = [file_name, *arguments]
        logger.debug("Starting process %s in %s", argv, working_directory)
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=working_directory,
            env=self._build_env(environment),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        readers = [
            asyncio.create_task(self._pump(process.stdout, on_stdout)),
            asyncio.create_task(self._pump(process.stderr, on_stderr)),
        ]
        exited = asyncio.create_task(process.wait())
        cancelled = asyncio.create_task(cancellation.wait())
        try:
            done, _ = await asyncio.wait({exited, cancelled}, return_when=asyncio.FIRST_COMPLETED)
            if exited not in done:
                logger.info("Cancellation requested, killing process %s (pid %s)", file_name, process.pid)
                await self._kill(process)
                await asyncio.gather(*readers, return_exceptions=True)
                raise CheckCancelled(f"Process '{file_name}' was cancelled.")
            await asyncio.gather(*readers)
        except asyncio.CancelledError:
            await self._kill(process)
            raise
        finally:
            cancelled.cancel()
            for reader in readers:
                reader.cancel()

        logger.debug("Process %s exited with code %s", file_name, process.returncode)
        return process.returncode

    async def _pump(self, stream: Optional[asyncio.StreamReader], callback: LineCallback) -> None:
        if stream is None:
            return
        while True:
            raw = await stream.readline()
            if not raw:
                return
            callback(raw.decode(self._encoding, errors="replace").rstrip("\r\n"))

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            with suppress(ProcessLookupError):
                process.kill()
        await process.wait()

    @staticmethod
    def _build_env(environment: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if environment is None:
            return None
        merged = dict(os.environ)
        merged.update(environment)
        return merged
