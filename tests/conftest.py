import asyncio
from pathlib import Path
from typing import List, Optional

import pytest

from compat_checker.config import ProbeSettings
from compat_checker.context import JobContext
from compat_checker.errors import CheckCancelled

GREETING = "Hello from .NET 8!"


class FakeInvoker:
    """Stand-in for the process launcher that replays canned output."""

    def __init__(
        self,
        exit_code: int = 0,
        stdout: Optional[List[str]] = None,
        stderr: Optional[List[str]] = None,
        error: Optional[BaseException] = None,
        block: bool = False,
    ) -> None:
        self.exit_code = exit_code
        self.stdout = [GREETING] if stdout is None else stdout
        self.stderr = stderr or []
        self.error = error
        self.block = block
        self.calls = []

    async def execute(self, *, working_directory, file_name, arguments, environment, cancellation, on_stdout, on_stderr):
        self.calls.append(
            {
                "working_directory": working_directory,
                "file_name": file_name,
                "arguments": tuple(arguments),
                "environment": environment,
            }
        )
        if self.error is not None:
            raise self.error
        if self.block:
            await cancellation.wait()
            raise CheckCancelled("cancelled")
        for line in self.stdout:
            on_stdout(line)
        for line in self.stderr:
            on_stderr(line)
        return self.exit_code


def make_probe_settings(tmp_path: Path, create: bool = True) -> ProbeSettings:
    settings = ProbeSettings(bin_dir=str(tmp_path / "bin"), root_dir=str(tmp_path))
    if create:
        probe_dir = tmp_path / "bin" / settings.directory
        probe_dir.mkdir(parents=True, exist_ok=True)
        (probe_dir / settings.name).write_text("", encoding="utf-8")
    return settings


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def context():
    return JobContext(echo=False)


@pytest.fixture
def probe_settings(tmp_path):
    return make_probe_settings(tmp_path)
