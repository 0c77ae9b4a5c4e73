"""Basic file IO helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, List

import yaml

from compat_checker.context import CancellationToken

# Size hint, in characters, for each blocking read handed to a worker thread.
READ_CHUNK_SIZE = 64 * 1024


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


async def read_lines(path: Path, cancellation: CancellationToken) -> List[str]:
    """Read ``path`` as text lines, stopping with ``CheckCancelled`` if the job is cancelled.

    Undecodable bytes become U+FFFD so the remaining lines can still be matched.
    """

    lines: List[str] = []
    cancellation.raise_if_cancelled()
    with path.open("r", encoding="utf-8-sig", errors="replace") as handle:
        while True:
            chunk = await asyncio.to_thread(handle.readlines, READ_CHUNK_SIZE)
            if not chunk:
                return lines
            for line in chunk:
                cancellation.raise_if_cancelled()
                lines.append(line.rstrip("\r\n"))
