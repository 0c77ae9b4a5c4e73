"""Scan host files for patterns that mark an unsupported operating system."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import regex

from compat_checker.context import ExecutionContext
from compat_checker.errors import CheckCancelled
from compat_checker.rules import FIELD_DESCRIPTIONS, WarningRule
from compat_checker.utils import read_lines

from . import CheckOutcome

logger = logging.getLogger(__name__)

# Per-line budget for a single match attempt, in seconds.
MATCH_TIMEOUT = 0.1
MATCH_FLAGS = regex.IGNORECASE


class FilePatternScan:
    """Evaluate warning rules in order and stop at the first one that matches."""

    name = "file_patterns"

    def __init__(self, rules: Sequence[WarningRule], match_timeout: float = MATCH_TIMEOUT) -> None:
        self._rules = tuple(rules)
        self._match_timeout = match_timeout

    async def run(self, context: ExecutionContext) -> CheckOutcome:
        compatible = await scan_files(context, self._rules, match_timeout=self._match_timeout)
        return CheckOutcome(check=self.name, compatible=compatible, warned=not compatible)


async def scan_files(
    context: ExecutionContext,
    rules: Sequence[WarningRule],
    match_timeout: float = MATCH_TIMEOUT,
) -> bool:
    """Return ``False`` as soon as a rule matches, ``True`` if none does."""

    for rule in rules:
        missing = rule.missing_field()
        if missing is not None:
            logger.error("The %s is not specified in the OS warning check.", FIELD_DESCRIPTIONS[missing])
            continue

        try:
            if await _rule_matches(context, rule, match_timeout):
                context.warning(rule.message)
                context.telemetry.add(f"OS warning: {rule.message}")
                return False
        except CheckCancelled:
            raise
        except Exception as exc:
            logger.exception(
                "An error occurred while checking OS warnings for file '%s' and regex '%s'.",
                rule.file_path,
                rule.pattern,
            )
            context.telemetry.add(
                f"An error occurred while checking OS warnings for file '{rule.file_path}' "
                f"and regex '{rule.pattern}': {exc}"
            )

    return True


async def _rule_matches(context: ExecutionContext, rule: WarningRule, match_timeout: float) -> bool:
    path = Path(rule.file_path)
    if not path.is_file():
        logger.debug("Skipping OS warning check, '%s' does not exist", rule.file_path)
        return False

    lines = await read_lines(path, context.cancellation)
    compiled = regex.compile(rule.pattern, MATCH_FLAGS)
    for line in lines:
        if compiled.search(line, timeout=match_timeout) is not None:
            logger.info("OS warning pattern '%s' matched in '%s'", rule.pattern, rule.file_path)
            return True
    return False
