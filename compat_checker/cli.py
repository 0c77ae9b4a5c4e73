"""Command-line entry point for the host compatibility checker."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Sequence

from .checker import CheckReport, CompatibilityChecker
from .config import DEFAULT_CONFIG, load_config
from .context import JobContext
from .errors import ConfigError
from .rules import WarningRule
from .report import format_summary, to_dict
from .utils import CheckerVariant

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check that this host can run jobs before they start",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help="YAML file with OS warning rules and probe settings.",
    )
    parser.add_argument(
        "--bin-dir",
        default=None,
        help="Directory holding the runtime probe (overrides the config file).",
    )
    parser.add_argument(
        "--root-dir",
        default=None,
        help="Working directory for the runtime probe (overrides the config file).",
    )
    parser.add_argument(
        "--variant",
        choices=["auto", CheckerVariant.FULL.value, CheckerVariant.PROBE_ONLY.value],
        default="auto",
        help="Which checks to run; 'auto' picks based on the host platform.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Cancel the checks after this many seconds.",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the JSON report (e.g., artifacts/compat.json).",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors.")
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


async def run_checks(
    checker: CompatibilityChecker,
    context: JobContext,
    rules: Sequence[WarningRule],
    timeout: float | None = None,
) -> CheckReport:
    if timeout is not None:
        asyncio.get_running_loop().call_later(timeout, context.cancellation.cancel)
    return await checker.check(context, rules)


def write_output(report: CheckReport, context: JobContext, output_path: str | None) -> None:
    print(format_summary(report, context))

    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(json.dumps(to_dict(report, context), indent=2), encoding="utf-8")
        print(f"\nReport written to {output_path}")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    variant = None if args.variant == "auto" else CheckerVariant(args.variant)
    checker = CompatibilityChecker(
        probe_settings=config.probe.with_dirs(bin_dir=args.bin_dir, root_dir=args.root_dir),
        variant=variant,
    )
    context = JobContext()
    report = asyncio.run(run_checks(checker, context, config.rules, timeout=args.timeout))
    write_output(report, context, args.output_path)
    # Advisory only: warnings never fail the job.
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
