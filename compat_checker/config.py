"""Checker configuration loaded from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .errors import ConfigError
from .rules import WarningRule
from .utils.fileio import read_yaml_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "compat-checker.yaml"
DEFAULT_BIN_DIR = "bin"
DEFAULT_ROOT_DIR = "."
PROBE_DIRECTORY = "testDotNet8Compatibility"
PROBE_NAME = "TestDotNet8Compatibility"
EXPECTED_OUTPUT = "Hello from .NET 8!"
RUNTIME_NAME = ".NET 8"

PROBE_KEYS = {"directory", "name", "expected_output", "runtime_name", "bin_dir", "root_dir"}


@dataclass(frozen=True)
class ProbeSettings:
    """Where the probe lives and what it must print."""

    bin_dir: str = DEFAULT_BIN_DIR
    root_dir: str = DEFAULT_ROOT_DIR
    directory: str = PROBE_DIRECTORY
    name: str = PROBE_NAME
    expected_output: str = EXPECTED_OUTPUT
    runtime_name: str = RUNTIME_NAME

    def with_dirs(self, bin_dir: str | None = None, root_dir: str | None = None) -> "ProbeSettings":
        return replace(
            self,
            bin_dir=bin_dir if bin_dir is not None else self.bin_dir,
            root_dir=root_dir if root_dir is not None else self.root_dir,
        )


@dataclass
class CheckerConfig:
    rules: List[WarningRule] = field(default_factory=list)
    probe: ProbeSettings = field(default_factory=ProbeSettings)


def load_config(path: Path) -> CheckerConfig:
    """Load rules and probe settings; a missing file yields the defaults."""

    try:
        data = read_yaml_file(path)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read configuration {path}: {exc}") from exc

    if data is None:
        logger.debug("No configuration at %s, using defaults", path)
        return CheckerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration at {path} is not a mapping")

    return CheckerConfig(
        rules=_parse_rules(data.get("warnings"), path),
        probe=_parse_probe(data.get("probe"), path),
    )


def _parse_rules(raw: Any, path: Path) -> List[WarningRule]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"'warnings' in {path} must be a list")
    rules = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigError(f"'warnings[{index}]' in {path} must be a mapping")
        rules.append(WarningRule.from_mapping(item))
    return rules


def _parse_probe(raw: Any, path: Path) -> ProbeSettings:
    if raw is None:
        return ProbeSettings()
    if not isinstance(raw, dict):
        raise ConfigError(f"'probe' in {path} must be a mapping")
    unknown = set(raw) - PROBE_KEYS
    if unknown:
        raise ConfigError(f"Unknown probe settings in {path}: {', '.join(sorted(unknown))}")
    values: Dict[str, str] = {key: str(value) for key, value in raw.items() if value is not None}
    return ProbeSettings(**values)
