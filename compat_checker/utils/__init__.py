"""Utility helpers for the checker."""

from .fileio import read_yaml_file, read_lines
from .host import CheckerVariant, executable_suffix, resolve_variant

__all__ = [
    "read_yaml_file",
    "read_lines",
    "CheckerVariant",
    "executable_suffix",
    "resolve_variant",
]
