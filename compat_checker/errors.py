"""Exceptions raised by the compatibility checker."""

from __future__ import annotations


class CompatCheckError(Exception):
    """Base class for checker errors."""


class ConfigError(CompatCheckError):
    """The checker configuration file could not be used."""


class CheckCancelled(CompatCheckError):
    """The job cancellation token fired while a check was running."""


class ProbeNotFoundError(CompatCheckError, FileNotFoundError):
    """The runtime probe executable is not present on disk."""
