"""Host compatibility checker run before a job starts."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("compat-checker")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"

__all__ = ["__version__"]
