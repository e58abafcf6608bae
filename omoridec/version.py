"""Version resolution for package metadata."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("omoridec")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = ["__version__"]
