"""Version information for google-workspace-server."""

from importlib.metadata import PackageNotFoundError, version


def _get_version() -> str:
    """Get version from installed package metadata or fallback to hardcoded."""
    try:
        return version("google-workspace-server")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _get_version()
