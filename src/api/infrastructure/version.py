"""Version management for the ShopPulse API.

Provides version information using importlib.metadata with fallback to pyproject.toml.
Installed packages report their metadata; a source checkout reads the
root pyproject.toml directly.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "shoppulse-api"

# src/api/infrastructure/version.py -> repository root
_PYPROJECT_PATH = Path(__file__).resolve().parents[3] / "pyproject.toml"


def get_version() -> str:
    """Get the application version.

    Tries to read from installed package metadata first (production/installed mode).
    Falls back to reading from pyproject.toml in development mode.

    Returns:
        Version string (e.g., "0.1.0")
    """
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with open(_PYPROJECT_PATH, "rb") as f:
            pyproject_data = tomllib.load(f)

        return pyproject_data["project"]["version"]


__version__ = get_version()
