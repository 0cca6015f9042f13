"""Room reconciler version.

Installed distributions report their metadata version. Source checkouts that
were never installed read it from the repository's pyproject.toml.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "room-reconciler"

# src/api/infrastructure/version.py -> repository root
PYPROJECT_PATH = Path(__file__).resolve().parents[3] / "pyproject.toml"


def get_version() -> str:
    """Return the reconciler version string (e.g. "0.1.0")."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with PYPROJECT_PATH.open("rb") as f:
            return tomllib.load(f)["project"]["version"]


__version__ = get_version()
