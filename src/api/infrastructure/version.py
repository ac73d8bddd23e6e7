"""Version of the Pillar API.

Installed distributions report their metadata version; a source checkout
reads it from the repository's pyproject.toml.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "pillar-api"

# src/api/infrastructure/version.py -> repository root
_PYPROJECT = Path(__file__).resolve().parents[3] / "pyproject.toml"


def get_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with _PYPROJECT.open("rb") as f:
            return tomllib.load(f)["project"]["version"]


__version__ = get_version()
