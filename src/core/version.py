"""Version lookup for ``native-feed-sync --version``."""

import logging
import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "native-feed-sync"
UNKNOWN_VERSION = "0.0.0"
PYPROJECT_PATH = Path(__file__).resolve().parents[2] / "pyproject.toml"


def version_from_pyproject(path: Path = PYPROJECT_PATH) -> str | None:
    """Read ``[project].version`` from a pyproject file, if present."""
    try:
        with path.open("rb") as f:
            return tomllib.load(f).get("project", {}).get("version")
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug(f"No version in {path}: {e}")
        return None


def get_version() -> str:
    """Return the installed distribution version.

    Source checkouts that were never installed fall back to pyproject.toml,
    then to ``0.0.0``.
    """
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return version_from_pyproject() or UNKNOWN_VERSION
