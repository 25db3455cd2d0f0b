"""
Version information for the Starknet RPC SDK.

An installed distribution reports its own version. A source checkout that was
never installed reads it from the pyproject.toml next to the package.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION_NAME = "starknet-rpc-sdk"
FALLBACK_VERSION = "0.1.0"

PYPROJECT_PATH = pathlib.Path(__file__).resolve().parent.parent / "pyproject.toml"


def _version_from_pyproject(path: pathlib.Path) -> str:
    with path.open("rb") as f:
        project = tomli.load(f).get("project", {})
    return project["version"]


def get_version() -> str:
    """
    Resolve the SDK version

    Returns:
        Installed version, else the pyproject.toml version, else FALLBACK_VERSION
    """
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        pass

    try:
        return _version_from_pyproject(PYPROJECT_PATH)
    except (OSError, KeyError, tomli.TOMLDecodeError):
        return FALLBACK_VERSION


__version__ = get_version()
