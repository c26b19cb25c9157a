"""Versions of the libraries chunkio runs on, as shown by ``chunkio --version``."""

import platform
from dataclasses import dataclass, fields
from importlib.metadata import PackageNotFoundError, version
from typing import Optional

# Distribution name on the package index -> DependencyVersions field.
_DISTRIBUTIONS = {
    "typing_extensions": "typing_extensions_version",
    "backports.strenum": "backports_strenum_version",
    "tqdm": "tqdm_version",
}


@dataclass
class DependencyVersions:
    """Versions of the dependencies used by chunkio; None when not installed."""

    python_version: Optional[str] = None
    typing_extensions_version: Optional[str] = None
    backports_strenum_version: Optional[str] = None
    tqdm_version: Optional[str] = None


def _installed_version(distribution: str) -> Optional[str]:
    try:
        return version(distribution)
    except PackageNotFoundError:
        return None


def get_dependency_versions() -> DependencyVersions:
    return DependencyVersions(
        python_version=platform.python_version(),
        **{field: _installed_version(name) for name, field in _DISTRIBUTIONS.items()},
    )


def format_dependency_versions(versions: DependencyVersions) -> str:
    """Format dependency versions as an aligned, human-readable block.

    Args:
        versions: The DependencyVersions object to format.

    Returns:
        str: One line per dependency, under a "Dependency Versions:" header.
    """
    names = [f.name for f in fields(versions)]
    width = max(len(name) for name in names)
    lines = ["Dependency Versions:"]
    for name in names:
        value = getattr(versions, name)
        lines.append(f"  {name:<{width}}  {value if value is not None else 'not installed'}")
    return "\n".join(lines)
