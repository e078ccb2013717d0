"""Repository discovery - solutions, projects and packages.

Repository conventions:
- One solution file (*.sln) at the repository root
- Deployable projects under src/, test projects under test/
- Packed NuGet packages (*.nupkg) somewhere under src/
"""

from __future__ import annotations

import logging
import os

from ..errors import DiscoveryError

logger = logging.getLogger(__name__)

NUGET_CONFIG_NAMES: tuple[str, ...] = ("nuget.config", "NuGet.config", "NuGet.Config")


def get_solution_name(root: str) -> str:
    """Return the name of the solution in root, or "" if there is none.

    The first *.sln file by name wins.
    """
    try:
        names = sorted(os.listdir(root))
    except OSError as e:
        logger.warning(f"Cannot list {root}: {e}")
        return ""

    for name in names:
        if name.endswith(".sln") and os.path.isfile(os.path.join(root, name)):
            return name[: -len(".sln")]
    return ""


def find_publish_project(root: str, solution_name: str) -> str:
    """Find the default project to publish.

    For a solution called Acme.FooApi this is src/Acme.FooApi.WebService,
    falling back to src/Acme.FooApi.

    Returns:
        Project path relative to root

    Raises:
        DiscoveryError: If neither candidate exists
    """
    if solution_name:
        for candidate in (f"src/{solution_name}.WebService", f"src/{solution_name}"):
            if os.path.exists(os.path.join(root, candidate)):
                return candidate

    raise DiscoveryError(
        "The project to be published can not be found. "
        "Please specify it with the 'project' label."
    )


def find_test_projects(root: str, suffix: str = "") -> list[str]:
    """List test project directories under root/test ending with suffix.

    A missing test directory yields an empty list.

    Returns:
        Relative project paths like ./test/Acme.UnitTests, sorted by name

    Raises:
        DiscoveryError: If the test directory exists but cannot be read
    """
    test_dir = os.path.join(root, "test")
    try:
        entries = sorted(os.scandir(test_dir), key=lambda e: e.name)
    except FileNotFoundError:
        return []
    except OSError as e:
        raise DiscoveryError(f"Failed to read subdirectories under ./test: {e}") from e

    return [
        f"./test/{entry.name}"
        for entry in entries
        if entry.is_dir() and entry.name.endswith(suffix)
    ]


def find_packages(root: str, directory: str = "src") -> list[str]:
    """Find all *.nupkg files under root/directory.

    Returns:
        Absolute package paths in walk order (directories sorted by name)
    """
    packages: list[str] = []
    for dirpath, dirnames, filenames in os.walk(os.path.join(root, directory)):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith(".nupkg"):
                packages.append(os.path.join(dirpath, filename))
    return packages


def remove_nuget_config(root: str) -> list[str]:
    """Delete NuGet.config files committed to the repository root.

    Returns:
        Paths that were removed

    Raises:
        DiscoveryError: If the repository root cannot be read
    """
    try:
        names = os.listdir(root)
    except OSError as e:
        raise DiscoveryError(f"Cannot list {root}: {e}") from e

    removed: list[str] = []
    for name in names:
        if name in NUGET_CONFIG_NAMES:
            path = os.path.join(root, name)
            if os.path.isfile(path):
                logger.warning("NuGet.config was found in the repository, deleting it.")
                logger.warning(
                    "The NuGet.config should be deleted from the repository, to make "
                    "sure that only the common default sources are used."
                )
                os.remove(path)
                removed.append(path)
    return removed
