#!/usr/bin/env python3
"""Check for updates to the integration's pinned requirements.

Compares the minimum versions in manifest.json with the latest release on
PyPI. Needs the ``packaging`` library (installed with Home Assistant).
"""

import json
import re
import sys
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from packaging.requirements import Requirement
from packaging.version import Version

MANIFEST_PATH = Path(__file__).parent.parent / "custom_components" / "lgwebos_tv" / "manifest.json"

CHANGELOGS = {
    "wakeonlan": "https://github.com/remcohaszing/pywakeonlan/releases",
}


def get_latest_pypi_version(package: str) -> Version | None:
    """Get the latest version from PyPI."""
    try:
        with urlopen(f"https://pypi.org/pypi/{package}/json", timeout=10) as response:
            data = json.loads(response.read())
    except (URLError, OSError, ValueError) as ex:
        print(f"  Warning: Could not fetch PyPI version for {package}: {ex}")
        return None
    latest = data.get("info", {}).get("version")
    return Version(latest) if latest else None


def minimum_version(requirement: Requirement) -> Version | None:
    """Lower bound of a requirement such as wakeonlan>=3.0.0."""
    for specifier in requirement.specifier:
        if specifier.operator in (">=", "==", "~="):
            return Version(re.sub(r"\.\*$", "", specifier.version))
    return None


def check_dependencies() -> int:
    """Return 0 if every requirement is current, 1 if updates are available."""
    manifest = json.loads(MANIFEST_PATH.read_text())
    updates_available = False

    print("Checking for dependency updates...\n")
    for raw in manifest.get("requirements", []):
        requirement = Requirement(raw)
        current = minimum_version(requirement)
        latest = get_latest_pypi_version(requirement.name)
        print(f"{requirement.name}: pinned {current or 'unbounded'}, latest {latest or 'unknown'}")

        if current and latest and latest > current:
            print(f"  ⚠️  UPDATE AVAILABLE: {current} -> {latest}")
            if requirement.name in CHANGELOGS:
                print(f"     Changelog: {CHANGELOGS[requirement.name]}")
            updates_available = True
        elif latest:
            print("  ✓ Up to date")

    if updates_available:
        print("\nReview the changelogs, test the integration, then update manifest.json and pyproject.toml.")
        return 1
    print("\n✓ All dependencies are up to date!")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(check_dependencies())
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
