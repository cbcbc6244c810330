"""Overlay / framework resource exclusion shared by both scoring policies."""

from typing import Optional

from ..constants import SYSTEM_PACKAGE_MARKERS, SYSTEM_PACKAGE_PREFIXES, SYSTEM_PATH_PREFIXES


def is_system_path(path: Optional[str]) -> bool:
    """True for archives under the system, product, apex or vendor mounts."""
    return bool(path) and path.startswith(SYSTEM_PATH_PREFIXES)


def is_system_overlay_or_resource(package_name: Optional[str], source_dir: Optional[str]) -> bool:
    """
    Detect platform overlays and framework resource packages.

    Such packages carry no behavior of their own and are exempt from scoring.
    """
    if package_name:
        if package_name.startswith(SYSTEM_PACKAGE_PREFIXES):
            return True
        if any(marker in package_name for marker in SYSTEM_PACKAGE_MARKERS):
            return True

    return is_system_path(source_dir)
