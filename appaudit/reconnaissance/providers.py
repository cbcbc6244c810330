"""
Collaborator contracts

The engine never talks to the operating system directly. Package metadata
and device security settings are supplied through these interfaces.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..constants import INSTALLER_PATTERNS
from ..models import DeviceInfo, InstallSource, PackageRecord


class PackageMetadataProvider(ABC):
    """Supplies the installed packages of one device."""

    @abstractmethod
    def list_packages(self) -> list[str]:
        """Package names of all installed packages."""

    @abstractmethod
    def get_package(self, package_name: str) -> PackageRecord:
        """
        Full metadata for one package.

        Raises:
            PackageMetadataError: if the metadata is unreadable or the
                package was removed since it was listed
        """


class DeviceSettingsProvider(ABC):
    """
    Supplies device security settings.

    Every read raises SettingsReadError when the value is unavailable.
    """

    @abstractmethod
    def device_info(self) -> DeviceInfo:
        ...

    @abstractmethod
    def sdk_int(self) -> int:
        ...

    @abstractmethod
    def is_device_secure(self) -> bool:
        """PIN, pattern or password lock configured."""

    @abstractmethod
    def is_adb_enabled(self) -> bool:
        """USB debugging enabled."""

    @abstractmethod
    def is_unknown_sources_enabled(self) -> bool:
        """Legacy global "unknown sources" toggle (before Android 8.0)."""

    @abstractmethod
    def is_package_verifier_enabled(self) -> bool:
        """App verification / Play Protect enabled."""

    @abstractmethod
    def has_root_indicators(self) -> bool:
        """su binaries present or build signed with test keys."""


def resolve_install_source(installer: Optional[str], is_system: bool = False) -> InstallSource:
    """Attribute a package to an install channel from its installer package name."""
    if is_system:
        return InstallSource.SYSTEM
    if installer is None:
        return InstallSource.UNKNOWN
    for pattern, source in INSTALLER_PATTERNS:
        if pattern in installer:
            return InstallSource(source)
    return InstallSource.UNKNOWN
