"""
Reconnaissance Module

Collaborators that gather package metadata and device security settings.
"""

from .device_enum import ADBConnection, ADBDeviceSettings, android_version_label
from .providers import DeviceSettingsProvider, PackageMetadataProvider, resolve_install_source
from .snapshot import DeviceSnapshot, SnapshotDeviceSettings, SnapshotPackageProvider

__all__ = [
    "ADBConnection",
    "ADBDeviceSettings",
    "android_version_label",
    "DeviceSettingsProvider",
    "PackageMetadataProvider",
    "resolve_install_source",
    "DeviceSnapshot",
    "SnapshotDeviceSettings",
    "SnapshotPackageProvider",
]
