"""
Device Snapshot

Offline inventory of one device, captured beforehand and stored as YAML:

    device:
      manufacturer: Google
      model: Pixel 7
      sdk_int: 33
      security_patch: "2024-05-01"
    settings:
      device_secure: true
      adb_enabled: false
      unknown_sources: false
      package_verifier: true
      root_indicators: false
    packages:
      - package_name: com.example.app
        label: Example
        version_name: "1.0"
        permissions: [android.permission.INTERNET]
        certificates: [<base64 DER>, {path: certs/example.der}]
        first_install_time: 2024-01-01T10:00:00Z
        source_dir: apks/example.apk
        receivers: [{name: .AdminReceiver, permission: android.permission.BIND_DEVICE_ADMIN}]
        installer: com.android.vending
        system: false

Relative paths are resolved against the snapshot file's directory.
Numeric install times are epoch milliseconds.
"""

import base64
import binascii
import logging
from collections import Counter
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from ..exceptions import PackageMetadataError, SettingsReadError, SnapshotError
from ..models import DeviceInfo, ExportedReceiver, PackageRecord
from ..utils import ensure_utc, from_epoch
from .device_enum import android_version_label
from .providers import DeviceSettingsProvider, PackageMetadataProvider

logger = logging.getLogger(__name__)


def _parse_install_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return ensure_utc(datetime.combine(value, time()))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return from_epoch(value / 1000)
    if isinstance(value, str):
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise ValueError(f"Invalid first_install_time: {value!r}")


class DeviceSnapshot:
    """
    Parsed snapshot file.

    Usage:
        snapshot = DeviceSnapshot.from_file("device.yaml")
        packages = snapshot.package_provider()
        settings = snapshot.settings_provider()
    """

    def __init__(self, data: dict, base_dir: Optional[Path] = None):
        self.data = data
        self.base_dir = base_dir or Path.cwd()

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DeviceSnapshot":
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SnapshotError(f"Cannot load snapshot: {path}", str(path), e)

        if not isinstance(data, dict):
            raise SnapshotError("Snapshot must be a mapping", str(path))

        snapshot = cls(data, path.parent)
        duplicates = snapshot.duplicate_package_names()
        if duplicates:
            raise SnapshotError(f"Duplicate package entries: {', '.join(duplicates)}", str(path))

        logger.info(f"Loaded snapshot {path} ({len(snapshot.package_entries)} packages)")
        return snapshot

    @property
    def package_entries(self) -> list:
        entries = self.data.get("packages") or []
        return entries if isinstance(entries, list) else []

    def duplicate_package_names(self) -> list[str]:
        counts = Counter(
            str(e["package_name"]) for e in self.package_entries if isinstance(e, dict) and e.get("package_name")
        )
        return sorted(name for name, count in counts.items() if count > 1)

    def resolve_path(self, value: str) -> str:
        path = Path(value)
        if path.is_absolute():
            return str(path)
        return str(self.base_dir / path)

    def package_provider(self) -> "SnapshotPackageProvider":
        return SnapshotPackageProvider(self)

    def settings_provider(self) -> "SnapshotDeviceSettings":
        return SnapshotDeviceSettings(self.data.get("device") or {}, self.data.get("settings") or {})


class SnapshotPackageProvider(PackageMetadataProvider):
    """Package metadata read from a DeviceSnapshot."""

    def __init__(self, snapshot: DeviceSnapshot):
        self.snapshot = snapshot

    @staticmethod
    def _entry_name(index: int, entry: Any) -> str:
        if isinstance(entry, dict) and entry.get("package_name"):
            return str(entry["package_name"])
        return f"<entry {index}>"

    def list_packages(self) -> list[str]:
        return [self._entry_name(i, e) for i, e in enumerate(self.snapshot.package_entries)]

    def get_package(self, package_name: str) -> PackageRecord:
        for index, entry in enumerate(self.snapshot.package_entries):
            if self._entry_name(index, entry) == package_name:
                break
        else:
            raise PackageMetadataError(package_name, LookupError("package not installed"))

        if not isinstance(entry, dict):
            raise PackageMetadataError(package_name, TypeError("package entry must be a mapping"))

        try:
            return self._parse_entry(entry)
        except (KeyError, TypeError, ValueError, binascii.Error, OSError) as e:
            raise PackageMetadataError(package_name, e) from e

    def _parse_entry(self, entry: dict) -> PackageRecord:
        source_dir = entry.get("source_dir")
        if source_dir:
            source_dir = self.snapshot.resolve_path(str(source_dir))

        receivers = [
            ExportedReceiver(name=str(r["name"]), permission=r.get("permission"))
            for r in entry.get("receivers") or []
        ]

        version = entry.get("version_name")
        return PackageRecord(
            package_name=str(entry["package_name"]),
            label=str(entry.get("label") or entry["package_name"]),
            version_name=str(version) if version is not None else None,
            permissions=[str(p) for p in entry.get("permissions") or []],
            certificates=[self._load_certificate(c) for c in entry.get("certificates") or []],
            first_install_time=_parse_install_time(entry["first_install_time"]),
            source_dir=source_dir,
            receivers=receivers,
            installer=entry.get("installer"),
            is_system=bool(entry.get("system", False)),
        )

    def _load_certificate(self, value: Any) -> bytes:
        """Base64 DER string, or {path: file} with raw DER bytes."""
        if isinstance(value, dict):
            with open(self.snapshot.resolve_path(str(value["path"])), "rb") as f:
                return f.read()
        if isinstance(value, str):
            return base64.b64decode(value, validate=True)
        raise TypeError(f"Invalid certificate entry: {type(value).__name__}")


class SnapshotDeviceSettings(DeviceSettingsProvider):
    """Device settings read from a DeviceSnapshot; missing keys are unreadable."""

    def __init__(self, device: dict, settings: dict):
        self.device = device
        self.settings = settings

    def _flag(self, key: str) -> bool:
        value = self.settings.get(key)
        if not isinstance(value, bool):
            raise SettingsReadError(key)
        return value

    def device_info(self) -> DeviceInfo:
        sdk = self.sdk_int()
        return DeviceInfo(
            manufacturer=str(self.device.get("manufacturer", "Unknown")),
            model=str(self.device.get("model", "Unknown")),
            android_version=str(self.device.get("android_version") or android_version_label(sdk)),
            sdk_int=sdk,
            security_patch=str(self.device.get("security_patch") or "N/A"),
        )

    def sdk_int(self) -> int:
        value = self.device.get("sdk_int")
        if isinstance(value, bool) or not isinstance(value, int):
            raise SettingsReadError("sdk_int")
        return value

    def is_device_secure(self) -> bool:
        return self._flag("device_secure")

    def is_adb_enabled(self) -> bool:
        return self._flag("adb_enabled")

    def is_unknown_sources_enabled(self) -> bool:
        return self._flag("unknown_sources")

    def is_package_verifier_enabled(self) -> bool:
        return self._flag("package_verifier")

    def has_root_indicators(self) -> bool:
        return self._flag("root_indicators")
