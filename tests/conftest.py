"""Pytest fixtures for audit engine tests."""

from __future__ import annotations

import os
import sys
import zipfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from appaudit.config import AuditConfig, set_config
from appaudit.exceptions import PackageMetadataError, SettingsReadError
from appaudit.models import DeviceInfo, PackageRecord, TrackerMatch
from appaudit.reconnaissance import DeviceSettingsProvider, PackageMetadataProvider
from appaudit.scanning import LocalReferenceDatabase

INSTALL_TIME = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

PLAY_STORE = "com.android.vending"


class MockADB:
    """Mock ADB connection for testing."""

    def __init__(self, responses: Optional[dict] = None) -> None:
        self.responses = responses or {}
        self.commands_executed: list[str] = []
        self.device_id = "emulator-5554"

    def shell(self, command: str) -> Optional[str]:
        self.commands_executed.append(command)
        for pattern, response in self.responses.items():
            if pattern in command:
                return response
        return ""

    def get_prop(self, prop: str) -> str:
        return self.responses.get(f"prop:{prop}", "")

    def execute(self, *args: str) -> tuple[str, str, int]:
        command = " ".join(args)
        self.commands_executed.append(command)
        stdout = self.responses.get(f"exec:{command}", "")
        return stdout, "", 0

    def is_connected(self) -> bool:
        return True


class FakePackageProvider(PackageMetadataProvider):
    """Serves prepared records; names in `broken` raise like a vanished package."""

    def __init__(self, records: list[PackageRecord], broken: tuple[str, ...] = ()) -> None:
        self.records = {r.package_name: r for r in records}
        self.names = [r.package_name for r in records] + list(broken)
        self.broken = set(broken)

    def list_packages(self) -> list[str]:
        return list(self.names)

    def get_package(self, package_name: str) -> PackageRecord:
        if package_name in self.broken:
            raise PackageMetadataError(package_name, LookupError("package removed"))
        return self.records[package_name]


class FakeSettings(DeviceSettingsProvider):
    """Settings from a dict; a missing key is unreadable."""

    def __init__(self, **values) -> None:
        self.values = values

    def _get(self, key: str):
        if key not in self.values:
            raise SettingsReadError(key)
        return self.values[key]

    def device_info(self) -> DeviceInfo:
        return DeviceInfo("Google", "Pixel 7", "Android 13", self.sdk_int(), "2024-05-01")

    def sdk_int(self) -> int:
        return self._get("sdk_int")

    def is_device_secure(self) -> bool:
        return self._get("device_secure")

    def is_adb_enabled(self) -> bool:
        return self._get("adb_enabled")

    def is_unknown_sources_enabled(self) -> bool:
        return self._get("unknown_sources")

    def is_package_verifier_enabled(self) -> bool:
        return self._get("package_verifier")

    def has_root_indicators(self) -> bool:
        return self._get("root_indicators")


def make_record(package_name: str = "com.acme.notes", **overrides) -> PackageRecord:
    """Clean Play Store package unless overridden."""
    values = {
        "package_name": package_name,
        "label": "Acme Notes",
        "version_name": "1.0",
        "permissions": [],
        "certificates": [],
        "first_install_time": INSTALL_TIME,
        "installer": PLAY_STORE,
    }
    values.update(overrides)
    return PackageRecord(**values)


def make_certificate(common_name: str = "Acme Release") -> bytes:
    """Self-signed DER certificate with the given subject CN."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Android" if "Debug" in common_name else "Acme"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(INSTALL_TIME)
        .not_valid_after(INSTALL_TIME + timedelta(days=365))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.DER)


def build_archive(
    path: Path,
    entries: tuple[str, ...] = ("AndroidManifest.xml", "classes.dex"),
    padding: int = 160_000,
    modified: datetime = INSTALL_TIME,
) -> Path:
    """Write an APK-like zip; padding is stored uncompressed to control the size."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as apk:
        for entry in entries:
            apk.writestr(entry, b"\x00" * 64)
        if padding:
            apk.writestr("res/raw/payload.bin", b"\x00" * padding)
    set_mtime(path, modified)
    return path


def set_mtime(path: Path, modified: datetime) -> None:
    timestamp = modified.timestamp()
    os.utime(path, (timestamp, timestamp))


@pytest.fixture
def reference_db() -> LocalReferenceDatabase:
    """Small reference database with one malicious package and two trackers."""
    return LocalReferenceDatabase(
        packages={"com.fakeclean.booster": "HiddenAds"},
        trackers={
            "com.adtrack.sdk": TrackerMatch("AdTrack SDK", 10),
            "com.spyanalytics": TrackerMatch("SpyAnalytics", 20),
        },
    )


@pytest.fixture
def audit_config() -> AuditConfig:
    """Configuration independent of the process environment."""
    return AuditConfig(max_workers=4)


@pytest.fixture
def clean_settings() -> FakeSettings:
    """A well configured Android 13 device."""
    return FakeSettings(
        sdk_int=33,
        device_secure=True,
        adb_enabled=False,
        unknown_sources=False,
        package_verifier=True,
        root_indicators=False,
    )


@pytest.fixture(autouse=True)
def reset_global_config():
    """Never leak a global configuration between tests."""
    set_config(None)
    yield
    set_config(None)
