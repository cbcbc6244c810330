"""
Android Device Enumeration

Reads device identity and security settings over ADB.
"""

import logging
import subprocess
from typing import Optional

from ..constants import SU_BINARY_PATHS, TEST_KEYS_TAG
from ..exceptions import SettingsReadError
from ..models import DeviceInfo
from .providers import DeviceSettingsProvider

logger = logging.getLogger(__name__)

# Unset settings come back as "null"
UNSET_VALUES = ("", "null")

# lockscreen.password_type values meaning "none" or "swipe"
INSECURE_LOCK_TYPES = ("0", "65536")

VERSION_LABELS = {
    33: "Android 13",
    32: "Android 12L",
    31: "Android 12",
    30: "Android 11",
    29: "Android 10",
    28: "Android 9",
    27: "Android 8.1",
    26: "Android 8.0",
}


def android_version_label(sdk_int: int) -> str:
    """Human readable Android release for an API level."""
    if sdk_int in VERSION_LABELS:
        return VERSION_LABELS[sdk_int]
    if sdk_int >= 34:
        return "Android 14+"
    return f"Android {sdk_int}"


class ADBConnection:
    """Runs adb commands against one device (or the only attached one)."""

    def __init__(self, device_id: Optional[str] = None, adb_path: str = "adb", timeout: int = 15):
        self.device_id = device_id
        self.adb_path = adb_path
        self.timeout = timeout

    def execute(self, *args: str) -> tuple[str, str, int]:
        """
        Run `adb [-s device] args...`.

        Returns:
            Tuple of (stdout, stderr, return_code); -1 if adb could not run
        """
        cmd = [self.adb_path]
        if self.device_id:
            cmd.extend(["-s", self.device_id])
        cmd.extend(args)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            return "", f"Timed out after {self.timeout}s", -1
        except OSError as e:
            return "", str(e), -1
        return result.stdout, result.stderr, result.returncode

    def shell(self, command: str) -> Optional[str]:
        """Run a device shell command; None when adb or the command fails."""
        stdout, stderr, code = self.execute("shell", command)
        if code != 0:
            logger.debug(f"adb shell '{command}' failed ({code}): {stderr.strip()}")
            return None
        return stdout.strip()

    def get_prop(self, prop: str) -> str:
        return self.shell(f"getprop {prop}") or ""

    def is_connected(self) -> bool:
        stdout, _, code = self.execute("get-state")
        return code == 0 and stdout.strip() == "device"


class ADBDeviceSettings(DeviceSettingsProvider):
    """
    Device security settings read live over ADB.

    Usage:
        adb = ADBConnection(device_id="emulator-5554")
        settings = ADBDeviceSettings(adb)
        print(settings.device_info().android_version)
    """

    def __init__(self, adb: ADBConnection):
        self.adb = adb

    def _setting(self, namespace: str, key: str) -> str:
        value = self.adb.shell(f"settings get {namespace} {key}")
        if value is None or value.strip() in UNSET_VALUES:
            raise SettingsReadError(f"{namespace}/{key}")
        return value.strip()

    def _int_setting(self, namespace: str, key: str) -> int:
        value = self._setting(namespace, key)
        try:
            return int(value)
        except ValueError as e:
            raise SettingsReadError(f"{namespace}/{key}", e)

    def device_info(self) -> DeviceInfo:
        sdk = self.sdk_int()
        manufacturer = self.adb.get_prop("ro.product.manufacturer")
        return DeviceInfo(
            manufacturer=manufacturer[:1].upper() + manufacturer[1:],
            model=self.adb.get_prop("ro.product.model"),
            android_version=android_version_label(sdk),
            sdk_int=sdk,
            security_patch=self.adb.get_prop("ro.build.version.security_patch") or "N/A",
        )

    def sdk_int(self) -> int:
        value = self.adb.get_prop("ro.build.version.sdk")
        try:
            return int(value)
        except ValueError as e:
            raise SettingsReadError("ro.build.version.sdk", e)

    def is_device_secure(self) -> bool:
        return self._setting("secure", "lockscreen.password_type") not in INSECURE_LOCK_TYPES

    def is_adb_enabled(self) -> bool:
        return self._int_setting("global", "adb_enabled") == 1

    def is_unknown_sources_enabled(self) -> bool:
        return self._int_setting("secure", "install_non_market_apps") == 1

    def is_package_verifier_enabled(self) -> bool:
        return self._int_setting("global", "package_verifier_enable") != 0

    def has_root_indicators(self) -> bool:
        """Check for root access indicators."""
        for path in SU_BINARY_PATHS:
            if self.adb.shell(f"ls {path}") == path:
                return True
        return TEST_KEYS_TAG in self.adb.get_prop("ro.build.tags")
