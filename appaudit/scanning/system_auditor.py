"""
System Auditor

Device-level security checks. Produces a flat finding list with no score
or tier of its own.
"""

import logging
from typing import Callable, Optional

from ..constants import LEGACY_UNKNOWN_SOURCES_MAX_SDK
from ..exceptions import SettingsReadError
from ..models import AuditFinding
from ..reconnaissance import DeviceSettingsProvider

logger = logging.getLogger(__name__)


class SystemAuditor:
    """
    Evaluates device security settings.

    Performs checks for:
    - Missing secure lock screen
    - Root indicators (su binaries, test-keys build)
    - USB debugging
    - Unknown sources (legacy Android only)
    - Disabled app verification / Play Protect

    A setting that cannot be read skips its check without a finding.
    """

    def __init__(self, settings: DeviceSettingsProvider):
        self.settings = settings

    def audit(self) -> list[AuditFinding]:
        logger.info("Checking device security settings...")
        findings: list[AuditFinding] = []

        for check in (
            self._check_lock_screen,
            self._check_root,
            self._check_usb_debugging,
            self._check_unknown_sources,
            self._check_app_verification,
        ):
            finding = self._run_check(check)
            if finding:
                findings.append(finding)

        logger.info(f"Device audit complete: {len(findings)} findings")
        return findings

    @staticmethod
    def _run_check(check: Callable[[], Optional[AuditFinding]]) -> Optional[AuditFinding]:
        try:
            return check()
        except SettingsReadError as e:
            logger.debug(f"Skipping {check.__name__}: {e.message}")
            return None

    def _check_lock_screen(self) -> Optional[AuditFinding]:
        if not self.settings.is_device_secure():
            return AuditFinding("Screen lock", "No secure screen lock configured", 40)
        return None

    def _check_root(self) -> Optional[AuditFinding]:
        if self.settings.has_root_indicators():
            return AuditFinding("Rooted device", "The device has root access", 60)
        return None

    def _check_usb_debugging(self) -> Optional[AuditFinding]:
        if self.settings.is_adb_enabled():
            return AuditFinding("USB debugging", "USB debugging is enabled", 25)
        return None

    def _check_unknown_sources(self) -> Optional[AuditFinding]:
        if self.settings.sdk_int() >= LEGACY_UNKNOWN_SOURCES_MAX_SDK:
            return None
        if self.settings.is_unknown_sources_enabled():
            return AuditFinding("Unknown sources", "Installation from unknown sources is enabled", 30)
        return None

    def _check_app_verification(self) -> Optional[AuditFinding]:
        if not self.settings.is_package_verifier_enabled():
            return AuditFinding(
                "App verification disabled",
                "Google Play Protect or app verification is disabled",
                35,
            )
        return None
