"""
Audit Scanner

Orchestrates one scan: every installed package goes through the App
Auditor on a bounded worker pool while the System Auditor runs as its
own task. Results are joined and sorted by risk score, most severe first.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .config import AuditConfig, get_config
from .models import AppAudit, AuditFinding, AuditMode, DeviceInfo, PackageFailure
from .reconnaissance import DeviceSettingsProvider, PackageMetadataProvider
from .report import ScanReport
from .scanning import AppAuditor, ReferenceDatabase, ScoreAggregation, SystemAuditor, get_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageOutcome:
    """Result of auditing one package: an audit or a failure, never both."""
    package_name: str
    audit: Optional[AppAudit] = None
    failure: Optional[PackageFailure] = None

    @property
    def ok(self) -> bool:
        return self.audit is not None


class AuditScanner:
    """
    Runs a full app and device audit.

    Usage:
        snapshot = DeviceSnapshot.from_file("device.yaml")
        scanner = AuditScanner(
            snapshot.package_provider(),
            snapshot.settings_provider(),
            load_default(),
        )
        report = scanner.scan(AuditMode.QUICK)
        print(generate_report(report))
    """

    def __init__(
        self,
        packages: PackageMetadataProvider,
        settings: DeviceSettingsProvider,
        reference_db: ReferenceDatabase,
        config: Optional[AuditConfig] = None,
        on_failure: Optional[Callable[[PackageFailure], None]] = None,
    ):
        self.packages = packages
        self.settings = settings
        self.config = config or get_config()
        self.on_failure = on_failure
        self.app_auditor = AppAuditor(
            reference_db,
            policy=get_policy(self.config.scoring_policy),
            aggregation=ScoreAggregation(self.config.score_aggregation),
        )
        self.system_auditor = SystemAuditor(settings)

    def scan(self, mode: Union[AuditMode, str, None] = None) -> ScanReport:
        """
        Audit every installed package and the device settings.

        Args:
            mode: AuditMode or its string value; defaults to the configured mode

        Returns:
            ScanReport with apps sorted by risk score (descending, stable)
        """
        if mode is None:
            mode = self.config.mode
        if isinstance(mode, str):
            mode = AuditMode.from_string(mode)

        start = time.monotonic()
        package_names = self._list_packages()
        logger.info(f"Starting app audit of {len(package_names)} packages ({mode.value} mode)...")

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            device_future = executor.submit(self._audit_device)
            info_future = executor.submit(self._read_device_info)
            outcomes = list(executor.map(lambda name: self._audit_package(name, mode), package_names))
            device_findings = device_future.result()
            device_info = info_future.result()

        apps = [o.audit for o in outcomes if o.ok]
        failures = [o.failure for o in outcomes if not o.ok]
        apps.sort(key=lambda a: a.risk_score, reverse=True)

        duration = time.monotonic() - start
        logger.info(f"Scan complete: {len(apps)} apps audited in {duration:.2f}s")
        if failures:
            logger.warning(f"{len(failures)} packages could not be audited")

        return ScanReport(
            mode=mode,
            apps=apps,
            device_findings=device_findings,
            device_info=device_info,
            failures=failures,
            scan_duration_seconds=duration,
        )

    def _list_packages(self) -> list[str]:
        try:
            return list(self.packages.list_packages())
        except Exception as e:
            logger.error(f"Could not enumerate installed packages: {e}")
            return []

    def _audit_package(self, package_name: str, mode: AuditMode) -> PackageOutcome:
        try:
            record = self.packages.get_package(package_name)
            audit = self.app_auditor.audit(record, mode)
        except Exception as e:
            failure = PackageFailure(package_name, str(e))
            logger.warning(f"Skipping {package_name}: {e}")
            self._notify_failure(failure)
            return PackageOutcome(package_name, failure=failure)
        return PackageOutcome(package_name, audit=audit)

    def _notify_failure(self, failure: PackageFailure) -> None:
        if not self.on_failure:
            return
        try:
            self.on_failure(failure)
        except Exception as e:
            logger.warning(f"Failure callback raised for {failure.package_name}: {e}")

    def _audit_device(self) -> list[AuditFinding]:
        try:
            return self.system_auditor.audit()
        except Exception as e:
            logger.warning(f"Device audit failed: {e}")
            return []

    def _read_device_info(self) -> Optional[DeviceInfo]:
        try:
            return self.settings.device_info()
        except Exception as e:
            logger.warning(f"Could not read device info: {e}")
            return None
