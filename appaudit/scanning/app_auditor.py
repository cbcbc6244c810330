"""
App Auditor

Layered heuristic audit of installed Android applications.

Layers, in order:
- Layer 1:  signing certificate and package name matching against the
            reference database (plus debug certificate detection)
- Layer 1B: known tracker libraries
- Layer 2:  permission and package naming heuristics
- Layer 3:  archive integrity (FULL mode only)
- Layer 4:  lightweight indicators of compromise (FULL mode only)

Platform overlays and framework resource packages are excluded before
any layer runs.
"""

import logging
import zipfile
from datetime import timedelta
from pathlib import Path
from typing import Optional

from cryptography import x509

from ..constants import (
    DEBUG_CERT_HASH_PREFIX,
    DEBUG_CERT_SUBJECT_MARKER,
    DEX_ENTRY_REGEX,
    IMPERSONATION_TARGETS,
    LONG_DIGIT_RUN_REGEX,
    MALICIOUS_PACKAGE_TITLE,
    MALWARE_SIGNATURE_TITLE,
    MANIFEST_ENTRY,
    MAX_MODIFIED_AFTER_INSTALL_SECONDS,
    MIN_ARCHIVE_SIZE_BYTES,
    OBFUSCATION_REGEX,
    SUSPICIOUS_NAME_PATTERNS,
    TRACKING_KEYWORDS,
)
from ..exceptions import PackageAuditError
from ..models import (
    AppAudit,
    AppPermission,
    AuditFinding,
    AuditMode,
    InstallSource,
    PackageRecord,
    Risk,
    SecurityCheckResult,
)
from ..reconnaissance import resolve_install_source
from ..utils import ensure_utc, from_epoch, sha256_hex
from .exclusions import is_system_overlay_or_resource
from .permission_analyzer import PermissionAnalyzer
from .reference_db import ReferenceDatabase
from .risk_scoring import LayeredRiskPolicy, RiskClassifier, ScoreAggregation, ScoringInput

logger = logging.getLogger(__name__)

DANGEROUS_PERMISSION_WEIGHT = 12

ZIP_ERRORS = (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError, ValueError)


def is_debug_certificate(der: bytes) -> bool:
    """True if the X.509 subject names the Android debug keystore."""
    try:
        cert = x509.load_der_x509_certificate(der)
        subject = cert.subject.rfc4514_string()
    except ValueError as e:
        logger.debug(f"Skipping unparsable certificate: {e}")
        return False
    return DEBUG_CERT_SUBJECT_MARKER in subject.lower()


class AppAuditor:
    """
    Audits one package at a time and produces an AppAudit.

    Usage:
        auditor = AppAuditor(LocalReferenceDatabase.from_file("reference_db.yaml"))
        audit = auditor.audit(record, AuditMode.FULL)
        print(f"{audit.package_name}: {audit.risk_score} ({audit.risk.value})")
    """

    def __init__(
        self,
        reference_db: ReferenceDatabase,
        policy: Optional[RiskClassifier] = None,
        aggregation: ScoreAggregation = ScoreAggregation.SINGLE,
    ):
        self.reference_db = reference_db
        self.policy = policy or LayeredRiskPolicy()
        self.aggregation = aggregation
        self.permission_analyzer = PermissionAnalyzer()

    def audit(self, record: PackageRecord, mode: AuditMode) -> AppAudit:
        """
        Audit a single package.

        Args:
            record: Package metadata from the metadata provider
            mode: QUICK runs layers 1, 1B and 2; FULL adds layers 3 and 4

        Returns:
            AppAudit with findings, clamped score and risk tier

        Raises:
            PackageAuditError: if the package cannot be audited at all
        """
        if is_system_overlay_or_resource(record.package_name, record.source_dir):
            logger.debug(f"Excluded overlay/framework package: {record.package_name}")
            return self._excluded_audit(record)

        permissions = self.permission_analyzer.classify(record.permissions)
        install_source = resolve_install_source(record.installer, record.is_system)
        dangerous_count = sum(1 for p in permissions if p.dangerous)

        layers = [
            self._check_signatures(record),
            self._check_trackers(record.package_name),
            self._check_heuristics(record, permissions),
        ]

        if mode == AuditMode.FULL:
            layers.append(self._check_archive_integrity(record))
            layers.append(self._check_indicators(record.package_name))

        layers.append(self._check_install_penalty(install_source, dangerous_count))

        findings = tuple(f for layer in layers for f in layer.findings)
        is_system_app = install_source == InstallSource.SYSTEM

        risk_score, risk = self.policy.evaluate(ScoringInput(
            package_name=record.package_name,
            permissions=tuple(permissions),
            install_source=install_source,
            is_system_app=is_system_app,
            archive_path=record.source_dir,
            layered_score=self._aggregate(layers, dangerous_count),
        ))

        logger.debug(f"Audited {record.package_name}: score {risk_score} ({risk.value})")

        return AppAudit(
            app_name=record.label,
            package_name=record.package_name,
            version_name=record.version_name or "N/A",
            is_system_app=is_system_app,
            install_source=install_source,
            permissions=tuple(permissions),
            findings=findings,
            risk_score=risk_score,
            risk=risk,
        )

    def _excluded_audit(self, record: PackageRecord) -> AppAudit:
        return AppAudit(
            app_name=record.label,
            package_name=record.package_name,
            version_name=record.version_name or "N/A",
            is_system_app=True,
            install_source=InstallSource.SYSTEM,
            permissions=(),
            findings=(),
            risk_score=0,
            risk=Risk.LOW,
        )

    def _aggregate(self, layers: list[SecurityCheckResult], dangerous_count: int) -> int:
        """Raw (unclamped) layered score."""
        score = dangerous_count * DANGEROUS_PERMISSION_WEIGHT
        score += sum(f.weight for layer in layers for f in layer.findings)
        if self.aggregation == ScoreAggregation.LEGACY_DOUBLE:
            score += sum(layer.score for layer in layers)
        return score

    # Layer 1

    def _check_signatures(self, record: PackageRecord) -> SecurityCheckResult:
        """Match signing certificates and the package name against known malware."""
        result = SecurityCheckResult()

        for cert in record.certificates:
            cert_hash = sha256_hex(cert)

            match = self.reference_db.lookup_by_certificate_hash(cert_hash)
            if match:
                result.add(AuditFinding(
                    MALWARE_SIGNATURE_TITLE,
                    f"Certificate matches known malware: {match.name}",
                    50,
                ))

            if cert_hash.startswith(DEBUG_CERT_HASH_PREFIX) or is_debug_certificate(cert):
                result.add(AuditFinding(
                    "Development certificate",
                    "App signed with a debug certificate",
                    20,
                ))

        package_match = self.reference_db.lookup_by_package_name(record.package_name)
        if package_match:
            result.add(AuditFinding(
                MALICIOUS_PACKAGE_TITLE,
                f"Package identified as: {package_match.name}",
                50,
            ))

        return result

    # Layer 1B

    def _check_trackers(self, package_name: str) -> SecurityCheckResult:
        result = SecurityCheckResult()
        tracker = self.reference_db.lookup_tracker(package_name)
        if tracker:
            result.add(AuditFinding("Known tracker", f"Contains: {tracker.name}", tracker.risk_score))
        return result

    # Layer 2

    def _check_heuristics(
        self, record: PackageRecord, permissions: list[AppPermission]
    ) -> SecurityCheckResult:
        """Heuristic findings only; their weight enters the score via the findings sum."""
        analyzer = self.permission_analyzer
        findings: list[AuditFinding] = []
        findings.extend(analyzer.detect_combinations(permissions))
        findings.extend(self._analyze_package_name(record.package_name))
        findings.extend(self._detect_impersonation(record.package_name, record.label))
        findings.extend(analyzer.detect_admin_capabilities(record.receivers))
        findings.extend(self._detect_obfuscation(record.package_name))
        findings.extend(analyzer.detect_excessive_permissions(permissions))
        return SecurityCheckResult(findings=findings)

    def _analyze_package_name(self, package_name: str) -> list[AuditFinding]:
        findings = []
        lowered = package_name.lower()

        if any(pattern in lowered for pattern in SUSPICIOUS_NAME_PATTERNS):
            findings.append(AuditFinding(
                "Suspicious package name",
                "Follows naming patterns common in malware and pirated apps",
                18,
            ))

        parts = package_name.split(".")
        if any(len(part) <= 1 for part in parts) or any(LONG_DIGIT_RUN_REGEX.search(part) for part in parts):
            findings.append(AuditFinding(
                "Anomalous package structure",
                "Name has very short segments or long digit runs",
                12,
            ))

        return findings

    def _detect_impersonation(self, package_name: str, app_name: str) -> list[AuditFinding]:
        """Every table entry is checked; several impersonation findings may fire."""
        findings = []
        lowered_name = app_name.lower()
        lowered_package = package_name.lower()

        for keyword, legit_package in IMPERSONATION_TARGETS.items():
            if (keyword in lowered_name or keyword in lowered_package) and package_name != legit_package:
                findings.append(AuditFinding(
                    "Possible impersonation",
                    f"Imitates {keyword} (legitimate: {legit_package})",
                    40,
                ))

        return findings

    def _detect_obfuscation(self, package_name: str) -> list[AuditFinding]:
        if OBFUSCATION_REGEX.search(package_name):
            return [AuditFinding(
                "Name obfuscation",
                "Uses look-alike characters (l, I, 1, o, O, 0)",
                15,
            )]
        return []

    # Layer 3

    def _check_archive_integrity(self, record: PackageRecord) -> SecurityCheckResult:
        """Inspect the installed archive; a missing archive contributes nothing."""
        result = SecurityCheckResult()
        if not record.source_dir:
            return result

        archive = Path(record.source_dir)
        try:
            stat = archive.stat()
        except FileNotFoundError:
            return result
        except OSError as e:
            raise PackageAuditError(record.package_name, e) from e

        if stat.st_size < MIN_ARCHIVE_SIZE_BYTES:
            result.add(AuditFinding(
                "Suspiciously small archive",
                f"Size: {stat.st_size} bytes, possible stub or downloader",
                20,
            ))

        installed = ensure_utc(record.first_install_time)
        modified = from_epoch(stat.st_mtime)
        if modified > installed + timedelta(seconds=MAX_MODIFIED_AFTER_INSTALL_SECONDS):
            result.add(AuditFinding(
                "Archive modified after install",
                f"File modified {modified.isoformat()} vs installed {installed.isoformat()}",
                25,
            ))

        if len(record.certificates) > 1:
            result.add(AuditFinding(
                "Multiple signing certificates",
                f"{len(record.certificates)} certificates found, indicates repackaging or injection",
                30,
            ))

        try:
            with zipfile.ZipFile(archive) as apk:
                entries = apk.namelist()
        except ZIP_ERRORS as e:
            logger.debug(f"Unreadable archive for {record.package_name}: {e}")
            result.add(AuditFinding(
                "Unreadable archive",
                "Archive structure could not be parsed, possible corruption or protection",
                20,
            ))
            return result

        if not any(DEX_ENTRY_REGEX.match(name) for name in entries):
            result.add(AuditFinding(
                "Archive without executable code",
                "No classes.dex entry, possibly empty or corrupted",
                25,
            ))

        if MANIFEST_ENTRY not in entries:
            result.add(AuditFinding(
                "Archive without manifest",
                f"Missing {MANIFEST_ENTRY}, invalid structure",
                30,
            ))

        return result

    # Layer 4

    def _check_indicators(self, package_name: str) -> SecurityCheckResult:
        result = SecurityCheckResult()
        lowered = package_name.lower()
        if any(keyword in lowered for keyword in TRACKING_KEYWORDS):
            result.add(AuditFinding(
                "Name suggests tracking",
                "Package name contains terms associated with tracking",
                15,
            ))
        return result

    def _check_install_penalty(self, install_source: InstallSource, dangerous_count: int) -> SecurityCheckResult:
        result = SecurityCheckResult()
        if install_source == InstallSource.UNKNOWN and dangerous_count > 3:
            result.add(AuditFinding(
                "Unverified origin with permissions",
                "Unknown install source with several sensitive permissions",
                25,
            ))
        return result
