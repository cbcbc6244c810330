"""
Scan Report

Result model handed to reporting, plus the plain-text and JSON renderings.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .constants import MALWARE_FINDING_TITLES
from .models import AppAudit, AuditFinding, AuditMode, DeviceInfo, PackageFailure, Risk
from .presentation import DEFAULT_LOCALE, label

logger = logging.getLogger(__name__)

TOP_FINDINGS_PER_APP = 3


@dataclass
class ScanReport:
    """Results from one scan. Apps are sorted by risk score, descending."""
    mode: AuditMode
    apps: list[AppAudit]
    device_findings: list[AuditFinding]
    device_info: Optional[DeviceInfo] = None
    failures: list[PackageFailure] = field(default_factory=list)
    scan_duration_seconds: float = 0.0

    def count_by_risk(self, risk: Risk) -> int:
        return sum(1 for app in self.apps if app.risk == risk)

    @property
    def malware_count(self) -> int:
        return sum(
            1 for app in self.apps
            if any(f.title in MALWARE_FINDING_TITLES for f in app.findings)
        )

    @property
    def flagged_count(self) -> int:
        return sum(1 for app in self.apps if app.findings)

    def summary(self) -> dict:
        return {
            "total": len(self.apps),
            "critical": self.count_by_risk(Risk.CRITICAL),
            "high": self.count_by_risk(Risk.HIGH),
            "medium": self.count_by_risk(Risk.MEDIUM),
            "low": self.count_by_risk(Risk.LOW),
            "malware": self.malware_count,
            "with_findings": self.flagged_count,
            "failed": len(self.failures),
        }

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "device": self.device_info.to_dict() if self.device_info else None,
            "summary": self.summary(),
            "device_findings": [f.to_dict() for f in self.device_findings],
            "apps": [app.to_dict() for app in self.apps],
            "failures": [f.to_dict() for f in self.failures],
            "scan_duration_seconds": round(self.scan_duration_seconds, 3),
        }


def write_json(report: ScanReport, path: Union[str, Path]) -> Path:
    """Write the report as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    logger.info(f"Report written to {path}")
    return path


def generate_report(report: ScanReport, locale: str = DEFAULT_LOCALE) -> str:
    """Generate a human-readable audit report."""
    summary = report.summary()
    lines = [
        "=" * 70,
        "APP & DEVICE AUDIT REPORT",
        "=" * 70,
        f"Mode: {label(report.mode, locale)}",
    ]

    if report.device_info:
        info = report.device_info
        lines.extend([
            f"Device: {info.model} ({info.manufacturer})",
            f"Android: {info.android_version} (API {info.sdk_int})",
            f"Security Patch: {info.security_patch}",
        ])

    lines.extend([
        f"Scan Duration: {report.scan_duration_seconds:.2f}s",
        "",
        "SUMMARY",
        "-" * 70,
        f"  Applications: {summary['total']}",
        f"  {label(Risk.CRITICAL, locale)}: {summary['critical']}",
        f"  {label(Risk.HIGH, locale)}: {summary['high']}",
        f"  {label(Risk.MEDIUM, locale)}: {summary['medium']}",
        f"  {label(Risk.LOW, locale)}: {summary['low']}",
        f"  With findings: {summary['with_findings']}",
    ])
    if summary["malware"]:
        lines.append(f"  Known malware: {summary['malware']}")
    if summary["failed"]:
        lines.append(f"  Not audited: {summary['failed']}")
    lines.append("")

    if report.device_findings:
        lines.append("DEVICE FINDINGS")
        lines.append("-" * 70)
        for finding in report.device_findings:
            lines.append(f"  [{finding.weight:>3}] {finding.title}: {finding.description}")
        lines.append("")

    if report.apps:
        lines.append("APPLICATIONS")
        lines.append("-" * 70)

        for app in report.apps:
            lines.append(f"\n[{label(app.risk, locale)}] {app.app_name} ({app.package_name})")
            lines.append(f"  Risk Score: {app.risk_score}/100")
            lines.append(f"  Version: {app.version_name}  Source: {label(app.install_source, locale)}")

            dangerous = len(app.dangerous_permissions)
            if dangerous:
                lines.append(f"  Dangerous Permissions: {dangerous}")

            if app.findings:
                top = sorted(app.findings, key=lambda f: f.weight, reverse=True)[:TOP_FINDINGS_PER_APP]
                lines.append("  Findings:")
                for finding in top:
                    lines.append(f"    - {finding.title} ({finding.weight} pts): {finding.description}")
                if len(app.findings) > TOP_FINDINGS_PER_APP:
                    lines.append(f"    ... and {len(app.findings) - TOP_FINDINGS_PER_APP} more")

    lines.append("")
    lines.append("=" * 70)

    return "\n".join(lines)
