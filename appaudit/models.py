"""Core data models for the audit engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .constants import DANGEROUS_PERMISSION_KEYWORDS


class Risk(Enum):
    """Risk tiers, ordered from most to least severe."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def order(self) -> int:
        """Numeric severity for comparison (LOW = 0)."""
        return len(Risk) - 1 - list(Risk).index(self)

    def __lt__(self, other: Risk) -> bool:
        if not isinstance(other, Risk):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: Risk) -> bool:
        if not isinstance(other, Risk):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other: Risk) -> bool:
        if not isinstance(other, Risk):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other: Risk) -> bool:
        if not isinstance(other, Risk):
            return NotImplemented
        return self.order >= other.order


class InstallSource(Enum):
    """Channel through which a package was installed."""

    PLAY_STORE = "play_store"
    AMAZON = "amazon"
    SAMSUNG = "samsung"
    ADB = "adb"
    SYSTEM = "system"
    UNKNOWN = "unknown"
    SIDELOAD = "sideload"


class AuditMode(Enum):
    """QUICK skips the archive integrity and IoC layers."""

    QUICK = "quick"
    FULL = "full"

    @classmethod
    def from_string(cls, value: str) -> AuditMode:
        """Create AuditMode from string value."""
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Invalid audit mode: {value}")


@dataclass(frozen=True)
class ExportedReceiver:
    """Exported broadcast receiver and the permission it requires."""
    name: str
    permission: Optional[str] = None


@dataclass
class PackageRecord:
    """Installed package metadata as supplied by a PackageMetadataProvider."""
    package_name: str
    label: str
    version_name: Optional[str]
    permissions: list[str]
    certificates: list[bytes]
    first_install_time: datetime
    source_dir: Optional[str] = None
    receivers: list[ExportedReceiver] = field(default_factory=list)
    installer: Optional[str] = None
    is_system: bool = False


@dataclass(frozen=True)
class AppPermission:
    name: str
    dangerous: bool

    @classmethod
    def from_name(cls, name: str) -> AppPermission:
        return cls(name=name, dangerous=is_dangerous_permission(name))

    def to_dict(self) -> dict:
        return {"name": self.name, "dangerous": self.dangerous}


def is_dangerous_permission(permission: str) -> bool:
    """A permission is dangerous if it mentions any sensitive capability keyword."""
    return any(keyword in permission for keyword in DANGEROUS_PERMISSION_KEYWORDS)


@dataclass(frozen=True)
class AuditFinding:
    """A named, weighted observation about a package or the device."""
    title: str
    description: str
    weight: int

    def __post_init__(self) -> None:
        if self.weight < 0:
            raise ValueError(f"Finding weight must be >= 0, got {self.weight}")

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "weight": self.weight}


@dataclass
class SecurityCheckResult:
    """Findings and direct score contribution of one detection layer."""
    findings: list[AuditFinding] = field(default_factory=list)
    score: int = 0

    def add(self, finding: AuditFinding) -> None:
        self.findings.append(finding)
        self.score += finding.weight


@dataclass(frozen=True)
class AppAudit:
    """Audit result for one installed application."""
    app_name: str
    package_name: str
    version_name: str
    is_system_app: bool
    install_source: InstallSource
    permissions: tuple[AppPermission, ...]
    findings: tuple[AuditFinding, ...]
    risk_score: int
    risk: Risk

    @property
    def dangerous_permissions(self) -> list[AppPermission]:
        return [p for p in self.permissions if p.dangerous]

    def to_dict(self) -> dict:
        return {
            "app_name": self.app_name,
            "package_name": self.package_name,
            "version_name": self.version_name,
            "is_system_app": self.is_system_app,
            "install_source": self.install_source.value,
            "permissions": [p.to_dict() for p in self.permissions],
            "findings": [f.to_dict() for f in self.findings],
            "risk_score": self.risk_score,
            "risk": self.risk.value,
        }


@dataclass(frozen=True)
class DeviceInfo:
    """Snapshot of the audited device."""
    manufacturer: str
    model: str
    android_version: str
    sdk_int: int
    security_patch: str = "N/A"

    def to_dict(self) -> dict:
        return {
            "manufacturer": self.manufacturer,
            "model": self.model,
            "android_version": self.android_version,
            "sdk_int": self.sdk_int,
            "security_patch": self.security_patch,
        }


@dataclass(frozen=True)
class MalwareMatch:
    name: str


@dataclass(frozen=True)
class TrackerMatch:
    name: str
    risk_score: int

    def __post_init__(self) -> None:
        if self.risk_score < 0:
            raise ValueError(f"Tracker risk score must be >= 0, got {self.risk_score}")


@dataclass(frozen=True)
class PackageFailure:
    """A package that could not be audited and was dropped from the results."""
    package_name: str
    reason: str

    def to_dict(self) -> dict:
        return {"package_name": self.package_name, "reason": self.reason}
