"""
Permission Analyzer

Classifies requested Android permissions and flags the permission
combinations and capabilities typical of spyware, ransomware and
banking trojans.
"""

from dataclasses import dataclass

from ..constants import DEVICE_ADMIN_PERMISSION, EXCESSIVE_PERMISSION_COUNT
from ..models import AppPermission, AuditFinding, ExportedReceiver


@dataclass(frozen=True)
class PermissionCombination:
    """A set of capability tokens that is only suspicious when requested together."""
    tokens: tuple[str, ...]
    title: str
    description: str
    weight: int

    def matches(self, permission_names: list[str]) -> bool:
        return all(any(token in name for name in permission_names) for token in self.tokens)


# Dangerous permission combinations
RISKY_COMBINATIONS = [
    PermissionCombination(
        tokens=("CAMERA", "RECORD_AUDIO", "LOCATION"),
        title="Surveillance pattern",
        description="Typical spyware combination: camera + audio + location",
        weight=35,
    ),
    PermissionCombination(
        tokens=("READ_SMS", "READ_CONTACTS", "CALL_PHONE"),
        title="Full communications access",
        description="Complete control over SMS, contacts and calls",
        weight=30,
    ),
    PermissionCombination(
        tokens=("WRITE_EXTERNAL", "INTERNET", "REQUEST_INSTALL"),
        title="Ransomware profile",
        description="Can encrypt files, talk to remote hosts and install apps",
        weight=30,
    ),
    PermissionCombination(
        tokens=("SYSTEM_ALERT_WINDOW", "READ_SMS", "INTERNET"),
        title="Banking-trojan pattern",
        description="Can draw overlays, read SMS (2FA codes) and send data out",
        weight=35,
    ),
]


class PermissionAnalyzer:
    """
    Analyzes the permissions and receivers of a single package.

    Identifies:
    - Dangerous individual permissions
    - Risky permission combinations
    - Device-admin capable receivers
    - Over-privileged applications
    """

    def classify(self, permission_names: list[str]) -> list[AppPermission]:
        """Map requested permission names to AppPermission values."""
        return [AppPermission.from_name(name) for name in permission_names]

    def detect_combinations(self, permissions: list[AppPermission]) -> list[AuditFinding]:
        """Every combination rule is evaluated independently."""
        names = [p.name for p in permissions]
        return [
            AuditFinding(combo.title, combo.description, combo.weight)
            for combo in RISKY_COMBINATIONS
            if combo.matches(names)
        ]

    def detect_admin_capabilities(self, receivers: list[ExportedReceiver]) -> list[AuditFinding]:
        """One finding per package, however many receivers bind device admin."""
        admin_receivers = [r for r in receivers if r.permission == DEVICE_ADMIN_PERMISSION]
        if not admin_receivers:
            return []
        return [AuditFinding(
            "Device administrator capabilities",
            f"{len(admin_receivers)} receiver(s) can obtain device administrator privileges",
            30,
        )]

    def detect_excessive_permissions(self, permissions: list[AppPermission]) -> list[AuditFinding]:
        if len(permissions) > EXCESSIVE_PERMISSION_COUNT:
            return [AuditFinding(
                "Excessive permissions",
                f"Requests {len(permissions)} permissions (threshold {EXCESSIVE_PERMISSION_COUNT})",
                15,
            )]
        return []
