"""
Risk Scoring

Two independent scoring strategies behind one "classify" capability:

- LayeredRiskPolicy: tiers used by the App Auditor (four tiers).
- PermissionRiskPolicy: a standalone permission / install-source scorer
  with its own weights and three tiers (no CRITICAL).

Their thresholds and weights are deliberately kept separate.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..constants import INTERNET_PERMISSION
from ..models import AppPermission, InstallSource, Risk
from .exclusions import is_system_overlay_or_resource, is_system_path

MIN_SCORE = 0
MAX_SCORE = 100


class ScoreAggregation(Enum):
    """How layer contributions and findings are summed into the score."""

    # Each finding counted once, plus 12 per dangerous permission
    SINGLE = "single"
    # Direct layer contributions are added again through the findings sum
    LEGACY_DOUBLE = "double"


@dataclass(frozen=True)
class ScoringInput:
    """Everything a policy may look at when scoring one package."""
    package_name: str
    permissions: tuple[AppPermission, ...]
    install_source: InstallSource
    is_system_app: bool
    archive_path: Optional[str]
    layered_score: int


class RiskClassifier(ABC):
    """Maps a numeric score to a risk tier."""

    name: str = ""
    # (minimum score, tier), highest first; anything below is LOW
    thresholds: tuple[tuple[int, Risk], ...] = ()

    @staticmethod
    def clamp(score: int) -> int:
        return max(MIN_SCORE, min(MAX_SCORE, score))

    def classify(self, score: int) -> Risk:
        score = self.clamp(score)
        for minimum, risk in self.thresholds:
            if score >= minimum:
                return risk
        return Risk.LOW

    @property
    def tiers(self) -> list[Risk]:
        return [risk for _, risk in self.thresholds] + [Risk.LOW]

    @abstractmethod
    def evaluate(self, scoring_input: ScoringInput) -> tuple[int, Risk]:
        """Final (score, tier) for one audited package."""


class LayeredRiskPolicy(RiskClassifier):
    """Tiering of the layered App Auditor."""

    name = "layered"
    thresholds = (
        (80, Risk.CRITICAL),
        (60, Risk.HIGH),
        (30, Risk.MEDIUM),
    )

    def evaluate(self, scoring_input: ScoringInput) -> tuple[int, Risk]:
        score = self.clamp(scoring_input.layered_score)
        return score, self.classify(score)


class PermissionRiskPolicy(RiskClassifier):
    """
    Alternate scorer over permissions and install source.

    Usage:
        policy = PermissionRiskPolicy()
        score, risk = policy.score(permissions, InstallSource.UNKNOWN, has_internet=True)
    """

    name = "permission"
    thresholds = (
        (70, Risk.HIGH),
        (40, Risk.MEDIUM),
    )

    # Checked in order; first matching token decides the weight
    PERMISSION_WEIGHTS = (
        ("LOCATION", 30),
        ("CONTACT", 30),
        ("AUDIO", 25),
        ("CAMERA", 25),
        ("PHONE", 20),
    )
    DEFAULT_PERMISSION_WEIGHT = 10
    INTERNET_WEIGHT = 20
    INSTALL_SOURCE_PENALTIES = {
        InstallSource.UNKNOWN: 30,
        InstallSource.SIDELOAD: 20,
        InstallSource.ADB: 15,
    }

    def permission_weight(self, permission: AppPermission) -> int:
        for token, weight in self.PERMISSION_WEIGHTS:
            if token in permission.name:
                return weight
        return self.DEFAULT_PERMISSION_WEIGHT

    def score(
        self,
        permissions: list[AppPermission],
        install_source: InstallSource,
        has_internet: bool,
        is_system_app: bool = False,
        archive_path: Optional[str] = None,
        package_name: Optional[str] = None,
    ) -> tuple[int, Risk]:
        """Score one package; excluded overlay/framework packages are 0 / LOW."""
        if is_system_overlay_or_resource(package_name, archive_path):
            return 0, Risk.LOW

        score = sum(self.permission_weight(p) for p in permissions if p.dangerous)

        if has_internet:
            score += self.INTERNET_WEIGHT

        if not is_system_app and not is_system_path(archive_path):
            score += self.INSTALL_SOURCE_PENALTIES.get(install_source, 0)

        score = self.clamp(score)
        return score, self.classify(score)

    def evaluate(self, scoring_input: ScoringInput) -> tuple[int, Risk]:
        return self.score(
            list(scoring_input.permissions),
            scoring_input.install_source,
            has_internet=has_internet_permission(scoring_input.permissions),
            is_system_app=scoring_input.is_system_app,
            archive_path=scoring_input.archive_path,
            package_name=scoring_input.package_name,
        )


def has_internet_permission(permissions: Iterable[AppPermission]) -> bool:
    return any(p.name == INTERNET_PERMISSION for p in permissions)


POLICIES: dict[str, type[RiskClassifier]] = {
    LayeredRiskPolicy.name: LayeredRiskPolicy,
    PermissionRiskPolicy.name: PermissionRiskPolicy,
}


def get_policy(name: str) -> RiskClassifier:
    """Instantiate a scoring policy by name."""
    try:
        return POLICIES[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown scoring policy: {name}. Valid policies: {', '.join(POLICIES)}")
