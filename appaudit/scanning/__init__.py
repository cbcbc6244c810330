"""
Scanning Module

Layered app auditing, device auditing and risk scoring.
"""

from .app_auditor import AppAuditor, is_debug_certificate
from .exclusions import is_system_overlay_or_resource, is_system_path
from .permission_analyzer import PermissionAnalyzer, RISKY_COMBINATIONS
from .reference_db import LocalReferenceDatabase, ReferenceDatabase, load_default
from .risk_scoring import (
    LayeredRiskPolicy,
    PermissionRiskPolicy,
    RiskClassifier,
    ScoreAggregation,
    ScoringInput,
    get_policy,
)
from .system_auditor import SystemAuditor

__all__ = [
    "AppAuditor",
    "is_debug_certificate",
    "is_system_overlay_or_resource",
    "is_system_path",
    "PermissionAnalyzer",
    "RISKY_COMBINATIONS",
    "ReferenceDatabase",
    "LocalReferenceDatabase",
    "load_default",
    "RiskClassifier",
    "LayeredRiskPolicy",
    "PermissionRiskPolicy",
    "ScoreAggregation",
    "ScoringInput",
    "get_policy",
    "SystemAuditor",
]
