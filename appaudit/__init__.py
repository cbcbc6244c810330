"""
Android App & Device Audit Engine

Offline, rule-based triage of installed applications and device
security settings:
- Layered app auditing (signatures, trackers, heuristics, archive integrity)
- Device security checks (lock screen, root, debugging, app verification)
- Risk scoring with swappable policies
"""

from pathlib import Path

# Auto-load .env from config/ directory
from dotenv import load_dotenv

_config_dir = Path(__file__).parent.parent / "config"
_env_file = _config_dir / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Fall back to .env.example for defaults
    _env_example = _config_dir / ".env.example"
    if _env_example.exists():
        load_dotenv(_env_example)

from .config import AuditConfig, get_config, set_config
from .models import AppAudit, AuditFinding, AuditMode, InstallSource, PackageRecord, Risk
from .report import ScanReport, generate_report, write_json
from .scanner import AuditScanner, PackageOutcome

__version__ = "0.1.0"

__all__ = [
    "AuditConfig",
    "get_config",
    "set_config",
    "AppAudit",
    "AuditFinding",
    "AuditMode",
    "InstallSource",
    "PackageRecord",
    "Risk",
    "ScanReport",
    "generate_report",
    "write_json",
    "AuditScanner",
    "PackageOutcome",
]
