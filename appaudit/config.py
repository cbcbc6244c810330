"""Audit configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError

VALID_MODES = ("quick", "full")
VALID_POLICIES = ("layered", "permission")
VALID_AGGREGATIONS = ("single", "double")
VALID_LOCALES = ("en", "es")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AuditConfig:
    """Configuration for an audit run."""

    # Concurrency
    max_workers: int = 4

    # Scoring
    mode: str = "quick"
    scoring_policy: str = "layered"
    score_aggregation: str = "single"

    # Reference data (None = bundled sample database)
    reference_db_path: Optional[Path] = None

    # Output
    locale: str = "en"
    log_level: str = "INFO"
    output_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate values."""
        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be >= 1, got {self.max_workers}", "max_workers"
            )
        self.mode = self.mode.lower()
        self.scoring_policy = self.scoring_policy.lower()
        self.score_aggregation = self.score_aggregation.lower()
        self.locale = self.locale.lower()
        self.log_level = self.log_level.upper()

        for key, value, valid in (
            ("mode", self.mode, VALID_MODES),
            ("scoring_policy", self.scoring_policy, VALID_POLICIES),
            ("score_aggregation", self.score_aggregation, VALID_AGGREGATIONS),
            ("locale", self.locale, VALID_LOCALES),
            ("log_level", self.log_level, VALID_LOG_LEVELS),
        ):
            if value not in valid:
                raise ConfigurationError(
                    f"Invalid {key}: {value}. Valid values: {', '.join(valid)}", key
                )

    def ensure_directories(self) -> None:
        """Create the output directory if configured."""
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls) -> AuditConfig:
        """Load configuration from environment variables."""
        try:
            max_workers = int(os.getenv("AUDIT_MAX_WORKERS", "4"))
        except ValueError:
            raise ConfigurationError(
                f"AUDIT_MAX_WORKERS must be an integer, got {os.getenv('AUDIT_MAX_WORKERS')}",
                "max_workers",
            )

        config = cls(
            max_workers=max_workers,
            mode=os.getenv("AUDIT_MODE", "quick"),
            scoring_policy=os.getenv("AUDIT_SCORING_POLICY", "layered"),
            score_aggregation=os.getenv("AUDIT_SCORE_AGGREGATION", "single"),
            locale=os.getenv("AUDIT_LOCALE", "en"),
            log_level=os.getenv("AUDIT_LOG_LEVEL", "INFO"),
        )

        if env_db := os.getenv("AUDIT_REFERENCE_DB"):
            config.reference_db_path = Path(env_db)

        if env_output := os.getenv("AUDIT_OUTPUT_DIR"):
            config.output_dir = Path(env_output)

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            "concurrency": {
                "max_workers": self.max_workers,
            },
            "scoring": {
                "mode": self.mode,
                "policy": self.scoring_policy,
                "aggregation": self.score_aggregation,
            },
            "paths": {
                "reference_db": str(self.reference_db_path) if self.reference_db_path else None,
                "output_dir": str(self.output_dir) if self.output_dir else None,
            },
            "output": {
                "locale": self.locale,
                "log_level": self.log_level,
            },
        }


# Global default configuration
_default_config: Optional[AuditConfig] = None


def get_config() -> AuditConfig:
    """Get the global configuration, creating from environment if needed."""
    global _default_config
    if _default_config is None:
        _default_config = AuditConfig.from_env()
    return _default_config


def set_config(config: Optional[AuditConfig]) -> None:
    """Set (or reset with None) the global configuration."""
    global _default_config
    _default_config = config
