"""
Tests for audit configuration

Run with: pytest tests/test_config.py -v
"""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from appaudit.config import AuditConfig, get_config, set_config
from appaudit.exceptions import ConfigurationError

AUDIT_ENV_VARS = (
    "AUDIT_MAX_WORKERS",
    "AUDIT_MODE",
    "AUDIT_SCORING_POLICY",
    "AUDIT_SCORE_AGGREGATION",
    "AUDIT_LOCALE",
    "AUDIT_LOG_LEVEL",
    "AUDIT_REFERENCE_DB",
    "AUDIT_OUTPUT_DIR",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every AUDIT_* variable, including ones loaded from config/.env."""
    for name in AUDIT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAuditConfig:
    """Tests for AuditConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = AuditConfig()

        assert config.max_workers == 4
        assert config.mode == "quick"
        assert config.scoring_policy == "layered"
        assert config.score_aggregation == "single"
        assert config.reference_db_path is None
        assert config.locale == "en"

    def test_normalizes_case(self):
        """Test that values are normalized before validation."""
        config = AuditConfig(mode="FULL", locale="ES", log_level="debug")

        assert config.mode == "full"
        assert config.locale == "es"
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("field,value", [
        ("mode", "deep"),
        ("scoring_policy", "bayesian"),
        ("score_aggregation", "triple"),
        ("locale", "fr"),
        ("log_level", "CHATTY"),
    ])
    def test_invalid_values(self, field, value):
        """Test that invalid values raise ConfigurationError naming the key."""
        with pytest.raises(ConfigurationError) as exc_info:
            AuditConfig(**{field: value})

        assert exc_info.value.config_key == field

    def test_invalid_workers(self):
        """Test that the worker pool needs at least one worker."""
        with pytest.raises(ConfigurationError):
            AuditConfig(max_workers=0)

    def test_from_env(self, clean_env, tmp_path):
        """Test loading configuration from AUDIT_* variables."""
        clean_env.setenv("AUDIT_MAX_WORKERS", "8")
        clean_env.setenv("AUDIT_MODE", "full")
        clean_env.setenv("AUDIT_SCORING_POLICY", "permission")
        clean_env.setenv("AUDIT_SCORE_AGGREGATION", "double")
        clean_env.setenv("AUDIT_LOCALE", "es")
        clean_env.setenv("AUDIT_REFERENCE_DB", str(tmp_path / "db.yaml"))
        clean_env.setenv("AUDIT_OUTPUT_DIR", str(tmp_path / "reports"))

        config = AuditConfig.from_env()

        assert config.max_workers == 8
        assert config.mode == "full"
        assert config.scoring_policy == "permission"
        assert config.score_aggregation == "double"
        assert config.locale == "es"
        assert config.reference_db_path == tmp_path / "db.yaml"
        assert config.output_dir == tmp_path / "reports"

    def test_from_env_defaults(self, clean_env):
        """Test that an empty environment gives the defaults."""
        config = AuditConfig.from_env()

        assert config.to_dict() == AuditConfig().to_dict()

    def test_from_env_bad_workers(self, clean_env):
        """Test that a non-integer worker count is a configuration error."""
        clean_env.setenv("AUDIT_MAX_WORKERS", "many")

        with pytest.raises(ConfigurationError, match="AUDIT_MAX_WORKERS"):
            AuditConfig.from_env()

    def test_to_dict(self):
        """Test configuration serialization."""
        config = AuditConfig(reference_db_path=Path("/tmp/db.yaml"))

        data = config.to_dict()

        assert data["concurrency"]["max_workers"] == 4
        assert data["scoring"] == {"mode": "quick", "policy": "layered", "aggregation": "single"}
        assert data["paths"]["reference_db"] == "/tmp/db.yaml"
        assert data["paths"]["output_dir"] is None

    def test_ensure_directories(self, tmp_path):
        """Test that the output directory is created on demand."""
        config = AuditConfig(output_dir=tmp_path / "out" / "reports")

        config.ensure_directories()

        assert (tmp_path / "out" / "reports").is_dir()


class TestGlobalConfig:
    """Tests for the global configuration accessors."""

    def test_set_and_get(self):
        """Test that set_config replaces the global configuration."""
        config = AuditConfig(max_workers=2)
        set_config(config)

        assert get_config() is config

    def test_lazy_from_env(self, clean_env):
        """Test that get_config builds from the environment when unset."""
        clean_env.setenv("AUDIT_LOCALE", "es")
        set_config(None)

        assert get_config().locale == "es"
