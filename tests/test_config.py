"""
tests/test_config.py

Tests for ServiceConfig defaults and environment parsing.
"""

import pytest

from docx_service.config import ServiceConfig

ENV_VARS = [
    "UPLOAD_DIR",
    "OUTPUT_DIR",
    "HOST",
    "PORT",
    "MAX_UPLOAD_BYTES",
    "RETENTION_DELAY_SEC",
    "ARTIFACT_TTL_SEC",
    "SWEEP_INTERVAL_SEC",
    "LOG_LEVEL",
    "RELOAD",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestServiceConfig:

    def test_defaults(self) -> None:
        config = ServiceConfig()

        assert config.upload_dir == "./uploads"
        assert config.output_dir == "./output"
        assert config.port == 8080
        assert config.max_file_size == 10 * 1024 * 1024
        assert config.retention_delay == 300.0
        assert config.artifact_ttl is None

    def test_from_env_without_variables_matches_defaults(self, clean_env) -> None:
        assert ServiceConfig.from_env() == ServiceConfig()

    def test_from_env_overrides(self, clean_env) -> None:
        clean_env.setenv("UPLOAD_DIR", "/srv/in")
        clean_env.setenv("OUTPUT_DIR", "/srv/out")
        clean_env.setenv("PORT", "9000")
        clean_env.setenv("MAX_UPLOAD_BYTES", "2048")
        clean_env.setenv("RETENTION_DELAY_SEC", "1.5")
        clean_env.setenv("ARTIFACT_TTL_SEC", "3600")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("RELOAD", "yes")

        config = ServiceConfig.from_env()

        assert config.upload_dir == "/srv/in"
        assert config.output_dir == "/srv/out"
        assert config.port == 9000
        assert config.max_file_size == 2048
        assert config.retention_delay == 1.5
        assert config.artifact_ttl == 3600.0
        assert config.log_level == "DEBUG"
        assert config.reload is True

    def test_blank_ttl_disables_sweeper(self, clean_env) -> None:
        clean_env.setenv("ARTIFACT_TTL_SEC", "  ")
        assert ServiceConfig.from_env().artifact_ttl is None

    def test_invalid_number_raises(self, clean_env) -> None:
        clean_env.setenv("PORT", "eighty")
        with pytest.raises(ValueError):
            ServiceConfig.from_env()

    def test_is_immutable(self) -> None:
        with pytest.raises(AttributeError):
            ServiceConfig().port = 1  # type: ignore[misc]
