"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from pathlib import Path

from payroll_report.core.config import AppSettings, IngestConfig, RenderConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.storage_backend == "memory"
    assert settings.redis.namespace == "payroll"


def test_ingest_config_defaults():
    config = IngestConfig()
    assert config.chunk_size == 100
    assert config.required_columns == ["Name", "Employee No"]
    assert config.duplicate_sample_size == 10


def test_render_config_defaults():
    config = RenderConfig()
    assert config.max_column_width == 50
    assert config.min_column_width == 10
    assert config.width_sample_rows == 100


def test_env_override(monkeypatch):
    monkeypatch.setenv("PAYROLL_INGEST_CHUNK_SIZE", "25")
    monkeypatch.setenv("PAYROLL_STORAGE_BACKEND", "dynamodb")
    assert IngestConfig().chunk_size == 25
    assert AppSettings().storage_backend == "dynamodb"


def test_components_csv_override(monkeypatch, tmp_path):
    assert AppSettings().components_csv == Path("config/components.csv")
    monkeypatch.setenv("PAYROLL_COMPONENTS_CSV", str(tmp_path / "registry.csv"))
    assert AppSettings().components_csv == tmp_path / "registry.csv"
