"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from approvalflow.core.config import AppSettings, CacheConfig, NotifierConfig, WorkflowConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.notifier.provider == "log"
    assert settings.dynamodb.table_prefix == "approvalflow"


def test_workflow_config_defaults():
    config = WorkflowConfig()
    assert config.lock_timeout_seconds == 30.0
    assert config.notes_max_length == 1000
    assert config.vp_level == 10
    assert config.it_review_forms == ["010", "011", "012", "009", "014", "026"]
    assert "010" not in config.sub_department_required_forms


def test_cache_ttl_is_five_minutes():
    assert CacheConfig().ttl_seconds == 300


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("APPROVALFLOW_WORKFLOW_LOCK_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("APPROVALFLOW_NOTIFY_PROVIDER", "ses")
    assert WorkflowConfig().lock_timeout_seconds == 2.5
    assert NotifierConfig().provider == "ses"
