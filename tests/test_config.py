"""Tests for environment configuration."""

from pathlib import Path

from skill_assessment.config import (
    _mask_api_key,
    get_api_key,
    get_catalog_path,
    get_model,
    get_temperature,
    is_ai_configured,
)


class TestApiKey:
    def test_masked(self):
        assert _mask_api_key("sk-test-1234567890") == "sk-t...7890"
        assert _mask_api_key("short") == "***"

    def test_unconfigured(self):
        assert get_api_key() == ""
        assert not is_ai_configured()

    def test_local_endpoint_gets_placeholder(self, monkeypatch):
        monkeypatch.setenv("LLM_BASE_URL", "http://localhost:1234/v1")
        assert get_api_key() == "local"
        assert is_ai_configured()


class TestModel:
    def test_precedence(self, monkeypatch):
        """LLM_MODEL wins over OPENAI_MODEL."""
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        assert get_model() == "gpt-4o-mini"
        monkeypatch.setenv("LLM_MODEL", "qwen2.5")
        assert get_model() == "qwen2.5"

    def test_defaults(self, monkeypatch):
        assert get_model() == "gpt-4o"
        monkeypatch.setenv("LLM_BASE_URL", "http://localhost:1234/v1")
        assert get_model() == "local"

    def test_temperature(self, monkeypatch):
        assert get_temperature() == 0.3
        monkeypatch.setenv("OPENAI_TEMPERATURE", "0.7")
        assert get_temperature() == 0.7


def test_catalog_path(monkeypatch):
    assert get_catalog_path() is None
    monkeypatch.setenv("ASSESSMENT_CONFIG", "configs/week-1.yaml")
    assert get_catalog_path() == Path("configs/week-1.yaml")
