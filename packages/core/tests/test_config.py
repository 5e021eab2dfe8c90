"""Tests for configuration loading."""

import pytest

from prbrief_core.config import load_config, load_guidelines, validate_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "anthropic"
    assert config["mode"] == "analysis"
    assert config["max_chars_per_file"] == 20000
    assert config["batch_limit"] == 60
    assert config["guidelines"] is None
    assert config["exclude"] == []
    assert config["review_draft_prs"] is False
    assert config["trigger_actions"] == ["opened"]


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text("model: openai\nmode: inline\nbatch_limit: 30\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "openai"
    assert config["mode"] == "inline"
    assert config["batch_limit"] == 30


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["model"] == "anthropic"


def test_exclude_patterns_loaded(tmp_path):
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text("exclude:\n  - migrations/\n  - '*.lock'\n")
    config = load_config(config_path=str(cfg))
    assert "migrations/" in config["exclude"]
    assert "*.lock" in config["exclude"]


def test_trigger_actions_loaded(tmp_path):
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text("trigger_actions: [opened, reopened]\n")
    assert load_config(config_path=str(cfg))["trigger_actions"] == ["opened", "reopened"]


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text("mode: summary\n")
    config = load_config(config_path=str(cfg), cli_overrides={"mode": None})
    assert config["mode"] == "summary"


def test_custom_guidelines_path(tmp_path):
    guidelines_file = tmp_path / "my-guidelines.md"
    guidelines_file.write_text("# Custom Guidelines\n- Rule 1")
    cfg = tmp_path / ".prbrief.yml"
    cfg.write_text(f"guidelines: {guidelines_file}\n")
    config = load_config(config_path=str(cfg))
    assert "Custom Guidelines" in load_guidelines(config)


def test_no_guidelines_when_unset(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert load_guidelines(config) is None


def test_missing_custom_guidelines_raises(tmp_path):
    config = {"guidelines": str(tmp_path / "does-not-exist.md")}
    with pytest.raises(FileNotFoundError):
        load_guidelines(config)


def test_env_vars_loaded(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oai-key")
    monkeypatch.setenv("OPENAI_BASE_URL", "https://openrouter.ai/api/v1")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "gh-token"
    assert config["anthropic_api_key"] == "ant-key"
    assert config["openai_api_key"] == "oai-key"
    assert config["openai_base_url"] == "https://openrouter.ai/api/v1"


def test_exclude_list_is_not_shared_reference(tmp_path):
    """Mutating one config's exclude list must not affect another."""
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["exclude"].append("migrations/")
    assert config_b["exclude"] == []


class TestValidateConfig:
    def test_valid_config_passes(self, tmp_path):
        validate_config(load_config(config_path=str(tmp_path / "nonexistent.yml")))

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError, match="Unknown model provider"):
            validate_config({"model": "gemini", "mode": "analysis"})

    @pytest.mark.parametrize("mode", ["summary", "analysis", "inline"])
    def test_every_mode_accepted(self, mode):
        validate_config({"model": "openai", "mode": mode})

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError, match="Unknown review mode"):
            validate_config({"model": "openai", "mode": "verbose"})
