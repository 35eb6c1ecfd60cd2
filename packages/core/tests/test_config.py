"""Tests for configuration loading."""

import pytest

from prsieve_core.config import build_filter_options, build_policy, load_config, load_system_prompt
from prsieve_core.models import ReviewPolicy


@pytest.fixture(autouse=True)
def _clear_credentials(monkeypatch):
    for var in (
        "OPENAI_API_KEY",
        "AZURE_OPENAI_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_DEPLOYMENT",
        "AZURE_OPENAI_API_VERSION",
        "ANTHROPIC_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["provider"] == "openai"
    assert config["model"] is None
    assert config["max_diff_chars"] == 60000
    assert config["confidence"] == {"enabled": False, "minimum": 0.0}
    assert config["store"] == "noop"


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("provider: anthropic\nmax_diff_chars: 1000\n")
    config = load_config(config_path=str(cfg))
    assert config["provider"] == "anthropic"
    assert config["max_diff_chars"] == 1000


def test_nested_sections_merge_key_by_key(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("checks:\n  performance: false\nconfidence:\n  enabled: true\n")
    config = load_config(config_path=str(cfg))
    assert config["checks"] == {"bugs": True, "performance": False, "best_practices": True}
    assert config["confidence"] == {"enabled": True, "minimum": 0.0}


def test_overrides_win_over_config_file(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("provider: anthropic\n")
    config = load_config(config_path=str(cfg), overrides={"provider": "openai"})
    assert config["provider"] == "openai"


def test_none_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("provider: anthropic\n")
    config = load_config(config_path=str(cfg), overrides={"provider": None})
    assert config["provider"] == "anthropic"


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["provider"] == "openai"


def test_non_mapping_config_file_rejected(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="mapping"):
        load_config(config_path=str(cfg))


def test_unknown_provider_rejected(tmp_path):
    with pytest.raises(ValueError, match="provider must be one of"):
        load_config(config_path=str(tmp_path / "none.yml"), overrides={"provider": "gemini"})


def test_credentials_read_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://x.openai.azure.com")
    config = load_config(config_path=str(tmp_path / "none.yml"))
    assert config["openai_api_key"] == "sk-test"
    assert config["azure_openai_endpoint"] == "https://x.openai.azure.com"
    assert config["anthropic_api_key"] is None


def test_defaults_are_not_mutated_between_loads(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("prompts:\n  additional:\n    - Be terse\n")
    load_config(config_path=str(cfg))
    assert load_config(config_path=str(tmp_path / "none.yml"))["prompts"]["additional"] == []


class TestBuildPolicy:
    def test_defaults_match_policy_defaults(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "none.yml"))
        assert build_policy(config) == ReviewPolicy()

    def test_reads_every_section(self, tmp_path):
        cfg = tmp_path / ".prsieve.yml"
        cfg.write_text(
            "checks:\n  best_practices: false\n"
            "modified_lines_only: false\n"
            "confidence:\n  enabled: true\n  minimum: 0.7\n"
            "dedupe_across_files:\n  enabled: true\n  threshold: 4\n"
            "prompts:\n  additional:\n    - Prefer early returns\n"
        )
        policy = build_policy(load_config(config_path=str(cfg)))
        assert policy.checks.best_practices is False
        assert policy.modified_lines_only is False
        assert policy.confidence.enabled is True
        assert policy.confidence.minimum == 0.7
        assert policy.dedupe_across_files.threshold == 4
        assert policy.prompts.additional == ("Prefer early returns",)

    def test_minimum_out_of_range_rejected(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "none.yml"), overrides={"confidence": {"minimum": 1.5}})
        with pytest.raises(ValueError, match="confidence.minimum"):
            build_policy(config)

    def test_negative_threshold_rejected(self, tmp_path):
        config = load_config(
            config_path=str(tmp_path / "none.yml"), overrides={"dedupe_across_files": {"threshold": -1}}
        )
        with pytest.raises(ValueError, match="threshold"):
            build_policy(config)


class TestLoadSystemPrompt:
    def test_file_wins_over_inline(self, tmp_path):
        prompt_file = tmp_path / "persona.md"
        prompt_file.write_text("You review Rust.")
        config = load_config(
            config_path=str(tmp_path / "none.yml"),
            overrides={"system_prompt_file": str(prompt_file), "prompts": {"system_prompt": "inline"}},
        )
        assert load_system_prompt(config) == "You review Rust."
        assert build_policy(config).prompts.system_prompt == "You review Rust."

    def test_inline_used_without_file(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "none.yml"), overrides={"prompts": {"system_prompt": "inline"}})
        assert load_system_prompt(config) == "inline"

    def test_missing_file_raises(self, tmp_path):
        config = load_config(
            config_path=str(tmp_path / "none.yml"), overrides={"system_prompt_file": str(tmp_path / "missing.md")}
        )
        with pytest.raises(FileNotFoundError):
            load_system_prompt(config)

    def test_none_by_default(self, tmp_path):
        assert load_system_prompt(load_config(config_path=str(tmp_path / "none.yml"))) is None


def test_build_filter_options(tmp_path):
    cfg = tmp_path / ".prsieve.yml"
    cfg.write_text("files:\n  extensions: .py,.ts\n  exclude:\n    - 'vendor/**'\n")
    options = build_filter_options(load_config(config_path=str(cfg)))
    assert options.extensions == ".py,.ts"
    assert options.exclude == ["vendor/**"]
    assert options.include is None
