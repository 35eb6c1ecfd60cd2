import copy
import os
from pathlib import Path
from typing import Optional

import yaml

from prsieve_core.file_filter import FileFilterOptions
from prsieve_core.models import ChecksPolicy, ConfidencePolicy, DedupePolicy, PromptsPolicy, ReviewPolicy

PROVIDERS = ("openai", "azure-openai", "anthropic")

DEFAULT_CONFIG: dict = {
    "provider": "openai",
    "model": None,  # None = provider default
    "max_input_tokens": None,  # None = no prompt budget guardrail
    "max_diff_chars": 60000,
    "checks": {"bugs": True, "performance": True, "best_practices": True},
    "modified_lines_only": True,
    "confidence": {"enabled": False, "minimum": 0.0},
    "dedupe_across_files": {"enabled": False, "threshold": 0},
    "prompts": {"additional": [], "system_prompt": None},
    "system_prompt_file": None,  # path to a file whose content replaces the built-in reviewer persona
    "files": {"extensions": None, "extension_excludes": None, "include": None, "exclude": None},
    "store": "noop",
    "store_path": ".prsieve.db",
}

# Sections merged key-by-key so a config file can override a single flag.
_NESTED_SECTIONS = ("checks", "confidence", "dedupe_across_files", "prompts", "files")


def load_config(config_path: str = ".prsieve.yml", overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prsieve.yml in the current directory
      3. Caller overrides (None values are ignored)
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping at the top level.")
        _merge(config, file_config)

    if overrides:
        _merge(config, {k: v for k, v in overrides.items() if v is not None})

    if config["provider"] not in PROVIDERS:
        raise ValueError(f"provider must be one of {', '.join(PROVIDERS)}, got {config['provider']!r}")

    # Resolve credentials from environment variables
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["azure_openai_key"] = os.environ.get("AZURE_OPENAI_KEY")
    config["azure_openai_endpoint"] = os.environ.get("AZURE_OPENAI_ENDPOINT")
    config["azure_openai_deployment"] = os.environ.get("AZURE_OPENAI_DEPLOYMENT")
    config["azure_openai_api_version"] = os.environ.get("AZURE_OPENAI_API_VERSION")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

    return config


def _merge(config: dict, updates: dict) -> None:
    for key, value in updates.items():
        if key in _NESTED_SECTIONS and isinstance(value, dict):
            config[key] = {**config.get(key, {}), **value}
        else:
            config[key] = value


def build_policy(config: dict) -> ReviewPolicy:
    """Build the immutable ``ReviewPolicy`` for a run from a loaded config dict."""
    checks = config["checks"]
    confidence = config["confidence"]
    dedupe = config["dedupe_across_files"]
    prompts = config["prompts"]

    minimum = float(confidence.get("minimum", 0.0))
    if not 0.0 <= minimum <= 1.0:
        raise ValueError(f"confidence.minimum must be between 0 and 1, got {minimum}")
    threshold = dedupe.get("threshold", 0)
    if threshold < 0:
        raise ValueError(f"dedupe_across_files.threshold must be >= 0, got {threshold}")

    return ReviewPolicy(
        checks=ChecksPolicy(
            bugs=bool(checks.get("bugs", True)),
            performance=bool(checks.get("performance", True)),
            best_practices=bool(checks.get("best_practices", True)),
        ),
        modified_lines_only=bool(config["modified_lines_only"]),
        confidence=ConfidencePolicy(enabled=bool(confidence.get("enabled", False)), minimum=minimum),
        dedupe_across_files=DedupePolicy(enabled=bool(dedupe.get("enabled", False)), threshold=threshold),
        prompts=PromptsPolicy(
            additional=tuple(prompts.get("additional") or ()),
            system_prompt=load_system_prompt(config),
        ),
    )


def load_system_prompt(config: dict) -> Optional[str]:
    """
    Resolve the reviewer persona.

    ``system_prompt_file`` (relative to cwd) wins over an inline
    ``prompts.system_prompt``; None means the provider's built-in persona.
    """
    custom_path = config.get("system_prompt_file")
    if custom_path:
        p = Path(custom_path)
        if not p.exists():
            raise FileNotFoundError(f"System prompt file not found: {custom_path}")
        return p.read_text()
    return config["prompts"].get("system_prompt")


def build_filter_options(config: dict) -> FileFilterOptions:
    files = config["files"]
    return FileFilterOptions(
        extensions=files.get("extensions"),
        extension_excludes=files.get("extension_excludes"),
        include=files.get("include"),
        exclude=files.get("exclude"),
    )
