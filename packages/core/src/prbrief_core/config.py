import os
from pathlib import Path
from typing import Optional

import yaml

from prbrief_core.models import ReviewMode

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "model_name": None,  # None = provider default (see providers/*.py)
    "mode": ReviewMode.ANALYSIS.value,
    "max_chars_per_file": 20000,
    "batch_limit": 60,
    "temperature": None,
    "max_tokens": None,
    "guidelines": None,  # path to a Markdown file of team rules
    "exclude": [],  # fnmatch patterns or directory names, e.g. "migrations/", "*.min.js"
    "review_draft_prs": False,
    "trigger_actions": ["opened"],
}

# Secrets and endpoints are never read from the YAML file.
_ENV_KEYS = {
    "github_token": "GITHUB_TOKEN",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "openai_base_url": "OPENAI_BASE_URL",
}

_PROVIDERS = ("anthropic", "openai")


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str = ".prbrief.yml", cli_overrides: Optional[dict] = None) -> dict:
    """Build the effective configuration.

    Later layers win: built-in defaults, then the YAML file, then any CLI
    override that is not None. Credentials are taken from the environment.
    """
    config = {key: list(value) if isinstance(value, list) else value for key, value in DEFAULT_CONFIG.items()}
    config.update(_read_yaml(Path(config_path)))
    config.update({k: v for k, v in (cli_overrides or {}).items() if v is not None})
    config.update({key: os.environ.get(env) for key, env in _ENV_KEYS.items()})
    return config


def validate_config(config: dict) -> None:
    if config.get("model") not in _PROVIDERS:
        raise ValueError(f"Unknown model provider: {config.get('model')!r}. Choose 'anthropic' or 'openai'.")
    try:
        ReviewMode(config.get("mode"))
    except ValueError:
        choices = ", ".join(m.value for m in ReviewMode)
        raise ValueError(f"Unknown review mode: {config.get('mode')!r}. Choose one of: {choices}.")


def load_guidelines(config: dict) -> Optional[str]:
    """Return the text of the configured guidelines file, or None if unset.

    The path is relative to the working directory. A configured path that
    does not exist raises FileNotFoundError.
    """
    path = config.get("guidelines")
    if not path:
        return None
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Guidelines file not found: {path}")
    return p.read_text()
