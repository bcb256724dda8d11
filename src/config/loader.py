"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Static defaults checked into the repo
#   2. .env file           - Local developer overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# The _deep_merge helper does recursive dict merging:
#   base = {"chunking": {"chunk_size": 6000}}
#   overrides = {"chunking": {"chunk_overlap": 200}}
#   result = {"chunking": {"chunk_size": 6000, "chunk_overlap": 200}}
#
# Only values that differ from the Settings defaults are treated as
# overrides, so a YAML value is not clobbered by an untouched default.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError

# (yaml section, yaml key) -> Settings field
_SETTINGS_MAP: dict[tuple[str, str], str] = {
    ("app", "host"): "app_host",
    ("app", "port"): "app_port",
    ("app", "env"): "app_env",
    ("logging", "level"): "log_level",
    ("chunking", "chunk_size"): "chunk_size",
    ("chunking", "chunk_overlap"): "chunk_overlap",
    ("embedding", "max_chunks"): "max_embedded_chunks",
    ("embedding", "timeout"): "embedding_timeout",
    ("classifier", "char_limit"): "classifier_char_limit",
    ("llm", "timeout"): "llm_timeout",
    ("storage", "fetch_timeout"): "fetch_timeout",
    ("storage", "document_db_path"): "document_db_path",
    ("storage", "file_store_dir"): "file_store_dir",
    ("prompts", "chat_prompt_path"): "chat_prompt_path",
    ("prompts", "analysis_prompt_path"): "analysis_prompt_path",
    ("prompts", "party_prompt_path"): "party_prompt_path",
    ("analysis", "party_char_limit"): "party_char_limit",
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file. A missing file yields
              Settings-only configuration.
        settings: Pre-built Settings; a fresh instance is read when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file exists but cannot be parsed or
            its top level is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Could not parse {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    settings = settings or Settings()
    defaults = Settings.model_fields

    env_overrides: dict = {}
    for (section, key), field in _SETTINGS_MAP.items():
        value = getattr(settings, field)
        yaml_has_key = key in (yaml_config.get(section) or {})
        if yaml_has_key and value == defaults[field].default:
            continue
        env_overrides.setdefault(section, {})[key] = value

    env_overrides.setdefault("llm", {})["available_providers"] = (
        settings.get_available_llm_providers()
    )

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
