"""Configuration for ai-commits.

Configuration is read from a `.ai-commits.yaml` (or `.yml` / `.json`) file in
the repository root and merged over the defaults below. The Ollama host can
also be set with the OLLAMA_HOST environment variable or a `.env` file.
"""

import copy
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when the configuration cannot be loaded or is invalid."""

    pass


CONFIG_FILE_NAMES = [".ai-commits.yaml", ".ai-commits.yml", ".ai-commits.json"]

OLLAMA_HOST_ENV_VAR = "OLLAMA_HOST"


# ============================================================
# CONFIGURATION MODELS
# ============================================================


class LLMSettings(BaseModel):
    """Settings for the local model server."""

    provider: Literal["ollama", "openai-compatible"] = "ollama"
    base_url: str = "http://localhost:11434"
    model: str = "llama3.2:3b"
    timeout: float = Field(default=30.0, gt=0)
    pull_timeout: float = Field(default=300.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so endpoints can be appended."""
        if not v or not v.strip():
            raise ValueError("base_url cannot be empty")
        return v.strip().rstrip("/")

    @field_validator("model")
    @classmethod
    def model_must_not_be_empty(cls, v: str) -> str:
        """Ensure a model name is set."""
        if not v or not v.strip():
            raise ValueError("model cannot be empty")
        return v.strip()


class CommitFormatSettings(BaseModel):
    """Settings for the generated message."""

    max_length: int = Field(default=72, gt=0)
    include_body: bool = False


class ScopeRule(BaseModel):
    """Map files matching a glob pattern to a commit scope."""

    pattern: str
    scope: str


class ScopeDetectionSettings(BaseModel):
    """Settings for automatic scope detection."""

    enabled: bool = True
    rules: list[ScopeRule] = Field(default_factory=list)


class Config(BaseModel):
    """Complete ai-commits configuration."""

    llm: LLMSettings = Field(default_factory=LLMSettings)
    commit_format: CommitFormatSettings = Field(default_factory=CommitFormatSettings)
    scope_detection: ScopeDetectionSettings = Field(default_factory=ScopeDetectionSettings)


# ============================================================
# DEFAULTS
# ============================================================

DEFAULT_CONFIG: dict[str, Any] = {
    "llm": {
        "provider": "ollama",
        "base_url": "http://localhost:11434",
        "model": "llama3.2:3b",
        "timeout": 30.0,
        "pull_timeout": 300.0,
    },
    "commit_format": {
        "max_length": 72,
        "include_body": False,
    },
    "scope_detection": {
        "enabled": True,
        "rules": [
            {"pattern": "src/components/**", "scope": "components"},
            {"pattern": "src/lib/**", "scope": "lib"},
            {"pattern": "docs/**", "scope": "docs"},
            {"pattern": "*.test.*", "scope": "tests"},
            {"pattern": "package.json", "scope": "deps"},
        ],
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(data: dict) -> Config:
    """Validate a configuration dictionary.

    Args:
        data: Configuration values.

    Returns:
        The validated Config.

    Raises:
        ConfigError: If any value is invalid.
    """
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration:\n{e}")


def merge_config(user_config: Optional[dict]) -> Config:
    """Merge user configuration over the defaults.

    Lists (such as scope rules) replace the default list instead of
    extending it.

    Args:
        user_config: Partial configuration dictionary.

    Returns:
        The validated, merged Config.
    """
    merged = _deep_merge(DEFAULT_CONFIG, user_config or {})

    load_dotenv()
    env_host = os.getenv(OLLAMA_HOST_ENV_VAR)
    if env_host:
        merged["llm"]["base_url"] = env_host

    return validate_config(merged)


def find_config_file(directory: Path) -> Optional[Path]:
    """Find the first config file in a directory.

    Args:
        directory: Directory to search, usually the repository root.

    Returns:
        Path to the config file or None.
    """
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, falling back to defaults.

    Args:
        config_path: Explicit config file. A missing file means defaults.

    Returns:
        The effective Config.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    if config_path is None or not config_path.exists():
        return merge_config({})

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            # JSON is a subset of YAML, so .json files load the same way
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}")

    if not isinstance(user_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    return merge_config(user_config)


def config_to_yaml(config: Config) -> str:
    """Render a Config as YAML for display."""
    return yaml.dump(config.model_dump(), default_flow_style=False, sort_keys=False)
