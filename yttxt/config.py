"""
yttxt.config - YAML config loading, environment overrides, validation.

Settings are resolved once at startup in increasing order of precedence:
built-in defaults, yttxt.yaml, environment variables (MODEL_PATH,
WHISPER_EXECUTABLE, WHISPER_LANG, WHISPER_THREAD_COUNT), then CLI flags.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from yttxt.exceptions import ConfigError

MODEL_NAME = "ggml-large-v3-turbo"
CONFIG_FILENAME = "yttxt.yaml"

DEFAULT_SILENCE_FILTER = (
    "silenceremove=start_periods=1:start_threshold=-50dB:"
    "stop_periods=-1:stop_duration=1:stop_threshold=-50dB"
)

# Environment variable -> config field
ENV_OVERRIDES: dict[str, str] = {
    "MODEL_PATH": "model_path",
    "WHISPER_EXECUTABLE": "whisper_executable",
    "WHISPER_LANG": "language",
    "WHISPER_THREAD_COUNT": "thread_count",
}


class CleanupRules(BaseModel):
    """Text substitutions applied to a transcript before delivery."""

    annotation_patterns: list[str] = Field(
        default_factory=lambda: [r"\[[^\[\]]*\]"],
    )
    filler_tokens: list[str] = Field(
        default_factory=lambda: ["嗯", "呃", "啊", "um", "uh"],
    )
    collapse_duplicates: bool = True

    @field_validator("annotation_patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid annotation pattern {pattern!r}: {e}") from e
        return v

    @field_validator("filler_tokens")
    @classmethod
    def validate_tokens(cls, v: list[str]) -> list[str]:
        tokens = [t.strip() for t in v]
        if any(not t for t in tokens):
            raise ValueError("filler_tokens must not contain empty entries")
        return tokens


class DeliveryConfig(BaseModel):
    """Where cleaned transcripts are sent."""

    enabled: bool = False
    sink: str = "apple-notes"
    folder: str = "Transcripts"
    notes_dir: Path = Path("notes")

    @field_validator("sink")
    @classmethod
    def validate_sink(cls, v: str) -> str:
        valid = {"none", "file", "apple-notes"}
        if v not in valid:
            raise ValueError(f"sink must be one of: {valid}")
        return v


class TranscriberConfig(BaseModel):
    """Resolved configuration for one yttxt invocation."""

    model_path: Path = Path("models") / f"{MODEL_NAME}.bin"
    whisper_executable: str = "whisper-cli"
    language: str = "Chinese"
    thread_count: int = Field(default=4, gt=0)
    beam_size: int = Field(default=6, gt=0)
    flash_attention: bool = True
    no_prints: bool = True
    translate: bool = False

    remove_silence: bool = False
    silence_filter: str = DEFAULT_SILENCE_FILTER

    audio_format: str = "bestaudio[ext=m4a]"
    cookies_from_browser: str | None = None

    output_dir: Path = Path(".")
    cache_mode: str = "presence"

    cleanup: CleanupRules = Field(default_factory=CleanupRules)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)

    config_path: Path | None = None

    @field_validator("cache_mode")
    @classmethod
    def validate_cache_mode(cls, v: str) -> str:
        valid = {"presence", "fingerprint"}
        if v not in valid:
            raise ValueError(f"cache_mode must be one of: {valid}")
        return v

    @field_validator("language", "whisper_executable")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect config values from the recognised environment variables.

    Empty variables are ignored, matching ``${VAR:-default}`` semantics.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for var, field in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            overrides[field] = value
    return overrides


def merge_config(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge overrides onto base. Nested sections are merged key by key."""
    merged = base.copy()
    for key, value in overrides.items():
        if key in ("cleanup", "delivery") and isinstance(value, dict):
            section = dict(merged.get(key) or {})
            section.update({k: v for k, v in value.items() if v is not None})
            merged[key] = section
        elif value is not None:
            merged[key] = value
    return merged


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return raw


def load_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: dict[str, Any] | None = None,
    search_dir: Path | None = None,
) -> TranscriberConfig:
    """Load and validate configuration.

    Args:
        config_file: Explicit YAML file; must exist if given
        environ: Environment mapping (defaults to os.environ)
        overrides: Values from CLI flags; None entries are ignored
        search_dir: Directory searched for yttxt.yaml when config_file is None

    Raises:
        ConfigError: If the file is missing/invalid or validation fails
    """
    raw: dict[str, Any] = {}
    if config_file is not None:
        if not config_file.exists():
            raise ConfigError(f"Config file not found: {config_file}")
    else:
        candidate = (search_dir or Path.cwd()) / CONFIG_FILENAME
        if candidate.exists():
            config_file = candidate

    if config_file is not None:
        raw = read_config_file(config_file)
        raw["config_path"] = config_file

    merged = merge_config(raw, env_overrides(environ))
    merged = merge_config(merged, overrides or {})

    try:
        return TranscriberConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict suitable for writing to yttxt.yaml."""
    config = TranscriberConfig()
    data = config.model_dump(mode="json", exclude={"config_path"})
    return data


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
