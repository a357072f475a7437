"""
chunkscribe.config - YAML config loading, CLI override merging, validation.

Settings come from built-in defaults, then an optional chunkscribe.yaml,
then command-line flags, each layer overriding the one before.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, Field, field_validator

from chunkscribe.exceptions import ConfigError
from chunkscribe.io import read_text
from chunkscribe.media.ffmpeg import SEGMENT_LENGTH
from chunkscribe.transcribe.engine import BACKENDS

CONFIG_FILENAME = "chunkscribe.yaml"


class ChunkscribeConfig(BaseModel):
    """Resolved configuration for a transcription run."""

    language: str = "ru"
    segment_length: int = Field(default=SEGMENT_LENGTH, gt=0)

    backend: str = "openai"
    model: str | None = None

    output_dir: Path | None = None
    use_cache: bool = True

    config_path: Path | None = None

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in BACKENDS:
            raise ValueError(f"backend must be one of: {set(BACKENDS)}")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("language must not be empty")
        return v

    def resolve_output_dir(self, input_path: Path) -> Path:
        """Output directory for an input file: ``<input dir>/<input stem>`` by default."""
        if self.output_dir is not None:
            return self.output_dir
        return input_path.parent / input_path.stem


def find_config_file(start: Path | None = None) -> Path | None:
    """Find chunkscribe.yaml in ``start`` (default: cwd) or any parent."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict.

    Raises:
        ConfigError: If the file is missing, unparsable, or not a mapping
    """
    try:
        raw = yaml.safe_load(read_text(path)) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return raw


def merge_config(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge overrides onto a base config. None values do not override."""
    merged = base.copy()
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    search: bool = True,
) -> ChunkscribeConfig:
    """Load and validate configuration.

    Args:
        config_path: Explicit YAML file; searched for from cwd if None
        overrides: Values from the command line (None means "not given")
        search: Look for chunkscribe.yaml when no path is given

    Raises:
        ConfigError: If the file or the merged values are invalid
    """
    if config_path is None and search:
        config_path = find_config_file()

    raw_config = read_config_file(config_path) if config_path else {}
    merged = merge_config(raw_config, overrides or {})
    if config_path:
        merged["config_path"] = config_path

    try:
        return ChunkscribeConfig(**merged)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Default settings, as written by ``chunkscribe init``."""
    defaults = ChunkscribeConfig()
    return {
        "language": defaults.language,
        "segment_length": defaults.segment_length,
        "backend": defaults.backend,
        "model": defaults.model,
        "use_cache": defaults.use_cache,
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
