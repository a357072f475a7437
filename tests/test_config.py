"""Tests for chunkscribe.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from chunkscribe.config import (
    CONFIG_FILENAME,
    ChunkscribeConfig,
    create_default_config,
    find_config_file,
    load_config,
    merge_config,
    read_config_file,
    write_config,
)
from chunkscribe.exceptions import ConfigError


class TestChunkscribeConfig:
    def test_defaults(self) -> None:
        config = ChunkscribeConfig()
        assert config.language == "ru"
        assert config.segment_length == 600
        assert config.backend == "openai"
        assert config.model is None
        assert config.use_cache is True

    def test_invalid_backend_raises(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(backend="cpp")

    def test_non_positive_segment_length_raises(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(segment_length=0)

    def test_blank_language_raises(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(language="  ")

    def test_output_dir_defaults_to_input_stem(self, tmp_path: Path) -> None:
        config = ChunkscribeConfig()
        assert config.resolve_output_dir(tmp_path / "talk.m4a") == tmp_path / "talk"

    def test_explicit_output_dir(self, tmp_path: Path) -> None:
        config = ChunkscribeConfig(output_dir=tmp_path / "elsewhere")
        assert config.resolve_output_dir(tmp_path / "talk.m4a") == tmp_path / "elsewhere"


class TestMergeConfig:
    def test_overrides_take_precedence(self) -> None:
        merged = merge_config({"language": "en", "backend": "faster"}, {"language": "de"})
        assert merged == {"language": "de", "backend": "faster"}

    def test_none_does_not_override(self) -> None:
        merged = merge_config({"language": "en"}, {"language": None, "model": None})
        assert merged == {"language": "en"}

    def test_false_overrides(self) -> None:
        assert merge_config({"use_cache": True}, {"use_cache": False}) == {"use_cache": False}


class TestLoadConfig:
    def test_without_file(self) -> None:
        config = load_config(search=False)
        assert config.language == "ru"
        assert config.config_path is None

    def test_file_then_overrides(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("language: en\nsegment_length: 300\n")

        config = load_config(config_file, {"segment_length": 120})

        assert config.language == "en"
        assert config.segment_length == 120
        assert config.config_path == config_file

    def test_found_by_search(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("backend: faster\n")
        nested = tmp_path / "recordings" / "2025"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert load_config().backend == "faster"

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("segment_length: -5\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(config_file)

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("language: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_file)

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yaml")


class TestConfigFiles:
    def test_find_walks_up_from_start(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("language: en\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == config_file.resolve()

    def test_empty_file_is_empty_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("")
        assert read_config_file(config_file) == {}

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / CONFIG_FILENAME
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            read_config_file(config_file)

    def test_write_default_config_round_trips(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / CONFIG_FILENAME
        write_config(create_default_config(), path)

        with open(path) as f:
            raw = yaml.safe_load(f)

        assert raw["language"] == "ru"
        assert raw["segment_length"] == 600
        assert load_config(path).backend == "openai"
