"""Tests for persisted chunker settings."""

from pathlib import Path

import toml

from tsgraph import config_manager
from tsgraph.config import DEFAULT_MAX_CONTEXT_SIZE, DEFAULT_OUTPUT_FILE, ChunkerSettings


def test_defaults_without_file(isolated_config: Path):
    settings = config_manager.load_config()

    assert settings.max_context_size == DEFAULT_MAX_CONTEXT_SIZE
    assert settings.output_file == DEFAULT_OUTPUT_FILE
    assert settings.ignore_paths == ["dist", ".next", ".git"]
    assert settings.graph_only_dirs == ["node_modules"]


def test_save_and_load_roundtrip(isolated_config: Path):
    saved = ChunkerSettings(max_context_size=500, output_file="out.jsonl", ignore_paths=["build"])

    assert config_manager.save_config(saved)
    assert isolated_config.exists()
    assert config_manager.load_config() == saved


def test_other_sections_preserved(isolated_config: Path):
    isolated_config.parent.mkdir(parents=True)
    isolated_config.write_text('[editor]\ntheme = "dark"\n')

    config_manager.save_config(ChunkerSettings(max_context_size=123))

    data = toml.loads(isolated_config.read_text())
    assert data["editor"] == {"theme": "dark"}
    assert data["chunker"]["max_context_size"] == 123


def test_invalid_values_fall_back(isolated_config: Path):
    isolated_config.parent.mkdir(parents=True)
    isolated_config.write_text('[chunker]\nmax_context_size = -5\nignore_paths = "dist"\noutput_file = "x.jsonl"\n')

    settings = config_manager.load_config()

    assert settings.max_context_size == DEFAULT_MAX_CONTEXT_SIZE
    assert settings.ignore_paths == ["dist", ".next", ".git"]
    assert settings.output_file == "x.jsonl"


def test_unreadable_file_gives_defaults(isolated_config: Path):
    isolated_config.parent.mkdir(parents=True)
    isolated_config.write_text("[chunker\nmax_context_size = ")

    assert config_manager.load_config() == ChunkerSettings()


def test_reset(isolated_config: Path):
    assert not config_manager.reset_config()

    config_manager.save_config(ChunkerSettings(max_context_size=42))
    assert config_manager.reset_config()
    assert config_manager.load_config().max_context_size == DEFAULT_MAX_CONTEXT_SIZE
