#!/usr/bin/env python3
"""
Tests for configuration loading.
"""

from pathlib import Path

from feediant.config import AppConfig, CachePolicy, load_config, parse_exts, parse_media_paths


def test_media_paths_split_on_double_colon():
	assert parse_media_paths("/srv/books::/srv/shows") == [Path("/srv/books"), Path("/srv/shows")]
	assert parse_media_paths("") == []
	assert parse_media_paths(["/a", " ", "/b"]) == [Path("/a"), Path("/b")]


def test_relative_media_path_resolved():
	assert parse_media_paths("./media") == [Path("./media").resolve()]


def test_parse_exts_normalizes():
	assert parse_exts([".MP3", "m4b", "", "mp4"]) == {"mp3", "m4b", "mp4"}


def test_defaults():
	config = load_config(environ={})
	assert config.media_paths == []
	assert config.supported_extensions == {"mp3", "m4b", "mp4", "m4v"}
	assert config.ignore_markers == ("@eaDir", "#recycle")
	assert config.scan_concurrency == 10
	assert config.metadata_policy == CachePolicy(ttl=30 * 24 * 3600, swr=12 * 3600)
	assert config.matching_policy == CachePolicy(ttl=24 * 3600, swr=36 * 3600)


def test_yaml_file_and_environment(tmp_path: Path):
	config_path = tmp_path / "feediant.yaml"
	config_path.write_text(
		"media_paths:\n  - /from/file\n"
		"data_path: /file/data\n"
		"extensions: [mp3]\n"
		"metadata_cache:\n  ttl: 60\n",
		encoding="utf-8",
	)
	config = load_config(config_path, environ={})
	assert config.media_paths == [Path("/from/file")]
	assert config.data_path == Path("/file/data")
	assert config.supported_extensions == {"mp3"}
	assert config.metadata_policy.ttl == 60
	assert config.metadata_policy.swr == 12 * 3600

	overridden = load_config(config_path, environ={"MEDIA_PATHS": "/env/a::/env/b", "DATA_PATH": "/env/data"})
	assert overridden.media_paths == [Path("/env/a"), Path("/env/b")]
	assert overridden.data_path == Path("/env/data")


def test_missing_config_file_uses_defaults(tmp_path: Path):
	assert load_config(tmp_path / "absent.yaml", environ={}).supported_extensions == {"mp3", "m4b", "mp4", "m4v"}


def test_cache_file_locations(tmp_path: Path):
	config = AppConfig(data_path=tmp_path)
	assert config.cache_path == tmp_path.resolve() / "cache.db"
	assert config.database_path == tmp_path.resolve() / "sqlite.db"
