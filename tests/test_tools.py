#!/usr/bin/env python3
"""
Tests for the remote-tool handlers.
"""

import json
from pathlib import Path

from feediant.config import AppConfig
from feediant.tools import get_config_paths, search_media
from conftest import make_catalog, write_media


def test_search_media_returns_json_records(tmp_path: Path):
	write_media(tmp_path / "Chapter 1.mp3")
	write_media(tmp_path / "Chapter 2.mp3")
	write_media(tmp_path / "Intro.mp3")
	payload = json.loads(search_media(make_catalog([tmp_path]), "chapter", fields=["title"], limit=1))
	assert len(payload) == 1
	assert payload[0]["title"] == "Chapter 1.mp3"
	assert payload[0]["contentType"] == "audio/mpeg"
	assert "picture" not in payload[0]


def test_get_config_paths(tmp_path: Path):
	config = AppConfig(media_paths=[tmp_path / "books"], data_path=tmp_path / "data")
	payload = json.loads(get_config_paths(config))
	assert payload == {
		"mediaPaths": [str((tmp_path / "books").resolve())],
		"dataPath": str((tmp_path / "data").resolve()),
	}
