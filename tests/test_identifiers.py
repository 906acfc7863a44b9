#!/usr/bin/env python3
"""
Tests for content-addressed identifiers.
"""

import os
from pathlib import Path

from feediant.identifiers import id_of, normalize_path


def test_id_is_deterministic(tmp_path: Path):
	target = tmp_path / "book.m4b"
	assert id_of(target) == id_of(target)
	assert id_of(str(target)) == id_of(target)


def test_distinct_paths_get_distinct_ids(tmp_path: Path):
	ids = {id_of(tmp_path / f"track-{index}.mp3") for index in range(200)}
	assert len(ids) == 200


def test_id_uses_normalized_absolute_path(tmp_path: Path, monkeypatch):
	monkeypatch.chdir(tmp_path)
	assert id_of("media/../media/a.mp3") == id_of(tmp_path / "media" / "a.mp3")
	assert normalize_path("media/./a.mp3") == os.path.join(str(tmp_path), "media", "a.mp3")


def test_id_is_md5_hex(tmp_path: Path):
	value = id_of(tmp_path / "x.mp4")
	assert len(value) == 32
	assert all(char in "0123456789abcdef" for char in value)
