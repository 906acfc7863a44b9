#!/usr/bin/env python3
"""
Ensure required dependencies are installed and available.
"""


def test_mutagen_available():
	from mutagen.id3 import ID3
	from mutagen.mp4 import MP4Tags

	assert ID3().version == (2, 4, 0)
	assert MP4Tags() is not None


def test_pillow_available():
	from PIL import Image

	assert Image.MIME["PNG"] == "image/png"


def test_yaml_available():
	import yaml

	assert yaml.safe_load("a: [1, 2]") == {"a": [1, 2]}


def test_fastapi_available():
	from fastapi import FastAPI

	assert FastAPI().title == "FastAPI"
