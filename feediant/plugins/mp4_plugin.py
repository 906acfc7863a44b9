#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from pathlib import Path

# PIP3 modules
from mutagen.mp4 import MP4, MP4Cover, MP4Tags

# local repo modules
from .base import Picture, RawTags, TagReaderPlugin

MP4_DIALECT = "iTunes"
_COVER_FORMATS = {
	MP4Cover.FORMAT_JPEG: "image/jpeg",
	MP4Cover.FORMAT_PNG: "image/png",
}

#============================================


def _atom_text(value: object) -> str | None:
	"""
	Render one atom value as text.
	"""
	if isinstance(value, bytes):
		text = value.decode("utf-8", errors="replace")
	elif isinstance(value, tuple):
		text = "/".join(str(part) for part in value)
	else:
		text = str(value)
	text = text.strip("\x00").strip()
	return text or None


#============================================


def _texts(tags: MP4Tags, key: str) -> list[str]:
	values = tags.get(key) or []
	texts: list[str] = []
	for value in values:
		text = _atom_text(value)
		if text:
			texts.append(text)
	return texts


#============================================


def _first(tags: MP4Tags, key: str) -> str | None:
	texts = _texts(tags, key)
	if not texts:
		return None
	return texts[0]


#============================================


def tags_from_mp4(tags: MP4Tags | None) -> RawTags:
	"""
	Normalize iTunes-style MP4 atoms into RawTags.

	Args:
		tags: mutagen MP4Tags, or None for an untagged file.

	Returns:
		RawTags without stream info.
	"""
	raw = RawTags()
	if tags is None:
		return raw
	native: list[tuple[str, str]] = []
	for key, values in tags.items():
		if key == "covr":
			for cover in values:
				raw.pictures.append(
					Picture(data=bytes(cover), format=_COVER_FORMATS.get(cover.imageformat, ""))
				)
			continue
		for value in values:
			text = _atom_text(value)
			if text:
				native.append((key, text))
	raw.native[MP4_DIALECT] = native
	raw.title = _first(tags, "\xa9nam")
	raw.artist = _first(tags, "\xa9ART") or _first(tags, "aART")
	raw.description = _texts(tags, "desc") or _texts(tags, "ldes")
	raw.comment = _texts(tags, "\xa9cmt")
	raw.copyright = _first(tags, "cprt")
	raw.genre = _texts(tags, "\xa9gen")
	raw.date = _first(tags, "\xa9day")
	track = tags.get("trkn")
	if track and track[0] and track[0][0]:
		raw.track_number = int(track[0][0])
	return raw


#============================================


class MP4Plugin(TagReaderPlugin):
	"""
	Reader for MPEG-4 containers (audiobooks and video).
	"""

	name = "mp4"
	supported_suffixes: set[str] = {"mp4", "m4b", "m4v", "m4a"}

	#============================================
	def read_tags(self, path: Path) -> RawTags:
		media = MP4(path)
		raw = tags_from_mp4(media.tags)
		raw.duration = media.info.length
		return raw
