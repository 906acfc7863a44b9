#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from pathlib import Path

# PIP3 modules
import mutagen
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Tags

# local repo modules
from .base import Picture, RawTags, TagReaderPlugin
from .id3_plugin import tags_from_id3
from .mp4_plugin import tags_from_mp4

#============================================


def _as_list(value: object) -> list[str]:
	if isinstance(value, (list, tuple)):
		items = value
	else:
		items = [value]
	return [str(item).strip() for item in items if str(item).strip()]


#============================================


def tags_from_key_value(tags) -> RawTags:
	"""
	Normalize key/value tag dialects (Vorbis comments, APEv2).

	Args:
		tags: mutagen tag container with keys() and item access.

	Returns:
		RawTags without stream info.
	"""
	raw = RawTags()
	if tags is None:
		return raw
	native: list[tuple[str, str]] = []
	lowered: dict[str, list[str]] = {}
	for key in tags.keys():
		values = _as_list(tags[key])
		lowered.setdefault(key.lower(), []).extend(values)
		for value in values:
			native.append((key, value))
	raw.native[type(tags).__name__] = native

	def first(*keys: str) -> str | None:
		for key in keys:
			values = lowered.get(key)
			if values:
				return values[0]
		return None

	raw.title = first("title")
	raw.artist = first("artist", "albumartist")
	raw.description = lowered.get("description", [])
	raw.comment = lowered.get("comment", [])
	raw.copyright = first("copyright")
	raw.genre = lowered.get("genre", [])
	raw.date = first("date", "year")
	track = first("tracknumber", "track")
	if track and track.split("/", 1)[0].strip().isdigit():
		raw.track_number = int(track.split("/", 1)[0])
	return raw


#============================================


class GenericPlugin(TagReaderPlugin):
	"""
	Fallback reader for any container mutagen can identify.
	"""

	name = "generic"
	supported_suffixes: set[str] = set()

	#============================================
	def supports(self, path: Path) -> bool:
		"""
		Always supports the file as a fallback.

		Args:
			path: File path.

		Returns:
			True for all files.
		"""
		return True

	#============================================
	def read_tags(self, path: Path) -> RawTags:
		media = mutagen.File(path)
		if media is None:
			raise ValueError(f"Unsupported media container: {path.name}")
		tags = media.tags
		if isinstance(tags, ID3):
			raw = tags_from_id3(tags)
		elif isinstance(tags, MP4Tags):
			raw = tags_from_mp4(tags)
		else:
			raw = tags_from_key_value(tags)
		for picture in getattr(media, "pictures", []):
			raw.pictures.append(
				Picture(data=bytes(picture.data), format=picture.mime or "", description=picture.desc or None)
			)
		info = getattr(media, "info", None)
		raw.duration = getattr(info, "length", None)
		return raw
