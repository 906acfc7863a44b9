#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from pathlib import Path

# PIP3 modules
from mutagen.id3 import ID3
from mutagen.mp3 import MP3

# local repo modules
from .base import Picture, RawTags, TagReaderPlugin

ID3_DIALECT = "ID3v2"

#============================================


def _first_text(frame) -> str | None:
	texts = [str(text) for text in getattr(frame, "text", []) if str(text)]
	if not texts:
		return None
	return texts[0]


#============================================


def _native_id(frame) -> str:
	"""
	Frame id in "FRAME:description" form for user-defined frames.
	"""
	frame_id = frame.FrameID
	if frame_id in {"TXXX", "COMM"}:
		desc = getattr(frame, "desc", "")
		if desc:
			return f"{frame_id}:{desc}"
	return frame_id


#============================================


def _parse_track(value: str | None) -> int | None:
	if not value:
		return None
	head = value.split("/", 1)[0].strip()
	if head.isdigit():
		return int(head)
	return None


#============================================


def tags_from_id3(tags: ID3 | None) -> RawTags:
	"""
	Normalize an ID3 tag into RawTags.

	Args:
		tags: mutagen ID3 instance, or None for an untagged file.

	Returns:
		RawTags without stream info.
	"""
	raw = RawTags()
	if tags is None:
		return raw
	native: list[tuple[str, str]] = []
	for frame in tags.values():
		frame_id = frame.FrameID
		if frame_id == "APIC":
			raw.pictures.append(
				Picture(data=bytes(frame.data), format=frame.mime or "", description=frame.desc or None)
			)
			continue
		text = _first_text(frame)
		if text is None:
			continue
		native.append((_native_id(frame), text))
		if frame_id == "COMM":
			raw.comment.append(text)
	raw.native[ID3_DIALECT] = native
	if "TIT2" in tags:
		raw.title = _first_text(tags["TIT2"])
	if "TPE1" in tags:
		raw.artist = _first_text(tags["TPE1"])
	if "TCOP" in tags:
		raw.copyright = _first_text(tags["TCOP"])
	if "TCON" in tags:
		raw.genre = [genre for genre in tags["TCON"].genres if genre]
	for date_frame in ("TDRL", "TDRC", "TYER"):
		if date_frame in tags:
			raw.date = _first_text(tags[date_frame])
			break
	if "TRCK" in tags:
		raw.track_number = _parse_track(_first_text(tags["TRCK"]))
	return raw


#============================================


class ID3Plugin(TagReaderPlugin):
	"""
	Reader for MPEG audio with ID3 tags.
	"""

	name = "id3"
	supported_suffixes: set[str] = {"mp3"}

	#============================================
	def read_tags(self, path: Path) -> RawTags:
		audio = MP3(path)
		raw = tags_from_id3(audio.tags)
		raw.duration = audio.info.length
		return raw
