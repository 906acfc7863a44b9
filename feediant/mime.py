#!/usr/bin/env python3
"""
MIME classification for media files.
"""

# Standard Library
import mimetypes
from pathlib import Path

#============================================

AUDIOBOOK_FALLBACK_TYPE = "audio/mpeg"
BINARY_FALLBACK_TYPE = "application/octet-stream"

_MEDIA_TYPES = mimetypes.MimeTypes()
_MEDIA_TYPES.add_type("audio/mpeg", ".mp3")
_MEDIA_TYPES.add_type("application/mp4", ".mp4")
_MEDIA_TYPES.add_type("video/x-m4v", ".m4v")
_MEDIA_TYPES.add_type("audio/mp4", ".m4a")

#============================================


def fallback_type(path: str | Path) -> str:
	"""
	Type used when the extension is not in the MIME table.

	m4b players reject the official audio/mp4a-latm, so audiobooks are
	announced as audio/mpeg.
	"""
	if Path(path).suffix.lower() == ".m4b":
		return AUDIOBOOK_FALLBACK_TYPE
	return BINARY_FALLBACK_TYPE


#============================================


def lookup(path: str | Path) -> str | None:
	guessed, _encoding = _MEDIA_TYPES.guess_type(Path(path).name)
	return guessed


#============================================


def mime_type(path: str | Path) -> str:
	"""
	MIME type for a file, with the extension-specific fallback.
	"""
	return lookup(path) or fallback_type(path)


#============================================


def content_type(path: str | Path) -> str:
	"""
	Content-Type header value for a file.

	Args:
		path: File path.

	Returns:
		MIME type, with a charset parameter for text types.
	"""
	guessed = lookup(path)
	if not guessed:
		return fallback_type(path)
	if guessed.startswith("text/") or guessed == "application/json":
		return f"{guessed}; charset=utf-8"
	return guessed
