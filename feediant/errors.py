#!/usr/bin/env python3
"""
Error types shared across the catalog engine.
"""

from __future__ import annotations

# Standard Library
from pathlib import Path

#============================================


class FeediantError(Exception):
	"""
	Base error for the catalog engine.
	"""

	status_code: int = 500


class NotFoundError(FeediantError):
	"""
	Requested item, picture or feed does not exist.
	"""

	status_code = 404


class MalformedInputError(FeediantError):
	"""
	Client input could not be used (bad range, missing id).
	"""

	status_code = 400


class ExtractionError(FeediantError):
	"""
	Tag parsing failed for a media file.
	"""

	def __init__(self, path: str | Path, cause: BaseException) -> None:
		self.path = str(path)
		self.cause = cause
		super().__init__(
			f"This error means that we couldn't parse the metadata for {self.path}: {cause}"
		)


class RangeNotSatisfiableError(MalformedInputError):
	"""
	Range starts past the end of the file.
	"""

	status_code = 416

	def __init__(self, message: str, size: int) -> None:
		self.size = size
		super().__init__(message)
