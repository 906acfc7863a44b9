#!/usr/bin/env python3
"""
Byte serving with HTTP Range support.
"""

from __future__ import annotations

# Standard Library
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

# local repo modules
from .catalog import Catalog
from .errors import MalformedInputError, NotFoundError, RangeNotSatisfiableError

CHUNK_SIZE = 64 * 1024
PICTURE_CACHE_CONTROL = "public, max-age=31536000"
_RANGE_PATTERN = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)

#============================================


@dataclass(slots=True)
class ByteRange:
	start: int
	end: int

	@property
	def length(self) -> int:
		return self.end - self.start + 1


#============================================


@dataclass(slots=True)
class MediaResponse:
	"""
	Status, headers and body for a media download.

	Attributes:
		status: 200 or 206.
		headers: Response headers.
		body: Chunk iterator; closing it releases the file handle.
	"""
	status: int
	headers: dict[str, str] = field(default_factory=dict)
	body: Iterator[bytes] = field(default_factory=lambda: iter(()))


#============================================


def parse_range(header: str, size: int) -> ByteRange:
	"""
	Parse a single "bytes=<start>-<end>" range.

	Args:
		header: Range header value.
		size: File size in bytes.

	Returns:
		Inclusive ByteRange; a missing end means the last byte.

	Raises:
		MalformedInputError: Missing or non-numeric start.
		RangeNotSatisfiableError: Start beyond the file or after end.
	"""
	match = _RANGE_PATTERN.match(header or "")
	if not match or not match.group(1):
		raise MalformedInputError("Invalid range")
	start = int(match.group(1))
	end = int(match.group(2)) if match.group(2) else size - 1
	end = min(end, size - 1)
	if start >= size or start > end:
		raise RangeNotSatisfiableError(f"Range {header} not satisfiable for {size} bytes", size)
	return ByteRange(start=start, end=end)


#============================================


def iter_file(path: str | Path, start: int = 0, end: int | None = None, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
	"""
	Yield file bytes in [start, end].

	Read errors propagate to the consumer. Closing the generator early
	closes the file.

	Args:
		path: File path.
		start: First byte offset.
		end: Last byte offset (inclusive); None reads to EOF.
		chunk_size: Maximum bytes per chunk.

	Yields:
		Byte chunks.
	"""
	with open(path, "rb") as handle:
		handle.seek(start)
		remaining = None if end is None else end - start + 1
		while remaining is None or remaining > 0:
			to_read = chunk_size if remaining is None else min(chunk_size, remaining)
			chunk = handle.read(to_read)
			if not chunk:
				break
			if remaining is not None:
				remaining -= len(chunk)
			yield chunk


#============================================


def serve_item(catalog: Catalog, item_id: str, range_header: str | None = None) -> MediaResponse:
	"""
	Build the response for GET /items/{item_id}.

	Args:
		catalog: Media catalog.
		item_id: Item identifier.
		range_header: Optional Range header value.

	Returns:
		MediaResponse with status 200 (full) or 206 (partial).
	"""
	if not item_id:
		raise MalformedInputError("Missing itemId")
	item = catalog.metadata_by_id(item_id)
	if item is None:
		raise NotFoundError("Item not found")
	headers = {"Content-Type": item.content_type}
	if range_header:
		byte_range = parse_range(range_header, item.size)
		headers["Accept-Ranges"] = "bytes"
		headers["Content-Range"] = f"bytes {byte_range.start}-{byte_range.end}/{item.size}"
		headers["Content-Length"] = str(byte_range.length)
		body = iter_file(item.filepath, byte_range.start, byte_range.end)
		return MediaResponse(status=206, headers=headers, body=body)
	headers["Content-Length"] = str(item.size)
	return MediaResponse(status=200, headers=headers, body=iter_file(item.filepath))


#============================================


def serve_picture(catalog: Catalog, item_id: str) -> tuple[bytes, dict[str, str]]:
	"""
	Cover image bytes and headers for GET /items/{item_id}/picture.
	"""
	if not item_id:
		raise MalformedInputError("Missing itemId")
	item = catalog.metadata_by_id(item_id)
	if item is None:
		raise NotFoundError("Item not found")
	picture = catalog.file_picture(item.filepath)
	if picture is None:
		raise NotFoundError("Picture not found")
	headers = {
		"Content-Type": picture.format,
		"Cache-Control": PICTURE_CACHE_CONTROL,
	}
	return picture.data, headers
