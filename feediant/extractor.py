#!/usr/bin/env python3
"""
Metadata extraction: tags -> canonical Metadata records.
"""

from __future__ import annotations

# Standard Library
import base64
import binascii
import io
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from pathlib import Path

# PIP3 modules
from PIL import Image, UnidentifiedImageError

# local repo modules
from . import fallbacks, mime
from .errors import ExtractionError
from .identifiers import id_of, normalize_path
from .plugins import Picture, PluginRegistry, RawTags, build_registry

logger = logging.getLogger(__name__)

VENDOR_PAYLOAD_TAG = "TXXX:json64"
UNKNOWN_AUTHOR = "Unknown author"
NO_DESCRIPTION = "No description"
UNKNOWN_COPYRIGHT = "Unknown"

_PAYLOAD_TEXT_FIELDS = (
	"title",
	"summary",
	"author",
	"copyright",
	"narrated_by",
	"genre",
	"release_date",
)

#============================================


@dataclass(slots=True)
class Contributor:
	name: str


#============================================


@dataclass(slots=True)
class Metadata:
	"""
	Canonical description of one media file.

	Attributes:
		id: Content-addressed identifier of filepath.
		title: Display title.
		author: Author or artist.
		description: Short description.
		content: Long-form description.
		category: Genre tags.
		size: Byte length from the filesystem.
		type: MIME type.
		content_type: Content-Type header value.
		contributor: Narrators or performers.
		copyright: Copyright notice.
		filepath: Absolute path.
		pub_date: RFC 1123 publish date.
		duration: Seconds.
		track_number: Track number.
	"""
	id: str
	title: str
	author: str
	description: str
	content: str
	category: list[str]
	size: int
	type: str
	content_type: str
	contributor: list[Contributor]
	copyright: str
	filepath: str
	pub_date: str | None = None
	duration: float | None = None
	track_number: int | None = None

	#============================================
	def to_dict(self) -> dict:
		"""
		JSON-ready view with the public camelCase field names.
		"""
		data = asdict(self)
		data["pubDate"] = data.pop("pub_date")
		data["contentType"] = data.pop("content_type")
		data["trackNumber"] = data.pop("track_number")
		return {key: value for key, value in data.items() if value is not None}


#============================================


def parse_vendor_payload(encoded: str | None) -> dict:
	"""
	Decode a base64 JSON payload stored in an extended tag.

	Malformed payloads are common (truncated writes) and yield an empty dict.

	Args:
		encoded: Base64 text from the tag.

	Returns:
		Dictionary with only the recognized, well-typed fields.
	"""
	if not encoded:
		return {}
	try:
		decoded = json.loads(base64.b64decode(encoded).decode("utf-8"))
	except (binascii.Error, UnicodeDecodeError, ValueError):
		return {}
	if not isinstance(decoded, dict):
		return {}
	payload: dict = {}
	for name in _PAYLOAD_TEXT_FIELDS:
		value = decoded.get(name)
		if isinstance(value, str):
			payload[name] = value
	duration = decoded.get("duration")
	if isinstance(duration, (int, float)) and not isinstance(duration, bool):
		payload["duration"] = float(duration)
	return payload


#============================================


def format_pub_date(value: str | None) -> str | None:
	"""
	Convert a tagged release date to an RFC 1123 string.

	Args:
		value: ISO date, bare year, or RFC 2822 date.

	Returns:
		Formatted date, or None when unparsable.
	"""
	if not value:
		return None
	text = str(value).strip()
	parsed: datetime | None = None
	if text.isdigit() and len(text) == 4:
		try:
			parsed = datetime(int(text), 1, 1)
		except ValueError:
			return None
	if parsed is None:
		try:
			parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
		except ValueError:
			parsed = None
	if parsed is None:
		try:
			parsed = datetime.strptime(text, "%Y-%m")
		except ValueError:
			parsed = None
	if parsed is None:
		try:
			parsed = parsedate_to_datetime(text)
		except (TypeError, ValueError, IndexError):
			return None
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	# offsets near datetime.min/max overflow on conversion
	try:
		return format_datetime(parsed.astimezone(timezone.utc), usegmt=True)
	except (ValueError, OverflowError):
		return None


#============================================


def split_names(value: str, separator: str) -> list[str]:
	return [part.strip() for part in value.split(separator) if part.strip()]


#============================================


def sniff_picture_format(data: bytes) -> str:
	"""
	Identify an image MIME type from its bytes.
	"""
	try:
		with Image.open(io.BytesIO(data)) as image:
			image_format = image.format
	except (UnidentifiedImageError, OSError):
		return "application/octet-stream"
	return Image.MIME.get(image_format or "", "application/octet-stream")


#============================================


class MetadataExtractor:
	"""
	Reads media files through tag plugins and normalizes the result.
	"""

	#============================================
	def __init__(self, registry: PluginRegistry | None = None) -> None:
		self.registry = registry or build_registry()

	#============================================
	def read_tags(self, path: Path) -> RawTags:
		"""
		Parse tags with the matching plugin.

		Args:
			path: Media file path.

		Returns:
			RawTags payload.

		Raises:
			ExtractionError: When the plugin fails to parse the file.
		"""
		plugin = self.registry.for_path(path)
		try:
			return plugin.read_tags(path)
		except Exception as exc:
			raise ExtractionError(path, exc) from exc

	#============================================
	def build_metadata(self, filepath: str, size: int, raw: RawTags) -> Metadata:
		"""
		Apply the fallback chains to parsed tags.

		Args:
			filepath: Normalized absolute path.
			size: File size from stat.
			raw: Parsed tags.

		Returns:
			Fully populated Metadata.
		"""
		payload = parse_vendor_payload(raw.native_value(VENDOR_PAYLOAD_TAG))
		title = fallbacks.resolve(fallbacks.TITLE_CHAIN, payload, raw, Path(filepath).name)
		description = fallbacks.resolve(fallbacks.DESCRIPTION_CHAIN, payload, raw, NO_DESCRIPTION)
		author = fallbacks.resolve(fallbacks.AUTHOR_CHAIN, payload, raw, UNKNOWN_AUTHOR)
		copyright_text = fallbacks.resolve(fallbacks.COPYRIGHT_CHAIN, payload, raw, UNKNOWN_COPYRIGHT)
		duration = fallbacks.resolve(fallbacks.DURATION_CHAIN, payload, raw)
		narrators = fallbacks.resolve(fallbacks.NARRATORS_CHAIN, payload, raw, "")
		genre = fallbacks.resolve(fallbacks.GENRE_CHAIN, payload, raw, "")
		release_date = fallbacks.resolve(fallbacks.DATE_CHAIN, payload, raw)
		return Metadata(
			id=id_of(filepath),
			title=title,
			author=author,
			pub_date=format_pub_date(release_date),
			description=description,
			content=description,
			category=split_names(genre, ":"),
			size=size,
			duration=float(duration) if duration is not None else None,
			type=mime.mime_type(filepath),
			content_type=mime.content_type(filepath),
			contributor=[Contributor(name=name) for name in split_names(narrators, ",")],
			track_number=raw.track_number,
			copyright=copyright_text,
			filepath=filepath,
		)

	#============================================
	def extract_metadata(self, path: str | Path) -> Metadata | None:
		"""
		Extract a Metadata record for one file.

		Failures are logged (context line, then cause) and reported as None.

		Args:
			path: Media file path.

		Returns:
			Metadata, or None when the file cannot be read or parsed.
		"""
		filepath = normalize_path(path)
		try:
			size = Path(filepath).stat().st_size
			raw = self.read_tags(Path(filepath))
			return self.build_metadata(filepath, size, raw)
		except Exception as exc:
			logger.error('Trouble getting metadata for "%s"', filepath)
			logger.error("%s", exc, exc_info=exc)
			return None

	#============================================
	def extract_picture(self, path: str | Path) -> Picture | None:
		"""
		Extract the first embedded cover image.

		Args:
			path: Media file path.

		Returns:
			Picture, or None when there is no artwork or parsing fails.
		"""
		filepath = normalize_path(path)
		try:
			raw = self.read_tags(Path(filepath))
		except Exception as exc:
			logger.error('Trouble getting picture for "%s"', filepath)
			logger.error("%s", exc, exc_info=exc)
			return None
		if not raw.pictures:
			return None
		picture = raw.pictures[0]
		if not picture.format:
			picture.format = sniff_picture_format(picture.data)
		return picture
