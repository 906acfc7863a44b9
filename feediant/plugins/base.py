#!/usr/bin/env python3
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

#============================================


@dataclass(slots=True)
class Picture:
	"""
	Embedded cover art.

	Attributes:
		data: Raw image bytes.
		format: Image MIME type (e.g. "image/jpeg").
		description: Optional picture description from the tag.
	"""
	data: bytes
	format: str
	description: str | None = None


#============================================


@dataclass(slots=True)
class RawTags:
	"""
	Tag data read from one media file, before normalization.

	Common fields are the dialect-independent view. Native items keep
	every tag as (id, value) pairs grouped by dialect container so that
	lookups can fall back to vendor-specific frames.

	Attributes:
		title: Common title.
		artist: Common artist.
		description: Common description lines.
		comment: Common comment lines.
		copyright: Common copyright.
		genre: Common genre values.
		date: Release date string as tagged.
		track_number: Track number.
		duration: Stream duration in seconds.
		pictures: Embedded pictures in tag order.
		native: Dialect name -> list of (id, value) pairs.
	"""
	title: str | None = None
	artist: str | None = None
	description: list[str] = field(default_factory=list)
	comment: list[str] = field(default_factory=list)
	copyright: str | None = None
	genre: list[str] = field(default_factory=list)
	date: str | None = None
	track_number: int | None = None
	duration: float | None = None
	pictures: list[Picture] = field(default_factory=list)
	native: dict[str, list[tuple[str, str]]] = field(default_factory=dict)

	#============================================
	def native_value(self, native_id: str) -> str | None:
		"""
		Find a native tag value by id across every dialect container.

		Args:
			native_id: Tag id, matched case-insensitively.

		Returns:
			First matching value or None.
		"""
		wanted = native_id.lower()
		for items in self.native.values():
			for item_id, value in items:
				if item_id.lower() == wanted:
					return value
		return None


#============================================


class TagReaderPlugin:
	"""
	Base interface for tag dialect readers.
	"""

	name: str = "base"
	supported_suffixes: set[str] = set()

	#============================================
	def supports(self, path: Path) -> bool:
		"""
		Determine if this plugin can read the file.

		Args:
			path: File path.

		Returns:
			True if supported.
		"""
		return path.suffix.lower().lstrip(".") in self.supported_suffixes

	#============================================
	def read_tags(self, path: Path) -> RawTags:
		"""
		Parse embedded tags for the file.

		Args:
			path: File path.

		Returns:
			RawTags payload.
		"""
		raise NotImplementedError


class PluginRegistry:
	"""
	Registry for tag reader plugins.
	"""

	#============================================
	def __init__(self) -> None:
		self._plugins: list[TagReaderPlugin] = []

	#============================================
	def register(self, plugin: TagReaderPlugin) -> None:
		"""
		Register a plugin.

		Args:
			plugin: Plugin instance.
		"""
		self._plugins.append(plugin)

	#============================================
	def for_path(self, path: Path) -> TagReaderPlugin:
		"""
		Find the first plugin that supports the path.

		Args:
			path: File path.

		Returns:
			Plugin instance.
		"""
		for plugin in self._plugins:
			if plugin.supports(path):
				return plugin
		raise LookupError(f"No plugin registered for {path.suffix or 'unknown'}")

	#============================================
	def plugins(self) -> list[TagReaderPlugin]:
		return list(self._plugins)
