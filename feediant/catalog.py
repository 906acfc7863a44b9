#!/usr/bin/env python3
"""
Media catalog: discovery, cached metadata lookups and directory trees.
"""

from __future__ import annotations

# Standard Library
import hashlib
import logging
import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# local repo modules
from .cache import Cache, CacheEntry
from .config import AppConfig
from .extractor import Metadata, MetadataExtractor
from .identifiers import id_of, normalize_path
from .plugins import Picture

logger = logging.getLogger(__name__)

MetadataRule = Callable[[Metadata], bool]

#============================================


@dataclass(slots=True)
class FileNode:
	name: str
	id: str
	path: str
	metadata: Metadata | None
	type: Literal["file"] = "file"

	def to_dict(self) -> dict:
		return {
			"type": self.type,
			"name": self.name,
			"id": self.id,
			"path": self.path,
			"metadata": self.metadata.to_dict() if self.metadata else None,
		}


#============================================


@dataclass(slots=True)
class DirectoryNode:
	name: str
	id: str
	path: str
	children: list[DirectoryNode | FileNode] = field(default_factory=list)
	type: Literal["directory"] = "directory"

	def to_dict(self) -> dict:
		return {
			"type": self.type,
			"name": self.name,
			"id": self.id,
			"path": self.path,
			"children": [child.to_dict() for child in self.children],
		}


MediaNode = DirectoryNode | FileNode

#============================================


def _name_key(node: MediaNode) -> tuple[str, str]:
	return (node.name.casefold(), node.name)


#============================================


def modified_since(path: str, entry: CacheEntry | None) -> bool:
	"""
	True when the file changed after the cached entry was produced.

	A file that can no longer be stat'ed also counts as changed so the
	next read re-extracts and reports the failure.
	"""
	if entry is None:
		return False
	try:
		return os.stat(path).st_mtime > entry.created_time
	except OSError:
		return True


#============================================


class Catalog:
	"""
	Read-through view of every media file under the configured roots.
	"""

	#============================================
	def __init__(
		self,
		config: AppConfig,
		cache: Cache | None = None,
		extractor: MetadataExtractor | None = None,
	) -> None:
		self.config = config
		self.cache = cache if cache is not None else Cache()
		self.extractor = extractor or MetadataExtractor()

	#============================================
	def is_ignored(self, path: str | Path) -> bool:
		text = str(path)
		return any(marker in text for marker in self.config.ignore_markers)

	#============================================
	def is_supported(self, path: Path) -> bool:
		return path.suffix.lower().lstrip(".") in self.config.supported_extensions

	#============================================
	def iter_media_files(self) -> list[str]:
		"""
		Find supported media files under every root.

		Returns:
			Normalized absolute file paths.
		"""
		paths: list[str] = []
		for root in self.config.normalized_roots():
			if not root.exists():
				logger.info("Media root %s does not exist; skipping", root)
				continue
			for path in sorted(root.rglob("*")):
				if self.is_ignored(path.relative_to(root)):
					continue
				if not self.is_supported(path):
					continue
				if not path.is_file():
					continue
				paths.append(normalize_path(path))
		return paths

	#============================================
	def file_metadata(self, filepath: str | Path) -> Metadata | None:
		"""
		Cached metadata for one file, re-extracted when the file changed.

		Args:
			filepath: Media file path.

		Returns:
			Metadata, or None when extraction failed.
		"""
		path = normalize_path(filepath)
		key = f"file-metadata:{path}"
		force_fresh = modified_since(path, self.cache.get(key))
		return self.cache.cachified(
			key,
			self.config.metadata_policy,
			lambda: self.extractor.extract_metadata(path),
			force_fresh=force_fresh,
		)

	#============================================
	def file_picture(self, filepath: str | Path) -> Picture | None:
		"""
		Cached cover picture for one file.
		"""
		path = normalize_path(filepath)
		key = f"file-picture:{path}"
		force_fresh = modified_since(path, self.cache.get(key))
		return self.cache.cachified(
			key,
			self.config.metadata_policy,
			lambda: self.extractor.extract_picture(path),
			force_fresh=force_fresh,
		)

	#============================================
	def list_all(self) -> list[Metadata]:
		"""
		Metadata for every discovered file.

		Extraction runs on a fixed-width worker pool; files that fail to
		extract are left out. Order is not significant.

		Returns:
			List of Metadata records.
		"""
		files = self.iter_media_files()
		with ThreadPoolExecutor(max_workers=self.config.scan_concurrency) as pool:
			items = list(pool.map(self.file_metadata, files))
		return [item for item in items if item is not None]

	#============================================
	def matching_metadata(self, rule: MetadataRule, rule_key: str) -> list[Metadata]:
		"""
		Records accepted by an externally defined rule.

		Args:
			rule: Predicate over a Metadata record.
			rule_key: Stable serialization of the rule, used for the cache key.

		Returns:
			Matching records.
		"""
		digest = hashlib.md5(rule_key.encode("utf-8")).hexdigest()
		key = f"matching-files:{digest}"
		return self.cache.cachified(
			key,
			self.config.matching_policy,
			lambda: [item for item in self.list_all() if rule(item)],
		)

	#============================================
	def build_tree(self, directory: str | Path) -> DirectoryNode:
		"""
		Directory tree of supported media below a directory.

		Children are sorted by name; directories and files interleave.

		Args:
			directory: Directory to descend.

		Returns:
			DirectoryNode for the directory.
		"""
		current = Path(normalize_path(directory))
		node = DirectoryNode(name=current.name, id=id_of(current), path=str(current))
		for entry in current.iterdir():
			if self.is_ignored(entry.name):
				continue
			if entry.is_dir():
				node.children.append(self.build_tree(entry))
			elif self.is_supported(entry):
				filepath = str(entry)
				node.children.append(
					FileNode(
						name=entry.name,
						id=id_of(filepath),
						path=filepath,
						metadata=self.file_metadata(filepath),
					)
				)
		node.children.sort(key=_name_key)
		return node

	#============================================
	def all_media_with_directories(self) -> list[DirectoryNode]:
		"""
		One tree per configured root.
		"""
		trees: list[DirectoryNode] = []
		for root in self.config.normalized_roots():
			if not root.is_dir():
				logger.info("Media root %s does not exist; skipping", root)
				continue
			trees.append(self.build_tree(root))
		return trees

	#============================================
	def metadata_by_id(self, item_id: str) -> Metadata | None:
		"""
		Resolve an item id to its metadata.

		Args:
			item_id: Identifier from id_of.

		Returns:
			Metadata, or None when no file has that id.
		"""
		for filepath in self.iter_media_files():
			if id_of(filepath) == item_id:
				return self.file_metadata(filepath)
		return None

	#============================================
	def file_ids_by_directory(self, directory: str | Path) -> list[str]:
		prefix = normalize_path(directory)
		return [
			id_of(filepath)
			for filepath in self.iter_media_files()
			if filepath == prefix or filepath.startswith(prefix + os.sep)
		]


#============================================


def picture_url(item_id: str) -> str:
	return f"/items/{item_id}/picture"


def item_url(item_id: str) -> str:
	return f"/items/{item_id}"
