#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from dataclasses import dataclass, field
from pathlib import Path
import json
import os

# PIP3 modules
import yaml

#============================================

MEDIA_PATHS_DELIMITER = "::"
DAY_SECONDS = 60 * 60 * 24
HOUR_SECONDS = 60 * 60

#============================================


def _default_extensions() -> set[str]:
	return {"mp3", "m4b", "mp4", "m4v"}


def _default_ignore_markers() -> tuple[str, ...]:
	return ("@eaDir", "#recycle")


#============================================


@dataclass(slots=True, frozen=True)
class CachePolicy:
	"""
	Freshness settings for one family of cache keys.

	Attributes:
		ttl: Seconds an entry is fresh.
		swr: Extra seconds a stale entry may still be served.
	"""
	ttl: float
	swr: float


#============================================


@dataclass(slots=True)
class AppConfig:
	"""
	Runtime configuration settings.

	Attributes:
		media_paths: Root directories to index.
		data_path: Folder for the cache database.
		supported_extensions: Media container extensions to index.
		ignore_markers: Path substrings that exclude a file or directory.
		scan_concurrency: Width of the extraction worker pool.
		metadata_policy: Cache policy for per-file metadata and pictures.
		matching_policy: Cache policy for rule-matched file lists.
		verbose: Verbose logging.
	"""
	media_paths: list[Path] = field(default_factory=list)
	data_path: Path = field(default_factory=lambda: Path("data"))
	supported_extensions: set[str] = field(default_factory=_default_extensions)
	ignore_markers: tuple[str, ...] = field(default_factory=_default_ignore_markers)
	scan_concurrency: int = 10
	metadata_policy: CachePolicy = field(
		default_factory=lambda: CachePolicy(ttl=30 * DAY_SECONDS, swr=12 * HOUR_SECONDS)
	)
	matching_policy: CachePolicy = field(
		default_factory=lambda: CachePolicy(ttl=DAY_SECONDS, swr=36 * HOUR_SECONDS)
	)
	verbose: bool = False

	#============================================
	def normalized_roots(self) -> list[Path]:
		"""
		Normalize media root paths.

		Returns:
			List of normalized Path objects.
		"""
		paths: list[Path] = [root.expanduser().resolve() for root in self.media_paths]
		return paths

	#============================================
	def normalized_data_path(self) -> Path:
		return self.data_path.expanduser().resolve()

	#============================================
	@property
	def cache_path(self) -> Path:
		return self.normalized_data_path() / "cache.db"

	#============================================
	@property
	def database_path(self) -> Path:
		return self.normalized_data_path() / "sqlite.db"


#============================================
def parse_exts(exts: list[str] | None) -> set[str] | None:
	"""
	Normalize extension filters.

	Args:
		exts: Extensions from CLI or config file.

	Returns:
		Set of lowercase extensions or None.
	"""
	if not exts:
		return None
	cleaned: set[str] = set()
	for ext in exts:
		if ext:
			cleaned.add(ext.lower().lstrip("."))
	if not cleaned:
		return None
	return cleaned


#============================================
def parse_media_paths(value: str | list[str] | None) -> list[Path]:
	"""
	Split a MEDIA_PATHS value into root directories.

	Args:
		value: Delimited string ("a::b") or list of paths.

	Returns:
		List of paths; relative entries resolved against the cwd.
	"""
	if not value:
		return []
	if isinstance(value, str):
		parts = value.strip().split(MEDIA_PATHS_DELIMITER)
	else:
		parts = [str(item) for item in value]
	paths: list[Path] = []
	for part in parts:
		part = part.strip()
		if not part:
			continue
		path = Path(part)
		if part.startswith("."):
			path = path.resolve()
		paths.append(path)
	return paths


#============================================


def load_user_config(config_path: Path | None) -> dict:
	"""
	Load user configuration from yaml or json.

	Args:
		config_path: Path to config file.

	Returns:
		Dictionary of loaded values or empty dict.
	"""
	if not config_path:
		return {}
	if not config_path.exists():
		return {}
	if config_path.suffix.lower() in {".yml", ".yaml"}:
		with config_path.open("r", encoding="utf-8") as handle:
			loaded = yaml.safe_load(handle)
			return loaded or {}
	with config_path.open("r", encoding="utf-8") as handle:
		return json.load(handle)


#============================================


def _policy_from(raw: object, default: CachePolicy) -> CachePolicy:
	if not isinstance(raw, dict):
		return default
	ttl = float(raw.get("ttl", default.ttl))
	swr = float(raw.get("swr", default.swr))
	return CachePolicy(ttl=ttl, swr=swr)


#============================================


def load_config(
	config_path: Path | None = None,
	environ: dict[str, str] | None = None,
) -> AppConfig:
	"""
	Build configuration from defaults, an optional file and the environment.

	Environment variables win over file values.

	Args:
		config_path: Optional yaml/json config file.
		environ: Environment mapping (defaults to os.environ).

	Returns:
		AppConfig instance.
	"""
	env = os.environ if environ is None else environ
	config = AppConfig()
	loaded = load_user_config(config_path)
	if loaded.get("media_paths"):
		config.media_paths = parse_media_paths(loaded["media_paths"])
	if loaded.get("data_path"):
		config.data_path = Path(str(loaded["data_path"]))
	exts = parse_exts(loaded.get("extensions"))
	if exts:
		config.supported_extensions = exts
	if loaded.get("ignore"):
		config.ignore_markers = tuple(str(marker) for marker in loaded["ignore"])
	if loaded.get("scan_concurrency"):
		config.scan_concurrency = int(loaded["scan_concurrency"])
	config.metadata_policy = _policy_from(loaded.get("metadata_cache"), config.metadata_policy)
	config.matching_policy = _policy_from(loaded.get("matching_cache"), config.matching_policy)
	if env.get("MEDIA_PATHS"):
		config.media_paths = parse_media_paths(env["MEDIA_PATHS"])
	if env.get("DATA_PATH"):
		data_path = env["DATA_PATH"].strip()
		config.data_path = Path(data_path).resolve() if data_path.startswith(".") else Path(data_path)
	return config
