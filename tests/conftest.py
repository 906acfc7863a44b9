"""
Pytest config to ensure local package imports work without installation.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _add_repo_root_to_path() -> None:
	"""
	Insert the repo root into sys.path for local imports.
	"""
	repo_root = Path(__file__).resolve().parent.parent
	repo_root_str = str(repo_root)
	if repo_root_str not in sys.path:
		sys.path.insert(0, repo_root_str)


_add_repo_root_to_path()

from feediant.cache import Cache  # noqa: E402
from feediant.catalog import Catalog  # noqa: E402
from feediant.config import AppConfig  # noqa: E402
from feediant.extractor import MetadataExtractor  # noqa: E402
from feediant.plugins import PluginRegistry, RawTags, TagReaderPlugin  # noqa: E402

# one MPEG-1 Layer III frame: 128 kbps, 44.1 kHz, no padding (417 bytes)
MPEG_FRAME = b"\xff\xfb\x90\x00" + b"\x00" * 413


class FakeClock:
	"""
	Test-only controllable clock for cache freshness.
	"""

	def __init__(self, now: float = 1_000_000.0) -> None:
		self.now = now

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


class StubTagPlugin(TagReaderPlugin):
	"""
	Test-only tag reader returning canned tags by file name.
	"""

	name = "stub"

	def __init__(self, tags_by_name: dict[str, RawTags] | None = None, failing: set[str] | None = None) -> None:
		self.tags_by_name = tags_by_name or {}
		self.failing = failing or set()
		self.calls: list[str] = []

	def supports(self, path: Path) -> bool:
		return True

	def read_tags(self, path: Path) -> RawTags:
		self.calls.append(path.name)
		if path.name in self.failing:
			raise ValueError("corrupt tag header")
		return self.tags_by_name.get(path.name, RawTags())


def stub_extractor(plugin: StubTagPlugin) -> MetadataExtractor:
	registry = PluginRegistry()
	registry.register(plugin)
	return MetadataExtractor(registry)


def make_catalog(roots: list[Path], plugin: StubTagPlugin | None = None, cache: Cache | None = None) -> Catalog:
	config = AppConfig(media_paths=roots, data_path=roots[0] / ".data" if roots else Path("data"))
	return Catalog(config=config, cache=cache or Cache(), extractor=stub_extractor(plugin or StubTagPlugin()))


def write_media(path: Path, size: int = 16) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_bytes(bytes(index % 256 for index in range(size)))
	return path


@pytest.fixture
def stub_plugin() -> StubTagPlugin:
	return StubTagPlugin()


@pytest.fixture
def clock() -> FakeClock:
	return FakeClock()
