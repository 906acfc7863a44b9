#!/usr/bin/env python3
from __future__ import annotations

from .base import Picture, PluginRegistry, RawTags, TagReaderPlugin
from .generic import GenericPlugin
from .id3_plugin import ID3Plugin
from .mp4_plugin import MP4Plugin

__all__ = [
	"Picture",
	"PluginRegistry",
	"RawTags",
	"TagReaderPlugin",
	"build_registry",
]


def build_registry() -> PluginRegistry:
	"""
	Build default plugin registry.

	Returns:
		PluginRegistry with registered plugins.
	"""
	registry = PluginRegistry()
	registry.register(ID3Plugin())
	registry.register(MP4Plugin())
	registry.register(GenericPlugin())
	return registry
