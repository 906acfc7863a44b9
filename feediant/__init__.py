"""
feediant
========

Personal media-library server: catalog, metadata cache, range streaming
and podcast feeds for audio/video files on local disks.
"""

__all__ = [
	"cache",
	"catalog",
	"cli",
	"config",
	"context",
	"errors",
	"extractor",
	"fallbacks",
	"feeds",
	"identifiers",
	"mime",
	"plugins",
	"search",
	"server",
	"streamer",
	"tools",
]
