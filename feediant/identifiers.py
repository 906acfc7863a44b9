#!/usr/bin/env python3
"""
Content-addressed identifiers for media paths.
"""

# Standard Library
import hashlib
import os
from pathlib import Path

#============================================


def normalize_path(path: str | Path) -> str:
	"""
	Absolute, normalized string form of a path.
	"""
	return os.path.normpath(os.path.abspath(os.fspath(path)))


#============================================


def id_of(path: str | Path) -> str:
	"""
	Stable identifier for a file or directory path.

	Args:
		path: File or directory path.

	Returns:
		Hex md5 digest of the normalized absolute path.
	"""
	normalized = normalize_path(path)
	return hashlib.md5(normalized.encode("utf-8")).hexdigest()
