#!/usr/bin/env python3
"""
Remote-tool handlers. Each returns the JSON text payload of the call.
"""

from __future__ import annotations

# Standard Library
import json
from collections.abc import Sequence

# local repo modules
from .catalog import Catalog
from .config import AppConfig
from .search import search, strip_picture

#============================================


def search_media(
	catalog: Catalog,
	query: str,
	fields: Sequence[str] | None = None,
	limit: int | None = None,
) -> str:
	"""
	search-media: ranked catalog search.

	Args:
		catalog: Media catalog.
		query: Search text.
		fields: Optional field subset.
		limit: Optional maximum result count.

	Returns:
		JSON array of records without picture data.
	"""
	results = search(catalog.list_all(), query, fields=fields, limit=limit)
	return json.dumps([strip_picture(record) for record in results], indent=2)


#============================================


def get_config_paths(config: AppConfig) -> str:
	"""
	get-config-paths: configured media roots and data directory.
	"""
	payload = {
		"mediaPaths": [str(path) for path in config.normalized_roots()],
		"dataPath": str(config.normalized_data_path()),
	}
	return json.dumps(payload, indent=2)
