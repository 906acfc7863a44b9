#!/usr/bin/env python3
"""
Ranked substring search over catalog records.
"""

from __future__ import annotations

# Standard Library
import re
from collections.abc import Callable, Iterable, Sequence

# local repo modules
from .errors import MalformedInputError
from .extractor import Metadata

EXACT_MATCH = 3
PREFIX_MATCH = 2
CONTAINS_MATCH = 1
NO_MATCH = 0

_YEAR_PATTERN = re.compile(r"\b(\d{4})\b")

#============================================


def publish_year(record: Metadata) -> str:
	"""
	Four-digit year from pubDate, or an empty string.
	"""
	if not record.pub_date:
		return ""
	match = _YEAR_PATTERN.search(record.pub_date)
	if not match:
		return ""
	return match.group(1)


def contributor_names(record: Metadata) -> str:
	return ", ".join(person.name for person in record.contributor)


#============================================

FIELD_GETTERS: dict[str, Callable[[Metadata], str]] = {
	"title": lambda record: record.title,
	"author": lambda record: record.author,
	"description": lambda record: record.description,
	"category": lambda record: " ".join(record.category),
	"filepath": lambda record: record.filepath,
	"type": lambda record: record.type,
	"contentType": lambda record: record.content_type,
	"copyright": lambda record: record.copyright,
	"contributor": contributor_names,
	"pubDate": publish_year,
}
DEFAULT_FIELDS: tuple[str, ...] = tuple(FIELD_GETTERS)
_FIELD_ALIASES = {
	"content_type": "contentType",
	"pub_date": "pubDate",
	"contributors": "contributor",
	"year": "pubDate",
}

#============================================


def resolve_fields(fields: Sequence[str] | None) -> tuple[str, ...]:
	"""
	Validate and canonicalize a field subset.

	Args:
		fields: Field names, or None for every searchable field.

	Returns:
		Canonical field names.
	"""
	if not fields:
		return DEFAULT_FIELDS
	resolved: list[str] = []
	for name in fields:
		canonical = _FIELD_ALIASES.get(name, name)
		if canonical not in FIELD_GETTERS:
			raise MalformedInputError(f"Unknown search field: {name}")
		if canonical not in resolved:
			resolved.append(canonical)
	return tuple(resolved)


#============================================


def match_rank(value: str, query: str) -> int:
	"""
	Rank how well a value matches a casefolded query.

	Args:
		value: Field value.
		query: Casefolded, stripped query.

	Returns:
		EXACT_MATCH, PREFIX_MATCH (value or any word starts with the
		query), CONTAINS_MATCH, or NO_MATCH.
	"""
	text = (value or "").casefold()
	if not query:
		return CONTAINS_MATCH
	if text == query:
		return EXACT_MATCH
	if text.startswith(query):
		return PREFIX_MATCH
	position = text.find(query)
	if position < 0:
		return NO_MATCH
	while position >= 0:
		if position == 0 or not text[position - 1].isalnum():
			return PREFIX_MATCH
		position = text.find(query, position + 1)
	return CONTAINS_MATCH


#============================================


def searchable_values(record: Metadata, fields: Iterable[str] = DEFAULT_FIELDS) -> dict[str, str]:
	"""
	Text searched for each field of a record.

	Args:
		record: Catalog record.
		fields: Canonical field names.

	Returns:
		Mapping of field name to its searchable text (contributors joined,
		pubDate reduced to its year).
	"""
	return {name: FIELD_GETTERS[name](record) or "" for name in fields}


#============================================


def record_rank(record: Metadata, query: str, fields: Iterable[str]) -> int:
	values = searchable_values(record, fields)
	return max((match_rank(value, query) for value in values.values()), default=NO_MATCH)


#============================================


def search(
	records: Sequence[Metadata],
	query: str,
	fields: Sequence[str] | None = None,
	limit: int | None = None,
) -> list[Metadata]:
	"""
	Rank records by case-insensitive substring matches.

	Args:
		records: Catalog records in enumeration order.
		query: Search text.
		fields: Optional field subset (derived contributor and pubDate
			forms are used when named).
		limit: Optional maximum number of results.

	Returns:
		Matching records, best match first; ties keep input order.
	"""
	selected = resolve_fields(fields)
	needle = (query or "").strip().casefold()
	ranked: list[tuple[int, int, Metadata]] = []
	for index, record in enumerate(records):
		rank = record_rank(record, needle, selected)
		if rank == NO_MATCH:
			continue
		ranked.append((-rank, index, record))
	ranked.sort(key=lambda item: (item[0], item[1]))
	results = [record for _rank, _index, record in ranked]
	if limit is not None:
		if limit < 0:
			raise MalformedInputError("limit must not be negative")
		results = results[:limit]
	return results


#============================================


def strip_picture(record: Metadata) -> dict:
	"""
	Response projection of a record without embedded picture data.

	The cached record is left untouched.
	"""
	data = record.to_dict()
	data.pop("picture", None)
	return data
