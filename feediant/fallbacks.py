#!/usr/bin/env python3
"""
Ordered fallback chains for metadata fields.

Each field is resolved by trying lookups in order until one returns a
non-empty value. Chains are plain tuples so they can be inspected and
tested apart from any tag parser.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Callable, Iterable
from typing import Any

# local repo modules
from .plugins.base import RawTags

Lookup = Callable[[dict, RawTags], Any]

#============================================


def first_non_empty(values: Iterable[Any]) -> Any:
	"""
	Return the first value that is not None or an empty string.
	"""
	for value in values:
		if value is None:
			continue
		if isinstance(value, str) and not value.strip():
			continue
		return value
	return None


#============================================


def resolve(chain: Iterable[Lookup], payload: dict, raw: RawTags, default: Any = None) -> Any:
	"""
	Walk a fallback chain lazily.

	Args:
		chain: Lookup callables, highest priority first.
		payload: Decoded vendor payload (may be empty).
		raw: Parsed tags.
		default: Value when every lookup comes up empty.

	Returns:
		First non-empty lookup result, or default.
	"""
	found = first_non_empty(lookup(payload, raw) for lookup in chain)
	if found is None:
		return default
	return found


#============================================


def payload_field(name: str) -> Lookup:
	return lambda payload, raw: payload.get(name)


def native_field(native_id: str) -> Lookup:
	return lambda payload, raw: raw.native_value(native_id)


def joined(attribute: str, separator: str) -> Lookup:
	"""
	Join a list-valued common field; empty lists count as missing.
	"""

	def lookup(payload: dict, raw: RawTags) -> str | None:
		values = getattr(raw, attribute)
		if not values:
			return None
		return separator.join(values)

	return lookup


def common_field(attribute: str) -> Lookup:
	return lambda payload, raw: getattr(raw, attribute)


#============================================

TITLE_CHAIN: tuple[Lookup, ...] = (
	payload_field("title"),
	common_field("title"),
)

DESCRIPTION_CHAIN: tuple[Lookup, ...] = (
	payload_field("summary"),
	joined("description", "\n"),
	joined("comment", "\n"),
	native_field("TXXX:comment"),
	native_field("COMM:comment"),
	native_field("COMM"),
)

AUTHOR_CHAIN: tuple[Lookup, ...] = (
	payload_field("author"),
	common_field("artist"),
)

COPYRIGHT_CHAIN: tuple[Lookup, ...] = (
	payload_field("copyright"),
	common_field("copyright"),
)

DURATION_CHAIN: tuple[Lookup, ...] = (
	payload_field("duration"),
	common_field("duration"),
)

NARRATORS_CHAIN: tuple[Lookup, ...] = (
	payload_field("narrated_by"),
	native_field("----:com.apple.iTunes:PERFORMER_NAME"),
	native_field("TXXX:narrated_by"),
)

GENRE_CHAIN: tuple[Lookup, ...] = (
	payload_field("genre"),
	joined("genre", ":"),
	native_field("TXXX:book_genre"),
	native_field("TXXX:genre"),
)

DATE_CHAIN: tuple[Lookup, ...] = (
	payload_field("release_date"),
	native_field("TXXX:year"),
	native_field("TXXX:date"),
	common_field("date"),
)
