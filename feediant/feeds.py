#!/usr/bin/env python3
"""
Podcast (RSS 2.0 + iTunes) feeds built from catalog records.

Feed definitions live in an external store; this module only turns a
definition and its records into XML.
"""

from __future__ import annotations

# Standard Library
import copy
import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any, Literal, Protocol

# local repo modules
from .catalog import Catalog, item_url, picture_url
from .extractor import Metadata

logger = logging.getLogger(__name__)

FALLBACK_EPOCH = datetime(1900, 1, 1, tzinfo=timezone.utc)
RSS_NAMESPACES = {
	"version": "2.0",
	"xmlns:atom": "http://www.w3.org/2005/Atom",
	"xmlns:content": "http://purl.org/rss/1.0/modules/content/",
	"xmlns:googleplay": "http://www.google.com/schemas/play-podcasts/1.0",
	"xmlns:itunes": "http://www.itunes.com/dtds/podcast-1.0.dtd",
}

#============================================


@dataclass(slots=True)
class FeedDefinition:
	"""
	A feed as handed over by the feed store.

	Attributes:
		id: Feed identifier.
		name: Channel title.
		type: "MANUAL" (explicit file list) or "AUTO" (rule based).
		description: Channel description.
		file_paths: Files of a manual feed, in feed order.
		rule: Predicate selecting records for an automatic feed.
		rule_key: Stable serialization of rule.
		metadata: XML overrides deep-merged into the document.
	"""
	id: str
	name: str
	type: Literal["MANUAL", "AUTO"] = "MANUAL"
	description: str | None = None
	file_paths: list[str] = field(default_factory=list)
	rule: Callable[[Metadata], bool] | None = None
	rule_key: str = ""
	metadata: dict | None = None


class FeedStore(Protocol):
	def get_feed(self, feed_id: str) -> FeedDefinition | None: ...

	def list_feeds(self) -> list[FeedDefinition]: ...


#============================================


def feed_items(catalog: Catalog, feed: FeedDefinition) -> list[Metadata]:
	"""
	Records for a feed.

	Args:
		catalog: Media catalog.
		feed: Feed definition.

	Returns:
		Manual feeds in stored order (unreadable files skipped);
		automatic feeds from the rule match.
	"""
	if feed.type == "MANUAL":
		items: list[Metadata] = []
		for filepath in feed.file_paths:
			metadata = catalog.file_metadata(filepath)
			if metadata is not None:
				items.append(metadata)
		return items
	if feed.rule is None:
		logger.warning("Automatic feed %s has no rule", feed.id)
		return []
	return catalog.matching_metadata(feed.rule, feed.rule_key or feed.id)


#============================================


def deep_merge(base: Any, override: Any) -> Any:
	"""
	Merge override into base without mutating either.

	Dicts merge key by key, lists concatenate, anything else is replaced.
	"""
	if isinstance(base, dict) and isinstance(override, dict):
		merged = copy.deepcopy(base)
		for key, value in override.items():
			if key in merged:
				merged[key] = deep_merge(merged[key], value)
			else:
				merged[key] = copy.deepcopy(value)
		return merged
	if isinstance(base, list) and isinstance(override, list):
		return copy.deepcopy(base) + copy.deepcopy(override)
	return copy.deepcopy(override)


#============================================


def remove_empty(data: dict) -> dict:
	return {key: value for key, value in data.items() if value is not None}


#============================================


def _append(parent: ET.Element, tag: str, value: Any) -> None:
	"""
	Add compact-form value(s) under parent.

	Compact form: dict keys are child tags, "_attributes" holds
	attributes, "_text"/"_cdata" hold text, lists repeat the tag.
	"""
	if value is None:
		return
	if isinstance(value, list):
		for item in value:
			_append(parent, tag, item)
		return
	child = ET.SubElement(parent, tag)
	_fill(child, value)


def _fill(element: ET.Element, value: Any) -> None:
	if not isinstance(value, dict):
		element.text = _text(value)
		return
	for key, item in value.items():
		if key == "_attributes":
			for name, attr in item.items():
				element.set(name, _text(attr))
		elif key in ("_text", "_cdata"):
			element.text = _text(item)
		else:
			_append(element, key, item)


def _text(value: Any) -> str:
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, float) and value.is_integer():
		return str(int(value))
	return str(value)


#============================================


def to_xml(document: dict) -> str:
	"""
	Serialize a compact-form document with a single root.
	"""
	roots = [key for key in document if not key.startswith("_")]
	if len(roots) != 1:
		raise ValueError("Feed document must have exactly one root element")
	root = ET.Element(roots[0])
	_fill(root, document[roots[0]])
	ET.indent(root, space="  ")
	body = ET.tostring(root, encoding="unicode")
	return '<?xml version="1.0" encoding="utf-8"?>\n' + body


#============================================


def _fallback_pub_date(index: int) -> str:
	# clients that sort by pubDate keep the feed order for undated items
	return format_datetime(FALLBACK_EPOCH + timedelta(minutes=index), usegmt=True)


#============================================


def build_item(item: Metadata, index: int, domain_url: str) -> dict:
	def resource(ref: str) -> str:
		return domain_url.rstrip("/") + ref

	return remove_empty({
		"guid": {"_attributes": {"isPermaLink": False}, "_text": item.id},
		"title": item.title,
		"description": {"_cdata": item.description},
		"pubDate": item.pub_date or _fallback_pub_date(index),
		"author": item.author,
		"category": item.category if item.category else None,
		"content:encoded": {"_cdata": item.description},
		"enclosure": {
			"_attributes": {
				"length": item.size,
				"type": item.type,
				"url": resource(item_url(item.id)),
			},
		},
		"itunes:title": item.title,
		"itunes:author": item.author,
		"itunes:duration": item.duration,
		"itunes:image": {"_attributes": {"href": resource(picture_url(item.id))}},
		"itunes:summary": item.description,
		"itunes:subtitle": item.description,
		"itunes:explicit": "no",
		"itunes:episodeType": "full",
	})


#============================================


def build_document(
	feed: FeedDefinition,
	items: list[Metadata],
	self_url: str,
	domain_url: str,
	now: datetime | None = None,
) -> dict:
	"""
	Compact-form RSS document for a feed, overrides applied.

	Args:
		feed: Feed definition.
		items: Records in feed order.
		self_url: Absolute URL of the feed itself.
		domain_url: Scheme and host used for enclosure links.
		now: Build time (defaults to current UTC time).

	Returns:
		Document dict ready for to_xml.
	"""
	built_at = now or datetime.now(timezone.utc)
	document = {
		"rss": {
			"_attributes": dict(RSS_NAMESPACES),
			"channel": {
				"atom:link": [
					{
						"_attributes": {
							"href": self_url,
							"rel": "self",
							"title": "MP3 Audio",
							"type": "application/rss+xml",
						},
					},
					{
						"_attributes": {
							"rel": "hub",
							"xmlns": "http://www.w3.org/2005/Atom",
							"href": "https://pubsubhubbub.appspot.com/",
						},
					},
				],
				"title": feed.name,
				"link": self_url,
				"description": {"_cdata": feed.description or f"Feediant {feed.name}"},
				"lastBuildDate": format_datetime(built_at, usegmt=True),
				"item": [build_item(item, index, domain_url) for index, item in enumerate(items)],
			},
		},
	}
	if feed.metadata:
		document = deep_merge(document, feed.metadata)
	return document


#============================================


def render_feed(feed: FeedDefinition, items: list[Metadata], self_url: str, domain_url: str) -> str:
	return to_xml(build_document(feed, items, self_url, domain_url))
