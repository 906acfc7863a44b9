#!/usr/bin/env python3
"""
Tests for the HTTP routes using the FastAPI test client.
"""

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from feediant.feeds import FeedDefinition
from feediant.identifiers import id_of
from feediant.plugins import Picture, RawTags
from feediant.server import close_after_stream, create_app
from feediant.streamer import iter_file
from conftest import StubTagPlugin, make_catalog, write_media

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


class DictFeedStore:
	def __init__(self, feeds: list[FeedDefinition]) -> None:
		self.feeds = {feed.id: feed for feed in feeds}

	def get_feed(self, feed_id: str) -> FeedDefinition | None:
		return self.feeds.get(feed_id)

	def list_feeds(self) -> list[FeedDefinition]:
		return list(self.feeds.values())


@pytest.fixture
def library(tmp_path: Path):
	book = write_media(tmp_path / "book.mp3", size=1000)
	clip = write_media(tmp_path / "clip.mp4", size=50)
	plugin = StubTagPlugin({
		"book.mp3": RawTags(title="The Book", pictures=[Picture(data=PNG_BYTES, format="image/png")]),
	})
	catalog = make_catalog([tmp_path], plugin=plugin)
	store = DictFeedStore([
		FeedDefinition(id="books", name="Books", file_paths=[str(book)]),
		FeedDefinition(id="clips", name="Clips", type="AUTO", rule=lambda record: record.type == "application/mp4", rule_key="mp4"),
	])
	client = TestClient(create_app(catalog.config, catalog=catalog, feed_store=store))
	return client, book, clip


def test_range_request(library):
	client, book, _clip = library
	response = client.get(f"/items/{id_of(book)}", headers={"Range": "bytes=0-99"})
	assert response.status_code == 206
	assert response.headers["content-range"] == "bytes 0-99/1000"
	assert response.headers["content-length"] == "100"
	assert response.content == book.read_bytes()[:100]


def test_full_download(library):
	client, book, _clip = library
	response = client.get(f"/items/{id_of(book)}")
	assert response.status_code == 200
	assert response.headers["content-type"].startswith("audio/mpeg")
	assert response.content == book.read_bytes()


def test_unknown_item_is_404(library):
	client, _book, _clip = library
	response = client.get("/items/0123456789abcdef")
	assert response.status_code == 404


def test_unsatisfiable_range_is_416(library):
	client, book, _clip = library
	response = client.get(f"/items/{id_of(book)}", headers={"Range": "bytes=5000-"})
	assert response.status_code == 416
	assert response.headers["content-range"] == "bytes */1000"


def test_malformed_range_is_400(library):
	client, book, _clip = library
	response = client.get(f"/items/{id_of(book)}", headers={"Range": "bytes=-10"})
	assert response.status_code == 400


def test_picture_served_with_long_cache(library):
	client, book, _clip = library
	response = client.get(f"/items/{id_of(book)}/picture")
	assert response.status_code == 200
	assert response.content == PNG_BYTES
	assert response.headers["content-type"] == "image/png"
	assert response.headers["content-length"] == str(len(PNG_BYTES))
	assert response.headers["cache-control"] == "public, max-age=31536000"


def test_missing_picture_is_404(library):
	client, _book, clip = library
	assert client.get(f"/items/{id_of(clip)}/picture").status_code == 404


def test_manual_feed_xml(library):
	client, book, _clip = library
	response = client.get("/feeds/books.xml")
	assert response.status_code == 200
	assert response.headers["content-type"].startswith("text/xml")
	assert "<title>Books</title>" in response.text
	assert "<title>The Book</title>" in response.text
	assert f"/items/{id_of(book)}" in response.text
	assert "/feeds/books.xml" in response.text


def test_automatic_feed_xml(library):
	client, book, clip = library
	response = client.get("/feeds/clips.xml")
	assert response.status_code == 200
	assert f"/items/{id_of(clip)}" in response.text
	assert f"/items/{id_of(book)}" not in response.text


def test_feed_path_must_end_in_xml(library):
	client, _book, _clip = library
	response = client.get("/feeds/books")
	assert response.status_code == 404
	assert response.headers["reason"] == "Pathname must end in .xml"


def test_unknown_feed_is_404(library):
	client, _book, _clip = library
	assert client.get("/feeds/nope.xml").status_code == 404


def test_health_counts_feeds(library):
	client, _book, _clip = library
	assert client.get("/health").json() == {"status": "ok", "autoFeeds": 1, "manualFeeds": 1}


def test_feed_self_link_drops_query_string(library):
	client, _book, _clip = library
	response = client.get("/feeds/books.xml?token=abc")
	assert response.status_code == 200
	assert 'href="http://testserver/feeds/books.xml"' in response.text
	assert "token=abc" not in response.text


def test_abandoned_stream_releases_file(tmp_path: Path, monkeypatch):
	path = write_media(tmp_path / "a.mp3", size=300)
	opened = []
	real_open = open

	def tracking_open(*args, **kwargs):
		handle = real_open(*args, **kwargs)
		opened.append(handle)
		return handle

	monkeypatch.setattr("builtins.open", tracking_open)

	async def read_first_chunk() -> bytes:
		stream = close_after_stream(iter_file(path, chunk_size=10))
		chunk = await stream.__anext__()
		await stream.aclose()
		return chunk

	assert asyncio.run(read_first_chunk()) == path.read_bytes()[:10]
	assert opened[0].closed
