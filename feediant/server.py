#!/usr/bin/env python3
"""
HTTP surface: item bytes, cover pictures, feeds and health.
"""

from __future__ import annotations

# Standard Library
import logging
from collections.abc import AsyncIterator, Iterator

# PIP3 modules
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.concurrency import iterate_in_threadpool

# local repo modules
from .cache import Cache, SqliteBackend
from .catalog import Catalog
from .config import AppConfig
from .context import RequestContext, current_request, request_scope
from .errors import FeediantError, NotFoundError, RangeNotSatisfiableError
from .feeds import FeedStore, feed_items, render_feed
from .streamer import serve_item, serve_picture

logger = logging.getLogger(__name__)

#============================================


async def close_after_stream(body: Iterator[bytes]) -> AsyncIterator[bytes]:
	"""
	Iterate a blocking chunk generator off the event loop.

	The generator is closed once streaming stops for any reason, including
	a client disconnect, so its file handle is released.
	"""
	try:
		async for chunk in iterate_in_threadpool(body):
			yield chunk
	finally:
		close = getattr(body, "close", None)
		if close is not None:
			close()


#============================================


def build_catalog(config: AppConfig) -> Catalog:
	"""
	Catalog backed by the on-disk cache under the data path.
	"""
	cache = Cache(SqliteBackend(config.cache_path))
	return Catalog(config=config, cache=cache)


#============================================


def create_app(
	config: AppConfig,
	catalog: Catalog | None = None,
	feed_store: FeedStore | None = None,
) -> FastAPI:
	"""
	Build the FastAPI application.

	Args:
		config: Application configuration.
		catalog: Catalog to serve (defaults to one with a SQLite cache).
		feed_store: External store of feed definitions, optional.

	Returns:
		FastAPI app.
	"""
	catalog = catalog or build_catalog(config)
	app = FastAPI(title="feediant")
	app.state.config = config
	app.state.catalog = catalog
	app.state.feed_store = feed_store

	#============================================
	@app.middleware("http")
	async def bind_request(request: Request, call_next):
		context = RequestContext(
			url=str(request.url),
			domain_url=f"{request.url.scheme}://{request.url.netloc}",
			headers={key.lower(): value for key, value in request.headers.items()},
		)
		with request_scope(context):
			return await call_next(request)

	#============================================
	@app.exception_handler(FeediantError)
	async def feediant_error_handler(request: Request, exc: FeediantError):
		headers = {}
		if isinstance(exc, RangeNotSatisfiableError):
			headers["Content-Range"] = f"bytes */{exc.size}"
		return PlainTextResponse(str(exc), status_code=exc.status_code, headers=headers)

	#============================================
	@app.get("/health")
	def health():
		payload: dict = {"status": "ok"}
		if feed_store is not None:
			feeds = feed_store.list_feeds()
			payload["autoFeeds"] = sum(1 for feed in feeds if feed.type == "AUTO")
			payload["manualFeeds"] = sum(1 for feed in feeds if feed.type == "MANUAL")
		return JSONResponse(payload)

	#============================================
	@app.get("/items/{item_id}")
	def get_item(item_id: str, request: Request):
		media = serve_item(catalog, item_id, request.headers.get("range"))
		return StreamingResponse(close_after_stream(media.body), status_code=media.status, headers=media.headers)

	#============================================
	@app.get("/items/{item_id}/picture")
	def get_item_picture(item_id: str):
		data, headers = serve_picture(catalog, item_id)
		return Response(content=data, headers=headers, media_type=headers["Content-Type"])

	#============================================
	@app.get("/feeds/{feed_path}")
	def get_feed(feed_path: str, request: Request):
		if not feed_path.endswith(".xml"):
			return PlainTextResponse(
				"Not Found",
				status_code=404,
				headers={"reason": "Pathname must end in .xml"},
			)
		if feed_store is None:
			raise NotFoundError("Feed not found")
		feed = feed_store.get_feed(feed_path[: -len(".xml")])
		if feed is None:
			raise NotFoundError("Feed not found")
		context = current_request()
		domain_url = context.domain_url if context else f"{request.url.scheme}://{request.url.netloc}"
		self_url = f"{domain_url}{request.url.path}"
		xml_text = render_feed(feed, feed_items(catalog, feed), self_url, domain_url)
		return Response(content=xml_text, media_type="text/xml")

	return app
