#!/usr/bin/env python3
"""
Per-request context shared with nested calls.
"""

from __future__ import annotations

# Standard Library
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

#============================================


@dataclass(frozen=True, slots=True)
class RequestContext:
	"""
	The request currently being served.

	Attributes:
		url: Full request URL.
		domain_url: Scheme and host (no trailing slash).
		headers: Request headers, lowercased names.
	"""
	url: str
	domain_url: str
	headers: dict[str, str] = field(default_factory=dict)


_REQUEST_CTX: ContextVar[RequestContext | None] = ContextVar("feediant_request_ctx", default=None)

#============================================


@contextmanager
def request_scope(context: RequestContext) -> Iterator[RequestContext]:
	"""
	Bind a request for the duration of the block.

	Args:
		context: Request to expose through current_request().

	Yields:
		The bound context.
	"""
	token = _REQUEST_CTX.set(context)
	try:
		yield context
	finally:
		_REQUEST_CTX.reset(token)


#============================================


def current_request() -> RequestContext | None:
	return _REQUEST_CTX.get()
