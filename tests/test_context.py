#!/usr/bin/env python3
"""
Tests for the per-request context.
"""

import threading

from feediant.context import RequestContext, current_request, request_scope


def test_scope_binds_and_restores():
	outer = RequestContext(url="http://a/feeds/x.xml", domain_url="http://a")
	inner = RequestContext(url="http://b/", domain_url="http://b")
	assert current_request() is None
	with request_scope(outer):
		assert current_request() is outer
		with request_scope(inner):
			assert current_request() is inner
		assert current_request() is outer
	assert current_request() is None


def test_scope_restored_after_error():
	try:
		with request_scope(RequestContext(url="u", domain_url="d")):
			raise RuntimeError("boom")
	except RuntimeError:
		pass
	assert current_request() is None


def test_concurrent_requests_do_not_leak():
	seen: dict[str, str] = {}
	barrier = threading.Barrier(2)

	def handle(name: str) -> None:
		with request_scope(RequestContext(url=f"http://{name}/", domain_url=f"http://{name}")):
			barrier.wait(timeout=5)
			seen[name] = current_request().domain_url

	threads = [threading.Thread(target=handle, args=(name,)) for name in ("one", "two")]
	for thread in threads:
		thread.start()
	for thread in threads:
		thread.join()
	assert seen == {"one": "http://one", "two": "http://two"}
