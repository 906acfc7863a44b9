#!/usr/bin/env python3
"""
Key/value cache with TTL, stale-while-revalidate and forced refresh.
"""

from __future__ import annotations

# Standard Library
import logging
import pickle
import sqlite3
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

# local repo modules
from .config import CachePolicy

logger = logging.getLogger(__name__)

#============================================


@dataclass(slots=True)
class CacheEntry:
	"""
	Cached value plus the metadata needed to judge its freshness.

	Attributes:
		value: Cached value (may be None for a cached miss).
		created_time: Epoch seconds when the value was produced.
		ttl: Seconds the value is fresh.
		swr: Seconds after ttl that the value may still be served.
	"""
	value: Any
	created_time: float
	ttl: float
	swr: float

	#============================================
	def is_fresh(self, now: float) -> bool:
		return now < self.created_time + self.ttl

	#============================================
	def is_stale_usable(self, now: float) -> bool:
		expires = self.created_time + self.ttl
		return expires <= now < expires + self.swr


#============================================


class CacheBackend(Protocol):
	def get(self, key: str) -> CacheEntry | None: ...

	def set(self, key: str, entry: CacheEntry) -> None: ...

	def delete(self, key: str) -> None: ...


#============================================


class MemoryBackend:
	"""
	Process-local backend.
	"""

	def __init__(self) -> None:
		self._entries: dict[str, CacheEntry] = {}
		self._lock = threading.Lock()

	def get(self, key: str) -> CacheEntry | None:
		with self._lock:
			return self._entries.get(key)

	def set(self, key: str, entry: CacheEntry) -> None:
		with self._lock:
			self._entries[key] = entry

	def delete(self, key: str) -> None:
		with self._lock:
			self._entries.pop(key, None)

	def keys(self) -> list[str]:
		with self._lock:
			return list(self._entries)


#============================================


class SqliteBackend:
	"""
	Durable backend stored in a single SQLite file.
	"""

	#============================================
	def __init__(self, db_path: Path) -> None:
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)
		self._write_lock = threading.Lock()
		with self._connect() as conn:
			conn.execute(
				"CREATE TABLE IF NOT EXISTS cache ("
				" key TEXT PRIMARY KEY,"
				" value BLOB NOT NULL,"
				" created_time REAL NOT NULL,"
				" ttl REAL NOT NULL,"
				" swr REAL NOT NULL)"
			)

	#============================================
	@contextmanager
	def _connect(self) -> Iterator[sqlite3.Connection]:
		conn = sqlite3.connect(self.db_path, timeout=30)
		try:
			with conn:
				yield conn
		finally:
			conn.close()

	#============================================
	def get(self, key: str) -> CacheEntry | None:
		with self._connect() as conn:
			row = conn.execute(
				"SELECT value, created_time, ttl, swr FROM cache WHERE key = ?",
				(key,),
			).fetchone()
		if row is None:
			return None
		value, created_time, ttl, swr = row
		return CacheEntry(value=pickle.loads(value), created_time=created_time, ttl=ttl, swr=swr)

	#============================================
	def set(self, key: str, entry: CacheEntry) -> None:
		blob = pickle.dumps(entry.value)
		with self._write_lock, self._connect() as conn:
			conn.execute(
				"INSERT OR REPLACE INTO cache (key, value, created_time, ttl, swr) VALUES (?, ?, ?, ?, ?)",
				(key, blob, entry.created_time, entry.ttl, entry.swr),
			)

	#============================================
	def delete(self, key: str) -> None:
		with self._write_lock, self._connect() as conn:
			conn.execute("DELETE FROM cache WHERE key = ?", (key,))


#============================================


class Cache:
	"""
	Read-through cache over a pluggable backend.
	"""

	#============================================
	def __init__(
		self,
		backend: CacheBackend | None = None,
		clock: Callable[[], float] = time.time,
		refresh_workers: int = 2,
	) -> None:
		self.backend = backend if backend is not None else MemoryBackend()
		self.clock = clock
		self._executor = ThreadPoolExecutor(max_workers=refresh_workers, thread_name_prefix="cache-refresh")
		self._refreshing: dict[str, Future] = {}
		self._refresh_lock = threading.Lock()

	#============================================
	def get(self, key: str) -> CacheEntry | None:
		return self.backend.get(key)

	#============================================
	def set(self, key: str, value: Any, ttl: float, swr: float = 0.0) -> CacheEntry:
		"""
		Store a value with a new creation timestamp.

		Args:
			key: Cache key.
			value: Value to store.
			ttl: Fresh lifetime in seconds.
			swr: Stale-while-revalidate window in seconds.

		Returns:
			The stored entry.
		"""
		entry = CacheEntry(value=value, created_time=self.clock(), ttl=ttl, swr=swr)
		self.backend.set(key, entry)
		return entry

	#============================================
	def delete(self, key: str) -> None:
		self.backend.delete(key)

	#============================================
	def cachified(
		self,
		key: str,
		policy: CachePolicy,
		get_fresh_value: Callable[[], Any],
		force_fresh: bool = False,
	) -> Any:
		"""
		Return a cached value, producing it when needed.

		Fresh entries are returned as-is. Stale entries inside the swr
		window are returned immediately and refreshed in the background.
		Expired or missing entries, or force_fresh, call get_fresh_value
		synchronously. A failing get_fresh_value leaves the old entry
		in place and the error propagates.

		Args:
			key: Cache key.
			policy: TTL and swr for newly stored entries.
			get_fresh_value: Producer for the value.
			force_fresh: Skip the cached entry regardless of its age.

		Returns:
			Cached or freshly produced value.
		"""
		if not force_fresh:
			entry = self.backend.get(key)
			if entry is not None:
				now = self.clock()
				if entry.is_fresh(now):
					return entry.value
				if entry.is_stale_usable(now):
					self._schedule_refresh(key, policy, get_fresh_value)
					return entry.value
		value = get_fresh_value()
		self.set(key, value, policy.ttl, policy.swr)
		return value

	#============================================
	def _schedule_refresh(self, key: str, policy: CachePolicy, get_fresh_value: Callable[[], Any]) -> None:
		with self._refresh_lock:
			pending = self._refreshing.get(key)
			if pending is not None and not pending.done():
				return
			future = self._executor.submit(self._refresh, key, policy, get_fresh_value)
			self._refreshing[key] = future

	#============================================
	def _refresh(self, key: str, policy: CachePolicy, get_fresh_value: Callable[[], Any]) -> None:
		try:
			value = get_fresh_value()
			self.set(key, value, policy.ttl, policy.swr)
		except Exception as exc:
			logger.warning("Background refresh failed for %s: %s", key, exc)
		finally:
			with self._refresh_lock:
				self._refreshing.pop(key, None)

	#============================================
	def wait_for_refreshes(self, timeout: float | None = None) -> None:
		"""
		Block until scheduled background refreshes finish.
		"""
		with self._refresh_lock:
			pending = list(self._refreshing.values())
		if pending:
			wait(pending, timeout=timeout)

	#============================================
	def close(self) -> None:
		self._executor.shutdown(wait=True)
