"""
SQLite-based persistent geocode store for Sentinel.

This module implements GeocodeStorePort on top of aiosqlite so
geocode results survive restarts and are shared between workers
pointing at the same database file.
"""

import json
import time
from typing import Optional, Union
import aiosqlite
from pydantic import ValidationError
from sentinel.core.models import GeocodeFailure, GeocodeSuccess
from sentinel.observability.logging_setup import get_logger

log = get_logger("sentinel.geostore")

KEY_PREFIX = "geocode:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS geocode (
    k TEXT PRIMARY KEY,
    v TEXT NOT NULL,
    exp INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_geocode_exp ON geocode(exp);
"""

def store_key(address: str, area: Optional[str]) -> str:
    return f"{KEY_PREFIX}{address}|{area or ''}"

class SQLiteGeocodeStore:
    """SQLite geocode store with per-entry expiry"""

    def __init__(self, path: str, ttl_sec: int):
        """
        Args:
            path: SQLite database file path
            ttl_sec: Lifetime of stored entries (seconds)
        """
        self.path = path
        self.ttl = ttl_sec
        log.info(f"SQLiteGeocodeStore: {path}, TTL: {ttl_sec}s")

    async def init(self) -> None:
        """Create the schema if missing."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()

    async def get(self, address: str, area: Optional[str]) -> Optional[GeocodeSuccess]:
        key = store_key(address, area)
        now = int(time.time())
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT v, exp FROM geocode WHERE k = ?", (key,))
            row = await cursor.fetchone()
            if row is None:
                return None
            value, exp = row
            if exp <= now:
                await db.execute("DELETE FROM geocode WHERE k = ?", (key,))
                await db.commit()
                return None
            try:
                return GeocodeSuccess.model_validate(json.loads(value))
            except (ValueError, ValidationError):
                # unusable row (e.g. a stored null result): drop it
                log.warning(f"discarding malformed geocode entry {key}")
                await db.execute("DELETE FROM geocode WHERE k = ?", (key,))
                await db.commit()
                return None

    async def save(self, address: str, area: Optional[str],
                   result: Union[GeocodeSuccess, GeocodeFailure]) -> None:
        if not isinstance(result, GeocodeSuccess):
            log.debug(f"skipping store save for failed result: {address}")
            return
        key = store_key(address, area)
        exp = int(time.time()) + self.ttl
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO geocode (k, v, exp) VALUES (?, ?, ?)",
                (key, result.model_dump_json(), exp)
            )
            await db.commit()
        log.debug(f"saved to geocode store: {key}")

    async def delete(self, address: str, area: Optional[str]) -> bool:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("DELETE FROM geocode WHERE k = ?", (store_key(address, area),))
            await db.commit()
            return cursor.rowcount > 0

    async def gc(self, now: Optional[int] = None) -> int:
        """
        Delete expired entries.

        Args:
            now: Unix timestamp, defaults to the current time

        Returns:
            Number of deleted rows
        """
        if now is None:
            now = int(time.time())
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("DELETE FROM geocode WHERE exp < ?", (now,))
            await db.commit()
            deleted = cursor.rowcount
        if deleted > 0:
            log.info(f"expired geocode entries removed: {deleted}")
        return deleted

    async def get_count(self) -> int:
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM geocode")
            result = await cursor.fetchone()
            return result[0] if result else 0
