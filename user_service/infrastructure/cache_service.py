"""
In-process user cache.

Users are kept by ID. Email and phone number are secondary indexes holding
only the user ID; a secondary hit counts only if the cached user still
carries that email/phone, so an index entry left behind by an update
reads as a miss rather than returning the wrong user.

Entries expire after a TTL; once full, the least recently used entry is
dropped.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Generic, Optional, TypeVar
import logging

from user_service.domain.entities import User
from user_service.domain.value_objects import UserId

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: datetime

    def is_expired(self) -> bool:
        return _now() > self.expires_at


class TTLCache(Generic[T]):
    """
    String-keyed map with per-entry expiry and LRU eviction.

    All access goes through an asyncio.Lock; the OrderedDict keeps entries
    from least to most recently used.
    """

    def __init__(self, ttl_hours: float = 1, max_size: int = 10000, name: str = "cache"):
        self._ttl = timedelta(hours=ttl_hours)
        self._max_size = max_size
        self._name = name
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> Optional[T]:
        """Return the live value for key (marking it recently used), else None"""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired():
                del self._entries[key]
                logger.debug(f"{self._name}: '{key}' expired")
                entry = None

            if entry is None:
                self._misses += 1
                return None

            self._hits += 1
            self._entries.move_to_end(key)
            return entry.value

    async def set(self, key: str, value: T) -> None:
        async with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"{self._name}: evicted '{evicted}' (LRU)")

            self._entries[key] = CacheEntry(value=value, expires_at=_now() + self._ttl)
            self._entries.move_to_end(key)

    async def delete(self, key: str) -> bool:
        """Remove key; False if it was not cached"""
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear(self) -> None:
        """Drop every entry and reset the hit/miss counters"""
        async with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self._hits = self._misses = 0
        logger.info(f"{self._name}: cleared {dropped} entries")

    async def cleanup_expired(self) -> int:
        """Purge expired entries, returning how many were removed"""
        async with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired()]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"{self._name}: purged {len(expired)} expired entries")
        return len(expired)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups that were hits (0-100)"""
        lookups = self._hits + self._misses
        return (self._hits / lookups) * 100 if lookups else 0.0

    def get_stats(self) -> Dict:
        return {
            "name": self._name,
            "size": self.size,
            "max_size": self._max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_pct": round(self.hit_rate, 2),
            "ttl_hours": self._ttl.total_seconds() / 3600,
        }


class UserCache:
    """
    Users keyed by ID, with email and phone number indexes.

    Two ways in:
    - put()/evict(): the write path, called after a successful commit
    - remember(): the read path, filling the cache after a database read

    Phone numbers are not unique, and the database answers a phone lookup
    with the earliest-created match. put() therefore only drops the phone
    index entry for the user's number; the entry is recorded by remember()
    from an actual phone lookup result.

    Every put/evict bumps ``generation``. A reader captures it before going
    to the database and remember() skips the fill if a write committed in
    between, so a slow read never overwrites a newer value.
    """

    def __init__(self, ttl_hours: float = 1, max_size: int = 10000):
        self._users = TTLCache[User](ttl_hours=ttl_hours, max_size=max_size, name="user_cache")
        self._by_email = TTLCache[str](ttl_hours=ttl_hours, max_size=max_size, name="user_email_index")
        self._by_phone = TTLCache[str](ttl_hours=ttl_hours, max_size=max_size, name="user_phone_index")
        self._generation = 0
        self._write_lock = asyncio.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    async def get_by_id(self, user_id: UserId) -> Optional[User]:
        return await self._users.get(str(user_id))

    async def get_by_email(self, email: str) -> Optional[User]:
        user_id = await self._by_email.get(email)
        if user_id is None:
            return None
        user = await self._users.get(user_id)
        if user is None or user.email != email:
            await self._by_email.delete(email)
            return None
        return user

    async def get_by_phone_number(self, phone_number: str) -> Optional[User]:
        user_id = await self._by_phone.get(phone_number)
        if user_id is None:
            return None
        user = await self._users.get(user_id)
        if user is None or user.phone_number != phone_number:
            await self._by_phone.delete(phone_number)
            return None
        return user

    async def put(self, user: User) -> None:
        """Store a committed user; its phone number must be looked up again"""
        async with self._write_lock:
            self._generation += 1
            await self._store(user)
            if user.phone_number:
                await self._by_phone.delete(user.phone_number)

    async def evict(self, user_id: UserId) -> None:
        """Drop a deleted user; its index entries become misses on next read"""
        async with self._write_lock:
            self._generation += 1
            await self._users.delete(str(user_id))

    async def remember(
        self,
        user: User,
        generation: int,
        phone_number: Optional[str] = None,
    ) -> bool:
        """
        Fill the cache from a database read.

        Args:
            user: User as read from the database
            generation: Value of ``generation`` captured before the read
            phone_number: Set when user answered a lookup by this number

        Returns:
            False if a write committed since the read and nothing was stored
        """
        async with self._write_lock:
            if generation != self._generation:
                logger.debug(f"user_cache: Skipped stale read of user {user.id}")
                return False
            await self._store(user)
            if phone_number:
                await self._by_phone.set(phone_number, str(user.id))
            return True

    async def clear(self) -> None:
        await self._users.clear()
        await self._by_email.clear()
        await self._by_phone.clear()

    def get_stats(self) -> Dict:
        return {
            "users": self._users.get_stats(),
            "email_index": self._by_email.get_stats(),
            "phone_index": self._by_phone.get_stats(),
            "generation": self._generation,
        }

    async def _store(self, user: User) -> None:
        key = str(user.id)
        await self._users.set(key, user)
        await self._by_email.set(user.email, key)
        logger.debug(f"user_cache: Cached user {key}")


def create_user_cache() -> UserCache:
    """Build a UserCache sized from settings"""
    from user_service.config import settings

    return UserCache(
        ttl_hours=settings.user_cache_ttl_hours,
        max_size=settings.user_cache_max_size,
    )


# Global user cache shared by the API and CLI application services
user_cache = create_user_cache()
