"""
Time-bounded read cache in front of the user store.

Reads of the active list, the full list and single logins are memoized for
a fixed TTL. All mutations go through the cache so it can drop the affected
entries right after the store commits and before the caller gets control
back. Failures are never memoized.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List

from ..models.user import UserRecord
from ..utils.exceptions import CacheIntegrityError, UserNotFoundError
from .user_store import UserStore

CACHE_TTL_SECONDS = 5 * 60

ALL_ACTIVE_USERS_KEY = "all_active_users"
ALL_USERS_KEY = "all_users"


def user_key(login: str) -> str:
    return f"user_{login}"


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    expires_at: float


class ReadCache:
    """Memoizing wrapper around UserStore reads with unconditional invalidation."""

    def __init__(
        self,
        store: UserStore,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        # Tracked only while a load for the key is in flight; loads that
        # straddle an invalidation are discarded
        self._generations: Dict[str, int] = {}
        self._pending: Dict[str, int] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "invalidations": 0}

    # Reads

    def list_active(self) -> List[UserRecord]:
        return list(self._get_or_load(ALL_ACTIVE_USERS_KEY, self.store.list_active))

    def list_all(self) -> List[UserRecord]:
        return list(self._get_or_load(ALL_USERS_KEY, self.store.list_all))

    def get_by_login(self, login: str) -> UserRecord:
        def load() -> UserRecord:
            user = self.store.get(login)
            if user is None:
                raise UserNotFoundError(login)
            return user

        return self._get_or_load(user_key(login), load)

    # Mutations

    def insert(self, record: UserRecord) -> UserRecord:
        with self._invalidating(record.login):
            return self.store.insert(record)

    def mutate(self, login: str, modified_by: str, /, **changes: Any) -> UserRecord:
        with self._invalidating(login):
            return self.store.mutate(login, modified_by, **changes)

    def rename(self, old_login: str, new_login: str, modified_by: str) -> UserRecord:
        with self._invalidating(old_login, new_login):
            return self.store.rename(old_login, new_login, modified_by)

    def soft_delete(self, login: str, revoked_by: str) -> UserRecord:
        with self._invalidating(login):
            return self.store.soft_delete(login, revoked_by)

    def restore(self, login: str, modified_by: str) -> UserRecord:
        with self._invalidating(login):
            return self.store.restore(login, modified_by)

    def hard_delete(self, login: str) -> UserRecord:
        with self._invalidating(login):
            return self.store.hard_delete(login)

    # Bookkeeping

    def invalidate(self, *logins: str) -> None:
        keys = [ALL_ACTIVE_USERS_KEY, ALL_USERS_KEY] + [user_key(login) for login in logins]
        self._drop(keys)

    def clear(self) -> None:
        with self._lock:
            keys = list(self._entries)
        self._drop(keys)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {**self._stats, "size": len(self._entries)}

    def _get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at > now:
                self._stats["hits"] += 1
                if entry.value is None:
                    raise CacheIntegrityError(key)
                return entry.value
            if entry is not None:
                del self._entries[key]
            self._stats["misses"] += 1
            generation = self._generations.get(key, 0)
            self._pending[key] = self._pending.get(key, 0) + 1

        value = None
        try:
            # Loader errors propagate and leave nothing behind
            value = loader()
            if value is None:
                raise CacheIntegrityError(key)
        finally:
            with self._lock:
                if value is not None and self._generations.get(key, 0) == generation:
                    self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)
                self._pending[key] -= 1
                if not self._pending[key]:
                    del self._pending[key]
                    self._generations.pop(key, None)
        return value

    def _drop(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
                if key in self._pending:
                    self._generations[key] = self._generations.get(key, 0) + 1
                self._stats["invalidations"] += 1

    @contextmanager
    def _invalidating(self, *logins: str) -> Iterator[None]:
        try:
            yield
        finally:
            self.invalidate(*logins)
