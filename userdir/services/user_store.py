"""
In-memory user storage.

The store is the single owner of user records. It is keyed by login and
guarded by one re-entrant lock, so mutations on the map never interleave
and readers always copy out a consistent snapshot. It performs no
authorization, logging or caching.
"""

import threading
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from ..models.user import Gender, UserRecord
from ..utils.exceptions import LoginAlreadyExistsError, UserNotFoundError

# Fields only the store itself may set
PROTECTED_FIELDS = frozenset(
    {"id", "login", "created_on", "created_by", "modified_on", "modified_by", "revoked_on", "revoked_by"}
)


def _utcnow() -> datetime:
    return datetime.utcnow()


def _subtract_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


class UserStore:
    """Thread-safe mapping from login to UserRecord"""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._users: Dict[str, UserRecord] = {}
        # Insertion sequence breaks created_on ties in listings
        self._sequence: Dict[str, int] = {}
        self._next_sequence = 0
        self._lock = threading.RLock()

    def now(self) -> datetime:
        return self._clock()

    def seed_admin(self, login: str, password_hash: str, name: str, system_actor: str) -> UserRecord:
        """Create the bootstrap administrator if it is not there yet"""
        with self._lock:
            existing = self._users.get(login)
            if existing is not None:
                return existing
            now = self._clock()
            admin = UserRecord(
                login=login,
                password_hash=password_hash,
                name=name,
                gender=Gender.MALE,
                birthday=None,
                is_admin=True,
                created_on=now,
                created_by=system_actor,
                modified_on=now,
                modified_by=system_actor,
            )
            self._put(admin)
            return admin

    def get(self, login: str) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(login)

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            return next((u for u in self._users.values() if u.id == user_id), None)

    def exists_by_login(self, login: str) -> bool:
        with self._lock:
            return login in self._users

    def insert(self, record: UserRecord) -> UserRecord:
        with self._lock:
            if record.login in self._users:
                raise LoginAlreadyExistsError(record.login)
            self._put(record)
            return record

    def rename(self, old_login: str, new_login: str, modified_by: str) -> UserRecord:
        """Re-key a record under the lock; no reader sees both keys or neither"""
        with self._lock:
            user = self._require(old_login)
            if new_login in self._users:
                raise LoginAlreadyExistsError(new_login)
            renamed = user.model_copy(
                update={"login": new_login, "modified_on": self._clock(), "modified_by": modified_by}
            )
            sequence = self._sequence.pop(old_login)
            del self._users[old_login]
            self._users[new_login] = renamed
            self._sequence[new_login] = sequence
            return renamed

    def mutate(self, login: str, modified_by: str, /, **changes: Any) -> UserRecord:
        """Apply field changes and stamp modified_on/modified_by"""
        protected = PROTECTED_FIELDS.intersection(changes)
        if protected:
            raise ValueError(f"Fields cannot be changed through mutate: {sorted(protected)}")
        unknown = set(changes) - set(UserRecord.model_fields)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        with self._lock:
            user = self._require(login)
            return self._replace(user, modified_by, **changes)

    def soft_delete(self, login: str, revoked_by: str) -> UserRecord:
        with self._lock:
            user = self._require(login)
            return self._replace(user, revoked_by, revoked_on=self._clock(), revoked_by=revoked_by)

    def restore(self, login: str, modified_by: str) -> UserRecord:
        with self._lock:
            user = self._require(login)
            return self._replace(user, modified_by, revoked_on=None, revoked_by=None)

    def hard_delete(self, login: str) -> UserRecord:
        with self._lock:
            user = self._require(login)
            del self._users[login]
            del self._sequence[login]
            return user

    def list_all(self) -> List[UserRecord]:
        with self._lock:
            return self._ordered(self._users.values())

    def list_active(self) -> List[UserRecord]:
        with self._lock:
            return self._ordered(u for u in self._users.values() if u.is_active)

    def list_older_than(self, age: int, today: Optional[date] = None) -> List[UserRecord]:
        """Users born on or before the date exactly `age` years ago"""
        today = today or self._clock().date()
        if age >= today.year:
            return []
        cutoff = _subtract_years(today, age)
        with self._lock:
            return self._ordered(
                u for u in self._users.values() if u.birthday is not None and u.birthday <= cutoff
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def _require(self, login: str) -> UserRecord:
        user = self._users.get(login)
        if user is None:
            raise UserNotFoundError(login)
        return user

    def _put(self, record: UserRecord) -> None:
        self._users[record.login] = record
        self._sequence[record.login] = self._next_sequence
        self._next_sequence += 1

    def _replace(self, user: UserRecord, modified_by: str, /, **changes: Any) -> UserRecord:
        changes.update(modified_on=self._clock(), modified_by=modified_by)
        # model_copy skips validation, so re-validate to keep enum/date types honest
        updated = UserRecord.model_validate({**user.model_dump(), **changes})
        self._users[user.login] = updated
        return updated

    def _ordered(self, users) -> List[UserRecord]:
        return sorted(users, key=lambda u: (u.created_on, self._sequence[u.login]))
