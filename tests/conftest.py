from datetime import date, datetime, timedelta

import pytest

from userdir.auth.hasher import PasswordHasher
from userdir.auth.sessions import SessionIssuer
from userdir.core.config import load_settings
from userdir.models.user import Gender, UserCreate
from userdir.services.directory_service import DirectoryService
from userdir.services.read_cache import ReadCache
from userdir.services.user_store import UserStore

TODAY = date(2026, 6, 15)


class FakeClock:
    """Deterministic, manually advanced clock"""

    def __init__(self, start: datetime = datetime(2026, 6, 15, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class TickingClock(FakeClock):
    """Moves one second forward on every read so creation order is visible"""

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def settings():
    return load_settings(bcrypt_rounds=4)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    return UserStore(clock=clock)


@pytest.fixture
def sessions():
    return SessionIssuer(expiry_hours=1)


@pytest.fixture
def directory(store, hasher, sessions, settings):
    return DirectoryService(
        store=store,
        cache=ReadCache(store),
        hasher=hasher,
        token_issuer=sessions,
        settings=settings,
        today=lambda: TODAY,
    )


def _new_user(login: str, is_admin: bool = False, birthday=None, name: str = "Test User") -> UserCreate:
    return UserCreate(
        login=login,
        password="Passw0rd!",
        name=name,
        gender=Gender.FEMALE,
        birthday=birthday,
        is_admin=is_admin,
    )


@pytest.fixture
def new_user():
    return _new_user
