"""
Directory service: the operations the boundary calls.

Each operation validates input shape, resolves the acting user, applies the
authorization policy, and only then touches the store (through the read
cache, which invalidates on every write). The service keeps no state of its
own beyond its collaborators.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional, Protocol

from ..auth.hasher import PasswordHasher
from ..auth.sessions import SessionIssuer
from ..core.config import Settings, get_settings
from ..models.user import Page, UserCreate, UserRecord, UserUpdate
from ..utils.exceptions import (
    AccountInactiveError,
    AuthenticationFailedError,
    AuthenticationRequiredError,
    LoginAlreadyExistsError,
    UserNotFoundError,
)
from ..utils.logger import get_logger
from . import validation
from .policy import Operation, authorize, require_admin
from .read_cache import ReadCache
from .user_store import UserStore

logger = get_logger(__name__)


class TokenIssuer(Protocol):
    def issue_token(self, user: UserRecord) -> str: ...


class DirectoryService:
    """Façade over store, cache, policy and hasher"""

    def __init__(
        self,
        store: Optional[UserStore] = None,
        cache: Optional[ReadCache] = None,
        hasher: Optional[PasswordHasher] = None,
        token_issuer: Optional[TokenIssuer] = None,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings or get_settings()
        if cache is not None and store is not None and cache.store is not store:
            raise ValueError("cache must wrap the given store")
        self.store = store or (cache.store if cache is not None else UserStore())
        self.cache = cache or ReadCache(self.store, ttl_seconds=self.settings.cache_ttl_seconds)
        self.hasher = hasher or PasswordHasher(rounds=self.settings.bcrypt_rounds)
        self.token_issuer = token_issuer or SessionIssuer(expiry_hours=self.settings.session_expiry_hours)
        self._today = today
        self._seed_admin()

    def _seed_admin(self) -> None:
        if self.store.exists_by_login(self.settings.admin_login):
            return
        self.store.seed_admin(
            login=self.settings.admin_login,
            password_hash=self.hasher.hash(self.settings.admin_password),
            name=self.settings.admin_name,
            system_actor=self.settings.system_actor,
        )
        self.cache.invalidate(self.settings.admin_login)
        logger.info("Admin user initialized", login=self.settings.admin_login)

    # Credentials

    def authenticate(self, login: str, password: str) -> str:
        """Verify credentials and hand the account to the token issuer"""
        user = self.get_by_credentials(login, password)
        if user is None:
            logger.warning("Authentication failed", login=login)
            raise AuthenticationFailedError()
        token = self.token_issuer.issue_token(user)
        logger.info("User authenticated", login=login)
        return token

    def get_by_credentials(self, login: str, password: str) -> Optional[UserRecord]:
        """Active user matching login and password, or None"""
        user = self.store.get(login) if login else None
        if user is None:
            self.hasher.burn(password or "")
            return None
        if not self.hasher.verify(password or "", user.password_hash):
            return None
        if not user.is_active:
            return None
        return user

    # Actor resolution

    def resolve_actor(self, login: Optional[str]) -> Optional[UserRecord]:
        if not login:
            return None
        return self.store.get(login)

    def authorize(
        self,
        actor_login: Optional[str],
        operation: Operation,
        target_login: Optional[str] = None,
    ) -> UserRecord:
        """Policy check for boundary calls whose operation carries no actor"""
        actor = self.resolve_actor(actor_login)
        target = None
        if target_login is not None:
            target = self.store.get(target_login)
            if target is None and actor is not None:
                raise UserNotFoundError(target_login)
        return authorize(actor, operation, target)

    def require_admin(self, actor_login: Optional[str]) -> UserRecord:
        return require_admin(self.resolve_actor(actor_login))

    # Create

    def create_user(self, dto: UserCreate, created_by: str) -> UserRecord:
        validation.validate_new_user(dto, self._today())
        if dto.is_admin:
            authorize(self.resolve_actor(created_by), Operation.CREATE_ADMIN)
        if self.store.exists_by_login(dto.login):
            raise LoginAlreadyExistsError(dto.login)

        now = self.store.now()
        user = UserRecord(
            login=dto.login,
            password_hash=self.hasher.hash(dto.password),
            name=dto.name,
            gender=dto.gender,
            birthday=dto.birthday,
            is_admin=dto.is_admin,
            created_on=now,
            created_by=created_by,
            modified_on=now,
            modified_by=created_by,
        )
        self.cache.insert(user)
        logger.info("User created", login=user.login, created_by=created_by)
        return user

    # Reads

    def list_active_paginated(self, page_number: int = 1, page_size: Optional[int] = None) -> Page[UserRecord]:
        return self._paginate(self.cache.list_active(), page_number, page_size)

    def list_all_paginated(self, page_number: int = 1, page_size: Optional[int] = None) -> Page[UserRecord]:
        return self._paginate(self.cache.list_all(), page_number, page_size)

    def list_older_than_paginated(
        self, age: int, page_number: int = 1, page_size: Optional[int] = None
    ) -> Page[UserRecord]:
        validation.validate_age(age)
        users = self.store.list_older_than(age, today=self._today())
        return self._paginate(users, page_number, page_size)

    def get_by_login_cached(self, login: str) -> UserRecord:
        return self.cache.get_by_login(login)

    def get_current_user(self, login: Optional[str]) -> UserRecord:
        user = self.resolve_actor(login)
        if user is None:
            raise AuthenticationRequiredError()
        if not user.is_active:
            raise AccountInactiveError()
        return user

    # Updates

    def update_user(self, login: str, dto: UserUpdate, modified_by: str) -> UserRecord:
        validation.validate_profile_update(dto, self._today())
        self._authorize_target(modified_by, Operation.UPDATE_PROFILE, login)

        changes = dto.model_dump(exclude_none=True)
        user = self.cache.mutate(login, modified_by, **changes)
        logger.info("User updated", login=login, modified_by=modified_by, fields=sorted(changes))
        return user

    def update_password(self, login: str, new_password: str, modified_by: str) -> UserRecord:
        validation.validate_password(new_password)
        self._authorize_target(modified_by, Operation.UPDATE_PASSWORD, login)

        user = self.cache.mutate(login, modified_by, password_hash=self.hasher.hash(new_password))
        logger.info("Password updated", login=login, modified_by=modified_by)
        return user

    def update_login(self, old_login: str, new_login: str, modified_by: str) -> UserRecord:
        validation.validate_login(new_login)
        self._authorize_target(modified_by, Operation.UPDATE_LOGIN, old_login)
        if self.store.exists_by_login(new_login):
            raise LoginAlreadyExistsError(new_login)

        # The store re-checks uniqueness under its lock
        user = self.cache.rename(old_login, new_login, modified_by)
        logger.info("Login changed", old_login=old_login, new_login=new_login, modified_by=modified_by)
        return user

    # Lifecycle

    def delete_user(self, login: str, revoked_by: str, soft_delete: bool = True) -> Optional[UserRecord]:
        """Soft delete returns the revoked record; hard delete returns None"""
        authorize(self.resolve_actor(revoked_by), Operation.DELETE)
        if soft_delete:
            user = self.cache.soft_delete(login, revoked_by)
            logger.info("User soft deleted", login=login, revoked_by=revoked_by)
            return user
        self.cache.hard_delete(login)
        logger.info("User permanently deleted", login=login, revoked_by=revoked_by)
        return None

    def restore_user(self, login: str, modified_by: str) -> UserRecord:
        authorize(self.resolve_actor(modified_by), Operation.RESTORE)
        user = self.cache.restore(login, modified_by)
        logger.info("User restored", login=login, modified_by=modified_by)
        return user

    def _authorize_target(self, actor_login: str, operation: Operation, target_login: str) -> UserRecord:
        actor = self.resolve_actor(actor_login)
        if actor is None:
            raise AuthenticationRequiredError()
        target = self.store.get(target_login)
        if target is None:
            raise UserNotFoundError(target_login)
        return authorize(actor, operation, target)

    def _paginate(self, users: List[UserRecord], page_number: int, page_size: Optional[int]) -> Page[UserRecord]:
        if page_size is None:
            page_size = self.settings.default_page_size
        validation.validate_paging(page_number, page_size)
        page_size = min(page_size, self.settings.max_page_size)
        start = (page_number - 1) * page_size
        return Page[UserRecord](
            items=users[start:start + page_size],
            page=page_number,
            page_size=page_size,
            total_count=len(users),
        )
