"""Custom exceptions for the user directory"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure kinds surfaced to the boundary"""
    VALIDATION = "validation"
    LOGIN_ALREADY_EXISTS = "login_already_exists"
    USER_NOT_FOUND = "user_not_found"
    AUTHENTICATION_REQUIRED = "authentication_required"
    ACCOUNT_INACTIVE = "account_inactive"
    ADMIN_ACCESS_REQUIRED = "admin_access_required"
    ACCOUNT_UPDATE_FORBIDDEN = "account_update_forbidden"
    AUTHENTICATION_FAILED = "authentication_failed"
    CACHE_INTEGRITY = "cache_integrity"


class UserDirectoryError(Exception):
    """Base exception for the user directory"""

    kind: ErrorKind
    default_message = "User directory error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(UserDirectoryError):
    """Input shape rejected; no mutation took place"""
    kind = ErrorKind.VALIDATION
    default_message = "Validation failed"


class LoginAlreadyExistsError(UserDirectoryError):
    """Login is already taken by another record, active or revoked"""
    kind = ErrorKind.LOGIN_ALREADY_EXISTS

    def __init__(self, login: str):
        self.login = login
        super().__init__(f"Login: '{login}' - already exists")


class UserNotFoundError(UserDirectoryError):
    """Target login is absent from the store"""
    kind = ErrorKind.USER_NOT_FOUND

    def __init__(self, login: str):
        self.login = login
        super().__init__(f"User: '{login}' - not found")


class AuthenticationRequiredError(UserDirectoryError):
    kind = ErrorKind.AUTHENTICATION_REQUIRED
    default_message = "Authentication required"


class AccountInactiveError(UserDirectoryError):
    kind = ErrorKind.ACCOUNT_INACTIVE
    default_message = "Your account is inactive"


class AdminAccessRequiredError(UserDirectoryError):
    kind = ErrorKind.ADMIN_ACCESS_REQUIRED
    default_message = "Admin access required"


class AccountUpdateForbiddenError(UserDirectoryError):
    kind = ErrorKind.ACCOUNT_UPDATE_FORBIDDEN
    default_message = "You can only update your own active account"


class AuthenticationFailedError(UserDirectoryError):
    """Credential mismatch. The message never says which part was wrong."""
    kind = ErrorKind.AUTHENTICATION_FAILED
    default_message = "Invalid credentials"

    def __init__(self):
        super().__init__(self.default_message)


class CacheIntegrityError(UserDirectoryError):
    """Cache produced a null where a value was required. Always fatal."""
    kind = ErrorKind.CACHE_INTEGRITY

    def __init__(self, cache_key: str):
        self.cache_key = cache_key
        super().__init__(f"Cache returned null unexpectedly for key: {cache_key}")


class ConfigError(UserDirectoryError):
    """Configuration error"""
    kind = ErrorKind.VALIDATION
    default_message = "Invalid configuration"
