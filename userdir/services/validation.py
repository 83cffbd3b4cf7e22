"""
Shape rules for user input.

Every function raises ValidationError with the specific reason and returns
nothing; callers run them before touching the store.
"""

import re
from datetime import date
from typing import Optional

from ..models.user import Gender, UserCreate, UserUpdate
from ..utils.exceptions import ValidationError

LOGIN_MIN_LENGTH = 4
LOGIN_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50

LOGIN_PATTERN = re.compile(r"^[a-zA-Z0-9_\-.]+$")
PASSWORD_PATTERN = re.compile(r"^[a-zA-Z0-9!@#$%^&*()_+=\[\]{};':\",./<>?\\|`~-]+$")
NAME_PATTERN = re.compile(r"^[a-zA-Zа-яА-ЯёЁ\s\-]+$")


def validate_login(login: Optional[str]) -> None:
    if login is None or not login.strip():
        raise ValidationError("Login required")
    if not LOGIN_MIN_LENGTH <= len(login) <= LOGIN_MAX_LENGTH:
        raise ValidationError(
            f"Login should be between {LOGIN_MIN_LENGTH} and {LOGIN_MAX_LENGTH} characters"
        )
    if not LOGIN_PATTERN.fullmatch(login):
        raise ValidationError("Login can contain only Latin letters, digits and _-.")


def validate_password(password: Optional[str]) -> None:
    if password is None or not password.strip():
        raise ValidationError("Password required")
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"The password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters"
        )
    if not PASSWORD_PATTERN.fullmatch(password):
        raise ValidationError(
            "The password can only contain Latin letters, numbers and special characters"
        )


def validate_name(name: Optional[str]) -> None:
    if name is None or not name.strip():
        raise ValidationError("Name required")
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"The name should be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    if not NAME_PATTERN.fullmatch(name):
        raise ValidationError("The name can only contain letters, spaces, and hyphens")


def validate_gender(gender) -> None:
    try:
        Gender(gender)
    except ValueError:
        raise ValidationError(f"Gender must be one of {[g.value for g in Gender]}")


def validate_birthday(birthday: Optional[date], today: Optional[date] = None) -> None:
    if birthday is None:
        return
    today = today or date.today()
    if birthday > today:
        raise ValidationError("Birthday cannot be in the future")


def validate_age(age: int) -> None:
    if age < 0:
        raise ValidationError("Age cannot be negative")


def validate_paging(page_number: int, page_size: int) -> None:
    if page_number < 1:
        raise ValidationError("Page number must be at least 1")
    if page_size < 1:
        raise ValidationError("Page size must be at least 1")


def validate_new_user(dto: UserCreate, today: Optional[date] = None) -> None:
    validate_login(dto.login)
    validate_password(dto.password)
    validate_name(dto.name)
    validate_gender(dto.gender)
    validate_birthday(dto.birthday, today)


def validate_profile_update(dto: UserUpdate, today: Optional[date] = None) -> None:
    if dto.name is not None:
        validate_name(dto.name)
    if dto.gender is not None:
        validate_gender(dto.gender)
    validate_birthday(dto.birthday, today)
