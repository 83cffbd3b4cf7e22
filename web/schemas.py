"""Request and response bodies for the HTTP API"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from userdir.models.user import Gender, Page, UserRecord


class LoginRequest(BaseModel):
    login: str
    password: str


class TokenResponse(BaseModel):
    token: str


class PasswordUpdateRequest(BaseModel):
    new_password: str


class LoginUpdateRequest(BaseModel):
    new_login: str


class CreatedUser(BaseModel):
    id: str
    login: str


class LoginChanged(BaseModel):
    old_login: str
    new_login: str


class MessageResponse(BaseModel):
    message: str


class UserProfile(BaseModel):
    name: str
    gender: Gender
    birthday: Optional[date] = None
    is_active: bool


class UserAdminProfile(UserProfile):
    login: str
    is_admin: bool
    created_on: datetime
    created_by: str
    modified_on: datetime
    modified_by: str
    revoked_on: Optional[datetime] = None
    revoked_by: Optional[str] = None


class UserPage(BaseModel):
    items: List[UserAdminProfile]
    page: int
    page_size: int
    total_count: int
    total_pages: int


def to_profile(user: UserRecord) -> UserProfile:
    return UserProfile(
        name=user.name,
        gender=user.gender,
        birthday=user.birthday,
        is_active=user.is_active,
    )


def to_admin_profile(user: UserRecord) -> UserAdminProfile:
    return UserAdminProfile(
        login=user.login,
        name=user.name,
        gender=user.gender,
        birthday=user.birthday,
        is_active=user.is_active,
        is_admin=user.is_admin,
        created_on=user.created_on,
        created_by=user.created_by,
        modified_on=user.modified_on,
        modified_by=user.modified_by,
        revoked_on=user.revoked_on,
        revoked_by=user.revoked_by,
    )


def to_user_page(page: Page[UserRecord]) -> UserPage:
    return UserPage(
        items=[to_admin_profile(u) for u in page.items],
        page=page.page,
        page_size=page.page_size,
        total_count=page.total_count,
        total_pages=page.total_pages,
    )
