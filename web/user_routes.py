"""
FastAPI routes for user management.

Prefix: /api/users

Every route resolves the caller first, then lets the directory service
apply its authorization rules; error kinds map to HTTP statuses in
auth_deps.STATUS_BY_KIND.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from userdir.models.user import UserCreate, UserUpdate
from userdir.services.directory_service import DirectoryService
from userdir.services.policy import Operation
from userdir.utils.result import capture

from .auth_deps import get_current_login, get_directory, unwrap
from .schemas import (
    CreatedUser,
    LoginChanged,
    LoginUpdateRequest,
    MessageResponse,
    PasswordUpdateRequest,
    UserAdminProfile,
    UserPage,
    UserProfile,
    to_admin_profile,
    to_profile,
    to_user_page,
)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=CreatedUser, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> CreatedUser:
    """Create a user. Admin only."""
    unwrap(capture(directory.require_admin, actor))
    user = unwrap(capture(directory.create_user, body, actor))
    return CreatedUser(id=user.id, login=user.login)


@router.get("", response_model=UserPage)
def list_active_users(
    page: int = Query(1),
    page_size: int = Query(10),
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserPage:
    """Active users ordered by creation time. Page size is capped at 100."""
    unwrap(capture(directory.authorize, actor, Operation.LIST_ACTIVE))
    return to_user_page(unwrap(capture(directory.list_active_paginated, page, page_size)))


@router.get("/all", response_model=UserPage)
def list_all_users(
    page: int = Query(1),
    page_size: int = Query(10),
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserPage:
    """All users including revoked ones."""
    unwrap(capture(directory.authorize, actor, Operation.LIST_ALL))
    return to_user_page(unwrap(capture(directory.list_all_paginated, page, page_size)))


@router.get("/self", response_model=UserProfile)
def get_current_user_info(
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserProfile:
    return to_profile(unwrap(capture(directory.get_current_user, actor)))


@router.get("/older-than/{age}", response_model=UserPage)
def list_users_older_than(
    age: int,
    page: int = Query(1),
    page_size: int = Query(10),
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserPage:
    unwrap(capture(directory.authorize, actor, Operation.LIST_OLDER_THAN))
    return to_user_page(unwrap(capture(directory.list_older_than_paginated, age, page, page_size)))


@router.get("/{login}", response_model=UserAdminProfile)
def get_user_by_login(
    login: str,
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserAdminProfile:
    unwrap(capture(directory.authorize, actor, Operation.GET_BY_LOGIN))
    return to_admin_profile(unwrap(capture(directory.get_by_login_cached, login)))


@router.put("/{login}", response_model=UserProfile)
def update_user(
    login: str,
    body: UserUpdate,
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserProfile:
    """Update name, gender or birthday. Self (while active) or admin."""
    return to_profile(unwrap(capture(directory.update_user, login, body, actor)))


@router.put("/{login}/password", response_model=MessageResponse)
def update_password(
    login: str,
    body: PasswordUpdateRequest,
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> MessageResponse:
    unwrap(capture(directory.update_password, login, body.new_password, actor))
    return MessageResponse(message="Password updated successfully")


@router.put("/{login}/login", response_model=LoginChanged)
def update_login(
    login: str,
    body: LoginUpdateRequest,
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> LoginChanged:
    user = unwrap(capture(directory.update_login, login, body.new_login, actor))
    return LoginChanged(old_login=login, new_login=user.login)


@router.delete("/{login}", response_model=MessageResponse)
def delete_user(
    login: str,
    soft_delete: bool = Query(True),
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> MessageResponse:
    """Soft delete by default; soft_delete=false removes the user for good. Admin only."""
    unwrap(capture(directory.delete_user, login, actor, soft_delete))
    return MessageResponse(message="User soft deleted" if soft_delete else "User permanently deleted")


@router.patch("/{login}/restore", response_model=UserProfile)
def restore_user(
    login: str,
    actor: str = Depends(get_current_login),
    directory: DirectoryService = Depends(get_directory),
) -> UserProfile:
    return to_profile(unwrap(capture(directory.restore_user, login, actor)))
