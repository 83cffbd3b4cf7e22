"""User data models for the directory"""

from __future__ import annotations

from datetime import date, datetime
from enum import IntEnum
from math import ceil
from typing import Generic, List, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class Gender(IntEnum):
    UNKNOWN = 0
    MALE = 1
    FEMALE = 2


class UserRecord(BaseModel):
    """
    One account in the directory.

    Records are immutable; the store swaps in a new instance on every
    mutation, so any list handed out is a stable snapshot.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    login: str
    password_hash: str
    name: str
    gender: Gender = Gender.UNKNOWN
    birthday: Optional[date] = None
    is_admin: bool = False
    created_on: datetime
    created_by: str
    modified_on: datetime
    modified_by: str
    revoked_on: Optional[datetime] = None
    revoked_by: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.revoked_on is None


class UserCreate(BaseModel):
    login: str
    password: str
    name: str
    gender: Gender = Gender.UNKNOWN
    birthday: Optional[date] = None
    is_admin: bool = False


class UserUpdate(BaseModel):
    """Profile changes; fields left as None are not touched."""
    name: Optional[str] = None
    gender: Optional[Gender] = None
    birthday: Optional[date] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total_count: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return ceil(self.total_count / self.page_size)
