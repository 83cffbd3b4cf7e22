"""
Authorization policy for directory operations.

Decisions are pure functions of (actor, operation, target). Each operation
maps to one requirement; checks run in a fixed precedence so the same
request always fails for the same reason.
"""

from enum import Enum
from typing import Dict, Optional

from ..models.user import UserRecord
from ..utils.exceptions import (
    AccountInactiveError,
    AccountUpdateForbiddenError,
    AdminAccessRequiredError,
    AuthenticationRequiredError,
)


class Operation(str, Enum):
    CREATE_USER = "create_user"
    CREATE_ADMIN = "create_admin"
    LIST_ACTIVE = "list_active"
    LIST_ALL = "list_all"
    LIST_OLDER_THAN = "list_older_than"
    GET_BY_LOGIN = "get_by_login"
    GET_SELF = "get_self"
    UPDATE_PROFILE = "update_profile"
    UPDATE_PASSWORD = "update_password"
    UPDATE_LOGIN = "update_login"
    DELETE = "delete"
    RESTORE = "restore"


class Requirement(str, Enum):
    ANY = "any"
    ACTIVE_ACTOR = "active_actor"
    ADMIN = "admin"
    SELF_OR_ADMIN = "self_or_admin"


OPERATION_REQUIREMENTS: Dict[Operation, Requirement] = {
    Operation.CREATE_USER: Requirement.ANY,
    Operation.CREATE_ADMIN: Requirement.ADMIN,
    Operation.LIST_ACTIVE: Requirement.ADMIN,
    Operation.LIST_ALL: Requirement.ADMIN,
    Operation.LIST_OLDER_THAN: Requirement.ADMIN,
    Operation.GET_BY_LOGIN: Requirement.ADMIN,
    Operation.GET_SELF: Requirement.ACTIVE_ACTOR,
    Operation.UPDATE_PROFILE: Requirement.SELF_OR_ADMIN,
    Operation.UPDATE_PASSWORD: Requirement.SELF_OR_ADMIN,
    Operation.UPDATE_LOGIN: Requirement.SELF_OR_ADMIN,
    Operation.DELETE: Requirement.ADMIN,
    Operation.RESTORE: Requirement.ADMIN,
}

ADMIN_MESSAGES: Dict[Operation, str] = {
    Operation.CREATE_ADMIN: "Only admins can create admin users",
    Operation.LIST_ACTIVE: "Only admin can get all active users",
    Operation.LIST_ALL: "Only admin can get all users",
    Operation.LIST_OLDER_THAN: "Only admin can get users older than specified age",
    Operation.GET_BY_LOGIN: "Only admin can get user by login",
    Operation.DELETE: "Only admin can delete users",
    Operation.RESTORE: "Only admin can restore users",
}


def authorize(
    actor: Optional[UserRecord],
    operation: Operation,
    target: Optional[UserRecord] = None,
) -> Optional[UserRecord]:
    """
    Allow or deny `actor` performing `operation` on `target`.

    Returns the actor when allowed; raises the matching authorization error
    otherwise. Self-or-admin operations need the target record.
    """
    requirement = OPERATION_REQUIREMENTS[operation]
    if requirement is Requirement.ANY:
        return actor

    if actor is None:
        raise AuthenticationRequiredError()

    if requirement is Requirement.ACTIVE_ACTOR:
        if not actor.is_active:
            raise AccountInactiveError()
        return actor

    if requirement is Requirement.ADMIN:
        if not actor.is_admin:
            raise AdminAccessRequiredError(ADMIN_MESSAGES.get(operation))
        return actor

    if target is None:
        raise ValueError(f"{operation.value} needs a target user")
    if actor.is_admin or (actor.login == target.login and target.is_active):
        return actor
    raise AccountUpdateForbiddenError()


def require_admin(actor: Optional[UserRecord]) -> UserRecord:
    """Admin gate for boundary actions that have no dedicated operation"""
    if actor is None:
        raise AuthenticationRequiredError()
    if not actor.is_admin:
        raise AdminAccessRequiredError()
    return actor
