from datetime import date
from math import ceil

import pytest

from userdir.models.user import Gender, UserUpdate
from userdir.utils.exceptions import (
    AccountInactiveError,
    AccountUpdateForbiddenError,
    AdminAccessRequiredError,
    AuthenticationFailedError,
    AuthenticationRequiredError,
    LoginAlreadyExistsError,
    UserNotFoundError,
    ValidationError,
)

ADMIN = "Admin"


def test_bootstrap_admin_is_seeded(directory):
    admin = directory.get_by_login_cached(ADMIN)

    assert admin.is_admin
    assert admin.is_active
    assert admin.name == "System Administrator"
    assert admin.created_by == "System"
    assert admin.modified_by == "System"
    assert admin.password_hash != "Admin_123"


def test_authenticate_bootstrap_admin(directory, sessions):
    token = directory.authenticate("Admin", "Admin_123")

    session = sessions.validate(token)
    assert session is not None
    assert session.login == "Admin"


def test_authentication_failures_are_indistinguishable(directory):
    with pytest.raises(AuthenticationFailedError) as wrong_password:
        directory.authenticate("Admin", "wrong")
    with pytest.raises(AuthenticationFailedError) as unknown_login:
        directory.authenticate("nobody", "x")

    assert type(wrong_password.value) is type(unknown_login.value)
    assert str(wrong_password.value) == str(unknown_login.value) == "Invalid credentials"


def test_revoked_user_cannot_authenticate(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.delete_user("alice", ADMIN, soft_delete=True)

    with pytest.raises(AuthenticationFailedError):
        directory.authenticate("alice", "Passw0rd!")
    assert directory.get_by_credentials("alice", "Passw0rd!") is None


def test_create_user_stamps_audit_and_hashes(directory, new_user):
    user = directory.create_user(new_user("alice", birthday=date(1990, 5, 1)), ADMIN)

    assert user.login == "alice"
    assert user.created_by == ADMIN
    assert user.modified_by == ADMIN
    assert user.created_on == user.modified_on
    assert user.password_hash != "Passw0rd!"
    assert directory.hasher.verify("Passw0rd!", user.password_hash)
    assert user.is_active


def test_create_validates_before_anything_else(directory, new_user):
    bad = new_user("al").model_copy(update={"is_admin": True})

    with pytest.raises(ValidationError):
        directory.create_user(bad, "nobody")
    with pytest.raises(ValidationError, match="future"):
        directory.create_user(new_user("future", birthday=date(2030, 1, 1)), ADMIN)


def test_create_admin_requires_admin_actor(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)

    with pytest.raises(AdminAccessRequiredError):
        directory.create_user(new_user("mallory", is_admin=True), "alice")
    with pytest.raises(AuthenticationRequiredError):
        directory.create_user(new_user("mallory", is_admin=True), "ghost")

    admin2 = directory.create_user(new_user("admin2", is_admin=True), ADMIN)
    assert admin2.is_admin


def test_create_rejects_taken_login_including_revoked(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    with pytest.raises(LoginAlreadyExistsError, match="alice"):
        directory.create_user(new_user("alice"), ADMIN)

    directory.delete_user("alice", ADMIN, soft_delete=True)
    with pytest.raises(LoginAlreadyExistsError):
        directory.create_user(new_user("alice"), ADMIN)

    directory.delete_user("alice", ADMIN, soft_delete=False)
    assert directory.create_user(new_user("alice"), ADMIN).login == "alice"


def test_pagination_clamps_and_covers_everything(directory, new_user):
    for i in range(120):
        directory.create_user(new_user(f"user{i:03d}"), ADMIN)

    page = directory.list_active_paginated(1, 500)
    assert page.page_size == 100
    assert page.total_count == 121
    assert page.total_pages == 2
    assert len(page.items) == 100

    expected = [u.login for u in directory.store.list_active()]
    collected = []
    small = directory.list_active_paginated(1, 7)
    for number in range(1, small.total_pages + 1):
        collected.extend(u.login for u in directory.list_active_paginated(number, 7).items)

    assert small.total_pages == ceil(121 / 7)
    assert collected == expected
    assert collected[0] == ADMIN
    assert directory.list_active_paginated(99, 7).items == []


def test_pagination_rejects_bad_paging(directory):
    with pytest.raises(ValidationError):
        directory.list_active_paginated(0, 10)
    with pytest.raises(ValidationError):
        directory.list_active_paginated(1, 0)


def test_list_all_includes_revoked(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.delete_user("alice", ADMIN)

    assert [u.login for u in directory.list_active_paginated().items] == [ADMIN]
    assert [u.login for u in directory.list_all_paginated().items] == [ADMIN, "alice"]


def test_list_older_than(directory, new_user):
    directory.create_user(new_user("senior", birthday=date(1960, 1, 1)), ADMIN)
    directory.create_user(new_user("adult", birthday=date(2000, 6, 15)), ADMIN)
    directory.create_user(new_user("teen", birthday=date(2010, 1, 1)), ADMIN)
    directory.create_user(new_user("nobday"), ADMIN)

    page = directory.list_older_than_paginated(26, 1, 10)

    assert [u.login for u in page.items] == ["senior", "adult"]
    assert page.total_count == 2
    assert page.total_pages == 1

    clamped = directory.list_older_than_paginated(0, 1, 1000)
    assert clamped.page_size == 100

    with pytest.raises(ValidationError):
        directory.list_older_than_paginated(-1)


def test_list_older_than_huge_age_is_an_empty_page(directory, new_user):
    directory.create_user(new_user("senior", birthday=date(1960, 1, 1)), ADMIN)

    page = directory.list_older_than_paginated(2100)

    assert page.items == []
    assert page.total_count == 0
    assert page.total_pages == 0


def test_get_by_login_cached_not_found(directory):
    with pytest.raises(UserNotFoundError):
        directory.get_by_login_cached("ghost")


def test_get_current_user(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    assert directory.get_current_user("alice").login == "alice"

    with pytest.raises(AuthenticationRequiredError):
        directory.get_current_user("ghost")
    with pytest.raises(AuthenticationRequiredError):
        directory.get_current_user(None)

    directory.delete_user("alice", ADMIN)
    with pytest.raises(AccountInactiveError):
        directory.get_current_user("alice")


def test_update_login_rekeys(directory, new_user):
    original = directory.create_user(new_user("alice"), ADMIN)
    directory.get_by_login_cached("alice")

    renamed = directory.update_login("alice", "alice2", "alice")

    assert renamed.id == original.id
    assert renamed.modified_by == "alice"
    with pytest.raises(UserNotFoundError):
        directory.get_by_login_cached("alice")
    assert directory.get_by_login_cached("alice2").id == original.id
    assert directory.store.get("alice") is None


def test_update_login_conflicts_and_shape(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.create_user(new_user("bobby"), ADMIN)

    with pytest.raises(LoginAlreadyExistsError):
        directory.update_login("alice", "bobby", ADMIN)
    with pytest.raises(ValidationError):
        directory.update_login("alice", "no spaces allowed", ADMIN)
    with pytest.raises(UserNotFoundError):
        directory.update_login("ghost", "ghost2", ADMIN)


def test_validation_runs_before_policy(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.create_user(new_user("bobby"), ADMIN)

    with pytest.raises(ValidationError):
        directory.update_login("bobby", "x", "alice")


def test_policy_runs_before_uniqueness(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.create_user(new_user("bobby"), ADMIN)

    with pytest.raises(AccountUpdateForbiddenError):
        directory.update_login("bobby", "alice", "alice")


def test_authorization_matrix(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.create_user(new_user("bobby"), ADMIN)

    with pytest.raises(AccountUpdateForbiddenError):
        directory.update_login("bobby", "bobby2", "alice")
    with pytest.raises(AccountUpdateForbiddenError):
        directory.update_user("bobby", UserUpdate(name="Hacked"), "alice")
    with pytest.raises(AccountUpdateForbiddenError):
        directory.update_password("bobby", "NewPassw0rd", "alice")

    assert directory.update_user("alice", UserUpdate(name="Alice Self"), "alice").name == "Alice Self"

    directory.delete_user("alice", ADMIN)
    with pytest.raises(AccountUpdateForbiddenError):
        directory.update_login("alice", "alice2", "alice")

    # Admin may update revoked users
    assert directory.update_user("alice", UserUpdate(gender=Gender.MALE), ADMIN).gender == Gender.MALE
    assert directory.update_login("alice", "alice3", ADMIN).login == "alice3"

    with pytest.raises(AuthenticationRequiredError):
        directory.update_user("bobby", UserUpdate(name="Nobody"), "ghost")


def test_update_user_changes_only_given_fields(directory, new_user):
    before = directory.create_user(new_user("alice", birthday=date(1990, 1, 1)), ADMIN)

    after = directory.update_user("alice", UserUpdate(name="Alice Liddell"), ADMIN)

    assert after.name == "Alice Liddell"
    assert after.birthday == before.birthday
    assert after.gender == before.gender
    assert after.modified_by == ADMIN
    assert after.modified_on > before.modified_on


def test_update_password(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)

    directory.update_password("alice", "Brand_New_1", "alice")

    with pytest.raises(AuthenticationFailedError):
        directory.authenticate("alice", "Passw0rd!")
    assert directory.authenticate("alice", "Brand_New_1")

    with pytest.raises(ValidationError):
        directory.update_password("alice", "short", "alice")


def test_soft_delete_restore_round_trip(directory, new_user):
    before = directory.create_user(new_user("alice"), ADMIN)

    directory.delete_user("alice", ADMIN, soft_delete=True)
    revoked = directory.get_by_login_cached("alice")
    assert not revoked.is_active
    assert revoked.revoked_by == ADMIN

    restored = directory.restore_user("alice", ADMIN)

    assert restored.is_active
    assert restored.id == before.id
    assert restored.login == before.login
    assert restored.password_hash == before.password_hash
    assert restored.modified_on > before.modified_on


def test_delete_and_restore_are_admin_only(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.create_user(new_user("bobby"), ADMIN)

    with pytest.raises(AdminAccessRequiredError):
        directory.delete_user("bobby", "alice")
    with pytest.raises(AdminAccessRequiredError):
        directory.restore_user("bobby", "alice")
    with pytest.raises(AuthenticationRequiredError):
        directory.delete_user("bobby", "ghost")
    with pytest.raises(UserNotFoundError):
        directory.delete_user("ghost", ADMIN)
    with pytest.raises(UserNotFoundError):
        directory.restore_user("ghost", ADMIN)


def test_hard_delete_removes_user(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    directory.get_by_login_cached("alice")

    assert directory.delete_user("alice", ADMIN, soft_delete=False) is None

    with pytest.raises(UserNotFoundError):
        directory.get_by_login_cached("alice")
    assert [u.login for u in directory.list_all_paginated().items] == [ADMIN]


def test_reads_reflect_mutations_immediately(directory, new_user):
    directory.create_user(new_user("alice"), ADMIN)
    assert directory.get_by_login_cached("alice").name == "Test User"
    directory.list_active_paginated()

    directory.update_user("alice", UserUpdate(name="Renamed Person"), ADMIN)
    assert directory.get_by_login_cached("alice").name == "Renamed Person"

    directory.delete_user("alice", ADMIN)
    assert not directory.get_by_login_cached("alice").is_active
    assert "alice" not in [u.login for u in directory.list_active_paginated().items]


def test_end_to_end_scenario(directory):
    from userdir.models.user import UserCreate

    alice = UserCreate(login="alice", password="Wonder_land1", name="Alice")
    directory.create_user(alice, ADMIN)
    assert directory.get_by_login_cached("alice").name == "Alice"

    directory.delete_user("alice", ADMIN, soft_delete=True)
    assert "alice" not in [u.login for u in directory.list_active_paginated(1, 10).items]

    directory.restore_user("alice", ADMIN)
    assert "alice" in [u.login for u in directory.list_active_paginated(1, 10).items]


def test_authorize_for_boundary_reads(directory, new_user):
    from userdir.services.policy import Operation

    directory.create_user(new_user("alice"), ADMIN)

    assert directory.authorize(ADMIN, Operation.LIST_ACTIVE).login == ADMIN
    with pytest.raises(AdminAccessRequiredError):
        directory.authorize("alice", Operation.LIST_ALL)
    with pytest.raises(AuthenticationRequiredError):
        directory.authorize(None, Operation.GET_BY_LOGIN)
    with pytest.raises(UserNotFoundError):
        directory.authorize(ADMIN, Operation.UPDATE_PROFILE, "ghost")
