# tests/test_user_controller.py

from __future__ import annotations

from taskhub.core.access import AUTH_REQUIRED
from taskhub.users.user_controller import (
    ACCOUNT_INACTIVE,
    EMAIL_REQUIRED,
    EMPTY_QUERY,
    USER_NOT_FOUND,
    USERNAME_REQUIRED,
    UserController,
)


def test_register_and_duplicate(user_controller: UserController) -> None:
    result = user_controller.register({"username": "Carol", "email": "carol@example.com", "fullName": "Carol D"})
    assert result.success
    assert result.data["username"] == "carol"
    assert result.message == "User carol registered"

    dup = user_controller.register({"username": "carol", "email": "other@example.com"})
    assert dup.to_dict() == {"success": False, "error": "Username 'carol' is already taken"}


def test_register_requires_fields(user_controller: UserController) -> None:
    assert user_controller.register({"email": "x@example.com"}).error == USERNAME_REQUIRED
    assert user_controller.register({"username": "x", "email": " "}).error == EMAIL_REQUIRED
    assert user_controller.register({"username": "x", "email": "broken"}).error.startswith("Invalid email")


def test_login_records_last_login(user_controller: UserController, users, alice) -> None:
    result = user_controller.login("ALICE")
    assert result.success
    assert result.data["id"] == alice.id
    assert result.data["lastLoginAt"].endswith("Z")
    assert result.message == "Welcome, Alice Johnson!"
    assert alice.last_login_at is not None


def test_login_failures(user_controller: UserController, users, alice) -> None:
    assert user_controller.login("").error == USERNAME_REQUIRED
    assert user_controller.login("nobody").error == USER_NOT_FOUND
    users.delete(alice.id)
    assert user_controller.login("alice").error == ACCOUNT_INACTIVE


def test_current_user(user_controller: UserController, alice) -> None:
    assert user_controller.get_current_user(None).error == AUTH_REQUIRED
    profile = user_controller.get_current_user(alice.id).data
    assert profile["email"] == "alice@example.com"
    assert profile["preferences"]["theme"] == "light"


def test_update_profile_ignores_activation_and_checks_email(user_controller: UserController, alice, bob) -> None:
    result = user_controller.update_profile(alice.id, {"fullName": "Alice J", "isActive": False, "username": "x"})
    assert result.success
    assert result.data["fullName"] == "Alice J"
    assert alice.is_active
    assert alice.username == "alice"

    clash = user_controller.update_profile(alice.id, {"email": "bob@example.com"})
    assert not clash.success
    assert "already registered" in clash.error


def test_update_preferences_merges(user_controller: UserController, alice) -> None:
    result = user_controller.update_preferences(alice.id, {"theme": "dark"})
    assert result.data["theme"] == "dark"
    assert result.data["defaultCategory"] == "personal"


def test_deactivate_account_logs_actor_out(user_controller: UserController, alice) -> None:
    assert user_controller.deactivate_account(alice.id).message == "Account alice deactivated"
    assert user_controller.get_current_user(alice.id).error == AUTH_REQUIRED


def test_directory_lists_only_active_public_profiles(user_controller: UserController, users, alice, bob) -> None:
    users.delete(bob.id)
    listing = user_controller.get_all_users(alice.id)
    assert listing.data == [{"id": alice.id, "username": "alice", "fullName": "Alice Johnson"}]
    assert listing.count == 1

    found = user_controller.search_users(alice.id, "example")
    assert [u["username"] for u in found.data] == ["alice"]
    assert found.query == "example"
    assert user_controller.search_users(alice.id, "").error == EMPTY_QUERY


def test_get_user_by_id(user_controller: UserController, bob) -> None:
    assert user_controller.get_user_by_id(bob.id).data["username"] == "bob"
    assert user_controller.get_user_by_id("user_missing").error == USER_NOT_FOUND


def test_non_text_full_name_is_a_validation_failure(user_controller: UserController, alice) -> None:
    result = user_controller.update_profile(alice.id, {"fullName": 123})
    assert result.success is False
    assert result.error.startswith("Full name must be a string")
    assert alice.full_name == "Alice Johnson"

    registered = user_controller.register({"username": "carol", "email": "carol@example.com", "fullName": ["C"]})
    assert registered.success is False
    assert registered.error.startswith("Full name must be a string")
