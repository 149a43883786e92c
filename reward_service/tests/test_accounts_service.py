from __future__ import annotations

from datetime import timedelta

import pytest

from reward_service.app.exceptions import (
    Conflict,
    Forbidden,
    Unauthorized,
    ValidationError,
)
from reward_service.app.models.context import RequestContext
from reward_service.app.security import hash_password, verify_password


def test_signup_creates_user_with_zero_coins_and_session(world, clock) -> None:
    user, session = world.accounts_service.signup("  alice ", "secret1")

    assert user.name == "alice"
    assert user.coins == 0
    assert user.is_admin is False
    assert verify_password("secret1", user.password_hash)
    assert session.user_id == user.user_id
    assert session.expires_at == clock() + timedelta(hours=24)
    assert world.sessions.find_by_session_id(session.session_id) is not None


@pytest.mark.parametrize(
    ("name", "password"),
    [("al", "secret1"), ("alice", "12345"), ("   ", "secret1")],
)
def test_signup_validates_input(world, name, password) -> None:
    with pytest.raises(ValidationError):
        world.accounts_service.signup(name, password)


def test_signup_rejects_reserved_and_duplicate_names(world) -> None:
    service = world.accounts_service
    service.signup("alice", "secret1")

    with pytest.raises(Conflict):
        service.signup("alice", "secret2")
    with pytest.raises(ValidationError):
        service.signup("ADMIN", "secret1")


def test_login_with_wrong_password_is_unauthorized(world) -> None:
    service = world.accounts_service
    service.signup("alice", "secret1")

    with pytest.raises(Unauthorized) as exc_info:
        service.login("alice", "wrong-pass")
    assert exc_info.value.message == "Incorrect username or password"

    with pytest.raises(Unauthorized):
        service.login("nobody", "secret1")

    user, _ = service.login("alice", "secret1")
    assert user.name == "alice"


def test_resolve_and_logout(world) -> None:
    service = world.accounts_service
    user, session = service.signup("alice", "secret1")

    ctx = service.resolve(session.session_id)
    assert ctx.user is not None and ctx.user.user_id == user.user_id

    service.logout(ctx)
    assert service.resolve(session.session_id).is_authenticated is False
    with pytest.raises(Unauthorized):
        service.logout(RequestContext.anonymous())


def test_expired_session_resolves_to_anonymous(world, clock) -> None:
    service = world.accounts_service
    _, session = service.signup("alice", "secret1")

    clock.advance(hours=24)

    assert service.resolve(session.session_id).is_authenticated is False
    assert world.sessions.find_by_session_id(session.session_id) is None


def test_resolve_unknown_or_missing_session(world) -> None:
    service = world.accounts_service

    assert service.resolve(None).user is None
    assert service.resolve("no-such-session").user is None


def test_update_profile_rotates_sessions(world) -> None:
    service = world.accounts_service
    user, first = service.signup("alice", "secret1")
    _, second = service.login("alice", "secret1")

    updated, fresh = service.update_profile(
        service.resolve(first.session_id), "alice2", "secret1", "newsecret"
    )

    assert updated.name == "alice2"
    assert world.sessions.find_by_session_id(first.session_id) is None
    assert world.sessions.find_by_session_id(second.session_id) is None
    assert service.resolve(fresh.session_id).user.name == "alice2"
    service.login("alice2", "newsecret")
    with pytest.raises(Unauthorized):
        service.login("alice2", "secret1")


def test_update_profile_requires_current_password(world) -> None:
    service = world.accounts_service
    _, session = service.signup("alice", "secret1")
    ctx = service.resolve(session.session_id)

    with pytest.raises(ValidationError):
        service.update_profile(ctx, "alice", "")
    with pytest.raises(ValidationError):
        service.update_profile(ctx, "alice", "wrong-pass")
    with pytest.raises(ValidationError):
        service.update_profile(ctx, "alice", "secret1", "short")


def test_update_profile_rejects_taken_name(world) -> None:
    service = world.accounts_service
    service.signup("bob", "secret1")
    _, session = service.signup("alice", "secret1")

    with pytest.raises(Conflict):
        service.update_profile(service.resolve(session.session_id), "bob", "secret1")


def test_admin_name_cannot_be_changed(world) -> None:
    admin = world.add_user(
        "admin", is_admin=True, password_hash=hash_password("admin-secret")
    )

    with pytest.raises(Forbidden):
        world.accounts_service.update_profile(
            world.context_for(admin), "boss", "admin-secret"
        )


def test_ensure_admin_creates_then_promotes(world) -> None:
    service = world.accounts_service

    admin = service.ensure_admin()
    assert admin is not None and admin.is_admin
    assert service.ensure_admin().user_id == admin.user_id

    world.users.users.clear()
    world.add_user("admin")
    promoted = service.ensure_admin()
    assert promoted.is_admin is True


def test_ensure_admin_without_password_is_noop(world) -> None:
    world.auth_config.admin_password = None

    assert world.accounts_service.ensure_admin() is None
    assert world.users.users == {}


def test_password_hash_uses_werkzeug_format() -> None:
    encoded = hash_password("secret1")

    assert encoded != "secret1"
    assert "$" in encoded
    assert verify_password("secret1", encoded)
    assert not verify_password("secret2", encoded)


@pytest.mark.parametrize("encoded", ["", "unused", "md5-legacy$abc$def"])
def test_malformed_password_hash_never_matches(encoded) -> None:
    assert verify_password("secret1", encoded) is False
