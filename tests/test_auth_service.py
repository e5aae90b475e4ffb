from datetime import datetime, timedelta, timezone
from itertools import product

import pytest

from kig_issues.auth.auth_service import AuthService, can_manage_issue, has_permission
from kig_issues.auth.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from kig_issues.models.user import ROLE_RANK, UserRole


@pytest.fixture
def auth_service(data_access):
    return AuthService(data_access)


@pytest.mark.asyncio
@pytest.mark.parametrize("email,password,user_id,role", [
    ("admin@kig.com", "admin123", "1", "admin"),
    ("leader@kig.com", "leader123", "2", "workGroupLeader"),
])
async def test_demo_login(auth_service, email, password, user_id, role):
    result = await auth_service.login(email, password)

    assert result["user"].id == user_id
    claims = decode_access_token(result["token"])
    assert claims["userId"] == user_id
    assert claims["sub"] == user_id
    assert claims["email"] == email
    assert claims["role"] == role


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["admin123", "", "anything"])
async def test_unknown_email_fails_regardless_of_password(auth_service, password):
    assert await auth_service.login("ghost@kig.com", password) is None


@pytest.mark.asyncio
async def test_wrong_password_fails(auth_service):
    assert await auth_service.login("admin@kig.com", "leader123") is None


def test_token_valid_for_seven_days():
    issued = datetime.now(timezone.utc) - timedelta(days=6, hours=23)
    token = create_access_token({"userId": "1", "role": "admin"}, now=issued)
    assert decode_access_token(token)["userId"] == "1"

    claims = decode_access_token(create_access_token({"userId": "1"}))
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_token_rejected_after_expiry():
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = create_access_token({"userId": "1", "role": "admin"}, now=issued)
    assert decode_access_token(token) is None


def test_token_signed_with_other_secret_rejected():
    token = create_access_token({"userId": "1", "role": "admin"}, secret="someone-else")
    assert decode_access_token(token) is None


def test_verify_token_requires_known_role(auth_service):
    token = create_access_token({"userId": "1", "role": "superuser"})
    assert auth_service.verify_token(token) is None
    assert auth_service.verify_token("garbage") is None


def test_password_hashing():
    hashed = hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret!", None)
    assert not verify_password("s3cret!", "plaintext")


def test_permission_is_monotonic_in_rank():
    roles = list(UserRole)
    for user_role, required in product(roles, roles):
        assert has_permission(user_role, required) == (ROLE_RANK[user_role] >= ROLE_RANK[required])
        if has_permission(user_role, required):
            for lower in roles:
                if ROLE_RANK[lower] <= ROLE_RANK[required]:
                    assert has_permission(user_role, lower)


@pytest.mark.asyncio
async def test_register_defaults_to_resident(auth_service, data_access):
    result = await auth_service.register({
        "email": "new@kig.com",
        "name": "New User",
        "password": "secret1",
    })

    user = result["user"]
    assert user.role == UserRole.RESIDENT
    assert decode_access_token(result["token"])["userId"] == user.id
    assert (await auth_service.login("new@kig.com", "secret1"))["user"].id == user.id

    stored = await data_access.get_user_by_id(user.id)
    assert stored.password_hash and stored.password_hash != "secret1"

    logs = await data_access.get_activity_logs()
    assert logs[0].type.value == "userJoined"
    assert logs[0].user_id == user.id


@pytest.mark.asyncio
async def test_get_user_from_token(auth_service):
    result = await auth_service.login("leader@kig.com", "leader123")
    user = await auth_service.get_user_from_token(result["token"])
    assert user.email == "leader@kig.com"


@pytest.mark.asyncio
async def test_issue_management_rights(data_access):
    users = {u.id: u for u in await data_access.get_users()}
    water = await data_access.get_issue_by_id("1")   # reported by leader, unassigned
    lights = await data_access.get_issue_by_id("2")  # assigned to admin

    assert can_manage_issue(users["1"], water)
    assert can_manage_issue(users["2"], water)
    assert can_manage_issue(users["1"], lights)
    # Leader reported it
    assert can_manage_issue(users["2"], lights)

    stranger = users["2"].model_copy(update={"id": "77", "role": UserRole.RESIDENT})
    assert not can_manage_issue(stranger, water)


@pytest.mark.asyncio
async def test_register_ignores_requested_role(auth_service, data_access):
    result = await auth_service.register({
        "email": "climber@kig.com",
        "name": "Social Climber",
        "password": "secret1",
        "role": "admin",
    })

    assert result["user"].role == UserRole.RESIDENT
    assert (await data_access.get_user_by_id(result["user"].id)).role == UserRole.RESIDENT
    assert decode_access_token(result["token"])["role"] == "resident"
