"""Unit tests for user accounts and token helpers."""

from datetime import timedelta

import jwt
import pytest

from airline.core.cache import CacheKeys
from airline.core.config import settings
from airline.core.exceptions import AuthenticationError, ConflictError
from airline.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from airline.models import UserRole
from airline.schemas.user import RegisterRequest
from airline.services.user_service import UserService


def _register_request(username: str = "newuser", role: UserRole = UserRole.USER) -> RegisterRequest:
    return RegisterRequest(
        username=username,
        password="secret123",
        email=f"{username}@airline.example",
        role=role,
    )


@pytest.mark.asyncio
async def test_register_hashes_password(test_session, mapper, cache):
    service = UserService(test_session, mapper, cache)

    dto = await service.register(_register_request())
    stored = await service.get_user_by_username("newuser")

    assert dto.id == stored.id
    assert dto.role == UserRole.USER
    assert stored.password != "secret123"
    assert verify_password("secret123", stored.password)


@pytest.mark.asyncio
async def test_register_duplicate_username_conflicts(test_session, mapper, cache):
    service = UserService(test_session, mapper, cache)
    await service.register(_register_request())

    with pytest.raises(ConflictError) as exc_info:
        await service.register(_register_request())

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_register_invalidates_user_list(test_session, mapper, cache):
    cache.set(CacheKeys.USERS, [])
    service = UserService(test_session, mapper, cache)

    await service.register(_register_request(role=UserRole.MANAGER))

    assert CacheKeys.USERS not in cache


@pytest.mark.asyncio
async def test_authenticate(test_session, mapper):
    service = UserService(test_session, mapper)
    await service.register(_register_request())

    assert (await service.authenticate("newuser", "secret123")).username == "newuser"
    assert await service.authenticate("newuser", "wrong-password") is None
    assert await service.authenticate("nobody", "secret123") is None


def test_password_hashes_are_salted():
    first = hash_password("secret123")
    second = hash_password("secret123")

    assert first != second
    assert verify_password("secret123", first)
    assert verify_password("secret123", second)


def test_verify_password_rejects_garbage():
    assert not verify_password("secret123", "not-base64!")
    assert not verify_password("secret123", "")


def test_token_round_trip():
    token = create_access_token(5, "alice", "Manager")

    claims = decode_access_token(token)

    assert claims["sub"] == "5"
    assert claims["username"] == "alice"
    assert claims["role"] == "Manager"
    assert claims["iss"] == settings.jwt_issuer


def test_expired_token_rejected():
    token = create_access_token(5, "alice", "User", expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_wrong_audience_rejected():
    token = jwt.encode(
        {"sub": "5", "username": "alice", "role": "User", "aud": "someone-else", "exp": 9999999999},
        settings.jwt_secret_key,
        algorithm="HS256",
    )

    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_tampered_signature_rejected():
    token = create_access_token(5, "alice", "User")

    with pytest.raises(AuthenticationError):
        decode_access_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1])
