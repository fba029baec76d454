"""
Tests for session token handling
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt

from wander.core.errors import UnauthenticatedError
from wander.core.security import create_access_token, decode_access_token
from wander.core.settings import Settings


@pytest.fixture
def token_settings():
    return Settings(JWT_SECRET="unit-secret", JWT_AUDIENCE="authenticated", LOG_FILE="")


def test_token_round_trip(token_settings):
    user_id = uuid4()
    token = create_access_token(user_id, token_settings, email="meera@example.com")

    user = decode_access_token(token, token_settings)

    assert user.id == user_id
    assert user.email == "meera@example.com"
    assert user.role == "authenticated"


def test_expired_token_rejected(token_settings):
    token = create_access_token(uuid4(), token_settings, expires_delta=timedelta(seconds=-5))
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token, token_settings)


def test_wrong_secret_rejected(token_settings):
    token = create_access_token(uuid4(), Settings(JWT_SECRET="other", LOG_FILE=""))
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token, token_settings)


def test_wrong_audience_rejected(token_settings):
    token = jwt.encode(
        {"sub": str(uuid4()), "aud": "anon", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "unit-secret",
        algorithm="HS256",
    )
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token, token_settings)


def test_subject_must_be_a_user_id(token_settings):
    token = jwt.encode(
        {"sub": "service", "aud": "authenticated", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "unit-secret",
        algorithm="HS256",
    )
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token, token_settings)


def test_audience_check_can_be_disabled():
    settings = Settings(JWT_SECRET="unit-secret", JWT_AUDIENCE="", LOG_FILE="")
    user_id = uuid4()
    token = jwt.encode(
        {"sub": str(user_id), "aud": "anything", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "unit-secret",
        algorithm="HS256",
    )
    assert decode_access_token(token, settings).id == user_id
