from __future__ import annotations

import pytest

from src.gym_backend.gym_backend.core.enums import Role
from src.gym_backend.gym_backend.core.exceptions import InvalidTokenError
from src.gym_backend.gym_backend.users.model import User
from src.gym_backend.gym_backend.users.tokens import TokenSigner

from tests.fakes import make_tokens

USER = User(user_id="u1", full_name="Manager", email="m@gym.local", password_hash="x", role=Role.MANAGER)


def test_pair_carries_id_and_role():
    signer = make_tokens()
    pair = signer.sign_pair(USER)

    assert signer.verify_access(pair.access_token) == {"id": "u1", "role": "manager"}
    assert signer.verify_refresh(pair.refresh_token) == {"id": "u1", "role": "manager"}


def test_access_and_refresh_are_not_interchangeable():
    signer = make_tokens()
    pair = signer.sign_pair(USER)

    with pytest.raises(InvalidTokenError):
        signer.verify_access(pair.refresh_token)
    with pytest.raises(InvalidTokenError):
        signer.verify_refresh(pair.access_token)


def test_token_from_another_secret_is_rejected():
    other = TokenSigner(access_secret="x", refresh_secret="y", access_ttl_minutes=15, refresh_ttl_days=7)
    token = other.sign_pair(USER).access_token

    with pytest.raises(InvalidTokenError):
        make_tokens().verify_access(token)


def test_expired_access_token_is_rejected():
    signer = TokenSigner(access_secret="a", refresh_secret="r", access_ttl_minutes=-1, refresh_ttl_days=7)
    token = signer.sign_pair(USER).access_token

    with pytest.raises(InvalidTokenError):
        signer.verify_access(token)


def test_empty_token_is_rejected():
    with pytest.raises(InvalidTokenError):
        make_tokens().verify_access("")
