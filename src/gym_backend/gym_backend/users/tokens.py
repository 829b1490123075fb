"""Signed access/refresh tokens.

Both kinds carry {"id", "role"} and are signed with independent secrets, so a
refresh token is never accepted where an access token is expected.
"""
from __future__ import annotations

from dataclasses import dataclass

from itsdangerous import BadSignature, URLSafeTimedSerializer

from ..core.exceptions import InvalidTokenError
from .model import User


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenSigner:
    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl_minutes: int,
        refresh_ttl_days: int,
    ):
        self._access = URLSafeTimedSerializer(access_secret, salt="gym-access")
        self._refresh = URLSafeTimedSerializer(refresh_secret, salt="gym-refresh")
        self._access_max_age = int(access_ttl_minutes) * 60
        self._refresh_max_age = int(refresh_ttl_days) * 24 * 60 * 60

    def sign_pair(self, user: User) -> TokenPair:
        claims = {"id": user.user_id, "role": user.role.value}
        return TokenPair(
            access_token=self._access.dumps(claims),
            refresh_token=self._refresh.dumps(claims),
        )

    def verify_access(self, token: str) -> dict:
        return self._load(self._access, token, self._access_max_age)

    def verify_refresh(self, token: str) -> dict:
        return self._load(self._refresh, token, self._refresh_max_age)

    @staticmethod
    def _load(serializer: URLSafeTimedSerializer, token: str, max_age: int) -> dict:
        if not token:
            raise InvalidTokenError("Invalid token")
        try:
            claims = serializer.loads(token, max_age=max_age)
        except BadSignature:
            raise InvalidTokenError("Invalid token")
        if not isinstance(claims, dict) or "id" not in claims or "role" not in claims:
            raise InvalidTokenError("Invalid token")
        return claims
