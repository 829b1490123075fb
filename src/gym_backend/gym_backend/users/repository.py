from __future__ import annotations

from typing import Any, Optional, Protocol

from ..core.enums import CodePurpose
from .model import User, VerificationCode


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def add_code(self, user_id: str, entry: VerificationCode) -> None:
        raise NotImplementedError

    def remove_code(self, user_id: str, entry: VerificationCode) -> None:
        raise NotImplementedError

    def remove_codes(self, user_id: str, purpose: CodePurpose) -> None:
        """Drop every code of the given purpose."""

        raise NotImplementedError

    def mark_email_verified(self, user_id: str) -> None:
        raise NotImplementedError

    def update_password(self, user_id: str, password_hash: str) -> None:
        raise NotImplementedError
