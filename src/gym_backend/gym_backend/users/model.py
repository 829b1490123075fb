from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..core.enums import CodePurpose, Role


@dataclass(frozen=True)
class VerificationCode:
    code: str
    purpose: CodePurpose
    expires_at: datetime

    def matches(self, code: str, purpose: CodePurpose, now: datetime) -> bool:
        return self.purpose == purpose and self.code == str(code) and self.expires_at > now


@dataclass(frozen=True)
class User:
    """Domain entity: a staff account that can sign in to the API.

    Note: Plain data object, no database access.
    """

    user_id: str
    full_name: str
    email: str
    password_hash: str
    role: Role
    is_email_verified: bool = False
    codes: tuple[VerificationCode, ...] = field(default_factory=tuple)

    def find_code(self, code: str, purpose: CodePurpose, now: datetime) -> VerificationCode | None:
        for entry in self.codes:
            if entry.matches(code, purpose, now):
                return entry
        return None

    def public_view(self) -> dict:
        return {"id": self.user_id, "full_name": self.full_name, "email": self.email, "role": self.role}
