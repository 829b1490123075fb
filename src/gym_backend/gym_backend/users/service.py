from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_enum, require_min_length, require_non_empty
from ..core.constants import (
    CODE_LENGTH,
    MIN_PASSWORD_LENGTH,
    RESEND_CODE_TTL_MINUTES,
    RESET_CODE_TTL_MINUTES,
    VERIFY_CODE_TTL_MINUTES,
)
from ..core.enums import CodePurpose, Role
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    EmailNotVerifiedError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from ..notifications.mailer import Notifier
from ..notifications.templates import reset_code_email, verification_code_email
from .model import User, VerificationCode
from .repository import UserRepository
from .tokens import TokenPair, TokenSigner

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If the email exists, a password reset code has been sent."
ROLE_ASSIGNERS = {Role.ADMIN.value, Role.MANAGER.value}


def generate_code(length: int = CODE_LENGTH) -> str:
    """Random numeric code without a leading zero."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(10**length - low))


@dataclass(frozen=True)
class RegisterResult:
    user: User
    email_sent: bool


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: TokenPair


class AuthService:
    """Use cases: sign up, email verification, login, password reset."""

    def __init__(
        self,
        users: UserRepository,
        notifier: Notifier,
        tokens: TokenSigner,
        *,
        code_factory: Optional[Callable[[], str]] = None,
    ):
        self._users = users
        self._notifier = notifier
        self._tokens = tokens
        self._code_factory = code_factory or generate_code

    def register(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        role: Optional[str] = None,
        assigned_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RegisterResult:
        """Create an unverified account and mail its verification code.

        `role` is honored only when `assigned_by` (the caller's role) is admin or manager;
        anyone else gets a reception account.
        """
        now = now or now_local()
        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        user_role = Role.RECEPTION
        if role and assigned_by in ROLE_ASSIGNERS:
            user_role = require_enum(Role, role, "Role")

        if self._users.get_by_email(email):
            raise ConflictError("Email already exists")

        user_id = self._users.create(
            {
                "full_name": full_name,
                "email": email,
                "password_hash": generate_password_hash(password),
                "role": user_role.value,
                "is_email_verified": False,
            }
        )
        code = self._issue_code(user_id, CodePurpose.VERIFY, VERIFY_CODE_TTL_MINUTES, now)
        logger.info("Registered user %s (%s)", user_id, user_role.value)

        subject, html = verification_code_email(full_name=full_name, code=code, ttl_minutes=VERIFY_CODE_TTL_MINUTES)
        email_sent = self._notifier.notify(email, subject, html)
        return RegisterResult(user=self._users.get_by_id(user_id), email_sent=email_sent)

    def verify_email(self, *, email: str, code: str, now: Optional[datetime] = None) -> User:
        now = now or now_local()
        user = self._require_by_email(email)

        entry = user.find_code(code, CodePurpose.VERIFY, now)
        if not entry:
            raise ValidationError("Invalid or expired code")

        self._users.mark_email_verified(user.user_id)
        self._users.remove_code(user.user_id, entry)
        return self._users.get_by_id(user.user_id)

    def login(self, *, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email(str(email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. a hand-edited record
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        if not user.is_email_verified:
            raise EmailNotVerifiedError()

        logger.info("User %s logged in", user.user_id)
        return LoginResult(user=user, tokens=self._tokens.sign_pair(user))

    def refresh(self, refresh_token: str) -> TokenPair:
        claims = self._tokens.verify_refresh(refresh_token)
        user = self._users.get_by_id(str(claims["id"]))
        if not user:
            raise InvalidTokenError("Invalid token")
        return self._tokens.sign_pair(user)

    def forgot_password(self, *, email: str, now: Optional[datetime] = None) -> dict:
        """Same answer whether or not the account exists."""
        now = now or now_local()
        user = self._users.get_by_email(str(email or "").strip().lower())
        if not user:
            return {"message": FORGOT_PASSWORD_MESSAGE}

        code = self._issue_code(user.user_id, CodePurpose.RESET, RESET_CODE_TTL_MINUTES, now)
        subject, html = reset_code_email(code=code, ttl_minutes=RESET_CODE_TTL_MINUTES)
        email_sent = self._notifier.notify(user.email, subject, html)
        return {"message": FORGOT_PASSWORD_MESSAGE, "email_sent": email_sent}

    def reset_password(
        self,
        *,
        email: str,
        code: str,
        new_password: str,
        now: Optional[datetime] = None,
    ) -> User:
        now = now or now_local()
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        user = self._require_by_email(email)

        entry = user.find_code(code, CodePurpose.RESET, now)
        if not entry:
            raise ValidationError("Invalid or expired code")

        self._users.update_password(user.user_id, generate_password_hash(new_password))
        self._users.remove_code(user.user_id, entry)
        logger.info("Password reset for user %s", user.user_id)
        return self._users.get_by_id(user.user_id)

    def resend_verification(self, *, email: str, now: Optional[datetime] = None) -> bool:
        now = now or now_local()
        user = self._require_by_email(email)
        if user.is_email_verified:
            raise ValidationError("Email is already verified")

        self._users.remove_codes(user.user_id, CodePurpose.VERIFY)
        code = self._issue_code(user.user_id, CodePurpose.VERIFY, RESEND_CODE_TTL_MINUTES, now)
        subject, html = verification_code_email(
            full_name=user.full_name, code=code, ttl_minutes=RESEND_CODE_TTL_MINUTES
        )
        return self._notifier.notify(user.email, subject, html)

    def authenticate_access_token(self, token: str) -> dict:
        return self._tokens.verify_access(token)

    def _issue_code(self, user_id: str, purpose: CodePurpose, ttl_minutes: int, now: datetime) -> str:
        code = self._code_factory()
        self._users.add_code(
            user_id,
            VerificationCode(code=code, purpose=purpose, expires_at=now + timedelta(minutes=ttl_minutes)),
        )
        return code

    def _require_by_email(self, email: str) -> User:
        user = self._users.get_by_email(str(email or "").strip().lower())
        if not user:
            raise NotFoundError("User not found")
        return user
