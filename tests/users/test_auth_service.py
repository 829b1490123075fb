from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.gym_backend.gym_backend.core.enums import Role
from src.gym_backend.gym_backend.core.exceptions import (
    AuthenticationError,
    ConflictError,
    EmailNotVerifiedError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from src.gym_backend.gym_backend.notifications.mailer import Notifier
from src.gym_backend.gym_backend.users.service import FORGOT_PASSWORD_MESSAGE, AuthService, generate_code

from tests.fakes import FailingMailSender, InMemoryUsers, RecordingMailSender, make_tokens

NOW = datetime(2025, 3, 10, 9, 0, 0)


class FixedCodes:
    def __init__(self, *codes: str):
        self._codes = list(codes)

    def __call__(self) -> str:
        return self._codes.pop(0)


def _service(*codes: str, sender=None):
    users = InMemoryUsers()
    outbox = sender or RecordingMailSender()
    svc = AuthService(users, Notifier(outbox), make_tokens(), code_factory=FixedCodes(*codes))
    return svc, users, outbox


def _verified(svc):
    svc.register(full_name="Reception One", email="desk@gym.local", password="secret1", now=NOW)
    svc.verify_email(email="desk@gym.local", code="111111", now=NOW)


def test_generate_code_has_six_digits():
    code = generate_code()
    assert len(code) == 6
    assert code.isdigit()
    assert code[0] != "0"


def test_register_defaults_to_reception_and_mails_code():
    svc, users, outbox = _service("111111")

    result = svc.register(full_name="Reception One", email="Desk@Gym.local", password="secret1", now=NOW)

    assert result.user.role == Role.RECEPTION
    assert result.user.email == "desk@gym.local"
    assert result.user.is_email_verified is False
    assert result.email_sent is True
    assert "111111" in outbox.sent[0]["html"]
    assert result.user.codes[0].expires_at == NOW + timedelta(minutes=15)


def test_register_ignores_role_unless_assigned_by_admin_or_manager():
    svc, _, _ = _service("111111", "222222", "333333")

    anonymous = svc.register(full_name="A", email="a@gym.local", password="secret1", role="admin", now=NOW)
    by_trainer = svc.register(
        full_name="B", email="b@gym.local", password="secret1", role="admin", assigned_by="trainer", now=NOW
    )
    by_admin = svc.register(
        full_name="C", email="c@gym.local", password="secret1", role="manager", assigned_by="admin", now=NOW
    )

    assert anonymous.user.role == Role.RECEPTION
    assert by_trainer.user.role == Role.RECEPTION
    assert by_admin.user.role == Role.MANAGER


def test_register_duplicate_email():
    svc, _, _ = _service("111111", "222222")
    svc.register(full_name="A", email="a@gym.local", password="secret1", now=NOW)
    with pytest.raises(ConflictError):
        svc.register(full_name="B", email="a@gym.local", password="secret1", now=NOW)


def test_register_still_succeeds_when_mail_fails():
    svc, users, _ = _service("111111", sender=FailingMailSender())
    result = svc.register(full_name="A", email="a@gym.local", password="secret1", now=NOW)
    assert result.email_sent is False
    assert users.get_by_email("a@gym.local") is not None


def test_verify_email_with_expired_code_keeps_user_unverified():
    svc, users, _ = _service("111111")
    svc.register(full_name="A", email="a@gym.local", password="secret1", now=NOW)

    with pytest.raises(ValidationError, match="Invalid or expired code"):
        svc.verify_email(email="a@gym.local", code="111111", now=NOW + timedelta(minutes=16))
    assert users.get_by_email("a@gym.local").is_email_verified is False


def test_verify_email_consumes_code():
    svc, users, _ = _service("111111")
    svc.register(full_name="A", email="a@gym.local", password="secret1", now=NOW)

    user = svc.verify_email(email="a@gym.local", code="111111", now=NOW + timedelta(minutes=5))
    assert user.is_email_verified is True
    assert user.codes == ()


def test_login_before_verification_is_flagged():
    svc, _, _ = _service("111111")
    svc.register(full_name="A", email="a@gym.local", password="secret1", now=NOW)

    with pytest.raises(EmailNotVerifiedError) as exc:
        svc.login(email="a@gym.local", password="secret1")
    assert exc.value.code == "EMAIL_NOT_VERIFIED"


def test_login_wrong_password_or_unknown_email():
    svc, _, _ = _service("111111")
    _verified(svc)

    with pytest.raises(AuthenticationError):
        svc.login(email="desk@gym.local", password="wrong-pass")
    with pytest.raises(AuthenticationError):
        svc.login(email="nobody@gym.local", password="secret1")


def test_login_and_refresh_issue_tokens():
    svc, _, _ = _service("111111")
    _verified(svc)

    result = svc.login(email="desk@gym.local", password="secret1")
    claims = svc.authenticate_access_token(result.tokens.access_token)
    assert claims == {"id": result.user.user_id, "role": "reception"}

    pair = svc.refresh(result.tokens.refresh_token)
    assert svc.authenticate_access_token(pair.access_token)["id"] == result.user.user_id


def test_refresh_rejects_access_token_and_garbage():
    svc, _, _ = _service("111111")
    _verified(svc)
    tokens = svc.login(email="desk@gym.local", password="secret1").tokens

    with pytest.raises(InvalidTokenError):
        svc.refresh(tokens.access_token)
    with pytest.raises(InvalidTokenError):
        svc.refresh("not-a-token")


def test_forgot_password_answer_does_not_reveal_accounts():
    svc, _, outbox = _service("111111", "222222")
    _verified(svc)

    unknown = svc.forgot_password(email="nobody@gym.local", now=NOW)
    known = svc.forgot_password(email="desk@gym.local", now=NOW)

    assert unknown == {"message": FORGOT_PASSWORD_MESSAGE}
    assert known["message"] == FORGOT_PASSWORD_MESSAGE
    assert "222222" in outbox.sent[-1]["html"]


def test_reset_password_with_code():
    svc, _, _ = _service("111111", "222222")
    _verified(svc)
    svc.forgot_password(email="desk@gym.local", now=NOW)

    with pytest.raises(ValidationError):
        svc.reset_password(email="desk@gym.local", code="999999", new_password="newpass1", now=NOW)

    svc.reset_password(email="desk@gym.local", code="222222", new_password="newpass1", now=NOW + timedelta(minutes=10))
    assert svc.login(email="desk@gym.local", password="newpass1").user.email == "desk@gym.local"
    with pytest.raises(ValidationError):
        svc.reset_password(email="desk@gym.local", code="222222", new_password="again12", now=NOW)


def test_resend_verification_replaces_old_code():
    svc, users, _ = _service("111111", "333333")
    svc.register(full_name="A", email="a@gym.local", password="secret1", now=NOW)

    assert svc.resend_verification(email="a@gym.local", now=NOW) is True
    codes = users.get_by_email("a@gym.local").codes
    assert [c.code for c in codes] == ["333333"]
    assert codes[0].expires_at == NOW + timedelta(minutes=10)

    with pytest.raises(NotFoundError):
        svc.resend_verification(email="nobody@gym.local", now=NOW)
