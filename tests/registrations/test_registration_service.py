from __future__ import annotations

from datetime import timedelta

import pytest

from src.gym_backend.gym_backend.core.enums import RegistrationStatus
from src.gym_backend.gym_backend.core.exceptions import ConflictError, NotFoundError, ValidationError

from tests.fakes import FailingMailSender, RecordingMailSender, make_container, member_fields, package_fields


def _member_and_package(c, fixed_now, **package_overrides):
    member = c.member_service.create_member(member_fields(), now=fixed_now)
    package = c.package_service.create_package(package_fields(**package_overrides))
    return member, package


def test_registration_sets_window_sessions_and_price(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)

    result = container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    reg = result.registration
    assert reg.start_date == fixed_now
    assert reg.end_date == fixed_now + timedelta(days=30)
    assert reg.remaining_sessions == 10
    assert reg.final_price == 500000
    assert reg.discount_amount == 0
    assert reg.status == RegistrationStatus.ACTIVE
    assert result.summary.member_name == "Nguyen Van A"
    assert result.email_sent is True


def test_registration_sends_confirmation_mail(fixed_now):
    outbox = RecordingMailSender()
    c = make_container(outbox)
    member, package = _member_and_package(c, fixed_now)

    c.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    assert [m["to"] for m in outbox.sent] == ["a@example.com"]


def test_second_registration_conflicts_until_first_ends(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    svc = container.registration_service
    svc.create_registration(member.member_id, package.package_id, now=fixed_now)

    with pytest.raises(ConflictError) as exc:
        svc.create_registration(member.member_id, package.package_id, now=fixed_now + timedelta(days=5))
    assert "active_package" in exc.value.details

    later = fixed_now + timedelta(days=31)
    result = svc.create_registration(member.member_id, package.package_id, now=later)
    assert result.registration.start_date == later


def test_cancelled_but_unexpired_registration_still_blocks(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    svc = container.registration_service
    first = svc.create_registration(member.member_id, package.package_id, now=fixed_now)
    svc.update_status(first.registration.registration_id, "cancelled", "changed mind", now=fixed_now)

    with pytest.raises(ConflictError):
        svc.create_registration(member.member_id, package.package_id, now=fixed_now + timedelta(days=1))


def test_discount_in_window_is_applied_and_counted(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    discount = container.discount_service.create_discount(
        {"code": "FLAT100K", "type": "fixed", "value": 100000, "start_date": "2025-03-01", "end_date": "2025-03-31"},
        now=fixed_now,
    )

    result = container.registration_service.create_registration(
        member.member_id, package.package_id, discount_id=discount.discount_id, now=fixed_now
    )

    assert result.registration.discount_amount == 100000
    assert result.registration.final_price == 400000
    assert result.registration.discount_id == discount.discount_id
    assert container.discount_service.get_discount(discount.discount_id, now=fixed_now).used_count == 1


def test_percentage_discount_ignores_cap_at_registration(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    discount = container.discount_service.create_discount(
        {
            "code": "HALF",
            "type": "percentage",
            "value": 50,
            "max_discount_amount": 100000,
            "start_date": "2025-03-01",
            "end_date": "2025-03-31",
        },
        now=fixed_now,
    )

    result = container.registration_service.create_registration(
        member.member_id, package.package_id, discount_id=discount.discount_id, now=fixed_now
    )
    assert result.registration.discount_amount == 250000


def test_out_of_window_discount_is_ignored(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    discount = container.discount_service.create_discount(
        {"code": "APRIL", "type": "fixed", "value": 100000, "start_date": "2025-04-01", "end_date": "2025-04-30"},
        now=fixed_now,
    )

    result = container.registration_service.create_registration(
        member.member_id, package.package_id, discount_id=discount.discount_id, now=fixed_now
    )
    assert result.registration.final_price == 500000
    assert result.registration.discount_id is None
    assert container.discount_service.get_discount(discount.discount_id, now=fixed_now).used_count == 0


def test_mail_failure_does_not_fail_registration(fixed_now):
    c = make_container(FailingMailSender())
    member, package = _member_and_package(c, fixed_now)

    result = c.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    assert result.email_sent is False
    assert c.registrations_repo.get_by_id(result.registration.registration_id) is not None


def test_unknown_member_or_package(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    with pytest.raises(NotFoundError, match="Member"):
        container.registration_service.create_registration("missing", package.package_id, now=fixed_now)
    with pytest.raises(NotFoundError, match="Package"):
        container.registration_service.create_registration(member.member_id, "missing", now=fixed_now)


def test_update_status_rejects_unknown_status(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    reg = container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    with pytest.raises(ValidationError) as exc:
        container.registration_service.update_status(reg.registration.registration_id, "paused", now=fixed_now)
    assert "active" in exc.value.details["valid_values"]


def test_list_registrations_describes_member_and_package(container, fixed_now):
    member, package = _member_and_package(container, fixed_now)
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    page = container.registration_service.list_registrations(member_id=member.member_id)
    assert page.total == 1
    item = page.items[0]
    assert item["member"]["full_name"] == "Nguyen Van A"
    assert item["package"]["name"] == "Basic 30 days"
    assert item["discount"] is None
