from __future__ import annotations

from datetime import timedelta

import pytest

from src.gym_backend.gym_backend.core.enums import MemberStatus
from src.gym_backend.gym_backend.core.exceptions import ConflictError, NotFoundError, ValidationError

from tests.fakes import member_fields, package_fields


def test_membership_numbers_follow_year_and_count(container, fixed_now):
    svc = container.member_service
    first = svc.create_member(member_fields(), now=fixed_now)
    second = svc.create_member(member_fields(email="b@example.com"), now=fixed_now)

    assert first.membership_number == "GYM20250001"
    assert second.membership_number == "GYM20250002"
    assert first.status == MemberStatus.ACTIVE
    assert first.join_date == fixed_now


def test_duplicate_email_conflicts(container, fixed_now):
    container.member_service.create_member(member_fields(), now=fixed_now)
    with pytest.raises(ConflictError):
        container.member_service.create_member(member_fields(email="A@Example.com"), now=fixed_now)


def test_invalid_gender_lists_valid_values(container, fixed_now):
    with pytest.raises(ValidationError) as exc:
        container.member_service.create_member(member_fields(gender="robot"), now=fixed_now)
    assert exc.value.details["valid_values"] == ["male", "female", "other"]


def test_update_ignores_immutable_fields(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now)

    updated = container.member_service.update_member(
        member.member_id, {"phone": "0911111111", "membership_number": "HACKED", "total_visits": 99}
    )
    assert updated.phone == "0911111111"
    assert updated.membership_number == member.membership_number
    assert updated.total_visits == 0


def test_member_with_active_package_cannot_be_deleted(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now)
    package = container.package_service.create_package(package_fields())
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    with pytest.raises(ConflictError) as exc:
        container.member_service.delete_member(member.member_id, now=fixed_now)
    assert exc.value.details == {"active_packages": 1}

    container.member_service.delete_member(member.member_id, now=fixed_now + timedelta(days=31))
    with pytest.raises(NotFoundError):
        container.member_service.get_member(member.member_id)


def test_member_detail_statistics(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now - timedelta(days=10))
    package = container.package_service.create_package(package_fields())
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)
    container.attendance_service.check_in(member.member_id, now=fixed_now)

    detail = container.member_service.get_member_detail(member.member_id, now=fixed_now + timedelta(hours=1))

    assert len(detail.active_packages) == 1
    assert len(detail.recent_attendance) == 1
    assert detail.statistics["total_sessions"] == 1
    assert detail.statistics["this_month_sessions"] == 1
    assert detail.statistics["days_since_member"] == 10


def test_list_members_can_require_active_package(container, fixed_now):
    svc = container.member_service
    with_pkg = svc.create_member(member_fields(), now=fixed_now)
    svc.create_member(member_fields(email="b@example.com", full_name="Tran Thi B"), now=fixed_now)
    package = container.package_service.create_package(package_fields())
    container.registration_service.create_registration(with_pkg.member_id, package.package_id, now=fixed_now)

    everyone = svc.list_members(now=fixed_now)
    active_only = svc.list_members(has_active_package=True, now=fixed_now)
    by_name = svc.list_members(search="tran", now=fixed_now)

    assert everyone.total == 2
    assert [i["member"].member_id for i in active_only.items] == [with_pkg.member_id]
    assert [i["member"].full_name for i in by_name.items] == ["Tran Thi B"]
