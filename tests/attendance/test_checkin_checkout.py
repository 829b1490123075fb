from __future__ import annotations

from datetime import timedelta

import pytest

from src.gym_backend.gym_backend.core.enums import AttendanceStatus, CheckInMethod
from src.gym_backend.gym_backend.core.exceptions import ConflictError, NotFoundError, ValidationError

from tests.fakes import member_fields, package_fields


@pytest.fixture
def registered(container, fixed_now):
    """A member holding a fresh 10-session package bought at fixed_now."""
    member = container.member_service.create_member(member_fields(), now=fixed_now)
    package = container.package_service.create_package(package_fields())
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)
    return member


def test_check_in_opens_visit_and_consumes_session(container, registered, fixed_now):
    result = container.attendance_service.check_in(registered.member_id, now=fixed_now)

    assert result.attendance.status == AttendanceStatus.CHECKED_IN
    assert result.attendance.checkout_time is None
    assert result.attendance.note == "Check-in with package Basic 30 days"
    assert result.registration.remaining_sessions == 9
    assert result.package_name == "Basic 30 days"

    member = container.members_repo.get_by_id(registered.member_id)
    assert member.total_visits == 1
    assert member.last_visit == fixed_now


def test_second_check_in_without_checkout_is_rejected(container, registered, fixed_now):
    svc = container.attendance_service
    svc.check_in(registered.member_id, now=fixed_now)

    with pytest.raises(ConflictError, match="already checked in"):
        svc.check_in(registered.member_id, now=fixed_now + timedelta(minutes=5))


def test_check_in_needs_a_started_active_package(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now)

    with pytest.raises(ValidationError, match="no active package"):
        container.attendance_service.check_in(member.member_id, now=fixed_now)


def test_check_in_after_package_end_is_rejected(container, registered, fixed_now):
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(registered.member_id, now=fixed_now + timedelta(days=31))


def test_check_in_on_the_last_day_of_the_package(container, registered, fixed_now):
    result = container.attendance_service.check_in(registered.member_id, now=fixed_now + timedelta(days=30))
    assert result.registration.remaining_sessions == 9


def test_unknown_member_cannot_check_in(container, fixed_now):
    with pytest.raises(NotFoundError):
        container.attendance_service.check_in("missing", now=fixed_now)


def test_checkout_rounds_duration_half_up(container, registered, fixed_now):
    svc = container.attendance_service
    svc.check_in(registered.member_id, now=fixed_now)

    result = svc.check_out(registered.member_id, note="leg day", now=fixed_now + timedelta(minutes=45, seconds=30))

    assert result.workout_duration == 46
    assert result.attendance.status == AttendanceStatus.COMPLETED
    assert result.attendance.workout_duration == 46
    assert result.attendance.note.endswith(" | Check-out: leg day")


def test_checkout_happens_exactly_once(container, registered, fixed_now):
    svc = container.attendance_service
    svc.check_in(registered.member_id, now=fixed_now)
    svc.check_out(registered.member_id, now=fixed_now + timedelta(hours=1))

    with pytest.raises(NotFoundError, match="No active check-in"):
        svc.check_out(registered.member_id, now=fixed_now + timedelta(hours=2))


def test_member_can_return_after_checkout_same_day(container, registered, fixed_now):
    svc = container.attendance_service
    svc.check_in(registered.member_id, now=fixed_now)
    svc.check_out(registered.member_id, now=fixed_now + timedelta(hours=1))

    again = svc.check_in(registered.member_id, now=fixed_now + timedelta(hours=5))
    assert again.registration.remaining_sessions == 8


def test_sessions_never_go_negative(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now)
    package = container.package_service.create_package(package_fields(code="ONE", max_sessions=1))
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)
    svc = container.attendance_service

    for day in range(3):
        at = fixed_now + timedelta(days=day)
        result = svc.check_in(member.member_id, now=at)
        svc.check_out(member.member_id, now=at + timedelta(hours=1))

    assert result.registration.remaining_sessions == 0


def test_unlimited_package_keeps_no_counter(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now)
    package = container.package_service.create_package(package_fields(code="UNL", max_sessions=None))
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    result = container.attendance_service.check_in(member.member_id, now=fixed_now)
    assert result.registration.remaining_sessions is None


def test_qr_scan_toggles_between_checkin_and_checkout(container, registered, fixed_now):
    svc = container.attendance_service

    action, first = svc.toggle_by_qr(registered.membership_number, now=fixed_now)
    assert action == "checkin"
    assert first.attendance.check_in_method == CheckInMethod.QR_CODE

    action, second = svc.toggle_by_qr(registered.membership_number, now=fixed_now + timedelta(minutes=30))
    assert action == "checkout"
    assert second.workout_duration == 30


def test_qr_scan_requires_payload(container, fixed_now):
    with pytest.raises(ValidationError):
        container.attendance_service.toggle_by_qr("  ", now=fixed_now)


def test_today_and_history(container, registered, fixed_now):
    svc = container.attendance_service
    svc.check_in(registered.member_id, now=fixed_now)

    today = svc.get_today(now=fixed_now + timedelta(minutes=20))
    assert today["summary"] == {"total_checkins": 1, "currently_in_gym": 1, "completed_sessions": 0}
    assert today["currently_in_gym"][0]["duration"] == 20

    svc.check_out(registered.member_id, now=fixed_now + timedelta(minutes=40))
    page, stats = svc.get_member_history(registered.member_id, now=fixed_now + timedelta(hours=1))
    assert page.total == 1
    assert stats["total_workout_minutes"] == 40
    assert stats["average_session_minutes"] == 40


def test_overview_reports_weekly_trend_and_most_active(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now - timedelta(days=7))
    package = container.package_service.create_package(package_fields(max_sessions=None))
    container.registration_service.create_registration(
        member.member_id, package.package_id, now=fixed_now - timedelta(days=7)
    )
    svc = container.attendance_service
    for day in (2, 1, 0):
        at = fixed_now - timedelta(days=day)
        svc.check_in(member.member_id, now=at)
        svc.check_out(member.member_id, now=at + timedelta(minutes=50))

    overview = svc.get_overview(now=fixed_now + timedelta(hours=2))
    assert overview["today"]["total_checkins"] == 1
    assert overview["today"]["avg_workout_duration"] == 50
    assert [row["count"] for row in overview["weekly_trend"]] == [1, 1, 1]
    assert overview["most_active_members"][0]["visit_count"] == 3
