from __future__ import annotations

from datetime import timedelta

from tests.fakes import member_fields, package_fields


def test_report_rows_and_summary(container, fixed_now):
    member = container.member_service.create_member(member_fields(), now=fixed_now)
    package = container.package_service.create_package(package_fields(max_sessions=None))
    container.registration_service.create_registration(member.member_id, package.package_id, now=fixed_now)

    svc = container.attendance_service
    svc.check_in(member.member_id, now=fixed_now)
    svc.check_out(member.member_id, now=fixed_now + timedelta(minutes=60))
    svc.check_in(member.member_id, now=fixed_now + timedelta(days=1))

    report = container.attendance_report_service.build_report(
        start=fixed_now.date(), end=(fixed_now + timedelta(days=1)).date()
    )

    assert [r["workout_minutes"] for r in report.rows] == [60, 0]
    assert report.rows[0]["check_in"] == "09:00"
    assert report.rows[1]["check_out"] == "-"
    assert report.summary == [
        {"member_id": member.member_id, "full_name": "Nguyen Van A", "visits": 2, "total_minutes": 60}
    ]
