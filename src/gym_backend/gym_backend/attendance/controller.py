from __future__ import annotations

import csv
import io
from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import json_body, make_role_guard, ok, paged
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .report import REPORT_FIELDS

FLOOR_STAFF = (Role.ADMIN, Role.MANAGER, Role.RECEPTION, Role.TRAINER)


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    attendance = container.attendance_service

    def _parse_date(value: str, field_name: str):
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{field_name} must use YYYY-MM-DD format")

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @roles_required(*FLOOR_STAFF)
    def attendance_checkin():
        data = json_body()
        result = attendance.check_in(
            data.get("member_id"),
            note=data.get("note"),
            method=data.get("check_in_method") or "manual",
        )
        return ok(
            {
                "attendance": result.attendance,
                "member": {
                    "member_id": result.member.member_id,
                    "full_name": result.member.full_name,
                    "membership_number": result.member.membership_number,
                },
                "package": result.package_name,
                "remaining_sessions": result.registration.remaining_sessions,
            },
            status=201,
            message="Check-in successful",
        )

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @roles_required(*FLOOR_STAFF)
    def attendance_checkout():
        data = json_body()
        result = attendance.check_out(data.get("member_id"), note=data.get("note"))
        return ok(
            {
                "attendance": result.attendance,
                "workout_duration": result.workout_duration,
                "checkout_time": result.checkout_time,
            },
            message="Check-out successful",
        )

    @app.route("/api/attendance/qr", methods=["POST"], endpoint="attendance_qr")
    @roles_required(*FLOOR_STAFF)
    def attendance_qr():
        action, result = attendance.toggle_by_qr(json_body().get("qr_code"))
        message = "Check-out successful" if action == "checkout" else "Check-in successful"
        return ok({"action": action, "attendance": result.attendance}, message=message)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @roles_required(*FLOOR_STAFF)
    def attendance_today():
        return ok(attendance.get_today())

    @app.route("/api/attendance/overview", methods=["GET"], endpoint="attendance_overview")
    @roles_required(*FLOOR_STAFF)
    def attendance_overview():
        return ok(attendance.get_overview())

    @app.route("/api/attendance/member/<member_id>", methods=["GET"], endpoint="attendance_member")
    @roles_required(*FLOOR_STAFF)
    def attendance_member(member_id: str):
        args = request.args
        page, statistics = attendance.get_member_history(
            member_id,
            start=args.get("start_date"),
            end=args.get("end_date"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return ok(page.items, statistics=statistics, pagination=page.meta())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @roles_required(*FLOOR_STAFF)
    def attendance_list():
        args = request.args
        page = attendance.list_attendance(
            member_id=args.get("member_id"),
            status=args.get("status"),
            date=args.get("date"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page)

    @app.route("/api/attendance/export.csv", methods=["GET"], endpoint="attendance_export_csv")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def attendance_export_csv():
        today = now_local().date()
        start_s = request.args.get("start")
        end_s = request.args.get("end")
        start = _parse_date(start_s, "start") if start_s else today - timedelta(days=7)
        end = _parse_date(end_s, "end") if end_s else today
        if end < start:
            raise ValidationError("end must be on or after start")

        data = container.attendance_report_service.build_report(
            start=start,
            end=end,
            member_id=request.args.get("member_id"),
        )

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        filename = f"attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
