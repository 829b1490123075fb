from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, make_role_guard, ok, paged
from ..core.enums import Role
from ..container import Container

MANAGERS = (Role.ADMIN, Role.MANAGER)


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    schedules = container.schedule_service

    @app.route("/api/work-schedules", methods=["GET"], endpoint="schedules_list")
    @roles_required(*MANAGERS)
    def schedules_list():
        args = request.args
        page = schedules.list_schedules(
            employee_id=args.get("employee_id"),
            date=args.get("date"),
            status=args.get("status"),
            shift_type=args.get("shift_type"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page, items=schedules.describe(page.items))

    @app.route("/api/work-schedules/<schedule_id>", methods=["GET"], endpoint="schedules_get")
    @roles_required(*MANAGERS)
    def schedules_get(schedule_id: str):
        return ok(schedules.describe([schedules.get_schedule(schedule_id)])[0])

    @app.route("/api/work-schedules", methods=["POST"], endpoint="schedules_create")
    @roles_required(*MANAGERS)
    def schedules_create():
        schedule = schedules.create_schedule(json_body())
        return ok(schedules.describe([schedule])[0], status=201, message="Work schedule created")

    @app.route("/api/work-schedules/<schedule_id>", methods=["PUT"], endpoint="schedules_update")
    @roles_required(*MANAGERS)
    def schedules_update(schedule_id: str):
        schedule = schedules.update_schedule(schedule_id, json_body())
        return ok(schedules.describe([schedule])[0], message="Work schedule updated")

    @app.route("/api/work-schedules/<schedule_id>", methods=["DELETE"], endpoint="schedules_delete")
    @roles_required(*MANAGERS)
    def schedules_delete(schedule_id: str):
        schedules.delete_schedule(schedule_id)
        return ok(message="Work schedule deleted")
