from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, make_role_guard, ok, paged
from ..core.enums import Role
from ..container import Container

FRONT_DESK = (Role.ADMIN, Role.MANAGER, Role.RECEPTION)


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    registrations = container.registration_service

    @app.route("/api/registrations", methods=["GET"], endpoint="registrations_list")
    @roles_required(*FRONT_DESK)
    def registrations_list():
        args = request.args
        page = registrations.list_registrations(
            member_id=args.get("member_id"),
            status=args.get("status"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page)

    @app.route("/api/registrations", methods=["POST"], endpoint="registrations_create")
    @roles_required(*FRONT_DESK)
    def registrations_create():
        data = json_body()
        result = registrations.create_registration(
            data.get("member_id"),
            data.get("package_id"),
            discount_id=data.get("discount_id") or None,
            payment_method=data.get("payment_method") or "cash",
        )
        return ok(
            {"registration": result.registration, "summary": result.summary},
            status=201,
            message="Package registered successfully",
            email_sent=result.email_sent,
        )

    @app.route("/api/registrations/<registration_id>", methods=["GET"], endpoint="registrations_get")
    @roles_required(*FRONT_DESK)
    def registrations_get(registration_id: str):
        return ok(registrations.get_registration(registration_id))

    @app.route("/api/registrations/<registration_id>/status", methods=["PUT"], endpoint="registrations_status")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def registrations_status(registration_id: str):
        data = json_body()
        registration = registrations.update_status(registration_id, data.get("status"), data.get("reason"))
        return ok(registration, message="Registration status updated")

    @app.route("/api/registrations/member/<member_id>/active", methods=["GET"], endpoint="registrations_member_active")
    @roles_required(*FRONT_DESK, Role.TRAINER)
    def registrations_member_active(member_id: str):
        items = registrations.get_member_active_packages(member_id)
        return ok({"member_id": member_id, "active_packages": items, "count": len(items)})
