from __future__ import annotations

import io

import qrcode
from flask import Flask, request, send_file

from ..common.http import json_body, make_role_guard, ok, paged
from ..core.enums import Role
from ..container import Container

STAFF = (Role.ADMIN, Role.MANAGER, Role.RECEPTION)
STAFF_AND_TRAINERS = STAFF + (Role.TRAINER,)


def membership_qr_png(membership_number: str) -> io.BytesIO:
    """Render the membership number as a PNG QR code, ready to stream."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(membership_number)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    members = container.member_service

    @app.route("/api/members", methods=["GET"], endpoint="members_list")
    @roles_required(*STAFF)
    def members_list():
        args = request.args
        page = members.list_members(
            status=args.get("status"),
            gender=args.get("gender"),
            search=args.get("search"),
            has_active_package=args.get("has_active_package", "").lower() in {"1", "true", "yes"},
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page)

    @app.route("/api/members", methods=["POST"], endpoint="members_create")
    @roles_required(*STAFF)
    def members_create():
        member = members.create_member(json_body())
        return ok(member, status=201, message="Member created")

    @app.route("/api/members/<member_id>", methods=["GET"], endpoint="members_get")
    @roles_required(*STAFF_AND_TRAINERS)
    def members_get(member_id: str):
        return ok(members.get_member_detail(member_id))

    @app.route("/api/members/<member_id>", methods=["PUT"], endpoint="members_update")
    @roles_required(*STAFF)
    def members_update(member_id: str):
        return ok(members.update_member(member_id, json_body()), message="Member updated")

    @app.route("/api/members/<member_id>", methods=["DELETE"], endpoint="members_delete")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def members_delete(member_id: str):
        member = members.delete_member(member_id)
        return ok({"member_id": member.member_id}, message="Member deleted")

    @app.route("/api/members/<member_id>/active-packages", methods=["GET"], endpoint="members_active_packages")
    @roles_required(*STAFF_AND_TRAINERS)
    def members_active_packages(member_id: str):
        member, packages = members.get_active_packages(member_id)
        return ok(
            {
                "member": {"member_id": member.member_id, "full_name": member.full_name, "email": member.email},
                "active_packages": packages,
                "count": len(packages),
            }
        )

    @app.route("/api/members/<member_id>/qr", methods=["GET"], endpoint="members_qr")
    @roles_required(*STAFF)
    def members_qr(member_id: str):
        member = members.get_member(member_id)
        return send_file(
            membership_qr_png(member.membership_number),
            mimetype="image/png",
            download_name=f"{member.membership_number}.png",
        )
