from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, make_role_guard, ok, paged
from ..common.validators import require_number
from ..core.enums import Role
from ..container import Container


def _optional_price(value, field_name: str):
    return None if value in (None, "") else require_number(value, field_name, minimum=0)


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    packages = container.package_service

    @app.route("/api/packages", methods=["GET"], endpoint="packages_list")
    @roles_required()
    def packages_list():
        args = request.args
        page = packages.list_packages(
            status=args.get("status"),
            min_price=_optional_price(args.get("min_price"), "min_price"),
            max_price=_optional_price(args.get("max_price"), "max_price"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page)

    @app.route("/api/packages/<package_id>", methods=["GET"], endpoint="packages_get")
    @roles_required()
    def packages_get(package_id: str):
        return ok(packages.get_package(package_id))

    @app.route("/api/packages", methods=["POST"], endpoint="packages_create")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def packages_create():
        return ok(packages.create_package(json_body()), status=201, message="Package created")

    @app.route("/api/packages/<package_id>", methods=["PUT"], endpoint="packages_update")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def packages_update(package_id: str):
        return ok(packages.update_package(package_id, json_body()), message="Package updated")

    @app.route("/api/packages/<package_id>", methods=["DELETE"], endpoint="packages_delete")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def packages_delete(package_id: str):
        packages.delete_package(package_id)
        return ok(message="Package deleted")
