from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, make_role_guard, ok, paged
from ..core.enums import Role
from ..container import Container

MANAGERS = (Role.ADMIN, Role.MANAGER)


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    employees = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @roles_required(*MANAGERS)
    def employees_list():
        args = request.args
        page = employees.list_employees(
            position=args.get("position"),
            department=args.get("department"),
            status=args.get("status"),
            search=args.get("search"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page)

    @app.route("/api/employees/statistics/overview", methods=["GET"], endpoint="employees_statistics")
    @roles_required(*MANAGERS)
    def employees_statistics():
        return ok(employees.get_statistics())

    @app.route("/api/employees/search/query", methods=["GET"], endpoint="employees_search")
    @roles_required(*MANAGERS)
    def employees_search():
        return ok(employees.search_employees(request.args.get("q")))

    @app.route("/api/employees/department/<department>", methods=["GET"], endpoint="employees_by_department")
    @roles_required(*MANAGERS)
    def employees_by_department(department: str):
        return ok(employees.get_by_department(department))

    @app.route("/api/employees/position/<position>", methods=["GET"], endpoint="employees_by_position")
    @roles_required(*MANAGERS)
    def employees_by_position(position: str):
        return ok(employees.get_by_position(position))

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @roles_required(*MANAGERS)
    def employees_create():
        return ok(employees.create_employee(json_body()), status=201, message="Employee created")

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="employees_get")
    @roles_required(*MANAGERS)
    def employees_get(employee_id: str):
        return ok(employees.get_employee(employee_id))

    @app.route("/api/employees/<employee_id>", methods=["PUT"], endpoint="employees_update")
    @roles_required(*MANAGERS)
    def employees_update(employee_id: str):
        return ok(employees.update_employee(employee_id, json_body()), message="Employee updated")

    @app.route("/api/employees/<employee_id>/status", methods=["PATCH"], endpoint="employees_status")
    @roles_required(*MANAGERS)
    def employees_status(employee_id: str):
        return ok(employees.update_status(employee_id, json_body().get("status")), message="Employee status updated")

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @roles_required(Role.ADMIN)
    def employees_delete(employee_id: str):
        employees.delete_employee(employee_id)
        return ok(message="Employee deleted")
