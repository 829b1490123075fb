from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, make_role_guard, ok, paged
from ..core.enums import Role
from ..container import Container

MANAGERS = (Role.ADMIN, Role.MANAGER)


def register(app: Flask, container: Container) -> None:
    roles_required = make_role_guard(container.auth_service.authenticate_access_token)
    discounts = container.discount_service

    @app.route("/api/discounts", methods=["GET"], endpoint="discounts_list")
    @roles_required(*MANAGERS)
    def discounts_list():
        args = request.args
        page = discounts.list_discounts(
            status=args.get("status"),
            discount_type=args.get("type"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return paged(page)

    @app.route("/api/discounts/active", methods=["GET"], endpoint="discounts_active")
    @roles_required()
    def discounts_active():
        return ok(discounts.get_active_discounts())

    @app.route("/api/discounts/statistics", methods=["GET"], endpoint="discounts_statistics")
    @roles_required(*MANAGERS)
    def discounts_statistics():
        return ok(discounts.get_statistics())

    @app.route("/api/discounts/<discount_id>", methods=["GET"], endpoint="discounts_get")
    @roles_required(*MANAGERS)
    def discounts_get(discount_id: str):
        return ok(discounts.get_discount(discount_id))

    @app.route("/api/discounts", methods=["POST"], endpoint="discounts_create")
    @roles_required(*MANAGERS)
    def discounts_create():
        return ok(discounts.create_discount(json_body()), status=201, message="Discount created")

    @app.route("/api/discounts/validate", methods=["POST"], endpoint="discounts_validate")
    @roles_required()
    def discounts_validate():
        data = json_body()
        discount = discounts.validate_code(data.get("code"), data.get("package_id"))
        return ok(discount, message="Discount code is valid")

    @app.route("/api/discounts/apply", methods=["POST"], endpoint="discounts_apply")
    @roles_required()
    def discounts_apply():
        data = json_body()
        q = discounts.apply_discount(data.get("code"), data.get("package_id"), data.get("original_price"))
        return ok(
            {
                "discount": {
                    "discount_id": q.discount.discount_id,
                    "code": q.discount.code,
                    "name": q.discount.name,
                    "type": q.discount.discount_type,
                    "value": q.discount.value,
                },
                "original_price": q.original_price,
                "discount_amount": q.discount_amount,
                "final_price": q.final_price,
                "savings": q.savings,
            }
        )

    @app.route("/api/discounts/<discount_id>/increment-usage", methods=["POST"], endpoint="discounts_increment_usage")
    @roles_required(Role.ADMIN, Role.MANAGER, Role.RECEPTION)
    def discounts_increment_usage(discount_id: str):
        discounts.increment_usage(discount_id)
        return ok(message="Discount usage updated")

    @app.route("/api/discounts/<discount_id>", methods=["PUT"], endpoint="discounts_update")
    @roles_required(*MANAGERS)
    def discounts_update(discount_id: str):
        return ok(discounts.update_discount(discount_id, json_body()), message="Discount updated")

    @app.route("/api/discounts/<discount_id>", methods=["DELETE"], endpoint="discounts_delete")
    @roles_required(*MANAGERS)
    def discounts_delete(discount_id: str):
        discounts.delete_discount(discount_id)
        return ok(message="Discount deleted")
