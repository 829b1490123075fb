from __future__ import annotations

from typing import Any, Optional

from ..common.pagination import Page, normalize_paging
from ..common.validators import require_enum, require_int, require_non_empty, require_number
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import PackageStatus
from ..core.exceptions import ConflictError, NotFoundError
from .model import Package
from .repository import PackageRepository


class PackageService:
    """Use cases: manage purchasable packages."""

    def __init__(self, packages: PackageRepository):
        self._packages = packages

    def _clean(self, data: dict[str, Any], *, partial: bool) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if not partial or "code" in data:
            out["code"] = require_non_empty(data.get("code"), "Code")
        if not partial or "name" in data:
            out["name"] = require_non_empty(data.get("name"), "Name")
        if not partial or "price" in data:
            out["price"] = require_number(data.get("price"), "Price", minimum=0)
        if not partial or "duration_days" in data:
            out["duration_days"] = require_int(data.get("duration_days"), "Duration (days)", minimum=1)
        if "max_sessions" in data:
            raw = data.get("max_sessions")
            out["max_sessions"] = None if raw in (None, "") else require_int(raw, "Max sessions", minimum=1)
        elif not partial:
            out["max_sessions"] = None
        if "description" in data or not partial:
            out["description"] = data.get("description")
        if "features" in data or not partial:
            out["features"] = [str(f) for f in (data.get("features") or [])]
        if "status" in data:
            out["status"] = require_enum(PackageStatus, data.get("status"), "Status").value
        elif not partial:
            out["status"] = PackageStatus.ACTIVE.value
        return out

    def create_package(self, data: dict[str, Any]) -> Package:
        fields = self._clean(data, partial=False)
        if self._packages.get_by_code(fields["code"]):
            raise ConflictError("Package code already exists")
        package_id = self._packages.create(fields)
        return self.get_package(package_id)

    def list_packages(
        self,
        *,
        status: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
    ) -> Page[Package]:
        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        items, total = self._packages.search(
            status=status,
            min_price=min_price,
            max_price=max_price,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=items, page=page_i, limit=limit_i, total=total)

    def get_package(self, package_id: str) -> Package:
        package = self._packages.get_by_id(package_id)
        if not package:
            raise NotFoundError("Package not found")
        return package

    def update_package(self, package_id: str, data: dict[str, Any]) -> Package:
        changes = self._clean(data, partial=True)
        if "code" in changes:
            other = self._packages.get_by_code(changes["code"])
            if other and other.package_id != package_id:
                raise ConflictError("Package code already exists")
        package = self._packages.update(package_id, changes)
        if not package:
            raise NotFoundError("Package not found")
        return package

    def delete_package(self, package_id: str) -> Package:
        package = self.get_package(package_id)
        if not self._packages.delete(package_id):
            raise NotFoundError("Package not found")
        return package
