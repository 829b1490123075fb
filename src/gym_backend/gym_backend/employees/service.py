from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_iso_datetime
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_email, require_enum, require_number
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import EmployeeStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..members.model import EmergencyContact
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "full_name",
    "email",
    "phone",
    "position",
    "department",
    "salary",
    "hire_date",
    "status",
    "qualifications",
    "emergency_contact",
    "notes",
}


def validate_employee_data(data: dict[str, Any], *, partial: bool = False) -> list[str]:
    """Collect every problem with an employee payload instead of stopping at the first."""
    errors: list[str] = []

    def present(key: str) -> bool:
        return not partial or key in data

    if present("full_name") and len(str(data.get("full_name") or "").strip()) < 2:
        errors.append("Full name must be at least 2 characters")
    if present("email"):
        try:
            require_email(data.get("email"))
        except ValidationError:
            errors.append("Email is not valid")
    if present("phone") and len(str(data.get("phone") or "")) < 10:
        errors.append("Phone number is not valid")
    if present("position") and len(str(data.get("position") or "").strip()) < 2:
        errors.append("Position is required")
    if data.get("salary") not in (None, ""):
        try:
            require_number(data["salary"], "Salary", minimum=0)
        except ValidationError:
            errors.append("Salary cannot be negative")
    return errors


class EmployeeService:
    """Use cases: staff records."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def _clean(self, data: dict[str, Any], *, partial: bool) -> dict[str, Any]:
        errors = validate_employee_data(data, partial=partial)
        if errors:
            raise ValidationError("Invalid employee data", details={"errors": errors})

        out = {k: v for k, v in data.items() if k in _UPDATABLE_FIELDS}
        if "full_name" in out:
            out["full_name"] = str(out["full_name"]).strip()
        if "email" in out:
            out["email"] = require_email(out["email"])
        if "position" in out:
            out["position"] = str(out["position"]).strip()
        if "salary" in out:
            out["salary"] = None if out["salary"] in (None, "") else float(out["salary"])
        if "status" in out:
            out["status"] = require_enum(EmployeeStatus, out["status"], "Status").value
        if "hire_date" in out:
            try:
                out["hire_date"] = parse_iso_datetime(out["hire_date"])
            except ValueError:
                raise ValidationError("Hire date is not a valid date")
        if "qualifications" in out:
            out["qualifications"] = [str(q) for q in (out["qualifications"] or [])]
        if "emergency_contact" in out:
            contact = EmergencyContact.from_dict(out["emergency_contact"])
            out["emergency_contact"] = contact.to_dict() if contact else None
        return out

    def create_employee(self, data: dict[str, Any]) -> Employee:
        fields = self._clean(data, partial=False)
        fields.setdefault("status", EmployeeStatus.ACTIVE.value)

        if self._employees.get_by_email(fields["email"]):
            raise ConflictError("Employee email already exists")

        employee_id = self._employees.create(fields)
        logger.info("Created employee %s (%s)", employee_id, fields["position"])
        return self.get_employee(employee_id)

    def list_employees(
        self,
        *,
        position: Optional[str] = None,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
    ) -> Page[Employee]:
        page_i, limit_i = normalize_paging(page, limit, default_limit=DEFAULT_PAGE_SIZE)
        items, total = self._employees.search(
            position=position,
            department=department,
            status=status,
            search=search,
            skip=(page_i - 1) * limit_i,
            limit=limit_i,
        )
        return Page(items=items, page=page_i, limit=limit_i, total=total)

    def get_employee(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update_employee(self, employee_id: str, data: dict[str, Any]) -> Employee:
        changes = self._clean(data, partial=True)
        if "email" in changes:
            other = self._employees.get_by_email(changes["email"])
            if other and other.employee_id != employee_id:
                raise ConflictError("Employee email already exists")

        employee = self._employees.update(employee_id, changes)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def delete_employee(self, employee_id: str) -> Employee:
        employee = self.get_employee(employee_id)
        if not self._employees.delete(employee_id):
            raise NotFoundError("Employee not found")
        logger.info("Deleted employee %s", employee_id)
        return employee

    def update_status(self, employee_id: str, status: Any) -> Employee:
        new_status = require_enum(EmployeeStatus, status, "Status")
        employee = self._employees.update(employee_id, {"status": new_status.value})
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def search_employees(self, term: Optional[str]) -> Sequence[Employee]:
        term = (term or "").strip()
        if not term:
            raise ValidationError("Search term is required")
        return self._employees.find_active(term=term)

    def get_by_department(self, department: str) -> Sequence[Employee]:
        return self._employees.find_active(department=department)

    def get_by_position(self, position: str) -> Sequence[Employee]:
        return self._employees.find_active(position=position)

    def get_statistics(self) -> dict:
        by_status = self._employees.count_by_status()
        return {
            "total": {s.value: int(by_status.get(s.value, 0)) for s in EmployeeStatus},
            "by_status": [{"status": k, "count": v} for k, v in by_status.items()],
            "by_department": list(self._employees.group_active_by("department")),
            "by_position": list(self._employees.group_active_by("position")),
        }
