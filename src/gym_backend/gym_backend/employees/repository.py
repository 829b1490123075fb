from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_many(self, employee_ids: Sequence[str]) -> dict[str, Employee]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def update(self, employee_id: str, fields: dict[str, Any]) -> Optional[Employee]:
        raise NotImplementedError

    def delete(self, employee_id: str) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        position: Optional[str] = None,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Employee], int]:
        """Filtered employees, newest first. `search` matches name, email or position."""

        raise NotImplementedError

    def find_active(self, *, term: Optional[str] = None, department: Optional[str] = None, position: Optional[str] = None) -> Sequence[Employee]:
        """Active employees; `term` matches name, email, position, department or phone."""

        raise NotImplementedError

    def count_by_status(self) -> dict[str, int]:
        raise NotImplementedError

    def group_active_by(self, field_name: str) -> Sequence[dict]:
        """Rows of {<field_name>, count, avg_salary} over active employees."""

        raise NotImplementedError
