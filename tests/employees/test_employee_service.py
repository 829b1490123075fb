from __future__ import annotations

import pytest

from src.gym_backend.gym_backend.core.enums import EmployeeStatus
from src.gym_backend.gym_backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.gym_backend.gym_backend.employees.service import EmployeeService, validate_employee_data

from tests.fakes import InMemoryEmployees


def _employee(**overrides):
    data = {
        "full_name": "Le Van Trainer",
        "email": "trainer@gym.local",
        "phone": "0909876543",
        "position": "trainer",
        "department": "fitness",
        "salary": 12000000,
    }
    data.update(overrides)
    return data


@pytest.fixture
def employees():
    return EmployeeService(InMemoryEmployees())


def test_validation_collects_every_problem():
    errors = validate_employee_data({"full_name": "A", "email": "nope", "phone": "123", "position": "", "salary": -5})
    assert errors == [
        "Full name must be at least 2 characters",
        "Email is not valid",
        "Phone number is not valid",
        "Position is required",
        "Salary cannot be negative",
    ]


def test_partial_validation_checks_only_given_fields():
    assert validate_employee_data({"phone": "0901234567"}, partial=True) == []


def test_create_employee_defaults(employees):
    e = employees.create_employee(_employee(qualifications=["ACE CPT"]))
    assert e.status == EmployeeStatus.ACTIVE
    assert e.qualifications == ("ACE CPT",)
    assert e.hire_date is not None


def test_create_rejects_invalid_payload_with_details(employees):
    with pytest.raises(ValidationError) as exc:
        employees.create_employee(_employee(phone="1"))
    assert exc.value.details["errors"] == ["Phone number is not valid"]


def test_duplicate_email_conflicts(employees):
    employees.create_employee(_employee())
    with pytest.raises(ConflictError):
        employees.create_employee(_employee(full_name="Someone Else"))


def test_update_status_and_delete(employees):
    e = employees.create_employee(_employee())

    assert employees.update_status(e.employee_id, "inactive").status == EmployeeStatus.INACTIVE
    with pytest.raises(ValidationError):
        employees.update_status(e.employee_id, "retired")

    employees.delete_employee(e.employee_id)
    with pytest.raises(NotFoundError):
        employees.get_employee(e.employee_id)


def test_search_lists_only_active_staff(employees):
    employees.create_employee(_employee())
    gone = employees.create_employee(_employee(email="old@gym.local", full_name="Old Trainer"))
    employees.update_status(gone.employee_id, "terminated")

    assert [e.email for e in employees.search_employees("trainer")] == ["trainer@gym.local"]
    with pytest.raises(ValidationError):
        employees.search_employees("  ")


def test_statistics_group_active_staff(employees):
    employees.create_employee(_employee())
    employees.create_employee(_employee(email="t2@gym.local", salary=8000000))
    employees.create_employee(_employee(email="desk@gym.local", position="receptionist", department="front", salary=6000000))

    stats = employees.get_statistics()
    assert stats["total"]["active"] == 3
    assert stats["total"]["terminated"] == 0
    assert stats["by_department"][0] == {"department": "fitness", "count": 2, "avg_salary": 10000000}
    assert {row["position"] for row in stats["by_position"]} == {"trainer", "receptionist"}
