from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import EmployeeStatus
from ..members.model import EmergencyContact


@dataclass(frozen=True)
class Employee:
    """Domain entity: gym staff member (trainer, receptionist, manager...)."""

    employee_id: str
    full_name: str
    email: str
    phone: str
    position: str
    department: Optional[str] = None
    salary: Optional[float] = None
    hire_date: Optional[datetime] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    qualifications: tuple[str, ...] = field(default_factory=tuple)
    emergency_contact: Optional[EmergencyContact] = None
    notes: Optional[str] = None
