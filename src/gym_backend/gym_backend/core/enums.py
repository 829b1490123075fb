from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used by the route guards."""

    ADMIN = "admin"
    MANAGER = "manager"
    RECEPTION = "reception"
    TRAINER = "trainer"
    MEMBER = "member"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class PackageStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class RegistrationStatus(str, Enum):
    """Lifecycle of a package subscription."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    ONLINE = "online"


class AttendanceStatus(str, Enum):
    """State of a single gym visit."""

    CHECKED_IN = "checked_in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CheckInMethod(str, Enum):
    MANUAL = "manual"
    QR_CODE = "qr_code"
    CARD = "card"
    MOBILE_APP = "mobile_app"


class CodePurpose(str, Enum):
    """What a one-time verification code may be used for."""

    VERIFY = "verify"
    RESET = "reset"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class ShiftType(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    FULL_DAY = "full-day"


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABSENT = "absent"
