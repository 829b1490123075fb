from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import PackageStatus


@dataclass(frozen=True)
class Package:
    """Domain entity: a purchasable gym package."""

    package_id: str
    code: str
    name: str
    price: float
    duration_days: int
    max_sessions: Optional[int] = None
    description: Optional[str] = None
    features: tuple[str, ...] = field(default_factory=tuple)
    status: PackageStatus = PackageStatus.ACTIVE
