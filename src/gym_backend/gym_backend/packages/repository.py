from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Package


class PackageRepository(Protocol):
    def get_by_id(self, package_id: str) -> Optional[Package]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Package]:
        raise NotImplementedError

    def create(self, fields: dict[str, Any]) -> str:
        raise NotImplementedError

    def update(self, package_id: str, fields: dict[str, Any]) -> Optional[Package]:
        raise NotImplementedError

    def delete(self, package_id: str) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        status: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Package], int]:
        raise NotImplementedError
