from __future__ import annotations

import pytest

from src.gym_backend.gym_backend.core.enums import PackageStatus
from src.gym_backend.gym_backend.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.gym_backend.gym_backend.packages.service import PackageService

from tests.fakes import InMemoryPackages, package_fields


@pytest.fixture
def packages():
    return PackageService(InMemoryPackages())


def test_create_package_defaults(packages):
    p = packages.create_package(package_fields(features=["Gym floor", "Locker"]))
    assert p.status == PackageStatus.ACTIVE
    assert p.max_sessions == 10
    assert p.features == ("Gym floor", "Locker")


def test_blank_max_sessions_means_unlimited(packages):
    assert packages.create_package(package_fields(max_sessions="")).max_sessions is None


@pytest.mark.parametrize("field,value", [("price", -1), ("duration_days", 0), ("name", "  ")])
def test_invalid_fields_are_rejected(packages, field, value):
    with pytest.raises(ValidationError):
        packages.create_package(package_fields(**{field: value}))


def test_code_must_be_unique(packages):
    first = packages.create_package(package_fields())
    other = packages.create_package(package_fields(code="PT10"))

    with pytest.raises(ConflictError):
        packages.create_package(package_fields())
    with pytest.raises(ConflictError):
        packages.update_package(other.package_id, {"code": first.code})


def test_price_filter_and_delete(packages):
    cheap = packages.create_package(package_fields())
    packages.create_package(package_fields(code="PREMIUM90", price=1200000, duration_days=90))

    page = packages.list_packages(max_price=600000)
    assert [p.code for p in page.items] == ["BASIC30"]

    packages.delete_package(cheap.package_id)
    with pytest.raises(NotFoundError):
        packages.get_package(cheap.package_id)
