from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import make_container


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def container():
    return make_container()
