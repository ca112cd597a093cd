from __future__ import annotations

from pathlib import Path

import pytest

_UNIT_DIR = Path(__file__).resolve().parent


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if _UNIT_DIR in item.path.resolve().parents:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
