"""集成测试共享 fixture"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from workhub.core.directory import StaticDirectory
from workhub.core.store import create_store_group


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, directory: StaticDirectory):
    """集成测试用 FastAPI app"""
    os.environ["WORKHUB_DB_PATH"] = str(tmp_path / "test.db")

    from workhub.gateway.main import create_app

    app = create_app()

    store_group = await create_store_group(str(tmp_path / "test.db"))
    app.state.store_group = store_group
    app.state.directory = directory

    yield app

    await store_group.conn.close()
    os.environ.pop("WORKHUB_DB_PATH", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def headers():
    """按测试目录数据中的人员 ID 生成身份头"""
    table = {
        "alice": ("employee", "ENG"),
        "bob": ("employee", "ENG"),
        "carol": ("employee", "OPS"),
        "mgr-eng": ("manager", "ENG"),
        "mgr-ops": ("manager", "OPS"),
        "hr-1": ("hr", None),
        "admin-1": ("admin", None),
    }

    def _headers(person_id: str) -> dict[str, str]:
        role, department = table[person_id]
        result = {"X-Actor-Id": person_id, "X-Actor-Role": role}
        if department:
            result["X-Actor-Department"] = department
        return result

    return _headers
