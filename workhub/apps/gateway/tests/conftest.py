"""apps/gateway 测试配置 -- httpx AsyncClient + 临时 DB

ASGITransport 不触发 lifespan，因此 fixture 手动初始化 app.state。
"""

import os
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from workhub.core.directory import StaticDirectory
from workhub.core.models import Actor
from workhub.core.store import create_store_group


@pytest_asyncio.fixture
async def app(tmp_path: Path, directory: StaticDirectory):
    """创建测试用 FastAPI app 实例"""
    os.environ["WORKHUB_DB_PATH"] = str(tmp_path / "sqlite" / "test.db")

    from workhub.gateway.main import create_app

    application = create_app()
    store_group = await create_store_group(str(tmp_path / "sqlite" / "test.db"))
    application.state.store_group = store_group
    application.state.directory = directory

    yield application

    await store_group.conn.close()
    os.environ.pop("WORKHUB_DB_PATH", None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def as_actor() -> Callable[[Actor], dict[str, str]]:
    """调用者身份 -> 请求头"""

    def _headers(actor: Actor) -> dict[str, str]:
        headers = {"X-Actor-Id": actor.actor_id, "X-Actor-Role": actor.role.value}
        if actor.department_id:
            headers["X-Actor-Department"] = actor.department_id
        return headers

    return _headers


@pytest.fixture
def task_body() -> Callable[..., dict[str, Any]]:
    """创建任务请求体（截止时间为一周后）"""

    def _make(**overrides: Any) -> dict[str, Any]:
        body: dict[str, Any] = {
            "title": "Update API docs",
            "assigned_to": "alice",
            "deadline": (datetime.now(UTC) + timedelta(days=7)).isoformat(),
            "priority": "high",
            "tags": ["docs"],
        }
        body.update(overrides)
        return body

    return _make
