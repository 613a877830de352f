"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from workhub.core.directory import StaticDirectory
from workhub.core.service import TaskService
from workhub.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "core_test.db"


@pytest_asyncio.fixture
async def store_group(core_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """核心层 StoreGroup（已建表）"""
    group = await create_store_group(str(core_db_path))
    yield group
    await group.conn.close()


@pytest.fixture
def service(store_group: StoreGroup, directory: StaticDirectory) -> TaskService:
    return TaskService(store_group, directory)


@pytest.fixture
def create_input(now: datetime) -> Callable[..., dict[str, Any]]:
    """生成 ENG 部门的创建输入，关键字参数覆盖默认值"""

    def _make(**overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": "Prepare sprint demo",
            "description": "Collect screenshots and notes",
            "assigned_to": "alice",
            "department_id": "ENG",
            "deadline": now + timedelta(days=7),
            "estimated_hours": 6,
            "tags": ["demo"],
        }
        data.update(overrides)
        return data

    return _make
