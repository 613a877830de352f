"""全局 pytest 配置 -- 临时 SQLite 数据库 + 目录服务 + 调用者 fixture

目录数据：
  ENG 部门: 经理 mgr-eng，员工 alice / bob，离职员工 dave
  OPS 部门: 经理 mgr-ops，员工 carol
  hr-1 (HR)、admin-1 (管理员) 不属于任何部门
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from workhub.core.directory import StaticDirectory
from workhub.core.models import Actor, ActorRole, DepartmentInfo, PersonInfo

# 测试统一使用的请求时刻
NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

PEOPLE = [
    PersonInfo(person_id="alice", full_name="Alice Nguyen", department_id="ENG"),
    PersonInfo(person_id="bob", full_name="Bob Tran", department_id="ENG"),
    PersonInfo(
        person_id="dave", full_name="Dave Le", department_id="ENG", is_active=False
    ),
    PersonInfo(person_id="carol", full_name="Carol Pham", department_id="OPS"),
    PersonInfo(
        person_id="mgr-eng",
        full_name="Minh Engineering",
        role=ActorRole.MANAGER,
        department_id="ENG",
    ),
    PersonInfo(
        person_id="mgr-ops",
        full_name="Olga Operations",
        role=ActorRole.MANAGER,
        department_id="OPS",
    ),
    PersonInfo(person_id="hr-1", full_name="Hana Resources", role=ActorRole.HR),
    PersonInfo(person_id="admin-1", full_name="Ada Admin", role=ActorRole.ADMIN),
]

DEPARTMENTS = [
    DepartmentInfo(department_id="ENG", name="Engineering", code="ENG", manager_id="mgr-eng"),
    DepartmentInfo(department_id="OPS", name="Operations", code="OPS", manager_id="mgr-ops"),
]

ALICE = Actor(actor_id="alice", role=ActorRole.EMPLOYEE, department_id="ENG")
BOB = Actor(actor_id="bob", role=ActorRole.EMPLOYEE, department_id="ENG")
CAROL = Actor(actor_id="carol", role=ActorRole.EMPLOYEE, department_id="OPS")
MGR_ENG = Actor(actor_id="mgr-eng", role=ActorRole.MANAGER, department_id="ENG")
MGR_OPS = Actor(actor_id="mgr-ops", role=ActorRole.MANAGER, department_id="OPS")
HR = Actor(actor_id="hr-1", role=ActorRole.HR)
ADMIN = Actor(actor_id="admin-1", role=ActorRole.ADMIN)


@pytest.fixture
def directory() -> StaticDirectory:
    """测试用目录服务"""
    return StaticDirectory(people=PEOPLE, departments=DEPARTMENTS)


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from workhub.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def alice() -> Actor:
    return ALICE


@pytest.fixture
def bob() -> Actor:
    return BOB


@pytest.fixture
def carol() -> Actor:
    return CAROL


@pytest.fixture
def mgr_eng() -> Actor:
    return MGR_ENG


@pytest.fixture
def mgr_ops() -> Actor:
    return MGR_OPS


@pytest.fixture
def hr() -> Actor:
    return HR


@pytest.fixture
def admin() -> Actor:
    return ADMIN
