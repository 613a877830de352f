"""WorkHub Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .protocols import TaskStore, TaskUpdateStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import (
    append_update_only,
    apply_task_change,
    create_task_with_initial_update,
    delete_task,
    load_task_with_updates,
    write_transaction,
)
from .update_store import SqliteTaskUpdateStore


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接和写锁"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.task_store: TaskStore = SqliteTaskStore(conn)
        self.update_store: TaskUpdateStore = SqliteTaskUpdateStore(conn)
        self.write_lock = asyncio.Lock()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteTaskStore",
    "SqliteTaskUpdateStore",
    "TaskStore",
    "TaskUpdateStore",
    "init_db",
    "write_transaction",
    "create_task_with_initial_update",
    "apply_task_change",
    "append_update_only",
    "delete_task",
    "load_task_with_updates",
]
