"""TaskUpdateStore SQLite 实现

task_updates 表 append-only：只允许插入，不允许更新。
seq 同一 task 内严格单调递增，插入顺序即记录的规范顺序。
"""

from datetime import datetime

import aiosqlite

from ..models.task import TaskUpdate


class SqliteTaskUpdateStore:
    """TaskUpdateStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def append_update(self, update: TaskUpdate) -> None:
        """追加进展记录（append-only）

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO task_updates (update_id, task_id, seq, updated_by,
                                      message, status_change, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                update.update_id,
                update.task_id,
                update.seq,
                update.updated_by,
                update.message,
                update.status_change,
                update.updated_at.isoformat(),
            ),
        )

    async def get_updates_for_task(self, task_id: str) -> list[TaskUpdate]:
        """查询指定任务的所有进展记录，按 seq 正序"""
        cursor = await self._conn.execute(
            """
            SELECT update_id, task_id, seq, updated_by, message, status_change, updated_at
            FROM task_updates
            WHERE task_id = ?
            ORDER BY seq ASC
            """,
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_update(row) for row in rows]

    async def get_next_seq(self, task_id: str) -> int:
        """获取指定任务的下一个 seq（MAX+1）

        在事务内调用以确保原子性。
        """
        cursor = await self._conn.execute(
            "SELECT COALESCE(MAX(seq), 0) FROM task_updates WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        return (row[0] if row else 0) + 1

    @staticmethod
    def _row_to_update(row: aiosqlite.Row) -> TaskUpdate:
        """将数据库行转换为 TaskUpdate 模型"""
        return TaskUpdate(
            update_id=row[0],
            task_id=row[1],
            seq=row[2],
            updated_by=row[3],
            message=row[4],
            status_change=row[5],
            updated_at=datetime.fromisoformat(row[6]),
        )
