"""TaskStore SQLite 实现

tasks 表只保存任务当前字段；进展记录在 task_updates 表中单独追加。
此处方法不自动提交事务，由 transaction 模块统一管理。
"""

import json
from datetime import datetime
from typing import Any

import aiosqlite

from ..exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..models.enums import TERMINAL_STATES, TaskPriority, TaskStatus
from ..models.task import Task

# SELECT 列顺序，_row_to_task 按此顺序取值
_COLUMNS = (
    "task_id",
    "title",
    "description",
    "priority",
    "status",
    "assigned_to",
    "assigned_by",
    "department_id",
    "deadline",
    "estimated_hours",
    "actual_hours",
    "tags",
    "cancel_reason",
    "cancelled_by",
    "cancelled_at",
    "completed_at",
    "created_at",
    "updated_at",
    "version",
)

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM tasks"

# 允许通过 update_fields 修改的列
_MUTABLE_COLUMNS = frozenset(
    {
        "title",
        "description",
        "priority",
        "status",
        "deadline",
        "estimated_hours",
        "actual_hours",
        "tags",
        "cancel_reason",
        "cancelled_by",
        "cancelled_at",
        "completed_at",
    }
)


def _to_db(value: Any) -> Any:
    """将模型字段值转换为 SQLite 存储值"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (TaskStatus, TaskPriority)):
        return value.value
    if isinstance(value, list):
        return json.dumps(value, ensure_ascii=False)
    return value


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录

        Raises:
            ValidationError: title / assigned_to / department_id 缺失
        """
        missing = [
            name
            for name in ("title", "assigned_to", "department_id")
            if not getattr(task, name).strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        await self._conn.execute(
            f"""
            INSERT INTO tasks ({', '.join(_COLUMNS)})
            VALUES ({', '.join('?' for _ in _COLUMNS)})
            """,
            tuple(_to_db(getattr(task, column)) for column in _COLUMNS),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务（不含进展记录）"""
        cursor = await self._conn.execute(
            f"{_SELECT} WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(
        self,
        *,
        department_id: str | None = None,
        assigned_to: str | None = None,
        status: str | None = None,
        priority: str | None = None,
    ) -> list[Task]:
        """查询任务列表，条件 AND 组合，按 created_at 倒序"""
        clauses = ["1=1"]
        params: list[object] = []

        if department_id is not None:
            clauses.append("department_id = ?")
            params.append(department_id)
        if assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(assigned_to)
        if status is not None:
            clauses.append("status = ?")
            params.append(status)
        if priority is not None:
            clauses.append("priority = ?")
            params.append(priority)

        where = " AND ".join(clauses)
        cursor = await self._conn.execute(
            f"{_SELECT} WHERE {where} ORDER BY created_at DESC",
            tuple(params),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update_fields(
        self,
        task_id: str,
        fields: dict[str, Any],
        *,
        expected_version: int,
        updated_at: datetime,
        reopening: bool = False,
    ) -> int:
        """按乐观锁版本更新字段，返回新版本号

        Args:
            task_id: 任务 ID
            fields: 列名 -> 新值
            expected_version: 调用方读取时的版本号
            updated_at: 新的更新时间
            reopening: 是否为离开终态的反向流转

        Raises:
            NotFoundError: 任务不存在
            ConflictError: 版本号已变化
            InvalidStateError: 任务处于终态且不是反向流转
        """
        unknown = set(fields) - _MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not mutable: {sorted(unknown)}")

        cursor = await self._conn.execute(
            "SELECT status, version FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(task_id)
        if row[1] != expected_version:
            raise ConflictError(task_id)
        if TaskStatus(row[0]) in TERMINAL_STATES and not reopening:
            raise InvalidStateError(f"Cannot edit a {row[0]} task")

        assignments = [f"{column} = ?" for column in fields]
        params = [_to_db(value) for value in fields.values()]
        cursor = await self._conn.execute(
            f"""
            UPDATE tasks
            SET {', '.join(assignments + ['updated_at = ?', 'version = version + 1'])}
            WHERE task_id = ? AND version = ?
            """,
            (*params, updated_at.isoformat(), task_id, expected_version),
        )
        if cursor.rowcount == 0:
            raise ConflictError(task_id)
        return expected_version + 1

    async def touch_task(self, task_id: str, updated_at: datetime) -> None:
        """仅刷新 updated_at 并递增版本号（追加进展记录时调用）

        已取消的任务不接受进展，状态在同一条 UPDATE 中判定。

        Raises:
            NotFoundError: 任务不存在
            InvalidStateError: 任务已取消
        """
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET updated_at = ?, version = version + 1
            WHERE task_id = ? AND status != ?
            """,
            (updated_at.isoformat(), task_id, TaskStatus.CANCELLED.value),
        )
        if cursor.rowcount > 0:
            return
        cursor = await self._conn.execute(
            "SELECT 1 FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        if await cursor.fetchone() is None:
            raise NotFoundError(task_id)
        raise InvalidStateError("Cannot add update to cancelled task")

    async def delete_task(self, task_id: str) -> None:
        """物理删除任务，仅允许 todo 状态

        Raises:
            NotFoundError: 任务不存在
            InvalidStateError: 任务已开始或已结束
        """
        cursor = await self._conn.execute(
            "SELECT status FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            raise NotFoundError(task_id)
        if row[0] != TaskStatus.TODO.value:
            raise InvalidStateError(
                "Can only delete tasks that haven't started. Cancel the task instead."
            )
        await self._conn.execute("DELETE FROM tasks WHERE task_id = ?", (task_id,))

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row[0],
            title=row[1],
            description=row[2],
            priority=TaskPriority(row[3]),
            status=TaskStatus(row[4]),
            assigned_to=row[5],
            assigned_by=row[6],
            department_id=row[7],
            deadline=datetime.fromisoformat(row[8]),
            estimated_hours=row[9],
            actual_hours=row[10],
            tags=json.loads(row[11]) if row[11] else [],
            cancel_reason=row[12],
            cancelled_by=row[13],
            cancelled_at=_parse_ts(row[14]),
            completed_at=_parse_ts(row[15]),
            created_at=datetime.fromisoformat(row[16]),
            updated_at=datetime.fromisoformat(row[17]),
            version=row[18],
        )
