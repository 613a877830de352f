"""Store Protocol 接口定义

定义 TaskStore、TaskUpdateStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from ..models.task import Task, TaskUpdate


@runtime_checkable
class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def list_tasks(
        self,
        *,
        department_id: str | None = None,
        assigned_to: str | None = None,
        status: str | None = None,
        priority: str | None = None,
    ) -> list[Task]:
        """查询任务列表，条件 AND 组合"""
        ...

    async def update_fields(
        self,
        task_id: str,
        fields: dict[str, Any],
        *,
        expected_version: int,
        updated_at: datetime,
        reopening: bool = False,
    ) -> int:
        """按乐观锁版本更新字段"""
        ...

    async def touch_task(self, task_id: str, updated_at: datetime) -> None:
        """刷新 updated_at 与版本号，已取消任务抛 InvalidStateError"""
        ...

    async def delete_task(self, task_id: str) -> None:
        """删除 todo 状态的任务"""
        ...


@runtime_checkable
class TaskUpdateStore(Protocol):
    """进展记录存储接口

    task_updates 表 append-only：只允许插入，不允许更新。
    """

    async def append_update(self, update: TaskUpdate) -> None:
        """追加进展记录"""
        ...

    async def get_updates_for_task(self, task_id: str) -> list[TaskUpdate]:
        """查询指定任务的所有进展记录"""
        ...

    async def get_next_seq(self, task_id: str) -> int:
        """获取指定任务的下一个 seq（MAX+1）"""
        ...
