"""任务字段 + 进展记录原子事务封装

所有写操作在 StoreGroup 的写锁内执行 BEGIN IMMEDIATE ... COMMIT，
同一连接上并发请求的语句不会交错进入同一事务；
任一步骤失败时整体回滚，任务保持调用前的状态。
"""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..exceptions import NotFoundError
from ..models.task import Task, TaskUpdate

if TYPE_CHECKING:
    from . import StoreGroup

# seq -> TaskUpdate，seq 在事务内分配
UpdateBuilder = Callable[[int], TaskUpdate]


@asynccontextmanager
async def write_transaction(stores: "StoreGroup") -> AsyncIterator[None]:
    """持有写锁并开启 IMMEDIATE 事务，正常退出提交，异常回滚后重新抛出"""
    async with stores.write_lock:
        await stores.conn.execute("BEGIN IMMEDIATE")
        try:
            yield
            await stores.conn.commit()
        except BaseException:
            await stores.conn.rollback()
            raise


async def create_task_with_initial_update(
    stores: "StoreGroup",
    task: Task,
    update: TaskUpdate,
) -> None:
    """在同一事务内写入任务和第一条进展记录"""
    async with write_transaction(stores):
        await stores.task_store.create_task(task)
        await stores.update_store.append_update(update)


async def apply_task_change(
    stores: "StoreGroup",
    task_id: str,
    fields: dict[str, Any],
    update_builder: UpdateBuilder,
    *,
    expected_version: int,
    updated_at: datetime,
    reopening: bool = False,
) -> TaskUpdate:
    """在同一事务内按版本号更新字段并追加进展记录

    Raises:
        ConflictError: 版本号已变化（并发修改）
        InvalidStateError: 终态任务上的非反向写入
        NotFoundError: 任务不存在
    """
    async with write_transaction(stores):
        await stores.task_store.update_fields(
            task_id,
            fields,
            expected_version=expected_version,
            updated_at=updated_at,
            reopening=reopening,
        )
        seq = await stores.update_store.get_next_seq(task_id)
        update = update_builder(seq)
        await stores.update_store.append_update(update)
    return update


async def append_update_only(
    stores: "StoreGroup",
    task_id: str,
    update_builder: UpdateBuilder,
    *,
    updated_at: datetime,
) -> TaskUpdate:
    """仅追加进展记录并刷新 updated_at / version（不改变任务字段）

    Raises:
        InvalidStateError: 任务在加锁前已被取消
        NotFoundError: 任务不存在
    """
    async with write_transaction(stores):
        await stores.task_store.touch_task(task_id, updated_at)
        seq = await stores.update_store.get_next_seq(task_id)
        update = update_builder(seq)
        await stores.update_store.append_update(update)
    return update


async def delete_task(stores: "StoreGroup", task_id: str) -> None:
    """删除 todo 状态的任务及其进展记录"""
    async with write_transaction(stores):
        await stores.task_store.delete_task(task_id)


async def load_task_with_updates(stores: "StoreGroup", task_id: str) -> Task:
    """读取任务并组装进展记录

    Raises:
        NotFoundError: 任务不存在
    """
    task = await stores.task_store.get_task(task_id)
    if task is None:
        raise NotFoundError(task_id)
    updates = await stores.update_store.get_updates_for_task(task_id)
    return task.model_copy(update={"updates": updates})
