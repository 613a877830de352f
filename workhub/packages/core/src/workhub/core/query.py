"""查询层 -- 可见范围解析、筛选、排序、分页

范围和等值筛选下推到 TaskStore.list_tasks；
逾期筛选依赖请求时刻 now，在内存中完成。
"""

import math
from datetime import datetime
from typing import Any

from .config import TASK_PAGE_SIZE
from .models.enums import GLOBAL_ROLES, PRIORITY_RANK, ActorRole, SortKey
from .models.identity import Actor
from .models.payloads import TaskFilters
from .models.task import Task
from .models.views import Pagination
from .overdue import is_overdue


def resolve_scope(actor: Actor) -> dict[str, str] | None:
    """将调用者角色解析为强制的等值条件

    Returns:
        store 查询条件；None 表示调用者没有任何可见任务
    """
    if actor.role in GLOBAL_ROLES:
        return {}
    if actor.role == ActorRole.MANAGER:
        if actor.department_id is None:
            return None
        return {"department_id": actor.department_id}
    return {"assigned_to": actor.actor_id}


def build_store_criteria(actor: Actor, filters: TaskFilters) -> dict[str, Any] | None:
    """合并范围条件和调用者筛选条件（AND）

    筛选值与范围条件矛盾时（如经理筛选其他部门）结果必然为空，返回 None。
    """
    scope = resolve_scope(actor)
    if scope is None:
        return None

    criteria: dict[str, Any] = dict(scope)
    requested = {
        "department_id": filters.department_id,
        "assigned_to": filters.assigned_to,
        "status": filters.status.value if filters.status else None,
        "priority": filters.priority.value if filters.priority else None,
    }
    for key, value in requested.items():
        if value is None:
            continue
        if key in criteria and criteria[key] != value:
            return None
        criteria[key] = value
    return criteria


def apply_overdue_filter(
    tasks: list[Task], overdue: bool | None, now: datetime
) -> list[Task]:
    if overdue is None:
        return tasks
    return [t for t in tasks if is_overdue(t, now) == overdue]


def sort_tasks(tasks: list[Task], sort: SortKey) -> list[Task]:
    """排序（稳定排序，最后以 task_id 兜底保证结果确定）"""
    if sort == SortKey.CREATED_AT:
        return sorted(tasks, key=lambda t: (t.created_at, t.task_id), reverse=True)
    if sort == SortKey.PRIORITY:
        return sorted(
            tasks,
            key=lambda t: (PRIORITY_RANK[t.priority], t.deadline, t.task_id),
        )
    return sorted(tasks, key=lambda t: (t.deadline, t.task_id))


def paginate(tasks: list[Task], page: int) -> tuple[list[Task], Pagination]:
    """固定每页 10 条；越界页返回空列表但统计正确"""
    total = len(tasks)
    total_pages = math.ceil(total / TASK_PAGE_SIZE)
    start = (page - 1) * TASK_PAGE_SIZE
    items = tasks[start : start + TASK_PAGE_SIZE]
    return items, Pagination(
        current_page=page,
        total_pages=total_pages,
        total=total,
        limit=TASK_PAGE_SIZE,
    )
