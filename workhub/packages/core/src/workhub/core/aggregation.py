"""聚合层 -- 状态汇总与按部门/员工分组统计

输入为分页前的范围内任务集合；整次请求共享同一个 now，
逾期计数不会因为逐行取时钟而在边界处不一致。
"""

from collections.abc import Callable
from datetime import datetime

from .models.enums import BreakdownKey, TaskStatus
from .models.task import Task
from .models.views import BreakdownRow, TaskSummary
from .overdue import is_overdue

# 分组键 -> 展示名
LabelResolver = Callable[[str], str]

_STATUS_COUNTERS = {
    TaskStatus.TODO: "todo",
    TaskStatus.IN_PROGRESS: "in_progress",
    TaskStatus.COMPLETED: "completed",
    TaskStatus.CANCELLED: "cancelled",
}


def summarize(tasks: list[Task], now: datetime) -> TaskSummary:
    """计算 {total, todo, in_progress, completed, cancelled, overdue}"""
    counts = dict.fromkeys(_STATUS_COUNTERS.values(), 0)
    overdue = 0
    for task in tasks:
        counts[_STATUS_COUNTERS[task.status]] += 1
        if is_overdue(task, now):
            overdue += 1
    return TaskSummary(total=len(tasks), overdue=overdue, **counts)


def _group_key(task: Task, by: BreakdownKey) -> str:
    if by == BreakdownKey.DEPARTMENT:
        return task.department_id
    return task.assigned_to


def breakdown(
    tasks: list[Task],
    now: datetime,
    by: BreakdownKey,
    label_resolver: LabelResolver,
) -> list[BreakdownRow]:
    """按部门或按被指派人分组计数，结果按 key 排序"""
    rows: dict[str, BreakdownRow] = {}
    for task in tasks:
        key = _group_key(task, by)
        row = rows.get(key)
        if row is None:
            row = BreakdownRow(key=key, label=label_resolver(key))
            rows[key] = row
        row.total += 1
        if task.status == TaskStatus.IN_PROGRESS:
            row.in_progress += 1
        elif task.status == TaskStatus.COMPLETED:
            row.completed += 1
        if is_overdue(task, now):
            row.overdue += 1
    return [rows[key] for key in sorted(rows)]
