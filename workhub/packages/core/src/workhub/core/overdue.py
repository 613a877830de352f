"""逾期判定 -- 纯函数

now 必须由调用方显式传入，这里从不读取系统时钟；
同一次请求内所有判定共享同一个 now。
"""

from datetime import datetime

from .models.enums import ACTIVE_STATES, TaskStatus
from .models.task import Task


def is_overdue_at(status: TaskStatus, deadline: datetime, now: datetime) -> bool:
    """status ∈ {todo, in_progress} 且 deadline < now"""
    return status in ACTIVE_STATES and deadline < now


def is_overdue(task: Task, now: datetime) -> bool:
    """判断任务在 now 时刻是否逾期"""
    return is_overdue_at(task.status, task.deadline, now)
