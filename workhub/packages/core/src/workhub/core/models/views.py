"""引擎输出模型 -- 供展示层渲染的结构

展示名在组装时由目录服务解析；is_overdue 由逾期判定函数按请求的 now 计算。
"""

from pydantic import BaseModel, Field

from .enums import BreakdownKey
from .task import Task, TaskUpdate


class TaskUpdateView(TaskUpdate):
    """带记录人展示名的进展记录"""

    updated_by_name: str


class TaskView(BaseModel):
    """任务展示结构"""

    task: Task
    is_overdue: bool
    assignee_name: str
    assigned_by_name: str
    department_name: str
    updates: list[TaskUpdateView] = Field(
        default_factory=list,
        description="进展记录（仅详情查询填充）",
    )


class TaskSummary(BaseModel):
    """范围内任务的状态计数"""

    total: int = 0
    todo: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    overdue: int = 0


class BreakdownRow(BaseModel):
    """按部门或按员工的分组计数"""

    key: str
    label: str
    total: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0


class Pagination(BaseModel):
    """分页信息"""

    current_page: int
    total_pages: int
    total: int
    limit: int


class TaskListResult(BaseModel):
    """任务列表查询结果"""

    items: list[TaskView]
    summary: TaskSummary
    breakdown_by: BreakdownKey | None = None
    breakdown: list[BreakdownRow] = Field(default_factory=list)
    pagination: Pagination
