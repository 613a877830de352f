"""WorkHub Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    ACTIVE_STATES,
    GLOBAL_ROLES,
    MANAGEMENT_ROLES,
    PRIORITY_RANK,
    REOPEN_TRANSITIONS,
    TERMINAL_STATES,
    TRANSITION_TABLE,
    ActorRole,
    BreakdownKey,
    SortKey,
    TaskPriority,
    TaskStatus,
    allowed_targets,
    status_change_label,
    validate_transition,
)
from .identity import Actor, DepartmentInfo, PersonInfo
from .payloads import (
    TaskCreateInput,
    TaskEditInput,
    TaskFilters,
    TaskQuery,
    TransitionPayload,
)
from .task import Task, TaskUpdate
from .views import (
    BreakdownRow,
    Pagination,
    TaskListResult,
    TaskSummary,
    TaskUpdateView,
    TaskView,
)

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "ActorRole",
    "SortKey",
    "BreakdownKey",
    "ACTIVE_STATES",
    "TERMINAL_STATES",
    "GLOBAL_ROLES",
    "MANAGEMENT_ROLES",
    "PRIORITY_RANK",
    # 状态机
    "TRANSITION_TABLE",
    "REOPEN_TRANSITIONS",
    "allowed_targets",
    "validate_transition",
    "status_change_label",
    # Task
    "Task",
    "TaskUpdate",
    # 身份
    "Actor",
    "PersonInfo",
    "DepartmentInfo",
    # 输入
    "TaskCreateInput",
    "TaskEditInput",
    "TransitionPayload",
    "TaskFilters",
    "TaskQuery",
    # 输出
    "TaskView",
    "TaskUpdateView",
    "TaskSummary",
    "BreakdownRow",
    "Pagination",
    "TaskListResult",
]
