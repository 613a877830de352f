"""枚举定义 -- 任务状态、优先级、操作者角色

包含按 (角色, 当前状态) 索引的 TRANSITION_TABLE 合法流转表，
ACTIVE_STATES 可逾期状态集合和 TERMINAL_STATES 不可编辑状态集合。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态机"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ActorRole(StrEnum):
    """调用者角色，由外部身份服务提供"""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"
    ADMIN = "admin"


class SortKey(StrEnum):
    """任务列表排序键"""

    DEADLINE = "deadline"  # 截止时间正序
    CREATED_AT = "createdAt"  # 创建时间倒序
    PRIORITY = "priority"  # urgent > high > medium > low，同级按截止时间正序


class BreakdownKey(StrEnum):
    """分组统计维度"""

    DEPARTMENT = "department"
    EMPLOYEE = "employee"


# 可管理全部部门的角色
GLOBAL_ROLES: frozenset[ActorRole] = frozenset({ActorRole.HR, ActorRole.ADMIN})

# 管理侧角色（可创建、取消、重开任务）
MANAGEMENT_ROLES: frozenset[ActorRole] = GLOBAL_ROLES | {ActorRole.MANAGER}

# 仍在进行中的状态，只有这些状态会被判定为逾期
ACTIVE_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.TODO, TaskStatus.IN_PROGRESS}
)

# 不允许编辑字段的状态（仅管理侧反向流转可离开）
TERMINAL_STATES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.CANCELLED}
)

# 排序用优先级权重，数值越小越靠前
PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.URGENT: 1,
    TaskPriority.HIGH: 2,
    TaskPriority.MEDIUM: 3,
    TaskPriority.LOW: 4,
}

# 员工（被指派人）一列
_EMPLOYEE_COLUMN: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED, TaskStatus.TODO}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}

# 经理/HR/管理员一列，completed 与 cancelled 均有反向边
_MANAGEMENT_COLUMN: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED}),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.COMPLETED, TaskStatus.TODO, TaskStatus.CANCELLED}
    ),
    TaskStatus.COMPLETED: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.CANCELLED: frozenset({TaskStatus.TODO}),
}

_ROLE_COLUMNS: dict[ActorRole, dict[TaskStatus, frozenset[TaskStatus]]] = {
    ActorRole.EMPLOYEE: _EMPLOYEE_COLUMN,
    ActorRole.MANAGER: _MANAGEMENT_COLUMN,
    ActorRole.HR: _MANAGEMENT_COLUMN,
    ActorRole.ADMIN: _MANAGEMENT_COLUMN,
}

# 合法状态流转：(角色, 当前状态) -> 允许的目标状态
TRANSITION_TABLE: dict[tuple[ActorRole, TaskStatus], frozenset[TaskStatus]] = {
    (role, from_status): targets
    for role, column in _ROLE_COLUMNS.items()
    for from_status, targets in column.items()
}

# 反向流转（离开终态），允许在终态任务上写字段
REOPEN_TRANSITIONS: frozenset[tuple[TaskStatus, TaskStatus]] = frozenset(
    {
        (TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS),
        (TaskStatus.CANCELLED, TaskStatus.TODO),
    }
)


def allowed_targets(role: ActorRole, from_status: TaskStatus) -> frozenset[TaskStatus]:
    """查询角色在当前状态下可流转到的目标状态"""
    return TRANSITION_TABLE.get((role, from_status), frozenset())


def validate_transition(
    role: ActorRole, from_status: TaskStatus, to_status: TaskStatus
) -> bool:
    """验证状态流转是否合法

    Args:
        role: 操作者角色
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    return to_status in allowed_targets(role, from_status)


def status_change_label(from_status: TaskStatus, to_status: TaskStatus) -> str:
    """状态变更的可读标签，如 "todo → in_progress" """
    return f"{from_status.value} → {to_status.value}"
