"""流转权限层 -- 角色范围校验 + 状态机 + 流转副作用

所有判定都是纯函数：输入 actor / task / 目标状态 / payload / now，
输出 TransitionPlan（要写入的字段与进展记录内容），不触碰存储。

校验顺序：范围（Forbidden）-> 流转表（InvalidTransition）-> payload（ValidationError）。
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .config import (
    CANCEL_REASON_MAX_LENGTH,
    UPDATE_MESSAGE_MAX_LENGTH,
    UPDATE_MESSAGE_MIN_LENGTH,
)
from .exceptions import (
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
)
from .models.enums import (
    GLOBAL_ROLES,
    REOPEN_TRANSITIONS,
    ActorRole,
    TaskStatus,
    status_change_label,
    validate_transition,
)
from .models.identity import Actor
from .models.payloads import TransitionPayload
from .models.task import Task


@dataclass(frozen=True)
class TransitionPlan:
    """一次合法流转需要落盘的内容"""

    from_status: TaskStatus
    to_status: TaskStatus
    fields: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    reopening: bool = False

    @property
    def status_change(self) -> str:
        return status_change_label(self.from_status, self.to_status)


# ============================================================
# 可见范围
# ============================================================


def in_department(actor: Actor, task: Task) -> bool:
    """经理管理该任务所在部门"""
    return (
        actor.role == ActorRole.MANAGER
        and actor.department_id is not None
        and actor.department_id == task.department_id
    )


def can_view(actor: Actor, task: Task) -> bool:
    """员工看自己被指派的任务；经理看本部门；HR/管理员看全部"""
    if actor.role in GLOBAL_ROLES:
        return True
    if actor.role == ActorRole.MANAGER:
        return in_department(actor, task)
    return task.assigned_to == actor.actor_id


def can_manage(actor: Actor, task: Task) -> bool:
    """管理侧权限：本部门经理或 HR/管理员"""
    return actor.role in GLOBAL_ROLES or in_department(actor, task)


def ensure_can_transition(actor: Actor, task: Task) -> None:
    """员工只能流转自己的任务，经理只能流转本部门任务

    Raises:
        ForbiddenError: 不在可操作范围内
    """
    if not can_view(actor, task):
        raise ForbiddenError()


def ensure_can_edit(actor: Actor, task: Task) -> None:
    """编辑详情仅限本部门经理与 HR/管理员"""
    if not can_manage(actor, task):
        raise ForbiddenError()


def ensure_can_delete(actor: Actor) -> None:
    """物理删除仅限 HR/管理员"""
    if actor.role not in GLOBAL_ROLES:
        raise ForbiddenError("Only HR or admin can delete tasks")


# ============================================================
# 状态流转
# ============================================================


def plan_transition(
    actor: Actor,
    task: Task,
    to_status: TaskStatus,
    payload: TransitionPayload,
    now: datetime,
) -> TransitionPlan:
    """校验一次状态流转并计算副作用字段

    Args:
        actor: 操作者
        task: 读取到的当前任务
        to_status: 目标状态
        payload: message / actual_hours / cancel_reason
        now: 本次请求的时间戳

    Raises:
        ForbiddenError: 不在可操作范围内
        InvalidTransitionError: (角色, 当前状态) 不允许流转到目标状态
        ValidationError: completed 缺少工时或 cancelled 缺少原因
    """
    ensure_can_transition(actor, task)

    from_status = task.status
    if not validate_transition(actor.role, from_status, to_status):
        raise InvalidTransitionError(from_status.value, to_status.value)

    message = _optional_message(payload.message)
    fields: dict[str, Any] = {"status": to_status}

    if to_status == TaskStatus.COMPLETED:
        if payload.actual_hours is None:
            raise ValidationError("Please provide actual hours spent")
        if not math.isfinite(payload.actual_hours):
            raise ValidationError("Actual hours must be a finite number")
        if payload.actual_hours < 0:
            raise ValidationError("Actual hours cannot be negative")
        fields["actual_hours"] = payload.actual_hours
        fields["completed_at"] = now

    if to_status == TaskStatus.CANCELLED:
        reason = (payload.cancel_reason or "").strip()
        if not reason:
            raise ValidationError("Please provide cancellation reason")
        if len(reason) > CANCEL_REASON_MAX_LENGTH:
            raise ValidationError(
                f"Cancel reason cannot exceed {CANCEL_REASON_MAX_LENGTH} characters"
            )
        fields["cancel_reason"] = reason
        fields["cancelled_at"] = now
        fields["cancelled_by"] = actor.actor_id
        message = message or reason

    reopening = (from_status, to_status) in REOPEN_TRANSITIONS
    if from_status == TaskStatus.COMPLETED:
        fields["actual_hours"] = None
        fields["completed_at"] = None
    if from_status == TaskStatus.CANCELLED:
        fields["cancel_reason"] = None
        fields["cancelled_at"] = None
        fields["cancelled_by"] = None

    return TransitionPlan(
        from_status=from_status,
        to_status=to_status,
        fields=fields,
        message=message or f"Status changed to {to_status.value}",
        reopening=reopening,
    )


def _optional_message(message: str | None) -> str:
    if message is None:
        return ""
    cleaned = message.strip()
    if len(cleaned) > UPDATE_MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Update message cannot exceed {UPDATE_MESSAGE_MAX_LENGTH} characters"
        )
    return cleaned


# ============================================================
# 进展记录
# ============================================================


def validate_update_message(message: str | None) -> str:
    """自由文本进展：去空白后 3-500 字符"""
    cleaned = (message or "").strip()
    if len(cleaned) < UPDATE_MESSAGE_MIN_LENGTH:
        raise ValidationError(
            f"Update message must be at least {UPDATE_MESSAGE_MIN_LENGTH} characters"
        )
    if len(cleaned) > UPDATE_MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Update message cannot exceed {UPDATE_MESSAGE_MAX_LENGTH} characters"
        )
    return cleaned


def ensure_can_add_update(actor: Actor, task: Task) -> None:
    """被指派人、本部门经理或 HR/管理员；已取消任务不接受进展

    Raises:
        ForbiddenError: 不在可操作范围内
        InvalidStateError: 任务已取消
    """
    if not can_view(actor, task):
        raise ForbiddenError()
    if task.status == TaskStatus.CANCELLED:
        raise InvalidStateError("Cannot add update to cancelled task")
