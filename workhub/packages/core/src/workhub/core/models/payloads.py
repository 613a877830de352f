"""引擎输入模型 -- 创建/编辑/流转/查询的结构化 payload

字段级约束（长度、范围、标签规则）在此声明；
跨实体规则（部门成员、角色权限）由 TaskService 和流转权限层校验。
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import (
    DESCRIPTION_MAX_LENGTH,
    ESTIMATED_HOURS_MAX,
    MAX_TAGS,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from .enums import SortKey, TaskPriority, TaskStatus


def ensure_utc(value: datetime) -> datetime:
    """naive 时间按 UTC 处理，aware 时间统一转换到 UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def normalize_tags(tags: list[str]) -> list[str]:
    """标签去空白并校验：最多 5 个、每个不超过 20 字符、任务内唯一"""
    cleaned = [t.strip() for t in tags]
    if len(cleaned) > MAX_TAGS:
        raise ValueError(f"Maximum {MAX_TAGS} tags allowed")
    for tag in cleaned:
        if not tag:
            raise ValueError("Tags cannot be empty")
        if len(tag) > TAG_MAX_LENGTH:
            raise ValueError(f"Tag '{tag}' exceeds {TAG_MAX_LENGTH} characters")
    if len(set(cleaned)) != len(cleaned):
        raise ValueError("Tags must be unique")
    return cleaned


class TaskCreateInput(BaseModel):
    """创建任务输入

    经理创建时 department_id 可省略（取经理管理的部门）；
    HR/管理员创建时必须指定。
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    assigned_to: str = Field(min_length=1, description="被指派人 ID")
    department_id: str | None = Field(default=None, description="所属部门 ID")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    deadline: datetime
    estimated_hours: float | None = Field(default=None, gt=0, le=ESTIMATED_HOURS_MAX)
    tags: list[str] = Field(default_factory=list)

    @field_validator("deadline")
    @classmethod
    def _deadline_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)


class TaskEditInput(BaseModel):
    """编辑任务详情输入 -- 仅显式传入的字段会被修改"""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(
        default=None, min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
    )
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: TaskPriority | None = None
    deadline: datetime | None = None
    estimated_hours: float | None = Field(default=None, gt=0, le=ESTIMATED_HOURS_MAX)
    tags: list[str] | None = None

    @field_validator("deadline")
    @classmethod
    def _deadline_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: list[str] | None) -> list[str] | None:
        return normalize_tags(value) if value is not None else None

    def changes(self) -> dict:
        """返回显式设置且非 None 的字段"""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class TransitionPayload(BaseModel):
    """状态流转附带信息

    completed 需要 actual_hours；cancelled 需要 cancel_reason。
    actual_hours 在模型上拒绝 NaN/Infinity，其余取值校验在流转权限层完成，
    以便统一抛出 ValidationError。
    """

    message: str | None = None
    actual_hours: float | None = Field(default=None, allow_inf_nan=False)
    cancel_reason: str | None = None


class TaskFilters(BaseModel):
    """任务列表筛选条件（全部可选，AND 组合）"""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    department_id: str | None = None
    assigned_to: str | None = None
    overdue: bool | None = Field(
        default=None,
        description="True 仅保留逾期任务，False 排除逾期任务",
    )


class TaskQuery(BaseModel):
    """任务列表查询：筛选 + 排序 + 页码"""

    filters: TaskFilters = Field(default_factory=TaskFilters)
    sort: SortKey = Field(default=SortKey.DEADLINE)
    page: int = Field(default=1, ge=1)
