"""Task Domain Model

tasks 表保存任务当前字段，task_updates 表保存只追加的进展记录。
Task.updates 按 seq 正序组装，插入顺序即记录的规范顺序。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import TaskPriority, TaskStatus


class TaskUpdate(BaseModel):
    """进展记录 -- 追加后不可修改"""

    model_config = ConfigDict(frozen=True)

    update_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="关联的 Task ID")
    seq: int = Field(description="任务内序号，严格单调递增")
    updated_by: str = Field(description="记录人 ID")
    message: str = Field(description="记录内容")
    status_change: str | None = Field(
        default=None,
        description='状态变更标签，如 "todo → in_progress"',
    )
    updated_at: datetime = Field(description="记录时间")


class Task(BaseModel):
    """Task 数据模型

    assigned_to / assigned_by / department_id 只保存外部实体的标识，
    展示名由目录服务解析。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="优先级")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="当前状态")
    assigned_to: str = Field(description="被指派人 ID")
    assigned_by: str = Field(description="指派人 ID")
    department_id: str = Field(description="所属部门 ID")
    deadline: datetime = Field(description="截止时间")
    estimated_hours: float | None = Field(default=None, description="预估工时")
    actual_hours: float | None = Field(default=None, description="实际工时，完成时填写")
    tags: list[str] = Field(default_factory=list, description="标签")
    cancel_reason: str | None = Field(default=None, description="取消原因")
    cancelled_by: str | None = Field(default=None, description="取消人 ID")
    cancelled_at: datetime | None = Field(default=None, description="取消时间")
    completed_at: datetime | None = Field(default=None, description="完成时间")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    version: int = Field(default=1, description="乐观锁版本号，每次写入递增")
    updates: list[TaskUpdate] = Field(default_factory=list, description="进展记录")
