"""状态流转与进展记录路由

PATCH /api/tasks/{task_id}/status: 按角色流转表变更状态
- 400: 流转不合法 / 缺少工时或取消原因
- 403: 不在可操作范围内
- 404: 任务不存在
- 409: 并发修改冲突（可刷新后重试）
POST  /api/tasks/{task_id}/updates: 追加自由文本进展
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from workhub.core.models import Actor, TaskStatus, TaskView, TransitionPayload
from workhub.core.service import TaskService

from ..deps import get_actor, get_task_service

router = APIRouter()


class StatusChangeRequest(TransitionPayload):
    """状态流转请求体：目标状态 + 流转附带信息，可携带调用方读取时的版本号"""

    status: TaskStatus = Field(description="目标状态")
    expected_version: int | None = Field(
        default=None, ge=1, description="调用方读取时的版本号"
    )


class UpdateRequest(BaseModel):
    """进展记录请求体"""

    message: str = Field(description="进展内容，3-500 字符")


@router.patch("/api/tasks/{task_id}/status", response_model=TaskView)
async def change_status(
    task_id: str,
    body: StatusChangeRequest,
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """变更任务状态"""
    payload = TransitionPayload.model_validate(
        body.model_dump(exclude={"status", "expected_version"})
    )
    return await service.transition(
        actor,
        task_id,
        body.status,
        payload,
        expected_version=body.expected_version,
    )


@router.post("/api/tasks/{task_id}/updates", response_model=TaskView, status_code=201)
async def add_update(
    task_id: str,
    body: UpdateRequest,
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """追加进展记录（已取消任务返回 409）"""
    return await service.add_update(actor, task_id, body.message)
