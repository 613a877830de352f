"""任务路由 -- 创建/查询/编辑/删除

GET    /api/tasks: 范围内任务列表（筛选 + 排序 + 分页 + 汇总）
POST   /api/tasks: 创建任务
GET    /api/tasks/{task_id}: 任务详情（含进展记录）
PUT    /api/tasks/{task_id}: 编辑任务详情
DELETE /api/tasks/{task_id}: 删除 todo 任务
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from workhub.core.models import (
    Actor,
    SortKey,
    TaskCreateInput,
    TaskEditInput,
    TaskFilters,
    TaskListResult,
    TaskPriority,
    TaskQuery,
    TaskStatus,
    TaskView,
)
from workhub.core.service import TaskService

from ..deps import get_actor, get_task_service

router = APIRouter()


class TaskEditRequest(TaskEditInput):
    """编辑请求体，可携带调用方读取时的版本号"""

    expected_version: int | None = Field(default=None, ge=1)


class DeleteResponse(BaseModel):
    task_id: str
    deleted: bool


@router.get("/api/tasks", response_model=TaskListResult)
async def list_tasks(
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    priority: TaskPriority | None = Query(default=None, description="按优先级筛选"),
    department_id: str | None = Query(default=None, description="按部门筛选"),
    assigned_to: str | None = Query(default=None, description="按被指派人筛选"),
    overdue: bool | None = Query(default=None, description="仅逾期 / 排除逾期"),
    sort: SortKey = Query(default=SortKey.DEADLINE, description="排序键"),
    page: int = Query(default=1, ge=1, description="页码"),
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """查询调用者可见范围内的任务，每页固定 10 条"""
    query = TaskQuery(
        filters=TaskFilters(
            status=status,
            priority=priority,
            department_id=department_id,
            assigned_to=assigned_to,
            overdue=overdue,
        ),
        sort=sort,
        page=page,
    )
    return await service.list_tasks(actor, query)


@router.post("/api/tasks", response_model=TaskView, status_code=201)
async def create_task(
    body: TaskCreateInput,
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """创建任务 -- 经理/HR/管理员"""
    return await service.create_task(actor, body)


@router.get("/api/tasks/{task_id}", response_model=TaskView)
async def get_task(
    task_id: str,
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """任务详情，范围外任务返回 404"""
    return await service.get_task(actor, task_id)


@router.put("/api/tasks/{task_id}", response_model=TaskView)
async def edit_task(
    task_id: str,
    body: TaskEditRequest,
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """编辑任务详情 -- 本部门经理或 HR/管理员，仅未结束任务"""
    patch = TaskEditInput.model_validate(
        body.model_dump(exclude_unset=True, exclude={"expected_version"})
    )
    return await service.edit_task(
        actor, task_id, patch, expected_version=body.expected_version
    )


@router.delete("/api/tasks/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: str,
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    """删除 todo 任务 -- HR/管理员"""
    await service.delete_task(actor, task_id)
    return DeleteResponse(task_id=task_id, deleted=True)
