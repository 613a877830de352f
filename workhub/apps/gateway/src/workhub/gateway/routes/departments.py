"""部门路由

GET /api/departments/mine/employees: 经理所在部门的在职员工（可指派对象）
"""

from fastapi import APIRouter, Depends
from workhub.core.models import Actor, PersonInfo
from workhub.core.service import TaskService

from ..deps import get_actor, get_task_service

router = APIRouter()


@router.get("/api/departments/mine/employees", response_model=list[PersonInfo])
async def list_my_department_employees(
    actor: Actor = Depends(get_actor),
    service: TaskService = Depends(get_task_service),
):
    return service.list_department_employees(actor)
