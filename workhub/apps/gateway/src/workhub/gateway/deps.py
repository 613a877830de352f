"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store、目录服务和调用者身份

Store 与目录服务通过 app.state 管理，在 lifespan 中初始化/清理。
调用者身份由上游认证网关以请求头传入。
"""

from fastapi import Depends, Header, Request
from workhub.core.directory import Directory
from workhub.core.models import Actor, ActorRole
from workhub.core.service import TaskService
from workhub.core.store import StoreGroup

from .errors import UnauthenticatedError


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_directory(request: Request) -> Directory:
    """从 app.state 获取目录服务实例"""
    return request.app.state.directory


def get_task_service(
    store_group: StoreGroup = Depends(get_store_group),
    directory: Directory = Depends(get_directory),
) -> TaskService:
    return TaskService(store_group, directory)


def get_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_actor_department: str | None = Header(default=None),
) -> Actor:
    """从 X-Actor-Id / X-Actor-Role / X-Actor-Department 构造调用者

    Raises:
        UnauthenticatedError: 身份头缺失或角色非法
    """
    if not x_actor_id or not x_actor_role:
        raise UnauthenticatedError("Missing actor identity headers")
    try:
        role = ActorRole(x_actor_role.strip().lower())
    except ValueError as e:
        raise UnauthenticatedError(f"Unknown actor role: {x_actor_role}") from e
    return Actor(
        actor_id=x_actor_id.strip(),
        role=role,
        department_id=(x_actor_department or "").strip() or None,
    )
