"""TaskService -- 任务引擎对外入口

每个操作显式接收 actor（不读取任何隐式会话），按以下流程执行：
1. 解析/校验输入（pydantic 错误统一转换为 ValidationError）
2. 读取任务并做范围校验
3. 由流转权限层计算要写入的字段
4. 字段写入与进展记录追加在同一事务内提交

时间相关操作接受可选的 now；未传入时在入口处取一次 UTC 时钟，
之后整次调用共享该值。
"""

from datetime import UTC, datetime
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from ulid import ULID

from .aggregation import breakdown, summarize
from .directory import (
    Directory,
    department_name,
    is_assignable_employee,
    person_name,
)
from .exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .models.enums import (
    GLOBAL_ROLES,
    MANAGEMENT_ROLES,
    TERMINAL_STATES,
    ActorRole,
    BreakdownKey,
    TaskStatus,
)
from .models.identity import Actor, PersonInfo
from .models.payloads import (
    TaskCreateInput,
    TaskEditInput,
    TaskQuery,
    TransitionPayload,
    ensure_utc,
)
from .models.task import Task, TaskUpdate
from .models.views import TaskListResult, TaskUpdateView, TaskView
from .overdue import is_overdue
from .query import (
    apply_overdue_filter,
    build_store_criteria,
    paginate,
    sort_tasks,
)
from .store import StoreGroup
from .store.transaction import (
    append_update_only,
    apply_task_change,
    create_task_with_initial_update,
    delete_task,
    load_task_with_updates,
)
from .workflow import (
    can_view,
    ensure_can_add_update,
    ensure_can_delete,
    ensure_can_edit,
    plan_transition,
    validate_update_message,
)

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: ModelT | dict[str, Any] | None) -> ModelT:
    """dict 输入按模型校验；pydantic 错误转换为引擎 ValidationError"""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as e:
        messages = []
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        raise ValidationError("; ".join(messages)) from e


def _resolve_now(now: datetime | None) -> datetime:
    return ensure_utc(now) if now is not None else datetime.now(UTC)


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


class TaskService:
    """任务生命周期服务"""

    def __init__(self, stores: StoreGroup, directory: Directory) -> None:
        self._stores = stores
        self._directory = directory

    # ============================================================
    # 创建
    # ============================================================

    async def create_task(
        self,
        actor: Actor,
        data: TaskCreateInput | dict[str, Any],
        *,
        now: datetime | None = None,
    ) -> TaskView:
        """创建任务（状态 todo），同时写入第一条进展记录

        Raises:
            ForbiddenError: 员工创建，或经理跨部门创建
            ValidationError: 输入非法、被指派人不是该部门在职员工、截止时间早于今天
        """
        if actor.role not in MANAGEMENT_ROLES:
            raise ForbiddenError("Only managers, HR or admin can create tasks")

        now = _resolve_now(now)
        payload = _parse(TaskCreateInput, data)
        department_id = self._resolve_create_department(actor, payload.department_id)

        if payload.assigned_to == actor.actor_id:
            raise ValidationError("You cannot assign a task to yourself")
        if not is_assignable_employee(self._directory, payload.assigned_to, department_id):
            raise ValidationError(
                "Assignee must be an active employee of the task's department"
            )
        if payload.deadline < _start_of_day(now):
            raise ValidationError("Deadline cannot be in the past")

        task_id = str(ULID())
        task = Task(
            task_id=task_id,
            title=payload.title,
            description=payload.description,
            priority=payload.priority,
            status=TaskStatus.TODO,
            assigned_to=payload.assigned_to,
            assigned_by=actor.actor_id,
            department_id=department_id,
            deadline=payload.deadline,
            estimated_hours=payload.estimated_hours,
            tags=payload.tags,
            created_at=now,
            updated_at=now,
        )
        update = TaskUpdate(
            update_id=str(ULID()),
            task_id=task_id,
            seq=1,
            updated_by=actor.actor_id,
            message=(
                "Task created and assigned by "
                f"{person_name(self._directory, actor.actor_id)}"
            ),
            updated_at=now,
        )
        await create_task_with_initial_update(self._stores, task, update)

        log.info(
            "task_created",
            task_id=task_id,
            actor_id=actor.actor_id,
            department_id=department_id,
            assigned_to=payload.assigned_to,
            priority=payload.priority.value,
        )
        return await self._detail(task_id, now)

    def _resolve_create_department(
        self, actor: Actor, requested: str | None
    ) -> str:
        """经理固定为其管理部门；HR/管理员必须显式指定已存在的部门"""
        if actor.role == ActorRole.MANAGER:
            if actor.department_id is None:
                raise ForbiddenError("No department assigned to this manager")
            if requested is not None and requested != actor.department_id:
                raise ForbiddenError("Managers can only create tasks in their department")
            return actor.department_id

        if not requested:
            raise ValidationError("department_id is required")
        if self._directory.get_department(requested) is None:
            raise ValidationError(f"Department {requested} does not exist")
        return requested

    # ============================================================
    # 状态流转
    # ============================================================

    async def transition(
        self,
        actor: Actor,
        task_id: str,
        to_status: TaskStatus | str,
        payload: TransitionPayload | dict[str, Any] | None = None,
        *,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> TaskView:
        """按角色流转表变更状态，并追加一条带 status_change 的进展记录

        Args:
            expected_version: 调用方持有的版本号；与当前版本不一致时直接冲突

        Raises:
            NotFoundError: 任务不存在
            ForbiddenError: 不在可操作范围内
            InvalidTransitionError: 流转表不允许
            ValidationError: 目标状态非法或缺少必填附带信息
            ConflictError: 并发修改（可刷新后重试一次）
        """
        now = _resolve_now(now)
        try:
            target = TaskStatus(to_status)
        except ValueError as e:
            raise ValidationError(f"Unknown status: {to_status}") from e
        transition_payload = _parse(TransitionPayload, payload)

        task = await self._load(task_id)
        if expected_version is not None and expected_version != task.version:
            self._log_conflict(task_id, actor, target)
            raise ConflictError(task_id)

        plan = plan_transition(actor, task, target, transition_payload, now)

        def build_update(seq: int) -> TaskUpdate:
            return TaskUpdate(
                update_id=str(ULID()),
                task_id=task_id,
                seq=seq,
                updated_by=actor.actor_id,
                message=plan.message,
                status_change=plan.status_change,
                updated_at=now,
            )

        try:
            await apply_task_change(
                self._stores,
                task_id,
                plan.fields,
                build_update,
                expected_version=task.version,
                updated_at=now,
                reopening=plan.reopening,
            )
        except ConflictError:
            self._log_conflict(task_id, actor, target)
            raise

        log.info(
            "task_transitioned",
            task_id=task_id,
            actor_id=actor.actor_id,
            role=actor.role.value,
            from_status=plan.from_status.value,
            to_status=plan.to_status.value,
        )
        return await self._detail(task_id, now)

    @staticmethod
    def _log_conflict(task_id: str, actor: Actor, target: TaskStatus) -> None:
        log.warning(
            "task_transition_conflict",
            task_id=task_id,
            actor_id=actor.actor_id,
            to_status=target.value,
        )

    # ============================================================
    # 进展记录
    # ============================================================

    async def add_update(
        self,
        actor: Actor,
        task_id: str,
        message: str,
        *,
        now: datetime | None = None,
    ) -> TaskView:
        """追加一条自由文本进展（不改变状态）

        Raises:
            ValidationError: 消息长度不在 3-500
            NotFoundError: 任务不存在
            ForbiddenError: 不在可操作范围内
            InvalidStateError: 任务已取消
        """
        now = _resolve_now(now)
        text = validate_update_message(message)
        task = await self._load(task_id)
        ensure_can_add_update(actor, task)

        def build_update(seq: int) -> TaskUpdate:
            return TaskUpdate(
                update_id=str(ULID()),
                task_id=task_id,
                seq=seq,
                updated_by=actor.actor_id,
                message=text,
                updated_at=now,
            )

        update = await append_update_only(
            self._stores, task_id, build_update, updated_at=now
        )
        log.info(
            "task_update_added",
            task_id=task_id,
            actor_id=actor.actor_id,
            seq=update.seq,
        )
        return await self._detail(task_id, now)

    # ============================================================
    # 编辑与删除
    # ============================================================

    async def edit_task(
        self,
        actor: Actor,
        task_id: str,
        patch: TaskEditInput | dict[str, Any],
        *,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> TaskView:
        """修改任务详情（仅 todo / in_progress）

        Raises:
            NotFoundError / ForbiddenError / InvalidStateError /
            ValidationError / ConflictError
        """
        now = _resolve_now(now)
        edit = _parse(TaskEditInput, patch)
        task = await self._load(task_id)
        ensure_can_edit(actor, task)

        if task.status in TERMINAL_STATES:
            raise InvalidStateError(f"Cannot edit a {task.status.value} task")
        if expected_version is not None and expected_version != task.version:
            raise ConflictError(task_id)

        changes = edit.changes()
        if not changes:
            raise ValidationError("No changes provided")
        deadline = changes.get("deadline")
        if deadline is not None and deadline < _start_of_day(now):
            raise ValidationError("Deadline cannot be in the past")

        actor_name = person_name(self._directory, actor.actor_id)

        def build_update(seq: int) -> TaskUpdate:
            return TaskUpdate(
                update_id=str(ULID()),
                task_id=task_id,
                seq=seq,
                updated_by=actor.actor_id,
                message=f"Task details updated by {actor_name}",
                updated_at=now,
            )

        await apply_task_change(
            self._stores,
            task_id,
            changes,
            build_update,
            expected_version=task.version,
            updated_at=now,
        )
        log.info(
            "task_edited",
            task_id=task_id,
            actor_id=actor.actor_id,
            fields=sorted(changes),
        )
        return await self._detail(task_id, now)

    async def delete_task(self, actor: Actor, task_id: str) -> None:
        """物理删除 todo 任务（仅 HR/管理员）

        Raises:
            ForbiddenError: 非 HR/管理员
            NotFoundError: 任务不存在
            InvalidStateError: 任务已开始，应改为取消
        """
        ensure_can_delete(actor)
        await delete_task(self._stores, task_id)
        log.info("task_deleted", task_id=task_id, actor_id=actor.actor_id)

    # ============================================================
    # 查询
    # ============================================================

    async def get_task(
        self,
        actor: Actor,
        task_id: str,
        *,
        now: datetime | None = None,
    ) -> TaskView:
        """任务详情（含进展记录）

        范围外的任务与不存在的任务一样返回 NotFoundError。
        """
        now = _resolve_now(now)
        task = await load_task_with_updates(self._stores, task_id)
        if not can_view(actor, task):
            raise NotFoundError(task_id)
        return self._view(task, now, with_updates=True)

    async def list_tasks(
        self,
        actor: Actor,
        query: TaskQuery | dict[str, Any] | None = None,
        *,
        now: datetime | None = None,
    ) -> TaskListResult:
        """范围内任务列表：筛选、排序、分页，附带汇总与分组统计

        summary / breakdown 基于分页前的完整结果集。
        """
        now = _resolve_now(now)
        task_query = _parse(TaskQuery, query)

        criteria = build_store_criteria(actor, task_query.filters)
        if criteria is None:
            tasks: list[Task] = []
        else:
            tasks = await self._stores.task_store.list_tasks(**criteria)
        tasks = apply_overdue_filter(tasks, task_query.filters.overdue, now)
        tasks = sort_tasks(tasks, task_query.sort)

        breakdown_by = self._breakdown_key(actor)
        rows = []
        if breakdown_by == BreakdownKey.DEPARTMENT:
            rows = breakdown(
                tasks, now, breakdown_by, lambda key: department_name(self._directory, key)
            )
        elif breakdown_by == BreakdownKey.EMPLOYEE:
            rows = breakdown(
                tasks, now, breakdown_by, lambda key: person_name(self._directory, key)
            )

        page_items, pagination = paginate(tasks, task_query.page)
        log.debug(
            "tasks_listed",
            actor_id=actor.actor_id,
            role=actor.role.value,
            total=pagination.total,
            page=pagination.current_page,
        )
        return TaskListResult(
            items=[self._view(t, now) for t in page_items],
            summary=summarize(tasks, now),
            breakdown_by=breakdown_by,
            breakdown=rows,
            pagination=pagination,
        )

    @staticmethod
    def _breakdown_key(actor: Actor) -> BreakdownKey | None:
        if actor.role in GLOBAL_ROLES:
            return BreakdownKey.DEPARTMENT
        if actor.role == ActorRole.MANAGER:
            return BreakdownKey.EMPLOYEE
        return None

    def list_department_employees(self, actor: Actor) -> list[PersonInfo]:
        """经理所在部门的在职员工（可指派对象）"""
        if actor.role != ActorRole.MANAGER:
            raise ForbiddenError("Only managers can list department employees")
        if actor.department_id is None:
            return []
        members = self._directory.list_department_members(actor.department_id)
        return sorted(
            (p for p in members if p.role == ActorRole.EMPLOYEE),
            key=lambda p: p.full_name,
        )

    # ============================================================
    # 内部辅助
    # ============================================================

    async def _load(self, task_id: str) -> Task:
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    async def _detail(self, task_id: str, now: datetime) -> TaskView:
        task = await load_task_with_updates(self._stores, task_id)
        return self._view(task, now, with_updates=True)

    def _view(self, task: Task, now: datetime, *, with_updates: bool = False) -> TaskView:
        """组装展示结构；进展记录只出现在 TaskView.updates 中"""
        updates = []
        if with_updates:
            updates = [
                TaskUpdateView(
                    **u.model_dump(),
                    updated_by_name=person_name(self._directory, u.updated_by),
                )
                for u in task.updates
            ]
        return TaskView(
            task=task.model_copy(update={"updates": []}),
            is_overdue=is_overdue(task, now),
            assignee_name=person_name(self._directory, task.assigned_to),
            assigned_by_name=person_name(self._directory, task.assigned_by),
            department_name=department_name(self._directory, task.department_id),
            updates=updates,
        )
