"""流转权限层单元测试 -- 不涉及存储

测试内容：
1. 范围校验（员工仅限被指派任务，经理仅限本部门）
2. 流转副作用字段（完成/取消/反向流转）
3. 附带信息校验
"""

from datetime import UTC, datetime, timedelta

import pytest
from workhub.core.exceptions import (
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
)
from workhub.core.models import Actor, ActorRole, Task, TaskStatus, TransitionPayload
from workhub.core.workflow import (
    can_manage,
    can_view,
    ensure_can_add_update,
    ensure_can_delete,
    plan_transition,
    validate_update_message,
)

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

ALICE = Actor(actor_id="alice", role=ActorRole.EMPLOYEE, department_id="ENG")
BOB = Actor(actor_id="bob", role=ActorRole.EMPLOYEE, department_id="ENG")
MGR_ENG = Actor(actor_id="mgr-eng", role=ActorRole.MANAGER, department_id="ENG")
MGR_OPS = Actor(actor_id="mgr-ops", role=ActorRole.MANAGER, department_id="OPS")
HR = Actor(actor_id="hr-1", role=ActorRole.HR)


def _task(status: TaskStatus = TaskStatus.TODO, **extra) -> Task:
    return Task(
        task_id="01JWF000000000000000000001",
        title="Workflow check",
        status=status,
        assigned_to="alice",
        assigned_by="mgr-eng",
        department_id="ENG",
        deadline=NOW + timedelta(days=1),
        created_at=NOW,
        updated_at=NOW,
        **extra,
    )


class TestScope:
    def test_view_rules(self):
        task = _task()
        assert can_view(ALICE, task)
        assert not can_view(BOB, task)
        assert can_view(MGR_ENG, task)
        assert not can_view(MGR_OPS, task)
        assert can_view(HR, task)

    def test_manage_rules(self):
        task = _task()
        assert not can_manage(ALICE, task)
        assert can_manage(MGR_ENG, task)
        assert not can_manage(MGR_OPS, task)
        assert can_manage(HR, task)

    def test_only_global_roles_delete(self):
        ensure_can_delete(HR)
        with pytest.raises(ForbiddenError):
            ensure_can_delete(MGR_ENG)


class TestPlanTransition:
    def test_employee_start(self):
        plan = plan_transition(
            ALICE, _task(), TaskStatus.IN_PROGRESS, TransitionPayload(), NOW
        )
        assert plan.fields == {"status": TaskStatus.IN_PROGRESS}
        assert plan.status_change == "todo → in_progress"
        assert plan.message == "Status changed to in_progress"
        assert plan.reopening is False

    def test_scope_checked_before_table(self):
        # 表外流转 + 范围外：先报 Forbidden
        with pytest.raises(ForbiddenError):
            plan_transition(BOB, _task(), TaskStatus.CANCELLED, TransitionPayload(), NOW)

    def test_table_checked_before_payload(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            plan_transition(ALICE, _task(), TaskStatus.COMPLETED, TransitionPayload(), NOW)
        assert exc_info.value.from_status == "todo"
        assert exc_info.value.to_status == "completed"

    def test_complete_requires_hours(self):
        task = _task(TaskStatus.IN_PROGRESS)
        with pytest.raises(ValidationError):
            plan_transition(ALICE, task, TaskStatus.COMPLETED, TransitionPayload(), NOW)
        with pytest.raises(ValidationError):
            plan_transition(
                ALICE, task, TaskStatus.COMPLETED, TransitionPayload(actual_hours=-1), NOW
            )

    @pytest.mark.parametrize("hours", [float("nan"), float("inf")])
    def test_complete_rejects_non_finite_hours(self, hours):
        # 绕过模型校验，确认流转层自身也拒绝
        payload = TransitionPayload.model_construct(actual_hours=hours)
        with pytest.raises(ValidationError):
            plan_transition(
                ALICE, _task(TaskStatus.IN_PROGRESS), TaskStatus.COMPLETED, payload, NOW
            )

    def test_complete_sets_hours_and_timestamp(self):
        plan = plan_transition(
            ALICE,
            _task(TaskStatus.IN_PROGRESS),
            TaskStatus.COMPLETED,
            TransitionPayload(actual_hours=0, message="done"),
            NOW,
        )
        assert plan.fields["actual_hours"] == 0
        assert plan.fields["completed_at"] == NOW
        assert plan.message == "done"

    def test_cancel_requires_reason(self):
        with pytest.raises(ValidationError):
            plan_transition(
                MGR_ENG, _task(), TaskStatus.CANCELLED, TransitionPayload(cancel_reason="  "), NOW
            )
        with pytest.raises(ValidationError):
            plan_transition(
                MGR_ENG,
                _task(),
                TaskStatus.CANCELLED,
                TransitionPayload(cancel_reason="r" * 301),
                NOW,
            )

    def test_cancel_fields_and_default_message(self):
        plan = plan_transition(
            MGR_ENG,
            _task(),
            TaskStatus.CANCELLED,
            TransitionPayload(cancel_reason=" Scope dropped "),
            NOW,
        )
        assert plan.fields["cancel_reason"] == "Scope dropped"
        assert plan.fields["cancelled_by"] == "mgr-eng"
        assert plan.fields["cancelled_at"] == NOW
        assert plan.message == "Scope dropped"

    def test_reopen_completed_clears_completion(self):
        task = _task(TaskStatus.COMPLETED, actual_hours=5, completed_at=NOW)
        plan = plan_transition(
            MGR_ENG, task, TaskStatus.IN_PROGRESS, TransitionPayload(), NOW
        )
        assert plan.reopening is True
        assert plan.fields["actual_hours"] is None
        assert plan.fields["completed_at"] is None

    def test_reopen_cancelled_clears_cancellation(self):
        task = _task(
            TaskStatus.CANCELLED,
            cancel_reason="dup",
            cancelled_by="mgr-eng",
            cancelled_at=NOW,
        )
        plan = plan_transition(HR, task, TaskStatus.TODO, TransitionPayload(), NOW)
        assert plan.reopening is True
        assert plan.fields["cancel_reason"] is None
        assert plan.fields["cancelled_by"] is None
        assert plan.fields["cancelled_at"] is None

    def test_message_too_long(self):
        with pytest.raises(ValidationError):
            plan_transition(
                ALICE,
                _task(),
                TaskStatus.IN_PROGRESS,
                TransitionPayload(message="m" * 501),
                NOW,
            )


class TestUpdates:
    @pytest.mark.parametrize("message", ["", "  ab  ", "x" * 501])
    def test_message_length(self, message: str):
        with pytest.raises(ValidationError):
            validate_update_message(message)

    def test_message_is_trimmed(self):
        assert validate_update_message("  fixed it  ") == "fixed it"

    def test_cancelled_task_rejects_updates(self):
        task = _task(TaskStatus.CANCELLED, cancel_reason="x")
        with pytest.raises(InvalidStateError):
            ensure_can_add_update(ALICE, task)

    def test_completed_task_accepts_updates(self):
        ensure_can_add_update(MGR_ENG, _task(TaskStatus.COMPLETED, actual_hours=1))
