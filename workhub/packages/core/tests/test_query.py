"""查询层测试 -- 范围解析、排序、分页"""

from datetime import UTC, datetime, timedelta

import pytest
from workhub.core.models import (
    Actor,
    ActorRole,
    SortKey,
    Task,
    TaskFilters,
    TaskPriority,
    TaskStatus,
)
from workhub.core.query import (
    apply_overdue_filter,
    build_store_criteria,
    paginate,
    resolve_scope,
    sort_tasks,
)

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def _task(n: int, *, priority=TaskPriority.MEDIUM, deadline_days=1, created_days=0) -> Task:
    return Task(
        task_id=f"01JQRY{n:020d}",
        title=f"Task {n}",
        priority=priority,
        assigned_to="alice",
        assigned_by="mgr-eng",
        department_id="ENG",
        deadline=NOW + timedelta(days=deadline_days),
        created_at=NOW - timedelta(days=created_days),
        updated_at=NOW,
    )


class TestScope:
    def test_employee_sees_own_assignments(self):
        actor = Actor(actor_id="alice", role=ActorRole.EMPLOYEE, department_id="ENG")
        assert resolve_scope(actor) == {"assigned_to": "alice"}

    def test_manager_sees_department(self):
        actor = Actor(actor_id="m", role=ActorRole.MANAGER, department_id="ENG")
        assert resolve_scope(actor) == {"department_id": "ENG"}

    def test_manager_without_department_sees_nothing(self):
        actor = Actor(actor_id="m", role=ActorRole.MANAGER)
        assert resolve_scope(actor) is None

    @pytest.mark.parametrize("role", [ActorRole.HR, ActorRole.ADMIN])
    def test_global_roles_unscoped(self, role: ActorRole):
        assert resolve_scope(Actor(actor_id="x", role=role)) == {}

    def test_filters_are_and_combined_with_scope(self):
        actor = Actor(actor_id="m", role=ActorRole.MANAGER, department_id="ENG")
        criteria = build_store_criteria(
            actor, TaskFilters(status=TaskStatus.TODO, assigned_to="bob")
        )
        assert criteria == {"department_id": "ENG", "status": "todo", "assigned_to": "bob"}

    def test_filter_outside_scope_yields_nothing(self):
        actor = Actor(actor_id="m", role=ActorRole.MANAGER, department_id="ENG")
        assert build_store_criteria(actor, TaskFilters(department_id="OPS")) is None

    def test_hr_department_filter(self):
        actor = Actor(actor_id="h", role=ActorRole.HR)
        assert build_store_criteria(actor, TaskFilters(department_id="OPS")) == {
            "department_id": "OPS"
        }


class TestSort:
    def test_deadline_ascending(self):
        tasks = [_task(1, deadline_days=5), _task(2, deadline_days=1), _task(3, deadline_days=3)]
        assert [t.title for t in sort_tasks(tasks, SortKey.DEADLINE)] == [
            "Task 2",
            "Task 3",
            "Task 1",
        ]

    def test_created_at_descending(self):
        tasks = [_task(1, created_days=3), _task(2, created_days=1), _task(3, created_days=2)]
        assert [t.title for t in sort_tasks(tasks, SortKey.CREATED_AT)] == [
            "Task 2",
            "Task 3",
            "Task 1",
        ]

    def test_priority_then_deadline(self):
        tasks = [
            _task(1, priority=TaskPriority.LOW, deadline_days=1),
            _task(2, priority=TaskPriority.URGENT, deadline_days=9),
            _task(3, priority=TaskPriority.HIGH, deadline_days=4),
            _task(4, priority=TaskPriority.URGENT, deadline_days=2),
            _task(5, priority=TaskPriority.MEDIUM, deadline_days=1),
        ]
        assert [t.title for t in sort_tasks(tasks, SortKey.PRIORITY)] == [
            "Task 4",
            "Task 2",
            "Task 3",
            "Task 5",
            "Task 1",
        ]


class TestPaginate:
    def test_pages_of_ten(self):
        tasks = [_task(n) for n in range(23)]
        items, pagination = paginate(tasks, 3)
        assert len(items) == 3
        assert pagination.total == 23
        assert pagination.total_pages == 3
        assert pagination.current_page == 3
        assert pagination.limit == 10

    def test_out_of_range_page_is_empty(self):
        tasks = [_task(n) for n in range(5)]
        items, pagination = paginate(tasks, 4)
        assert items == []
        assert pagination.total == 5
        assert pagination.total_pages == 1

    def test_empty_set(self):
        items, pagination = paginate([], 1)
        assert items == []
        assert pagination.total_pages == 0


class TestOverdueFilter:
    def test_keeps_or_drops_overdue(self):
        late = _task(1, deadline_days=-1)
        on_time = _task(2, deadline_days=1)
        assert apply_overdue_filter([late, on_time], True, NOW) == [late]
        assert apply_overdue_filter([late, on_time], False, NOW) == [on_time]
        assert apply_overdue_filter([late, on_time], None, NOW) == [late, on_time]
