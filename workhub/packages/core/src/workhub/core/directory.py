"""目录服务接口 -- 人员与部门信息由外部系统维护

引擎只依赖 Directory Protocol；StaticDirectory 是内存实现，
可从 JSON 文件加载，供 gateway 和测试使用。

JSON 文件格式::

    {
      "departments": [{"department_id": "...", "name": "...", "code": "...", "manager_id": "..."}],
      "people": [{"person_id": "...", "full_name": "...", "role": "employee", "department_id": "..."}]
    }
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import structlog

from .config import UNKNOWN_DISPLAY_NAME
from .models.enums import ActorRole
from .models.identity import DepartmentInfo, PersonInfo

log = structlog.get_logger()


class Directory(Protocol):
    """外部目录服务接口"""

    def get_person(self, person_id: str) -> PersonInfo | None:
        """根据 ID 查询人员"""
        ...

    def get_department(self, department_id: str) -> DepartmentInfo | None:
        """根据 ID 查询部门"""
        ...

    def is_member(self, person_id: str, department_id: str) -> bool:
        """人员是否为该部门在职成员"""
        ...

    def list_department_members(self, department_id: str) -> list[PersonInfo]:
        """列出部门在职成员"""
        ...


class StaticDirectory:
    """内存目录服务实现"""

    def __init__(
        self,
        people: Iterable[PersonInfo] = (),
        departments: Iterable[DepartmentInfo] = (),
    ) -> None:
        self._people = {p.person_id: p for p in people}
        self._departments = {d.department_id: d for d in departments}

    @classmethod
    def from_json_file(cls, path: Path) -> "StaticDirectory":
        """从 JSON 文件加载目录数据"""
        data = json.loads(path.read_text(encoding="utf-8"))
        directory = cls(
            people=[PersonInfo(**p) for p in data.get("people", [])],
            departments=[DepartmentInfo(**d) for d in data.get("departments", [])],
        )
        log.info(
            "directory_loaded",
            path=str(path),
            people=len(directory._people),
            departments=len(directory._departments),
        )
        return directory

    def get_person(self, person_id: str) -> PersonInfo | None:
        return self._people.get(person_id)

    def get_department(self, department_id: str) -> DepartmentInfo | None:
        return self._departments.get(department_id)

    def is_member(self, person_id: str, department_id: str) -> bool:
        person = self._people.get(person_id)
        return (
            person is not None
            and person.is_active
            and person.department_id == department_id
        )

    def list_department_members(self, department_id: str) -> list[PersonInfo]:
        return [
            p
            for p in self._people.values()
            if p.is_active and p.department_id == department_id
        ]


def person_name(directory: Directory, person_id: str | None) -> str:
    """解析人员展示名，未知时返回 "Unknown" """
    if person_id is None:
        return UNKNOWN_DISPLAY_NAME
    person = directory.get_person(person_id)
    return person.full_name if person else UNKNOWN_DISPLAY_NAME


def department_name(directory: Directory, department_id: str | None) -> str:
    """解析部门展示名，未知时返回 "Unknown" """
    if department_id is None:
        return UNKNOWN_DISPLAY_NAME
    department = directory.get_department(department_id)
    return department.name if department else UNKNOWN_DISPLAY_NAME


def is_assignable_employee(
    directory: Directory, person_id: str, department_id: str
) -> bool:
    """人员是否可以被指派该部门的任务：在职员工且属于该部门"""
    person = directory.get_person(person_id)
    return (
        person is not None
        and person.role == ActorRole.EMPLOYEE
        and directory.is_member(person_id, department_id)
    )
