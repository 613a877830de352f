"""目录服务测试 -- StaticDirectory 与展示名解析"""

import json
from pathlib import Path

from workhub.core.directory import (
    StaticDirectory,
    department_name,
    is_assignable_employee,
    person_name,
)
from workhub.core.models import ActorRole


class TestStaticDirectory:
    def test_membership_requires_active(self, directory: StaticDirectory):
        assert directory.is_member("alice", "ENG")
        assert not directory.is_member("alice", "OPS")
        assert not directory.is_member("dave", "ENG")
        assert not directory.is_member("nobody", "ENG")

    def test_list_members_excludes_inactive(self, directory: StaticDirectory):
        ids = {p.person_id for p in directory.list_department_members("ENG")}
        assert ids == {"alice", "bob", "mgr-eng"}

    def test_assignable_only_employees(self, directory: StaticDirectory):
        assert is_assignable_employee(directory, "alice", "ENG")
        assert not is_assignable_employee(directory, "mgr-eng", "ENG")
        assert not is_assignable_employee(directory, "dave", "ENG")
        assert not is_assignable_employee(directory, "carol", "ENG")

    def test_unknown_names(self, directory: StaticDirectory):
        assert person_name(directory, "alice") == "Alice Nguyen"
        assert person_name(directory, "ghost") == "Unknown"
        assert person_name(directory, None) == "Unknown"
        assert department_name(directory, "OPS") == "Operations"
        assert department_name(directory, "HQ") == "Unknown"

    def test_load_from_json(self, tmp_path: Path):
        path = tmp_path / "directory.json"
        path.write_text(
            json.dumps(
                {
                    "departments": [
                        {"department_id": "FIN", "name": "Finance", "manager_id": "m1"}
                    ],
                    "people": [
                        {"person_id": "m1", "full_name": "Mai", "role": "manager",
                         "department_id": "FIN"},
                        {"person_id": "e1", "full_name": "Em", "department_id": "FIN"},
                    ],
                }
            ),
            encoding="utf-8",
        )

        directory = StaticDirectory.from_json_file(path)

        assert directory.get_department("FIN").name == "Finance"
        assert directory.get_person("m1").role == ActorRole.MANAGER
        assert is_assignable_employee(directory, "e1", "FIN")
