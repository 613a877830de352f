"""CLI 入口模块 -- python -m workhub.core <command>

支持的命令：
  init-db                     创建数据库表结构
  summary [--department ID]   以 HR 视角输出任务汇总与部门分组统计（JSON）
"""

import asyncio
import json
import sys

from .config import get_db_path, get_directory_path
from .directory import StaticDirectory
from .models.enums import ActorRole
from .models.identity import Actor
from .models.payloads import TaskFilters, TaskQuery

_USAGE = """用法: python -m workhub.core <command>
命令:
  init-db                     创建数据库表结构
  summary [--department ID]   输出任务汇总（JSON）"""

# CLI 以系统管理员身份查询
_CLI_ACTOR = Actor(actor_id="cli", role=ActorRole.ADMIN)


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "summary":
        department_id = _parse_department(sys.argv[2:])
        asyncio.run(print_summary(department_id))
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, summary")
        sys.exit(1)


def _parse_department(args: list[str]) -> str | None:
    if not args:
        return None
    if len(args) == 2 and args[0] == "--department":
        return args[1]
    print(_USAGE)
    sys.exit(1)


async def init_database() -> None:
    """创建数据库文件与表结构"""
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")
    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print("初始化完成")


async def print_summary(department_id: str | None) -> None:
    """输出当前时刻的汇总与部门分组统计"""
    from .service import TaskService
    from .store import create_store_group

    directory_path = get_directory_path()
    directory = (
        StaticDirectory.from_json_file(directory_path)
        if directory_path
        else StaticDirectory()
    )
    store_group = await create_store_group(get_db_path())
    try:
        service = TaskService(store_group, directory)
        result = await service.list_tasks(
            _CLI_ACTOR,
            TaskQuery(filters=TaskFilters(department_id=department_id)),
        )
    finally:
        await store_group.conn.close()

    output = {
        "summary": result.summary.model_dump(),
        "breakdown": [row.model_dump() for row in result.breakdown],
    }
    print(json.dumps(output, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
