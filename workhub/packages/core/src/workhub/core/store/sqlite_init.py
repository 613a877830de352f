"""SQLite 数据库初始化

PRAGMA 配置 + tasks / task_updates 两张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id          TEXT PRIMARY KEY,
    title            TEXT NOT NULL,
    description      TEXT NOT NULL DEFAULT '',
    priority         TEXT NOT NULL DEFAULT 'medium',
    status           TEXT NOT NULL DEFAULT 'todo',
    assigned_to      TEXT NOT NULL,
    assigned_by      TEXT NOT NULL,
    department_id    TEXT NOT NULL,
    deadline         TEXT NOT NULL,
    estimated_hours  REAL,
    actual_hours     REAL,
    tags             TEXT NOT NULL DEFAULT '[]',
    cancel_reason    TEXT,
    cancelled_by     TEXT,
    cancelled_at     TEXT,
    completed_at     TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL,
    version          INTEGER NOT NULL DEFAULT 1
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_department ON tasks(department_id, status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assigned_to, status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_deadline ON tasks(deadline);",
]

# task_updates 表 DDL（append-only）
_TASK_UPDATES_DDL = """
CREATE TABLE IF NOT EXISTS task_updates (
    update_id      TEXT PRIMARY KEY,
    task_id        TEXT NOT NULL,
    seq            INTEGER NOT NULL,
    updated_by     TEXT NOT NULL,
    message        TEXT NOT NULL,
    status_change  TEXT,
    updated_at     TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id) ON DELETE CASCADE
);
"""

_TASK_UPDATES_INDEXES = [
    # 任务内序号唯一约束（确保 seq 严格单调递增）
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_task_updates_seq ON task_updates(task_id, seq);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_TASKS_DDL)
    await conn.execute(_TASK_UPDATES_DDL)

    # 创建索引
    for idx_sql in _TASKS_INDEXES + _TASK_UPDATES_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
