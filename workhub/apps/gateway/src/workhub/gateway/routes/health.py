"""健康检查路由

GET /health: 存活检查，不访问任何依赖。
GET /ready:  就绪检查，任务表可读、目录服务已加载、数据库所在卷有剩余空间。
"""

import shutil
from pathlib import Path

import aiosqlite
import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse
from workhub.core.config import get_db_path
from workhub.core.store import StoreGroup

log = structlog.get_logger()

router = APIRouter()


async def _check_sqlite(store_group: StoreGroup | None) -> str:
    if store_group is None:
        return "unavailable"
    try:
        async with store_group.conn.execute("SELECT COUNT(*) FROM tasks") as cursor:
            await cursor.fetchone()
    except (aiosqlite.Error, ValueError) as e:
        # 连接关闭时 aiosqlite 抛 ValueError
        log.warning("ready_check_failed", check="sqlite", error=str(e))
        return "unavailable"
    return "ok"


def _free_disk_mb(db_path: str) -> int | None:
    target = Path(db_path).parent
    while not target.exists() and target != target.parent:
        target = target.parent
    try:
        return shutil.disk_usage(target).free // (1024 * 1024)
    except OSError as e:
        log.warning("ready_check_failed", check="disk_space", error=str(e))
        return None


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """依赖全部可用时返回 200，否则 503 并在 checks 中标出失败项"""
    state = request.app.state
    sqlite_status = await _check_sqlite(getattr(state, "store_group", None))
    has_directory = getattr(state, "directory", None) is not None
    free_mb = _free_disk_mb(get_db_path())

    checks: dict[str, object] = {
        "sqlite": sqlite_status,
        "directory": "ok" if has_directory else "missing",
        "disk_space_mb": free_mb if free_mb is not None else 0,
    }
    all_ok = sqlite_status == "ok" and has_directory and free_mb is not None

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "not_ready", "checks": checks},
    )
