"""애플리케이션 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from app.core.config import Settings, get_settings
from app.core.errors import StoreUnavailableError
from app.database import get_engine

ReadinessCheck = dict[str, str | bool]


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _ping_database() -> None:
    with get_engine().connect() as connection:
        connection.execute(text("SELECT 1"))


async def _check_database_readiness(settings: Settings) -> ReadinessCheck:
    """애플리케이션 엔진으로 `SELECT 1`을 실행합니다. 연결 타임아웃은 엔진 설정을 따릅니다."""
    database_url = (settings.DATABASE_URL or "").strip()
    if not database_url:
        return _fail("DATABASE_URL이 설정되지 않았습니다.")

    try:
        backend = make_url(database_url).get_backend_name()
    except ArgumentError:
        return _fail("DATABASE_URL을 해석할 수 없습니다.")

    try:
        await asyncio.to_thread(_ping_database)
    except (StoreUnavailableError, SQLAlchemyError) as exc:
        return _fail(f"DB 연결 실패 ({backend}): {exc}")
    return _ok(f"DB 연결 확인 완료 ({backend})")


async def collect_readiness_status() -> dict[str, object]:
    """저장소 의존성 준비 상태를 점검합니다."""
    settings = get_settings()

    checks: dict[str, ReadinessCheck] = {
        "db": await _check_database_readiness(settings),
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
