from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings, get_settings
from app.core.errors import StoreUnavailableError
from app.core.logger import get_logger
from app.models.base import Base

logger = get_logger(__name__)


def _engine_options(settings: Settings) -> dict[str, Any]:
    """방언에 맞는 `create_engine` 옵션을 만든다. SQLite는 풀 크기 옵션을 받지 않는다."""
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}

    options: dict[str, Any] = {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
    }
    if url.get_backend_name() == "postgresql":
        options["connect_args"] = {"connect_timeout": settings.DB_CONNECT_TIMEOUT_SECONDS}
    return options


@lru_cache
def get_engine() -> Engine:
    """`SQLAlchemy` 엔진을 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다.

    Raises:
        StoreUnavailableError: URL이 잘못되었거나 드라이버를 불러올 수 없을 때.
    """
    settings = get_settings()
    try:
        return create_engine(settings.DATABASE_URL, **_engine_options(settings))
    except (ArgumentError, NoSuchModuleError, ImportError) as exc:
        logger.error("Database engine initialization failed: %s", exc)
        raise StoreUnavailableError("저장소를 초기화할 수 없습니다.") from exc


def get_session_local() -> sessionmaker[Session]:
    """`SessionLocal` 팩토리를 반환한다."""
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Iterator[Session]:
    """`FastAPI` 의존성 주입을 위한 데이터베이스 세션 생성기.

    API 요청(request)이 시작될 때마다 새로운 `SQLAlchemy` 세션을 생성하고,
    요청 처리가 완료되면 `finally` 블록을 통해 세션을 안전하게 닫습니다.
    커밋은 하지 않습니다. 쓰기는 모두 `unit_of_work` 안에서만 확정됩니다.

    Yields:
        `Session`: 생성된 `SQLAlchemy` 데이터베이스 세션 객체.
    """
    session_local = get_session_local()
    db = session_local()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """여러 행 쓰기를 하나의 트랜잭션으로 묶는다.

    블록이 정상 종료되면 커밋하고, 어떤 예외든 발생하면 롤백한 뒤 다시 던진다.
    커밋 실패(제약 조건 위반, 연결 끊김 등)도 롤백 대상이다.
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise


def init_db(engine: Engine | None = None) -> None:
    """모든 모델 테이블을 생성한다. 이미 있는 테이블은 건너뛴다."""
    # 매퍼 등록을 위해 모델 모듈을 불러온다
    import app.models.itinerary  # noqa: F401
    import app.models.trip  # noqa: F401
    import app.models.user  # noqa: F401

    target = engine or get_engine()
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ensured on %s", target.url.render_as_string(hide_password=True))
