"""공용 테스트 픽스처.

- 테스트마다 새 인메모리 SQLite 엔진 (`StaticPool`로 모든 세션이 한 연결 공유)
- 서비스 계층 테스트용 세션, 사용자/여행 생성 헬퍼
- `get_db`를 테스트 엔진으로 바꾼 `TestClient`
"""

from __future__ import annotations

import importlib
import os
from datetime import datetime

os.environ.setdefault("JWT_ACCESS_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("DOCS_MODE", "disabled")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.config import get_settings  # noqa: E402
from app.database import get_db, get_engine, init_db  # noqa: E402
from app.models.trip import Trip, TripMember, TripRole  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.jwt_service import JwtService  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    get_engine.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine.cache_clear()


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """`auth_subject`로 사용자를 저장하고 반환합니다."""

    def _make(subject: str, email: str | None = None) -> User:
        user = User(auth_subject=subject, email=email if email is not None else f"{subject}@example.com")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def seed_trip(db):
    """서비스 검증을 거치지 않고 여행과 멤버 행을 바로 저장합니다 (조회 테스트용)."""

    def _seed(
        owner: User,
        name: str,
        start: datetime,
        end: datetime,
        *,
        created_at: datetime | None = None,
        editors: tuple[User, ...] = (),
    ) -> Trip:
        trip = Trip(name=name, start_date=start, end_date=end, currency="USD")
        if created_at is not None:
            trip.created_at = created_at
        trip.members = [TripMember(user_id=owner.id, role=TripRole.OWNER)] + [
            TripMember(user_id=editor.id, role=TripRole.EDITOR) for editor in editors
        ]
        db.add(trip)
        db.commit()
        return trip

    return _seed


@pytest.fixture
def client(session_factory):
    import app.main as main_module

    main_module = importlib.reload(main_module)

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main_module.app.dependency_overrides[get_db] = _override_get_db
    with TestClient(main_module.app) as test_client:
        yield test_client
    main_module.app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """subject/email로 서명한 `Authorization` 헤더를 만듭니다."""

    def _headers(subject: str, email: str | None = None) -> dict[str, str]:
        token = JwtService().sign_user_token(subject, email if email is not None else f"{subject}@example.com")
        return {"Authorization": f"Bearer {token}"}

    return _headers
