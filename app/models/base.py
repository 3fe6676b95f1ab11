# app/models/base.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """현재 시각을 UTC aware datetime으로 반환합니다."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """애플리케이션에서 생성하는 UUID4 문자열 식별자."""
    return str(uuid.uuid4())


class UtcDateTime(TypeDecorator):
    """항상 UTC aware datetime으로 저장/조회되는 컬럼 타입.

    PostgreSQL의 `timestamptz`는 aware 값을 그대로 돌려주지만 SQLite는 tzinfo를
    버린 문자열로 저장합니다. 쓰기 전에 UTC로 변환하고 읽을 때 UTC를 다시 붙여
    두 방언에서 비교/직렬화 결과를 동일하게 맞춥니다. naive 입력은 UTC로 간주합니다.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """모든 SQLAlchemy 모델의 기반이 되는 선언적 기본 클래스.

    이 클래스는 SQLAlchemy 2.0의 `DeclarativeBase`를 상속받아,
    프로젝트 내의 모든 데이터베이스 모델들이 공통적으로 상속받는
    중앙 집중적 기본 클래스로 사용됩니다. 이를 통해 모델들이 동일한
    메타데이터 레지스트리를 공유하게 됩니다.
    """

    pass
