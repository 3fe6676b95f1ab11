"""ISO-8601 시각 파싱 유틸."""

from __future__ import annotations

from datetime import datetime, timezone


def parse_instant(value: object) -> datetime:
    """ISO-8601 문자열을 UTC aware datetime으로 변환합니다.

    `2024-07-01`처럼 날짜만 오거나 오프셋이 없으면 UTC로 간주합니다.

    Raises:
        ValueError: 문자열이 아니거나 ISO-8601로 해석할 수 없을 때.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not an ISO-8601 instant: {value!r}")

    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> int:
    """두 시각의 UTC 달력 날짜 차이(일). 시각 성분은 일수에 영향을 주지 않습니다."""
    return (end.astimezone(timezone.utc).date() - start.astimezone(timezone.utc).date()).days
