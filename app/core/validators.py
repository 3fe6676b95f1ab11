"""요청 값 검증에 쓰는 작은 헬퍼 모음."""

from __future__ import annotations


def is_integer(value: object) -> bool:
    """JSON 정수인지 확인합니다. `True`/`False`는 정수로 보지 않습니다."""
    return isinstance(value, int) and not isinstance(value, bool)


def clean_text(value: object) -> str | None:
    """앞뒤 공백을 제거한 문자열을 반환합니다. 문자열이 아니거나 비어 있으면 None."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None
