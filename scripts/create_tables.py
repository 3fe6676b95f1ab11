import os
import sys

# 경로 설정 - 스크립트 위치 기준으로 프로젝트 루트 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.logging_config import configure_logging
from app.database import get_engine, init_db


def main() -> None:
    """`DATABASE_URL`이 가리키는 데이터베이스에 모든 테이블을 생성합니다.

    이미 존재하는 테이블은 건너뛰므로 여러 번 실행해도 안전합니다.
    """
    configure_logging()
    try:
        init_db(get_engine())
        print("✅ 테이블 생성 완료")
    except Exception as e:
        print(f"⚠️ 테이블 생성 실패: {e}")
        raise


if __name__ == "__main__":
    main()
