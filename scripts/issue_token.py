"""로컬 개발용 사용자 액세스 토큰 발급 스크립트.

Usage:
    python scripts/issue_token.py <subject> [email]
"""

import os
import sys

# 경로 설정 - 스크립트 위치 기준으로 프로젝트 루트 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.services.jwt_service import JwtService


def main() -> None:
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    subject = sys.argv[1]
    email = sys.argv[2] if len(sys.argv) > 2 else ""
    print(JwtService().sign_user_token(subject, email))


if __name__ == "__main__":
    main()
