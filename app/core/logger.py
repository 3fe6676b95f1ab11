"""모듈 단위 로거 헬퍼.

핸들러와 포맷은 `logging_config.configure_logging`이 `app` 로거에 한 번만 붙입니다.
여기서는 이름 규칙만 맞춥니다.
"""

import logging

_APP_LOGGER_PREFIX = "app"


def get_logger(name: str) -> logging.Logger:
    """`app` 계층 아래의 로거를 반환합니다.

    Args:
        name: 로거 이름 (일반적으로 __name__ 사용).

    Returns:
        `app.*` 이름을 갖는 로거. 스크립트처럼 패키지 밖에서 호출하면 `app.<name>`으로 붙입니다.
    """
    if name == _APP_LOGGER_PREFIX or name.startswith(f"{_APP_LOGGER_PREFIX}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_APP_LOGGER_PREFIX}.{name}")
