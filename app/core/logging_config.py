"""Uvicorn 기본 포맷에 맞춘 로깅 설정."""

from __future__ import annotations

import copy
import logging.config
import os
from typing import Any

from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

_VALID_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _resolve_log_level(level: str | None = None) -> str:
    """인자 또는 `LOG_LEVEL` 환경변수에서 로그 레벨을 결정합니다. 알 수 없는 값은 INFO로 대체합니다."""
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return resolved if resolved in _VALID_LEVELS else "INFO"


def build_logging_config(level: str | None = None) -> dict[str, Any]:
    """Uvicorn 기본 포맷터를 재사용해 애플리케이션 로거(`app`)까지 포함한 설정을 생성합니다."""
    log_level = _resolve_log_level(level)
    config = copy.deepcopy(UVICORN_LOGGING_CONFIG)

    config["root"] = {"handlers": ["default"], "level": log_level}
    config["loggers"]["app"] = {"handlers": ["default"], "level": log_level, "propagate": False}

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        config["loggers"][name]["level"] = log_level

    # SQL 에코는 DEBUG에서만 노출
    config["loggers"]["sqlalchemy.engine"] = {"level": "INFO" if log_level == "DEBUG" else "WARNING"}

    return config


def configure_logging(level: str | None = None) -> None:
    """dictConfig로 로깅을 구성합니다."""
    logging.config.dictConfig(build_logging_config(level))
