"""애플리케이션 설정 (환경 변수)"""

import logging
import os
from typing import Optional


def get_rules_file() -> Optional[str]:
    """규칙 파일 경로 (미설정 시 패키지 기본 규칙 사용)"""
    return os.getenv("CROSSBORDER_RULES_FILE") or None


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def get_cache_ttl_seconds() -> int:
    """검증 결과 캐시 유효 시간 (초 단위, 기본 5분)"""
    return _positive_int("CROSSBORDER_CACHE_TTL_SECONDS", 300)


def get_cache_max_size() -> int:
    return _positive_int("CROSSBORDER_CACHE_MAX_SIZE", 1000)


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """로깅 설정

    API 프로세스 시작 시 한 번 호출합니다.

    Args:
        level: 로그 레벨 (기본값: CROSSBORDER_LOG_LEVEL, 없으면 INFO)
    """
    logging.basicConfig(
        level=(level or os.getenv("CROSSBORDER_LOG_LEVEL") or "INFO").upper(),
        format=LOG_FORMAT,
    )
