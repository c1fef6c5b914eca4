"""
타임존 유틸리티

내부 저장: UTC (ISO-8601) | 외부 표시 및 월별 집계: BRT(America/Sao_Paulo, UTC-3) 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timedelta, timezone

# BRT 타임존 (UTC-3, 2019년 이후 서머타임 없음)
BRT = timezone(timedelta(hours=-3))


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.
    """
    return datetime.now(timezone.utc)


def now_utc_iso() -> str:
    """현재 UTC 시간 ISO 문자열"""
    return now_utc().isoformat()


def ensure_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 정규화 (naive면 UTC로 간주)"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """ISO-8601 문자열을 UTC datetime으로 변환

    Example:
        >>> parse_iso("2026-03-01T12:00:00-03:00").hour
        15
    """
    return ensure_utc(datetime.fromisoformat(value))


def to_brt(dt: datetime) -> datetime:
    """UTC datetime을 BRT로 변환

    Example:
        >>> utc_dt = datetime(2026, 3, 1, 2, 0, 0, tzinfo=timezone.utc)
        >>> to_brt(utc_dt).day
        28  # 전날 23:00
    """
    return ensure_utc(dt).astimezone(BRT)


def format_brt(dt: datetime, fmt: str = "%d/%m/%Y") -> str:
    """UTC datetime을 BRT 문자열로 포맷 (기본: pt-BR 날짜 형식)"""
    return to_brt(dt).strftime(fmt)


def month_key(value: str | datetime) -> str:
    """BRT 기준 'YYYY-MM' 월 키 반환

    월별 합계("Este mês")는 사용자 현지 시간 기준으로 묶는다.
    """
    dt = parse_iso(value) if isinstance(value, str) else value
    return to_brt(dt).strftime("%Y-%m")


def current_month_key() -> str:
    """현재 BRT 월 키"""
    return month_key(now_utc())
