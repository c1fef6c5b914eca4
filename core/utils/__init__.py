"""
유틸리티 패키지

타임존 처리 등 공통 유틸리티
"""

from core.utils.timezone import (
    BRT,
    current_month_key,
    ensure_utc,
    format_brt,
    month_key,
    now_utc,
    now_utc_iso,
    parse_iso,
    to_brt,
)

__all__ = [
    "BRT",
    "current_month_key",
    "ensure_utc",
    "format_brt",
    "month_key",
    "now_utc",
    "now_utc_iso",
    "parse_iso",
    "to_brt",
]
