# blog_api/utils/datetime_utils.py
"""
블로그 API 전체에서 일관된 시간 처리를 위한 유틸리티 모듈

- 모든 시간은 UTC timezone-aware datetime으로 다룹니다.
- Firestore 저장/조회 시의 변환 규칙을 한 곳에 모읍니다.
- 다른 도구로 가져온 문서에는 '*_at' 필드가 ISO 문자열로 들어 있을 수 있어 조회 시 datetime으로 되돌립니다.
"""

import logging
from datetime import datetime, date, time, timezone
from typing import Any

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

TIMESTAMP_SUFFIX = '_at'


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def to_utc(dt: datetime) -> datetime:
        """naive datetime은 UTC로 간주하고, aware datetime은 UTC로 변환합니다."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 8601 문자열을 UTC datetime으로 파싱합니다.
        예) 2024-01-15T10:30:00Z, 2024-01-15T10:30:00+09:00, 2024-01-15T10:30:00
        """
        if not iso_string:
            raise ValueError("빈 문자열은 파싱할 수 없습니다")
        try:
            parsed = dateutil_parser.isoparse(iso_string)
        except (ValueError, OverflowError) as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}") from e
        return DateTimeUtils.to_utc(parsed)

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """'Z' 접미사가 붙은 UTC ISO 문자열"""
        return DateTimeUtils.to_utc(dt).isoformat().replace('+00:00', 'Z')

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore에 쓰기 전에 date/datetime을 UTC datetime으로 맞춥니다. (dict/list 재귀)
        date는 그날 00:00 UTC가 됩니다.
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.to_utc(obj)
        if isinstance(obj, date):
            return datetime.combine(obj, time.min, tzinfo=timezone.utc)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any, key: str = '') -> Any:
        """
        Firestore에서 읽은 값을 모델에 넣을 수 있게 정리합니다. (dict/list 재귀)
        timestamp는 UTC datetime으로, '*_at' 키의 ISO 문자열은 datetime으로 바꿉니다.
        파싱할 수 없는 문자열은 경고만 남기고 그대로 둡니다.
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.to_utc(obj)
        if isinstance(obj, str) and key.endswith(TIMESTAMP_SUFFIX):
            try:
                return DateTimeUtils.parse_iso_datetime(obj)
            except ValueError:
                logger.warning(f"'{key}' 필드를 datetime으로 변환하지 못했습니다: {obj!r}")
                return obj
        if isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v, k) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item, key) for item in obj]
        return obj
