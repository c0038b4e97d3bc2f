# taskboard/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간 처리를 위한 중앙화된 유틸리티 모듈

1. 모든 타임스탬프는 UTC timezone-aware datetime으로 통일
2. Firestore 저장/조회 시 변환 규칙을 한 곳에서 관리
3. ISO 포맷 파싱/생성 통일
"""

import logging
from datetime import datetime, timezone
from typing import Any
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

# 정렬 시 created_at이 없는 문서를 가장 오래된 것으로 취급하기 위한 기준값
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 'Z' 접미사가 붙은 ISO 포맷 문자열로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 datetime 값을 UTC timezone-aware로 맞춥니다.
        dict/list 내부는 재귀적으로 변환합니다.
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 값을 UTC datetime으로 변환합니다.
        - DatetimeWithNanoseconds(datetime 하위 클래스) 및 naive datetime 처리
        - ISO 문자열로 저장된 과거 데이터도 허용
        """
        if obj is None:
            return None
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        if isinstance(obj, str):
            return DateTimeUtils.parse_iso_datetime(obj)
        if hasattr(obj, 'timestamp'):
            return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
        logger.warning(f"알 수 없는 timestamp 형식: {obj!r} ({type(obj)})")
        return obj

    @staticmethod
    def sort_key(dt: Any) -> datetime:
        """None이 섞인 created_at 목록을 정렬할 때 사용하는 키"""
        converted = DateTimeUtils.from_firestore(dt)
        return converted if isinstance(converted, datetime) else EPOCH

