# taskboard/utils/test_datetime_utils.py
"""
시간 관리 유틸리티 기능 테스트

사용법: python -m pytest taskboard/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, timedelta, timezone
from taskboard.utils.datetime_utils import DateTimeUtils, EPOCH


def test_now_is_utc_aware():
    current = DateTimeUtils.now()
    assert current.tzinfo == timezone.utc


def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함


def test_parse_iso_datetime_converts_offset():
    dt = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00")
    assert dt == datetime(2024, 1, 15, 1, 30, tzinfo=timezone.utc)


def test_to_iso_string_uses_z_suffix():
    dt = datetime(2024, 1, 15, 10, 30, tzinfo=timezone(timedelta(hours=9)))
    assert DateTimeUtils.to_iso_string(dt) == "2024-01-15T01:30:00Z"
    assert DateTimeUtils.to_iso_string(datetime(2024, 1, 15)) == "2024-01-15T00:00:00Z"


def test_for_firestore_normalizes_nested_values():
    """Firestore 변환 테스트"""
    data = {
        'created_at': datetime(2024, 1, 15, 10, 30),
        'nested': {'updated_at': datetime(2024, 1, 16, 10, 30)},
        'items': [datetime(2024, 1, 1)],
        'title': 'Need a ride',
    }

    converted = DateTimeUtils.for_firestore(data)

    assert converted['created_at'].tzinfo == timezone.utc
    assert converted['nested']['updated_at'].tzinfo == timezone.utc
    assert converted['items'][0].tzinfo == timezone.utc
    assert converted['title'] == 'Need a ride'


def test_from_firestore_handles_naive_and_strings():
    assert DateTimeUtils.from_firestore(None) is None
    naive = DateTimeUtils.from_firestore(datetime(2024, 1, 15, 10, 30))
    assert naive == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    parsed = DateTimeUtils.from_firestore("2024-01-15T10:30:00Z")
    assert parsed == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_sort_key_treats_missing_as_oldest():
    assert DateTimeUtils.sort_key(None) == EPOCH
    later = datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert DateTimeUtils.sort_key(later) > DateTimeUtils.sort_key(None)


def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")
