from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer


def ensure_utc(value: datetime) -> datetime:
    """datetime 을 UTC 로 정규화한다. tzinfo 가 없으면 UTC 로 간주한다."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_of_utc_day(now: datetime) -> datetime:
    """now 가 속한 UTC 달력 일자의 자정(00:00:00 UTC)을 반환한다.

    일일 한도 판정과 일일 합계 계산은 모두 이 함수 하나만 사용한다.
    """
    return ensure_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_next_utc_day(now: datetime) -> datetime:
    return start_of_utc_day(now) + timedelta(days=1)


def utc_day_key(now: datetime) -> str:
    """UTC 일자 키 (YYYY-MM-DD)."""
    return start_of_utc_day(now).date().isoformat()


def serialize_datetime_to_utc_iso8601(value: datetime) -> str:
    """모든 datetime을 UTC 기준 ISO8601(+타임존) 문자열로 직렬화한다."""
    return ensure_utc(value).isoformat()


UtcDateTime = Annotated[
    datetime,
    PlainSerializer(
        serialize_datetime_to_utc_iso8601,
        return_type=str,
        when_used="json",
    ),
]
