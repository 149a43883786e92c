"""보상 원장 도메인 모델.

보상 레코드는 추가만 가능한 원장이며, 일일 합계와 영상별 중복 판정은
UTC 자정 이후의 레코드만 걸러서 계산한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class RewardType(StrEnum):
    VIDEO = "video"
    GIFT = "gift"
    SUBSCRIBE = "subscribe"


# gift 처럼 일자가 아닌 마지막 수령 시각 기준으로 판정하는 윈도우의 고정 키
ROLLING_WINDOW_KEY = "rolling"


@dataclass(frozen=True, slots=True)
class RewardPolicy:
    """보상 종류 하나의 지급 규칙."""

    reward_type: RewardType
    amount: int
    daily_limit: int | None = None  # None 이면 일일 한도 없음
    cooldown_hours: int | None = None  # gift 전용: 마지막 수령 후 재수령까지 대기 시간


class Reward(BaseModel):
    """보상 원장 레코드. 생성 후 수정/삭제되지 않는다."""

    id: str | None = None
    user_id: str
    type: RewardType
    entity_id: str | None = None  # video id 또는 channel id
    amount: int = Field(gt=0)
    claimed_at: datetime


class RewardWindow(BaseModel):
    """(user, type, window_key) 단위로 수령 여부/누적량을 원자적으로 관리하는 카운터.

    - video / subscribe: window_key 는 UTC 일자(YYYY-MM-DD), earned 와 entity_ids 를 사용
    - gift: window_key 는 ROLLING_WINDOW_KEY, last_claimed_at 을 사용
    """

    user_id: str
    type: RewardType
    window_key: str
    earned: int = 0
    entity_ids: list[str] = Field(default_factory=list)
    last_claimed_at: datetime | None = None
    expires_at: datetime


class ClaimResult(BaseModel):
    """보상 수령 결과."""

    type: RewardType
    amount: int
    total_coins: int
    daily_earned: int
    next_gift_at: datetime | None = None


class WatchData(BaseModel):
    """영상 시청 화면에 필요한 현재 상태."""

    user_id: str
    name: str
    coins: int
    is_admin: bool
    daily_coins_earned: int
    daily_subscribe_coins_earned: int
    next_gift_at: datetime | None
    reward_claimed_for_video: bool
    is_subscribed_to_channel: bool
