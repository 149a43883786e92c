from __future__ import annotations

from datetime import datetime

from common.types.datetime import start_of_utc_day

from ..models.reward import RewardType
from ..repositories.interfaces import RewardRepositoryInterface


class DailyWindow:
    """UTC 일자 기준 보상 원장 집계.

    캐시 없이 매 요청마다 원장에서 다시 계산하며, 기록이 없으면 0 을 반환한다.
    """

    def __init__(self, reward_repo: RewardRepositoryInterface) -> None:
        self._reward_repo = reward_repo

    def earned_today(self, user_id: str, reward_type: RewardType, now: datetime) -> int:
        return self._reward_repo.sum_since(user_id, reward_type, start_of_utc_day(now))

    def claimed_today(
        self,
        user_id: str,
        reward_type: RewardType,
        entity_id: str,
        now: datetime,
    ) -> bool:
        return self._reward_repo.exists_since(
            user_id, reward_type, entity_id, start_of_utc_day(now)
        )
