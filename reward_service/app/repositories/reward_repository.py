"""보상 원장 레포지토리 구현체.

원장은 추가 전용이며, 일일 합계는 UTC 자정 이후 레코드를 집계해 매 요청마다 다시 계산한다.
"""

from __future__ import annotations

from datetime import datetime

from pymongo.database import Database

from .documents.reward_document import RewardDocument
from .interfaces import RewardRepositoryInterface
from ..models.reward import Reward, RewardType


class RewardRepository(RewardRepositoryInterface):
    """rewards 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["rewards"]

    def append(self, reward: Reward) -> Reward:
        doc = RewardDocument.from_domain(reward)
        payload = doc.to_mongo_record()
        result = self._col.insert_one(payload)
        return reward.model_copy(update={"id": str(result.inserted_id)})

    def sum_since(self, user_id: str, reward_type: RewardType, since: datetime) -> int:
        pipeline = [
            {
                "$match": {
                    "user_id": user_id,
                    "type": str(reward_type),
                    "claimed_at": {"$gte": since},
                }
            },
            {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
        ]
        for doc in self._col.aggregate(pipeline):
            return int(doc.get("total") or 0)
        # 오늘 기록이 없으면 0
        return 0

    def exists_since(
        self,
        user_id: str,
        reward_type: RewardType,
        entity_id: str,
        since: datetime,
    ) -> bool:
        doc = self._col.find_one(
            {
                "user_id": user_id,
                "type": str(reward_type),
                "entity_id": entity_id,
                "claimed_at": {"$gte": since},
            },
            projection={"_id": True},
        )
        return doc is not None
