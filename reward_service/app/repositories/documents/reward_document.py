"""보상 원장 / 보상 윈도우 MongoDB 도큐먼트."""

from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.reward import Reward, RewardType, RewardWindow


class RewardDocument(BaseDocument):
    """MongoDB rewards 컬렉션 도큐먼트 모델. 추가 전용이므로 updated_at == created_at."""

    user_id: str
    type: RewardType
    entity_id: str | None = None
    amount: int
    claimed_at: MongoDateTime

    @classmethod
    def from_domain(cls, reward: Reward) -> "RewardDocument":
        data = build_document_data_from_domain(reward)
        data["created_at"] = reward.claimed_at
        data["updated_at"] = reward.claimed_at
        return cls.model_validate(data)

    def to_domain(self) -> Reward:
        return Reward(
            id=from_object_id(self.id),
            user_id=self.user_id,
            type=self.type,
            entity_id=self.entity_id,
            amount=self.amount,
            claimed_at=self.claimed_at,
        )


class RewardWindowDocument(BaseDocument):
    """MongoDB reward_windows 컬렉션 도큐먼트 모델."""

    user_id: str
    type: RewardType
    window_key: str
    earned: int = 0
    entity_ids: list[str] = []
    last_claimed_at: MongoDateTime | None = None
    expires_at: MongoDateTime

    def to_domain(self) -> RewardWindow:
        return RewardWindow(
            user_id=self.user_id,
            type=self.type,
            window_key=self.window_key,
            earned=self.earned,
            entity_ids=list(self.entity_ids),
            last_claimed_at=self.last_claimed_at,
            expires_at=self.expires_at,
        )
