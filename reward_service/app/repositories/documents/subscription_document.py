from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.subscription import Subscription


class SubscriptionDocument(BaseDocument):
    """MongoDB subscriptions 컬렉션 도큐먼트 모델."""

    user_id: str
    channel_id: str

    @classmethod
    def from_domain(cls, subscription: Subscription) -> "SubscriptionDocument":
        data = build_document_data_from_domain(subscription)
        data["updated_at"] = subscription.created_at
        return cls.model_validate(data)

    def to_domain(self) -> Subscription:
        return Subscription(
            id=from_object_id(self.id),
            user_id=self.user_id,
            channel_id=self.channel_id,
            created_at=self.created_at,
        )
