from __future__ import annotations

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from ..models.subscription import Subscription
from .documents.subscription_document import SubscriptionDocument
from .interfaces import SubscriptionRepositoryInterface


class SubscriptionRepository(SubscriptionRepositoryInterface):
    """subscriptions 컬렉션에 대한 MongoDB 접근 레이어.

    (user_id, channel_id) 유니크 인덱스로 채널당 한 번만 기록된다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["subscriptions"]

    def exists(self, user_id: str, channel_id: str) -> bool:
        doc = self._col.find_one(
            {"user_id": user_id, "channel_id": channel_id},
            projection={"_id": True},
        )
        return doc is not None

    def try_insert(self, subscription: Subscription) -> bool:
        payload = SubscriptionDocument.from_domain(subscription).to_mongo_record()
        try:
            self._col.insert_one(payload)
        except DuplicateKeyError:
            return False
        return True

    def delete(self, user_id: str, channel_id: str) -> bool:
        result = self._col.delete_one({"user_id": user_id, "channel_id": channel_id})
        return result.deleted_count > 0
