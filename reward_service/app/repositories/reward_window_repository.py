from __future__ import annotations

from datetime import datetime, timedelta

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from .documents.reward_document import RewardWindowDocument
from .interfaces import RewardWindowRepositoryInterface
from ..models.reward import ROLLING_WINDOW_KEY, RewardType, RewardWindow


# 동시 최초 upsert 끼리 충돌한 경우 한 번 더 시도한다.
_UPSERT_ATTEMPTS = 2


class RewardWindowRepository(RewardWindowRepositoryInterface):
    """reward_windows 컬렉션에 대한 MongoDB 접근 레이어.

    (user_id, type, window_key) 유니크 인덱스를 전제로 한다 (common.mongo.client.ensure_indexes).
    조건을 만족하지 않는 상태에서 upsert 를 시도하면 같은 키로 insert 하려다
    DuplicateKeyError 가 발생하므로, 이를 "이미 수령/한도 도달" 로 해석한다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["reward_windows"]

    def _conditional_upsert(self, query: dict, update: dict) -> RewardWindow | None:
        for _ in range(_UPSERT_ATTEMPTS):
            try:
                doc = self._col.find_one_and_update(
                    query,
                    update,
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
            except DuplicateKeyError:
                # a) 윈도우가 이미 있고 조건(미수령/한도/쿨다운)을 만족하지 않거나
                # b) 다른 요청이 같은 윈도우를 먼저 만들었다.
                # b) 라면 재시도 시 기존 도큐먼트에 대해 조건을 다시 평가한다.
                continue
            if doc is None:
                return None
            return RewardWindowDocument.model_validate(doc).to_domain()
        return None

    def try_reserve(
        self,
        user_id: str,
        reward_type: RewardType,
        window_key: str,
        entity_id: str,
        amount: int,
        limit: int | None,
        expires_at: datetime,
        now: datetime,
    ) -> RewardWindow | None:
        """entity 중복과 일일 한도를 한 번의 조건부 upsert 로 판정하고 누적량을 올린다."""

        query: dict[str, object] = {
            "user_id": user_id,
            "type": str(reward_type),
            "window_key": window_key,
            "entity_ids": {"$ne": entity_id},
        }
        if limit is not None:
            if amount > limit:
                return None
            query["earned"] = {"$lte": limit - amount}

        update = {
            "$inc": {"earned": amount},
            "$addToSet": {"entity_ids": entity_id},
            "$set": {"updated_at": now, "expires_at": expires_at},
            "$setOnInsert": {"created_at": now},
        }
        return self._conditional_upsert(query, update)

    def release(
        self,
        user_id: str,
        reward_type: RewardType,
        window_key: str,
        entity_id: str,
        amount: int,
        now: datetime,
    ) -> None:
        self._col.update_one(
            {
                "user_id": user_id,
                "type": str(reward_type),
                "window_key": window_key,
                "entity_ids": entity_id,
            },
            {
                "$inc": {"earned": -amount},
                "$pull": {"entity_ids": entity_id},
                "$set": {"updated_at": now},
            },
        )

    def try_use_cooldown(
        self,
        user_id: str,
        reward_type: RewardType,
        amount: int,
        cooldown_hours: int,
        now: datetime,
    ) -> RewardWindow | None:
        """마지막 수령 시각이 now - cooldown 이하일 때만 수령 시각을 갱신한다."""

        cooldown = timedelta(hours=cooldown_hours)
        query = {
            "user_id": user_id,
            "type": str(reward_type),
            "window_key": ROLLING_WINDOW_KEY,
            "last_claimed_at": {"$lte": now - cooldown},
        }
        update = {
            "$set": {
                "last_claimed_at": now,
                "updated_at": now,
                # 쿨다운이 끝나면 도큐먼트가 없어도 수령 가능 상태와 같다.
                "expires_at": now + cooldown,
            },
            "$inc": {"earned": amount},
            "$setOnInsert": {"created_at": now, "entity_ids": []},
        }
        return self._conditional_upsert(query, update)

    def release_cooldown(
        self,
        user_id: str,
        reward_type: RewardType,
        amount: int,
        cooldown_hours: int,
        claimed_at: datetime,
    ) -> None:
        """claimed_at 에 잡힌 수령을 취소한다. 이후 다른 수령이 있었다면 건드리지 않는다."""

        self._col.update_one(
            {
                "user_id": user_id,
                "type": str(reward_type),
                "window_key": ROLLING_WINDOW_KEY,
                "last_claimed_at": claimed_at,
            },
            {
                # 쿨다운이 이미 끝난 시각으로 돌려 두면 즉시 수령 가능 상태가 된다.
                "$set": {
                    "last_claimed_at": claimed_at - timedelta(hours=cooldown_hours),
                    "updated_at": claimed_at,
                },
                "$inc": {"earned": -amount},
            },
        )

    def find(
        self, user_id: str, reward_type: RewardType, window_key: str
    ) -> RewardWindow | None:
        doc = self._col.find_one(
            {"user_id": user_id, "type": str(reward_type), "window_key": window_key}
        )
        if not doc:
            return None
        return RewardWindowDocument.model_validate(doc).to_domain()
