from __future__ import annotations

from datetime import datetime

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from common.models.user import User

from ..exceptions import Conflict, NotFound
from .documents.user_document import UserDocument
from .interfaces import UserRepositoryInterface


class UserRepository(UserRepositoryInterface):
    """users 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["users"]

    @staticmethod
    def _from_document(doc: dict) -> User:
        document = UserDocument.model_validate(doc)
        return document.to_domain()

    def find_by_user_id(self, user_id: str) -> User | None:
        doc = self._col.find_one({"user_id": user_id})
        if not doc:
            return None
        return self._from_document(doc)

    def find_by_name(self, name: str) -> User | None:
        doc = self._col.find_one({"name": name})
        if not doc:
            return None
        return self._from_document(doc)

    def insert(self, user: User) -> User:
        document = UserDocument.from_domain(user)
        payload = document.to_mongo_record()
        try:
            self._col.insert_one(payload)
        except DuplicateKeyError as exc:
            raise Conflict("This name is already in use.") from exc
        return self._from_document(payload)

    def update_name(self, user_id: str, name: str, now: datetime) -> User:
        try:
            result = self._col.find_one_and_update(
                {"user_id": user_id},
                {"$set": {"name": name, "updated_at": now}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise Conflict("This name is already in use.") from exc
        if not result:
            raise NotFound("User not found")
        return self._from_document(result)

    def update_password(self, user_id: str, password_hash: str, now: datetime) -> None:
        result = self._col.update_one(
            {"user_id": user_id},
            {"$set": {"password_hash": password_hash, "updated_at": now}},
        )
        if result.matched_count == 0:
            raise NotFound("User not found")

    def set_admin(self, user_id: str, is_admin: bool, now: datetime) -> User:
        result = self._col.find_one_and_update(
            {"user_id": user_id},
            {"$set": {"is_admin": is_admin, "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            raise NotFound("User not found")
        return self._from_document(result)

    def increment_coins(self, user_id: str, delta: int, now: datetime) -> int | None:
        """단일 조건부 $inc 로 잔액을 변경한다.

        차감(delta < 0)은 coins >= -delta 조건이 필터에 포함되어 잔액이 음수가 되지 않는다.
        """

        query: dict[str, object] = {"user_id": user_id}
        if delta < 0:
            query["coins"] = {"$gte": -delta}

        result = self._col.find_one_and_update(
            query,
            {"$inc": {"coins": delta}, "$set": {"updated_at": now}},
            projection={"coins": True},
            return_document=ReturnDocument.AFTER,
        )
        if not result:
            return None
        return int(result["coins"])

    def list_all(self) -> list[User]:
        cursor = self._col.find({}, sort=[("created_at", 1), ("_id", 1)])
        return [self._from_document(doc) for doc in cursor]
