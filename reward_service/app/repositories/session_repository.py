from __future__ import annotations

from pymongo.database import Database

from ..models.session import Session
from .documents.session_document import SessionDocument
from .interfaces import SessionRepositoryInterface


class SessionRepository(SessionRepositoryInterface):
    """sessions 컬렉션에 대한 MongoDB 접근 레이어.

    만료 판정은 서비스에서 한 번 더 한다. TTL 인덱스 삭제는 지연될 수 있다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["sessions"]

    def create(self, session: Session) -> Session:
        payload = SessionDocument.from_domain(session).to_mongo_record()
        self._col.insert_one(payload)
        return session

    def find_by_session_id(self, session_id: str) -> Session | None:
        raw = self._col.find_one({"session_id": session_id})
        if not raw:
            return None
        return SessionDocument.model_validate(raw).to_domain()

    def delete_by_session_id(self, session_id: str) -> bool:
        result = self._col.delete_one({"session_id": session_id})
        return result.deleted_count > 0

    def delete_all_by_user(self, user_id: str) -> int:
        result = self._col.delete_many({"user_id": user_id})
        return result.deleted_count
