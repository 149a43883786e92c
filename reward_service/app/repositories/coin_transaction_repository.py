from __future__ import annotations

from pymongo.database import Database

from ..models.coin import CoinTransaction
from .documents.coin_transaction_document import CoinTransactionDocument
from .interfaces import CoinTransactionRepositoryInterface


class CoinTransactionRepository(CoinTransactionRepositoryInterface):
    """coin_transactions 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["coin_transactions"]

    def create(self, tx: CoinTransaction) -> CoinTransaction:
        """트랜잭션 로그 생성."""
        payload = CoinTransactionDocument.from_domain(tx).to_mongo_record()
        result = self._col.insert_one(payload)
        return tx.model_copy(update={"id": str(result.inserted_id)})

    def list_by_user(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[CoinTransaction], int]:
        """사용자의 코인 트랜잭션 이력 조회 (최신순)."""
        skip = (page - 1) * page_size

        total = self._col.count_documents({"user_id": user_id})
        cursor = self._col.find(
            {"user_id": user_id},
            sort=[("created_at", -1), ("_id", -1)],
            skip=skip,
            limit=page_size,
        )

        items = [CoinTransactionDocument.model_validate(raw).to_domain() for raw in cursor]
        return items, total
