from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.coin import CoinTransaction, CoinTransactionKind


class CoinTransactionDocument(BaseDocument):
    """MongoDB coin_transactions 컬렉션 도큐먼트 모델."""

    user_id: str
    kind: CoinTransactionKind
    amount: int
    balance_after: int
    reason: str
    metadata: dict | None = None

    @classmethod
    def from_domain(cls, tx: CoinTransaction) -> "CoinTransactionDocument":
        data = build_document_data_from_domain(tx)
        return cls.model_validate(data)

    def to_domain(self) -> CoinTransaction:
        return CoinTransaction(
            id=from_object_id(self.id),
            user_id=self.user_id,
            kind=self.kind,
            amount=self.amount,
            balance_after=self.balance_after,
            reason=self.reason,
            metadata=self.metadata,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
