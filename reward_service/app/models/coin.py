"""코인 계정 트랜잭션 도메인 모델.

잔액은 users.coins 단일 정수로 관리하고, 모든 변경 내역은 트랜잭션 로그로 남긴다.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class CoinTransactionKind(StrEnum):
    REWARD = "reward"
    SUBMISSION_FEE = "submission_fee"
    REFUND = "refund"
    ADMIN_ADJUST = "admin_adjust"


class CoinTransaction(BaseModel):
    """코인 트랜잭션 로그 도메인 모델."""

    id: str | None = None
    user_id: str
    kind: CoinTransactionKind
    amount: int  # 부호 있는 변화량 (지급 +, 차감 -)
    balance_after: int
    reason: str
    metadata: dict | None = None
    created_at: datetime
    updated_at: datetime
