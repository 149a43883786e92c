"""코인 계정 서비스.

유저당 단일 정수 잔액을 조건부 $inc 로만 변경하고, 모든 변경을 트랜잭션 로그로 남긴다.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..exceptions import InsufficientFunds, NotFound, ValidationError
from ..models.coin import CoinTransaction, CoinTransactionKind
from ..repositories.coin_transaction_repository import CoinTransactionRepository
from ..repositories.interfaces import (
    CoinTransactionRepositoryInterface,
    UserRepositoryInterface,
)
from ..repositories.user_repository import UserRepository


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class CoinService:
    """코인 잔액 관련 비즈니스 로직."""

    def __init__(
        self,
        user_repo: UserRepositoryInterface,
        transaction_repo: CoinTransactionRepositoryInterface,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._user_repo = user_repo
        self._transaction_repo = transaction_repo
        self._clock = clock

    def balance(self, user_id: str) -> int:
        user = self._user_repo.find_by_user_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user.coins

    def credit(
        self,
        user_id: str,
        amount: int,
        kind: CoinTransactionKind,
        reason: str,
        metadata: dict | None = None,
        now: datetime | None = None,
    ) -> int:
        """코인 지급. 지급 후 잔액 반환."""
        if amount <= 0:
            raise ValidationError("amount must be positive")
        return self._apply(user_id, amount, kind, reason, metadata, now)

    def debit(
        self,
        user_id: str,
        amount: int,
        kind: CoinTransactionKind,
        reason: str,
        metadata: dict | None = None,
        now: datetime | None = None,
    ) -> int:
        """코인 차감. 차감 후 잔액 반환, 잔액 부족 시 InsufficientFunds."""
        if amount <= 0:
            raise ValidationError("amount must be positive")
        return self._apply(user_id, -amount, kind, reason, metadata, now)

    def adjust(self, user_id: str, delta: int, reason: str, actor_user_id: str) -> int:
        """관리자 수동 조정. 음수 조정도 잔액 0 아래로는 내려가지 않는다."""
        if delta == 0:
            raise ValidationError("amount must not be zero")
        balance = self._apply(
            user_id,
            delta,
            CoinTransactionKind.ADMIN_ADJUST,
            reason,
            {"actor_user_id": actor_user_id},
            None,
        )
        logger.info(
            "admin adjusted coins",
            extra={"user_id": user_id, "code": "admin_adjust"},
        )
        return balance

    def get_history(
        self, user_id: str, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> tuple[list[CoinTransaction], int, int, int]:
        """코인 변경 이력 조회. (items, total, page, page_size) 반환."""
        if page <= 0:
            page = 1
        if page_size <= 0 or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE
        items, total = self._transaction_repo.list_by_user(user_id, page, page_size)
        return items, total, page, page_size

    def _apply(
        self,
        user_id: str,
        delta: int,
        kind: CoinTransactionKind,
        reason: str,
        metadata: dict | None,
        now: datetime | None,
    ) -> int:
        now = now or self._clock()
        balance = self._user_repo.increment_coins(user_id, delta, now)
        if balance is None:
            if self._user_repo.find_by_user_id(user_id) is None:
                raise NotFound("User not found")
            raise InsufficientFunds(f"You need at least {-delta} coins.")

        # 트랜잭션 로그
        self._transaction_repo.create(
            CoinTransaction(
                user_id=user_id,
                kind=kind,
                amount=delta,
                balance_after=balance,
                reason=reason,
                metadata=metadata,
                created_at=now,
                updated_at=now,
            )
        )
        return balance


def get_user_repository(
    db: Database = Depends(get_database),
) -> UserRepositoryInterface:
    """FastAPI DI용 UserRepository 팩토리."""

    return UserRepository(db)


def get_coin_transaction_repository(
    db: Database = Depends(get_database),
) -> CoinTransactionRepositoryInterface:
    return CoinTransactionRepository(db)


def get_coin_service(
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    transaction_repo: CoinTransactionRepositoryInterface = Depends(
        get_coin_transaction_repository
    ),
) -> CoinService:
    """FastAPI DI용 CoinService 팩토리."""

    return CoinService(user_repo=user_repo, transaction_repo=transaction_repo)
