from __future__ import annotations

from common.types.datetime import UtcDateTime

from ...models.coin import CoinTransaction, CoinTransactionKind
from ...models.reward import ClaimResult, RewardType, WatchData
from .common import CamelModel


class ClaimRequest(CamelModel):
    """보상 수령 요청. gift 는 entity_id 가 필요 없다."""

    type: RewardType
    entity_id: str | None = None


class ClaimResponse(CamelModel):
    type: RewardType
    amount: int
    total_coins: int
    daily_earned: int
    next_gift_at: UtcDateTime | None = None

    @classmethod
    def from_domain(cls, result: ClaimResult) -> "ClaimResponse":
        return cls.model_validate(result.model_dump())


class WatchDataResponse(CamelModel):
    """영상 시청 화면 상태 응답 DTO."""

    user_id: str
    name: str
    coins: int
    is_admin: bool
    daily_coins_earned: int
    daily_subscribe_coins_earned: int
    next_gift_at: UtcDateTime | None = None
    reward_claimed_for_video: bool
    is_subscribed_to_channel: bool

    @classmethod
    def from_domain(cls, data: WatchData) -> "WatchDataResponse":
        return cls.model_validate(data.model_dump())


class CoinTransactionResponse(CamelModel):
    id: str | None
    kind: CoinTransactionKind
    amount: int
    balance_after: int
    reason: str
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, tx: CoinTransaction) -> "CoinTransactionResponse":
        return cls(
            id=tx.id,
            kind=tx.kind,
            amount=tx.amount,
            balance_after=tx.balance_after,
            reason=tx.reason,
            created_at=tx.created_at,
        )
