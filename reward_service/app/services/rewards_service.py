"""보상 수령 서비스.

보상 종류별 정책(중복 방지, 일일 한도, 쿨다운)을 판정하고 원장 기록과 코인 지급을 수행한다.

판정 순서:
1. 인증된 사용자가 없으면 Unauthorized
2. 중복(영상별 일 1회, 채널별 평생 1회, gift 24시간 쿨다운) 이면 AlreadyClaimed
3. 이번 수령으로 일일 누적이 한도를 넘게 되면 LimitReached
4. 원장 기록 + 코인 지급 (+ subscribe 는 구독 기록)

2~3 은 reward_windows 에 대한 조건부 upsert 한 번으로 원자적으로 처리된다.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database
from common.types.datetime import start_of_next_utc_day, utc_day_key, utc_now

from ..config import AppConfig, RewardsConfig, get_config
from ..exceptions import AlreadyClaimed, LimitReached, NotFound, ValidationError
from ..models.coin import CoinTransactionKind
from ..models.context import RequestContext
from ..models.reward import (
    ROLLING_WINDOW_KEY,
    ClaimResult,
    Reward,
    RewardPolicy,
    RewardType,
    WatchData,
)
from ..models.subscription import Subscription
from ..repositories.interfaces import (
    RewardRepositoryInterface,
    RewardWindowRepositoryInterface,
    SubscriptionRepositoryInterface,
    UserRepositoryInterface,
)
from ..repositories.reward_repository import RewardRepository
from ..repositories.reward_window_repository import RewardWindowRepository
from ..repositories.subscription_repository import SubscriptionRepository
from .coin_service import CoinService, get_coin_service, get_user_repository
from .daily_window import DailyWindow


logger = logging.getLogger(__name__)

_ALREADY_CLAIMED_MESSAGES = {
    RewardType.VIDEO: "Reward for this video already claimed today.",
    RewardType.GIFT: "Daily gift already claimed.",
    RewardType.SUBSCRIBE: "Already subscribed to this channel.",
}

_MISSING_ENTITY_MESSAGES = {
    RewardType.VIDEO: "Video ID is required",
    RewardType.SUBSCRIBE: "Channel ID is required",
}


class RewardsService:
    """보상 수령 / 시청 화면 상태 조회 비즈니스 로직."""

    def __init__(
        self,
        user_repo: UserRepositoryInterface,
        reward_repo: RewardRepositoryInterface,
        window_repo: RewardWindowRepositoryInterface,
        subscription_repo: SubscriptionRepositoryInterface,
        coin_service: CoinService,
        config: RewardsConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._user_repo = user_repo
        self._reward_repo = reward_repo
        self._window_repo = window_repo
        self._subscription_repo = subscription_repo
        self._coins = coin_service
        self._config = config
        self._clock = clock
        self._daily = DailyWindow(reward_repo)

    def claim(
        self,
        ctx: RequestContext,
        reward_type: RewardType,
        entity_id: str | None = None,
    ) -> ClaimResult:
        user = ctx.require_user()
        now = self._clock()
        policy = self._config.policy_for(reward_type)

        entity_id = (entity_id or "").strip() or None
        next_gift_at: datetime | None = None
        if reward_type is RewardType.GIFT:
            entity_id = None
            next_gift_at = self._claim_gift(user.user_id, policy, now)
        elif entity_id is None:
            raise ValidationError(_MISSING_ENTITY_MESSAGES[reward_type])
        elif reward_type is RewardType.SUBSCRIBE:
            self._claim_subscribe(user.user_id, policy, entity_id, now)
        else:
            self._reserve_daily(user.user_id, policy, entity_id, now)

        try:
            reward = self._reward_repo.append(
                Reward(
                    user_id=user.user_id,
                    type=reward_type,
                    entity_id=entity_id,
                    amount=policy.amount,
                    claimed_at=now,
                )
            )
        except Exception:
            # 원장 기록 실패 시 이번 수령으로 잡아 둔 상태를 모두 되돌리고 예외는 그대로 올린다.
            self._undo_claim(user.user_id, policy, entity_id, now)
            raise

        total_coins = self._coins.credit(
            user.user_id,
            policy.amount,
            CoinTransactionKind.REWARD,
            reason=f"{reward_type} reward",
            metadata={
                "reward_id": reward.id,
                "type": str(reward_type),
                "entity_id": entity_id,
            },
            now=now,
        )
        daily_earned = self._daily.earned_today(user.user_id, reward_type, now)

        logger.info(
            "reward claimed",
            extra={
                "user_id": user.user_id,
                "reward_type": str(reward_type),
                "entity_id": entity_id,
            },
        )
        return ClaimResult(
            type=reward_type,
            amount=policy.amount,
            total_coins=total_coins,
            daily_earned=daily_earned,
            next_gift_at=next_gift_at,
        )

    def watch_data(
        self,
        ctx: RequestContext,
        video_id: str | None,
        channel_id: str | None = None,
    ) -> WatchData:
        user = ctx.require_user()
        video_id = (video_id or "").strip()
        if not video_id:
            raise ValidationError("Video ID is required")
        channel_id = (channel_id or "").strip() or None

        now = self._clock()
        current = self._user_repo.find_by_user_id(user.user_id)
        if current is None:
            raise NotFound("User not found")

        return WatchData(
            user_id=current.user_id,
            name=current.name,
            coins=current.coins,
            is_admin=current.is_admin,
            daily_coins_earned=self._daily.earned_today(
                current.user_id, RewardType.VIDEO, now
            ),
            daily_subscribe_coins_earned=self._daily.earned_today(
                current.user_id, RewardType.SUBSCRIBE, now
            ),
            next_gift_at=self.next_gift_at(current.user_id, now),
            reward_claimed_for_video=self._daily.claimed_today(
                current.user_id, RewardType.VIDEO, video_id, now
            ),
            is_subscribed_to_channel=(
                channel_id is not None
                and self._subscription_repo.exists(current.user_id, channel_id)
            ),
        )

    def next_gift_at(self, user_id: str, now: datetime) -> datetime | None:
        """다음 gift 수령 가능 시각. 지금 수령 가능하면 None."""
        policy = self._config.gift
        window = self._window_repo.find(user_id, RewardType.GIFT, ROLLING_WINDOW_KEY)
        if window is None or window.last_claimed_at is None:
            return None
        next_at = window.last_claimed_at + timedelta(hours=policy.cooldown_hours or 24)
        if next_at <= now:
            return None
        return next_at

    def _claim_gift(self, user_id: str, policy: RewardPolicy, now: datetime) -> datetime:
        cooldown_hours = policy.cooldown_hours or 24
        window = self._window_repo.try_use_cooldown(
            user_id, RewardType.GIFT, policy.amount, cooldown_hours, now
        )
        if window is None:
            logger.debug(
                "gift claim rejected",
                extra={"user_id": user_id, "code": AlreadyClaimed.code},
            )
            raise AlreadyClaimed(_ALREADY_CLAIMED_MESSAGES[RewardType.GIFT])
        return now + timedelta(hours=cooldown_hours)

    def _claim_subscribe(
        self, user_id: str, policy: RewardPolicy, channel_id: str, now: datetime
    ) -> None:
        # 채널별 중복은 일자와 무관하므로 한도 판정보다 먼저 확인한다.
        if self._subscription_repo.exists(user_id, channel_id):
            raise AlreadyClaimed(_ALREADY_CLAIMED_MESSAGES[RewardType.SUBSCRIBE])

        self._reserve_daily(user_id, policy, channel_id, now)

        inserted = self._subscription_repo.try_insert(
            Subscription(user_id=user_id, channel_id=channel_id, created_at=now)
        )
        if not inserted:
            # 같은 채널에 대한 동시 요청에 졌다. 예약한 한도를 되돌린다.
            self._window_repo.release(
                user_id,
                RewardType.SUBSCRIBE,
                utc_day_key(now),
                channel_id,
                policy.amount,
                now,
            )
            raise AlreadyClaimed(_ALREADY_CLAIMED_MESSAGES[RewardType.SUBSCRIBE])

    def _reserve_daily(
        self, user_id: str, policy: RewardPolicy, entity_id: str, now: datetime
    ) -> None:
        window_key = utc_day_key(now)
        window = self._window_repo.try_reserve(
            user_id,
            policy.reward_type,
            window_key,
            entity_id,
            policy.amount,
            policy.daily_limit,
            # 지난 일자의 윈도우는 하루 여유를 두고 TTL 로 정리된다.
            start_of_next_utc_day(now) + timedelta(days=1),
            now,
        )
        if window is not None:
            return

        existing = self._window_repo.find(user_id, policy.reward_type, window_key)
        if existing is not None and entity_id in existing.entity_ids:
            logger.debug(
                "claim rejected",
                extra={"user_id": user_id, "entity_id": entity_id, "code": AlreadyClaimed.code},
            )
            raise AlreadyClaimed(_ALREADY_CLAIMED_MESSAGES[policy.reward_type])

        logger.debug(
            "claim rejected",
            extra={"user_id": user_id, "entity_id": entity_id, "code": LimitReached.code},
        )
        raise LimitReached(_limit_message(policy))

    def _undo_claim(
        self, user_id: str, policy: RewardPolicy, entity_id: str | None, now: datetime
    ) -> None:
        logger.warning(
            "claim rolled back",
            extra={
                "user_id": user_id,
                "reward_type": str(policy.reward_type),
                "entity_id": entity_id,
            },
        )
        if entity_id is None:
            # gift: 이번 수령 시각을 지워 즉시 재시도할 수 있게 한다.
            self._window_repo.release_cooldown(
                user_id,
                policy.reward_type,
                policy.amount,
                policy.cooldown_hours or 24,
                now,
            )
            return

        self._window_repo.release(
            user_id,
            policy.reward_type,
            utc_day_key(now),
            entity_id,
            policy.amount,
            now,
        )
        if policy.reward_type is RewardType.SUBSCRIBE:
            self._subscription_repo.delete(user_id, entity_id)


def _limit_message(policy: RewardPolicy) -> str:
    if policy.reward_type is RewardType.SUBSCRIBE:
        return f"Daily subscription limit of {policy.daily_limit} coins reached."
    return f"Daily watch limit of {policy.daily_limit} coins reached."


def get_reward_repository(
    db: Database = Depends(get_database),
) -> RewardRepositoryInterface:
    return RewardRepository(db)


def get_reward_window_repository(
    db: Database = Depends(get_database),
) -> RewardWindowRepositoryInterface:
    return RewardWindowRepository(db)


def get_subscription_repository(
    db: Database = Depends(get_database),
) -> SubscriptionRepositoryInterface:
    return SubscriptionRepository(db)


def get_rewards_service(
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    reward_repo: RewardRepositoryInterface = Depends(get_reward_repository),
    window_repo: RewardWindowRepositoryInterface = Depends(
        get_reward_window_repository
    ),
    subscription_repo: SubscriptionRepositoryInterface = Depends(
        get_subscription_repository
    ),
    coin_service: CoinService = Depends(get_coin_service),
    config: AppConfig = Depends(get_config),
) -> RewardsService:
    """FastAPI DI용 RewardsService 팩토리."""

    return RewardsService(
        user_repo=user_repo,
        reward_repo=reward_repo,
        window_repo=window_repo,
        subscription_repo=subscription_repo,
        coin_service=coin_service,
        config=config.rewards,
    )
