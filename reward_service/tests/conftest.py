"""reward_service 테스트 공용 가짜 저장소와 픽스처.

Fake*Repository 는 repositories/interfaces.py 의 Protocol 을 만족하며,
Mongo 구현의 조건부 갱신 의미(중복/한도/쿨다운/잔액 조건)를 메모리에서 그대로 흉내 낸다.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from common.models.user import User
from reward_service.app.config import AuthConfig, RewardsConfig, SubmissionConfig
from reward_service.app.config import load_rewards_config
from reward_service.app.exceptions import Conflict, NotFound
from reward_service.app.models.coin import CoinTransaction
from reward_service.app.models.context import RequestContext
from reward_service.app.models.reward import (
    ROLLING_WINDOW_KEY,
    Reward,
    RewardType,
    RewardWindow,
)
from reward_service.app.models.session import Session
from reward_service.app.models.subscription import Subscription
from reward_service.app.models.video import VideoStatus, VideoSubmission
from reward_service.app.services.accounts_service import AccountsService
from reward_service.app.services.coin_service import CoinService
from reward_service.app.services.moderation_service import ModerationService
from reward_service.app.services.rewards_service import RewardsService
from reward_service.app.services.videos_service import VideosService


class FakeClock:
    """테스트에서 시간을 직접 움직이기 위한 호출 가능한 시계."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    def find_by_user_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    def find_by_name(self, name: str) -> User | None:
        for user in self.users.values():
            if user.name == name:
                return user
        return None

    def insert(self, user: User) -> User:
        if self.find_by_name(user.name) is not None:
            raise Conflict("This name is already in use.")
        self.users[user.user_id] = user
        return user

    def update_name(self, user_id: str, name: str, now: datetime) -> User:
        user = self._require(user_id)
        other = self.find_by_name(name)
        if other is not None and other.user_id != user_id:
            raise Conflict("This name is already in use.")
        updated = user.model_copy(update={"name": name, "updated_at": now})
        self.users[user_id] = updated
        return updated

    def update_password(self, user_id: str, password_hash: str, now: datetime) -> None:
        user = self._require(user_id)
        self.users[user_id] = user.model_copy(
            update={"password_hash": password_hash, "updated_at": now}
        )

    def set_admin(self, user_id: str, is_admin: bool, now: datetime) -> User:
        user = self._require(user_id)
        updated = user.model_copy(update={"is_admin": is_admin, "updated_at": now})
        self.users[user_id] = updated
        return updated

    def increment_coins(self, user_id: str, delta: int, now: datetime) -> int | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        if delta < 0 and user.coins < -delta:
            return None
        coins = user.coins + delta
        self.users[user_id] = user.model_copy(update={"coins": coins, "updated_at": now})
        return coins

    def list_all(self) -> list[User]:
        return sorted(self.users.values(), key=lambda u: u.created_at)

    def _require(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user


class FakeRewardRepository:
    def __init__(self) -> None:
        self.rewards: list[Reward] = []
        self.fail_next_append = False
        self._ids = itertools.count(1)

    def append(self, reward: Reward) -> Reward:
        if self.fail_next_append:
            self.fail_next_append = False
            raise RuntimeError("ledger unavailable")
        stored = reward.model_copy(update={"id": f"reward-{next(self._ids)}"})
        self.rewards.append(stored)
        return stored

    def sum_since(self, user_id: str, reward_type: RewardType, since: datetime) -> int:
        return sum(
            r.amount
            for r in self.rewards
            if r.user_id == user_id and r.type == reward_type and r.claimed_at >= since
        )

    def exists_since(
        self,
        user_id: str,
        reward_type: RewardType,
        entity_id: str,
        since: datetime,
    ) -> bool:
        return any(
            r.user_id == user_id
            and r.type == reward_type
            and r.entity_id == entity_id
            and r.claimed_at >= since
            for r in self.rewards
        )


class FakeRewardWindowRepository:
    def __init__(self) -> None:
        self.windows: dict[tuple[str, str, str], RewardWindow] = {}

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
        key = (user_id, str(reward_type), window_key)
        window = self.windows.get(key) or RewardWindow(
            user_id=user_id,
            type=reward_type,
            window_key=window_key,
            expires_at=expires_at,
        )
        if entity_id in window.entity_ids:
            return None
        if limit is not None and window.earned + amount > limit:
            return None
        updated = window.model_copy(
            update={
                "earned": window.earned + amount,
                "entity_ids": [*window.entity_ids, entity_id],
                "expires_at": expires_at,
            }
        )
        self.windows[key] = updated
        return updated

    def release(
        self,
        user_id: str,
        reward_type: RewardType,
        window_key: str,
        entity_id: str,
        amount: int,
        now: datetime,
    ) -> None:
        key = (user_id, str(reward_type), window_key)
        window = self.windows.get(key)
        if window is None or entity_id not in window.entity_ids:
            return
        self.windows[key] = window.model_copy(
            update={
                "earned": window.earned - amount,
                "entity_ids": [e for e in window.entity_ids if e != entity_id],
            }
        )

    def try_use_cooldown(
        self,
        user_id: str,
        reward_type: RewardType,
        amount: int,
        cooldown_hours: int,
        now: datetime,
    ) -> RewardWindow | None:
        key = (user_id, str(reward_type), ROLLING_WINDOW_KEY)
        cooldown = timedelta(hours=cooldown_hours)
        window = self.windows.get(key)
        if (
            window is not None
            and window.last_claimed_at is not None
            and window.last_claimed_at > now - cooldown
        ):
            return None
        updated = RewardWindow(
            user_id=user_id,
            type=reward_type,
            window_key=ROLLING_WINDOW_KEY,
            earned=(window.earned if window else 0) + amount,
            last_claimed_at=now,
            expires_at=now + cooldown,
        )
        self.windows[key] = updated
        return updated

    def release_cooldown(
        self,
        user_id: str,
        reward_type: RewardType,
        amount: int,
        cooldown_hours: int,
        claimed_at: datetime,
    ) -> None:
        key = (user_id, str(reward_type), ROLLING_WINDOW_KEY)
        window = self.windows.get(key)
        if window is None or window.last_claimed_at != claimed_at:
            return
        self.windows[key] = window.model_copy(
            update={
                "earned": window.earned - amount,
                "last_claimed_at": claimed_at - timedelta(hours=cooldown_hours),
            }
        )

    def find(
        self, user_id: str, reward_type: RewardType, window_key: str
    ) -> RewardWindow | None:
        return self.windows.get((user_id, str(reward_type), window_key))


class FakeSubscriptionRepository:
    def __init__(self) -> None:
        self.subscriptions: dict[tuple[str, str], Subscription] = {}

    def exists(self, user_id: str, channel_id: str) -> bool:
        return (user_id, channel_id) in self.subscriptions

    def try_insert(self, subscription: Subscription) -> bool:
        key = (subscription.user_id, subscription.channel_id)
        if key in self.subscriptions:
            return False
        self.subscriptions[key] = subscription
        return True

    def delete(self, user_id: str, channel_id: str) -> bool:
        return self.subscriptions.pop((user_id, channel_id), None) is not None


class FakeVideoRepository:
    def __init__(self) -> None:
        self.videos: dict[str, VideoSubmission] = {}
        self.fail_next_insert = False
        self._ids = itertools.count(1)

    def insert(self, video: VideoSubmission) -> VideoSubmission:
        if self.fail_next_insert:
            self.fail_next_insert = False
            raise RuntimeError("videos collection unavailable")
        stored = video.model_copy(update={"id": f"video-{next(self._ids)}"})
        self.videos[stored.id] = stored
        return stored

    def find_by_id(self, video_id: str) -> VideoSubmission | None:
        return self.videos.get(video_id)

    def transition(
        self,
        video_id: str,
        from_status: VideoStatus,
        to_status: VideoStatus,
        reviewer_user_id: str,
        now: datetime,
    ) -> VideoSubmission | None:
        video = self.videos.get(video_id)
        if video is None or video.status is not from_status:
            return None
        updated = video.model_copy(
            update={
                "status": to_status,
                "reviewed_by_user_id": reviewer_user_id,
                "reviewed_at": now,
            }
        )
        self.videos[video_id] = updated
        return updated

    def list_all(self) -> list[VideoSubmission]:
        return sorted(self.videos.values(), key=lambda v: v.submitted_at, reverse=True)

    def list_by_user(self, user_id: str) -> list[VideoSubmission]:
        return [v for v in self.list_all() if v.submitted_by_user_id == user_id]


class FakeSessionRepository:
    def __init__(self) -> None:
        self.sessions: dict[str, Session] = {}

    def create(self, session: Session) -> Session:
        self.sessions[session.session_id] = session
        return session

    def find_by_session_id(self, session_id: str) -> Session | None:
        return self.sessions.get(session_id)

    def delete_by_session_id(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def delete_all_by_user(self, user_id: str) -> int:
        targets = [s for s, v in self.sessions.items() if v.user_id == user_id]
        for session_id in targets:
            del self.sessions[session_id]
        return len(targets)


class FakeCoinTransactionRepository:
    def __init__(self) -> None:
        self.transactions: list[CoinTransaction] = []
        self._ids = itertools.count(1)

    def create(self, tx: CoinTransaction) -> CoinTransaction:
        stored = tx.model_copy(update={"id": f"tx-{next(self._ids)}"})
        self.transactions.append(stored)
        return stored

    def list_by_user(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[CoinTransaction], int]:
        matched = [t for t in reversed(self.transactions) if t.user_id == user_id]
        start = (page - 1) * page_size
        return matched[start : start + page_size], len(matched)


# 2024-05-10 12:00 UTC (자정까지 12시간 남음)
BASE_TIME = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@dataclass
class RewardWorld:
    """서비스 계층 테스트용 조립 결과. 모든 서비스가 같은 가짜 저장소와 시계를 공유한다."""

    clock: FakeClock
    users: FakeUserRepository = field(default_factory=FakeUserRepository)
    rewards: FakeRewardRepository = field(default_factory=FakeRewardRepository)
    windows: FakeRewardWindowRepository = field(
        default_factory=FakeRewardWindowRepository
    )
    subscriptions: FakeSubscriptionRepository = field(
        default_factory=FakeSubscriptionRepository
    )
    videos: FakeVideoRepository = field(default_factory=FakeVideoRepository)
    sessions: FakeSessionRepository = field(default_factory=FakeSessionRepository)
    transactions: FakeCoinTransactionRepository = field(
        default_factory=FakeCoinTransactionRepository
    )
    rewards_config: RewardsConfig = field(
        default_factory=lambda: load_rewards_config({})
    )
    submission_config: SubmissionConfig = field(
        default_factory=lambda: SubmissionConfig(cost=1250)
    )
    auth_config: AuthConfig = field(
        default_factory=lambda: AuthConfig(
            session_ttl_hours=24,
            cookie_secure=False,
            admin_name="admin",
            admin_password="admin-secret",
        )
    )
    _user_ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    @property
    def coin_service(self) -> CoinService:
        return CoinService(self.users, self.transactions, clock=self.clock)

    @property
    def rewards_service(self) -> RewardsService:
        return RewardsService(
            user_repo=self.users,
            reward_repo=self.rewards,
            window_repo=self.windows,
            subscription_repo=self.subscriptions,
            coin_service=self.coin_service,
            config=self.rewards_config,
            clock=self.clock,
        )

    @property
    def videos_service(self) -> VideosService:
        return VideosService(
            video_repo=self.videos,
            coin_service=self.coin_service,
            config=self.submission_config,
            clock=self.clock,
        )

    @property
    def moderation_service(self) -> ModerationService:
        return ModerationService(
            video_repo=self.videos,
            user_repo=self.users,
            coin_service=self.coin_service,
            clock=self.clock,
        )

    @property
    def accounts_service(self) -> AccountsService:
        return AccountsService(
            user_repo=self.users,
            session_repo=self.sessions,
            config=self.auth_config,
            clock=self.clock,
        )

    def add_user(
        self,
        name: str = "viewer",
        *,
        coins: int = 0,
        is_admin: bool = False,
        password_hash: str = "unused",
    ) -> User:
        now = self.clock()
        user = User(
            user_id=f"user-{next(self._user_ids)}",
            name=name,
            password_hash=password_hash,
            coins=coins,
            is_admin=is_admin,
            created_at=now,
            updated_at=now,
        )
        return self.users.insert(user)

    def context_for(self, user: User) -> RequestContext:
        """저장소의 최신 유저 상태로 요청 컨텍스트를 만든다."""
        return RequestContext(user=self.users.find_by_user_id(user.user_id))

    def coins_of(self, user: User) -> int:
        current = self.users.find_by_user_id(user.user_id)
        assert current is not None
        return current.coins


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(BASE_TIME)


@pytest.fixture
def world(clock: FakeClock, monkeypatch: pytest.MonkeyPatch) -> RewardWorld:
    for env_name in (
        "REWARD_VIDEO_AMOUNT",
        "REWARD_VIDEO_DAILY_LIMIT",
        "REWARD_GIFT_AMOUNT",
        "REWARD_GIFT_COOLDOWN_HOURS",
        "REWARD_SUBSCRIBE_AMOUNT",
        "REWARD_SUBSCRIBE_DAILY_LIMIT",
    ):
        monkeypatch.delenv(env_name, raising=False)
    return RewardWorld(clock=clock)
