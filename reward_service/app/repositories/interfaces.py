from __future__ import annotations

from datetime import datetime
from typing import Protocol

from common.models.user import User

from ..models.coin import CoinTransaction
from ..models.reward import Reward, RewardType, RewardWindow
from ..models.session import Session
from ..models.subscription import Subscription
from ..models.video import VideoStatus, VideoSubmission


class UserRepositoryInterface(Protocol):
    """UserRepository가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    유니크 제약(name) 위반은 구현체가 Conflict 로 변환해 올린다.
    """

    def find_by_user_id(
        self, user_id: str
    ) -> User | None:  # pragma: no cover - Protocol
        ...

    def find_by_name(self, name: str) -> User | None:  # pragma: no cover - Protocol
        ...

    def insert(self, user: User) -> User:  # pragma: no cover - Protocol
        ...

    def update_name(
        self, user_id: str, name: str, now: datetime
    ) -> User:  # pragma: no cover - Protocol
        ...

    def update_password(
        self, user_id: str, password_hash: str, now: datetime
    ) -> None:  # pragma: no cover - Protocol
        ...

    def set_admin(
        self, user_id: str, is_admin: bool, now: datetime
    ) -> User:  # pragma: no cover - Protocol
        ...

    def increment_coins(
        self, user_id: str, delta: int, now: datetime
    ) -> int | None:  # pragma: no cover - Protocol
        """잔액을 원자적으로 delta 만큼 변경하고 변경 후 잔액을 반환한다.

        delta 가 음수면 잔액이 -delta 이상일 때만 적용된다. 적용되지 않으면 None.
        """
        ...

    def list_all(self) -> list[User]:  # pragma: no cover - Protocol
        ...


class RewardRepositoryInterface(Protocol):
    """보상 원장(rewards) 접근 계약. 추가와 조회만 존재한다."""

    def append(self, reward: Reward) -> Reward:  # pragma: no cover - Protocol
        ...

    def sum_since(
        self, user_id: str, reward_type: RewardType, since: datetime
    ) -> int:  # pragma: no cover - Protocol
        ...

    def exists_since(
        self,
        user_id: str,
        reward_type: RewardType,
        entity_id: str,
        since: datetime,
    ) -> bool:  # pragma: no cover - Protocol
        ...


class RewardWindowRepositoryInterface(Protocol):
    """보상 윈도우 카운터 접근 계약.

    중복 판정과 일일 한도 판정을 하나의 조건부 갱신으로 처리해
    동시 요청이 모두 검사를 통과하는 check-then-act 경쟁을 막는다.
    """

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
    ) -> RewardWindow | None:  # pragma: no cover - Protocol
        """entity 미수령이고 earned + amount <= limit 일 때만 적용. 실패 시 None."""
        ...

    def release(
        self,
        user_id: str,
        reward_type: RewardType,
        window_key: str,
        entity_id: str,
        amount: int,
        now: datetime,
    ) -> None:  # pragma: no cover - Protocol
        ...

    def try_use_cooldown(
        self,
        user_id: str,
        reward_type: RewardType,
        amount: int,
        cooldown_hours: int,
        now: datetime,
    ) -> RewardWindow | None:  # pragma: no cover - Protocol
        """마지막 수령 후 cooldown 이 지났을 때만 갱신. 실패 시 None."""
        ...

    def release_cooldown(
        self,
        user_id: str,
        reward_type: RewardType,
        amount: int,
        cooldown_hours: int,
        claimed_at: datetime,
    ) -> None:  # pragma: no cover - Protocol
        """claimed_at 의 수령을 취소해 다시 수령 가능 상태로 돌린다."""
        ...

    def find(
        self, user_id: str, reward_type: RewardType, window_key: str
    ) -> RewardWindow | None:  # pragma: no cover - Protocol
        ...


class SubscriptionRepositoryInterface(Protocol):
    def exists(
        self, user_id: str, channel_id: str
    ) -> bool:  # pragma: no cover - Protocol
        ...

    def try_insert(
        self, subscription: Subscription
    ) -> bool:  # pragma: no cover - Protocol
        """(user_id, channel_id) 가 이미 있으면 False."""
        ...

    def delete(
        self, user_id: str, channel_id: str
    ) -> bool:  # pragma: no cover - Protocol
        ...


class VideoRepositoryInterface(Protocol):
    def insert(
        self, video: VideoSubmission
    ) -> VideoSubmission:  # pragma: no cover - Protocol
        ...

    def find_by_id(
        self, video_id: str
    ) -> VideoSubmission | None:  # pragma: no cover - Protocol
        ...

    def transition(
        self,
        video_id: str,
        from_status: VideoStatus,
        to_status: VideoStatus,
        reviewer_user_id: str,
        now: datetime,
    ) -> VideoSubmission | None:  # pragma: no cover - Protocol
        """현재 상태가 from_status 일 때만 전이한다. 적용되지 않으면 None."""
        ...

    def list_all(self) -> list[VideoSubmission]:  # pragma: no cover - Protocol
        ...

    def list_by_user(
        self, user_id: str
    ) -> list[VideoSubmission]:  # pragma: no cover - Protocol
        ...


class SessionRepositoryInterface(Protocol):
    def create(self, session: Session) -> Session:  # pragma: no cover - Protocol
        ...

    def find_by_session_id(
        self, session_id: str
    ) -> Session | None:  # pragma: no cover - Protocol
        ...

    def delete_by_session_id(
        self, session_id: str
    ) -> bool:  # pragma: no cover - Protocol
        ...

    def delete_all_by_user(
        self, user_id: str
    ) -> int:  # pragma: no cover - Protocol
        ...


class CoinTransactionRepositoryInterface(Protocol):
    def create(
        self, tx: CoinTransaction
    ) -> CoinTransaction:  # pragma: no cover - Protocol
        ...

    def list_by_user(
        self, user_id: str, page: int, page_size: int
    ) -> tuple[list[CoinTransaction], int]:  # pragma: no cover - Protocol
        ...
