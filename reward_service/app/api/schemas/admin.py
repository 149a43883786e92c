from __future__ import annotations

from common.models.user import UserProfile
from common.types.datetime import UtcDateTime

from ...services.moderation_service import AdminData, QueuedVideo
from .common import CamelModel
from .videos import VideoResponse


class AdminVideoResponse(VideoResponse):
    """검수 대기열 항목. 제출자 이름을 함께 내려준다."""

    submitted_by_name: str | None = None

    @classmethod
    def from_queued(cls, item: QueuedVideo) -> "AdminVideoResponse":
        return cls.model_validate(
            {**item.video.model_dump(), "submitted_by_name": item.submitted_by_name}
        )


class AdminUserResponse(CamelModel):
    id: str
    name: str
    coins: int
    is_admin: bool
    created_at: UtcDateTime

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "AdminUserResponse":
        return cls(
            id=profile.user_id,
            name=profile.name,
            coins=profile.coins,
            is_admin=profile.is_admin,
            created_at=profile.created_at,
        )


class AdminDataResponse(CamelModel):
    videos: list[AdminVideoResponse]
    users: list[AdminUserResponse]

    @classmethod
    def from_domain(cls, data: AdminData) -> "AdminDataResponse":
        return cls(
            videos=[AdminVideoResponse.from_queued(v) for v in data.videos],
            users=[AdminUserResponse.from_profile(u) for u in data.users],
        )


class UpdateVideoStatusRequest(CamelModel):
    video_id: str
    status: str


class AdjustCoinsRequest(CamelModel):
    """관리자 코인 조정 요청. amount 는 부호 있는 변화량이다."""

    user_id: str
    amount: int
    reason: str


class AdjustCoinsResponse(CamelModel):
    user_id: str
    coins: int
