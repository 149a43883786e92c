from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from fastapi import Depends

from common.models.user import UserProfile
from common.types.datetime import utc_now

from ..exceptions import InvalidTransition, NotFound, ValidationError
from ..models.context import RequestContext
from ..models.video import VideoStatus, VideoSubmission
from ..repositories.interfaces import (
    UserRepositoryInterface,
    VideoRepositoryInterface,
)
from .coin_service import CoinService, get_coin_service, get_user_repository
from .videos_service import get_video_repository


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QueuedVideo:
    video: VideoSubmission
    submitted_by_name: str | None


@dataclass(slots=True)
class AdminData:
    videos: list[QueuedVideo]
    users: list[UserProfile]


class ModerationService:
    """검수 대기열 조회 및 상태 전이 (관리자 전용).

    pending -> approved | rejected 만 허용하며, 종료 상태에서는 다시 전이할 수 없다.
    """

    def __init__(
        self,
        video_repo: VideoRepositoryInterface,
        user_repo: UserRepositoryInterface,
        coin_service: CoinService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._video_repo = video_repo
        self._user_repo = user_repo
        self._coins = coin_service
        self._clock = clock

    def admin_data(self, ctx: RequestContext) -> AdminData:
        ctx.require_admin()
        users = self._user_repo.list_all()
        names = {u.user_id: u.name for u in users}
        videos = [
            QueuedVideo(video=v, submitted_by_name=names.get(v.submitted_by_user_id))
            for v in self._video_repo.list_all()
        ]
        return AdminData(
            videos=videos,
            users=[UserProfile.from_user(u) for u in users],
        )

    def list_users(self, ctx: RequestContext) -> list[UserProfile]:
        ctx.require_admin()
        return [UserProfile.from_user(u) for u in self._user_repo.list_all()]

    def update_status(
        self, ctx: RequestContext, video_id: str, status: str
    ) -> VideoSubmission:
        admin = ctx.require_admin()

        try:
            target = VideoStatus(status)
        except ValueError as exc:
            raise ValidationError("status must be 'approved' or 'rejected'") from exc
        if not target.is_terminal:
            raise ValidationError("status must be 'approved' or 'rejected'")

        now = self._clock()
        updated = self._video_repo.transition(
            video_id, VideoStatus.PENDING, target, admin.user_id, now
        )
        if updated is not None:
            logger.info(
                "video status updated",
                extra={"user_id": admin.user_id, "video_id": video_id, "code": str(target)},
            )
            return updated

        existing = self._video_repo.find_by_id(video_id)
        if existing is None:
            raise NotFound("Video not found")
        raise InvalidTransition(
            f"Video is already {existing.status}; only pending videos can be reviewed."
        )

    def adjust_coins(
        self, ctx: RequestContext, user_id: str, delta: int, reason: str
    ) -> int:
        admin = ctx.require_admin()
        reason = reason.strip()
        if not reason:
            raise ValidationError("reason is required")
        return self._coins.adjust(user_id, delta, reason, actor_user_id=admin.user_id)


def get_moderation_service(
    video_repo: VideoRepositoryInterface = Depends(get_video_repository),
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    coin_service: CoinService = Depends(get_coin_service),
) -> ModerationService:
    """FastAPI DI용 ModerationService 팩토리."""

    return ModerationService(
        video_repo=video_repo,
        user_repo=user_repo,
        coin_service=coin_service,
    )
