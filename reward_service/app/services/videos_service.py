from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from fastapi import Depends
from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pymongo.database import Database

from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..config import AppConfig, SubmissionConfig, get_config
from ..exceptions import InsufficientFunds, ValidationError
from ..models.coin import CoinTransactionKind
from ..models.context import RequestContext
from ..models.video import VideoStatus, VideoSubmission
from ..repositories.interfaces import VideoRepositoryInterface
from ..repositories.video_repository import VideoRepository
from .coin_service import CoinService, get_coin_service


logger = logging.getLogger(__name__)

_http_url_adapter = TypeAdapter(HttpUrl)


def validate_video_url(raw: str) -> str:
    """절대 http(s) URL 인지 검증하고 앞뒤 공백을 제거한 원문을 반환한다."""

    value = (raw or "").strip()
    if not value:
        raise ValidationError("Invalid url")
    try:
        _http_url_adapter.validate_python(value)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid url") from exc
    return value


class VideosService:
    """영상 제출 비즈니스 로직.

    - 제출 비용을 조건부 차감으로 먼저 빼고, 이후 pending 상태로 검수 대기열에 넣는다.
    - 대기열 저장이 실패하면 차감한 비용을 환불하고 예외를 그대로 올린다.
    """

    def __init__(
        self,
        video_repo: VideoRepositoryInterface,
        coin_service: CoinService,
        config: SubmissionConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._video_repo = video_repo
        self._coins = coin_service
        self._config = config
        self._clock = clock

    def submit(self, ctx: RequestContext, video_url: str) -> tuple[VideoSubmission, int]:
        """영상 제출. (생성된 제출, 차감 후 잔액) 반환."""
        user = ctx.require_user()
        url = validate_video_url(video_url)
        now = self._clock()
        cost = self._config.cost

        balance: int | None = None
        if cost > 0:
            try:
                balance = self._coins.debit(
                    user.user_id,
                    cost,
                    CoinTransactionKind.SUBMISSION_FEE,
                    reason="video submission",
                    metadata={"url": url},
                    now=now,
                )
            except InsufficientFunds as exc:
                raise InsufficientFunds(
                    f"You need at least {cost} coins to upload a video."
                ) from exc

        try:
            video = self._video_repo.insert(
                VideoSubmission(
                    url=url,
                    submitted_by_user_id=user.user_id,
                    submitted_at=now,
                    status=VideoStatus.PENDING,
                )
            )
        except Exception:
            if cost > 0:
                self._coins.credit(
                    user.user_id,
                    cost,
                    CoinTransactionKind.REFUND,
                    reason="video submission failed",
                    metadata={"url": url},
                )
            raise

        if balance is None:
            balance = self._coins.balance(user.user_id)

        logger.info(
            "video submitted",
            extra={"user_id": user.user_id, "video_id": video.id},
        )
        return video, balance

    def list_mine(self, ctx: RequestContext) -> list[VideoSubmission]:
        user = ctx.require_user()
        return self._video_repo.list_by_user(user.user_id)


def get_video_repository(
    db: Database = Depends(get_database),
) -> VideoRepositoryInterface:
    return VideoRepository(db)


def get_videos_service(
    video_repo: VideoRepositoryInterface = Depends(get_video_repository),
    coin_service: CoinService = Depends(get_coin_service),
    config: AppConfig = Depends(get_config),
) -> VideosService:
    """FastAPI DI용 VideosService 팩토리."""

    return VideosService(
        video_repo=video_repo,
        coin_service=coin_service,
        config=config.submission,
    )
