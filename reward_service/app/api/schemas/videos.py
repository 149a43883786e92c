from __future__ import annotations

from common.types.datetime import UtcDateTime

from ...models.video import VideoStatus, VideoSubmission
from .common import CamelModel


class SubmitVideoRequest(CamelModel):
    video_url: str


class VideoResponse(CamelModel):
    """영상 제출 응답 DTO."""

    id: str | None
    url: str
    submitted_by_user_id: str
    submitted_at: UtcDateTime
    status: VideoStatus
    reviewed_by_user_id: str | None = None
    reviewed_at: UtcDateTime | None = None

    @classmethod
    def from_domain(cls, video: VideoSubmission) -> "VideoResponse":
        return cls.model_validate(video.model_dump())


class SubmitVideoResponse(CamelModel):
    video: VideoResponse
    coins: int


class ListVideosResponse(CamelModel):
    total: int
    items: list[VideoResponse]
