from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class VideoStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not VideoStatus.PENDING


class VideoSubmission(BaseModel):
    """검수 대기열에 올라가는 영상 제출 도메인 모델.

    pending 에서 approved / rejected 로 한 번만 전이되며, 이후에는 변경되지 않는다.
    """

    id: str | None = None
    url: str
    submitted_by_user_id: str
    submitted_at: datetime
    status: VideoStatus = VideoStatus.PENDING
    reviewed_by_user_id: str | None = None
    reviewed_at: datetime | None = None

    def can_transition_to(self, status: VideoStatus) -> bool:
        return self.status is VideoStatus.PENDING and status.is_terminal
